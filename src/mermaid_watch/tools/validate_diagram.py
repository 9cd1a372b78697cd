"""validate_diagram and extract_diagrams MCP tool implementations."""

from __future__ import annotations

from loguru import logger

from mermaid_watch.core import HostDocument, extract_diagram_source, validate_and_fix
from mermaid_watch.core.extractor import resolve_code
from mermaid_watch.schemas import ExtractedDiagram


async def validate_diagram(source: str) -> dict:
    """Check Mermaid source for known defects and repair what is fixable.

    Args:
        source: Mermaid diagram source

    Returns:
        FixResult with fixed flag, fixed code, remaining errors and suggestions
    """
    result = validate_and_fix(source)
    logger.info(f"Validated diagram: fixed={result.fixed}, {len(result.errors)} error(s) remaining")
    return result.model_dump(mode="json")


async def extract_diagrams(html: str) -> dict:
    """List the code blocks in an HTML page that hold Mermaid source.

    Args:
        html: Page or fragment markup

    Returns:
        Number of code blocks and the extracted diagrams
    """
    document = HostDocument.from_html(html)
    blocks = document.code_blocks()
    diagrams = []

    for index, block in enumerate(blocks):
        source = extract_diagram_source(block)
        if source is None:
            continue
        code_element, _ = resolve_code(block)
        language = None
        if code_element is not None:
            language = code_element.get("data-language") or code_element.get("lang")
        diagrams.append(ExtractedDiagram(index=index, source=source, language=language))

    logger.info(f"Extracted {len(diagrams)} diagram(s) from {len(blocks)} code block(s)")
    return {
        "code_blocks": len(blocks),
        "diagrams": [d.model_dump() for d in diagrams],
    }
