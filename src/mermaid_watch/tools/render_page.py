"""render_diagram and render_page MCP tool implementations."""

from __future__ import annotations

from loguru import logger

from mermaid_watch.core import HostDocument, RenderAdapter, ScanCoordinator
from mermaid_watch.renderers import DiagramRenderer
from mermaid_watch.schemas import ElementState, PageResult
from mermaid_watch.utils import generate_graph_id, system_prefers_dark


async def render_diagram(
    source: str,
    dark_mode: bool | None = None,
    renderer: DiagramRenderer | None = None,
) -> dict:
    """Validate, repair and render a single Mermaid diagram.

    Args:
        source: Mermaid diagram source
        dark_mode: Force the dark or light theme (default: light)
        renderer: Renderer to use instead of the configured provider

    Returns:
        RenderOutcome with SVG on success or the error message on failure
    """
    prefers_dark = dark_mode if dark_mode is not None else system_prefers_dark()
    document = HostDocument.from_html("<html><body></body></html>", prefers_dark=prefers_dark)
    adapter = RenderAdapter(document, renderer=renderer)

    outcome = await adapter.render(source, generate_graph_id())
    logger.info(f"Rendered diagram: success={outcome.success}")
    return outcome.model_dump(mode="json")


async def render_page(
    html: str,
    dark_mode: bool | None = None,
    renderer: DiagramRenderer | None = None,
) -> dict:
    """Render every Mermaid code block in an HTML page.

    Args:
        html: Page markup
        dark_mode: System-level dark preference; page markers are still honoured
        renderer: Renderer to use instead of the configured provider

    Returns:
        PageResult with the annotated HTML and per-diagram summaries
    """
    logger.info(f"Processing page ({len(html)} chars)")

    prefers_dark = dark_mode if dark_mode is not None else system_prefers_dark()
    document = HostDocument.from_html(html, prefers_dark=prefers_dark)
    adapter = RenderAdapter(document, renderer=renderer)
    coordinator = ScanCoordinator(document, adapter, rescan_delays=())

    try:
        code_blocks = len(document.code_blocks())
        coordinator.scan()
        await coordinator.drain()

        summaries = coordinator.summaries()
        result = PageResult(
            html=document.to_html(),
            code_blocks=code_blocks,
            rendered=sum(1 for s in summaries if s.state == ElementState.RENDERED),
            failed=sum(1 for s in summaries if s.state == ElementState.FAILED),
            graphs=summaries,
        )
        logger.info(f"Page processed: {result.rendered} rendered, {result.failed} failed")
        return result.model_dump(mode="json")

    except Exception as e:
        logger.error(f"Page processing failed: {e}")
        raise
