"""Decide whether a code block holds Mermaid source."""

from __future__ import annotations

import re

from bs4 import Tag

from mermaid_watch.core.document import element_classes, inside_output

MIN_SOURCE_LENGTH = 10
DIAGRAM_LANGUAGE = "mermaid"

DIAGRAM_KEYWORDS: tuple[str, ...] = (
    "flowchart",
    "graph",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "gantt",
    "pie",
    "erDiagram",
    "journey",
    "gitgraph",
    "mindmap",
    "timeline",
    "quadrantChart",
    "requirement",
    "C4Context",
    "C4Container",
    "C4Component",
    "C4Dynamic",
    "C4Deployment",
)

_KEYWORDS = "|".join(DIAGRAM_KEYWORDS)
_START_PATTERN = re.compile(rf"^({_KEYWORDS})\s")
_FENCED_PATTERN = re.compile(r"```mermaid\s*\n?([\s\S]*?)```")
_GRAPH_PATTERNS = (
    re.compile(rf"^({_KEYWORDS})", re.MULTILINE),
    re.compile(r"->|-->"),
    re.compile(r"\[.*\]|\(.*\)|\{.*\}"),
)
_CONNECTORS = ("-->", "--", "->>", "participant")


def looks_like_graph(text: str) -> bool:
    """Check if text content looks like a graph structure."""
    return any(pattern.search(text) for pattern in _GRAPH_PATTERNS)


def has_language_tag(code_element: Tag) -> bool:
    """Whether a code element is explicitly tagged as Mermaid."""
    classes = " ".join(element_classes(code_element))
    return (
        DIAGRAM_LANGUAGE in classes
        or code_element.get("data-language") == DIAGRAM_LANGUAGE
        or code_element.get("lang") == DIAGRAM_LANGUAGE
    )


def is_rendered(element: Tag) -> bool:
    """Whether element already holds, or belongs to, rendered output."""
    return element.select_one("svg.mermaid") is not None or inside_output(element)


def resolve_code(element: Tag) -> tuple[Tag | None, str]:
    """Find the code element hosting the text, and the stripped text."""
    if element.name == "code":
        return element, element.get_text().strip()
    code_element = element.find("code")
    if code_element is not None:
        return code_element, code_element.get_text().strip()
    return None, element.get_text().strip()


def extract_diagram_source(element: Tag) -> str | None:
    """Extract Mermaid source from a code block.

    Rules are tried in order and the first match wins: an explicit language
    tag plus a graph-like shape, a leading diagram keyword, a fenced
    ```mermaid block inside markdown, and finally a graph-like shape with
    connectors inside a code element.

    Args:
        element: A <pre>, <code> or other element from the host document

    Returns:
        The diagram source, or None when the element does not hold one
    """
    if is_rendered(element):
        return None

    code_element, text = resolve_code(element)
    if len(text) < MIN_SOURCE_LENGTH:
        return None

    if code_element is not None and has_language_tag(code_element) and looks_like_graph(text):
        return text

    if _START_PATTERN.match(text):
        return text

    fenced = _FENCED_PATTERN.search(text)
    if fenced:
        return fenced.group(1).strip()

    if code_element is not None and looks_like_graph(text):
        if any(connector in text for connector in _CONNECTORS):
            return text

    return None
