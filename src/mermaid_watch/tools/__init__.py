"""MCP tool implementations."""

from mermaid_watch.tools.render_page import render_diagram, render_page
from mermaid_watch.tools.validate_diagram import extract_diagrams, validate_diagram

__all__ = [
    "extract_diagrams",
    "render_diagram",
    "render_page",
    "validate_diagram",
]
