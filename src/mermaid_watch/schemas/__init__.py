"""Pydantic schemas for mermaid-watch."""

from mermaid_watch.schemas.diagram import (
    DiagramError,
    DiagramErrorKind,
    FixResult,
    RenderOutcome,
)
from mermaid_watch.schemas.scan import ElementState, ExtractedDiagram, GraphSummary, PageResult
from mermaid_watch.schemas.theme import DARK_THEME_VARIABLES, ThemeConfig

__all__ = [
    "DARK_THEME_VARIABLES",
    "DiagramError",
    "DiagramErrorKind",
    "ElementState",
    "ExtractedDiagram",
    "FixResult",
    "GraphSummary",
    "PageResult",
    "RenderOutcome",
    "ThemeConfig",
]
