"""Schemas for page scanning state and results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from mermaid_watch.schemas.diagram import FixResult


class ElementState(str, Enum):
    """Lifecycle of a candidate element. Only UNSEEN may be (re)scanned."""
    UNSEEN = "unseen"
    DISPATCHED = "dispatched"
    RENDERED = "rendered"
    FAILED = "failed"


class ExtractedDiagram(BaseModel):
    """A code block recognised as diagram source."""
    index: int  # position among the page's code blocks
    source: str
    language: str | None = None


class GraphSummary(BaseModel):
    """Per-element summary of a processed diagram."""
    graph_id: str
    state: ElementState
    source: str
    error: str | None = None
    fix_result: FixResult | None = None


class PageResult(BaseModel):
    """Result of processing an entire page."""
    html: str
    code_blocks: int = 0
    rendered: int = 0
    failed: int = 0
    graphs: list[GraphSummary] = Field(default_factory=list)
