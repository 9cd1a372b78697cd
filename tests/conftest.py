"""Shared fixtures for mermaid-watch tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from mermaid_watch.core import HostDocument, RenderAdapter, ScanCoordinator
from mermaid_watch.renderers import DiagramRenderer, RenderError
from mermaid_watch.schemas import ThemeConfig

FLOWCHART = "graph TD\n  A[Start] --> B[End]"
SEQUENCE = "sequenceDiagram\n  Alice->>Bob: Hello"

PAGE = f"""<html><body>
<p>Intro</p>
<pre><code class="language-mermaid">{FLOWCHART}</code></pre>
<pre><code class="language-python">def add(a, b):
    return a + b</code></pre>
<pre><code>{SEQUENCE}</code></pre>
</body></html>"""


class FakeRenderer(DiagramRenderer):
    """In-memory renderer recording every call.

    Args:
        fail_with: Error message to raise with, if any
        fail_times: Raise only for the first N calls (default: always)
        gate: Renders wait on this event before returning
        document: When given, records whether the scratch node existed
    """

    def __init__(
        self,
        fail_with: str | None = None,
        fail_times: int | None = None,
        gate: asyncio.Event | None = None,
        document: HostDocument | None = None,
    ):
        super().__init__()
        self.fail_with = fail_with
        self.fail_times = fail_times
        self.gate = gate
        self.document = document
        self.calls: list[tuple[str, str]] = []
        self.init_calls = 0
        self.scratch_seen: list[bool] = []
        self.failures = 0

    @property
    def provider_name(self) -> str:
        return "fake"

    def initialize(self, theme: ThemeConfig) -> None:
        super().initialize(theme)
        self.init_calls += 1

    async def render(self, container_id: str, source: str) -> str:
        self.calls.append((container_id, source))
        if self.document is not None:
            self.scratch_seen.append(bool(self.document.find_by_id(container_id)))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with and (self.fail_times is None or self.failures < self.fail_times):
            self.failures += 1
            raise RenderError(self.fail_with)
        return f'<svg id="{container_id}"><g class="node"></g></svg>'


@pytest.fixture
def page_document() -> HostDocument:
    """Provide a page with two diagrams and one ordinary code block."""
    return HostDocument.from_html(PAGE)


@pytest.fixture
def empty_document() -> HostDocument:
    """Provide a page with no code blocks."""
    return HostDocument.from_html("<html><body><p>Nothing here</p></body></html>")


@pytest.fixture
def renderer() -> FakeRenderer:
    """Provide a renderer that always succeeds."""
    return FakeRenderer()


@pytest.fixture
def make_coordinator() -> Callable[..., ScanCoordinator]:
    """Provide a factory building a fast coordinator around a document."""

    def factory(document: HostDocument, renderer: DiagramRenderer, **kwargs) -> ScanCoordinator:
        kwargs.setdefault("coalesce_delay", 0)
        kwargs.setdefault("rescan_delays", ())
        adapter = RenderAdapter(document, renderer=renderer)
        return ScanCoordinator(document, adapter, **kwargs)

    return factory
