"""Mutation-driven scanning with at-most-once dispatch per element."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass

from bs4 import Tag
from loguru import logger

from mermaid_watch.core.document import HostDocument, inside_output
from mermaid_watch.core.events import ChangeEvent, EventKind, InteractionKind, collect_scan_targets, is_code_bearing
from mermaid_watch.core.extractor import extract_diagram_source
from mermaid_watch.core.presenter import GraphPresenter
from mermaid_watch.core.render_adapter import RenderAdapter
from mermaid_watch.schemas import ElementState, GraphSummary, RenderOutcome
from mermaid_watch.utils import generate_graph_id, truncate_text

# Re-scans after start, in seconds, to catch content that loads late.
DEFAULT_RESCAN_DELAYS: tuple[float, ...] = (0.1, 0.5, 1.0, 2.0, 5.0)
DEFAULT_INTERACTION_DELAYS: dict[InteractionKind, float] = {
    InteractionKind.SCROLL: 0.5,
    InteractionKind.CLICK: 0.3,
    InteractionKind.KEYDOWN: 0.3,
}


class ProcessedSet:
    """Elements already handed to the render pipeline. Entries are never removed."""

    def __init__(self) -> None:
        # keyed by identity; holding the element keeps its id from being reused
        self._elements: dict[int, Tag] = {}

    def add(self, element: Tag) -> None:
        self._elements[id(element)] = element

    def __contains__(self, element: object) -> bool:
        return id(element) in self._elements

    def __len__(self) -> int:
        return len(self._elements)


@dataclass
class GraphRecord:
    """Bookkeeping for one dispatched element."""
    graph_id: str
    element: Tag
    source: str
    state: ElementState = ElementState.DISPATCHED
    outcome: RenderOutcome | None = None
    container: Tag | None = None  # graph container or failure notice

    def summary(self) -> GraphSummary:
        return GraphSummary(
            graph_id=self.graph_id,
            state=self.state,
            source=self.source,
            error=self.outcome.error if self.outcome else None,
            fix_result=self.outcome.fix_result if self.outcome else None,
        )


class ScanCoordinator:
    """Finds diagram code blocks in a document and renders each exactly once.

    Triggers (start, mutations, timers, visibility, interaction) are queued
    as ChangeEvents. A single scheduler loop coalesces bursts into one scan.
    Elements enter the processed set synchronously during the scan, before
    their render task is created, so overlapping scans cannot dispatch the
    same element twice.
    """

    def __init__(
        self,
        document: HostDocument,
        adapter: RenderAdapter,
        presenter: GraphPresenter | None = None,
        processed: ProcessedSet | None = None,
        coalesce_delay: float = 0.1,
        rescan_delays: tuple[float, ...] = DEFAULT_RESCAN_DELAYS,
        visibility_delay: float = 0.5,
        interaction_delays: dict[InteractionKind, float] | None = None,
    ):
        self.document = document
        self.adapter = adapter
        self.presenter = presenter or GraphPresenter(document)
        self.processed = processed if processed is not None else ProcessedSet()
        self.coalesce_delay = coalesce_delay
        self.rescan_delays = rescan_delays
        self.visibility_delay = visibility_delay
        self.interaction_delays = interaction_delays or dict(DEFAULT_INTERACTION_DELAYS)

        self.records: dict[str, GraphRecord] = {}
        self.scan_count = 0
        self._by_element: dict[int, str] = {}
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._renders: set[asyncio.Task] = set()
        self._timers: list[asyncio.TimerHandle] = []
        self._debounced: dict[str, asyncio.TimerHandle] = {}
        self._loop_task: asyncio.Task | None = None
        self._unsubscribe = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    # -- lifecycle --

    async def start(self) -> None:
        """Scan once now, then follow mutations and the delayed re-scans."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._unsubscribe = self.document.subscribe(self.notify_mutation)
        self._loop_task = loop.create_task(self._run())

        self.dispatch(collect_scan_targets([ChangeEvent(EventKind.LOAD)], self.document))
        for delay in self.rescan_delays:
            self._timers.append(loop.call_later(delay, self._enqueue, ChangeEvent(EventKind.TIMER)))
        logger.info("Scan coordinator started")

    async def stop(self) -> None:
        """Stop observing. In-flight renders are left to finish."""
        for handle in self._timers + list(self._debounced.values()):
            handle.cancel()
        self._timers.clear()
        self._debounced.clear()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._loop_task is not None:
            self._loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._loop_task
            self._loop_task = None
        logger.info("Scan coordinator stopped")

    # -- triggers --

    def _enqueue(self, event: ChangeEvent) -> None:
        self._queue.put_nowait(event)

    def _debounce(self, key: str, delay: float, event: ChangeEvent) -> None:
        previous = self._debounced.pop(key, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        self._debounced[key] = loop.call_later(delay, self._enqueue, event)

    def notify_mutation(self, nodes: list[Tag]) -> None:
        """Added nodes reported by the document; only code blocks matter."""
        relevant = [node for node in nodes if is_code_bearing(node)]
        if relevant:
            self._enqueue(ChangeEvent(EventKind.MUTATION, relevant))

    def notify_visibility(self, visible: bool) -> None:
        if visible:
            self._debounce("visibility", self.visibility_delay, ChangeEvent(EventKind.VISIBILITY))

    def notify_interaction(self, kind: InteractionKind) -> None:
        delay = self.interaction_delays.get(kind, 0.3)
        self._debounce(kind.value, delay, ChangeEvent(EventKind.INTERACTION))

    def request_scan(self) -> None:
        logger.info("Manual scan triggered")
        self._enqueue(ChangeEvent(EventKind.MANUAL))

    # -- scheduling --

    async def _run(self) -> None:
        while True:
            batch = [await self._queue.get()]
            try:
                if self.coalesce_delay > 0:
                    await asyncio.sleep(self.coalesce_delay)
                while not self._queue.empty():
                    batch.append(self._queue.get_nowait())
                self.dispatch(collect_scan_targets(batch, self.document))
            except Exception as e:
                logger.exception(f"Scan failed: {e}")
            finally:
                for _ in batch:
                    self._queue.task_done()

    def scan(self, root: Tag | None = None) -> list[asyncio.Task]:
        """Scan all code blocks under root (default: the whole body) now."""
        return self.dispatch(self.document.code_blocks(root))

    def dispatch(self, elements: list[Tag]) -> list[asyncio.Task]:
        """Run the extractor over elements and start renders for new diagrams.

        Must be called from a running event loop. Returns the render tasks
        that were started.
        """
        self.scan_count += 1
        tasks = []
        for element in elements:
            if element in self.processed or self.document.is_processed(element):
                continue
            if inside_output(element):
                continue
            source = extract_diagram_source(element)
            if source is None:
                continue
            tasks.append(self._dispatch_element(element, source))

        if tasks:
            logger.info(f"Found {len(tasks)} Mermaid diagram(s) to process")
        return tasks

    def _dispatch_element(self, element: Tag, source: str) -> asyncio.Task:
        graph_id = generate_graph_id()
        self.processed.add(element)
        self.document.mark_processed(element)
        record = GraphRecord(graph_id=graph_id, element=element, source=source)
        self.records[graph_id] = record
        self._by_element[id(element)] = graph_id
        logger.debug(f"Found Mermaid code ({len(source)} chars): {truncate_text(source)!r}")

        task = asyncio.get_running_loop().create_task(self._process(record))
        self._renders.add(task)
        task.add_done_callback(self._renders.discard)
        return task

    async def _process(self, record: GraphRecord) -> None:
        try:
            outcome = await self.adapter.render(record.source, record.graph_id)
        except Exception as e:
            logger.exception(f"Error processing {record.graph_id}: {e}")
            outcome = RenderOutcome(success=False, error=str(e) or type(e).__name__)
        record.outcome = outcome

        if outcome.success:
            has_errors = outcome.fix_result is not None and outcome.fix_result.has_unresolved
            node = self.presenter.build_graph_container(
                record.graph_id, outcome.visual, record.source, has_errors, outcome.fix_result
            )
            record.state = ElementState.RENDERED
        else:
            node = self.presenter.build_failure_notice(outcome.error, outcome.fix_result, record.graph_id)
            record.state = ElementState.FAILED

        if self.document.insert_after(record.element, node):
            record.container = node

    # -- queries --

    def state_of(self, element: Tag) -> ElementState:
        graph_id = self._by_element.get(id(element))
        if graph_id is not None and element in self.processed:
            return self.records[graph_id].state
        if self.document.is_processed(element):
            return ElementState.DISPATCHED
        return ElementState.UNSEEN

    def summaries(self) -> list[GraphSummary]:
        return [record.summary() for record in self.records.values()]

    async def drain(self) -> None:
        """Wait for every in-flight render to complete."""
        while self._renders:
            await asyncio.gather(*list(self._renders), return_exceptions=True)

    async def flush(self) -> None:
        """Wait until the scheduler loop has handled every queued event."""
        if self.running:
            await self._queue.join()

    async def wait_idle(self) -> None:
        """Wait until no events are queued and no renders are in flight."""
        while True:
            await self.flush()
            await self.drain()
            if (self._queue.empty() or not self.running) and not self._renders:
                return

    # -- manual repair --

    async def fix_and_rerender(self, graph_id: str) -> RenderOutcome | None:
        """Render the repaired source for graph_id under a fresh container id.

        Returns None when there is nothing to repair.
        """
        record = self.records.get(graph_id)
        if record is None or record.outcome is None or record.outcome.fix_result is None:
            return None
        fix_result = record.outcome.fix_result
        if not fix_result.fixed or not fix_result.fixed_code:
            return None

        logger.info(f"Re-rendering {graph_id} with repaired source")
        outcome = await self.adapter.render(fix_result.fixed_code, f"{graph_id}-fixed")
        if record.container is None:
            return outcome

        if not outcome.success:
            if record.state == ElementState.RENDERED:
                self.presenter.show_rerender_failure(record.container, outcome.error)
            else:
                notice = self.presenter.build_failure_notice(outcome.error, fix_result, graph_id)
                record.container.replace_with(notice)
                record.container = notice
            return outcome

        record.outcome = outcome
        if record.state == ElementState.RENDERED:
            self.presenter.show_fixed_visual(record.container, outcome.visual)
        else:
            container = self.presenter.build_graph_container(graph_id, outcome.visual, fix_result.fixed_code)
            record.container.replace_with(container)
            self.document.notify_added([container])
            record.container = container
            record.state = ElementState.RENDERED
        return outcome
