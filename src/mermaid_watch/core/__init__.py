"""Core module exports."""

from mermaid_watch.core.coordinator import GraphRecord, ProcessedSet, ScanCoordinator
from mermaid_watch.core.document import HostDocument
from mermaid_watch.core.events import ChangeEvent, EventKind, InteractionKind, collect_scan_targets
from mermaid_watch.core.extractor import extract_diagram_source, looks_like_graph
from mermaid_watch.core.presenter import GraphPresenter
from mermaid_watch.core.render_adapter import RenderAdapter
from mermaid_watch.core.theme import detect_theme, is_dark_mode
from mermaid_watch.core.validator import attempt_auto_fix, detect_errors, sanitize_node_id, validate_and_fix

__all__ = [
    "ChangeEvent",
    "EventKind",
    "GraphPresenter",
    "GraphRecord",
    "HostDocument",
    "InteractionKind",
    "ProcessedSet",
    "RenderAdapter",
    "ScanCoordinator",
    "attempt_auto_fix",
    "collect_scan_targets",
    "detect_errors",
    "detect_theme",
    "extract_diagram_source",
    "is_dark_mode",
    "looks_like_graph",
    "sanitize_node_id",
    "validate_and_fix",
]
