"""Change events that trigger scans, and how a batch maps to scan targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from bs4 import Tag

from mermaid_watch.core.document import HostDocument

CODE_TAGS = ("pre", "code")


class EventKind(str, Enum):
    """Why a scan was requested."""
    LOAD = "load"
    MUTATION = "mutation"
    TIMER = "timer"
    VISIBILITY = "visibility"
    INTERACTION = "interaction"
    MANUAL = "manual"


class InteractionKind(str, Enum):
    SCROLL = "scroll"
    CLICK = "click"
    KEYDOWN = "keydown"


@dataclass
class ChangeEvent:
    """A single trigger; mutation events carry the added nodes."""
    kind: EventKind
    nodes: list[Tag] = field(default_factory=list)


def is_code_bearing(node: Tag) -> bool:
    """Whether an added node is, or contains, a code block."""
    return node.name in CODE_TAGS or node.find(CODE_TAGS) is not None


def collect_scan_targets(events: list[ChangeEvent], document: HostDocument) -> list[Tag]:
    """Map a coalesced batch of events to the code blocks to scan.

    Any non-mutation event asks for a full scan. Mutations only contribute
    the code blocks inside the added nodes, plus the enclosing block when
    content was added inside an existing one (streamed text). Nodes that
    are no longer attached are ignored. The result is in document order
    with duplicates removed.

    Args:
        events: The batch, in arrival order
        document: The host document

    Returns:
        Code block elements to hand to the extractor
    """
    if not events:
        return []
    all_blocks = document.code_blocks()
    if any(event.kind != EventKind.MUTATION for event in events):
        return all_blocks

    wanted: set[int] = set()
    for event in events:
        for node in event.nodes:
            if not is_code_bearing(node):
                continue
            wanted.update(id(block) for block in document.code_blocks(node))
            enclosing = node.find_parent("pre")
            if enclosing is not None:
                wanted.add(id(enclosing))

    return [block for block in all_blocks if id(block) in wanted]
