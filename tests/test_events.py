"""Tests for mapping batches of change events to scan targets."""

from mermaid_watch.core import ChangeEvent, EventKind, HostDocument, collect_scan_targets
from mermaid_watch.core.events import is_code_bearing


class TestCollectScanTargets:
    """Test suite for collect_scan_targets."""

    def test_empty_batch(self, page_document: HostDocument) -> None:
        """No events means nothing to scan."""
        # Act / Assert
        assert collect_scan_targets([], page_document) == []

    def test_non_mutation_event_scans_everything(self, page_document: HostDocument) -> None:
        """Timer, visibility and similar triggers ask for a full scan."""
        # Arrange
        events = [ChangeEvent(EventKind.MUTATION, []), ChangeEvent(EventKind.TIMER)]

        # Act
        targets = collect_scan_targets(events, page_document)

        # Assert
        assert targets == page_document.code_blocks()

    def test_mutations_only_scan_added_blocks(self, page_document: HostDocument) -> None:
        """Added subtrees contribute their own code blocks, in document order."""
        # Arrange
        second = page_document.append_html("<div><pre>graph LR\n  X --> Y</pre></div>")[0]
        first = page_document.append_html("<pre>graph LR\n  P --> Q</pre>")[0]

        # Act
        targets = collect_scan_targets(
            [ChangeEvent(EventKind.MUTATION, [first]), ChangeEvent(EventKind.MUTATION, [second])],
            page_document,
        )

        # Assert
        assert targets == [second.find("pre"), first]

    def test_text_added_inside_existing_block(self, page_document: HostDocument) -> None:
        """A code node changing inside a <pre> rescans the enclosing block."""
        # Arrange
        pre = page_document.code_blocks()[2]
        code = pre.find("code")

        # Act
        targets = collect_scan_targets([ChangeEvent(EventKind.MUTATION, [code])], page_document)

        # Assert
        assert targets == [pre]

    def test_detached_nodes_are_ignored(self, page_document: HostDocument) -> None:
        """Blocks removed before the batch is handled are not scanned."""
        # Arrange
        added = page_document.append_html("<pre>graph LR\n  A --> B</pre>")[0]
        added.extract()

        # Act
        targets = collect_scan_targets([ChangeEvent(EventKind.MUTATION, [added])], page_document)

        # Assert
        assert targets == []

    def test_duplicates_are_removed(self, page_document: HostDocument) -> None:
        """The same block reported twice is scanned once."""
        # Arrange
        pre = page_document.code_blocks()[0]
        event = ChangeEvent(EventKind.MUTATION, [pre])

        # Act
        targets = collect_scan_targets([event, event], page_document)

        # Assert
        assert targets == [pre]


def test_is_code_bearing(page_document: HostDocument) -> None:
    """Only nodes that are or contain code blocks are relevant."""
    # Arrange
    paragraph = page_document.soup.find("p")
    body = page_document.body

    # Act / Assert
    assert not is_code_bearing(paragraph)
    assert is_code_bearing(body)
    assert is_code_bearing(page_document.code_blocks()[0])
