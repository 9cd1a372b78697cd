"""Host document wrapper around a BeautifulSoup tree."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from bs4 import BeautifulSoup, Tag
from loguru import logger

PROCESSED_ATTR = "data-mermaid-watch-processed"
CONTAINER_CLASS = "mermaid-watch-container"
ERROR_CONTAINER_CLASS = "mermaid-watch-error-container"
OUTPUT_CLASSES = frozenset({CONTAINER_CLASS, ERROR_CONTAINER_CLASS})

MutationListener = Callable[[list[Tag]], None]


def element_classes(element: Tag) -> list[str]:
    value = element.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def inside_output(element: Tag) -> bool:
    """Whether element is, or sits inside, a container we produced."""
    node: Tag | None = element
    while node is not None:
        if OUTPUT_CLASSES.intersection(element_classes(node)):
            return True
        node = node.parent
    return False


class HostDocument:
    """The page being watched.

    Mutations made through this wrapper are reported to subscribers with the
    list of added element nodes, the way a DOM mutation observer reports
    added nodes. Code that edits the soup directly must call
    ``notify_added`` itself.
    """

    def __init__(self, soup: BeautifulSoup, prefers_dark: bool | None = None):
        self.soup = soup
        self.prefers_dark = prefers_dark
        self._listeners: list[MutationListener] = []

    @classmethod
    def from_html(cls, html: str, prefers_dark: bool | None = None) -> HostDocument:
        return cls(BeautifulSoup(html, "html.parser"), prefers_dark=prefers_dark)

    @property
    def root(self) -> Tag:
        """The <html> element, or the soup itself for fragments."""
        html = self.soup.find("html")
        return html if html is not None else self.soup

    @property
    def body(self) -> Tag:
        body = self.soup.find("body")
        return body if body is not None else self.soup

    def to_html(self) -> str:
        return str(self.soup)

    # -- observation --

    def subscribe(self, listener: MutationListener) -> Callable[[], None]:
        """Register a mutation listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify_added(self, nodes: Iterable[Tag]) -> None:
        added = [node for node in nodes if isinstance(node, Tag)]
        if not added:
            return
        for listener in list(self._listeners):
            listener(added)

    # -- mutation --

    def parse_fragment(self, html: str) -> list[Tag]:
        fragment = BeautifulSoup(html, "html.parser")
        return [node for node in list(fragment.contents) if isinstance(node, Tag)]

    def append_html(self, html: str, parent: Tag | None = None) -> list[Tag]:
        """Append parsed markup to parent (default body) and notify listeners."""
        target = parent if parent is not None else self.body
        added = []
        for node in self.parse_fragment(html):
            target.append(node.extract())
            added.append(node)
        self.notify_added(added)
        return added

    def insert_after(self, element: Tag, node: Tag) -> bool:
        """Insert node as the next sibling of element.

        Returns False without touching the tree when element has been
        detached from the document.
        """
        if not self.contains(element):
            logger.debug("Skipping insertion after detached element")
            return False
        element.insert_after(node)
        self.notify_added([node])
        return True

    # -- queries --

    def code_blocks(self, root: Tag | None = None) -> list[Tag]:
        """All <pre> elements under root (inclusive), in document order."""
        scope = root if root is not None else self.body
        blocks = [scope] if scope.name == "pre" else []
        blocks.extend(scope.find_all("pre"))
        return blocks

    def is_processed(self, element: Tag) -> bool:
        return element.has_attr(PROCESSED_ATTR)

    def mark_processed(self, element: Tag) -> None:
        element[PROCESSED_ATTR] = "true"

    def contains(self, element: Tag) -> bool:
        """Whether element is still attached to this document."""
        node = element
        while node.parent is not None:
            node = node.parent
        return node is self.soup

    def find_by_id(self, element_id: str) -> list[Tag]:
        return self.soup.find_all(id=element_id)

    # -- scratch space --

    def create_scratch(self, container_id: str) -> Tag:
        """Hidden node a renderer may draw into."""
        scratch = self.soup.new_tag(
            "div",
            attrs={
                "id": container_id,
                "style": "visibility: hidden; position: absolute; left: -9999px; top: -9999px;",
            },
        )
        self.body.append(scratch)
        return scratch

    def clear_scratch(self, container_id: str) -> int:
        """Remove scratch and orphaned render nodes for container_id."""
        orphans = self.find_by_id(container_id) + self.find_by_id(f"d{container_id}")
        for orphan in orphans:
            orphan.decompose()
        return len(orphans)
