"""HTML presentation of rendered diagrams and failures."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from mermaid_watch.core.document import CONTAINER_CLASS, ERROR_CONTAINER_CLASS, HostDocument
from mermaid_watch.schemas import FixResult

STATUS_OK = "✓ Rendered by mermaid-watch"
STATUS_WARNINGS = "⚠️ Rendered with warnings"
FIX_ACTION = "fix-and-rerender"


class GraphPresenter:
    """Builds the nodes inserted next to processed code blocks."""

    def __init__(self, document: HostDocument):
        self.document = document

    def _tag(self, name: str, css_class: str | None = None, text: str | None = None, **attrs: str) -> Tag:
        tag = self.document.soup.new_tag(name, attrs=attrs)
        if css_class:
            tag["class"] = [css_class]
        if text is not None:
            tag.string = text
        return tag

    def _svg_wrapper(self, svg: str) -> Tag:
        wrapper = self._tag("div", "mermaid-watch-svg-wrapper", style="background-color: transparent;")
        for node in list(BeautifulSoup(svg, "html.parser").contents):
            wrapper.append(node.extract())
        wrapper.append(self._tag("div", "mermaid-watch-watermark", "Rendered by mermaid-watch"))
        return wrapper

    def _suggestion_list(self, suggestions: list[str]) -> Tag:
        items = self._tag("ul", "mermaid-watch-suggestions")
        for suggestion in suggestions:
            items.append(self._tag("li", text=suggestion))
        return items

    def _fix_button(self, graph_id: str) -> Tag:
        return self._tag(
            "button",
            "mermaid-watch-fix-btn",
            "Fix & Re-render",
            **{"data-action": FIX_ACTION, "data-graph-id": graph_id},
        )

    def _error_panel(self, graph_id: str, fix_result: FixResult) -> Tag:
        panel = self._tag("div", "mermaid-watch-error-panel")
        for error in fix_result.errors:
            message = self._tag("div", "mermaid-watch-error-message", f"⚠️ {error.message}")
            if error.suggestion:
                message.append(self._tag("div", "mermaid-watch-suggestion", f"💡 {error.suggestion}"))
            panel.append(message)

        if fix_result.suggestions:
            panel.append(self._suggestion_list(fix_result.suggestions))

        if fix_result.fixed and fix_result.fixed_code:
            panel.append(self._fix_button(graph_id))
        return panel

    def build_graph_container(
        self,
        graph_id: str,
        svg: str,
        source: str,
        has_errors: bool = False,
        fix_result: FixResult | None = None,
    ) -> Tag:
        """Container holding the SVG, a status line, the source and any diagnostics."""
        container = self._tag("div", CONTAINER_CLASS, **{"data-graph-id": graph_id})
        container.append(self._svg_wrapper(svg))

        feedback = self._tag("div", "mermaid-watch-feedback-panel")
        feedback.append(self._tag("span", "mermaid-watch-status", STATUS_WARNINGS if has_errors else STATUS_OK))
        feedback.append(self._tag(
            "button",
            "mermaid-watch-toggle",
            "View Source",
            **{"aria-label": "Toggle between rendered graph and source code"},
        ))
        container.append(feedback)

        source_view = self._tag("pre", "mermaid-watch-source", style="display: none;")
        source_view.append(self._tag("code", text=source))
        container.append(source_view)

        if has_errors and fix_result:
            container.append(self._error_panel(graph_id, fix_result))

        return container

    def build_failure_notice(
        self,
        error: str,
        fix_result: FixResult | None = None,
        graph_id: str | None = None,
    ) -> Tag:
        """Inline notice shown where a diagram failed to render."""
        notice = self._tag("div", ERROR_CONTAINER_CLASS)
        notice.append(self._tag(
            "div",
            "mermaid-watch-error-message",
            f"⚠️ Failed to render Mermaid diagram: {error}",
        ))
        if fix_result and fix_result.suggestions:
            suggestions = self._tag("div", "mermaid-watch-suggestions")
            suggestions.append(self._tag("strong", text="Suggestions:"))
            suggestions.append(self._suggestion_list(fix_result.suggestions))
            notice.append(suggestions)
        if graph_id and fix_result and fix_result.fixed:
            notice.append(self._fix_button(graph_id))
        return notice

    def show_fixed_visual(self, container: Tag, svg: str) -> None:
        """Swap in a re-rendered SVG and clear the warnings."""
        wrapper = container.find("div", class_="mermaid-watch-svg-wrapper")
        if wrapper is not None:
            wrapper.replace_with(self._svg_wrapper(svg))
        else:
            container.insert(0, self._svg_wrapper(svg))

        panel = container.find("div", class_="mermaid-watch-error-panel")
        if panel is not None:
            panel["style"] = "display: none;"

        stale = container.find("div", class_="mermaid-watch-rerender-error")
        if stale is not None:
            stale.decompose()

        status = container.find("span", class_="mermaid-watch-status")
        if status is not None:
            status.string = STATUS_OK

    def show_rerender_failure(self, container: Tag, error: str) -> None:
        """Report a failed re-render inside an existing container."""
        message = f"⚠️ Failed to render Mermaid diagram: {error}"
        notice = container.find("div", class_="mermaid-watch-rerender-error")
        if notice is not None:
            notice.string = message
        else:
            container.append(self._tag("div", "mermaid-watch-rerender-error", message))
