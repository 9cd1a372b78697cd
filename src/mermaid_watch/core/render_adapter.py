"""Validate, repair and render diagram source through a renderer."""

from __future__ import annotations

import asyncio

from loguru import logger

from mermaid_watch.core.document import HostDocument
from mermaid_watch.core.theme import detect_theme
from mermaid_watch.core.validator import validate_and_fix
from mermaid_watch.renderers import DiagramRenderer, get_renderer
from mermaid_watch.schemas import RenderOutcome, ThemeConfig


class RenderAdapter:
    """Single entry point from the scan pipeline to a rendering engine.

    The renderer is initialized lazily, once, with a theme computed from
    the host document the first time a render is requested.
    """

    def __init__(
        self,
        document: HostDocument,
        renderer: DiagramRenderer | None = None,
    ):
        self.document = document
        self.renderer = renderer or get_renderer()
        self.theme: ThemeConfig | None = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> ThemeConfig:
        """Initialize the renderer if that has not happened yet."""
        if self._initialized:
            return self.theme
        async with self._init_lock:
            if not self._initialized:
                self.theme = detect_theme(self.document)
                self.renderer.initialize(self.theme)
                self._initialized = True
                logger.info(f"Renderer {self.renderer.provider_name} initialized with theme {self.theme.theme}")
        return self.theme

    async def render(self, source: str, container_id: str) -> RenderOutcome:
        """Render a diagram, using the repaired source when there is one.

        Args:
            source: Diagram source as extracted from the page
            container_id: Unique id for this render attempt

        Returns:
            RenderOutcome; never raises for renderer failures
        """
        await self.initialize()

        fix_result = validate_and_fix(source)
        code_to_render = fix_result.fixed_code if fix_result.fixed else source

        self.document.clear_scratch(container_id)
        self.document.create_scratch(container_id)
        try:
            svg = await self.renderer.render(container_id, code_to_render)
        except Exception as e:
            logger.warning(f"Render {container_id} failed: {e}")
            return RenderOutcome(
                success=False,
                error=str(e) or "Failed to render Mermaid diagram",
                fix_result=fix_result,
            )
        finally:
            self.document.clear_scratch(container_id)

        return RenderOutcome(
            success=True,
            visual=svg,
            fix_result=fix_result if fix_result.had_errors else None,
        )
