"""Abstract diagram renderer with provider factory."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from loguru import logger

from mermaid_watch.schemas import ThemeConfig


class RenderError(Exception):
    """Raised by a renderer when a diagram cannot be rendered."""


class DiagramRenderer(ABC):
    """Abstract base class for rendering engines."""

    def __init__(self) -> None:
        self.theme: ThemeConfig | None = None

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    def initialize(self, theme: ThemeConfig) -> None:
        """One-time setup with the page theme."""
        self.theme = theme

    @abstractmethod
    async def render(self, container_id: str, source: str) -> str:
        """Render diagram source to SVG markup.

        Args:
            container_id: Unique id for this render; used as the SVG id
            source: Mermaid source text

        Returns:
            SVG markup

        Raises:
            RenderError: If the engine rejects the source or is unreachable
        """


def get_renderer(provider: str | None = None) -> DiagramRenderer:
    """Factory function to get the configured renderer.

    Args:
        provider: Provider name - ink or cli. Defaults to env RENDERER_PROVIDER.

    Returns:
        Renderer instance (not yet initialized).
    """
    provider = provider or os.getenv("RENDERER_PROVIDER", "ink")
    provider_map: dict[str, type[DiagramRenderer]] = {}

    # Lazy imports to avoid loading unused dependencies
    if provider == "ink":
        from mermaid_watch.renderers.providers.ink import MermaidInkRenderer
        provider_map["ink"] = MermaidInkRenderer
    elif provider == "cli":
        from mermaid_watch.renderers.providers.cli import MermaidCLIRenderer
        provider_map["cli"] = MermaidCLIRenderer
    else:
        msg = f"Unknown renderer provider: {provider}"
        raise ValueError(msg)

    logger.info(f"Initializing renderer: {provider}")
    return provider_map[provider]()
