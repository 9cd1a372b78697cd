"""Renderer provider implementations."""

from mermaid_watch.renderers.providers.cli import MermaidCLIRenderer
from mermaid_watch.renderers.providers.ink import MermaidInkRenderer

__all__ = ["MermaidCLIRenderer", "MermaidInkRenderer"]
