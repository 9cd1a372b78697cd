"""Renderer module exports."""

from mermaid_watch.renderers.client import DiagramRenderer, RenderError, get_renderer

__all__ = ["DiagramRenderer", "RenderError", "get_renderer"]
