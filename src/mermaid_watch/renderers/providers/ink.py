"""mermaid.ink HTTP rendering provider."""

from __future__ import annotations

import base64
import json
import os
import re

import httpx
from loguru import logger

from mermaid_watch.renderers.client import DiagramRenderer, RenderError

_SVG_ID = re.compile(r"<svg\b[^>]*?\sid=\"([^\"]+)\"")


def encode_state(source: str, config: dict | None = None) -> str:
    """Encode source and Mermaid config the way mermaid.ink expects."""
    state = {"code": source, "mermaid": json.dumps(config or {})}
    raw = json.dumps(state).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def scope_svg(svg: str, container_id: str) -> str:
    """Rename the SVG root id (and its CSS selectors) to container_id."""
    match = _SVG_ID.search(svg)
    if not match:
        return svg.replace("<svg", f'<svg id="{container_id}"', 1)
    old_id = re.escape(match.group(1))
    svg = re.sub(rf'id="{old_id}"', f'id="{container_id}"', svg)
    return re.sub(rf"#{old_id}(?![\w-])", f"#{container_id}", svg)


class MermaidInkRenderer(DiagramRenderer):
    """Renders through a mermaid.ink-compatible HTTP service."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__()
        self.base_url = (base_url or os.getenv("MERMAID_INK_URL", "https://mermaid.ink")).rstrip("/")
        self.timeout = timeout or float(os.getenv("MERMAID_INK_TIMEOUT", "30"))
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "ink"

    def _request_url(self, source: str) -> tuple[str, dict[str, str]]:
        config = self.theme.to_mermaid_config() if self.theme else None
        params = {"theme": self.theme.theme} if self.theme else {}
        return f"{self.base_url}/svg/{encode_state(source, config)}", params

    async def render(self, container_id: str, source: str) -> str:
        """Render via GET /svg/<encoded state>."""
        url, params = self._request_url(source)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"mermaid.ink request failed: {e}")
            raise RenderError(f"Renderer unreachable: {e}") from e

        if response.status_code >= 400:
            snippet = (response.text or "").strip()
            if len(snippet) > 300:
                snippet = snippet[:300] + "..."
            logger.error(f"mermaid.ink rejected diagram ({response.status_code})")
            raise RenderError(snippet or f"Renderer returned HTTP {response.status_code}")

        svg = response.text
        if "<svg" not in svg:
            raise RenderError("Renderer returned no SVG")
        return scope_svg(svg, container_id)
