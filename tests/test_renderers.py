"""Tests for the renderer providers and factory."""

import base64
import json
from pathlib import Path

import httpx
import pytest

from mermaid_watch.renderers import RenderError, get_renderer
from mermaid_watch.renderers.providers import MermaidCLIRenderer, MermaidInkRenderer
from mermaid_watch.renderers.providers.ink import encode_state, scope_svg
from mermaid_watch.schemas import ThemeConfig

SVG = '<svg id="mermaid-123" xmlns="http://www.w3.org/2000/svg"><style>#mermaid-123 .node{fill:red}</style></svg>'


def ink_renderer(handler) -> MermaidInkRenderer:
    """Build an ink renderer served by a mock transport."""
    return MermaidInkRenderer(base_url="https://ink.test/", transport=httpx.MockTransport(handler))


class TestInkHelpers:
    """Test suite for state encoding and SVG scoping."""

    def test_encode_state_carries_source_and_config(self) -> None:
        """The encoded state holds the code and the serialized config."""
        # Act
        encoded = encode_state("graph TD\n  A --> B", {"theme": "dark"})

        # Assert
        state = json.loads(base64.urlsafe_b64decode(encoded))
        assert state["code"] == "graph TD\n  A --> B"
        assert json.loads(state["mermaid"]) == {"theme": "dark"}

    def test_scope_svg_renames_id_and_selectors(self) -> None:
        """The root id and CSS selectors follow the container id."""
        # Act
        scoped = scope_svg(SVG, "g1")

        # Assert
        assert '<svg id="g1"' in scoped
        assert "#g1 .node" in scoped
        assert "mermaid-123" not in scoped

    def test_scope_svg_without_id(self) -> None:
        """An SVG without an id gets one."""
        # Act / Assert
        assert scope_svg("<svg><g/></svg>", "g1") == '<svg id="g1"><g/></svg>'


class TestMermaidInkRenderer:
    """Test suite for the HTTP provider."""

    @pytest.mark.asyncio
    async def test_render_success(self) -> None:
        """A 200 SVG response is scoped to the container id."""
        # Arrange
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text=SVG)

        renderer = ink_renderer(handler)
        renderer.initialize(ThemeConfig.for_mode(True))

        # Act
        svg = await renderer.render("g1", "graph TD\n  A --> B")

        # Assert
        assert svg.startswith('<svg id="g1"')
        assert requests[0].url.host == "ink.test"
        assert requests[0].url.path.startswith("/svg/")
        assert requests[0].url.params["theme"] == "dark"

    @pytest.mark.asyncio
    async def test_render_rejected(self) -> None:
        """HTTP errors carry the response text."""
        # Arrange
        renderer = ink_renderer(lambda request: httpx.Response(400, text="Parse error on line 2"))

        # Act / Assert
        with pytest.raises(RenderError, match="Parse error on line 2"):
            await renderer.render("g1", "graph TD\n  A -- B")

    @pytest.mark.asyncio
    async def test_render_unreachable(self) -> None:
        """Transport failures become RenderError."""
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        renderer = ink_renderer(handler)

        # Act / Assert
        with pytest.raises(RenderError, match="Renderer unreachable"):
            await renderer.render("g1", "graph TD\n  A --> B")

    @pytest.mark.asyncio
    async def test_render_without_svg(self) -> None:
        """A successful response that is not SVG is an error."""
        # Arrange
        renderer = ink_renderer(lambda request: httpx.Response(200, text="<html>oops</html>"))

        # Act / Assert
        with pytest.raises(RenderError, match="no SVG"):
            await renderer.render("g1", "graph TD\n  A --> B")


class TestMermaidCLIRenderer:
    """Test suite for the mmdc provider."""

    def test_build_command(self) -> None:
        """mmdc is invoked with the container id and a transparent background."""
        # Arrange
        renderer = MermaidCLIRenderer(executable="mmdc")

        # Act
        cmd = renderer.build_command(Path("in.mmd"), Path("out.svg"), Path("cfg.json"), "g1")

        # Assert
        assert cmd == [
            "mmdc", "-i", "in.mmd", "-o", "out.svg", "-c", "cfg.json",
            "-b", "transparent", "-I", "g1", "--quiet",
        ]

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path: Path) -> None:
        """A missing CLI is reported as a render error."""
        # Arrange
        renderer = MermaidCLIRenderer(executable=str(tmp_path / "no-such-mmdc"))

        # Act / Assert
        with pytest.raises(RenderError, match="not found"):
            await renderer.render("g1", "graph TD\n  A --> B")


class TestGetRenderer:
    """Test suite for the provider factory."""

    def test_default_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without configuration the HTTP provider is used."""
        # Arrange
        monkeypatch.delenv("RENDERER_PROVIDER", raising=False)

        # Act / Assert
        assert isinstance(get_renderer(), MermaidInkRenderer)

    def test_provider_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """RENDERER_PROVIDER selects the provider."""
        # Arrange
        monkeypatch.setenv("RENDERER_PROVIDER", "cli")

        # Act
        renderer = get_renderer()

        # Assert
        assert isinstance(renderer, MermaidCLIRenderer)
        assert renderer.provider_name == "cli"

    def test_unknown_provider(self) -> None:
        """Unknown names are rejected."""
        # Act / Assert
        with pytest.raises(ValueError, match="Unknown renderer provider"):
            get_renderer("canvas")
