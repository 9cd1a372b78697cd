"""Mermaid CLI (mmdc) rendering provider."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path

from loguru import logger

from mermaid_watch.renderers.client import DiagramRenderer, RenderError


class MermaidCLIRenderer(DiagramRenderer):
    """Renders by running the Mermaid CLI in a subprocess."""

    def __init__(self, executable: str | None = None, timeout: float | None = None):
        super().__init__()
        self.executable = executable or os.getenv("MMDC_PATH", "mmdc")
        self.timeout = timeout or float(os.getenv("MMDC_TIMEOUT", "60"))

    @property
    def provider_name(self) -> str:
        return "cli"

    def build_command(self, input_path: Path, output_path: Path, config_path: Path, container_id: str) -> list[str]:
        return [
            self.executable,
            "-i", str(input_path),
            "-o", str(output_path),
            "-c", str(config_path),
            "-b", "transparent",
            "-I", container_id,
            "--quiet",
        ]

    async def render(self, container_id: str, source: str) -> str:
        """Render via mmdc, writing source and config to a temp directory."""
        config = self.theme.to_mermaid_config() if self.theme else {}

        with tempfile.TemporaryDirectory(prefix="mermaid-watch-") as tmp:
            workdir = Path(tmp)
            input_path = workdir / "diagram.mmd"
            output_path = workdir / "diagram.svg"
            config_path = workdir / "config.json"
            input_path.write_text(source, encoding="utf-8")
            config_path.write_text(json.dumps(config), encoding="utf-8")

            cmd = self.build_command(input_path, output_path, config_path, container_id)
            try:
                process = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as e:
                logger.error(f"Mermaid CLI not found: {self.executable}")
                raise RenderError(f"Mermaid CLI not found: {self.executable}") from e

            try:
                _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                process.kill()
                await process.wait()
                logger.error(f"Mermaid CLI timed out after {self.timeout}s")
                raise RenderError("Mermaid CLI timed out") from e

            if process.returncode != 0 or not output_path.exists():
                message = stderr.decode("utf-8", errors="replace").strip()
                logger.error(f"Mermaid CLI failed ({process.returncode})")
                raise RenderError(message or f"Mermaid CLI exited with {process.returncode}")

            return output_path.read_text(encoding="utf-8")
