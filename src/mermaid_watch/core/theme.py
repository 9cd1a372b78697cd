"""Dark-mode detection for the host page."""

from __future__ import annotations

import re

from loguru import logger

from mermaid_watch.core.document import HostDocument, element_classes
from mermaid_watch.schemas import ThemeConfig

DARK_CLASSES = frozenset({"dark", "dark-mode"})
# Sum of RGB channels below this is treated as a dark background.
DARK_BRIGHTNESS_THRESHOLD = 400

_BACKGROUND = re.compile(r"background(?:-color)?\s*:\s*([^;]+)", re.IGNORECASE)
_HEX = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})\b")


def parse_rgb(value: str) -> tuple[int, int, int] | None:
    """Parse an rgb()/rgba() or hex colour into its channels."""
    hex_match = _HEX.search(value)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)

    channels = re.findall(r"\d+", value)
    if len(channels) >= 3:
        return int(channels[0]), int(channels[1]), int(channels[2])
    return None


def background_color(document: HostDocument) -> str | None:
    """Background colour declared inline on <body>, if any."""
    style = document.body.get("style") or ""
    match = _BACKGROUND.search(style)
    return match.group(1).strip() if match else None


def is_dark_mode(document: HostDocument) -> bool:
    """Detect whether the page is in dark mode.

    Checked in priority order, first match wins: the system-level
    preference, a dark marker class on <html>, then the brightness of the
    body background.
    """
    if document.prefers_dark:
        return True

    if DARK_CLASSES.intersection(element_classes(document.root)):
        return True

    color = background_color(document)
    if color:
        rgb = parse_rgb(color)
        if rgb:
            return sum(rgb) < DARK_BRIGHTNESS_THRESHOLD

    return False


def detect_theme(document: HostDocument) -> ThemeConfig:
    """Build the renderer theme for the page."""
    dark = is_dark_mode(document)
    logger.debug(f"Detected {'dark' if dark else 'light'} page theme")
    return ThemeConfig.for_mode(dark)
