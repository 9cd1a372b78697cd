"""Utility functions."""

import os
import secrets
import time


def truncate_text(text: str, max_length: int = 50, suffix: str = "...") -> str:
    """Truncate text to maximum length with suffix."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def generate_graph_id(prefix: str = "mermaid-watch") -> str:
    """Unique id for a rendered graph, also usable as an HTML id."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(5)}"


def env_flag(value: str | None) -> bool | None:
    """Parse a boolean-ish environment value; None when unset or empty."""
    if value is None or not value.strip():
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def system_prefers_dark() -> bool | None:
    """System-level dark-mode preference from MERMAID_WATCH_DARK_MODE."""
    return env_flag(os.getenv("MERMAID_WATCH_DARK_MODE"))

