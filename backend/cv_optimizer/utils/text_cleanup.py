"""
Text helpers for prompt inputs and uploaded CV files.
"""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def truncate(text: str | None, max_chars: int) -> str:
    """Collapse whitespace runs to single spaces, trim, and clamp to ``max_chars``.

    Idempotent for a fixed budget. ``None`` is treated as an empty string.
    """
    if not text:
        return ""
    collapsed = _WHITESPACE_RUN.sub(" ", text).strip()
    # Clamping can leave a trailing space behind
    return collapsed[: max(max_chars, 0)].rstrip()


def read_upload_text(data: bytes) -> str:
    """Decode an uploaded file's bytes as raw text (no binary format parsing)."""
    text = data.decode("utf-8", errors="replace")
    text = text.replace("\ufeff", "").replace("\x00", "")
    return text
