from __future__ import annotations

import re
from typing import Any, Callable

_LINE_BREAKS = {ord("\n"): " ", ord("\r"): " "}
_WHITESPACE_RUN = re.compile(r"\s+")


def _apply_fixpoint(transform: Callable[[str], str], text: str) -> str:
    """Return ``text`` after repeatedly applying ``transform`` until stable."""

    updated = transform(text)
    return text if updated == text else _apply_fixpoint(transform, updated)


def _collapse(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text.translate(_LINE_BREAKS)).strip()


def as_text(value: Any) -> str:
    """Coerce a record value to text; ``None`` becomes the empty string."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize(value: Any) -> str:
    """Turn line feeds into spaces and collapse whitespace runs to one space."""
    return _apply_fixpoint(_collapse, as_text(value))
