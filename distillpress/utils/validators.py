from __future__ import annotations

import re


_CTRL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_TRUE_VALUES = {"1", "true", "yes", "on"}


def sanitize_text(value: str | None, *, max_len: int = 5000, strip_ctrl: bool = True) -> str:
    if value is None:
        return ""
    s = str(value)
    if strip_ctrl:
        s = _CTRL_RE.sub(" ", s)
    s = s.strip()
    if len(s) > max_len:
        s = s[:max_len]
    return s


def sanitize_textarea(value: str | None, *, max_len: int = 20000) -> str:
    """Multi-line variant of :func:`sanitize_text` with a larger limit."""
    return sanitize_text(value, max_len=max_len)


def to_int(value, default: int = 0, *, minimum: int | None = None, maximum: int | None = None) -> int:
    try:
        n = int(value)
    except Exception:
        return default
    if minimum is not None and n < minimum:
        n = minimum
    if maximum is not None and n > maximum:
        n = maximum
    return n


def to_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def to_optional_id(value) -> int | None:
    """Positive integer id, or ``None`` for anything empty, zero or invalid."""
    n = to_int(value, 0)
    return n if n > 0 else None
