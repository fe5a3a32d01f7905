from __future__ import annotations

import json
import re
from typing import Any, Optional

_JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)
_ANY_FENCE_RE = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def _loads(candidate: str) -> Optional[Any]:
    try:
        return json.loads(candidate)
    except (TypeError, ValueError):
        return None


def extract_json(text: Optional[str]) -> Optional[Any]:
    """Pull a JSON value out of free-form model output.

    Tried in order: a ```json fenced block, any fenced block, the span
    from the first ``[`` to the last ``]``, the span from the first ``{``
    to the last ``}``, and finally the whole text. A strategy wins only
    when it parses to something other than ``null``.
    """
    if not text:
        return None

    fenced = (
        (_JSON_FENCE_RE, 1),
        (_ANY_FENCE_RE, 1),
        (_ARRAY_RE, 0),
        (_OBJECT_RE, 0),
    )
    for pattern, group in fenced:
        match = pattern.search(text)
        if not match:
            continue
        parsed = _loads(match.group(group))
        if parsed is not None:
            return parsed

    return _loads(text)
