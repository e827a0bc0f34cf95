"""JSON encoding helpers for every outbound payload."""

from __future__ import annotations

import json
import math
from typing import Any


def sanitize_for_json(value: Any) -> Any:
    """Recursively replace NaN and infinite floats with ``None``.

    Mappings and sequences are rebuilt; every other value is returned
    untouched.
    """
    if isinstance(value, dict):
        return {key: sanitize_for_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_for_json(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def encode_json(value: Any) -> str:
    """Sanitize and serialize *value* compactly.

    Raises ``TypeError`` or ``ValueError`` when the value is not JSON
    representable.
    """
    return json.dumps(
        sanitize_for_json(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def tool_result_text(value: Any) -> str:
    """Text for a successful tool result's content item."""
    if isinstance(value, (dict, list, tuple)):
        return encode_json(value)
    if isinstance(value, str):
        return value
    return str(value)
