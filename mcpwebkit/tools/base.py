"""Tool base utilities — schema checks and argument helpers."""

from __future__ import annotations

import json
from typing import Any

import jsonschema

from contracts.errors import ToolError
from contracts.tool_sdk import ToolDefinition


def check_definition(definition: ToolDefinition) -> None:
    """Check that *definition* renders to a valid JSON Schema.

    Raises ``jsonschema.SchemaError`` on an invalid schema.
    """
    schema = definition.input_schema.to_json()
    jsonschema.Draft202012Validator.check_schema(schema)


def require_string(arguments: dict[str, Any], name: str, *, allow_empty: bool = False) -> str:
    """Return a string argument or raise a missing-parameter error.

    An empty string counts as missing unless *allow_empty* is set.
    """
    value = arguments.get(name)
    if not isinstance(value, str) or (not value and not allow_empty):
        raise ToolError.missing_parameter(name)
    return value


def optional_bool(arguments: dict[str, Any], name: str, default: bool = False) -> bool:
    value = arguments.get(name)
    return value if isinstance(value, bool) else default


def js_string(value: str) -> str:
    """Quote *value* as a JavaScript string literal."""
    return json.dumps(value)


def parse_json_text(value: Any) -> Any:
    """Decode a JSON string returned by a page script.

    Returns ``None`` when *value* is not a string or not valid JSON, so the
    caller can fall back to the raw result.
    """
    if not isinstance(value, str):
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None
