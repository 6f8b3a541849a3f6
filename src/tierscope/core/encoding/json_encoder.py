"""JSON encoding for result dataclasses."""

import dataclasses
import json
from datetime import datetime
from enum import Enum
from typing import Any


def _format_timestamp(value: datetime) -> str:
    """RFC 3339 with a ``Z`` suffix for UTC."""
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def to_jsonable(value: Any) -> Any:
    """Convert result objects into JSON-compatible structures.

    Dataclasses become dicts, datetimes RFC 3339 strings, enums their values.
    Mapping keys that are enums are encoded by value as well.

    Args:
        value: A result dataclass, or any nesting of lists, dicts and scalars.

    Returns:
        Structure made of dict, list, str, int, float, bool and None.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def encode_json(value: Any) -> str:
    """Encode a result object to a JSON string."""
    return json.dumps(to_jsonable(value))
