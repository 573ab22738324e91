"""Structured value codec for Action parameters and results.

Action nodes store ``parameters`` and ``result`` as JSON text. This module is
the only place that converts between that text and Python values:

- ``normalize_structured`` turns arbitrary Python values into the
  ``StructuredValue`` shape (str/int/float/bool/None, lists, string-keyed
  dicts).
- ``encode_structured`` serializes to JSON text. ``None`` and other empty
  inputs become ``"{}"`` so the stored field is never missing.
- ``decode_structured`` parses stored text back into a ``StructuredValue``.
"""

import base64
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

from actiongraph.log_config import get_logger

log = get_logger("codec")

StructuredValue = Union[
    str, int, float, bool, None, list["StructuredValue"], dict[str, "StructuredValue"]
]
ParameterMap = dict[str, StructuredValue]

EMPTY_OBJECT = "{}"


class StructuredValueError(ValueError):
    """A value could not be converted to a StructuredValue."""


def normalize_structured(value: Any) -> StructuredValue:
    """Convert a Python value into the StructuredValue shape.

    Handles dataclasses, pydantic models (``model_dump``), enums,
    dates/datetimes (ISO-8601), bytes (base64), sets and tuples.

    Raises:
        StructuredValueError: If the value has no structured representation
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return normalize_structured(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, dict):
        return {str(k): normalize_structured(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_structured(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted((normalize_structured(v) for v in value), key=repr)
    if is_dataclass(value) and not isinstance(value, type):
        return normalize_structured(asdict(value))
    if hasattr(value, "model_dump"):
        return normalize_structured(value.model_dump())
    raise StructuredValueError(
        f"Cannot serialize value of type {type(value).__name__}"
    )


def encode_structured(value: Any) -> str:
    """Serialize a value to JSON text for storage on an Action node.

    Empty inputs (None, empty dict) are stored as ``"{}"``.

    Raises:
        StructuredValueError: If the value cannot be serialized
    """
    if value is None:
        return EMPTY_OBJECT
    normalized = normalize_structured(value)
    if normalized == {}:
        return EMPTY_OBJECT
    try:
        return json.dumps(normalized, ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        # NaN / Infinity have no JSON representation
        raise StructuredValueError(str(e)) from e


def decode_structured(text: str | None) -> StructuredValue:
    """Parse JSON text stored on an Action node.

    Missing text decodes to an empty dict. Text that is not valid JSON is
    returned unchanged (logged), so one malformed node never breaks a query.
    """
    if text is None or text == "":
        return {}
    if not isinstance(text, str):
        # Already structured (e.g. a backend that returns maps natively)
        return normalize_structured(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        log.warning(f"Stored value is not valid JSON ({e}); returning raw text")
        return text


def decode_parameter_map(text: str | None) -> ParameterMap:
    """Decode stored parameters, returning an empty map for non-map values."""
    value = decode_structured(text)
    if isinstance(value, dict):
        return value
    return {}


def parameter_keys(parameters: Any) -> frozenset[str]:
    """Key set of a parameter map; non-maps have no keys."""
    if isinstance(parameters, dict):
        return frozenset(str(k) for k in parameters)
    return frozenset()
