"""Record selection: by id or by a partial field mapping.

Values compare loosely: if both sides read as numbers they compare
numerically ("1" == 1 == "1.0"), otherwise as strings.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

ID_FIELD = "id"


@dataclass(frozen=True)
class ById:
    """Select records whose ``id`` equals value."""

    value: Any


@dataclass(frozen=True)
class ByFields:
    """Select records where every given field equals its value. Empty matches all."""

    fields: dict[str, Any] = field(default_factory=dict)


Predicate = ById | ByFields


def as_predicate(value: Any) -> Predicate | None:
    """Coerce a caller's selector into a Predicate (None stays None)."""
    if value is None or isinstance(value, (ById, ByFields)):
        return value
    if isinstance(value, Mapping):
        return ByFields(dict(value))
    return ById(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return None if math.isnan(number) else number


def loose_equals(a: Any, b: Any) -> bool:
    """Numeric comparison when both sides parse as numbers, string comparison otherwise."""
    if a is None or b is None:
        return a is None and b is None
    na, nb = _as_number(a), _as_number(b)
    if na is not None and nb is not None:
        return na == nb
    return str(a) == str(b)


def matches(record: Mapping[str, Any], predicate: Predicate) -> bool:
    if isinstance(predicate, ById):
        return loose_equals(record.get(ID_FIELD), predicate.value)
    return all(loose_equals(record.get(k), v) for k, v in predicate.fields.items())
