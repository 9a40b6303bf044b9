"""Value coercion and constraint checks for scalar fields.

Raw values arrive untyped (form posts, env vars, stored credential records),
so every scalar is coerced to its declared type before it is compared or
stored.
"""

from __future__ import annotations

import math
import re

from field_schema.types import FieldDescriptor, FieldType, FieldValue, same_value

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


class CoercionError(ValueError):
    pass


def is_blank(value: object) -> bool:
    """``None`` and whitespace-only strings count as "not supplied"."""
    return value is None or (isinstance(value, str) and not value.strip())


def coerce(descriptor: FieldDescriptor, value: object) -> FieldValue:
    """Coerce ``value`` to the descriptor's type. Raises CoercionError."""
    match descriptor.type:
        case FieldType.STRING:
            return _coerce_string(value)
        case FieldType.NUMBER:
            return _coerce_number(value)
        case FieldType.BOOLEAN:
            return _coerce_boolean(value)
        case FieldType.RECORD:
            raise CoercionError("record fields hold nested option values, not scalars")


def check_constraints(descriptor: FieldDescriptor, value: FieldValue) -> None:
    """Check an already-coerced value against allowed values, bounds and pattern."""
    if descriptor.allowed_values is not None and not any(
        same_value(value, allowed) for allowed in descriptor.allowed_values
    ):
        choices = ", ".join(repr(v) for v in descriptor.allowed_values)
        raise CoercionError(f"{value!r} is not one of: {choices}")

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if descriptor.integer and not float(value).is_integer():
            raise CoercionError(f"{value} is not a whole number")
        if descriptor.min_value is not None and value < descriptor.min_value:
            raise CoercionError(f"{value} is below minimum ({_fmt(descriptor.min_value)})")
        if descriptor.max_value is not None and value > descriptor.max_value:
            raise CoercionError(f"{value} exceeds maximum ({_fmt(descriptor.max_value)})")

    if (
        descriptor.pattern is not None
        and isinstance(value, str)
        and re.fullmatch(descriptor.pattern, value) is None
    ):
        raise CoercionError(f"{value!r} does not match the expected format")


def validate_value(descriptor: FieldDescriptor, value: object) -> FieldValue:
    coerced = coerce(descriptor, value)
    check_constraints(descriptor, coerced)
    # integer fields hand over ints, so "6379.0" becomes 6379
    if descriptor.integer and isinstance(coerced, float):
        return int(coerced)
    return coerced


def controlling_value(descriptor: FieldDescriptor, raw: object) -> object:
    """The value a field contributes when it controls another field's visibility.

    Omitted values fall back to the default. Values that cannot be coerced are
    returned raw so they only satisfy clauses that list them verbatim.
    """
    if is_blank(raw):
        return descriptor.default
    try:
        return coerce(descriptor, raw)
    except CoercionError:
        return raw


def _coerce_string(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        raise CoercionError(f"expected a string, got boolean {value!r}")
    if isinstance(value, (int, float)):
        return str(value)
    raise CoercionError(f"expected a string, got {type(value).__name__}")


def _coerce_number(value: object) -> int | float:
    if isinstance(value, bool):
        raise CoercionError(f"expected a number, got boolean {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise CoercionError(f"expected a finite number, got {value!r}")
        return value
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return int(stripped)
        except ValueError:
            pass
        try:
            parsed = float(stripped)
        except ValueError:
            raise CoercionError(f"{value!r} is not a number") from None
        if math.isnan(parsed) or math.isinf(parsed):
            raise CoercionError(f"expected a finite number, got {value!r}")
        return parsed
    raise CoercionError(f"expected a number, got {type(value).__name__}")


def _coerce_boolean(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in _TRUE_STRINGS:
            return True
        if lower in _FALSE_STRINGS:
            return False
    raise CoercionError(f"{value!r} is not a boolean")


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)
