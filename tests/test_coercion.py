"""Unit tests for scalar coercion and constraint checks."""

import math

import pytest

from field_schema import FieldDescriptor, FieldType
from field_schema.coercion import (
    CoercionError,
    coerce,
    controlling_value,
    is_blank,
    validate_value,
)

STRING = FieldDescriptor(name="s", type=FieldType.STRING)
NUMBER = FieldDescriptor(name="n", type=FieldType.NUMBER)
BOOLEAN = FieldDescriptor(name="b", type=FieldType.BOOLEAN, default=False)


class TestBlank:
    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_blank(self, value):
        assert is_blank(value)

    @pytest.mark.parametrize("value", [0, False, "0", " x "])
    def test_not_blank(self, value):
        assert not is_blank(value)


class TestStrings:
    def test_numbers_become_strings(self):
        assert coerce(STRING, 6379) == "6379"

    def test_booleans_rejected(self):
        with pytest.raises(CoercionError):
            coerce(STRING, True)

    def test_containers_rejected(self):
        with pytest.raises(CoercionError):
            coerce(STRING, ["a"])


class TestNumbers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("6379", 6379), (" 42 ", 42), ("2.5", 2.5), (7, 7), (0.5, 0.5)],
    )
    def test_accepted(self, raw, expected):
        result = coerce(NUMBER, raw)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("raw", ["six", "", True, None, "nan", "inf", math.nan])
    def test_rejected(self, raw):
        with pytest.raises(CoercionError):
            coerce(NUMBER, raw)


class TestBooleans:
    @pytest.mark.parametrize("raw", [True, 1, "true", "TRUE", "yes", "on", "1"])
    def test_truthy(self, raw):
        assert coerce(BOOLEAN, raw) is True

    @pytest.mark.parametrize("raw", [False, 0, "false", "No", "off", "0"])
    def test_falsy(self, raw):
        assert coerce(BOOLEAN, raw) is False

    @pytest.mark.parametrize("raw", [2, "maybe", 1.0, None])
    def test_rejected(self, raw):
        with pytest.raises(CoercionError):
            coerce(BOOLEAN, raw)


class TestConstraints:
    def test_bounds(self):
        port = FieldDescriptor(name="port", type=FieldType.NUMBER, min_value=1, max_value=65535)
        assert validate_value(port, "1") == 1
        with pytest.raises(CoercionError, match="below minimum"):
            validate_value(port, 0)
        with pytest.raises(CoercionError, match=r"exceeds maximum \(65535\)"):
            validate_value(port, 70000)

    def test_integer_only(self):
        count = FieldDescriptor(name="c", type=FieldType.NUMBER, integer=True)
        assert validate_value(count, "3") == 3
        assert type(validate_value(count, "3.0")) is int
        with pytest.raises(CoercionError, match="not a whole number"):
            validate_value(count, "3.5")

    def test_allowed_values_keep_types_apart(self):
        flag = FieldDescriptor(name="f", type=FieldType.NUMBER, allowed_values=(0, 1))
        assert validate_value(flag, "1") == 1
        with pytest.raises(CoercionError):
            validate_value(flag, 2)

    def test_pattern_must_match_whole_value(self):
        digits = FieldDescriptor(name="d", type=FieldType.STRING, pattern=r"\d+")
        assert validate_value(digits, "123") == "123"
        with pytest.raises(CoercionError, match="expected format"):
            validate_value(digits, "123abc")


class TestControllingValue:
    def test_blank_falls_back_to_default(self):
        assert controlling_value(BOOLEAN, None) is False
        assert controlling_value(BOOLEAN, " ") is False

    def test_coerced_when_possible(self):
        assert controlling_value(BOOLEAN, "yes") is True

    def test_raw_when_not_coercible(self):
        assert controlling_value(BOOLEAN, "maybe") == "maybe"
