"""Field descriptor types and the tagged visibility predicate."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

FieldValue = str | int | float | bool


class FieldType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    RECORD = "record"


def same_value(a: object, b: object) -> bool:
    """Equality that keeps booleans and numbers apart (``True != 1``)."""
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


class VisibilityClause(BaseModel):
    """One conjunct of a visibility predicate.

    Satisfied when the controlling field's current value is one of ``allowed``.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    allowed: tuple[FieldValue, ...]

    def admits(self, value: object) -> bool:
        return any(same_value(value, candidate) for candidate in self.allowed)

    def describe(self) -> str:
        choices = " | ".join(repr(v) for v in self.allowed)
        return f"{self.field} in ({choices})"


def show_when(**conditions: FieldValue | tuple[FieldValue, ...]) -> tuple[VisibilityClause, ...]:
    """Build a visibility predicate from keyword conditions.

    ``show_when(connectionType=("standard", "sentinel"), ssl=True)``
    """
    clauses: list[VisibilityClause] = []
    for name, allowed in conditions.items():
        values = allowed if isinstance(allowed, tuple) else (allowed,)
        clauses.append(VisibilityClause(field=name, allowed=values))
    return tuple(clauses)


class FieldDescriptor(BaseModel):
    """A single configurable value.

    ``required`` only applies while the field is active. ``secret`` never
    influences resolution; it only controls how values are rendered.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType
    default: FieldValue | None = None
    required: bool = False
    secret: bool = False
    description: str = ""
    visible_when: tuple[VisibilityClause, ...] = ()
    allowed_values: tuple[FieldValue, ...] | None = None
    min_value: float | None = None
    max_value: float | None = None
    integer: bool = False
    pattern: str | None = None

    @property
    def is_group(self) -> bool:
        return False

    @property
    def controllers(self) -> list[str]:
        return [clause.field for clause in self.visible_when]


class OptionGroup(FieldDescriptor):
    """A record-typed field holding an ordered collection of nested fields.

    The group's own ``visible_when`` gates every nested field. Nested
    ``visible_when`` clauses are scoped to siblings inside the group.
    """

    type: Literal[FieldType.RECORD] = FieldType.RECORD
    fields: tuple[OptionGroup | FieldDescriptor, ...] = ()

    @property
    def is_group(self) -> bool:
        return True

    def default_record(self) -> dict[str, object]:
        record: dict[str, object] = {}
        for child in self.fields:
            record[child.name] = (
                child.default_record() if isinstance(child, OptionGroup) else child.default
            )
        return record

    def get(self, name: str) -> FieldDescriptor | None:
        for child in self.fields:
            if child.name == name:
                return child
        return None
