"""Visibility evaluator: which fields are active for a given value set.

Single forward pass in declaration order. The linter guarantees every
controlling field is decided before any field that depends on it.

Rules:
- No clauses: always active
- A clause is satisfied when the controller's current value is in its allowed set
- An omitted controller contributes its default
- An inactive controller never satisfies a clause
- All clauses must hold (AND); each clause is a membership test (OR)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from field_schema.coercion import controlling_value
from field_schema.types import FieldDescriptor, OptionGroup

if TYPE_CHECKING:
    from collections.abc import Sequence

    from field_schema.schema import Schema


def active_fields(
    fields: Sequence[FieldDescriptor],
    values: Mapping[str, Any],
) -> list[FieldDescriptor]:
    """Active descriptors of one scope, in declaration order. Does not descend into groups."""
    active: list[FieldDescriptor] = []
    current: dict[str, object] = {}
    for descriptor in fields:
        if not _is_visible(descriptor, current):
            continue
        active.append(descriptor)
        if not isinstance(descriptor, OptionGroup):
            current[descriptor.name] = controlling_value(descriptor, values.get(descriptor.name))
    return active


def evaluate(schema: Schema, values: Mapping[str, Any] | None = None) -> frozenset[str]:
    """Return the dotted paths of every active field, nested fields included."""
    return frozenset(_walk(schema.fields, values or {}, ""))


def _walk(
    fields: Sequence[FieldDescriptor],
    values: Mapping[str, Any],
    prefix: str,
) -> list[str]:
    paths: list[str] = []
    for descriptor in active_fields(fields, values):
        path = prefix + descriptor.name
        paths.append(path)
        if isinstance(descriptor, OptionGroup):
            nested = values.get(descriptor.name)
            paths.extend(
                _walk(descriptor.fields, nested if isinstance(nested, Mapping) else {}, path + ".")
            )
    return paths


def _is_visible(descriptor: FieldDescriptor, current: dict[str, object]) -> bool:
    for clause in descriptor.visible_when:
        if clause.field not in current:
            return False
        if not clause.admits(current[clause.field]):
            return False
    return True
