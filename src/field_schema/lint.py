"""Schema linter: structural checks run once when a schema is built.

A visibility clause may only reference a scalar field declared earlier in the
same scope (the schema itself, or the enclosing option group). That ordering
rule is what lets the visibility evaluator decide every field in a single
forward pass.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from field_schema.coercion import CoercionError, is_blank, validate_value
from field_schema.errors import SchemaDefinitionError
from field_schema.types import (
    FieldDescriptor,
    FieldType,
    OptionGroup,
    VisibilityClause,
    same_value,
)

if TYPE_CHECKING:
    from collections.abc import Sequence


def lint_fields(fields: Sequence[FieldDescriptor], scope: str = "") -> list[str]:
    """Return every structural problem found in ``fields`` and their groups."""
    problems: list[str] = []
    declared: dict[str, FieldDescriptor] = {}
    scope_names = {f.name for f in fields}

    for descriptor in fields:
        path = scope + descriptor.name

        if not descriptor.name or "." in descriptor.name:
            problems.append(f"{path!r}: field names must be non-empty and contain no '.'")
        if descriptor.name in declared:
            problems.append(f"{path}: duplicate field name")
        if descriptor.type == FieldType.RECORD and not isinstance(descriptor, OptionGroup):
            problems.append(f"{path}: record fields must be declared as option groups")

        for clause in descriptor.visible_when:
            problems.extend(_lint_clause(path, descriptor, clause, declared, scope_names))

        if isinstance(descriptor, OptionGroup):
            if not descriptor.fields:
                problems.append(f"{path}: option group declares no fields")
            problems.extend(lint_fields(descriptor.fields, path + "."))
        else:
            problems.extend(_lint_scalar(path, descriptor))

        declared.setdefault(descriptor.name, descriptor)

    return problems


def raise_for_problems(fields: Sequence[FieldDescriptor]) -> None:
    problems = lint_fields(fields)
    if problems:
        raise SchemaDefinitionError(problems)


def _lint_clause(
    path: str,
    descriptor: FieldDescriptor,
    clause: VisibilityClause,
    declared: dict[str, FieldDescriptor],
    scope_names: set[str],
) -> list[str]:
    if clause.field == descriptor.name:
        return [f"{path}: visibility clause references the field itself"]

    controller = declared.get(clause.field)
    if controller is None:
        if clause.field in scope_names:
            return [f"{path}: visibility clause references later field '{clause.field}'"]
        return [f"{path}: visibility clause references undeclared field '{clause.field}'"]

    if isinstance(controller, OptionGroup):
        return [f"{path}: option group '{clause.field}' cannot control visibility"]

    if not clause.allowed:
        return [f"{path}: visibility clause on '{clause.field}' allows no values"]

    problems: list[str] = []
    for allowed in clause.allowed:
        try:
            coerced = validate_value(controller, allowed)
        except CoercionError as e:
            problems.append(
                f"{path}: '{clause.field}' can never equal {allowed!r} ({e})"
            )
            continue
        if not same_value(coerced, allowed):
            problems.append(
                f"{path}: allowed value {allowed!r} for '{clause.field}' "
                f"must already be of type {controller.type.value}"
            )
    return problems


def _lint_scalar(path: str, descriptor: FieldDescriptor) -> list[str]:
    problems: list[str] = []

    if (
        descriptor.min_value is not None
        and descriptor.max_value is not None
        and descriptor.min_value > descriptor.max_value
    ):
        problems.append(f"{path}: min_value exceeds max_value")

    if descriptor.integer and descriptor.type != FieldType.NUMBER:
        problems.append(f"{path}: only number fields can be integer-only")

    if descriptor.pattern is not None:
        try:
            re.compile(descriptor.pattern)
        except re.error as e:
            return [*problems, f"{path}: invalid pattern ({e})"]

    if descriptor.allowed_values is not None and not descriptor.allowed_values:
        problems.append(f"{path}: allowed_values is empty")

    if is_blank(descriptor.default):
        return problems

    try:
        coerced = validate_value(descriptor, descriptor.default)
    except CoercionError as e:
        problems.append(f"{path}: default {descriptor.default!r} is invalid ({e})")
        return problems
    if not same_value(coerced, descriptor.default):
        problems.append(
            f"{path}: default {descriptor.default!r} must already be of type "
            f"{descriptor.type.value}"
        )
    return problems
