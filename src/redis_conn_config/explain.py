"""Explain capability: deterministic, template-based explanations.

Level 1: explain-field: one field's type, default and visibility conditions,
         and whether it is active for a given value set
Level 2: explain-resolution: every active field with its value and source,
         or every issue that blocked resolution

Secret values are always masked.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel

from field_schema import (
    FieldValue,
    OptionGroup,
    Schema,
    ValidationIssue,
    evaluate,
    is_blank,
    resolve,
)
from field_schema.resolver import REDACTED


class UnknownFieldError(ValueError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Unknown field path '{path}'")


class FieldExplanation(BaseModel):
    """Level 1: Explanation of a single field."""

    path: str
    type: str
    description: str
    default: FieldValue | None
    required: bool
    secret: bool
    conditions: list[str]
    allowed_values: list[FieldValue] | None = None
    active: bool

    def to_text(self) -> str:
        lines = [
            f"Field: {self.path}",
            f"  Type: {self.type}",
            f"  Purpose: {self.description or '-'}",
            f"  Default: {self.default!r}",
            f"  Required when active: {'yes' if self.required else 'no'}",
        ]
        if self.secret:
            lines.append("  Secret: yes (masked in output)")
        if self.allowed_values is not None:
            lines.append(f"  Allowed: {', '.join(repr(v) for v in self.allowed_values)}")
        if self.conditions:
            lines.append("  Visible when:")
            for condition in self.conditions:
                lines.append(f"    {condition}")
        else:
            lines.append("  Visible when: always")
        lines.append(f"  Active for given values: {'yes' if self.active else 'no'}")
        return "\n".join(lines)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


class FieldOutcome(BaseModel):
    path: str
    value: FieldValue | None
    source: Literal["supplied", "default"]


class ResolutionExplanation(BaseModel):
    """Level 2: Explanation of a full resolution."""

    schema_name: str
    schema_version: str
    ok: bool
    active_paths: list[str]
    inactive_supplied: list[str]
    fields: list[FieldOutcome]
    errors: list[ValidationIssue]

    def to_text(self) -> str:
        lines = [
            f"Schema: {self.schema_name} {self.schema_version}",
            f"Outcome: {'resolved' if self.ok else 'failed'}",
            "",
        ]
        if self.errors:
            lines.append(f"Errors ({len(self.errors)}):")
            for issue in self.errors:
                lines.append(f"  {issue}")
            lines.append("")

        if self.fields:
            lines.append(f"Fields ({len(self.fields)}):")
            for f in self.fields:
                lines.append(f"  {f.path} = {f.value!r} ({f.source})")
            lines.append("")

        if self.inactive_supplied:
            lines.append("Ignored (field inactive):")
            for path in self.inactive_supplied:
                lines.append(f"  {path}")
            lines.append("")

        lines.append(f"Active fields: {', '.join(self.active_paths)}")
        return "\n".join(lines)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


def explain_field(
    schema: Schema,
    path: str,
    values: Mapping[str, Any] | None = None,
) -> FieldExplanation:
    descriptor = schema.get(path)
    if descriptor is None:
        raise UnknownFieldError(path)

    # Conditions of enclosing groups apply too
    conditions: list[str] = []
    parts = path.split(".")
    for depth in range(1, len(parts) + 1):
        scope_path = ".".join(parts[:depth])
        scoped = schema.get(scope_path)
        prefix = ".".join(parts[: depth - 1])
        if scoped is None:
            continue
        for clause in scoped.visible_when:
            qualified = f"{prefix}.{clause.describe()}" if prefix else clause.describe()
            conditions.append(qualified)

    default: FieldValue | None = None if isinstance(descriptor, OptionGroup) else descriptor.default
    if descriptor.secret and not is_blank(default):
        default = REDACTED

    return FieldExplanation(
        path=path,
        type=descriptor.type.value,
        description=descriptor.description,
        default=default,
        required=descriptor.required,
        secret=descriptor.secret,
        conditions=conditions,
        allowed_values=list(descriptor.allowed_values)
        if descriptor.allowed_values is not None
        else None,
        active=path in evaluate(schema, values),
    )


def explain_resolution(
    schema: Schema,
    values: Mapping[str, Any] | None = None,
    *,
    strict: bool = False,
) -> ResolutionExplanation:
    values = values or {}
    active = evaluate(schema, values)
    result = resolve(schema, values, strict=strict)

    fields: list[FieldOutcome] = []
    if result.config is not None:
        for resolved in result.config.trace:
            shown = REDACTED if resolved.secret and not is_blank(resolved.value) else resolved.value
            fields.append(FieldOutcome(path=resolved.path, value=shown, source=resolved.source))

    declared = set(schema.paths())
    inactive_supplied = [
        path for path in _supplied_paths(values, "") if path in declared and path not in active
    ]

    return ResolutionExplanation(
        schema_name=schema.name,
        schema_version=str(schema.version),
        ok=result.ok,
        active_paths=[p for p in schema.paths() if p in active],
        inactive_supplied=inactive_supplied,
        fields=fields,
        errors=result.errors,
    )


def _supplied_paths(values: Mapping[str, Any], prefix: str) -> list[str]:
    paths: list[str] = []
    for key, value in values.items():
        path = prefix + str(key)
        if isinstance(value, Mapping):
            paths.extend(_supplied_paths(value, path + "."))
        elif not is_blank(value):
            paths.append(path)
    return paths
