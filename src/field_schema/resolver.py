"""Resolver: turns a partial value set into a validated effective configuration.

The resolution pipeline:
1. Evaluate visibility for each scope
2. Coerce and check supplied values of active fields
3. Substitute defaults for omitted active fields, or record missing required ones
4. Drop values of inactive fields without complaint
5. Recurse into active option groups; omit inactive groups entirely
6. Return either the full configuration or every issue found, never both
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel

from field_schema.coercion import CoercionError, is_blank, validate_value
from field_schema.errors import ErrorKind, ResolutionError, ValidationIssue
from field_schema.schema import VersionType  # noqa: TC001
from field_schema.types import FieldDescriptor, FieldValue, OptionGroup
from field_schema.visibility import active_fields

if TYPE_CHECKING:
    from collections.abc import Sequence

    from field_schema.schema import Schema

logger = logging.getLogger(__name__)

REDACTED = "********"


class ResolvedField(BaseModel):
    path: str
    value: FieldValue | None
    source: Literal["supplied", "default"]
    secret: bool = False


class EffectiveConfiguration(BaseModel):
    """Active fields only, each holding a supplied or default value.

    ``values`` mirrors the schema's shape: option groups become nested dicts.
    ``trace`` records where each scalar value came from.
    """

    schema_name: str
    schema_version: VersionType
    values: dict[str, Any]
    trace: list[ResolvedField]

    def get(self, path: str, default: Any = None) -> Any:
        node: Any = self.values
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def __contains__(self, path: str) -> bool:
        sentinel = object()
        return self.get(path, sentinel) is not sentinel

    def field(self, path: str) -> ResolvedField | None:
        for resolved in self.trace:
            if resolved.path == path:
                return resolved
        return None

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.values)

    def redacted(self) -> dict[str, Any]:
        """Plain dict with secret values masked. Blank secrets stay blank."""
        result = self.as_dict()
        for resolved in self.trace:
            if not resolved.secret or is_blank(resolved.value):
                continue
            *parents, leaf = resolved.path.split(".")
            node = result
            for part in parents:
                node = node[part]
            node[leaf] = REDACTED
        return result


class ResolutionResult(BaseModel):
    config: EffectiveConfiguration | None = None
    errors: list[ValidationIssue] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> EffectiveConfiguration:
        if self.errors or self.config is None:
            raise ResolutionError(self.errors)
        return self.config

    def errors_for(self, path: str) -> list[ValidationIssue]:
        return [e for e in self.errors if e.path == path]


def resolve(
    schema: Schema,
    values: Mapping[str, Any] | None = None,
    *,
    strict: bool = False,
) -> ResolutionResult:
    """Resolve ``values`` against ``schema``.

    With ``strict=True``, keys that the schema does not declare anywhere are
    reported as ``unknown_field``. Otherwise they are ignored.
    """
    values = values or {}
    errors: list[ValidationIssue] = []
    trace: list[ResolvedField] = []

    resolved = _resolve_scope(schema.fields, values, "", errors, trace)
    if strict:
        errors.extend(_unknown_keys(schema.fields, values, ""))

    if errors:
        logger.debug(
            "Resolution of %s %s failed with %d error(s)", schema.name, schema.version, len(errors)
        )
        return ResolutionResult(errors=errors)

    logger.debug(
        "Resolved %s %s: %d active field(s)", schema.name, schema.version, len(trace)
    )
    return ResolutionResult(
        config=EffectiveConfiguration(
            schema_name=schema.name,
            schema_version=schema.version,
            values=resolved,
            trace=trace,
        )
    )


def _resolve_scope(
    fields: Sequence[FieldDescriptor],
    values: Mapping[str, Any],
    prefix: str,
    errors: list[ValidationIssue],
    trace: list[ResolvedField],
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for descriptor in active_fields(fields, values):
        path = prefix + descriptor.name
        raw = values.get(descriptor.name)

        if isinstance(descriptor, OptionGroup):
            if raw is None:
                raw = {}
            elif not isinstance(raw, Mapping):
                errors.append(
                    ValidationIssue(
                        path=path,
                        kind=ErrorKind.TYPE_MISMATCH,
                        message=f"expected a mapping of options, got {type(raw).__name__}",
                    )
                )
                continue
            out[descriptor.name] = _resolve_scope(descriptor.fields, raw, path + ".", errors, trace)
            continue

        if is_blank(raw):
            if descriptor.required and is_blank(descriptor.default):
                errors.append(
                    ValidationIssue(
                        path=path,
                        kind=ErrorKind.MISSING_REQUIRED,
                        message="a value is required",
                    )
                )
                continue
            out[descriptor.name] = descriptor.default
            trace.append(
                ResolvedField(
                    path=path, value=descriptor.default, source="default", secret=descriptor.secret
                )
            )
            continue

        try:
            value = validate_value(descriptor, raw)
        except CoercionError as e:
            errors.append(ValidationIssue(path=path, kind=ErrorKind.TYPE_MISMATCH, message=str(e)))
            continue
        out[descriptor.name] = value
        trace.append(
            ResolvedField(path=path, value=value, source="supplied", secret=descriptor.secret)
        )
    return out


def _unknown_keys(
    fields: Sequence[FieldDescriptor],
    values: Mapping[str, Any],
    prefix: str,
) -> list[ValidationIssue]:
    by_name = {f.name: f for f in fields}
    # inactive groups are ignored wholesale, nested keys included
    active_groups = {
        f.name for f in active_fields(fields, values) if isinstance(f, OptionGroup)
    }
    issues: list[ValidationIssue] = []
    for key, raw in values.items():
        descriptor = by_name.get(key)
        if descriptor is None:
            issues.append(
                ValidationIssue(
                    path=prefix + str(key),
                    kind=ErrorKind.UNKNOWN_FIELD,
                    message="not declared by the schema",
                )
            )
        elif key in active_groups and isinstance(raw, Mapping):
            issues.extend(_unknown_keys(descriptor.fields, raw, prefix + key + "."))
    return issues
