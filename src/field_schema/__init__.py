"""Conditional field-schema engine.

Describe a configuration surface as typed fields whose visibility depends on
the values of earlier fields, then resolve a partial value set into one
validated effective configuration.

    schema = Schema(name="demo", version="1.0", fields=(...))
    active = evaluate(schema, {"mode": "advanced"})
    result = resolve(schema, {"mode": "advanced", "depth": "3"})
    if result.ok:
        result.config.get("depth")
"""

from field_schema.coercion import CoercionError, coerce, is_blank, validate_value
from field_schema.errors import (
    ErrorKind,
    ResolutionError,
    SchemaDefinitionError,
    ValidationIssue,
)
from field_schema.lint import lint_fields
from field_schema.resolver import (
    EffectiveConfiguration,
    ResolutionResult,
    ResolvedField,
    resolve,
)
from field_schema.schema import Schema, VersionType
from field_schema.types import (
    FieldDescriptor,
    FieldType,
    FieldValue,
    OptionGroup,
    VisibilityClause,
    show_when,
)
from field_schema.visibility import active_fields, evaluate

__all__ = [
    # Data model
    "FieldType",
    "FieldValue",
    "FieldDescriptor",
    "OptionGroup",
    "VisibilityClause",
    "show_when",
    "Schema",
    "VersionType",
    # Engine
    "evaluate",
    "active_fields",
    "resolve",
    "ResolutionResult",
    "EffectiveConfiguration",
    "ResolvedField",
    "lint_fields",
    # Coercion
    "coerce",
    "validate_value",
    "is_blank",
    "CoercionError",
    # Errors
    "ErrorKind",
    "ValidationIssue",
    "ResolutionError",
    "SchemaDefinitionError",
]
