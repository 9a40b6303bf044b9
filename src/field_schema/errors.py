"""Error taxonomy for schema definition and value resolution.

Schema definition problems are programmer errors and raise at construction
time. Problems with user-supplied values are never raised by the resolver;
they are collected as ``ValidationIssue`` records so every problem can be
reported at once.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SchemaDefinitionError(Exception):
    """Raised when a schema is structurally broken.

    Must not subclass ``ValueError``: the Schema model validator raises it and
    pydantic would otherwise fold it into a ``ValidationError``.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(
            f"Schema definition has {len(problems)} problem(s): {'; '.join(problems)}"
        )


class ErrorKind(StrEnum):
    MISSING_REQUIRED = "missing_required"
    TYPE_MISMATCH = "type_mismatch"
    UNKNOWN_FIELD = "unknown_field"


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message} [{self.kind.value}]"


class ResolutionError(Exception):
    """Raised by ``ResolutionResult.unwrap()`` when resolution produced issues."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(
            f"Resolution failed with {len(issues)} error(s): "
            f"{'; '.join(str(i) for i in issues)}"
        )
