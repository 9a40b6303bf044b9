"""Schema: the ordered, immutable set of fields describing one configuration surface."""

from __future__ import annotations

from typing import Annotated

from packaging.version import Version
from pydantic import BaseModel, ConfigDict, PlainSerializer, PlainValidator, model_validator

from field_schema.lint import raise_for_problems
from field_schema.types import FieldDescriptor, OptionGroup

VersionType = Annotated[
    Version,
    PlainValidator(lambda v: Version(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: str(v)),
]


class Schema(BaseModel):
    """Top-level field descriptors and option groups, in evaluation order.

    Construction runs the linter, so an instance is always structurally sound.
    A broken definition raises ``SchemaDefinitionError``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: VersionType
    description: str = ""
    fields: tuple[OptionGroup | FieldDescriptor, ...]

    @model_validator(mode="after")
    def _lint(self) -> Schema:
        raise_for_problems(self.fields)
        return self

    def get(self, path: str) -> FieldDescriptor | None:
        """Look up a descriptor by dotted path, e.g. ``sslOptions.ca``."""
        scope: tuple[FieldDescriptor, ...] = self.fields
        found: FieldDescriptor | None = None
        for part in path.split("."):
            found = next((f for f in scope if f.name == part), None)
            if found is None:
                return None
            scope = found.fields if isinstance(found, OptionGroup) else ()
        return found

    def paths(self) -> list[str]:
        """Every declared path in declaration order, groups before their children."""
        result: list[str] = []

        def _walk(fields: tuple[FieldDescriptor, ...], prefix: str) -> None:
            for descriptor in fields:
                result.append(prefix + descriptor.name)
                if isinstance(descriptor, OptionGroup):
                    _walk(descriptor.fields, prefix + descriptor.name + ".")

        _walk(self.fields, "")
        return result

    def secret_paths(self) -> frozenset[str]:
        return frozenset(p for p in self.paths() if (d := self.get(p)) is not None and d.secret)

    def __len__(self) -> int:
        return len(self.fields)
