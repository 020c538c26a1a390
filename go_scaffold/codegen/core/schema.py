"""
Core data model for scaffolding runs.

A run collects one ``EntityDescriptor`` (or only a ``ModuleDescriptor`` for
the module tool), hands it to a template set and discards it afterwards.
Nothing here is persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .naming import NameForms, normalize
from .types import GoType, GoTypeMapper

FIELD_SEPARATOR = ":"

# Columns every generated table carries besides the declared fields
IMPLICIT_COLUMNS = ("id", "created_at", "updated_at")


class ArchitectureStyle(Enum):
    """Built-in module layouts."""

    FLAT = "flat"  # models / repositories / services / controllers
    LAYERED = "layered"  # core/domain, core/application, infra


class FieldSpecError(ValueError):
    """Raised when a ``name:TYPE`` token cannot be turned into a field."""

    pass


@dataclass(frozen=True)
class FieldSpec:
    """One declared attribute of an entity.

    All derived values are computed once in ``parse`` and reused verbatim by
    every template.
    """

    raw_input: str
    storage_type: str
    go_type: GoType
    names: NameForms

    @property
    def host_type(self) -> str:
        return self.go_type.name

    @property
    def column_name(self) -> str:
        return self.names.snake

    @property
    def private_name(self) -> str:
        return self.names.camel

    @property
    def public_name(self) -> str:
        return self.names.pascal

    @classmethod
    def parse(
        cls, raw_input: str, type_mapper: Optional[GoTypeMapper] = None
    ) -> "FieldSpec":
        """
        Build a field from operator input of the form ``name:TYPE``.

        Args:
            raw_input: Text exactly as typed, e.g. ``price:decimal(10,2)``
            type_mapper: Resolver for the storage type (default config if None)

        Returns:
            Fully derived FieldSpec

        Raises:
            FieldSpecError: If the separator, the name or the type is missing
        """
        text = raw_input.strip()
        if FIELD_SEPARATOR not in text:
            raise FieldSpecError(
                f"Invalid field '{text}': expected format field_name:TYPE"
            )

        name_part, type_part = text.split(FIELD_SEPARATOR, 1)
        names = normalize(name_part.strip())
        storage_type = type_part.strip().upper()

        if not names.snake:
            raise FieldSpecError(f"Invalid field '{text}': field name is empty")
        if not storage_type:
            raise FieldSpecError(f"Invalid field '{text}': storage type is empty")

        mapper = type_mapper or GoTypeMapper()
        return cls(
            raw_input=raw_input,
            storage_type=storage_type,
            go_type=mapper.resolve(storage_type),
            names=names,
        )


@dataclass(frozen=True)
class EntityDescriptor:
    """One scaffolded business object with its ordered fields."""

    raw_name: str
    names: NameForms
    fields: Tuple[FieldSpec, ...]
    table_suffix: str = "s"

    @classmethod
    def create(
        cls, raw_name: str, fields, table_suffix: str = "s"
    ) -> "EntityDescriptor":
        """Freeze a collected field list into a descriptor."""
        return cls(
            raw_name=raw_name,
            names=normalize(raw_name),
            fields=tuple(fields),
            table_suffix=table_suffix,
        )

    @property
    def lower_name(self) -> str:
        return self.names.snake

    @property
    def camel_name(self) -> str:
        return self.names.camel

    @property
    def pascal_name(self) -> str:
        return self.names.pascal

    @property
    def table_name(self) -> str:
        return f"{self.names.snake}{self.table_suffix}"

    @property
    def route_path(self) -> str:
        return f"/{self.table_name}"

    @property
    def has_temporal_field(self) -> bool:
        return any(spec.go_type.is_temporal for spec in self.fields)


@dataclass
class ModuleDescriptor:
    """The feature module a run targets."""

    name: str
    path_prefix: str  # Go module path read from go.mod
    architecture_style: str = ArchitectureStyle.FLAT.value
    internal_dir: str = "internal"
    names: NameForms = field(init=False)

    def __post_init__(self):
        self.names = normalize(self.name)
        # Go package names are the snake spelling of the module
        self.name = self.names.snake

    @property
    def pascal_name(self) -> str:
        return self.names.pascal

    @property
    def camel_name(self) -> str:
        return self.names.camel

    @property
    def struct_name(self) -> str:
        return f"{self.names.pascal}Module"

    @property
    def import_root(self) -> str:
        return f"{self.path_prefix}/{self.internal_dir}/{self.name}"
