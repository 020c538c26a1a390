"""
Storage-to-Go type system for code generation.

Maps a declared MySQL column type (``VARCHAR(255)``, ``DECIMAL(10,2)`` ...) to
the Go type used by the generated structs, with configuration-driven type
names.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple


class FieldType(Enum):
    """Host type families a storage type can resolve to."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


# Ordered prefix table, first match wins
STORAGE_TYPE_PREFIXES: Tuple[Tuple[str, FieldType], ...] = (
    ("VARCHAR", FieldType.STRING),
    ("CHAR", FieldType.STRING),
    ("TEXT", FieldType.STRING),
    ("MEDIUMTEXT", FieldType.STRING),
    ("LONGTEXT", FieldType.STRING),
    ("TINYTEXT", FieldType.STRING),
    ("INT", FieldType.INTEGER),
    ("TINYINT", FieldType.INTEGER),
    ("SMALLINT", FieldType.INTEGER),
    ("MEDIUMINT", FieldType.INTEGER),
    ("BIGINT", FieldType.INTEGER),
    ("FLOAT", FieldType.FLOAT),
    ("DOUBLE", FieldType.FLOAT),
    ("DECIMAL", FieldType.FLOAT),
    ("BOOL", FieldType.BOOLEAN),
    ("BOOLEAN", FieldType.BOOLEAN),
    ("DATE", FieldType.TIMESTAMP),
    ("DATETIME", FieldType.TIMESTAMP),
    ("TIMESTAMP", FieldType.TIMESTAMP),
)


@dataclass(frozen=True)
class GoType:
    """
    Immutable representation of a resolved Go type.

    Carries everything templates need besides the type name itself: the
    imports it drags in and any hint worth showing the operator.
    """

    name: str  # The Go type name (e.g., "string", "time.Time")
    family: FieldType = FieldType.STRING
    imports_needed: Set[str] = field(default_factory=set)
    is_fallback: bool = False  # Storage type was not recognized
    validation_hints: List[str] = field(default_factory=list)

    @property
    def is_temporal(self) -> bool:
        return self.family == FieldType.TIMESTAMP

    def __str__(self) -> str:
        return self.name


@dataclass
class GoTypeConfig:
    """Configuration for Go type mapping behavior."""

    string_type: str = "string"
    int_type: str = "int"
    float_type: str = "float64"
    bool_type: str = "bool"

    # Time handling
    time_type: str = "time.Time"
    time_import: str = "time"

    # Exact storage-type overrides (upper-cased token -> Go type name)
    type_overrides: Dict[str, str] = field(default_factory=dict)


class GoTypeMapper:
    """
    Resolves storage types to Go types.

    Unrecognized storage types resolve to the string type instead of raising;
    the resolved type carries a hint naming the fallback.
    """

    def __init__(self, config: Optional[GoTypeConfig] = None):
        """Initialize with type configuration."""
        self.config = config or GoTypeConfig()
        self._family_types = self._build_family_type_map()

    def _build_family_type_map(self) -> Dict[FieldType, GoType]:
        """Build mapping of type families to Go types."""
        return {
            FieldType.STRING: GoType(
                name=self.config.string_type, family=FieldType.STRING
            ),
            FieldType.INTEGER: GoType(
                name=self.config.int_type, family=FieldType.INTEGER
            ),
            FieldType.FLOAT: GoType(name=self.config.float_type, family=FieldType.FLOAT),
            FieldType.BOOLEAN: GoType(
                name=self.config.bool_type, family=FieldType.BOOLEAN
            ),
            FieldType.TIMESTAMP: GoType(
                name=self.config.time_type,
                family=FieldType.TIMESTAMP,
                imports_needed={f'"{self.config.time_import}"'},
            ),
        }

    def classify(self, storage_type: str) -> Optional[FieldType]:
        """Return the type family of a storage type, or None if unrecognized."""
        token = storage_type.strip().upper()
        for prefix, family in STORAGE_TYPE_PREFIXES:
            if token.startswith(prefix):
                return family
        return None

    def resolve(self, storage_type: str) -> GoType:
        """
        Map a storage type to a Go type.

        Args:
            storage_type: Column type as declared, e.g. ``DECIMAL(10,2)``

        Returns:
            GoType for the column; the string type for unknown tokens
        """
        token = storage_type.strip().upper()

        if token in self.config.type_overrides:
            return self._override_type(token, self.config.type_overrides[token])

        family = self.classify(token)
        if family is not None:
            return self._family_types[family]

        return self._get_fallback_type(token)

    def _override_type(self, token: str, name: str) -> GoType:
        """Go type of a configured override, keeping the family of a known type name."""
        for go_type in self._family_types.values():
            if go_type.name == name:
                return go_type
        return GoType(name=name, family=self.classify(token) or FieldType.STRING)

    def _get_fallback_type(self, token: str) -> GoType:
        """Fallback type for storage types missing from the prefix table."""
        return GoType(
            name=self.config.string_type,
            family=FieldType.STRING,
            is_fallback=True,
            validation_hints=[
                f"Unknown storage type {token or '<empty>'}, "
                f"using fallback: {self.config.string_type}"
            ],
        )

    def get_all_imports(self, types: List[GoType]) -> Set[str]:
        """Extract all unique imports needed for a list of types."""
        imports = set()
        for go_type in types:
            imports.update(go_type.imports_needed)
        return imports


_default_mapper: Optional[GoTypeMapper] = None


def resolve(storage_type: str) -> GoType:
    """Resolve a storage type with the default type configuration."""
    global _default_mapper
    if _default_mapper is None:
        _default_mapper = GoTypeMapper()
    return _default_mapper.resolve(storage_type)
