"""
Core scaffolding components.

Provides the naming and type pipeline, the entity schema, configuration,
templating, file emission and composition-root patching shared by every
architecture style.
"""

from .generator import (
    ArtifactKind,
    ColumnPlan,
    GeneratedFile,
    GeneratorError,
    TemplateSet,
    build_column_plan,
)
from .schema import (
    ArchitectureStyle,
    EntityDescriptor,
    FieldSpec,
    FieldSpecError,
    ModuleDescriptor,
)
from .naming import NameForms, normalize
from .types import FieldType, GoType, GoTypeMapper
from .config import ScaffoldConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, comma_list
from .patcher import (
    AnchorNotFoundError,
    CompositionPatcher,
    PatchError,
    PatchTarget,
    PatchTargetMissingError,
)

__all__ = [
    # Template sets and emission
    "ArtifactKind",
    "ColumnPlan",
    "GeneratedFile",
    "GeneratorError",
    "TemplateSet",
    "build_column_plan",
    # Entity schema
    "ArchitectureStyle",
    "EntityDescriptor",
    "FieldSpec",
    "FieldSpecError",
    "ModuleDescriptor",
    # Naming and types
    "NameForms",
    "normalize",
    "FieldType",
    "GoType",
    "GoTypeMapper",
    # Configuration system
    "ScaffoldConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "comma_list",
    # Composition-root patching
    "AnchorNotFoundError",
    "CompositionPatcher",
    "PatchError",
    "PatchTarget",
    "PatchTargetMissingError",
]
