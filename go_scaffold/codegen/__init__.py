"""
go-scaffold code generation module

Generates feature modules and CRUD entities for Go projects and wires them
into the project's composition root.
"""

from .registry import (
    RegistryError,
    TemplateSetRegistry,
    get_registry,
    get_template_set,
    list_supported_styles,
)
from .core.generator import GeneratorError, TemplateSet
from .core.schema import EntityDescriptor, FieldSpec, ModuleDescriptor
from .core.config import ScaffoldConfig, ConfigManager, load_config
from .collector import FieldSchemaCollector, parse_fields
from .scaffold import (
    Scaffolder,
    ScaffoldResult,
    create_entity,
    create_module,
    retarget_project,
)

# Version info
__version__ = "0.1.0"

__all__ = [
    "RegistryError",
    "TemplateSetRegistry",
    "get_registry",
    "get_template_set",
    "list_supported_styles",
    "GeneratorError",
    "TemplateSet",
    "EntityDescriptor",
    "FieldSpec",
    "ModuleDescriptor",
    "ScaffoldConfig",
    "ConfigManager",
    "load_config",
    "FieldSchemaCollector",
    "parse_fields",
    "Scaffolder",
    "ScaffoldResult",
    "create_entity",
    "create_module",
    "retarget_project",
    "__version__",
]
