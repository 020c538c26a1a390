"""
Scaffolding runs.

A run validates its preconditions, renders every file and plans every patch
in memory, and only then touches the disk. A missing anchor or an existing
target therefore aborts the run with the project unchanged.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..logging_config import get_logger
from ..utils import (
    PreconditionError,
    ProjectError,
    ScaffoldError,
    iter_go_files,
    list_modules,
    read_module_path,
)
from .collector import parse_fields
from .core.config import ScaffoldConfig, load_config
from .core.generator import ColumnPlan, GeneratedFile, TemplateSet
from .core.naming import normalize
from .core.patcher import CompositionPatcher, PatchOutcome, PatchPlan
from .core.schema import EntityDescriptor, FieldSpec, ModuleDescriptor
from .core.types import GoTypeMapper
from .registry import TemplateSetRegistry, get_registry

logger = get_logger(__name__)

__all__ = [
    "ModuleInfo",
    "RetargetResult",
    "ScaffoldResult",
    "Scaffolder",
    "ScaffoldError",
    "PreconditionError",
    "ProjectError",
    "create_entity",
    "create_module",
    "retarget_project",
]


@dataclass
class ScaffoldResult:
    """What a module or entity run wrote."""

    module: ModuleDescriptor
    style: str
    module_dir: Path
    created_files: List[Path] = field(default_factory=list)
    created_dirs: List[Path] = field(default_factory=list)
    patched_files: List[Path] = field(default_factory=list)
    patch_outcomes: List[PatchOutcome] = field(default_factory=list)
    entity: Optional[EntityDescriptor] = None
    column_plan: Optional[ColumnPlan] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def skipped_patches(self) -> List[PatchOutcome]:
        return [outcome for outcome in self.patch_outcomes if not outcome.applied]


@dataclass
class ModuleInfo:
    """One feature module found in the project."""

    name: str
    path: Path
    style: Optional[str]
    wired: bool


@dataclass
class RetargetResult:
    """Outcome of rewriting the Go module path."""

    old_path: str
    new_path: str
    changed_files: List[Path] = field(default_factory=list)


class Scaffolder:
    """Runs module and entity generation against one Go project."""

    def __init__(
        self,
        project_root: Union[str, Path],
        config: Optional[ScaffoldConfig] = None,
        registry: Optional[TemplateSetRegistry] = None,
    ):
        self.project_root = Path(project_root)
        self.config = config or load_config(project_root=self.project_root)
        self.registry = registry or get_registry()
        self.patcher = CompositionPatcher()
        self.type_mapper = GoTypeMapper(self.config.type_config())
        self._module_path: Optional[str] = None

        for warning in self.config.validate():
            logger.warning("Configuration: %s", warning)

    @property
    def module_path(self) -> str:
        """Go module path of the project, read once from go.mod."""
        if self._module_path is None:
            self._module_path = read_module_path(self.project_root)
            logger.info("Project module path: %s", self._module_path)
        return self._module_path

    @property
    def container_file(self) -> Path:
        return self.project_root / self.config.container_file

    def module_dir(self, module_name: str) -> Path:
        return self.project_root / self.config.internal_dir / module_name

    def template_set(self, style: str) -> TemplateSet:
        return self.registry.create_template_set(style, self.config)

    def require_module(self, module_name: str) -> str:
        """
        Normalized name of an existing module.

        Raises:
            PreconditionError: Empty name or no such module directory
        """
        module_key = normalize(module_name).snake
        if not module_key:
            raise PreconditionError("Module name cannot be empty")

        module_dir = self.module_dir(module_key)
        if not module_dir.is_dir():
            raise PreconditionError(
                f"Module '{module_key}' does not exist at {module_dir}; "
                "create the module first"
            )
        return module_key

    def detect_style(self, module_name: str) -> Optional[str]:
        """Architecture of an existing module, or None if undetectable."""
        return self.registry.detect_style(self.module_dir(module_name), self.config)

    # Inspection

    def list_modules(self) -> List[ModuleInfo]:
        """Existing feature modules with their style and wiring state."""
        modules = []
        for name in list_modules(
            self.project_root, self.config.internal_dir, self.config.excluded_modules
        ):
            style = self.detect_style(name)
            modules.append(
                ModuleInfo(
                    name=name,
                    path=self.module_dir(name),
                    style=style,
                    wired=self._module_is_wired(name, style),
                )
            )
        return modules

    def _module_is_wired(self, module_name: str, style: Optional[str]) -> bool:
        if not self.container_file.is_file():
            return False
        container = self.container_file.read_text(encoding="utf-8")

        styles = [style] if style else self.registry.list_styles()
        descriptor = ModuleDescriptor(
            name=module_name,
            path_prefix=self.module_path,
            internal_dir=self.config.internal_dir,
        )
        for key in styles:
            registration = self.template_set(key).registration(descriptor)
            if f'"{registration.import_path}"' in container:
                return True
        return False

    # Module runs

    def create_module(self, name: str, style: str) -> ScaffoldResult:
        """
        Create an empty feature module and wire it into the composition root.

        Args:
            name: Module name in any casing
            style: Registered style key or alias (``flat``, ``1``, ``ddd`` ...)

        Returns:
            ScaffoldResult describing every write

        Raises:
            PreconditionError: Empty or reserved name, existing module
            RegistryError: Unknown style
            PatchError: Missing composition-root file or anchor
        """
        module_name = normalize(name).snake
        if not module_name:
            raise PreconditionError("Module name cannot be empty")
        if module_name in self.config.excluded_modules:
            raise PreconditionError(
                f"'{module_name}' is reserved for project infrastructure"
            )

        template_set = self.template_set(style)
        module = ModuleDescriptor(
            name=module_name,
            path_prefix=self.module_path,
            architecture_style=template_set.style_name,
            internal_dir=self.config.internal_dir,
        )
        module_dir = self.module_dir(module.name)

        if module_dir.exists():
            if self._module_is_wired(module.name, None):
                raise PreconditionError(
                    f"Module '{module.name}' already exists at {module_dir}"
                )
            raise PreconditionError(
                f"Module directory {module_dir} exists but is not referenced by "
                f"{self.config.container_file}; a previous run was probably "
                "interrupted. Remove the directory or wire it manually"
            )

        files = template_set.emit_module(module, module_dir)
        plan = self.patcher.plan(
            template_set.composition_patch_targets(module, self.project_root)
        )

        directories = [module_dir / sub for sub in template_set.module_directories()]
        result = ScaffoldResult(
            module=module, style=template_set.style_name, module_dir=module_dir
        )
        self._write(result, directories, files, plan)
        logger.info("Module %s created (%s)", module.name, module.architecture_style)
        return result

    # Entity runs

    def create_entity(
        self,
        module_name: str,
        entity_name: str,
        fields: Sequence[Union[FieldSpec, str]],
        style: Optional[str] = None,
    ) -> ScaffoldResult:
        """
        Generate CRUD code for an entity inside an existing module.

        Args:
            module_name: Existing module
            entity_name: Entity name in any casing
            fields: Collected FieldSpecs, or ``name:TYPE`` strings
            style: Style of the module; detected from its layout if None

        Returns:
            ScaffoldResult with the entity and its column plan

        Raises:
            PreconditionError: Missing module, undetectable or conflicting
                style, empty entity name, no fields, existing entity files
            PatchError: Missing wiring/route file or marker
        """
        module_key = self.require_module(module_name)
        module_dir = self.module_dir(module_key)

        style_key = self._entity_style(module_key, style)
        template_set = self.template_set(style_key)

        if not normalize(entity_name).snake:
            raise PreconditionError("Entity name cannot be empty")

        specs = self._as_field_specs(fields)
        entity = EntityDescriptor.create(
            entity_name, specs, table_suffix=self.config.table_suffix
        )
        module = ModuleDescriptor(
            name=module_key,
            path_prefix=self.module_path,
            architecture_style=style_key,
            internal_dir=self.config.internal_dir,
        )

        files = template_set.emit(entity, module, module_dir)
        self._check_entity_targets(entity, template_set, module_dir, files)
        plan = self.patcher.plan(
            template_set.entity_patch_targets(entity, module, module_dir)
        )

        result = ScaffoldResult(
            module=module,
            style=style_key,
            module_dir=module_dir,
            entity=entity,
            column_plan=template_set.column_plan(entity),
        )
        result.warnings.extend(
            hint for spec in entity.fields for hint in spec.go_type.validation_hints
        )
        self._write(result, [], files, plan)
        logger.info("Entity %s created in module %s", entity.pascal_name, module.name)
        return result

    def _entity_style(self, module_name: str, style: Optional[str]) -> str:
        detected = self.detect_style(module_name)

        if style is None:
            if detected is None:
                raise PreconditionError(
                    f"Could not detect the architecture of module '{module_name}'"
                )
            return detected

        requested = self.registry.resolve_key(style)
        if detected is not None and detected != requested:
            raise PreconditionError(
                f"Module '{module_name}' uses the {detected} layout, not {requested}"
            )
        return requested

    def _as_field_specs(
        self, fields: Sequence[Union[FieldSpec, str]]
    ) -> Tuple[FieldSpec, ...]:
        if fields and all(isinstance(item, FieldSpec) for item in fields):
            return tuple(fields)
        tokens = [item.raw_input if isinstance(item, FieldSpec) else item for item in fields]
        return parse_fields(tokens, self.type_mapper)

    def _check_entity_targets(
        self,
        entity: EntityDescriptor,
        template_set: TemplateSet,
        module_dir: Path,
        files: List[GeneratedFile],
    ):
        existing = [generated.path for generated in files if generated.path.exists()]
        if not existing:
            return

        wiring_path = module_dir / template_set.wiring_file()
        wiring = wiring_path.read_text(encoding="utf-8") if wiring_path.is_file() else ""
        listing = ", ".join(str(path.relative_to(self.project_root)) for path in existing)

        if f"{entity.pascal_name}Controller" in wiring:
            raise PreconditionError(
                f"Entity '{entity.pascal_name}' already exists ({listing})"
            )
        raise PreconditionError(
            f"Files of entity '{entity.pascal_name}' exist but are not wired into "
            f"{wiring_path.name}; a previous run was probably interrupted ({listing})"
        )

    # Writing

    def _write(
        self,
        result: ScaffoldResult,
        directories: List[Path],
        files: List[GeneratedFile],
        plan: PatchPlan,
    ):
        try:
            for directory in directories:
                directory.mkdir(parents=True, exist_ok=True)
                result.created_dirs.append(directory)

            for generated in files:
                generated.path.parent.mkdir(parents=True, exist_ok=True)
                generated.path.write_text(generated.content, encoding="utf-8")
                result.created_files.append(generated.path)
                logger.debug("Wrote %s", generated.path)

            result.patched_files.extend(self.patcher.commit(plan))
        except OSError as e:
            written = ", ".join(str(path) for path in result.created_files) or "none"
            raise ScaffoldError(
                f"Writing failed: {e}. Files written before the failure: {written}"
            ) from e

        result.patch_outcomes.extend(plan.outcomes)
        result.warnings.extend(outcome.message for outcome in plan.skipped)


# Module path rewriting


def _module_path_pattern(module_path: str) -> "re.Pattern[str]":
    return re.compile(re.escape(module_path) + r'(?=[/"\s`]|$)', re.MULTILINE)


def retarget_project(project_root: Union[str, Path], new_path: str) -> RetargetResult:
    """
    Rewrite the Go module path in go.mod and every .go file.

    Args:
        project_root: Project root holding go.mod
        new_path: New module path, e.g. ``github.com/acme/shop``

    Returns:
        RetargetResult listing the rewritten files

    Raises:
        PreconditionError: If the new path is empty or contains whitespace
        ProjectError: If go.mod is missing or has no module line
    """
    root = Path(project_root)
    new_path = new_path.strip()
    if not new_path or re.search(r"\s", new_path):
        raise PreconditionError(f"Invalid module path: {new_path!r}")

    old_path = read_module_path(root)
    result = RetargetResult(old_path=old_path, new_path=new_path)
    if old_path == new_path:
        logger.warning("Module path is already %s", new_path)
        return result

    pattern = _module_path_pattern(old_path)
    targets = [root / "go.mod", *iter_go_files(root)]

    rewritten = {}
    for path in targets:
        content = path.read_text(encoding="utf-8")
        updated = pattern.sub(new_path, content)
        if updated != content:
            rewritten[path] = updated

    for path, content in rewritten.items():
        path.write_text(content, encoding="utf-8")
        result.changed_files.append(path)
        logger.debug("Rewrote module path in %s", path)

    logger.info(
        "Module path changed from %s to %s in %d files",
        old_path,
        new_path,
        len(result.changed_files),
    )
    return result


# Convenience functions


def create_module(
    project_root: Union[str, Path],
    name: str,
    style: str,
    config: Optional[ScaffoldConfig] = None,
) -> ScaffoldResult:
    """Create a module with a one-off Scaffolder."""
    return Scaffolder(project_root, config).create_module(name, style)


def create_entity(
    project_root: Union[str, Path],
    module_name: str,
    entity_name: str,
    fields: Sequence[Union[FieldSpec, str]],
    style: Optional[str] = None,
    config: Optional[ScaffoldConfig] = None,
) -> ScaffoldResult:
    """Create an entity with a one-off Scaffolder."""
    return Scaffolder(project_root, config).create_entity(
        module_name, entity_name, fields, style
    )
