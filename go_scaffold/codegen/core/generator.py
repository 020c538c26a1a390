"""
Base template set interface for all architecture styles.

Defines the contract every architecture style implements: which directories
a module gets, which files an entity produces, and which patch targets wire
them into existing files.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ...logging_config import get_logger
from .config import ScaffoldConfig
from .patcher import InsertionMode, PatchTarget
from .schema import EntityDescriptor, FieldSpec, ModuleDescriptor
from .templates import TemplateEngine
from .types import GoTypeMapper

logger = get_logger(__name__)

# Marker comments carried by generated module files; entity runs anchor on them
MARKER_IMPORTS = "// scaffold:imports"
MARKER_MODULE_FIELDS = "// scaffold:module-fields"
MARKER_WIRING = "// scaffold:wiring"
MARKER_MODULE_VALUES = "// scaffold:module-values"
MARKER_ROUTES = "// scaffold:routes"


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class ArtifactKind(Enum):
    """Kinds of files and fragments a template set renders."""

    RECORD = "record"
    REPOSITORY_CONTRACT = "repository_contract"
    REPOSITORY_IMPLEMENTATION = "repository_implementation"
    ORCHESTRATION_UNIT = "orchestration_unit"
    HTTP_HANDLER = "http_handler"
    ROUTE_FRAGMENT = "route_fragment"
    MODULE_WIRING_FRAGMENT = "module_wiring_fragment"
    MODULE_WIRING = "module_wiring"
    ROUTE_TABLE = "route_table"


@dataclass(frozen=True)
class ArtifactTemplate:
    """One file a template set emits.

    ``path_pattern`` is relative to the module directory and may use the
    ``{entity}`` and ``{module}`` placeholders.
    """

    kind: ArtifactKind
    template_name: str
    path_pattern: str
    label: str
    extra_context: Tuple[Tuple[str, Any], ...] = ()

    def resolve_path(self, module_dir: Path, entity_name: str = "", module_name: str = "") -> Path:
        return module_dir / self.path_pattern.format(
            entity=entity_name, module=module_name
        )


@dataclass
class GeneratedFile:
    """A rendered file waiting to be written."""

    path: Path
    content: str
    kind: ArtifactKind
    label: str = ""


@dataclass(frozen=True)
class ColumnBinding:
    """One storage column together with the Go expressions bound to it."""

    column: str
    value: str  # Expression passed to Exec for INSERT/UPDATE
    scan: str  # Destination passed to Scan
    field_spec: Optional[FieldSpec] = None
    placeholder: str = "?"

    @property
    def is_declared(self) -> bool:
        """True for operator-declared fields, False for implicit columns."""
        return self.field_spec is not None


@dataclass(frozen=True)
class ColumnPlan:
    """Ordered column bindings of one entity.

    Every SQL column list, bound-value list and scan list a template emits is
    read from ``bindings``; the lists can not drift apart.
    """

    table: str
    bindings: Tuple[ColumnBinding, ...]

    @property
    def columns(self) -> List[str]:
        return [binding.column for binding in self.bindings]

    @property
    def placeholders(self) -> List[str]:
        return [binding.placeholder for binding in self.bindings]

    @property
    def values(self) -> List[str]:
        return [binding.value for binding in self.bindings]

    @property
    def scans(self) -> List[str]:
        return [binding.scan for binding in self.bindings]

    @property
    def identifier(self) -> ColumnBinding:
        return self.bindings[0]

    @property
    def updatable(self) -> List[ColumnBinding]:
        """Bindings written by UPDATE: declared fields then ``updated_at``."""
        return [
            binding
            for binding in self.bindings
            if binding.is_declared or binding.column == "updated_at"
        ]

    @property
    def assignments(self) -> List[str]:
        """``column = ?`` pairs of the UPDATE statement, in ``updatable`` order."""
        return [f"{binding.column} = {binding.placeholder}" for binding in self.updatable]

    @property
    def declared(self) -> List[ColumnBinding]:
        return [binding for binding in self.bindings if binding.is_declared]


def build_column_plan(
    entity: EntityDescriptor,
    value_format: str,
    scan_format: str,
    id_public_name: str = "ID",
) -> ColumnPlan:
    """
    Build the column plan of an entity in one traversal of its fields.

    Args:
        entity: Entity whose fields are bound
        value_format: Format of the bound value, e.g. ``entity.{public}``
        scan_format: Format of the scan destination, e.g. ``&entity.{public}``
        id_public_name: Public spelling of the identifier (``ID`` or ``Id``)

    Returns:
        ColumnPlan with ``id``, the fields in order, ``created_at``, ``updated_at``
    """
    columns: List[Tuple[str, str, Optional[FieldSpec]]] = [("id", id_public_name, None)]
    for spec in entity.fields:
        columns.append((spec.column_name, spec.public_name, spec))
    columns.append(("created_at", "CreatedAt", None))
    columns.append(("updated_at", "UpdatedAt", None))

    bindings = tuple(
        ColumnBinding(
            column=column,
            value=value_format.format(public=public),
            scan=scan_format.format(public=public),
            field_spec=spec,
        )
        for column, public, spec in columns
    )
    return ColumnPlan(table=entity.table_name, bindings=bindings)


@dataclass(frozen=True)
class ModuleRegistration:
    """How a module is imported and referenced from the composition root."""

    import_alias: str
    import_path: str
    route_alias: str
    route_import_path: str


class TemplateSet(ABC):
    """Abstract base class for all architecture styles."""

    # Path (relative to a module) whose presence identifies the style
    marker_directory: str = ""

    def __init__(self, config: Optional[ScaffoldConfig] = None):
        """Initialize template set with optional configuration."""
        self.config = config or ScaffoldConfig()
        self._template_engine: Optional[TemplateEngine] = None
        self.type_mapper = GoTypeMapper(self.config.type_config())

    @property
    @abstractmethod
    def style_name(self) -> str:
        """Return the registry key of the style (e.g., 'flat')."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a one-line description shown in menus."""
        pass

    @abstractmethod
    def get_template_directory(self) -> Path:
        """Return the directory holding the ``*.go.j2`` templates of this style."""
        pass

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this template set."""
        if self._template_engine is None:
            self._template_engine = TemplateEngine(self.get_template_directory())
        return self._template_engine

    # Layout

    @abstractmethod
    def module_directories(self) -> List[str]:
        """Directories (relative to the module) created by the module tool."""
        pass

    @abstractmethod
    def module_artifacts(self) -> List[ArtifactTemplate]:
        """Files emitted once per module (wiring and route table)."""
        pass

    @abstractmethod
    def entity_artifacts(self) -> List[ArtifactTemplate]:
        """Files emitted once per entity."""
        pass

    @abstractmethod
    def wiring_file(self) -> str:
        """Path of the module wiring file relative to the module directory."""
        pass

    @abstractmethod
    def route_file(self) -> str:
        """Path of the module route table relative to the module directory."""
        pass

    @abstractmethod
    def registration(self, module: ModuleDescriptor) -> ModuleRegistration:
        """Import aliases and paths used by the composition root."""
        pass

    @abstractmethod
    def column_plan(self, entity: EntityDescriptor) -> ColumnPlan:
        """Column plan with this style's value and scan expressions."""
        pass

    @abstractmethod
    def entity_imports(self, module: ModuleDescriptor) -> Dict[str, List[str]]:
        """Import lines an entity adds to the wiring and route files.

        Returns a mapping with the keys ``wiring`` and ``routes``.
        """
        pass

    def detect(self, module_dir: Path) -> bool:
        """Check whether an existing module directory uses this style."""
        return bool(self.marker_directory) and (module_dir / self.marker_directory).is_dir()

    # Rendering

    def build_context(
        self, module: ModuleDescriptor, entity: Optional[EntityDescriptor] = None
    ) -> Dict[str, Any]:
        """Template variables shared by every artifact of a run."""
        context: Dict[str, Any] = {
            "module": module,
            "path_prefix": module.path_prefix,
            "import_root": module.import_root,
            "shared_root": f"{module.path_prefix}/{module.internal_dir}/shared",
            "markers": {
                "imports": MARKER_IMPORTS,
                "module_fields": MARKER_MODULE_FIELDS,
                "wiring": MARKER_WIRING,
                "module_values": MARKER_MODULE_VALUES,
                "routes": MARKER_ROUTES,
            },
            "config": self.config,
        }
        if entity is not None:
            context.update(
                {
                    "entity": entity,
                    "fields": entity.fields,
                    "plan": self.column_plan(entity),
                    "field_imports": sorted(
                        self.type_mapper.get_all_imports(
                            [spec.go_type for spec in entity.fields]
                        )
                    ),
                    "time_import": self.config.time_import,
                }
            )
        return context

    def render_artifact(
        self,
        artifact: ArtifactTemplate,
        module_dir: Path,
        context: Dict[str, Any],
    ) -> GeneratedFile:
        """Render one artifact into a GeneratedFile."""
        entity = context.get("entity")
        module = context["module"]
        local_context = dict(context)
        local_context.update(dict(artifact.extra_context))

        content = self.render_template(artifact.template_name, local_context)
        path = artifact.resolve_path(
            module_dir,
            entity_name=entity.lower_name if entity is not None else "",
            module_name=module.name,
        )
        return GeneratedFile(
            path=path,
            content=self.format_code(content),
            kind=artifact.kind,
            label=artifact.label,
        )

    def emit_module(self, module: ModuleDescriptor, module_dir: Path) -> List[GeneratedFile]:
        """Render the files of a new, empty module."""
        context = self.build_context(module)
        return [
            self.render_artifact(artifact, module_dir, context)
            for artifact in self.module_artifacts()
        ]

    def emit(
        self, entity: EntityDescriptor, module: ModuleDescriptor, module_dir: Path
    ) -> List[GeneratedFile]:
        """
        Render every file of an entity.

        Args:
            entity: Entity with its frozen field list
            module: Module receiving the entity
            module_dir: Directory of the module on disk

        Returns:
            One GeneratedFile per entity artifact, nothing written yet
        """
        if not entity.fields:
            raise GeneratorError(f"Entity '{entity.raw_name}' has no fields")

        context = self.build_context(module, entity)
        files = [
            self.render_artifact(artifact, module_dir, context)
            for artifact in self.entity_artifacts()
        ]
        logger.debug(
            "Rendered %d %s files for entity %s",
            len(files),
            self.style_name,
            entity.pascal_name,
        )
        return files

    # Patching

    def entity_patch_targets(
        self, entity: EntityDescriptor, module: ModuleDescriptor, module_dir: Path
    ) -> List[PatchTarget]:
        """Patch targets wiring an entity into its module's wiring and route files."""
        context = self.build_context(module, entity)
        wiring_path = module_dir / self.wiring_file()
        routes_path = module_dir / self.route_file()
        imports = self.entity_imports(module)
        name = entity.pascal_name

        targets: List[PatchTarget] = []

        for line in imports["wiring"]:
            targets.append(
                PatchTarget(
                    file_path=wiring_path,
                    anchor=MARKER_IMPORTS,
                    payload=f"\t{line}",
                    mode=InsertionMode.BEFORE,
                    description=f"Import {line}",
                )
            )

        targets.append(
            PatchTarget(
                file_path=wiring_path,
                anchor=MARKER_MODULE_FIELDS,
                payload=f"\t{name}Controller *controllers.{name}Controller",
                mode=InsertionMode.BEFORE,
                description=f"{name}Controller field",
            )
        )
        targets.append(
            PatchTarget(
                file_path=wiring_path,
                anchor=MARKER_WIRING,
                payload=self._render_fragment(ArtifactKind.MODULE_WIRING_FRAGMENT, context),
                mode=InsertionMode.BEFORE,
                guard=f"{entity.camel_name}Controller := controllers.New{name}Controller(",
                description=f"{name} wiring",
            )
        )
        targets.append(
            PatchTarget(
                file_path=wiring_path,
                anchor=MARKER_MODULE_VALUES,
                payload=f"\t\t{name}Controller: {entity.camel_name}Controller,",
                mode=InsertionMode.BEFORE,
                description=f"{name}Controller value",
            )
        )

        for line in imports["routes"]:
            targets.append(
                PatchTarget(
                    file_path=routes_path,
                    anchor=MARKER_IMPORTS,
                    payload=f"\t{line}",
                    mode=InsertionMode.BEFORE,
                    description=f"Import {line}",
                )
            )

        targets.append(
            PatchTarget(
                file_path=routes_path,
                anchor=MARKER_ROUTES,
                payload=self._render_fragment(ArtifactKind.ROUTE_FRAGMENT, context),
                mode=InsertionMode.BEFORE,
                guard=f"module.{name}Controller.Create(",
                description=f"{name} routes",
            )
        )
        return targets

    def composition_patch_targets(
        self, module: ModuleDescriptor, project_root: Path
    ) -> List[PatchTarget]:
        """Patch targets wiring a new module into the composition root."""
        reg = self.registration(module)
        container = project_root / self.config.container_file
        routes = project_root / self.config.routes_file
        struct = module.struct_name
        variable = f"{module.camel_name}Module"

        return [
            PatchTarget(
                file_path=container,
                anchor=self.config.import_anchor,
                payload=f'\t{reg.import_alias} "{reg.import_path}"',
                guard=f'"{reg.import_path}"',
                description="Module import",
            ),
            PatchTarget(
                file_path=container,
                anchor=self.config.container_struct_anchor,
                payload=f"\t{struct} *{reg.import_alias}.{struct}",
                description="Container field",
            ),
            PatchTarget(
                file_path=container,
                anchor=self.config.container_init_anchor,
                payload=f"\t{variable} := {reg.import_alias}.New{struct}(db)",
                description="Module initialization",
            ),
            PatchTarget(
                file_path=container,
                anchor=self.config.container_return_anchor,
                payload=f"\t\t{struct}: {variable},",
                description="Container return value",
            ),
            PatchTarget(
                file_path=routes,
                anchor=self.config.import_anchor,
                payload=f'\t{reg.route_alias} "{reg.route_import_path}"',
                guard=f'"{reg.route_import_path}"',
                description="Route import",
            ),
            PatchTarget(
                file_path=routes,
                anchor=self.config.routes_anchor,
                payload=f"\t\t{reg.route_alias}.RegisterRoutes(router, c.{struct})",
                description="Route registration",
            ),
        ]

    def fragment_templates(self) -> Dict[ArtifactKind, str]:
        """Templates of the fragments patched into the module wiring and route files."""
        return {
            ArtifactKind.MODULE_WIRING_FRAGMENT: "wiring_fragment.go.j2",
            ArtifactKind.ROUTE_FRAGMENT: "route_fragment.go.j2",
        }

    def _render_fragment(self, kind: ArtifactKind, context: Dict[str, Any]) -> str:
        template_name = self.fragment_templates().get(kind)
        if template_name is None:
            raise GeneratorError(f"No {kind.value} template in style {self.style_name}")
        return self.render_template(template_name, context).rstrip("\n")

    def format_code(self, code: str) -> str:
        """
        Apply basic formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code ending with a single newline
        """
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 1:  # gofmt keeps at most one blank line
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        return self.template_engine.render_template(template_name, context)
