"""
Flat (4-tier) template set.

A module holds ``models/``, ``repositories/``, ``services/`` and
``controllers/`` side by side; the module package itself owns ``module.go``
and ``routes.go``.
"""

from pathlib import Path
from typing import Dict, List

from ...core.generator import (
    ArtifactKind,
    ArtifactTemplate,
    ColumnPlan,
    ModuleRegistration,
    TemplateSet,
    build_column_plan,
)
from ...core.schema import ArchitectureStyle, EntityDescriptor, ModuleDescriptor


class FlatTemplateSet(TemplateSet):
    """Template set for the flat 4-tier layout."""

    marker_directory = "models"

    @property
    def style_name(self) -> str:
        return ArchitectureStyle.FLAT.value

    @property
    def description(self) -> str:
        return "4-tier (simplified) - For simple CRUD operations"

    def get_template_directory(self) -> Path:
        """Return the flat templates directory."""
        return Path(__file__).parent / "templates"

    def module_directories(self) -> List[str]:
        return ["models", "repositories", "services", "controllers"]

    def module_artifacts(self) -> List[ArtifactTemplate]:
        return [
            ArtifactTemplate(
                ArtifactKind.MODULE_WIRING, "module.go.j2", "module.go", "module.go"
            ),
            ArtifactTemplate(
                ArtifactKind.ROUTE_TABLE, "routes.go.j2", "routes.go", "routes.go"
            ),
        ]

    def entity_artifacts(self) -> List[ArtifactTemplate]:
        return [
            ArtifactTemplate(
                ArtifactKind.RECORD, "model.go.j2", "models/{entity}.go", "model"
            ),
            ArtifactTemplate(
                ArtifactKind.REPOSITORY_IMPLEMENTATION,
                "repository.go.j2",
                "repositories/{entity}_repository.go",
                "repository",
            ),
            ArtifactTemplate(
                ArtifactKind.ORCHESTRATION_UNIT,
                "service.go.j2",
                "services/{entity}_service.go",
                "service",
            ),
            ArtifactTemplate(
                ArtifactKind.HTTP_HANDLER,
                "controller.go.j2",
                "controllers/{entity}_controller.go",
                "controller",
            ),
        ]

    def wiring_file(self) -> str:
        return "module.go"

    def route_file(self) -> str:
        return "routes.go"

    def registration(self, module: ModuleDescriptor) -> ModuleRegistration:
        # The module directory is itself the Go package
        return ModuleRegistration(
            import_alias=module.name,
            import_path=module.import_root,
            route_alias=module.name,
            route_import_path=module.import_root,
        )

    def column_plan(self, entity: EntityDescriptor) -> ColumnPlan:
        return build_column_plan(
            entity,
            value_format="entity.{public}",
            scan_format="&entity.{public}",
            id_public_name="ID",
        )

    def entity_imports(self, module: ModuleDescriptor) -> Dict[str, List[str]]:
        root = module.import_root
        shared = f"{module.path_prefix}/{module.internal_dir}/shared"
        return {
            "wiring": [
                f'"{root}/controllers"',
                f'"{root}/repositories"',
                f'"{root}/services"',
            ],
            "routes": [f'"{shared}/web/context"'],
        }
