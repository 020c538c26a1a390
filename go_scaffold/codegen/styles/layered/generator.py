"""
Layered (DDD) template set.

Domain entities live in ``core/domain``, repository contracts and use cases
in ``core/application``, and the MySQL repositories, controllers, wiring and
routes in ``infra``.
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

# One use case file per operation, in the order they are emitted and wired
USE_CASE_OPERATIONS = ("create", "get", "list", "update", "delete")


class LayeredTemplateSet(TemplateSet):
    """Template set for the layered (DDD / clean architecture) layout."""

    marker_directory = "core/domain"

    @property
    def style_name(self) -> str:
        return ArchitectureStyle.LAYERED.value

    @property
    def description(self) -> str:
        return "DDD (Clean Architecture) - For complex business logic"

    def get_template_directory(self) -> Path:
        """Return the layered templates directory."""
        return Path(__file__).parent / "templates"

    def module_directories(self) -> List[str]:
        return [
            "core/application/repositories",
            "core/application/usecases",
            "core/domain/entities",
            "infra/repositories",
            "infra/web/controllers",
        ]

    def module_artifacts(self) -> List[ArtifactTemplate]:
        return [
            ArtifactTemplate(
                ArtifactKind.MODULE_WIRING,
                "module.go.j2",
                "infra/module.go",
                "infra/module.go",
            ),
            ArtifactTemplate(
                ArtifactKind.ROUTE_TABLE,
                "routes.go.j2",
                "infra/web/routes.go",
                "infra/web/routes.go",
            ),
        ]

    def entity_artifacts(self) -> List[ArtifactTemplate]:
        artifacts = [
            ArtifactTemplate(
                ArtifactKind.RECORD,
                "entity.go.j2",
                "core/domain/entities/{entity}.go",
                "entity",
            ),
            ArtifactTemplate(
                ArtifactKind.REPOSITORY_CONTRACT,
                "repository_contract.go.j2",
                "core/application/repositories/{entity}_repository.go",
                "repository interface",
            ),
            ArtifactTemplate(
                ArtifactKind.REPOSITORY_IMPLEMENTATION,
                "mysql_repository.go.j2",
                "infra/repositories/{entity}_mysql_repository.go",
                "repository implementation",
            ),
        ]

        for operation in USE_CASE_OPERATIONS:
            artifacts.append(
                ArtifactTemplate(
                    ArtifactKind.ORCHESTRATION_UNIT,
                    f"usecases/{operation}.go.j2",
                    f"core/application/usecases/{operation}_{{entity}}.go",
                    f"{operation} use case",
                    extra_context=(("operation", operation),),
                )
            )

        artifacts.append(
            ArtifactTemplate(
                ArtifactKind.HTTP_HANDLER,
                "controller.go.j2",
                "infra/web/controllers/{entity}_controller.go",
                "controller",
            )
        )
        return artifacts

    def wiring_file(self) -> str:
        return "infra/module.go"

    def route_file(self) -> str:
        return "infra/web/routes.go"

    def registration(self, module: ModuleDescriptor) -> ModuleRegistration:
        return ModuleRegistration(
            import_alias=f"{module.camel_name}Infra",
            import_path=f"{module.import_root}/infra",
            route_alias=f"{module.camel_name}Web",
            route_import_path=f"{module.import_root}/infra/web",
        )

    def column_plan(self, entity: EntityDescriptor) -> ColumnPlan:
        return build_column_plan(
            entity,
            value_format="entity.Get{public}()",
            scan_format="&dbEntity.{public}",
            id_public_name="Id",
        )

    def entity_imports(self, module: ModuleDescriptor) -> Dict[str, List[str]]:
        root = module.import_root
        shared = f"{module.path_prefix}/{module.internal_dir}/shared"
        return {
            "wiring": [
                f'"{root}/core/application/usecases"',
                f'"{root}/infra/repositories"',
                f'"{root}/infra/web/controllers"',
            ],
            "routes": [f'"{shared}/web/context"'],
        }
