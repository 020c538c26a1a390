"""
Console reporting for scaffolding runs.

Prints status lines, the CREATE TABLE statement and the endpoint list with
rich. Output is for humans only.
"""

from pathlib import Path
from typing import List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.generator import ColumnPlan
from .core.schema import EntityDescriptor

IMPLICIT_COLUMN_DEFINITIONS = {
    "created_at": "TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
    "updated_at": "TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP",
}

MODULE_LAYOUT_NOTES = {
    "models": "Data structures",
    "repositories": "Database access",
    "services": "Business logic",
    "controllers": "HTTP handlers",
    "core/application/repositories": "Repository interfaces",
    "core/application/usecases": "Use cases",
    "core/domain/entities": "Domain entities",
    "infra/repositories": "Repository implementations",
    "infra/web/controllers": "HTTP controllers",
}


def create_table_statement(plan: ColumnPlan, id_column_type: str = "VARCHAR(36)") -> str:
    """
    Build the MySQL CREATE TABLE statement of an entity.

    Columns follow the column plan, so they match the generated repository.
    """
    definitions = []
    for binding in plan.bindings:
        if binding.field_spec is not None:
            definitions.append(f"{binding.column} {binding.field_spec.storage_type}")
        elif binding.column == "id":
            definitions.append(f"id {id_column_type} PRIMARY KEY")
        else:
            definitions.append(
                f"{binding.column} {IMPLICIT_COLUMN_DEFINITIONS[binding.column]}"
            )

    body = ",\n".join(f"    {definition}" for definition in definitions)
    return f"CREATE TABLE {plan.table} (\n{body}\n);"


def endpoints(entity: EntityDescriptor) -> List[Tuple[str, str, str]]:
    """The five REST operations exposed for an entity as (verb, path, summary)."""
    path = entity.route_path
    name = entity.lower_name
    return [
        ("POST", path, f"Create new {name}"),
        ("GET", f"{path}/:id", f"Get {name} by ID"),
        ("GET", path, f"List all {entity.table_name} (with pagination)"),
        ("PUT", f"{path}/:id", f"Update {name}"),
        ("DELETE", f"{path}/:id", f"Delete {name}"),
    ]


class RunReporter:
    """Prints the outcome of scaffolding runs."""

    def __init__(self, console: Optional[Console] = None, project_root: Optional[Path] = None):
        self.console = console or Console()
        self.project_root = Path(project_root) if project_root else None

    # Status lines

    def info(self, message: str):
        self.console.print(f"[blue]ℹ[/blue] {escape(message)}")

    def success(self, message: str):
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str):
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str):
        self.console.print(f"[red]✗ Error:[/red] {escape(message)}")

    def _display(self, path: Path) -> str:
        if self.project_root is not None:
            try:
                return str(path.relative_to(self.project_root))
            except ValueError:
                pass
        return str(path)

    # Run summaries

    def report_files(self, result):
        """One status line per created, patched or skipped file."""
        if result.created_dirs:
            self.success("Created directory structure")
        for path in result.created_files:
            self.success(f"Created {self._display(path)}")
        for path in result.patched_files:
            self.success(f"Updated {self._display(path)}")
        for warning in result.warnings:
            self.warning(warning)

    def report_module(self, result):
        """Summary of a module run."""
        self.report_files(result)
        self.console.print()
        self.success(f"Module '{result.module.name}' created successfully!")

        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Directory", style="cyan")
        table.add_column("Purpose")
        for directory in result.created_dirs:
            relative = directory.relative_to(result.module_dir).as_posix()
            table.add_row(f"{relative}/", MODULE_LAYOUT_NOTES.get(relative, ""))

        self.console.print(
            Panel(
                table,
                title=escape(f"{self._display(result.module_dir)}/ ({result.style})"),
                border_style="blue",
            )
        )

        self.info("Next steps:")
        self.console.print(
            "  1. Create entities with: go-scaffold entity\n"
            "  2. Or implement entities, repositories and handlers by hand\n"
            "  3. Run the application to check the new module is registered"
        )

    def report_entity(self, result, id_column_type: str = "VARCHAR(36)"):
        """Summary of an entity run: files, CREATE TABLE and endpoints."""
        entity = result.entity
        self.report_files(result)
        self.console.print()
        self.success(f"Entity '{entity.pascal_name}' created successfully!")
        self.console.print()

        self.info("SQL to create the table:")
        self.console.print(
            create_table_statement(result.column_plan, id_column_type),
            markup=False,
            highlight=False,
        )
        self.console.print()

        self.info("API Endpoints created:")
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Verb", style="bold magenta")
        table.add_column("Path", style="cyan")
        table.add_column("Summary")
        for verb, path, summary in endpoints(entity):
            table.add_row(verb, path, summary)
        self.console.print(table)

    def report_modules(self, modules):
        """Table of existing modules."""
        if not modules:
            self.warning("No modules found")
            return

        table = Table(title="Modules", box=box.ROUNDED)
        table.add_column("Module", style="cyan")
        table.add_column("Architecture")
        table.add_column("Wired", justify="center")
        for info in modules:
            table.add_row(
                escape(info.name),
                info.style or "[yellow]unknown[/yellow]",
                "[green]yes[/green]" if info.wired else "[red]no[/red]",
            )
        self.console.print(table)

    def report_retarget(self, result):
        """Summary of a module path rewrite."""
        if not result.changed_files:
            self.warning(f"Nothing to change, module path is {result.new_path}")
            return
        for path in result.changed_files:
            self.success(f"Updated {self._display(path)}")
        self.success(
            f"Module path changed: {result.old_path} -> {result.new_path} "
            f"({len(result.changed_files)} files)"
        )
