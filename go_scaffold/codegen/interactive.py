"""
Interactive scaffolding handler.

Prompts follow a fixed sequence: module name, architecture choice, entity
name, then one ``name:TYPE`` line per field until ``done``.
"""

from typing import Iterator, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from ..logging_config import get_logger
from ..utils import PreconditionError
from .collector import DONE_TOKEN, FieldFeedback, FieldSchemaCollector
from .report import RunReporter
from .scaffold import Scaffolder, ScaffoldResult

logger = get_logger(__name__)


class ScaffoldInteractiveHandler:
    """Collects run inputs from the operator and drives the Scaffolder."""

    def __init__(
        self,
        scaffolder: Scaffolder,
        console: Optional[Console] = None,
        reporter: Optional[RunReporter] = None,
    ):
        """
        Initialize the interactive handler.

        Args:
            scaffolder: Scaffolder bound to the target project
            console: Rich console instance (creates new if None)
            reporter: Reporter for status lines (creates new if None)
        """
        self.scaffolder = scaffolder
        self.console = console or Console()
        self.reporter = reporter or RunReporter(self.console, scaffolder.project_root)

    def _ask(self, question: str, default: Optional[str] = None) -> str:
        if default is None:
            answer = Prompt.ask(question, console=self.console, default="", show_default=False)
        else:
            answer = Prompt.ask(question, console=self.console, default=default)
        return (answer or "").strip()

    # Menu

    def run_menu(self) -> Optional[ScaffoldResult]:
        """Show the top-level menu and run the chosen tool once."""
        menu_panel = Panel.fit(
            """[bold blue]Go project scaffolding[/bold blue]

[cyan]1.[/cyan] Create a module
[cyan]2.[/cyan] Create an entity with CRUD
[cyan]3.[/cyan] List modules
[cyan]q.[/cyan] Quit""",
            border_style="blue",
            title="go-scaffold",
        )
        self.console.print(menu_panel)

        choice = Prompt.ask(
            "[bold]Choose an option[/bold]",
            console=self.console,
            choices=["1", "2", "3", "q"],
            default="1",
        )

        if choice == "1":
            return self.run_module()
        if choice == "2":
            return self.run_entity()
        if choice == "3":
            self.reporter.report_modules(self.scaffolder.list_modules())
        return None

    # Architecture selection

    def select_style(self) -> str:
        """
        Ask for the architecture. Invalid answers abort the run.

        Raises:
            RegistryError: If the answer is not a registered style or alias
        """
        registry = self.scaffolder.registry
        self.reporter.info("Select architecture type:")
        for index, style in enumerate(self._menu_styles(), 1):
            info = registry.get_style_info(style)
            self.console.print(f"{index}) {info['description']}")

        choices = " or ".join(str(i) for i in range(1, len(self._menu_styles()) + 1))
        answer = self._ask(f"Enter your choice ({choices})")
        return registry.resolve_key(answer)

    def _menu_styles(self) -> List[str]:
        registry = self.scaffolder.registry
        # Menu numbers are registered as aliases; order the menu by them
        numbered = []
        for style in registry.list_styles():
            digits = [a for a in registry.get_aliases_for_style(style) if a.isdigit()]
            numbered.append((int(digits[0]) if digits else 99, style))
        return [style for _, style in sorted(numbered)]

    # Module tool

    def run_module(
        self, name: Optional[str] = None, style: Optional[str] = None
    ) -> ScaffoldResult:
        """Prompt for the missing module inputs and create the module."""
        self.reporter.info(f"Project module path: {self.scaffolder.module_path}")

        if name is None:
            name = self._ask("Enter the module name (e.g., product, user_account)")
        if not name:
            raise PreconditionError("Module name cannot be empty")

        if style is None:
            style = self.select_style()

        self.reporter.info(f"Creating module '{name}'...")
        result = self.scaffolder.create_module(name, style)
        self.reporter.report_module(result)
        return result

    # Entity tool

    def run_entity(
        self,
        module: Optional[str] = None,
        entity: Optional[str] = None,
        fields: Optional[List[str]] = None,
        style: Optional[str] = None,
    ) -> ScaffoldResult:
        """Prompt for the missing entity inputs and generate the entity."""
        self.reporter.info(f"Project module path: {self.scaffolder.module_path}")

        if module is None:
            self._show_modules()
            module = self._ask("Enter the module name where the entity will be created")
        module = self.scaffolder.require_module(module)

        if style is None:
            detected = self.scaffolder.detect_style(module)
            if detected is not None:
                self.reporter.info(f"Detected architecture: {detected}")
            else:
                self.reporter.warning("Could not detect module architecture")
                style = self.select_style()

        if entity is None:
            entity = self._ask("Enter the entity name (e.g., User, Order, Payment)")
        if not entity:
            raise PreconditionError("Entity name cannot be empty")

        if fields is None:
            specs = self.collect_fields()
        else:
            specs = fields

        result = self.scaffolder.create_entity(module, entity, specs, style)
        self.reporter.report_entity(result, self.scaffolder.config.id_column_type)
        return result

    def _show_modules(self):
        modules = self.scaffolder.list_modules()
        if not modules:
            self.reporter.warning("No modules found; create one first")
            return
        self.reporter.info("Available modules:")
        for info in modules:
            self.console.print(f"  - {escape(info.name)} [dim]({info.style or 'unknown'})[/dim]")

    def collect_fields(self):
        """Read fields until ``done`` and return the frozen list."""
        self.reporter.info("Enter the fields for the entity (format: field_name:TYPE)")
        self.reporter.info(
            "Examples: name:VARCHAR(255), age:INT, price:DECIMAL(10,2), born_at:DATE"
        )
        self.reporter.info(f"Type '{DONE_TOKEN}' when finished")

        collector = FieldSchemaCollector(self.scaffolder.type_mapper)
        return collector.collect(self._field_lines(), self._print_feedback)

    def _field_lines(self) -> Iterator[str]:
        while True:
            try:
                yield self._ask(f"Field (or '{DONE_TOKEN}')")
            except EOFError:
                logger.debug("Input closed while reading fields")
                return

    def _print_feedback(self, feedback: FieldFeedback):
        if feedback.error:
            self.reporter.error(feedback.error)
        elif feedback.accepted:
            self.reporter.success(feedback.confirmation())
        for warning in feedback.warnings:
            self.reporter.warning(warning)
