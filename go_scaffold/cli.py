"""
Command-line interface.

Provides the ``go-scaffold`` command with one subcommand per tool. Inputs
missing from the command line are prompted for interactively.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .codegen import __version__
from .codegen.core.config import ConfigError, load_config
from .codegen.core.generator import GeneratorError
from .codegen.core.patcher import PatchError
from .codegen.core.schema import FieldSpecError
from .codegen.core.templates import TemplateError
from .codegen.interactive import ScaffoldInteractiveHandler
from .codegen.registry import RegistryError
from .codegen.report import RunReporter
from .codegen.scaffold import Scaffolder, retarget_project
from .logging_config import get_logger, setup_logging
from .utils import (
    PreconditionError,
    ScaffoldError,
    find_project_root,
    module_path_from_remote,
    read_module_path,
)

logger = get_logger(__name__)

# Initialize rich console
console = Console()

RUN_ERRORS = (
    ScaffoldError,
    PatchError,
    RegistryError,
    ConfigError,
    FieldSpecError,
    TemplateError,
    GeneratorError,
)


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the global options and subcommands."""
    parser = argparse.ArgumentParser(
        prog="go-scaffold",
        description="Scaffold feature modules and CRUD entities into a Go project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  go-scaffold                          # interactive menu
  go-scaffold module product --arch flat
  go-scaffold entity --module product --name Product \\
      --field name:VARCHAR(255) --field price:DECIMAL(10,2)
  go-scaffold modules
  go-scaffold retarget git@github.com:acme/shop.git
        """.strip(),
    )

    parser.add_argument(
        "--project-root",
        metavar="DIR",
        help="Go project root (default: nearest directory with a go.mod)",
    )
    parser.add_argument("--config", metavar="FILE", help="JSON configuration file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", metavar="FILE", help="Also write logs to FILE")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    module_parser = subparsers.add_parser("module", help="Create a feature module")
    module_parser.add_argument("name", nargs="?", help="Module name")
    module_parser.add_argument(
        "--arch", "-a", help="Architecture: flat (1, 4tier) or layered (2, ddd)"
    )
    module_parser.set_defaults(func=_handle_module)

    entity_parser = subparsers.add_parser(
        "entity", help="Create an entity with CRUD code in a module"
    )
    entity_parser.add_argument("--module", "-m", help="Existing module name")
    entity_parser.add_argument("--name", "-n", help="Entity name")
    entity_parser.add_argument(
        "--field",
        "-f",
        action="append",
        metavar="NAME:TYPE",
        help="Field definition, repeatable (e.g. price:DECIMAL(10,2))",
    )
    entity_parser.add_argument(
        "--arch", "-a", help="Architecture, only needed if it can not be detected"
    )
    entity_parser.set_defaults(func=_handle_entity)

    modules_parser = subparsers.add_parser("modules", help="List existing modules")
    modules_parser.set_defaults(func=_handle_modules)

    retarget_parser = subparsers.add_parser(
        "retarget", help="Rewrite the Go module path of the project"
    )
    retarget_parser.add_argument(
        "target", metavar="PATH_OR_REMOTE", help="New module path or git remote URL"
    )
    retarget_parser.set_defaults(func=_handle_retarget)

    return parser


def _resolve_project_root(args: argparse.Namespace) -> Path:
    if args.project_root:
        project_root = Path(args.project_root).resolve()
        read_module_path(project_root)
        return project_root
    return find_project_root(Path.cwd())


def _build_handler(args: argparse.Namespace) -> ScaffoldInteractiveHandler:
    project_root = _resolve_project_root(args)
    config = load_config(project_root=project_root, config_file=args.config)
    scaffolder = Scaffolder(project_root, config)
    reporter = RunReporter(console, project_root)
    return ScaffoldInteractiveHandler(scaffolder, console, reporter)


def _handle_menu(args: argparse.Namespace) -> int:
    _build_handler(args).run_menu()
    return 0


def _handle_module(args: argparse.Namespace) -> int:
    _build_handler(args).run_module(args.name, args.arch)
    return 0


def _handle_entity(args: argparse.Namespace) -> int:
    _build_handler(args).run_entity(args.module, args.name, args.field, args.arch)
    return 0


def _handle_modules(args: argparse.Namespace) -> int:
    handler = _build_handler(args)
    handler.reporter.report_modules(handler.scaffolder.list_modules())
    return 0


def _handle_retarget(args: argparse.Namespace) -> int:
    project_root = _resolve_project_root(args)
    target = args.target.strip()

    if "://" in target or "@" in target or target.endswith(".git"):
        new_path = module_path_from_remote(target)
        if new_path is None:
            raise PreconditionError(f"Could not derive a module path from '{target}'")
    else:
        new_path = target

    result = retarget_project(project_root, new_path)
    RunReporter(console, project_root).report_retarget(result)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the ``go-scaffold`` command.

    Returns:
        Exit code: 0 on success, 1 on a failed run, 130 when interrupted
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    handler = getattr(args, "func", _handle_menu)

    try:
        return handler(args)
    except RUN_ERRORS as e:
        logger.debug("Run aborted", exc_info=True)
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        return 1
    except EOFError:
        console.print("\n[red]✗ Error:[/red] Input ended before the run was complete")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 Scaffolding cancelled[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
