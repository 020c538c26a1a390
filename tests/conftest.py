"""Shared pytest fixtures for the go-scaffold test suite.

Provides reusable fixtures for:
- A minimal Go starter project with both composition-root files
- A Scaffolder bound to that project
- A rich console writing into a buffer
"""

from __future__ import annotations

import io
import textwrap
from pathlib import Path

import pytest
from rich.console import Console

from go_scaffold.codegen.core.config import ScaffoldConfig
from go_scaffold.codegen.scaffold import Scaffolder

MODULE_PATH = "github.com/acme/shop"

CONTAINER_GO = textwrap.dedent(
    """\
    package container

    import (
    \t"database/sql"

    \t"github.com/acme/shop/internal/shared/logger"
    )

    // Container holds all application dependencies
    type Container struct {
    \t// Modules

    \t// Shared infrastructure
    \tLogger logger.Logger
    }

    // New creates and wires all application dependencies
    func New(db *sql.DB) (*Container, error) {
    \tlog := logger.NewSlogLogger()

    \t// Initialize modules (each module wires its own dependencies)

    \treturn &Container{
    \t\tLogger: log,
    \t}, nil
    }
    """
)

REGISTER_ROUTES_GO = textwrap.dedent(
    """\
    package web

    import (
    \t"github.com/gin-gonic/gin"
    \t"github.com/acme/shop/cmd/server/container"
    )

    // RegisterRoutes is the main route orchestrator
    func RegisterRoutes(c *container.Container) func(*gin.Engine) {
    \treturn func(router *gin.Engine) {
    \t\t// Register routes for each module
    \t}
    }
    """
)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def write_go_project(root: Path, module_path: str = MODULE_PATH) -> Path:
    """Lay out a Go project with go.mod and both composition-root files."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "go.mod").write_text(
        f"module {module_path}\n\ngo 1.22\n", encoding="utf-8"
    )

    container = root / "cmd" / "server" / "container" / "container.go"
    container.parent.mkdir(parents=True)
    container.write_text(CONTAINER_GO, encoding="utf-8")

    routes = root / "internal" / "infra" / "web" / "register_routes.go"
    routes.parent.mkdir(parents=True)
    routes.write_text(REGISTER_ROUTES_GO, encoding="utf-8")

    (root / "internal" / "shared").mkdir(parents=True)
    return root


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """A fresh Go starter project (auto-cleanup)."""
    return write_go_project(tmp_path / "shop")


@pytest.fixture
def scaffolder(go_project: Path) -> Scaffolder:
    """Scaffolder with default configuration bound to ``go_project``."""
    return Scaffolder(go_project, ScaffoldConfig())


@pytest.fixture
def container_file(go_project: Path) -> Path:
    return go_project / "cmd" / "server" / "container" / "container.go"


@pytest.fixture
def routes_file(go_project: Path) -> Path:
    return go_project / "internal" / "infra" / "web" / "register_routes.go"


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


@pytest.fixture
def console() -> Console:
    """Console recording plain text into a buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None, record=True)


def snapshot(root: Path) -> dict[Path, str]:
    """Every file below ``root`` with its content."""
    return {
        path: path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
