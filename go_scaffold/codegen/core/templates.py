"""
Jinja2 environment for Go source templates.

Each architecture style owns one template directory; artifacts are rendered
from ``*.go.j2`` files found there.
"""

from pathlib import Path
from typing import Any, Dict, Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from jinja2 import TemplateError as JinjaTemplateError


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


def comma_list(values: Iterable[Any]) -> str:
    """Join values the way Go argument and SQL column lists are written."""
    return ", ".join(str(value) for value in values)


class TemplateEngine:
    """Renders the templates of one style directory."""

    def __init__(self, template_dir: Path):
        if not template_dir.is_dir():
            raise TemplateError(f"Template directory not found: {template_dir}")

        self.template_dir = template_dir
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["comma_list"] = comma_list

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Template path relative to the style directory
            context: Variables to pass to template

        Returns:
            Rendered Go source
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {e}"
            ) from e
