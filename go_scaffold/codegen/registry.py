"""
Template set registry for managing available architecture styles.

Provides dynamic registration and instantiation of template sets. Selecting
a style is a table lookup; nothing outside the registered classes branches
on the style.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from ..logging_config import get_logger
from .core.config import ScaffoldConfig, load_config
from .core.generator import TemplateSet

logger = get_logger(__name__)


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


class TemplateSetRegistry:
    """Registry for managing available template sets."""

    def __init__(self):
        """Initialize empty registry."""
        self._template_sets: Dict[str, Type[TemplateSet]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        style: str,
        template_set_class: Type[TemplateSet],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a template set for an architecture style.

        Args:
            style: Primary style key (e.g., 'flat', 'layered')
            template_set_class: Class implementing TemplateSet
            aliases: Alternative names, including menu numbers
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If the class is invalid or an alias conflicts
        """
        if not isinstance(template_set_class, type) or not issubclass(
            template_set_class, TemplateSet
        ):
            raise RegistryError("Template set class must inherit from TemplateSet")

        style_key = style.lower()

        if style_key in self._template_sets and not replace:
            return

        self._template_sets[style_key] = template_set_class

        if aliases:
            for alias in aliases:
                alias_key = alias.lower()

                if alias_key == style_key:
                    continue

                if not replace:
                    if alias_key in self._template_sets:
                        raise RegistryError(
                            f"Alias '{alias}' conflicts with existing primary style"
                        )
                    if (
                        alias_key in self._aliases
                        and self._aliases[alias_key] != style_key
                    ):
                        raise RegistryError(
                            f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                        )

                self._aliases[alias_key] = style_key

    def unregister(self, style: str):
        """Unregister a template set and its aliases."""
        style_key = style.lower()
        self._template_sets.pop(style_key, None)

        aliases_to_remove = [
            alias for alias, target in self._aliases.items() if target == style_key
        ]
        for alias in aliases_to_remove:
            del self._aliases[alias]

    def resolve_key(self, style: str) -> str:
        """
        Resolve a style name or alias to its primary key.

        Raises:
            RegistryError: If the style is unknown
        """
        style_key = style.strip().lower()

        if style_key in self._template_sets:
            return style_key

        if style_key in self._aliases:
            return self._aliases[style_key]

        available = self.list_styles()
        raise RegistryError(
            f"Unsupported architecture: {style!r}. Available: {', '.join(available)}"
        )

    def get_template_set_class(self, style: str) -> Type[TemplateSet]:
        """Get template set class for a style name or alias."""
        return self._template_sets[self.resolve_key(style)]

    def create_template_set(
        self,
        style: str,
        config: Optional[Union[ScaffoldConfig, Dict[str, Any], str, Path]] = None,
    ) -> TemplateSet:
        """
        Create a template set instance for a style.

        Args:
            style: Style name or alias
            config: Configuration as ScaffoldConfig, dict, or file path

        Returns:
            Configured template set

        Raises:
            RegistryError: If the style is unknown or the config type is invalid
        """
        template_set_class = self.get_template_set_class(style)

        if isinstance(config, ScaffoldConfig):
            final_config = config
        elif isinstance(config, (str, Path)):
            final_config = load_config(config_file=config)
        elif isinstance(config, dict):
            final_config = load_config(custom_config=config)
        elif config is None:
            final_config = load_config()
        else:
            raise RegistryError(f"Invalid config type: {type(config)}")

        return template_set_class(final_config)

    def detect_style(
        self, module_dir: Path, config: Optional[ScaffoldConfig] = None
    ) -> Optional[str]:
        """
        Detect the style of an existing module from its directory layout.

        Returns:
            Primary style key, or None if no registered style matches
        """
        for style_key in self.list_styles():
            template_set = self.create_template_set(style_key, config or ScaffoldConfig())
            if template_set.detect(Path(module_dir)):
                logger.debug("Detected %s layout in %s", style_key, module_dir)
                return style_key
        return None

    def list_styles(self) -> List[str]:
        """Get list of registered primary style keys."""
        return sorted(self._template_sets.keys())

    def get_aliases_for_style(self, style: str) -> List[str]:
        """Get all aliases for a specific style."""
        style_key = style.lower()
        return sorted(
            alias for alias, target in self._aliases.items() if target == style_key
        )

    def is_supported(self, style: str) -> bool:
        """Check if a style name or alias is registered."""
        style_key = style.strip().lower()
        return style_key in self._template_sets or style_key in self._aliases

    def get_style_info(self, style: str) -> Dict[str, Any]:
        """
        Get information about a registered style.

        Raises:
            RegistryError: If the style is unknown
        """
        style_key = self.resolve_key(style)
        template_set = self._template_sets[style_key](ScaffoldConfig())

        return {
            "name": template_set.style_name,
            "description": template_set.description,
            "class": type(template_set).__name__,
            "aliases": self.get_aliases_for_style(style_key),
            "marker_directory": template_set.marker_directory,
            "module": type(template_set).__module__,
        }


# Global registry instance - created once
_global_registry: Optional[TemplateSetRegistry] = None


def get_registry() -> TemplateSetRegistry:
    """Get the global template set registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = TemplateSetRegistry()
        _auto_register_template_sets(_global_registry)
    return _global_registry


def _auto_register_template_sets(registry: TemplateSetRegistry):
    """
    Register the built-in styles with their aliases.

    The numeric aliases are the choices offered by the interactive menu.
    """
    from .styles.flat import FlatTemplateSet
    from .styles.layered import LayeredTemplateSet

    registry.register("flat", FlatTemplateSet, aliases=["1", "4tier", "4-tier"])
    registry.register("layered", LayeredTemplateSet, aliases=["2", "ddd", "clean"])


# Public API functions using the global registry


def register_template_set(
    style: str,
    template_set_class: Type[TemplateSet],
    aliases: Optional[List[str]] = None,
):
    """Register a template set in the global registry."""
    get_registry().register(style, template_set_class, aliases)


def get_template_set(
    style: str,
    config: Optional[Union[ScaffoldConfig, Dict[str, Any], str, Path]] = None,
) -> TemplateSet:
    """Get a template set instance from the global registry."""
    return get_registry().create_template_set(style, config)


def list_supported_styles() -> List[str]:
    """List all supported styles from the global registry."""
    return get_registry().list_styles()


def detect_style(module_dir: Path, config: Optional[ScaffoldConfig] = None) -> Optional[str]:
    """Detect the style of an existing module with the global registry."""
    return get_registry().detect_style(module_dir, config)
