"""
Configuration management for scaffolding runs.

Handles loading and merging configuration from JSON files, providing
defaults matching the starter project layout.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...logging_config import get_logger
from .types import GoTypeConfig

logger = get_logger(__name__)

# Looked up at the project root when no explicit file is given
DEFAULT_CONFIG_FILENAME = ".go-scaffold.json"


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class ScaffoldConfig:
    """Settings describing the target project and the generated code."""

    # Project layout
    internal_dir: str = "internal"
    container_file: str = "cmd/server/container/container.go"
    routes_file: str = "internal/infra/web/register_routes.go"
    excluded_modules: List[str] = field(default_factory=lambda: ["shared", "infra"])

    # Anchors inside the composition-root files
    import_anchor: str = "import ("
    container_struct_anchor: str = "type Container struct {"
    container_init_anchor: str = (
        "Initialize modules (each module wires its own dependencies)"
    )
    container_return_anchor: str = "return &Container{"
    routes_anchor: str = "Register routes for each module"

    # Storage settings
    id_column_type: str = "VARCHAR(36)"
    table_suffix: str = "s"

    # Go type names
    string_type: str = "string"
    int_type: str = "int"
    float_type: str = "float64"
    bool_type: str = "bool"
    time_type: str = "time.Time"
    time_import: str = "time"

    # Unknown keys from configuration files
    custom: Dict[str, Any] = field(default_factory=dict)

    def type_config(self) -> GoTypeConfig:
        """Build the type mapping configuration from these settings."""
        return GoTypeConfig(
            string_type=self.string_type,
            int_type=self.int_type,
            float_type=self.float_type,
            bool_type=self.bool_type,
            time_type=self.time_type,
            time_import=self.time_import,
            type_overrides={
                key.upper(): value
                for key, value in self.custom.get("type_overrides", {}).items()
            },
        )

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation warnings
        """
        warnings = []

        anchors = {
            "import_anchor": self.import_anchor,
            "container_struct_anchor": self.container_struct_anchor,
            "container_init_anchor": self.container_init_anchor,
            "container_return_anchor": self.container_return_anchor,
            "routes_anchor": self.routes_anchor,
        }
        for key, value in anchors.items():
            if not value.strip():
                warnings.append(f"Empty anchor: {key}")

        if not self.internal_dir.strip():
            warnings.append("internal_dir must not be empty")

        valid_int_types = {"int", "int8", "int16", "int32", "int64"}
        if self.int_type not in valid_int_types:
            warnings.append(f"Invalid int_type: {self.int_type}")

        valid_float_types = {"float32", "float64"}
        if self.float_type not in valid_float_types:
            warnings.append(f"Invalid float_type: {self.float_type}")

        return warnings


class ConfigManager:
    """Manages configuration loading and merging."""

    def get_config(
        self,
        project_root: Optional[Union[str, Path]] = None,
        config_file: Optional[Union[str, Path]] = None,
        custom_config: Optional[Dict[str, Any]] = None,
    ) -> ScaffoldConfig:
        """
        Get the complete configuration for a run.

        Args:
            project_root: Project whose ``.go-scaffold.json`` applies if present
            config_file: Explicit JSON configuration file (wins over the default)
            custom_config: Keyword overrides applied last

        Returns:
            Merged configuration
        """
        merged: Dict[str, Any] = {}

        if config_file:
            merged.update(self._load_config_file(config_file))
        elif project_root:
            default_file = Path(project_root) / DEFAULT_CONFIG_FILENAME
            if default_file.exists():
                logger.debug("Using project configuration %s", default_file)
                merged.update(self._load_config_file(default_file))

        if custom_config:
            merged.update(custom_config)

        return self._dict_to_config(merged)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> ScaffoldConfig:
        """Convert dictionary to ScaffoldConfig instance."""
        known_fields = {f.name for f in fields(ScaffoldConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Add custom fields to the custom dict
        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return ScaffoldConfig(**config_args)

    def save_config(self, config: ScaffoldConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    project_root: Optional[Union[str, Path]] = None,
    config_file: Optional[Union[str, Path]] = None,
    custom_config: Optional[Dict[str, Any]] = None,
) -> ScaffoldConfig:
    """
    Convenience function to load configuration.

    Args:
        project_root: Project root used to find ``.go-scaffold.json``
        config_file: Path to JSON configuration file
        custom_config: Custom configuration overrides

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(project_root, config_file, custom_config)
