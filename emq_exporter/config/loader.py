"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from .models import ExporterConfig


class ConfigLoader:
    """Load and validate exporter configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> ExporterConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ExporterConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        raw_config = ConfigLoader._substitute_env_vars(raw_config)

        return ExporterConfig(**raw_config)

    @staticmethod
    def load(
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None
    ) -> ExporterConfig:
        """
        Build configuration from an optional file plus per-section overrides.

        Args:
            config_path: Optional YAML file; built-in defaults are used when None
            overrides: Mapping of section name to field values, e.g. from CLI flags.
                Fields whose value is None are ignored.

        Returns:
            ExporterConfig: Validated configuration object
        """
        config = ConfigLoader.load_from_file(config_path) if config_path else ExporterConfig()
        if not overrides:
            return config

        raw_config = config.model_dump()
        for section, values in overrides.items():
            raw_config.setdefault(section, {}).update(
                {k: v for k, v in values.items() if v is not None}
            )
        return ExporterConfig(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
