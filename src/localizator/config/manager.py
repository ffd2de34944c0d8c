"""Configuration manager for Localizator.

This module provides functionality for loading YAML configuration files,
applying environment variable overrides and building validated, immutable
configuration objects with Pydantic.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..utils.exceptions import ConfigurationError
from .schema import LocalizatorConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("localizator.yml")

# Environment variable -> dotted configuration path
ENVIRONMENT_OVERRIDES: dict[str, str] = {
    "LOCALIZATOR_TYPE": "localize",
    "LOCALIZATOR_SOURCE_LANG": "source_language",
    "LOCALIZATOR_LANG_PATH": "lang_path",
    "LOCALIZATOR_AI_PROVIDER": "ai.provider",
    "LOCALIZATOR_AUTO_TRANSLATE": "ai.auto_translate",
    "LOCALIZATOR_REVIEW_REQUIRED": "ai.review_required",
    "LOCALIZATOR_DOMAIN": "ai.context.domain",
    "LOCALIZATOR_TONE": "ai.context.tone",
    "LOCALIZATOR_ADDITIONAL_CONTEXT": "ai.context.additional_context",
    "OPENAI_API_KEY": "ai.openai.api_key",
    "OPENAI_MODEL": "ai.openai.model",
    "ANTHROPIC_API_KEY": "ai.claude.api_key",
    "CLAUDE_MODEL": "ai.claude.model",
    "GOOGLE_TRANSLATE_API_KEY": "ai.google.api_key",
    "AZURE_TRANSLATOR_KEY": "ai.azure.api_key",
    "AZURE_TRANSLATOR_REGION": "ai.azure.region",
    "AZURE_TRANSLATOR_ENDPOINT": "ai.azure.endpoint",
}


def _set_dotted(data: dict[str, object], dotted_path: str, value: object) -> None:
    """Assign ``value`` inside nested dictionaries following ``a.b.c``."""
    parts = dotted_path.split(".")
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child  # pyright: ignore[reportUnknownVariableType]
    current[parts[-1]] = value


def _deep_merge(base: dict[str, object], updates: Mapping[str, object]) -> dict[str, object]:
    """Return ``base`` with ``updates`` merged in, recursing into dictionaries."""
    merged = dict(base)
    for key, value in updates.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(existing, value)  # pyright: ignore[reportUnknownArgumentType]
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Configuration manager for Localizator YAML config files.

    Loading never mutates process-wide state: every call returns a new
    frozen ``LocalizatorConfig`` that callers pass along explicitly.
    """

    @staticmethod
    def load_config(
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> LocalizatorConfig:
        """
        Load and validate configuration from a YAML file.

        A missing file is not an error: defaults are used, which keeps a
        fresh project usable without any configuration.

        Args:
            config_path: Path to the YAML configuration file
            environ: Environment used for overrides (defaults to ``os.environ``)

        Returns:
            LocalizatorConfig: Validated configuration object

        Raises:
            ConfigurationError: If the YAML is invalid or fails validation
        """
        config_path = config_path or DEFAULT_CONFIG_FILE
        config_data: dict[str, object] = {}

        if config_path.exists():
            try:
                with config_path.open("r", encoding="utf-8") as f:
                    raw_config_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Invalid YAML syntax in {config_path}: {e}"
                ) from e
            except OSError as e:
                raise ConfigurationError(
                    f"Could not read configuration file {config_path}: {e}"
                ) from e

            if raw_config_data is None:
                config_data = {}
            elif isinstance(raw_config_data, dict):
                config_data = raw_config_data  # pyright: ignore[reportUnknownVariableType]
            else:
                raise ConfigurationError(
                    f"Configuration file must contain a YAML dictionary, got {type(raw_config_data).__name__}"
                )
            logger.debug(f"Loaded configuration from {config_path}")
        else:
            logger.debug(f"No configuration file at {config_path}, using defaults")

        config_data = ConfigManager._apply_environment(
            config_data, os.environ if environ is None else environ
        )
        return ConfigManager.build_config(config_data)

    @staticmethod
    def build_config(config_data: Mapping[str, object]) -> LocalizatorConfig:
        """
        Validate raw configuration data.

        Raises:
            ConfigurationError: If the data fails Pydantic validation
        """
        try:
            return LocalizatorConfig.model_validate(dict(config_data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @staticmethod
    def with_overrides(
        config: LocalizatorConfig, overrides: Mapping[str, object]
    ) -> LocalizatorConfig:
        """
        Return a new configuration with ``overrides`` merged in and re-validated.

        Args:
            config: The current configuration
            overrides: Nested mapping of values to replace (e.g. ``{"output": {"backup": True}}``)

        Returns:
            LocalizatorConfig: A new validated configuration object

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        merged = _deep_merge(config.model_dump(), overrides)
        return ConfigManager.build_config(merged)

    @staticmethod
    def _apply_environment(
        config_data: dict[str, object], environ: Mapping[str, str]
    ) -> dict[str, object]:
        """
        Overlay environment variables on top of file configuration.

        Args:
            config_data: Raw configuration data from YAML
            environ: Environment mapping

        Returns:
            dict[str, object]: Configuration data with overrides applied
        """
        overlay: dict[str, object] = {}
        for variable, dotted_path in ENVIRONMENT_OVERRIDES.items():
            value = environ.get(variable)
            if value is None or value == "":
                continue
            logger.debug(f"Applying {variable} to {dotted_path}")
            _set_dotted(overlay, dotted_path, value)
        return _deep_merge(config_data, overlay)
