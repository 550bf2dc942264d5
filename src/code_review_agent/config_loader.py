"""Configuration loading with clear priority hierarchy.

Configuration is loaded in the following priority order (lowest to highest):
1. Pydantic model defaults (defined in config_models.py)
2. config.yaml file
3. Environment variables
4. CLI arguments (applied after load_config returns)
"""

# ast-grep-ignore-block: no-dict-any - Config loading works with dynamic YAML data

from __future__ import annotations

import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from .config_models import AppConfig, ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yaml"

SECRET_KEYS = frozenset({"gemini_api_key"})


@dataclass
class EnvVarMapping:
    """Defines how an environment variable maps to a config key.

    Attributes:
        env_var: Environment variable name
        config_key: Top-level key in the config dict
        value_type: Type to convert the value to (str, int, float, bool, list)
        list_separator: Separator for list values (default ",")
    """

    env_var: str
    config_key: str
    value_type: type = str
    list_separator: str = ","


ENV_VAR_MAPPINGS: list[EnvVarMapping] = [
    EnvVarMapping("GEMINI_API_KEY", "gemini_api_key"),
    EnvVarMapping("LLM_MODEL", "model"),
    EnvVarMapping("LLM_PROVIDER", "provider"),
    EnvVarMapping("REVIEW_MAX_STEPS", "max_steps", int),
    EnvVarMapping("REVIEW_EXCLUDE_FILES", "exclude_files", list),
    EnvVarMapping("REVIEW_GIT_TIMEOUT_SECONDS", "git_timeout_seconds", float),
    EnvVarMapping("REVIEW_MAX_READ_FILE_BYTES", "max_read_file_bytes", int),
    EnvVarMapping("LOG_LEVEL", "log_level"),
    EnvVarMapping("DEBUG_LLM_MESSAGES", "debug_llm_messages", bool),
]


def parse_env_value(
    value: str,
    value_type: type,
    list_separator: str = ",",
) -> Any:  # noqa: ANN401
    """Parse an environment variable value to the specified type.

    Raises:
        ValueError: If the value cannot be converted to the target type
    """
    if value_type is int:
        return int(value)
    if value_type is float:
        return float(value)
    if value_type is bool:
        return value.lower() in {"true", "1", "yes"}
    if value_type is list:
        return [item.strip() for item in value.split(list_separator) if item.strip()]
    return value


def load_yaml_file(file_path: str | pathlib.Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if it is missing or unusable."""
    try:
        with open(file_path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        logger.info(f"{file_path} not found. Using defaults.")
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing {file_path}: {e}. Using defaults.")
        return {}

    if content is None:
        return {}
    if not isinstance(content, dict):
        logger.warning(f"{file_path} is not a valid dictionary. Ignoring.")
        return {}
    return content


def apply_env_var_overrides(
    config_data: dict[str, Any],
    mappings: list[EnvVarMapping] | None = None,
) -> None:
    """Apply environment variable overrides to configuration in place."""
    if mappings is None:
        mappings = ENV_VAR_MAPPINGS

    for mapping in mappings:
        env_value = os.getenv(mapping.env_var)
        if env_value is None:
            continue
        try:
            config_data[mapping.config_key] = parse_env_value(
                env_value, mapping.value_type, mapping.list_separator
            )
            logger.debug(f"Applied env var {mapping.env_var} to {mapping.config_key}")
        except ValueError as e:
            logger.error(
                f"Invalid value for {mapping.env_var}: {e}. Using previous value."
            )


def load_config(
    config_file_path: str | pathlib.Path = DEFAULT_CONFIG_FILE,
    load_dotenv_file: bool = True,
) -> AppConfig:
    """Load configuration with clear priority hierarchy.

    CLI arguments should be applied after this function returns using
    ``apply_cli_overrides``.

    Raises:
        ConfigError: If the configuration contains invalid keys or values
    """
    config_data = load_yaml_file(config_file_path)

    if load_dotenv_file:
        load_dotenv()
    apply_env_var_overrides(config_data)

    _log_config(config_data)

    try:
        validated_config = AppConfig.model_validate(config_data)
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ConfigError(f"Invalid configuration: {e}") from e
    logger.info("Configuration validated successfully.")
    return validated_config


def apply_cli_overrides(config: AppConfig, **overrides: Any) -> AppConfig:  # noqa: ANN401
    """Return a copy of ``config`` with every non-None override applied and re-validated."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    try:
        return AppConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as e:
        raise ConfigError(f"Invalid command line option: {e}") from e


def _log_config(config_data: dict[str, Any]) -> None:
    """Log configuration excluding sensitive values."""
    safe = {
        key: ("***" if key in SECRET_KEYS and value else value)
        for key, value in config_data.items()
    }
    logger.debug(f"Configuration overrides: {safe}")
