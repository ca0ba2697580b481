"""Load ``config.yaml`` after expanding ``${...}`` environment placeholders."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from src.catalog.runtime.config.config_data import ConfigData

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _resolve_placeholder(match: re.Match) -> str:
    expression = match.group(1)

    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return os.getenv(name, default)

    if ":?" in expression:
        name, error_message = expression.split(":?", 1)
    else:
        name, error_message = expression, "not set"

    value = os.getenv(name)
    if value is None:
        raise ValueError(f"Required environment variable {name}: {error_message}")
    return value


def substitute_env_vars(text: str) -> str:
    """Expand placeholders in ``text``.

    - ``${VAR}``: required, fails when unset
    - ``${VAR:-default}``: falls back to ``default``
    - ``${VAR:?message}``: required, fails with ``message``
    """
    return PLACEHOLDER.sub(_resolve_placeholder, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV_MODE>_FOO`` variables to ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    overrides = {name: value for name, value in os.environ.items() if name.startswith(prefix)}
    if overrides:
        logger.info("Applying environment-specific overrides: {}", sorted(overrides))

    for name, value in overrides.items():
        os.environ[name[len(prefix):]] = value


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Parse the ``config:`` section of ``file_path`` into ``ConfigData``.

    Raises:
        ValueError: a required variable is missing, the YAML is empty or
            malformed, or the values fail validation
        FileNotFoundError: the file does not exist
    """
    content = Path(file_path).read_text()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    apply_environment_overrides(env_mode)

    try:
        loaded = yaml.safe_load(substitute_env_vars(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not loaded:
        raise ValueError(f"Configuration file {file_path} is empty")

    try:
        config = ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.environment == "production" and config.database.is_sqlite:
        logger.warning("Production configuration points at SQLite: {}", config.database.url)
    return config
