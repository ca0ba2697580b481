"""Process-wide configuration held in a ``ContextVar``.

The default context is built from ``config.yaml`` (or ``$APP_CONFIG_FILE``)
on first import. ``with_context`` layers partial overrides on top of it for
the duration of a block, which is how tests shrink page sizes or timeouts.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel

from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.config.config_template import load_templated_yaml


@dataclass
class AppContext:
    """Application-wide state visible to repositories and routers."""

    config: ConfigData


def _load_default_config() -> ConfigData:
    config_path = Path(os.getenv("APP_CONFIG_FILE", "config.yaml"))
    if not config_path.exists():
        logger.warning("Configuration file {} not found; using defaults", config_path)
        return ConfigData()
    return load_templated_yaml(config_path)


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=_load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    return _app_context.set(context)


def _explicit_values(model: BaseModel) -> dict[str, Any]:
    """Only the fields that were assigned or passed in, at every depth."""
    values: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_values(value)
            if nested:
                values[name] = nested
            elif name in model.model_fields_set:
                values[name] = value.model_dump()
        elif name in model.model_fields_set:
            values[name] = value
    return values


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    """Overlay the explicitly set parts of ``override_config`` on ``base_config``."""
    merged = _deep_merge(base_config.model_dump(), _explicit_values(override_config))
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Temporarily run with ``config_override`` merged into the current config.

    Example:
        override = ConfigData()
        override.catalog.max_page_size = 25
        with with_context(override):
            assert get_config().catalog.max_page_size == 25
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    current = get_context()
    token = set_context(replace(current, config=_merge_configs(current.config, config_override)))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the whole configuration of the current context."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    return get_context().config
