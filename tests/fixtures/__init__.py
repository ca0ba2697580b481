"""Shared pytest fixtures and helpers for catalog tests."""

from .core import *  # noqa: F401,F403
from .catalog import *  # noqa: F401,F403
