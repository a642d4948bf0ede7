"""
Configuration for the routing rules store.

Resolves where the rules file lives and how long an update may wait for the
file lock. The store itself never reads the environment; it receives these
values at construction.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Default rules file path (relative to project root)
DEFAULT_ROUTING_RULES_PATH = "routing_rules.yaml"

PATH_ENV = "ROUTING_RULES_PATH"
LOCK_TIMEOUT_ENV = "ROUTING_RULES_LOCK_TIMEOUT"


class RoutingRulesSettings(BaseModel):
    """Routing rules store settings."""

    model_config = ConfigDict(frozen=True)

    rules_path: Path
    # None blocks until the lock is granted
    lock_timeout: float | None = Field(default=None, gt=0)


def _find_project_root() -> Path:
    """Find project root by looking for marker files."""
    current = Path.cwd()

    for parent in [current, *current.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent

    return current


def load_settings(env: Mapping[str, str] | None = None) -> RoutingRulesSettings:
    """
    Build settings from environment variables.

    Args:
        env: Environment mapping. Uses os.environ if None.

    Returns:
        Validated settings.

    Raises:
        ValueError: If a variable holds an invalid value.
    """
    if env is None:
        env = os.environ

    env_path = env.get(PATH_ENV)
    rules_path = Path(env_path) if env_path else _find_project_root() / DEFAULT_ROUTING_RULES_PATH

    raw_timeout = env.get(LOCK_TIMEOUT_ENV) or None

    try:
        return RoutingRulesSettings(rules_path=rules_path, lock_timeout=raw_timeout)
    except ValidationError as e:
        raise ValueError(f"Invalid routing rules configuration:\n{e}") from e


@lru_cache
def get_settings() -> RoutingRulesSettings:
    return load_settings()
