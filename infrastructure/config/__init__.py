"""Configuration module for the infrastructure app."""

from .stage_config import (
    DEFAULT_STAGE,
    PROJECT_ROOT,
    ConfigError,
    StageConfig,
    resolve_project_path,
)

__all__ = [
    "DEFAULT_STAGE",
    "PROJECT_ROOT",
    "ConfigError",
    "StageConfig",
    "resolve_project_path",
]
