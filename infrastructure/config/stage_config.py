"""
Stage configuration for the infrastructure app.

Settings are read from the CDK context (`cdk.json`):

    "stages": {
        "dev": {"region": "eu-west-3", "project": "sls-cdk-stack", ...}
    }

cdk.json names the default stage; `cdk synth -c stage=prod` overrides it. The
CDK_STAGE environment variable applies only when no stage is set in context.
"""

import os
import re
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from aws_cdk import App, aws_logs as logs

logger = logging.getLogger(__name__)

DEFAULT_STAGE = "dev"

# Repository root; relative paths in the config are resolved against it
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Stage names end up in IAM role, table and function names
STAGE_PATTERN = re.compile(r"^[a-z][a-z0-9-]{0,19}$")

# Longest derived name is lambda-api-<project>-<stage>; IAM role names are capped at 64
PROJECT_PATTERN = re.compile(r"^[a-z][a-z0-9-]{0,31}$")

POSITIVE_INT_FIELDS = (
    "lambda_timeout",
    "lambda_memory",
    "table_read_capacity",
    "table_write_capacity",
    "log_retention_days",
)

BOOL_FIELDS = ("tracing", "frontend_enabled")

# Retention periods accepted by CloudWatch Logs
LOG_RETENTION_DAYS = {
    1: logs.RetentionDays.ONE_DAY,
    3: logs.RetentionDays.THREE_DAYS,
    5: logs.RetentionDays.FIVE_DAYS,
    7: logs.RetentionDays.ONE_WEEK,
    14: logs.RetentionDays.TWO_WEEKS,
    30: logs.RetentionDays.ONE_MONTH,
    60: logs.RetentionDays.TWO_MONTHS,
    90: logs.RetentionDays.THREE_MONTHS,
    120: logs.RetentionDays.FOUR_MONTHS,
    150: logs.RetentionDays.FIVE_MONTHS,
    180: logs.RetentionDays.SIX_MONTHS,
    365: logs.RetentionDays.ONE_YEAR,
    400: logs.RetentionDays.THIRTEEN_MONTHS,
    545: logs.RetentionDays.EIGHTEEN_MONTHS,
    731: logs.RetentionDays.TWO_YEARS,
    1096: logs.RetentionDays.THREE_YEARS,
    1827: logs.RetentionDays.FIVE_YEARS,
    2192: logs.RetentionDays.SIX_YEARS,
    2557: logs.RetentionDays.SEVEN_YEARS,
    2922: logs.RetentionDays.EIGHT_YEARS,
    3288: logs.RetentionDays.NINE_YEARS,
    3653: logs.RetentionDays.TEN_YEARS,
}


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""
    pass


def resolve_project_path(path: str) -> Path:
    """Resolve a configured path against the repository root unless absolute."""
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = PROJECT_ROOT / resolved
    return resolved


@dataclass(frozen=True)
class StageConfig:
    """Settings for one deployment stage (dev/test/prod)."""

    stage: str
    region: str = "eu-west-3"
    account: Optional[str] = None
    project: str = "sls-cdk-stack"

    # Lambda bundle produced by the backend build
    artifact_path: str = "backend/dist/lambda.zip"
    lambda_handler: str = "lambda.handler"
    lambda_runtime: str = "nodejs20.x"
    lambda_timeout: int = 10
    lambda_memory: int = 256
    tracing: bool = True

    table_read_capacity: int = 1
    table_write_capacity: int = 1
    log_retention_days: int = 7

    frontend_enabled: bool = True
    frontend_site_path: Optional[str] = None
    # Used only when there is no frontend stack to take the origin from
    cors_origins: Tuple[str, ...] = ("*",)

    def __post_init__(self):
        if not isinstance(self.stage, str) or not self.stage:
            raise ConfigError("Stage name must be a non-empty string")
        if not STAGE_PATTERN.match(self.stage):
            raise ConfigError(
                f"Invalid stage name '{self.stage}': use up to 20 lowercase "
                "letters, digits or hyphens, starting with a letter"
            )
        if not isinstance(self.project, str) or not PROJECT_PATTERN.match(self.project):
            raise ConfigError(
                f"Invalid project name {self.project!r}: use up to 32 lowercase "
                "letters, digits or hyphens, starting with a letter"
            )
        if not self.region:
            raise ConfigError(f"No region configured for stage '{self.stage}'")
        for name in POSITIVE_INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"'{name}' must be a positive integer, got {value!r}")
        if self.log_retention_days not in LOG_RETENTION_DAYS:
            raise ConfigError(
                f"Unsupported log_retention_days {self.log_retention_days}: "
                f"use one of {sorted(LOG_RETENTION_DAYS)}"
            )
        for name in BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigError(f"'{name}' must be true or false, got {value!r}")
        if self.frontend_site_path is not None and (
            not isinstance(self.frontend_site_path, str) or not self.frontend_site_path
        ):
            raise ConfigError("'frontend_site_path' must be a non-empty path")

        origins = self.cors_origins
        if not isinstance(origins, (list, tuple)) or not origins:
            raise ConfigError(
                f"'cors_origins' must be a non-empty list of origins, got {origins!r}"
            )
        if not all(isinstance(origin, str) and origin for origin in origins):
            raise ConfigError(f"'cors_origins' entries must be non-empty strings, got {origins!r}")
        object.__setattr__(self, "cors_origins", tuple(origins))

    @property
    def is_production(self) -> bool:
        return self.stage == "prod"

    @property
    def log_retention(self) -> logs.RetentionDays:
        return LOG_RETENTION_DAYS[self.log_retention_days]

    def resource_name(self, prefix: str) -> str:
        """Stage-scoped physical name, e.g. todo-sls-cdk-stack-dev."""
        return f"{prefix}-{self.project}-{self.stage}"

    @classmethod
    def from_dict(cls, stage: str, values: Optional[Mapping[str, Any]] = None) -> "StageConfig":
        """
        Build a config from a raw context mapping.

        Args:
            stage: Stage name
            values: Settings for the stage (unknown keys are rejected)

        Raises:
            ConfigError: If a key is unknown or a value is invalid
        """
        values = dict(values or {})
        known = {f.name for f in fields(cls)} - {"stage"}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(
                f"Unknown settings for stage '{stage}': {', '.join(unknown)}"
            )
        return cls(stage=stage, **values)

    @classmethod
    def from_context(cls, app: App) -> "StageConfig":
        """
        Load the selected stage from the CDK app context.

        Order of precedence for the stage name:
        1. `-c stage=...` or the `stage` key in cdk.json
        2. CDK_STAGE environment variable
        3. "dev"

        Raises:
            ConfigError: If the stage is not defined in the `stages` context
        """
        stage = app.node.try_get_context("stage") or os.getenv("CDK_STAGE", DEFAULT_STAGE)
        stages: Dict[str, Any] = app.node.try_get_context("stages") or {}

        if stage not in stages:
            available = ", ".join(sorted(stages)) or "none"
            raise ConfigError(
                f"Stage '{stage}' not found in cdk.json context. Available: {available}"
            )

        config = cls.from_dict(stage, stages[stage])
        logger.info(f"Loaded configuration for stage '{config.stage}'")
        return config
