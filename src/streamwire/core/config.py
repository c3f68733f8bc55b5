# src/streamwire/core/config.py
"""
Configuration schema and loading for streamwire.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from streamwire.contracts import PlanContext

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


class RuntimeSettings(BaseModel):
    """Deployment context handed to every registered node."""

    model_config = {"frozen": True}

    tenant_id: int = Field(
        default=-1234,
        description="Tenant the compiled plan is deployed for",
    )
    heartbeat_interval_ms: int = Field(
        default=10000,
        gt=0,
        description="Management heartbeat interval for receivers and publishers",
    )


class LoggingSettings(BaseModel):
    """Log output configuration. CLI flags take precedence."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit structured JSON instead of console output",
    )


class StreamwireSettings(BaseModel):
    """Top-level streamwire configuration.

    All settings are validated and frozen after construction. Every field
    has a default, so an empty settings file is valid.
    """

    model_config = {"frozen": True}

    plan_name: str | None = Field(
        default=None,
        min_length=1,
        description="Overrides the name declared on the plan document",
    )
    runtime: RuntimeSettings = Field(
        default_factory=RuntimeSettings,
        description="Runtime deployment context",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    def plan_context(self, plan_name: str) -> PlanContext:
        """Build the runtime context for a plan.

        Args:
            plan_name: Name declared by the plan, used unless plan_name is configured
        """
        return PlanContext(
            plan_name=self.plan_name or plan_name,
            tenant_id=self.runtime.tenant_id,
            heartbeat_interval_ms=self.runtime.heartbeat_interval_ms,
        )


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left as-is so validation reports
    them against the field they were meant for.
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            default = match.group(2)
            if default is not None:
                return default
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path) -> StreamwireSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (STREAMWIRE_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: STREAMWIRE_RUNTIME__TENANT_ID for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated StreamwireSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="STREAMWIRE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return StreamwireSettings(**raw_config)
