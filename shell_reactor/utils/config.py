"""
Configuration management for the shell exec reactor.

Uses pydantic-settings to load process-wide settings from environment
variables and .env files, and pydantic models to load the reactor
definitions file used by the watcher CLI.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shell_reactor.models.schemas import ExecutorConfig, ReactorFileConfig
from shell_reactor.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Logging Configuration
    log_level: str = "INFO"
    max_output_chars: int = 2000  # stdout/stderr truncation in logs

    # Probe Event Configuration
    probe_event_type: str = "testEventType"
    probe_event_path: str = "/test/full/path/tothing"

    # Default Executor Configuration
    process_command: str = "/bin/sh"
    pool_max: int = 4
    idle_timeout_ms: int = 5000
    command_timeout_s: Optional[float] = None

    model_config = SettingsConfigDict(
        env_prefix="SHELL_REACTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def default_executor_config(self) -> ExecutorConfig:
        """Executor config used when a reactor definition omits one."""
        return ExecutorConfig(
            process_command=self.process_command,
            pool_max=self.pool_max,
            idle_timeout_ms=self.idle_timeout_ms,
            command_timeout_s=self.command_timeout_s,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_reactor_file_config(path: Path) -> ReactorFileConfig:
    """Load and validate the JSON reactor definitions file."""

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Failed to parse JSON configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be an object")

    try:
        file_config = ReactorFileConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid reactor configuration: {exc}") from exc

    if not file_config.reactors:
        raise ConfigurationError("Configuration must define at least one reactor")

    for definition in file_config.reactors:
        logger.info(
            f"Loaded reactor definition '{definition.plugin_id}' "
            f"({len(definition.command_templates or [])} templates, "
            f"generator={definition.command_generator or 'none'})"
        )

    return file_config
