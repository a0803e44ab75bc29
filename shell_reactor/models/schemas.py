"""
Pydantic models for reactor configuration.

Shared configuration models across the reactor, executor and CLI.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =====================================================
# Executor Models
# =====================================================

class ExecutorConfig(BaseModel):
    """Configuration for a reactor-owned command executor."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    process_command: str = "/bin/sh"
    process_args: List[str] = []
    pool_max: int = Field(default=4, ge=1)  # batches running at once
    idle_timeout_ms: int = Field(default=5000, ge=0)  # shutdown grace period
    process_cwd: Optional[str] = None
    process_env: Optional[Dict[str, str]] = None
    command_timeout_s: Optional[float] = Field(default=None, gt=0)
    validate_command: Optional[Callable[[str], bool]] = None


class ExecutorSettings(BaseModel):
    """
    Where a reactor's executor comes from.

    ``config`` asks the reactor to build (and own) a new executor;
    ``instance`` hands it an existing one it must never shut down.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    config: Optional[ExecutorConfig] = None
    instance: Optional[Any] = None


# =====================================================
# Reactor Models
# =====================================================

class ReactorPluginConfig(BaseModel):
    """Command sources and executor settings for one reactor."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    executor: ExecutorSettings = ExecutorSettings()
    command_templates: Optional[List[str]] = None
    command_generator: Optional[Callable[..., Any]] = None


# =====================================================
# Reactor Definitions File
# =====================================================

class ReactorDefinition(BaseModel):
    """One reactor entry in the watcher CLI configuration file."""
    plugin_id: str
    reactor_id: str = "default"
    watch_paths: List[str]
    recursive: bool = True
    exclude_patterns: Optional[List[str]] = None
    command_templates: Optional[List[str]] = None
    command_generator: Optional[str] = None  # "module:function"
    executor: Optional[ExecutorConfig] = None
    shared_executor: bool = False


class ReactorFileConfig(BaseModel):
    """Top-level watcher CLI configuration."""
    reactors: List[ReactorDefinition]
    shared_executor: Optional[ExecutorConfig] = None
