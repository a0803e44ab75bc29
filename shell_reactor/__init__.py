"""
Shell Exec Reactor

Turns filesystem events into shell commands:
- Mustache command templates rendered per event
- Command generator functions called per event
- Ordered command batches run through a pooled executor
"""

from shell_reactor.errors import (
    CommandExecutionFailed,
    ConfigurationError,
    ExecutionError,
    GenerationError,
    RenderError,
    ShellReactorError,
)
from shell_reactor.models.events import CommandResult, IoEvent, IoEventType, ReactorResult
from shell_reactor.models.schemas import ExecutorConfig, ExecutorSettings, ReactorPluginConfig
from shell_reactor.reactor.executor import ExecutorBinding, ShellCommandExecutor
from shell_reactor.reactor.reactor import ShellExecReactor

__all__ = [
    "CommandExecutionFailed",
    "CommandResult",
    "ConfigurationError",
    "ExecutionError",
    "ExecutorBinding",
    "ExecutorConfig",
    "ExecutorSettings",
    "GenerationError",
    "IoEvent",
    "IoEventType",
    "ReactorPluginConfig",
    "ReactorResult",
    "RenderError",
    "ShellCommandExecutor",
    "ShellExecReactor",
    "ShellReactorError",
]
