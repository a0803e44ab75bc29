"""Error taxonomy for the reaction pipeline."""

from typing import List, Optional, Sequence


class ShellReactorError(Exception):
    """Base class for reactor failures."""


class ConfigurationError(ShellReactorError):
    """Raised when a reactor's configuration is missing or invalid."""


class RenderError(ShellReactorError):
    """A command template could not be rendered for an event."""

    def __init__(self, template: str, cause: Optional[BaseException] = None):
        self.template = template
        self.cause = cause
        super().__init__(f"Error rendering command template [{template}]: {cause}")


class GenerationError(ShellReactorError):
    """The user supplied command generator failed."""

    def __init__(self, cause: Optional[BaseException] = None, message: str = None):
        self.cause = cause
        super().__init__(message or f"Error generating commands from command generator: {cause}")


class ExecutionError(ShellReactorError):
    """The executor reported failure for a submitted batch."""

    def __init__(self, cause: Optional[BaseException], commands: Sequence[str]):
        self.cause = cause
        self.commands: List[str] = list(commands)
        super().__init__(f"Error executing commands: {cause}")


class CommandExecutionFailed(ShellReactorError):
    """A command in a batch exited badly, timed out or was rejected."""

    def __init__(
        self,
        command: str,
        reason: str,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        results: Optional[list] = None,
    ):
        self.command = command
        self.reason = reason
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.results = list(results or [])
        super().__init__(f"Command [{command}] {reason}")
