"""
Shell exec reactor.

Reacts to ``IoEvent``s by rendering mustache command templates and/or
calling a command generator function, then running the resulting batch
through an executor. Every ``react()`` call resolves to a
``ReactorResult``; failures never escape as exceptions.
"""

import os
from typing import Any, Callable, List, Mapping, Optional, Union

from pydantic import ValidationError

from shell_reactor.errors import (
    ConfigurationError,
    ExecutionError,
    GenerationError,
    RenderError,
    ShellReactorError,
)
from shell_reactor.models.events import IoEvent, ReactorResult
from shell_reactor.models.schemas import ReactorPluginConfig
from shell_reactor.reactor.executor import ExecutorBinding
from shell_reactor.reactor.generators import CommandGeneratorAdapter
from shell_reactor.reactor.producers import CommandProducer
from shell_reactor.reactor.templates import TemplateCommandProducer
from shell_reactor.utils.config import Settings, get_settings
from shell_reactor.utils.helpers import truncate
from shell_reactor.utils.logging import (
    log_initialized_callback,
    loguru_error_callback,
    loguru_log_function,
)

LogFunction = Callable[[str, str, str], None]
ErrorCallback = Callable[[str, Optional[BaseException]], None]
InitializedCallback = Callable[[str], None]


def build_probe_event(settings: Optional[Settings] = None) -> IoEvent:
    """
    Synthetic event used to pre-test templates and generators.

    Its type and path are placeholders from settings; its stats are a real
    snapshot of this module's own file.
    """
    settings = settings or get_settings()
    try:
        stats = os.stat(__file__)
    except OSError:
        stats = None
    return IoEvent(settings.probe_event_type, settings.probe_event_path, stats)


class ShellExecReactor:
    """Reactor plugin that runs shell commands for filesystem events."""

    def __init__(
        self,
        plugin_id: str,
        reactor_id: str,
        log_function: LogFunction = loguru_log_function,
        error_callback: ErrorCallback = loguru_error_callback,
        initialized_callback: InitializedCallback = log_initialized_callback,
        plugin_config: Union[ReactorPluginConfig, Mapping[str, Any], None] = None,
        validate: bool = True,
    ):
        """
        Initialize the reactor.

        Configuration problems are reported through ``log_function`` and
        ``error_callback`` instead of being raised; the reactor is still
        created and answers every ``react()`` with a failed result.

        Args:
            plugin_id: Identifier used to route events to this reactor
            reactor_id: Identifier of the owning reactor pipeline
            log_function: ``(severity, origin, message)`` logging callback
            error_callback: ``(message, error)`` error sink
            initialized_callback: ``(plugin_id)``, called once construction finishes
            plugin_config: ``ReactorPluginConfig`` or an equivalent mapping
            validate: Pre-test command sources against the probe event
        """
        self._plugin_id = plugin_id
        self._reactor_id = reactor_id
        self._log_function = log_function
        self._error_callback = error_callback
        self._initialized_callback = initialized_callback

        self._settings: Optional[Settings] = None
        self._executor: Optional[ExecutorBinding] = None
        self._producers: List[CommandProducer] = []
        self._config_error: Optional[ConfigurationError] = None

        try:
            self._configure(plugin_config)
        except ConfigurationError as e:
            self._fail_configuration(e)
        except Exception as e:
            self._fail_configuration(self._unexpected(e))

        if validate and self._producers and self._settings is not None:
            try:
                self.validate()
            except Exception as e:
                self._fail_configuration(self._unexpected(e))

        self._initialized_callback(self.get_id())

    @property
    def origin(self) -> str:
        return f"{type(self).__name__}[{self._reactor_id}][{self._plugin_id}]"

    @property
    def reactor_id(self) -> str:
        return self._reactor_id

    @property
    def owns_executor(self) -> bool:
        return self._executor is not None and self._executor.owned

    @property
    def producers(self) -> List[CommandProducer]:
        return list(self._producers)

    @property
    def configuration_error(self) -> Optional[ConfigurationError]:
        return self._config_error

    def get_id(self) -> str:
        """Identifier used to bind this reactor plugin to an event source."""
        return self._plugin_id

    # Construction --------------------------------------------------------------

    def _configure(self, plugin_config) -> None:
        try:
            self._settings = get_settings()
        except ValidationError as e:
            raise ConfigurationError(f"invalid SHELL_REACTOR_* settings: {e}") from e

        if plugin_config is None:
            raise ConfigurationError("plugin_config is required")

        if not isinstance(plugin_config, ReactorPluginConfig):
            try:
                plugin_config = ReactorPluginConfig.model_validate(plugin_config)
            except ValidationError as e:
                raise ConfigurationError(f"invalid plugin_config: {e}") from e

        # Producers are registered before the executor is bound; validate()
        # runs on them even when binding fails.
        if plugin_config.command_templates is not None:
            self._producers.append(TemplateCommandProducer(plugin_config.command_templates))
        if plugin_config.command_generator is not None:
            self._producers.append(CommandGeneratorAdapter(plugin_config.command_generator))

        try:
            self._executor = ExecutorBinding.from_settings(plugin_config.executor)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"error constructing executor: {e}") from e

        if not self._producers:
            raise ConfigurationError(
                "plugin_config must define 'command_templates' and/or 'command_generator'"
            )

    def validate(self) -> List[ShellReactorError]:
        """
        Pre-test every command source against the probe event.

        Outputs are logged at info, failures at error and sent to the
        error callback. Nothing is raised.

        Returns:
            The errors found, empty when every source produced output
        """
        if self._settings is None:
            error = self._config_error or ConfigurationError("settings are not resolved")
            self._report(f"cannot pre-test command sources: {error}", error)
            return [error]

        probe = build_probe_event(self._settings)
        errors: List[ShellReactorError] = []

        for producer in self._producers:
            try:
                output = producer.produce(probe)
                self._log("info", f"{producer.name} pre-test produced commands: {output}")
            except (RenderError, GenerationError) as e:
                errors.append(e)
                self._report(f"error pre-testing {producer.name}: {e}", e)

        return errors

    # Reaction -------------------------------------------------------------------

    async def react(self, event: IoEvent) -> ReactorResult:
        """
        Run the commands produced for ``event``.

        Args:
            event: Event to react to

        Returns:
            ReactorResult; on failure ``error`` holds a ShellReactorError
        """
        try:
            return await self._react(event)
        except Exception as e:
            message = f"Unexpected error reacting to event: {e}"
            self._report(message, e)
            return self._result(False, event, message, error=e)

    async def _react(self, event: IoEvent) -> ReactorResult:
        self._log("info", f"REACT[{self.get_id()}]() invoked: {event.event_type_name} for: {event.full_path}")

        if self._config_error is not None or self._executor is None:
            error = self._config_error or ConfigurationError("no executor configured")
            message = f"Reactor is not configured, no commands executed: {error}"
            self._log("warn", message)
            return self._result(False, event, message, error=error)

        commands: List[str] = []
        for producer in self._producers:
            try:
                commands.extend(producer.produce(event))
            except RenderError as e:
                message = f"Error generating command from mustache template: {e.template} {e.cause}"
                self._report(message, e)
                return self._result(False, event, message, error=e)
            except GenerationError as e:
                message = f"Error generating command from command generator function: {e}"
                self._report(message, e)
                return self._result(False, event, message, error=e)

        if not commands:
            self._log("debug", f"No commands produced for: {event.full_path}, submitting empty batch")

        try:
            results = await self._executor.execute_commands(commands)
        except Exception as e:
            error = ExecutionError(e, commands)
            error.__cause__ = e
            message = f"Error executing commands: {e}"
            self._report(message, error)
            return self._result(False, event, message, error=error)

        max_chars = self._settings.max_output_chars
        for result in results:
            self._log(
                "info",
                f"CmdResult: cmd: {result.command} "
                f"stdout: {truncate(result.stdout, max_chars)} "
                f"stderr: {truncate(result.stderr, max_chars)}",
            )

        return self._result(
            True, event, "Executed commands successfully", command_results=tuple(results)
        )

    def _result(self, success: bool, event: IoEvent, message: str, error=None, command_results=()) -> ReactorResult:
        return ReactorResult(
            success=success,
            plugin_id=self.get_id(),
            reactor_id=self._reactor_id,
            event=event,
            message=message,
            error=error,
            command_results=command_results,
        )

    # Teardown ---------------------------------------------------------------------

    async def close(self) -> None:
        """Shut down the executor when this reactor owns it."""
        if self._executor is None:
            return
        if self._executor.owned:
            self._log("info", "Shutting down owned executor")
        await self._executor.close()

    async def __aenter__(self) -> "ShellExecReactor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Helpers ----------------------------------------------------------------------

    def _log(self, severity: str, message: str) -> None:
        self._log_function(severity, self.origin, message)

    def _report(self, message: str, error: Optional[BaseException]) -> None:
        self._log("error", message)
        self._error_callback(f"{self.origin} {message}", error)

    def _fail_configuration(self, error: ConfigurationError) -> None:
        self._config_error = error
        self._report(f"configuration error: {error}", error)

    @staticmethod
    def _unexpected(error: Exception) -> ConfigurationError:
        wrapped = ConfigurationError(f"unexpected error: {error}")
        wrapped.__cause__ = error
        return wrapped
