"""
Executor binding for reactors.

Provides:
- The ``CommandExecutor`` protocol reactors submit batches to
- ``ShellCommandExecutor``, the executor a reactor builds from an ``ExecutorConfig``
- ``ExecutorBinding``, the owned vs borrowed wrapper a reactor holds
"""

import asyncio
import inspect
import os
from dataclasses import dataclass
from typing import Any, List, Protocol, Sequence, Set, Union, runtime_checkable

from loguru import logger

from shell_reactor.errors import CommandExecutionFailed, ConfigurationError
from shell_reactor.models.events import CommandResult
from shell_reactor.models.schemas import ExecutorConfig, ExecutorSettings


@runtime_checkable
class CommandExecutor(Protocol):
    """Runs an ordered batch of commands and reports each outcome."""

    async def execute_commands(self, commands: Sequence[str]) -> List[CommandResult]:
        ...

    async def shutdown(self) -> None:
        ...


class ShellCommandExecutor:
    """
    Runs command batches through ``process_command [process_args] -c <command>``.

    Commands in a batch run one after another, in order. At most
    ``pool_max`` batches run at the same time; further submissions wait
    for a free slot. The first command that exits non-zero, times out or
    is rejected by ``validate_command`` fails the batch and the remaining
    commands are skipped.
    """

    def __init__(self, config: ExecutorConfig):
        """
        Initialize the executor.

        Args:
            config: Executor configuration
        """
        if not config.process_command:
            raise ConfigurationError("process_command must not be empty")
        if config.process_cwd and not os.path.isdir(config.process_cwd):
            raise ConfigurationError(f"process_cwd does not exist: {config.process_cwd}")

        self.config = config
        self._slots = asyncio.Semaphore(config.pool_max)
        self._running: Set[asyncio.subprocess.Process] = set()
        self._closed = False

        logger.debug(
            f"Shell executor ready: {config.process_command} "
            f"(pool_max={config.pool_max}, cwd={config.process_cwd or os.getcwd()})"
        )

    @property
    def closed(self) -> bool:
        return self._closed

    async def execute_commands(self, commands: Sequence[str]) -> List[CommandResult]:
        """
        Execute ``commands`` sequentially.

        Returns:
            One ``CommandResult`` per command, in submission order

        Raises:
            CommandExecutionFailed: a command failed; carries the results so far
        """
        if self._closed:
            raise RuntimeError("executor has been shut down")

        results: List[CommandResult] = []
        if not commands:
            return results

        async with self._slots:
            for command in commands:
                if self._closed:
                    raise CommandExecutionFailed(command, "executor shut down", results=results)
                self._check_command(command, results)
                results.append(await self._run(command, results))

        return results

    def _check_command(self, command: str, results: List[CommandResult]) -> None:
        hook = self.config.validate_command
        if hook is None:
            return
        try:
            allowed = hook(command)
        except Exception as e:
            raise CommandExecutionFailed(command, f"validation hook raised: {e}", results=results) from e
        if not allowed:
            raise CommandExecutionFailed(command, "was rejected by validate_command", results=results)

    async def _run(self, command: str, results: List[CommandResult]) -> CommandResult:
        env = None
        if self.config.process_env is not None:
            env = {**os.environ, **self.config.process_env}

        process = await asyncio.create_subprocess_exec(
            self.config.process_command,
            *self.config.process_args,
            "-c",
            command,
            cwd=self.config.process_cwd,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        self._running.add(process)

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.command_timeout_s
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CommandExecutionFailed(
                command,
                f"timed out after {self.config.command_timeout_s}s",
                results=results,
            ) from e
        finally:
            self._running.discard(process)

        result = CommandResult(
            command=command,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            exit_code=process.returncode,
        )

        if process.returncode != 0:
            raise CommandExecutionFailed(
                command,
                f"exited with status {process.returncode}",
                exit_code=process.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                results=results + [result],
            )

        return result

    async def shutdown(self) -> None:
        """Refuse further commands and give running ones ``idle_timeout_ms`` to finish."""
        if self._closed:
            return
        self._closed = True

        running = list(self._running)
        if not running:
            return

        logger.info(f"Waiting for {len(running)} running command(s) before shutdown")
        _, pending = await asyncio.wait(
            [asyncio.ensure_future(process.wait()) for process in running],
            timeout=self.config.idle_timeout_ms / 1000,
        )
        if pending:
            for process in running:
                if process.returncode is None:
                    process.kill()
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(f"Killed {len(pending)} command(s) still running at shutdown")


# =====================================================
# Owned vs borrowed executors
# =====================================================

@dataclass(frozen=True)
class OwnedExecutor:
    """Build a new executor from ``config``; the reactor shuts it down."""
    config: ExecutorConfig


@dataclass(frozen=True)
class BorrowedExecutor:
    """Reuse an existing executor; its owner manages its lifetime."""
    instance: Any


ExecutorSource = Union[OwnedExecutor, BorrowedExecutor]


def resolve_executor_source(settings: ExecutorSettings) -> ExecutorSource:
    """Turn ``ExecutorSettings`` into the tagged owned/borrowed choice."""

    if settings.config is not None and settings.instance is not None:
        raise ConfigurationError("executor settings must contain either 'instance' or 'config', not both")
    if settings.config is not None:
        return OwnedExecutor(settings.config)
    if settings.instance is not None:
        if not hasattr(settings.instance, "execute_commands"):
            raise ConfigurationError("executor 'instance' has no execute_commands() method")
        return BorrowedExecutor(settings.instance)
    raise ConfigurationError("executor settings must contain either 'instance' or 'config'")


class ExecutorBinding:
    """The executor a reactor submits to, plus whether the reactor owns it."""

    def __init__(self, executor: Any, owned: bool):
        self.executor = executor
        self.owned = owned

    @classmethod
    def from_settings(cls, settings: ExecutorSettings) -> "ExecutorBinding":
        source = resolve_executor_source(settings)
        if isinstance(source, OwnedExecutor):
            return cls(ShellCommandExecutor(source.config), owned=True)
        return cls(source.instance, owned=False)

    async def execute_commands(self, commands: Sequence[str]) -> List[CommandResult]:
        outcome = self.executor.execute_commands(list(commands))
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return [CommandResult.from_raw(raw) for raw in (outcome or [])]

    async def close(self) -> None:
        """Shut down the executor if, and only if, it is owned."""
        if not self.owned:
            return
        outcome = self.executor.shutdown()
        if inspect.isawaitable(outcome):
            await outcome
