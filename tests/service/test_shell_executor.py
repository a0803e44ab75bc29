"""
Service-level tests for the shell executor and reactor.

These run real ``/bin/sh`` processes:
- Commands from templates and generators actually execute, in order.
- Failures surface as failed ReactorResults rather than exceptions.
- Pool sizing bounds how many batches run at once.
"""

import asyncio
import os
import shutil

import pytest

from shell_reactor.errors import CommandExecutionFailed, ExecutionError
from shell_reactor.models.events import IoEvent, IoEventType
from shell_reactor.models.schemas import ExecutorConfig, ExecutorSettings, ReactorPluginConfig
from shell_reactor.reactor.executor import ShellCommandExecutor
from shell_reactor.reactor.reactor import ShellExecReactor

pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="a POSIX shell is required")


def test_commands_run_sequentially_in_order(tmp_path):
    executor = ShellCommandExecutor(ExecutorConfig(process_cwd=str(tmp_path)))

    results = asyncio.run(executor.execute_commands([
        "echo one >> order.txt",
        "echo two >> order.txt",
        "cat order.txt",
    ]))

    assert [r.exit_code for r in results] == [0, 0, 0]
    assert results[2].stdout == "one\ntwo\n"


def test_empty_batch_succeeds_without_processes():
    executor = ShellCommandExecutor(ExecutorConfig())

    assert asyncio.run(executor.execute_commands([])) == []


def test_failing_command_stops_the_batch(tmp_path):
    executor = ShellCommandExecutor(ExecutorConfig(process_cwd=str(tmp_path)))

    with pytest.raises(CommandExecutionFailed) as exc_info:
        asyncio.run(executor.execute_commands([
            "echo first",
            "echo oops >&2; exit 3",
            "touch never-created",
        ]))

    failure = exc_info.value
    assert failure.exit_code == 3
    assert failure.stderr == "oops\n"
    assert [r.command for r in failure.results] == ["echo first", "echo oops >&2; exit 3"]
    assert not (tmp_path / "never-created").exists()


def test_environment_and_validation_hook():
    executor = ShellCommandExecutor(ExecutorConfig(
        process_env={"GREETING": "hello"},
        validate_command=lambda command: "rm " not in command,
    ))

    results = asyncio.run(executor.execute_commands(["echo $GREETING"]))
    assert results[0].stdout == "hello\n"

    with pytest.raises(CommandExecutionFailed, match="rejected"):
        asyncio.run(executor.execute_commands(["rm -rf /tmp/whatever"]))


def test_command_timeout():
    executor = ShellCommandExecutor(ExecutorConfig(command_timeout_s=0.2))

    with pytest.raises(CommandExecutionFailed, match="timed out"):
        asyncio.run(executor.execute_commands(["sleep 5"]))


def test_pool_max_bounds_concurrent_batches(tmp_path):
    executor = ShellCommandExecutor(ExecutorConfig(pool_max=1, process_cwd=str(tmp_path)))
    batch = ["echo start >> log.txt", "sleep 0.1", "echo end >> log.txt"]

    async def run_two():
        await asyncio.gather(executor.execute_commands(batch), executor.execute_commands(batch))

    asyncio.run(run_two())

    assert (tmp_path / "log.txt").read_text().split() == ["start", "end", "start", "end"]


def test_shutdown_refuses_new_batches():
    executor = ShellCommandExecutor(ExecutorConfig())

    asyncio.run(executor.shutdown())

    with pytest.raises(RuntimeError):
        asyncio.run(executor.execute_commands(["true"]))


def test_shutdown_stops_an_in_flight_batch(tmp_path):
    executor = ShellCommandExecutor(ExecutorConfig(process_cwd=str(tmp_path)))
    batch = ["sleep 0.3", "sleep 0.5; touch after_shutdown"]

    async def shut_down_mid_batch():
        running = asyncio.ensure_future(executor.execute_commands(batch))
        await asyncio.sleep(0.1)
        await executor.shutdown()
        with pytest.raises(CommandExecutionFailed, match="executor shut down") as exc_info:
            await running
        await asyncio.sleep(0.7)
        return exc_info.value

    failure = asyncio.run(shut_down_mid_batch())

    assert failure.command == "sleep 0.5; touch after_shutdown"
    assert [r.command for r in failure.results] == ["sleep 0.3"]
    assert not (tmp_path / "after_shutdown").exists()


def test_reactor_runs_templates_and_generator_end_to_end(tmp_path, callbacks):
    source = tmp_path / "incoming" / "photo.jpg"
    source.parent.mkdir()
    source.write_bytes(b"jpeg")
    archive = tmp_path / "archive"

    reactor = ShellExecReactor(
        "archiver",
        "e2e",
        callbacks.log,
        callbacks.error,
        callbacks.init,
        ReactorPluginConfig(
            executor=ExecutorSettings(config=ExecutorConfig(process_cwd=str(tmp_path))),
            command_templates=[
                "mkdir -p archive/{{event.parentName}}",
                "cp {{{event.fullPath}}} archive/{{event.parentName}}/",
            ],
            command_generator=lambda e: [f"echo {e.filename} >> archive/manifest.txt"],
        ),
    )
    event = IoEvent(IoEventType.ADD, str(source), os.stat(source))

    async def react_and_close():
        try:
            return await reactor.react(event)
        finally:
            await reactor.close()

    result = asyncio.run(react_and_close())

    assert result.is_success, result.message
    assert (archive / "incoming" / "photo.jpg").read_bytes() == b"jpeg"
    assert (archive / "manifest.txt").read_text() == "photo.jpg\n"
    assert callbacks.initialized == ["archiver"]


def test_reactor_reports_failed_command(tmp_path, callbacks):
    reactor = ShellExecReactor(
        "failer",
        "e2e",
        callbacks.log,
        callbacks.error,
        callbacks.init,
        ReactorPluginConfig(
            executor=ExecutorSettings(config=ExecutorConfig(process_cwd=str(tmp_path))),
            command_templates=["cat {{{event.fullPath}}}"],
        ),
        validate=False,
    )
    event = IoEvent(IoEventType.UNLINK, str(tmp_path / "already-gone.txt"))

    result = asyncio.run(reactor.react(event))

    assert not result.is_success
    assert isinstance(result.error, ExecutionError)
    assert isinstance(result.error.cause, CommandExecutionFailed)
    assert result.error.cause.exit_code != 0
    assert callbacks.errors[0][1] is result.error
