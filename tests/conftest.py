"""Shared fixtures for reactor tests."""

import asyncio
from typing import List

import pytest
from loguru import logger

from shell_reactor.models.events import CommandResult, IoEvent, IoEventType


class RecordingExecutor:
    """Borrowed-executor stand-in that records every submitted batch."""

    def __init__(self, fail_with: Exception = None):
        self.batches: List[List[str]] = []
        self.fail_with = fail_with
        self.shutdown_calls = 0

    async def execute_commands(self, commands):
        self.batches.append(list(commands))
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        return [CommandResult(command=c, stdout=f"ran {c}", stderr="") for c in commands]

    async def shutdown(self):
        self.shutdown_calls += 1


class CallbackRecorder:
    """Collects the reactor's log, error and initialized callbacks."""

    def __init__(self):
        self.logs = []
        self.errors = []
        self.initialized = []

    def log(self, severity, origin, message):
        self.logs.append((severity, origin, message))

    def error(self, message, error):
        self.errors.append((message, error))

    def init(self, plugin_id):
        self.initialized.append(plugin_id)

    def severities(self):
        return [severity for severity, _, _ in self.logs]


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def callbacks() -> CallbackRecorder:
    return CallbackRecorder()


@pytest.fixture
def event() -> IoEvent:
    return IoEvent(IoEventType.ADD, "/a/b/c.txt")


@pytest.fixture
def loguru_messages():
    """Capture loguru output as a list of ``(level, message)`` tuples."""
    messages = []
    handler_id = logger.add(
        lambda msg: messages.append((msg.record["level"].name, msg.record["message"])),
        level="TRACE",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def executor_factory():
    """Build extra ``RecordingExecutor``s, e.g. failing ones."""
    return RecordingExecutor
