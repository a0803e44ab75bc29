"""
Watchdog bridge for shell exec reactors.

Converts watchdog file system events into ``IoEvent``s and dispatches them
to reactors running on an asyncio event loop.
"""

import asyncio
import os
from concurrent.futures import Future
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler

from shell_reactor.models.events import IoEvent, IoEventType, ReactorResult
from shell_reactor.reactor.reactor import ShellExecReactor
from shell_reactor.utils.helpers import should_exclude_path


def snapshot_stats(path: str) -> Optional[os.stat_result]:
    """Stat ``path`` if it still exists."""
    try:
        return os.stat(path)
    except OSError:
        return None


def to_io_event(event_type: IoEventType, path: str, extra_info: dict = None) -> IoEvent:
    """Build an ``IoEvent`` with a stat snapshot taken now."""
    full_path = os.path.abspath(path)
    return IoEvent(event_type, full_path, snapshot_stats(full_path), extra_info)


class ReactorEventHandler(FileSystemEventHandler):
    """Watchdog handler that feeds events to reactors."""

    def __init__(
        self,
        reactors: Iterable[ShellExecReactor],
        loop: asyncio.AbstractEventLoop,
        exclude_patterns: Optional[List[str]] = None,
    ):
        """
        Initialize event handler.

        Args:
            reactors: Reactors that receive every event
            loop: Running event loop the reactions are scheduled on
            exclude_patterns: Path patterns to ignore (defaults to editor/VCS noise)
        """
        super().__init__()
        self.reactors = list(reactors)
        self.loop = loop
        self.exclude_patterns = exclude_patterns

    def should_process(self, path: str) -> bool:
        return not should_exclude_path(Path(path), self.exclude_patterns)

    def dispatch_io_event(self, io_event: IoEvent) -> List[Future]:
        """
        Schedule ``react()`` on every reactor.

        Returns:
            One future per reactor, resolving to its ReactorResult
        """
        futures = []
        for reactor in self.reactors:
            future = asyncio.run_coroutine_threadsafe(reactor.react(io_event), self.loop)
            future.add_done_callback(_log_reaction)
            futures.append(future)
        return futures

    def on_created(self, event: FileSystemEvent):
        """Handle file/directory creation."""
        if not self.should_process(event.src_path):
            return

        event_type = IoEventType.ADD_DIR if event.is_directory else IoEventType.ADD
        logger.debug(f"Created: {event.src_path}")
        self.dispatch_io_event(to_io_event(event_type, event.src_path))

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification."""
        if not self.should_process(event.src_path):
            return

        # Skip directory modifications (too noisy)
        if event.is_directory:
            return

        logger.debug(f"Modified: {event.src_path}")
        self.dispatch_io_event(to_io_event(IoEventType.CHANGE, event.src_path))

    def on_deleted(self, event: FileSystemEvent):
        """Handle file/directory deletion."""
        if not self.should_process(event.src_path):
            return

        event_type = IoEventType.UNLINK_DIR if event.is_directory else IoEventType.UNLINK
        logger.debug(f"Deleted: {event.src_path}")
        self.dispatch_io_event(to_io_event(event_type, event.src_path))

    def on_moved(self, event: FileSystemEvent):
        """Handle move/rename as a removal followed by an addition."""
        logger.debug(f"Moved: {event.src_path} -> {event.dest_path}")
        extra = {"movedFrom": event.src_path, "movedTo": event.dest_path}

        if self.should_process(event.src_path):
            event_type = IoEventType.UNLINK_DIR if event.is_directory else IoEventType.UNLINK
            self.dispatch_io_event(to_io_event(event_type, event.src_path, extra))

        if event.dest_path and self.should_process(event.dest_path):
            event_type = IoEventType.ADD_DIR if event.is_directory else IoEventType.ADD
            self.dispatch_io_event(to_io_event(event_type, event.dest_path, extra))


def _log_reaction(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error(f"Reaction crashed: {exc}")
        return

    result: ReactorResult = future.result()
    if result.is_success:
        logger.info(f"[{result.plugin_id}] {result.event.event_type_name} {result.event.full_path}: {result.message}")
    else:
        logger.warning(f"[{result.plugin_id}] {result.event.event_type_name} {result.event.full_path}: {result.message}")
