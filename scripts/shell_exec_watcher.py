#!/usr/bin/env python3
"""Run shell exec reactors against watched directories.

This module exposes a CLI entrypoint that reads a JSON file of reactor
definitions, watches their paths with watchdog and runs the configured
command templates / generators whenever something changes.  Example::

    {
      "shared_executor": {"pool_max": 2},
      "reactors": [
        {
          "plugin_id": "gzip-logs",
          "watch_paths": ["/var/log/app"],
          "command_templates": ["gzip -k {{{event.fullPath}}}"],
          "shared_executor": true
        }
      ]
    }
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger
from watchdog.observers import Observer

from shell_reactor.errors import ConfigurationError
from shell_reactor.models.schemas import (
    ExecutorSettings,
    ReactorDefinition,
    ReactorFileConfig,
    ReactorPluginConfig,
)
from shell_reactor.reactor.executor import ShellCommandExecutor
from shell_reactor.reactor.reactor import ShellExecReactor
from shell_reactor.utils.config import get_settings, load_reactor_file_config
from shell_reactor.utils.helpers import import_callable
from shell_reactor.utils.logging import configure_logging
from shell_reactor.watchers.filesystem import ReactorEventHandler


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        description="Watch directories and run shell commands when files change.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the JSON reactor definitions file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: SHELL_REACTOR_LOG_LEVEL or INFO).",
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip pre-testing templates and generators at startup.",
    )

    return parser.parse_args(argv)


def build_plugin_config(
    definition: ReactorDefinition,
    shared: Optional[ShellCommandExecutor],
) -> ReactorPluginConfig:
    """Turn one file definition into a ``ReactorPluginConfig``."""

    generator = None
    if definition.command_generator:
        try:
            generator = import_callable(definition.command_generator)
        except (ImportError, AttributeError, TypeError) as exc:
            raise ConfigurationError(
                f"Reactor '{definition.plugin_id}' could not load command_generator "
                f"'{definition.command_generator}': {exc}"
            ) from exc

    if definition.shared_executor:
        if definition.executor is not None:
            raise ConfigurationError(
                f"Reactor '{definition.plugin_id}' sets both 'executor' and "
                "'shared_executor'; use one or the other"
            )
        if shared is None:
            raise ConfigurationError(
                f"Reactor '{definition.plugin_id}' asks for the shared executor "
                "but no 'shared_executor' is configured"
            )
        executor = ExecutorSettings(instance=shared)
    else:
        executor = ExecutorSettings(
            config=definition.executor or get_settings().default_executor_config()
        )

    return ReactorPluginConfig(
        executor=executor,
        command_templates=definition.command_templates,
        command_generator=generator,
    )


def build_reactors(
    file_config: ReactorFileConfig,
    validate: bool = True,
) -> Tuple[List[ShellExecReactor], Optional[ShellCommandExecutor]]:
    """
    Build every configured reactor.

    Returns:
        The reactors and the shared executor (if one is configured), which
        the caller must shut down after the reactors are closed
    """

    shared = None
    if file_config.shared_executor is not None:
        shared = ShellCommandExecutor(file_config.shared_executor)

    reactors = []
    for definition in file_config.reactors:
        reactor = ShellExecReactor(
            plugin_id=definition.plugin_id,
            reactor_id=definition.reactor_id,
            plugin_config=build_plugin_config(definition, shared),
            validate=validate,
        )
        if reactor.configuration_error is not None:
            raise reactor.configuration_error
        reactors.append(reactor)

    return reactors, shared


async def run(file_config: ReactorFileConfig, validate: bool = True) -> int:
    """Watch every configured path until SIGINT/SIGTERM."""

    loop = asyncio.get_running_loop()
    reactors, shared = build_reactors(file_config, validate=validate)

    stop_event = asyncio.Event()

    def _signal_handler(signum):
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, _signal_handler, signum)

    observers: list[Observer] = []
    try:
        for definition, reactor in zip(file_config.reactors, reactors):
            handler = ReactorEventHandler([reactor], loop, definition.exclude_patterns)
            for watch_path in definition.watch_paths:
                path = Path(watch_path).expanduser()
                if not path.is_dir():
                    logger.warning(f"Skipping missing watch path: {path}")
                    continue
                observer = Observer()
                observer.schedule(handler, str(path), recursive=definition.recursive)
                observer.daemon = True
                observer.start()
                observers.append(observer)
                logger.success(f"[{reactor.get_id()}] Watching {path}")

        if not observers:
            logger.error("No valid directories to monitor.")
            return 1

        await stop_event.wait()
    finally:
        for observer in observers:
            observer.stop()
        for observer in observers:
            observer.join()
        for reactor in reactors:
            await reactor.close()
        if shared is not None:
            await shared.shutdown()

    logger.info("Shell exec watcher stopped.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)

    try:
        file_config = load_reactor_file_config(args.config)
        return asyncio.run(run(file_config, validate=not args.no_validate))
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
