"""
Logging setup and default reactor callbacks backed by loguru.

Reactors never log through a global; they receive a
``log_function(severity, origin, message)`` and an
``error_callback(message, error)``. The functions here are the defaults
an owner passes when it has no logging layer of its own.
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<level>{message}</level>"
)

SEVERITY_LEVELS = {
    "verbose": "TRACE",
    "trace": "TRACE",
    "debug": "DEBUG",
    "info": "INFO",
    "success": "SUCCESS",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with the reactor format."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())


def severity_to_level(severity: str) -> str:
    """Map a callback severity onto a loguru level name."""
    return SEVERITY_LEVELS.get(str(severity).lower(), "INFO")


def loguru_log_function(severity: str, origin: str, message: str) -> None:
    """Default ``log_function`` for reactors; the origin prefixes the message."""
    logger.bind(origin=origin).log(severity_to_level(severity), f"{origin} {message}")


def loguru_error_callback(message: str, error: BaseException = None) -> None:
    """
    Default ``error_callback`` for reactors.

    Reactors already log every failure at error through their
    ``log_function``, so this only adds the traceback at debug.
    """
    if error is not None:
        logger.opt(exception=error).debug(message)
    else:
        logger.debug(message)


def log_initialized_callback(plugin_id: str) -> None:
    """Default ``initialized_callback``; just records readiness."""
    logger.debug(f"Reactor plugin {plugin_id} initialized")
