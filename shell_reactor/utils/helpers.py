"""
Helper utilities for the shell exec reactor.

Common functions used across the reactor, watcher and CLI.
"""

import importlib
import os
import stat
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4


def generate_uuid() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


def parent_path_of(full_path: str) -> str:
    """Directory containing ``full_path``."""
    return os.path.dirname(full_path)


def filename_of(full_path: str) -> str:
    """File or directory name only, no path information."""
    return os.path.basename(full_path)


def parent_name_of(full_path: str) -> str:
    """Name of the directory containing ``full_path``."""
    return os.path.basename(parent_path_of(full_path))


def stats_to_dict(stats: Any) -> Optional[Dict[str, Any]]:
    """
    Convert a stat snapshot into a plain dict for template rendering.

    ``os.stat_result`` fields are exposed under their ``st_*`` names and
    under short aliases (``size``, ``mtime``, ...). Mappings are copied,
    anything else is returned untouched.

    Args:
        stats: ``os.stat_result``, mapping or None

    Returns:
        Dict view of the snapshot, or None when absent
    """
    if stats is None:
        return None

    if isinstance(stats, dict):
        return dict(stats)

    if not isinstance(stats, os.stat_result):
        return stats

    payload = {
        name: getattr(stats, name)
        for name in dir(stats)
        if name.startswith("st_")
    }
    for name, value in list(payload.items()):
        payload[name[3:]] = value

    payload["isFile"] = stat.S_ISREG(stats.st_mode)
    payload["isDirectory"] = stat.S_ISDIR(stats.st_mode)
    payload["isSymbolicLink"] = stat.S_ISLNK(stats.st_mode)
    return payload


def truncate(text: str, max_length: int) -> str:
    """Truncate ``text`` for logging, marking the cut."""
    if text is None:
        return ""
    if max_length <= 0 or len(text) <= max_length:
        return text
    return text[:max_length] + "...[truncated]"


def import_callable(target: str) -> Callable:
    """
    Resolve a ``module:function`` (or ``module.function``) import string.

    Args:
        target: Import string

    Returns:
        The referenced callable

    Raises:
        ImportError: module cannot be imported
        AttributeError: function is missing
        TypeError: attribute is not callable
    """
    if ":" in target:
        module_path, _, attr = target.partition(":")
    else:
        module_path, _, attr = target.rpartition(".")

    if not module_path or not attr:
        raise ImportError(f"Invalid import string '{target}', expected 'module:function'")

    module = importlib.import_module(module_path)
    func = getattr(module, attr)
    if not callable(func):
        raise TypeError(f"'{target}' is not callable")
    return func


def should_exclude_path(path: Path, exclude_patterns: List[str] = None) -> bool:
    """
    Check if path should be excluded based on patterns.

    Args:
        path: Path to check
        exclude_patterns: List of glob patterns to exclude

    Returns:
        True if should exclude, False otherwise
    """
    if exclude_patterns is None:
        exclude_patterns = [
            '*.pyc',
            '*.swp',
            '__pycache__',
            '.git',
            '.DS_Store'
        ]

    for pattern in exclude_patterns:
        if path.match(pattern) or any(fnmatch(part, pattern) for part in path.parts):
            return True

    return False
