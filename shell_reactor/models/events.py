"""Event and result values passed through the reaction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from shell_reactor.utils.helpers import (
    filename_of,
    generate_uuid,
    parent_name_of,
    parent_path_of,
    stats_to_dict,
)


class IoEventType(str, Enum):
    """Filesystem changes a monitor can report."""

    ADD = "add"
    ADD_DIR = "addDir"
    UNLINK = "unlink"
    UNLINK_DIR = "unlinkDir"
    CHANGE = "change"


@dataclass(frozen=True)
class IoEvent:
    """
    One filesystem occurrence handed to a reactor.

    ``parent_path``, ``filename`` and ``parent_name`` are derived from
    ``full_path`` on every access and never stored on the instance.
    """

    event_type: Union[IoEventType, str]
    full_path: str
    optional_fs_stats: Any = None
    optional_extra_info: Any = None
    uuid: str = field(default_factory=generate_uuid)

    def __post_init__(self) -> None:
        if not isinstance(self.full_path, str) or not self.full_path:
            raise ValueError("IoEvent.full_path must be a non-empty string")

    @property
    def event_type_name(self) -> str:
        if isinstance(self.event_type, IoEventType):
            return self.event_type.value
        return str(self.event_type)

    @property
    def parent_path(self) -> str:
        return parent_path_of(self.full_path)

    @property
    def filename(self) -> str:
        return filename_of(self.full_path)

    @property
    def parent_name(self) -> str:
        return parent_name_of(self.full_path)

    def template_context(self) -> Dict[str, Any]:
        """Build the ``{"event": ...}`` mapping exposed to command templates."""

        return {
            "event": {
                "uuid": self.uuid,
                "eventType": self.event_type_name,
                "fullPath": self.full_path,
                "parentPath": self.parent_path,
                "parentName": self.parent_name,
                "filename": self.filename,
                "optionalStats": stats_to_dict(self.optional_fs_stats),
                "optionalExtraInfo": self.optional_extra_info,
            }
        }


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command inside an executed batch."""

    command: str
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = 0

    @classmethod
    def from_raw(cls, raw: Any) -> "CommandResult":
        """Accept results from executors that report plain mappings."""

        if isinstance(raw, cls):
            return raw
        if isinstance(raw, dict):
            return cls(
                command=str(raw.get("command", "")),
                stdout=raw.get("stdout") or "",
                stderr=raw.get("stderr") or "",
                exit_code=raw.get("exit_code", raw.get("exitCode", 0)),
            )
        return cls(
            command=str(getattr(raw, "command", "")),
            stdout=getattr(raw, "stdout", "") or "",
            stderr=getattr(raw, "stderr", "") or "",
            exit_code=getattr(raw, "exit_code", 0),
        )


@dataclass(frozen=True)
class ReactorResult:
    """Terminal outcome of a single ``react()`` call."""

    success: bool
    plugin_id: str
    reactor_id: str
    event: IoEvent
    message: str
    error: Optional[BaseException] = None
    command_results: Tuple[CommandResult, ...] = ()

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("A successful ReactorResult cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed ReactorResult must carry an error")

    @property
    def is_success(self) -> bool:
        return self.success
