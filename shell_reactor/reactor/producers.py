"""Capability shared by everything that turns an event into commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shell_reactor.models.events import IoEvent


@runtime_checkable
class CommandProducer(Protocol):
    """
    Produces zero or more shell commands for an event.

    Implementations raise a ``ShellReactorError`` subclass on failure.
    A reactor evaluates its producers in registration order and
    concatenates their output.
    """

    name: str

    def produce(self, event: "IoEvent") -> List[str]:
        ...
