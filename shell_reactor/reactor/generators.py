"""Adapter around a user supplied ``command_generator(event)`` function."""

from typing import Any, Callable, List

from shell_reactor.errors import GenerationError
from shell_reactor.models.events import IoEvent


class CommandGeneratorAdapter:
    """
    Calls the generator and normalizes its output to a list of strings.

    The generator may return None, a single command string or any
    sequence of command strings. Anything else, or any exception it
    raises, becomes a ``GenerationError``.
    """

    name = "commandGenerator"

    def __init__(self, generator: Callable[[IoEvent], Any]):
        if not callable(generator):
            raise TypeError("command_generator must be callable")
        self.generator = generator

    def generate(self, event: IoEvent) -> List[str]:
        try:
            output = self.generator(event)
        except Exception as e:
            raise GenerationError(e) from e

        if output is None:
            return []
        if isinstance(output, str):
            return [output]

        try:
            commands = list(output)
        except TypeError as e:
            raise GenerationError(
                e, f"command generator returned {type(output).__name__}, expected a list of strings"
            ) from e

        for command in commands:
            if not isinstance(command, str):
                raise GenerationError(
                    None,
                    f"command generator returned a non-string command: {command!r}",
                )
        return commands

    # Conforms to CommandProducer
    produce = generate
