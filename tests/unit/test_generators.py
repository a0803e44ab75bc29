import pytest

from shell_reactor.errors import GenerationError
from shell_reactor.reactor.generators import CommandGeneratorAdapter


def test_generator_receives_event_and_order_is_kept(event):
    seen = []

    def generator(io_event):
        seen.append(io_event)
        return ["mkdir -p /out/" + io_event.parent_name, "mv " + io_event.full_path + " /out/"]

    commands = CommandGeneratorAdapter(generator).generate(event)

    assert seen == [event]
    assert commands == ["mkdir -p /out/b", "mv /a/b/c.txt /out/"]


@pytest.mark.parametrize("output, expected", [
    (None, []),
    ([], []),
    ((), []),
    ("single command", ["single command"]),
    (("a", "b"), ["a", "b"]),
])
def test_generator_output_is_normalized(event, output, expected):
    assert CommandGeneratorAdapter(lambda e: output).generate(event) == expected


def test_generator_exception_becomes_generation_error(event):
    def generator(io_event):
        raise KeyError("missing")

    with pytest.raises(GenerationError) as exc_info:
        CommandGeneratorAdapter(generator).generate(event)

    assert isinstance(exc_info.value.cause, KeyError)
    assert isinstance(exc_info.value.__cause__, KeyError)


def test_generator_bad_output_becomes_generation_error(event):
    with pytest.raises(GenerationError):
        CommandGeneratorAdapter(lambda e: 42).generate(event)
    with pytest.raises(GenerationError):
        CommandGeneratorAdapter(lambda e: ["ok", 3]).generate(event)


def test_adapter_requires_callable():
    with pytest.raises(TypeError):
        CommandGeneratorAdapter("not callable")
