import pytest

from shell_reactor.errors import RenderError
from shell_reactor.models.events import IoEvent, IoEventType
from shell_reactor.reactor.templates import TemplateCommandProducer, TemplateRenderer


@pytest.fixture
def renderer():
    return TemplateRenderer()


def test_render_event_fields(renderer):
    event = IoEvent(IoEventType.ADD_DIR, "/srv/uploads/batch-7")

    command = renderer.render(
        "process {{event.eventType}} {{event.parentPath}} {{event.parentName}} {{event.filename}}",
        event,
    )

    assert command == "process addDir /srv/uploads uploads batch-7"


def test_double_braces_escape_and_triple_braces_do_not(renderer):
    event = IoEvent(IoEventType.ADD, "/tmp/a&b.txt")

    assert renderer.render("{{event.filename}}", event) == "a&amp;b.txt"
    assert renderer.render("{{{event.filename}}}", event) == "a&b.txt"


def test_missing_field_renders_empty(renderer, event):
    assert renderer.render("echo {{event.nope}}", event) == "echo "


def test_render_is_deterministic(renderer, event):
    template = "cp {{event.fullPath}} /backup/{{event.filename}}"

    assert renderer.render(template, event) == renderer.render(template, event)


def test_malformed_template_raises_render_error(renderer, event):
    template = "{{#event}}echo{{/other}}"

    with pytest.raises(RenderError) as exc_info:
        renderer.render(template, event)

    assert exc_info.value.template == template
    assert exc_info.value.cause is not None
    assert template in str(exc_info.value)


def test_non_string_template_raises_render_error(renderer, event):
    with pytest.raises(RenderError):
        renderer.render(None, event)


def test_producer_keeps_order_and_drops_empty_output(event):
    producer = TemplateCommandProducer(
        ["first {{event.filename}}", "{{event.optionalExtraInfo}}", "second"]
    )

    assert producer.produce(event) == ["first c.txt", "second"]


def test_producer_stops_at_first_failing_template(event):
    producer = TemplateCommandProducer(["ok", "{{#event}}{{/x}}", "never"])

    with pytest.raises(RenderError) as exc_info:
        producer.produce(event)

    assert exc_info.value.template == "{{#event}}{{/x}}"
