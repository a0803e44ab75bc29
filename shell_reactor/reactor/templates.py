"""
Mustache command templates.

Templates see a single top-level ``event`` key::

    rsync {{{event.fullPath}}} backup:/{{event.parentName}}/

Double braces HTML-escape the value, triple braces insert it raw.
"""

from typing import List, Sequence

import chevron

from shell_reactor.errors import RenderError
from shell_reactor.models.events import IoEvent


class TemplateRenderer:
    """Renders one template against one event."""

    def render(self, template: str, event: IoEvent) -> str:
        if not isinstance(template, str):
            raise RenderError(repr(template), TypeError("command template must be a string"))

        try:
            # partials_path=None keeps partial lookups off the filesystem
            return chevron.render(template, event.template_context(), partials_path=None)
        except Exception as e:
            raise RenderError(template, e) from e


class TemplateCommandProducer:
    """Renders every configured template, in order, for an event."""

    name = "commandTemplates"

    def __init__(self, templates: Sequence[str], renderer: TemplateRenderer = None):
        self.templates = tuple(templates)
        self.renderer = renderer or TemplateRenderer()

    def produce(self, event: IoEvent) -> List[str]:
        commands = []
        for template in self.templates:
            command = self.renderer.render(template, event)
            # Templates rendering to nothing contribute no command
            if command:
                commands.append(command)
        return commands
