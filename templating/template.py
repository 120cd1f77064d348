# templating/template.py
import logging
from collections.abc import Mapping
from typing import Any, Dict

from jinja2 import BaseLoader, Environment

from observability.logging import render_logger, source_context

logger = logging.getLogger(__name__)

OPEN_MARKER = "{{"
CLOSE_MARKER = "}}"

# Failures of the interpreter itself; these are never wrapped
HOST_FAILURES = (MemoryError, SystemError)


class TemplateRenderError(Exception):
    """Exception raised when template rendering fails."""
    def __init__(self, message: str, template: str = None, cause: Exception = None):
        self.template = template
        self.cause = cause
        super().__init__(message)


class StringTemplateLoader(BaseLoader):
    """
    Loader whose template names are the template sources themselves.

    Lets ``environment.get_template(text)`` compile a literal template once
    and serve later calls from the environment's template cache.
    """

    def __init__(self, source_name: str = "unknown"):
        self.source_name = source_name

    def get_source(self, environment, template):
        return template, self.source_name, lambda: True


def has_template_markers(value: Any) -> bool:
    """True if ``value`` is a string holding both template delimiters."""
    return isinstance(value, str) and OPEN_MARKER in value and CLOSE_MARKER in value


def source_name_of(environment: Environment):
    """Source name reported by the environment's string loader, if any."""
    return getattr(environment.loader, "source_name", None)


def _compile(environment: Environment, template: str):
    if isinstance(environment.loader, StringTemplateLoader):
        return environment.get_template(template)
    return environment.from_string(template)


def render_string(environment: Environment, template: str, context: Mapping) -> str:
    """
    Compile a single template string and render it against ``context``.

    Args:
        environment: Jinja2 environment holding the registered helpers
        template: Template source, e.g. ``"Hello {{ name }}"``
        context: Variables available to the template

    Returns:
        The rendered string

    Raises:
        TemplateRenderError: If compilation or evaluation fails
    """
    with source_context(source_name_of(environment)):
        try:
            return _compile(environment, template).render(context)
        except HOST_FAILURES as e:
            render_logger.host_failure("render_string", e)
            raise
        except Exception as e:
            render_logger.render_failed(template, e)
            raise TemplateRenderError(
                f"render_string: {e}",
                template=template,
                cause=e
            ) from e


def render_tree(environment: Environment, tree: Mapping, context: Mapping) -> Dict[str, Any]:
    """
    Recursively render template markers in a nested mapping.

    String values containing both ``{{`` and ``}}`` are rendered, nested
    mappings are rendered with the same context, and every other value is
    carried over unchanged. The input is never modified; a new dict with the
    same keys in the same order is returned.

    Raises:
        TemplateRenderError: If any string value fails to render

    Examples:
        >>> render_tree(env, {"greeting": "Hi {{ name }}", "n": 3}, {"name": "Ann"})
        {'greeting': 'Hi Ann', 'n': 3}
    """
    rendered = {}
    for key, value in tree.items():
        if has_template_markers(value):
            rendered[key] = render_string(environment, value, context)
        elif isinstance(value, Mapping):
            rendered[key] = render_tree(environment, value, context)
        else:
            rendered[key] = value
    return rendered
