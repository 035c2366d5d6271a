"""
Template rendering for code generation.

Templates are plain jinja2 strings with `{{ name }}` markers and
`{% if name %}` sections. A marker whose argument was not supplied is a
MalformedTemplateError; inside a section condition a missing argument
simply counts as false, so optional flags can be left out.
"""

from functools import lru_cache
from typing import Any

from jinja2 import BaseLoader, Environment, StrictUndefined, Template, TemplateError, UndefinedError

from .errors import MalformedTemplateError


class SectionUndefined(StrictUndefined):
    """StrictUndefined that is falsy in `{% if %}` tests instead of raising."""

    def __bool__(self) -> bool:
        return False


_environment = Environment(
    loader=BaseLoader(),
    undefined=SectionUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    autoescape=False,
)


@lru_cache(maxsize=256)
def _compile(template: str) -> Template:
    return _environment.from_string(template)


def render(template: str, **arguments: Any) -> str:
    """
    Render a template with named arguments.

    Args:
        template: jinja2 template text
        **arguments: Values for the template's markers and sections

    Returns:
        Rendered text

    Raises:
        MalformedTemplateError: If a marker has no argument or the template
            does not compile
    """
    try:
        return _compile(template).render(**arguments)
    except UndefinedError as e:
        raise MalformedTemplateError(f"Template argument missing: {e.message}") from e
    except TemplateError as e:
        raise MalformedTemplateError(f"Invalid template: {e}") from e
