"""Helpers for use inside step implementations.

These functions act on the registry and world of the step currently being
executed, found through :data:`~gherkin_glue.context.current_step_var`::

    from gherkin_glue import dsl

    @registry.given("a signed-in user")
    def signed_in_user():
        dsl.step('a user called "Ada"')
        dsl.steps('''
            When the user signs in
            Then the dashboard is shown
        ''')

"""

from __future__ import annotations

import typing as typ

from .context import current_step_var
from .errors import Pending
from .multiline_argument import DataTable, DocString
from .steps_parser import parse_table

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .multiline_argument import MultilineArgument
    from .step_match import StepMatch

LOG_MEDIA_TYPE = "text/x.cucumber.log+plain"


def _current_match(operation: str) -> StepMatch:
    match = current_step_var.get()
    if match is None:
        msg = f"{operation}() can only be called while a step is executing"
        raise RuntimeError(msg)
    return match


def step(text: str, multiline_argument: MultilineArgument = None) -> object:
    """Run the step matching *text*, optionally with a table or doc string.

    Raises
    ------
    UndefinedDynamicStep
        If no definition matches *text*.

    """
    match = _current_match("step")
    registry = match.step_definition.registry
    return registry.invoke_dynamic_step(text, multiline_argument, match.location)


def steps(steps_text: str) -> None:
    """Run every step in a block of Gherkin step lines."""
    match = _current_match("steps")
    registry = match.step_definition.registry
    registry.invoke_dynamic_steps(steps_text, match.location)


def table(rows: str | cabc.Iterable[cabc.Iterable[str]]) -> DataTable:
    """Build a data table from rows or from ``| a | b |`` text."""
    if isinstance(rows, str):
        return parse_table(rows)
    return DataTable(rows)


def doc_string(content: str, content_type: str = "") -> DocString:
    """Build a doc string for a nested :func:`step` call."""
    return DocString(content, content_type)


def pending(message: str = "TODO") -> typ.NoReturn:
    """Mark the current step as not implemented yet."""
    raise Pending(message)


def attach(data: str | bytes, media_type: str, filename: str | None = None) -> None:
    """Attach *data* to the report of the current step."""
    match = _current_match("attach")
    match.step_definition.registry.attach(data, media_type, filename)


def log(*messages: object) -> None:
    """Attach each message as a log entry; non-strings are converted."""
    match = _current_match("log")
    registry = match.step_definition.registry
    for message in messages:
        text = message if isinstance(message, str) else str(message)
        registry.attach(text, LOG_MEDIA_TYPE, None)


def world() -> object:
    """Return the world of the current scenario."""
    return _current_match("world").step_definition.registry.current_world
