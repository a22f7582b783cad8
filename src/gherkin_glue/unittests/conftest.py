"""Shared pytest fixtures for gherkin-glue unit tests.

This module provides common fixtures used across the ``gherkin_glue``
unit-test suite, avoiding duplication of registry set-up and
context-isolation helpers.

Fixtures
--------
user_interface, registry
    Imported from ``tests/conftest.py`` so unit and behaviour tests build
    registries the same way.
step_match
    Callable returning the single match for a step text.
run_step
    Callable matching a step text and invoking it.
isolated_context
    Runner callable that executes a zero-argument function inside a fresh
    ``contextvars.Context``, preventing cross-test leakage.
logger_with_capture
    Factory callable that creates a named logger with a
    ``StepContextLogFilter``-equipped ``StreamHandler`` and yields the
    ``(logging.Logger, io.StringIO)`` pair, cleaning up the handler on
    exit.

Usage
-----
Fixtures are discovered automatically by pytest when test modules reside
under ``src/gherkin_glue/unittests/``.  No explicit import is needed::

    def test_example(registry, run_step):
        registry.register("Outside", lambda: None)
        run_step("Outside")

"""

from __future__ import annotations

import contextvars
import io
import logging
import typing as typ

import pytest

from gherkin_glue import StepContextLogFilter, StepRegistry
from tests.conftest import (  # noqa: F401 - fixtures shared with tests/bdd
    registry,
    user_interface,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from gherkin_glue import StepMatch
    from gherkin_glue.multiline_argument import MultilineArgument

_STEP_LOG_FORMAT = "[%(step_location)s][%(step_text)s] %(message)s"


@pytest.fixture
def step_match(registry: StepRegistry) -> cabc.Callable[[str], StepMatch]:
    """Return a callable finding the single match for a step text."""

    def find(text: str) -> StepMatch:
        matches = registry.search(text)
        assert matches, f"no step definition matches {text!r}"
        return matches[0]

    return find


@pytest.fixture
def run_step(
    step_match: cabc.Callable[[str], StepMatch],
) -> cabc.Callable[..., object]:
    """Return a callable that matches and invokes a step text."""

    def run(text: str, multiline_argument: MultilineArgument = None) -> object:
        return step_match(text).invoke(multiline_argument)

    return run


@pytest.fixture
def isolated_context() -> cabc.Callable[[cabc.Callable[[], None]], None]:
    """Run a callable in an isolated context.

    Returns
    -------
    cabc.Callable[[cabc.Callable[[], None]], None]
        A runner that executes the supplied zero-argument callable inside
        a fresh ``contextvars.Context``.

    """

    def runner(func: cabc.Callable[[], None]) -> None:
        ctx = contextvars.Context()
        ctx.run(func)

    return runner


@pytest.fixture
def logger_with_capture() -> cabc.Generator[
    cabc.Callable[[str], tuple[logging.Logger, io.StringIO]], None, None
]:
    """Create a logger with ``StepContextLogFilter`` and capture output.

    Yields
    ------
    cabc.Callable[[str], tuple[logging.Logger, io.StringIO]]
        A factory accepting a logger *name* and returning a
        ``(logging.Logger, io.StringIO)`` pair.

    """
    cleanup: list[tuple[logging.Logger, logging.Handler, bool, int]] = []

    def factory(name: str) -> tuple[logging.Logger, io.StringIO]:
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(_STEP_LOG_FORMAT))
        handler.addFilter(StepContextLogFilter())

        test_logger = logging.getLogger(name)
        original_propagate = test_logger.propagate
        original_level = test_logger.level
        test_logger.addHandler(handler)
        test_logger.setLevel(logging.INFO)
        test_logger.propagate = False
        cleanup.append((test_logger, handler, original_propagate, original_level))
        return test_logger, stream

    yield factory

    for lgr, hdlr, orig_propagate, orig_level in cleanup:
        lgr.removeHandler(hdlr)
        lgr.propagate = orig_propagate
        lgr.setLevel(orig_level)
