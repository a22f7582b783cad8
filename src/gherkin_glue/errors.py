"""Errors surfaced to the host by step matching and invocation."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .step_definition import Location
    from .step_match import StepMatch


class GlueError(Exception):
    """Base class for every error raised by ``gherkin_glue``."""


class UndefinedDynamicStep(GlueError):
    """Raised when a step called from another step has no definition.

    Parameters
    ----------
    step_text : str
        The text that was requested.
    location : Location | None
        Location of the step definition that issued the call, if known.

    """

    def __init__(self, step_text: str, location: Location | None = None) -> None:
        """Record the undefined text and where it was requested from."""
        self.step_text = step_text
        self.location = location
        msg = f'Undefined dynamic step: "{step_text}"'
        if location is not None:
            msg = f"{msg} (called from {location})"
        super().__init__(msg)


class ArityMismatchError(GlueError):
    """Raised when an implementation cannot accept the matched arguments.

    Parameters
    ----------
    expected : int
        Number of arguments produced by the match (captures plus any
        multiline argument).
    actual : int
        Number of positional parameters the implementation declares.
    location : Location | None
        Source location of the step definition.

    """

    def __init__(
        self, expected: int, actual: int, location: Location | None = None
    ) -> None:
        """Build the message from the two counts."""
        self.expected = expected
        self.actual = actual
        self.location = location
        msg = (
            f"Your step implementation takes {_plural(actual, 'argument')}, "
            f"but the pattern matched {_plural(expected, 'argument')}."
        )
        if location is not None:
            msg = f"{msg}\n{location}"
        super().__init__(msg)


class Pending(GlueError):
    """Signals that a step is intentionally not implemented yet."""

    def __init__(self, message: str = "TODO") -> None:
        """Store *message* as the pending reason."""
        self.message = message
        super().__init__(message)


class Ambiguous(GlueError):
    """Raised when more than one step definition matches a step."""

    def __init__(
        self, step_text: str, matches: cabc.Sequence[StepMatch], *, guess: bool
    ) -> None:
        """Describe every competing definition."""
        self.step_text = step_text
        self.matches = tuple(matches)
        self.guess = guess
        lines = [f'Ambiguous match of "{step_text}":', ""]
        lines.extend(f"  {match.backtrace_line()}" for match in self.matches)
        lines.append("")
        if not guess:
            lines.append(
                "You can enable guessing to pick the most specific match "
                "automatically"
            )
        super().__init__("\n".join(lines).rstrip())


class TargetResolutionError(GlueError):
    """Raised when a method-name step cannot resolve its target object."""


class UndefinedParameterTypeError(GlueError):
    """Raised when an expression refers to an unknown parameter type."""

    def __init__(self, name: str, expression: str) -> None:
        """Name the missing type and the expression using it."""
        self.name = name
        self.expression = expression
        super().__init__(
            f"Undefined parameter type {{{name}}} in expression {expression!r}"
        )


class AmbiguousParameterTypeError(GlueError):
    """Raised when a capture group matches several non-preferred types."""

    def __init__(self, source: str, names: cabc.Sequence[str]) -> None:
        """Describe the competing parameter types."""
        self.source = source
        self.names = tuple(names)
        listed = ", ".join(f"{{{name}}}" for name in self.names)
        super().__init__(
            f"Your regular expression group ({source}) matches multiple "
            f"parameter types: {listed}. Mark one of them as "
            "prefer_for_regexp_match or use a cucumber expression instead."
        )


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
