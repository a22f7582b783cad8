"""The pairing of a step definition with arguments from a step text."""

from __future__ import annotations

import typing as typ

from .context import current_step_var

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .multiline_argument import MultilineArgument
    from .parameter_types import Argument
    from .step_definition import Location, StepDefinition


class StepMatch:
    """A step definition matched against a specific step text.

    Each match is produced by its own search and owns its arguments.
    Argument values are transformed on every read of :attr:`args`, so
    mutating a value inside an implementation never leaks into another
    read or another search.

    Parameters
    ----------
    step_definition : StepDefinition
        The matching definition.
    step_text : str
        The text that was matched.
    arguments : Sequence[Argument]
        Captured arguments, in order.

    """

    __slots__ = ("_arguments", "_step_definition", "_step_text")

    def __init__(
        self,
        step_definition: StepDefinition,
        step_text: str,
        arguments: cabc.Sequence[Argument],
    ) -> None:
        """Store the definition, text and captured arguments."""
        self._step_definition = step_definition
        self._step_text = step_text
        self._arguments = tuple(arguments)

    @property
    def step_definition(self) -> StepDefinition:
        """The matching definition."""
        return self._step_definition

    @property
    def step_text(self) -> str:
        """The matched text."""
        return self._step_text

    @property
    def step_arguments(self) -> tuple[Argument, ...]:
        """Captured arguments before transformation."""
        return self._arguments

    @property
    def args(self) -> list[object]:
        """Freshly transformed argument values."""
        return [argument.value for argument in self._arguments]

    @property
    def location(self) -> Location | None:
        """Location of the matching definition."""
        return self._step_definition.location

    @property
    def file_colon_line(self) -> str:
        """Location of the matching definition as ``file:line``."""
        return self._step_definition.file_colon_line

    @property
    def text_length(self) -> int:
        """Length of the definition's pattern source."""
        return len(self._step_definition.pattern)

    def backtrace_line(self) -> str:
        """Describe the matching definition for error reports."""
        return self._step_definition.backtrace_line()

    def format_args(self, fmt: str | cabc.Callable[[str], str] = "{}") -> str:
        """Return the step text with every captured argument decorated.

        Parameters
        ----------
        fmt : str | Callable[[str], str]
            A ``str.format`` template with one placeholder, or a callable
            receiving the captured text.

        """
        formatter = fmt if callable(fmt) else fmt.format
        pieces = []
        position = 0
        for argument in self._arguments:
            if argument.start is None or argument.end is None:
                continue
            if argument.start < position:
                continue
            pieces.append(self._step_text[position : argument.start])
            pieces.append(formatter(typ.cast("str", argument.group)))
            position = argument.end
        pieces.append(self._step_text[position:])
        return "".join(pieces)

    def invoke(self, multiline_argument: MultilineArgument = None) -> object:
        """Run the definition with the captured and multiline arguments.

        The match is published in :data:`current_step_var` while the
        implementation runs, so nested ``step`` calls and log filters can
        find it.
        """
        args = self.args
        if multiline_argument is not None:
            args.append(multiline_argument)
        token = current_step_var.set(self)
        try:
            return self._step_definition.invoke(args)
        finally:
            current_step_var.reset(token)

    def __repr__(self) -> str:
        """Show the text and the matching definition."""
        return f"<StepMatch {self._step_text!r} -> {self._step_definition!r}>"
