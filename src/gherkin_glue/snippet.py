"""Code skeletons proposing step definitions for undefined steps.

Four styles are available. Three of them infer a literal regular
expression from the step text, turning double-quoted substrings and runs
of digits into capture groups:

``regexp``
    ``Given(/^I have (\\d+) cukes$/) do |arg1|``
``classic``
    ``Given /^I have (\\d+) cukes$/ do |arg1|``
``percent``
    ``Given %r{^I have (\\d+) cukes$} do |arg1|``

The ``cucumber_expression`` style asks the :class:`ExpressionGenerator`
for candidate expressions and lists the runners-up as comments.
"""

from __future__ import annotations

import abc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .expression_generator import ExpressionGenerator
    from .multiline_argument import MultilineArgument

PLACEHOLDER = (
    "pending # Write code here that turns the phrase above into concrete actions"
)
QUOTED_GROUP = '"([^"]*)"'
DIGITS_GROUP = r"(\d+)"

_ARGUMENT_TEXT = re.compile(r'"[^"]*"|\d+')


def _escape(text: str, *, escape_slashes: bool) -> str:
    escaped = re.escape(text)
    for char in (" ", "&", "~"):
        escaped = escaped.replace("\\" + char, char)
    if escape_slashes:
        escaped = escaped.replace("/", "\\/")
    return escaped


def infer_regexp(step_text: str, *, escape_slashes: bool = True) -> tuple[str, int]:
    """Build an anchored pattern for *step_text*.

    Double-quoted substrings and maximal digit runs become capture
    groups, scanned left to right; everything else is escaped.

    Returns
    -------
    tuple[str, int]
        The pattern and its number of capture groups.

    """
    parts = []
    position = 0
    groups = 0
    for found in _ARGUMENT_TEXT.finditer(step_text):
        parts.append(
            _escape(step_text[position : found.start()], escape_slashes=escape_slashes)
        )
        parts.append(QUOTED_GROUP if found.group().startswith('"') else DIGITS_GROUP)
        groups += 1
        position = found.end()
    parts.append(_escape(step_text[position:], escape_slashes=escape_slashes))
    return f"^{''.join(parts)}$", groups


class Snippet(abc.ABC):
    """Base class for snippet renderers.

    Parameters
    ----------
    generator : ExpressionGenerator
        Source of candidate expressions.
    keyword : str
        Keyword that opens the snippet, for example ``Given``.
    step_text : str
        The undefined step text.
    multiline_argument : DataTable | DocString | None
        Multiline argument carried by the step.

    """

    __slots__ = ("_generator", "_keyword", "_multiline_argument", "_step_text")

    description: typ.ClassVar[str]

    def __init__(
        self,
        generator: ExpressionGenerator,
        keyword: str,
        step_text: str,
        multiline_argument: MultilineArgument = None,
    ) -> None:
        """Store what is needed to render the snippet."""
        self._generator = generator
        self._keyword = keyword
        self._step_text = step_text
        self._multiline_argument = multiline_argument

    @abc.abstractmethod
    def header_lines(self) -> list[str]:
        """Return the line(s) that open the step definition."""

    def _block_parameters(self, names: cabc.Iterable[str]) -> str:
        parameters = list(names)
        if self._multiline_argument is not None:
            parameters.append(self._multiline_argument.block_parameter_name)
        if not parameters:
            return ""
        return f" |{', '.join(parameters)}|"

    def render(self) -> str:
        """Return the complete snippet text."""
        lines = self.header_lines()
        if self._multiline_argument is not None:
            comment = self._multiline_argument.snippet_comment()
            if comment is not None:
                lines.append(f"  {comment}")
        lines.append(f"  {PLACEHOLDER}")
        lines.append("end")
        return "\n".join(lines)

    def __str__(self) -> str:
        """Render the snippet."""
        return self.render()


class _InferredRegexpSnippet(Snippet):
    __slots__ = ()

    escape_slashes: typ.ClassVar[bool] = True

    @property
    def pattern(self) -> str:
        """The inferred, anchored pattern."""
        return infer_regexp(self._step_text, escape_slashes=self.escape_slashes)[0]

    @property
    def argument_names(self) -> list[str]:
        """``arg1``, ``arg2``, ... for every capture group."""
        _, groups = infer_regexp(self._step_text, escape_slashes=self.escape_slashes)
        return [f"arg{number}" for number in range(1, groups + 1)]

    @abc.abstractmethod
    def typed_pattern(self) -> str:
        """Render the pattern in this style."""

    def header_lines(self) -> list[str]:
        """Keyword, pattern and block parameters on one line."""
        parameters = self._block_parameters(self.argument_names)
        return [f"{self._keyword}{self.typed_pattern()} do{parameters}"]


class RegexpSnippet(_InferredRegexpSnippet):
    """Regular expression wrapped in call parentheses."""

    __slots__ = ()

    description = "Snippets with parentheses, e.g. Given(/^missing step$/)"

    def typed_pattern(self) -> str:
        """Render ``(/^...$/)``."""
        return f"(/{self.pattern}/)"


class ClassicSnippet(_InferredRegexpSnippet):
    """Bare regular expression after the keyword."""

    __slots__ = ()

    description = "Snippets without parentheses, e.g. Given /^missing step$/"

    def typed_pattern(self) -> str:
        """Render `` /^...$/``."""
        return f" /{self.pattern}/"


class PercentSnippet(_InferredRegexpSnippet):
    """Percent-delimited regular expression; slashes stay unescaped."""

    __slots__ = ()

    description = "Snippets with percent regexp, e.g. Given %r{^missing step$}"
    escape_slashes = False

    def typed_pattern(self) -> str:
        """Render `` %r{^...$}``."""
        return f" %r{{{self.pattern}}}"


class CucumberExpressionSnippet(Snippet):
    """Expression snippet with alternatives listed as comments."""

    __slots__ = ()

    description = "Cucumber expressions, e.g. Given('I have {int} cukes')"

    def header_lines(self) -> list[str]:
        """One line per generated expression, all but the first commented."""
        lines = []
        expressions = self._generator.generate_expressions(self._step_text)
        for index, expression in enumerate(expressions):
            prefix = "# " if index else ""
            source = expression.source.replace("'", "\\'")
            parameters = self._block_parameters(expression.parameter_names)
            lines.append(f"{prefix}{self._keyword}('{source}') do{parameters}")
        return lines


DEFAULT_SNIPPET_TYPE = "cucumber_expression"

SNIPPET_TYPES: dict[str, type[Snippet]] = {
    "cucumber_expression": CucumberExpressionSnippet,
    "regexp": RegexpSnippet,
    "classic": ClassicSnippet,
    "percent": PercentSnippet,
}


def describe_snippet_types() -> list[str]:
    """Return one help line per snippet type."""
    width = max(len(name) for name in SNIPPET_TYPES)
    return [
        f"{name.ljust(width)} : {snippet_class.description}"
        for name, snippet_class in SNIPPET_TYPES.items()
    ]
