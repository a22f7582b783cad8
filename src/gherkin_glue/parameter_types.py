"""Parameter types and the expressions that match step text with them.

A parameter type couples a name with one or more regular expressions and
an optional transformer. Step definitions refer to parameter types in two
ways:

* regular expressions: each top-level capture group is transformed by the
  parameter type whose pattern equals the group source, so ``(\\d+)``
  produces an ``int``;
* expressions such as ``I have {int} cukes``: every ``{name}`` is a typed
  field. Matching is delegated to :mod:`parse`, with the parameter type
  patterns registered as custom field types.

Arguments keep the captured text and apply the transformer each time the
value is read, so repeated reads never share a mutable value.
"""

from __future__ import annotations

import dataclasses as dc
import decimal
import re
import typing as typ

import parse

from .errors import AmbiguousParameterTypeError, UndefinedParameterTypeError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

INT_REGEXPS = (r"-?\d+", r"\d+")
FLOAT_REGEXP = r"[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?"
WORD_REGEXP = r"[^\s]+"
STRING_REGEXPS = (
    r'"([^"\\]*(\\.[^"\\]*)*)"',
    r"'([^'\\]*(\\.[^'\\]*)*)'",
)
ANONYMOUS_REGEXP = r".*"

_ILLEGAL_NAME_CHARS = re.compile(r"[\[\]()$.|?*+{}]")
_EXPRESSION_TOKEN = re.compile(r"\\([{}])|\{([^{}]*)\}")

RegexpSpec = str | re.Pattern[str] | typ.Sequence[str | re.Pattern[str]]


def _pattern_sources(regexps: RegexpSpec) -> tuple[str, ...]:
    if isinstance(regexps, str | re.Pattern):
        regexps = (regexps,)
    return tuple(
        regexp.pattern if isinstance(regexp, re.Pattern) else regexp
        for regexp in regexps
    )


@dc.dataclass(frozen=True)
class ParameterType:
    """A named pattern with an optional transformer.

    Parameters
    ----------
    name : str
        Name used inside expressions, for example ``int`` in ``{int}``.
        The anonymous type is named ``""``.
    regexps : str | re.Pattern | Sequence
        One or more patterns matching the parameter text.
    transformer : Callable[[str], object] | None
        Converts matched text into a value. ``None`` keeps the text.
    use_for_snippets : bool
        Whether snippet generation may propose this type.
    prefer_for_regexp_match : bool
        Whether this type wins when several types share a pattern.

    Raises
    ------
    ValueError
        If ``name`` contains characters reserved by the expression syntax
        or ``regexps`` is empty.
    TypeError
        If ``transformer`` is provided but not callable.

    """

    name: str
    regexps: tuple[str, ...]
    transformer: cabc.Callable[[str], object] | None = None
    use_for_snippets: bool = True
    prefer_for_regexp_match: bool = False

    def __post_init__(self) -> None:
        """Normalise ``regexps`` and validate the definition."""
        sources = _pattern_sources(typ.cast("RegexpSpec", self.regexps))
        if not sources:
            msg = f"parameter type {self.name!r} needs at least one regexp"
            raise ValueError(msg)
        if _ILLEGAL_NAME_CHARS.search(self.name):
            msg = f"illegal character in parameter type name {self.name!r}"
            raise ValueError(msg)
        if self.transformer is not None and not callable(self.transformer):
            msg = "transformer must be callable"
            raise TypeError(msg)
        object.__setattr__(self, "regexps", sources)

    def transform(self, text: str | None) -> object:
        """Convert matched *text* into the parameter value."""
        if text is None:
            return None
        if self.transformer is None:
            return text
        return self.transformer(text)


@dc.dataclass(frozen=True)
class Argument:
    """Text captured by a matcher, with the type used to convert it."""

    group: str | None
    start: int | None
    parameter_type: ParameterType | None = None

    @property
    def end(self) -> int | None:
        """Index one past the captured text, or ``None`` if unmatched."""
        if self.group is None or self.start is None:
            return None
        return self.start + len(self.group)

    @property
    def value(self) -> object:
        """Return a freshly transformed value for the captured text."""
        if self.parameter_type is None:
            return self.group
        return self.parameter_type.transform(self.group)


def _unquote(text: str) -> str:
    quote = text[0]
    return text[1:-1].replace("\\" + quote, quote)


def _builtin_parameter_types() -> tuple[ParameterType, ...]:
    return (
        ParameterType("int", INT_REGEXPS, int, prefer_for_regexp_match=True),
        ParameterType("float", FLOAT_REGEXP, float),
        ParameterType("word", WORD_REGEXP, use_for_snippets=False),
        ParameterType("string", STRING_REGEXPS, _unquote),
        ParameterType(
            "bigdecimal", FLOAT_REGEXP, decimal.Decimal, use_for_snippets=False
        ),
        ParameterType(
            "",
            ANONYMOUS_REGEXP,
            use_for_snippets=False,
            prefer_for_regexp_match=True,
        ),
    )


class ParameterTypeRegistry:
    """Catalog of parameter types available to step definitions."""

    __slots__ = ("_by_name", "_by_regexp")

    def __init__(self) -> None:
        """Create a registry holding the built-in parameter types."""
        self._by_name: dict[str, ParameterType] = {}
        self._by_regexp: dict[str, list[ParameterType]] = {}
        for parameter_type in _builtin_parameter_types():
            self.define_parameter_type(parameter_type)

    @property
    def parameter_types(self) -> tuple[ParameterType, ...]:
        """All parameter types in definition order."""
        return tuple(self._by_name.values())

    def define_parameter_type(self, parameter_type: ParameterType) -> None:
        """Add *parameter_type* to the catalog.

        Raises
        ------
        ValueError
            If the name is taken, or if another preferential type already
            uses one of the same regexps.

        """
        if parameter_type.name in self._by_name:
            msg = (
                "There is already a parameter type with name "
                f"{parameter_type.name!r}"
            )
            raise ValueError(msg)
        if parameter_type.prefer_for_regexp_match:
            for source in parameter_type.regexps:
                for existing in self._by_regexp.get(source, ()):
                    if existing.prefer_for_regexp_match:
                        msg = (
                            "There can only be one preferential parameter type "
                            f"per regexp. The regexp {source!r} is used for "
                            f"{existing.name!r} and {parameter_type.name!r}"
                        )
                        raise ValueError(msg)
        self._by_name[parameter_type.name] = parameter_type
        for source in parameter_type.regexps:
            self._by_regexp.setdefault(source, []).append(parameter_type)

    def lookup_by_type_name(self, name: str) -> ParameterType | None:
        """Return the parameter type called *name*, if any."""
        return self._by_name.get(name)

    def lookup_by_regexp(self, source: str) -> ParameterType | None:
        """Return the parameter type whose pattern equals *source*.

        Raises
        ------
        AmbiguousParameterTypeError
            If several types use *source* and none is preferential.

        """
        candidates = self._by_regexp.get(source)
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]
        for candidate in candidates:
            if candidate.prefer_for_regexp_match:
                return candidate
        raise AmbiguousParameterTypeError(source, [c.name for c in candidates])

    def create_expression(
        self, pattern: str | re.Pattern[str]
    ) -> CucumberExpression | RegularExpression:
        """Build the matcher for a step definition *pattern*."""
        if isinstance(pattern, re.Pattern):
            return RegularExpression(pattern, self)
        if isinstance(pattern, str):
            return CucumberExpression(pattern, self)
        msg = "pattern must be a string or a compiled regular expression"
        raise TypeError(msg)


class RegularExpression:
    """Matcher for step definitions written as regular expressions."""

    __slots__ = ("_groups", "_regexp")

    def __init__(
        self, regexp: re.Pattern[str], registry: ParameterTypeRegistry
    ) -> None:
        """Resolve a parameter type for every top-level capture group."""
        self._regexp = regexp
        self._groups = tuple(
            (index, registry.lookup_by_regexp(source))
            for index, source in capture_groups(regexp.pattern)
        )

    @property
    def source(self) -> str:
        """The pattern as written."""
        return self._regexp.pattern

    @property
    def regexp(self) -> re.Pattern[str]:
        """The compiled pattern."""
        return self._regexp

    @property
    def parameter_count(self) -> int:
        """Number of arguments a match produces."""
        return len(self._groups)

    def match(self, text: str) -> list[Argument] | None:
        """Return arguments for *text*, or ``None`` if it does not match."""
        found = self._regexp.search(text)
        if found is None:
            return None
        arguments = []
        for index, parameter_type in self._groups:
            group = found.group(index)
            start = found.start(index) if group is not None else None
            arguments.append(Argument(group, start, parameter_type))
        return arguments

    def __repr__(self) -> str:
        """Show the pattern."""
        return f"<RegularExpression {self.source!r}>"


def _keep_text(parameter_type: ParameterType) -> cabc.Callable[[str], str]:
    pattern = "|".join(f"(?:{source})" for source in parameter_type.regexps)

    @parse.with_pattern(pattern, regex_group_count=re.compile(pattern).groups)
    def convert(text: str) -> str:
        return text

    return convert


class CucumberExpression:
    """Matcher for expressions such as ``I have {int} cukes``."""

    __slots__ = ("_expression", "_parameter_types", "_parser")

    def __init__(self, expression: str, registry: ParameterTypeRegistry) -> None:
        """Compile *expression* into a :mod:`parse` format.

        Raises
        ------
        UndefinedParameterTypeError
            If the expression names a type missing from *registry*.

        """
        parameter_types: list[ParameterType] = []
        extra_types: dict[str, cabc.Callable[[str], str]] = {}

        def replace(token: re.Match[str]) -> str:
            escaped = token.group(1)
            if escaped is not None:
                return escaped * 2
            name = token.group(2)
            parameter_type = registry.lookup_by_type_name(name)
            if parameter_type is None:
                raise UndefinedParameterTypeError(name, expression)
            key = f"type{len(parameter_types)}"
            parameter_types.append(parameter_type)
            extra_types[key] = _keep_text(parameter_type)
            return f"{{:{key}}}"

        self._expression = expression
        self._parser = parse.compile(
            _EXPRESSION_TOKEN.sub(replace, expression),
            extra_types=extra_types,
            case_sensitive=True,
        )
        self._parameter_types = tuple(parameter_types)

    @property
    def source(self) -> str:
        """The expression as written."""
        return self._expression

    @property
    def parameter_types(self) -> tuple[ParameterType, ...]:
        """Parameter types in order of appearance."""
        return self._parameter_types

    @property
    def parameter_count(self) -> int:
        """Number of arguments a match produces."""
        return len(self._parameter_types)

    def match(self, text: str) -> list[Argument] | None:
        """Return arguments for *text*, or ``None`` if it does not match."""
        result = self._parser.parse(text)
        if result is None:
            return None
        return [
            Argument(result.fixed[index], result.spans[index][0], parameter_type)
            for index, parameter_type in enumerate(self._parameter_types)
        ]

    def __repr__(self) -> str:
        """Show the expression."""
        return f"<CucumberExpression {self.source!r}>"


def _group_opening(pattern: str, index: int) -> tuple[bool, int]:
    """Classify the group opening at *index*.

    Returns whether the group captures and where its body starts.
    """
    if not pattern.startswith("(?", index):
        return True, index + 1
    if pattern.startswith("(?P<", index):
        return True, pattern.index(">", index) + 1
    if pattern.startswith("(?(", index):
        return False, pattern.index(")", index + 3) + 1
    return False, index + 2


def capture_groups(pattern: str) -> list[tuple[int, str]]:
    """List capture groups not nested inside another capture group.

    Parameters
    ----------
    pattern : str
        Regular expression source.

    Returns
    -------
    list[tuple[int, str]]
        ``(group number, group source)`` pairs in order of appearance.

    """
    groups: list[tuple[int, str]] = []
    open_groups: list[tuple[int | None, int]] = []
    group_count = 0
    in_class = False
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            index += 2
            continue
        if in_class:
            in_class = char != "]"
            index += 1
            continue
        if char == "[":
            in_class = True
            index += 1
            if pattern.startswith("^", index):
                index += 1
            if pattern.startswith("]", index):
                index += 1
            continue
        if pattern.startswith("(?#", index):
            index = pattern.index(")", index) + 1
            continue
        if char == "(":
            capturing, body_start = _group_opening(pattern, index)
            number = None
            if capturing:
                group_count += 1
                number = group_count
            open_groups.append((number, body_start))
            index = body_start
            continue
        if char == ")" and open_groups:
            number, body_start = open_groups.pop()
            enclosed = any(outer is not None for outer, _ in open_groups)
            if number is not None and not enclosed:
                groups.append((number, pattern[body_start:index]))
        index += 1
    return groups
