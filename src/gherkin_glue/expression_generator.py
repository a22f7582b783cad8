"""Generate candidate expressions for undefined step text."""

from __future__ import annotations

import dataclasses as dc
import itertools
import re
import typing as typ
import unicodedata

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .parameter_types import ParameterType, ParameterTypeRegistry

MAX_EXPRESSIONS = 256
ANONYMOUS_PARAMETER_NAME = "arg"


def escape_literal(text: str) -> str:
    """Escape *text* so it is read literally inside an expression."""
    return text.replace("{", "\\{").replace("}", "\\}")


@dc.dataclass(frozen=True)
class GeneratedExpression:
    """An expression proposed for a piece of step text.

    Attributes
    ----------
    literals : tuple[str, ...]
        Escaped literal text around the parameters; always one element
        longer than ``parameter_types``.
    parameter_types : tuple[ParameterType, ...]
        The parameter type chosen for each slot.

    """

    literals: tuple[str, ...]
    parameter_types: tuple[ParameterType, ...]

    @property
    def source(self) -> str:
        """The expression text, for example ``I have {int} cukes``."""
        parts = [self.literals[0]]
        for parameter_type, literal in zip(
            self.parameter_types, self.literals[1:], strict=True
        ):
            parts.append(f"{{{parameter_type.name}}}{literal}")
        return "".join(parts)

    @property
    def parameter_names(self) -> list[str]:
        """Block argument names, numbering repeats of the same type."""
        usage: dict[str, int] = {}
        names = []
        for parameter_type in self.parameter_types:
            base = parameter_type.name or ANONYMOUS_PARAMETER_NAME
            usage[base] = usage.get(base, 0) + 1
            count = usage[base]
            names.append(base if count == 1 else f"{base}{count}")
        return names


def _is_boundary(char: str) -> bool:
    return char.isspace() or unicodedata.category(char)[0] in "PSZ"


class _ParameterTypeMatcher:
    """Finds full-word matches of one parameter type regexp."""

    __slots__ = ("_regexp", "parameter_type")

    def __init__(self, parameter_type: ParameterType, source: str) -> None:
        self.parameter_type = parameter_type
        self._regexp = re.compile(source)

    def find(self, text: str, position: int) -> re.Match[str] | None:
        start = position
        while start <= len(text):
            found = self._regexp.search(text, start)
            if found is None:
                return None
            if found.end() > found.start() and self._full_word(text, found):
                return found
            start = found.start() + 1
        return None

    @staticmethod
    def _full_word(text: str, found: re.Match[str]) -> bool:
        before, after = found.start(), found.end()
        starts_word = before == 0 or _is_boundary(text[before - 1])
        ends_word = after == len(text) or _is_boundary(text[after])
        return starts_word and ends_word


def _rank(parameter_type: ParameterType) -> tuple[bool, str]:
    return (not parameter_type.prefer_for_regexp_match, parameter_type.name)


class ExpressionGenerator:
    """Proposes expressions that would match a given step text.

    Parameter types flagged ``use_for_snippets`` are tried against the
    text from left to right. At each position the earliest and then the
    longest match wins; every type tying with it becomes a candidate for
    that slot. The result lists every combination of slot candidates,
    best first.

    Parameters
    ----------
    registry : ParameterTypeRegistry
        Source of the parameter types to consider.

    """

    __slots__ = ("_registry",)

    def __init__(self, registry: ParameterTypeRegistry) -> None:
        """Bind the generator to a parameter type catalog."""
        self._registry = registry

    def _matchers(self) -> list[_ParameterTypeMatcher]:
        return [
            _ParameterTypeMatcher(parameter_type, source)
            for parameter_type in self._registry.parameter_types
            if parameter_type.use_for_snippets
            for source in parameter_type.regexps
        ]

    def generate_expressions(self, text: str) -> list[GeneratedExpression]:
        """Return candidate expressions for *text*, best first."""
        matchers = self._matchers()
        literals: list[str] = []
        slots: list[list[ParameterType]] = []
        position = 0
        while True:
            found = []
            for matcher in matchers:
                match = matcher.find(text, position)
                if match is not None:
                    found.append((match.start(), -len(match.group()), matcher))
            if not found:
                break
            start, negative_length, _ = min(found, key=lambda item: item[:2])
            tied: dict[str, ParameterType] = {}
            for candidate_start, candidate_length, matcher in found:
                if (candidate_start, candidate_length) == (start, negative_length):
                    tied.setdefault(matcher.parameter_type.name, matcher.parameter_type)
            slots.append(sorted(tied.values(), key=_rank))
            literals.append(escape_literal(text[position:start]))
            position = start - negative_length
        literals.append(escape_literal(text[position:]))
        combinations: cabc.Iterable[tuple[ParameterType, ...]] = itertools.product(
            *slots
        )
        return [
            GeneratedExpression(tuple(literals), combination)
            for combination in itertools.islice(combinations, MAX_EXPRESSIONS)
        ]
