"""Unit tests for step search, ambiguity and step matches."""

from __future__ import annotations

import re

import pytest

from gherkin_glue import Ambiguous, GlueConfig, StepMatchSearch, StepRegistry


def _noop(*_args: object) -> None:
    """Accept any arguments."""


@pytest.fixture
def guessing_registry() -> StepRegistry:
    """Return a registry that guesses between ambiguous matches."""
    registry = StepRegistry(GlueConfig(guess=True))
    registry.begin_scenario()
    return registry


class TestAmbiguity:
    """Tests for several definitions matching the same text."""

    def test_no_match(self, registry: StepRegistry) -> None:
        """Verify undefined text yields no matches."""
        registry.register("Outside", _noop)

        assert registry.search("Inside") == []

    def test_raises_when_ambiguous(self, registry: StepRegistry) -> None:
        """Verify every competing definition is reported."""
        first = registry.register(re.compile(r"I have (\d+) cukes"), _noop)
        second = registry.register("I have {int} cukes", _noop)

        with pytest.raises(Ambiguous) as excinfo:
            registry.search("I have 3 cukes")

        message = str(excinfo.value)
        assert message.startswith('Ambiguous match of "I have 3 cukes":')
        assert first.backtrace_line() in message
        assert second.backtrace_line() in message
        assert "enable guessing" in message
        assert len(excinfo.value.matches) == 2

    def test_guess_prefers_definitions_without_arguments(
        self, guessing_registry: StepRegistry
    ) -> None:
        """Verify a literal definition beats one with parameters."""
        guessing_registry.register("I have {int} cukes", _noop)
        literal = guessing_registry.register("I have 3 cukes", _noop)

        matches = guessing_registry.search("I have 3 cukes")

        assert [match.step_definition for match in matches] == [literal]

    def test_guess_prefers_the_longest_literal(
        self, guessing_registry: StepRegistry
    ) -> None:
        """Verify the longest pattern wins among literal definitions."""
        guessing_registry.register(re.compile("cukes"), _noop)
        longest = guessing_registry.register(re.compile("have cukes"), _noop)

        matches = guessing_registry.search("I have cukes")

        assert [match.step_definition for match in matches] == [longest]

    def test_guess_prefers_more_arguments(
        self, guessing_registry: StepRegistry
    ) -> None:
        """Verify the definition capturing more arguments wins."""
        guessing_registry.register(re.compile(r"I have (.*) cukes"), _noop)
        pattern = re.compile(r"I have (\d+) (\w+) cukes")
        specific = guessing_registry.register(pattern, _noop)

        matches = guessing_registry.search("I have 3 green cukes")

        assert [match.step_definition for match in matches] == [specific]

    def test_guess_prefers_the_shortest_capture(
        self, guessing_registry: StepRegistry
    ) -> None:
        """Verify the definition capturing the least text wins."""
        guessing_registry.register(re.compile(r"I have (.*) cukes"), _noop)
        pattern = re.compile(r"I have \d+ (\w+) cukes")
        shortest = guessing_registry.register(pattern, _noop)

        matches = guessing_registry.search("I have 3 green cukes")

        assert [match.step_definition for match in matches] == [shortest]

    def test_guess_still_raises_on_a_tie(self, guessing_registry: StepRegistry) -> None:
        """Verify guessing cannot separate identical definitions."""
        guessing_registry.register("I have {int} cukes", _noop)
        guessing_registry.register("I have {int} cukes", _noop)

        with pytest.raises(Ambiguous) as excinfo:
            guessing_registry.search("I have 3 cukes")

        assert excinfo.value.guess is True
        assert "enable guessing" not in str(excinfo.value)

    def test_search_wraps_any_match_source(self) -> None:
        """Verify the search only depends on the match function."""
        search = StepMatchSearch(lambda text: [], GlueConfig())

        assert search("anything") == []


class TestStepMatch:
    """Tests for the match objects returned by search."""

    def test_format_args_with_a_template(self, registry: StepRegistry) -> None:
        """Verify captured text is decorated in place."""
        registry.register("I have {int} {string}", _noop)

        match = registry.search('I have 42 "cukes"')[0]

        assert match.format_args("<{}>") == 'I have <42> <"cukes">'

    def test_format_args_with_a_callable(self, registry: StepRegistry) -> None:
        """Verify a callable may decorate the captured text."""
        registry.register(re.compile(r"I have (\d+) (\w+)"), _noop)

        match = registry.search("I have 42 cukes")[0]

        assert match.format_args(str.upper) == "I have 42 CUKES"

    def test_format_args_skips_unmatched_groups(self, registry: StepRegistry) -> None:
        """Verify optional groups that did not match are left out."""
        registry.register(re.compile(r"I have( \d+)? cukes"), _noop)

        match = registry.search("I have cukes")[0]

        assert match.format_args("[{}]") == "I have cukes"

    def test_matches_are_independent(self, registry: StepRegistry) -> None:
        """Verify each search builds new matches."""
        registry.register("I have {int} cukes", _noop)

        first = registry.search("I have 3 cukes")[0]
        second = registry.search("I have 3 cukes")[0]

        assert first is not second
        assert first.args == second.args == [3]
        assert first.args is not first.args

    def test_match_metadata(self, registry: StepRegistry) -> None:
        """Verify a match exposes its definition's location and pattern."""
        definition = registry.register("I have {int} cukes", _noop)

        match = registry.search("I have 3 cukes")[0]

        assert match.step_text == "I have 3 cukes"
        assert match.location == definition.location
        assert match.file_colon_line == definition.file_colon_line
        assert match.text_length == len("I have {int} cukes")
        assert match.backtrace_line() == definition.backtrace_line()
