"""Unit tests for the step registry."""

from __future__ import annotations

import logging
import types
import typing as typ

import pytest

from gherkin_glue import (
    DocString,
    LoggingUserInterface,
    StepRegistry,
    UndefinedDynamicStep,
)

if typ.TYPE_CHECKING:
    from tests.conftest import RecordingUserInterface


class World:
    """World object built by a custom factory."""

    def __init__(self) -> None:
        """Start with no cukes."""
        self.cukes = 0


class TestRegistration:
    """Tests for registering step definitions."""

    def test_decorators_register_and_return_the_function(self) -> None:
        """Verify given/when/then register without wrapping."""
        registry = StepRegistry()

        @registry.given("I have {int} cukes")
        def have(count: int) -> int:
            return count

        @registry.when("I eat {int}")
        def eat(count: int) -> int:
            return -count

        @registry.then("I am full")
        def full() -> str:
            return "full"

        assert have(1) == 1
        assert [d.pattern for d in registry.step_definitions] == [
            "I have {int} cukes",
            "I eat {int}",
            "I am full",
        ]
        assert registry.search("I eat 2")[0].invoke() == -2

    def test_step_definitions_are_a_snapshot(self) -> None:
        """Verify the returned definitions cannot alter the registry."""
        registry = StepRegistry()
        registry.register("Outside", lambda: None)

        definitions = registry.step_definitions

        assert isinstance(definitions, tuple)
        assert len(definitions) == 1

    def test_define_parameter_type(self) -> None:
        """Verify custom types are usable in later registrations."""
        registry = StepRegistry()
        parameter_type = registry.define_parameter_type(
            "colour", r"red|blue", str.upper
        )
        registry.register("I like {colour}", lambda colour: colour)

        assert parameter_type.name == "colour"
        assert registry.search("I like blue")[0].invoke() == "BLUE"

    def test_logs_registrations_at_debug(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Verify registering a step emits a DEBUG record."""
        registry = StepRegistry()

        with caplog.at_level(logging.DEBUG, logger="gherkin_glue.registry"):
            definition = registry.register("Outside", lambda: None)

        assert any(
            "Registered step definition 'Outside'" in record.getMessage()
            and definition.file_colon_line in record.getMessage()
            for record in caplog.records
        ), f"missing registration record in {caplog.text!r}"


class TestScenarioLifecycle:
    """Tests for binding and releasing the world."""

    def test_default_world_is_a_namespace(self) -> None:
        """Verify a fresh namespace is created per scenario."""
        registry = StepRegistry()

        first = registry.begin_scenario()
        registry.end_scenario()
        second = registry.begin_scenario()

        assert isinstance(first, types.SimpleNamespace)
        assert first is not second
        assert registry.current_world is second

    def test_world_factory(self) -> None:
        """Verify the configured factory builds the world."""
        registry = StepRegistry(world_factory=World)

        world = registry.begin_scenario()

        assert isinstance(world, World)

    def test_explicit_world(self) -> None:
        """Verify an explicit world is used as given."""
        registry = StepRegistry()
        world = World()

        assert registry.begin_scenario(world) is world

    def test_end_scenario_releases_the_world(self) -> None:
        """Verify no world is active between scenarios."""
        registry = StepRegistry()
        registry.begin_scenario()

        registry.end_scenario()

        assert registry.current_world is None


class TestDynamicSteps:
    """Tests for running steps by text from the host."""

    def test_invoke_dynamic_step_with_doc_string(self, registry: StepRegistry) -> None:
        """Verify a doc string is passed as the last argument."""
        registry.register("a page titled {string}", lambda title, body: (title, body))

        result = registry.invoke_dynamic_step(
            'a page titled "Home"', DocString("Welcome")
        )

        assert result == ("Home", "Welcome")

    def test_invoke_dynamic_step_without_a_caller(self, registry: StepRegistry) -> None:
        """Verify the error omits the caller when none is known."""
        with pytest.raises(UndefinedDynamicStep) as excinfo:
            registry.invoke_dynamic_step("Inside")

        assert str(excinfo.value) == 'Undefined dynamic step: "Inside"'

    def test_invoke_dynamic_steps_runs_in_order(self, registry: StepRegistry) -> None:
        """Verify every parsed step runs in sequence."""
        seen: list[int] = []
        registry.register("I add {int}", seen.append)

        registry.invoke_dynamic_steps("Given I add 1\nAnd I add 2\nThen I add 3")

        assert seen == [1, 2, 3]

    def test_stops_at_the_first_undefined_step(self, registry: StepRegistry) -> None:
        """Verify later steps do not run after an undefined one."""
        seen: list[int] = []
        registry.register("I add {int}", seen.append)

        with pytest.raises(UndefinedDynamicStep):
            registry.invoke_dynamic_steps("Given I add 1\nAnd I fly\nThen I add 3")

        assert seen == [1]


class TestUserInterfaces:
    """Tests for forwarding attachments."""

    def test_attach_reaches_the_user_interface(
        self, registry: StepRegistry, user_interface: RecordingUserInterface
    ) -> None:
        """Verify the registry forwards attachments unchanged."""
        registry.attach("hello", "text/plain")

        recorded = [
            (a.data, a.media_type, a.filename) for a in user_interface.attachments
        ]

        assert recorded == [("hello", "text/plain", None)]

    def test_logging_user_interface(self, caplog: pytest.LogCaptureFixture) -> None:
        """Verify the default user interface logs attachments at INFO."""
        registry = StepRegistry()

        with caplog.at_level(logging.INFO, logger="gherkin_glue.user"):
            registry.attach("hello", "text/plain")
            registry.attach("{}", "application/json", "data.json")

        assert isinstance(registry.user_interface, LoggingUserInterface)
        assert [record.getMessage() for record in caplog.records] == [
            "[text/plain] hello",
            "[application/json] data.json: {}",
        ]
        assert all(record.levelno == logging.INFO for record in caplog.records)

    def test_shared_fixture_records_attachments(
        self, registry: StepRegistry, user_interface: RecordingUserInterface
    ) -> None:
        """Verify the shared registry fixture is wired to the recorder."""
        assert registry.user_interface is user_interface
        assert registry.current_world is not None
