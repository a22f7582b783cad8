"""The step registry: definitions, the active world, and step search."""

from __future__ import annotations

import logging
import types
import typing as typ

from .config import GlueConfig
from .errors import Ambiguous, UndefinedDynamicStep
from .expression_generator import ExpressionGenerator
from .parameter_types import ParameterType, ParameterTypeRegistry
from .snippet import SNIPPET_TYPES
from .step_definition import StepDefinition
from .steps_parser import parse_steps

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import re

    from .multiline_argument import MultilineArgument
    from .parameter_types import RegexpSpec
    from .step_definition import Location
    from .step_match import StepMatch

logger = logging.getLogger(__name__)

F = typ.TypeVar("F", bound=typ.Callable[..., object])


class UserInterface(typ.Protocol):
    """Reporting surface that receives attachments from steps."""

    def attach(self, data: str | bytes, media_type: str, filename: str | None) -> None:
        """Record *data* for the step being executed."""
        ...


class LoggingUserInterface:
    """User interface writing attachments to the ``gherkin_glue.user`` logger."""

    __slots__ = ("_logger",)

    def __init__(self, logger_name: str = "gherkin_glue.user") -> None:
        """Use the logger called *logger_name*."""
        self._logger = logging.getLogger(logger_name)

    def attach(self, data: str | bytes, media_type: str, filename: str | None) -> None:
        """Log the attachment at INFO."""
        if filename is None:
            self._logger.info("[%s] %s", media_type, data)
        else:
            self._logger.info("[%s] %s: %s", media_type, filename, data)


def _captured_length(match: StepMatch) -> int:
    return sum(len(argument.group or "") for argument in match.step_arguments)


def best_matches(matches: cabc.Sequence[StepMatch]) -> list[StepMatch]:
    """Narrow competing matches to the most specific ones.

    Matches without arguments win, longest pattern first. Otherwise the
    matches capturing the most arguments win, and among those the ones
    capturing the least text.
    """
    without_arguments = [match for match in matches if not match.step_arguments]
    if without_arguments:
        longest = max(match.text_length for match in without_arguments)
        return [match for match in without_arguments if match.text_length == longest]
    most = max(len(match.step_arguments) for match in matches)
    top = [match for match in matches if len(match.step_arguments) == most]
    shortest = min(_captured_length(match) for match in top)
    return [match for match in top if _captured_length(match) == shortest]


class StepMatchSearch:
    """Find the single definition to run for a step text.

    Parameters
    ----------
    find_matches : Callable[[str], list[StepMatch]]
        Returns every match for a text, such as
        :meth:`StepRegistry.find_matches`.
    config : GlueConfig
        Controls whether ambiguous matches are guessed.

    """

    __slots__ = ("_config", "_find_matches")

    def __init__(
        self,
        find_matches: cabc.Callable[[str], list[StepMatch]],
        config: GlueConfig,
    ) -> None:
        """Wrap *find_matches* with the ambiguity rules of *config*."""
        self._find_matches = find_matches
        self._config = config

    def __call__(self, step_text: str) -> list[StepMatch]:
        """Return zero or one match for *step_text*.

        Raises
        ------
        Ambiguous
            If more than one definition matches and guessing does not
            single one out.

        """
        matches = self._find_matches(step_text)
        if len(matches) > 1 and self._config.guess:
            matches = best_matches(matches)
        if len(matches) > 1:
            raise Ambiguous(step_text, matches, guess=self._config.guess)
        return matches


class StepRegistry:
    """Step definitions for one run and the world of the current scenario.

    A registry is driven by a single execution context; hosts running
    scenarios concurrently give each one its own registry.

    Parameters
    ----------
    config : GlueConfig | None
        Matching and snippet options. Defaults to ``GlueConfig()``.
    user_interface : UserInterface | None
        Receives attachments from ``log`` and ``attach``. Defaults to a
        :class:`LoggingUserInterface`.
    parameter_type_registry : ParameterTypeRegistry | None
        Parameter type catalog. Defaults to one holding the built-ins.
    world_factory : Callable[[], object] | None
        Builds the world when :meth:`begin_scenario` is called without
        one. Defaults to :class:`types.SimpleNamespace`.

    Raises
    ------
    TypeError
        If ``world_factory`` is provided but not callable.

    Examples
    --------
    Register and run a step::

        registry = StepRegistry()

        @registry.given("I have {int} cukes")
        def have_cukes(count):
            ...

        registry.begin_scenario()
        registry.search("I have 3 cukes")[0].invoke()

    """

    __slots__ = (
        "_config",
        "_current_world",
        "_definitions",
        "_expression_generator",
        "_parameter_types",
        "_search",
        "_user_interface",
        "_world_factory",
    )

    def __init__(
        self,
        config: GlueConfig | None = None,
        *,
        user_interface: UserInterface | None = None,
        parameter_type_registry: ParameterTypeRegistry | None = None,
        world_factory: cabc.Callable[[], object] | None = None,
    ) -> None:
        """Create an empty registry."""
        if world_factory is not None and not callable(world_factory):
            msg = "world_factory must be callable"
            raise TypeError(msg)
        self._config = config if config is not None else GlueConfig()
        self._user_interface = (
            user_interface if user_interface is not None else LoggingUserInterface()
        )
        self._parameter_types = (
            parameter_type_registry
            if parameter_type_registry is not None
            else ParameterTypeRegistry()
        )
        self._world_factory = (
            world_factory if world_factory is not None else types.SimpleNamespace
        )
        self._expression_generator = ExpressionGenerator(self._parameter_types)
        self._search = StepMatchSearch(self.find_matches, self._config)
        self._definitions: list[StepDefinition] = []
        self._current_world: object | None = None

    @property
    def config(self) -> GlueConfig:
        """The active configuration."""
        return self._config

    @property
    def user_interface(self) -> UserInterface:
        """The reporting surface for attachments."""
        return self._user_interface

    @property
    def parameter_type_registry(self) -> ParameterTypeRegistry:
        """The parameter type catalog."""
        return self._parameter_types

    @property
    def step_definitions(self) -> tuple[StepDefinition, ...]:
        """Registered definitions in registration order."""
        return tuple(self._definitions)

    @property
    def current_world(self) -> object | None:
        """The world of the current scenario, or ``None`` between scenarios."""
        return self._current_world

    def register(
        self,
        pattern: str | re.Pattern[str],
        implementation: cabc.Callable[..., object] | str,
        *,
        on: object = None,
    ) -> StepDefinition:
        """Register a step definition.

        Parameters
        ----------
        pattern : str | re.Pattern
            An expression such as ``I have {int} cukes`` or a compiled
            regular expression.
        implementation : Callable[..., object] | str
            The callable to run, or the name of a method to call on the
            target selected by ``on``.
        on : object
            Target for method-name implementations: ``None`` for the
            world, an attribute name, a zero-argument factory, an explicit
            object, or a resolver from :mod:`gherkin_glue.step_definition`.

        Returns
        -------
        StepDefinition
            The new definition.

        """
        expression = self._parameter_types.create_expression(pattern)
        definition = StepDefinition(self, expression, implementation, on=on)
        self._definitions.append(definition)
        logger.debug(
            "Registered step definition %r at %s",
            definition.pattern,
            definition.file_colon_line,
        )
        return definition

    def define_step(
        self, pattern: str | re.Pattern[str]
    ) -> cabc.Callable[[F], F]:
        """Register the decorated function for *pattern*."""

        def decorator(func: F) -> F:
            self.register(pattern, func)
            return func

        return decorator

    given = define_step
    when = define_step
    then = define_step

    def define_parameter_type(  # noqa: PLR0913
        self,
        name: str,
        regexps: RegexpSpec,
        transformer: cabc.Callable[[str], object] | None = None,
        *,
        use_for_snippets: bool = True,
        prefer_for_regexp_match: bool = False,
    ) -> ParameterType:
        """Add a parameter type usable in expressions and snippets."""
        parameter_type = ParameterType(
            name,
            typ.cast("tuple[str, ...]", regexps),
            transformer,
            use_for_snippets=use_for_snippets,
            prefer_for_regexp_match=prefer_for_regexp_match,
        )
        self._parameter_types.define_parameter_type(parameter_type)
        return parameter_type

    def begin_scenario(self, world: object | None = None) -> object:
        """Bind *world*, or a new world from the factory, for one scenario."""
        self._current_world = world if world is not None else self._world_factory()
        logger.debug("Began scenario with world %r", self._current_world)
        return self._current_world

    def end_scenario(self) -> None:
        """Release the world of the finished scenario."""
        logger.debug("Ended scenario with world %r", self._current_world)
        self._current_world = None

    def find_matches(self, step_text: str) -> list[StepMatch]:
        """Return a fresh match for every definition accepting *step_text*."""
        matches = []
        for definition in self._definitions:
            match = definition.match(step_text)
            if match is not None:
                matches.append(match)
        return matches

    def search(self, step_text: str) -> list[StepMatch]:
        """Return zero or one match, applying the ambiguity rules."""
        return self._search(step_text)

    def invoke_dynamic_step(
        self,
        step_text: str,
        multiline_argument: MultilineArgument = None,
        location: Location | None = None,
    ) -> object:
        """Run the definition matching *step_text* from inside another step.

        Raises
        ------
        UndefinedDynamicStep
            If no definition matches.

        """
        logger.debug("Invoking dynamic step %r from %s", step_text, location)
        matches = self.search(step_text)
        if not matches:
            raise UndefinedDynamicStep(step_text, location)
        return matches[0].invoke(multiline_argument)

    def invoke_dynamic_steps(
        self, steps_text: str, location: Location | None = None
    ) -> None:
        """Parse *steps_text* and run each step in turn."""
        for parsed in parse_steps(steps_text):
            self.invoke_dynamic_step(parsed.text, parsed.multiline_argument, location)

    def snippet_text(
        self,
        keyword: str,
        step_text: str,
        multiline_argument: MultilineArgument = None,
        snippet_type: str | None = None,
    ) -> str:
        """Render a snippet proposing a definition for *step_text*.

        Raises
        ------
        ValueError
            If ``snippet_type`` is unknown.

        """
        name = snippet_type if snippet_type is not None else self._config.snippet_type
        try:
            snippet_class = SNIPPET_TYPES[name]
        except KeyError:
            known = ", ".join(SNIPPET_TYPES)
            msg = f"snippet_type must be one of: {known}"
            raise ValueError(msg) from None
        snippet = snippet_class(
            self._expression_generator, keyword, step_text, multiline_argument
        )
        return snippet.render()

    def attach(
        self, data: str | bytes, media_type: str, filename: str | None = None
    ) -> None:
        """Forward an attachment to the user interface."""
        self._user_interface.attach(data, media_type, filename)
