"""Step definitions: a pattern bound to an implementation."""

from __future__ import annotations

import dataclasses as dc
import functools
import inspect
import os
import re
import typing as typ
import uuid
from pathlib import Path

from .errors import ArityMismatchError, TargetResolutionError
from .step_match import StepMatch

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import types

    from .parameter_types import CucumberExpression, RegularExpression
    from .registry import StepRegistry

_PACKAGE_DIR = Path(__file__).resolve().parent
_REGEXP_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)


def _relative_path(filename: str) -> str:
    try:
        return os.path.relpath(filename)
    except ValueError:
        return filename


@dc.dataclass(frozen=True)
class Location:
    """Source location of a step definition, rendered as ``file:line``."""

    file: str
    line: int

    @classmethod
    def of_callable(cls, func: cabc.Callable[..., object]) -> Location | None:
        """Return where *func* is defined, if it has a code object."""
        code = getattr(inspect.unwrap(func), "__code__", None)
        if code is None:
            return None
        return cls(_relative_path(code.co_filename), code.co_firstlineno)

    @classmethod
    def of_caller(cls) -> Location | None:
        """Return the first stack frame outside this package."""
        frame: types.FrameType | None = inspect.currentframe()
        while frame is not None:
            filename = frame.f_code.co_filename
            if Path(filename).resolve().parent != _PACKAGE_DIR:
                return cls(_relative_path(filename), frame.f_lineno)
            frame = frame.f_back
        return None

    def __str__(self) -> str:
        """Render as ``file:line``."""
        return f"{self.file}:{self.line}"


@dc.dataclass(frozen=True)
class WorldTarget:
    """Dispatch to the active world itself."""

    def resolve(self, world: object) -> object:
        """Return *world*."""
        return world


@dc.dataclass(frozen=True)
class AttributeTarget:
    """Dispatch to an attribute of the active world."""

    name: str

    def resolve(self, world: object) -> object:
        """Return the attribute; a missing attribute propagates."""
        return getattr(world, self.name)


@dc.dataclass(frozen=True)
class ObjectTarget:
    """Dispatch to an explicit object."""

    target: object

    def resolve(self, world: object) -> object:
        """Return the configured object."""
        return self.target


@dc.dataclass(frozen=True)
class FactoryTarget:
    """Dispatch to the result of a zero-argument callable."""

    factory: cabc.Callable[[], object]

    def resolve(self, world: object) -> object:
        """Call the factory."""
        return self.factory()


TargetResolver = WorldTarget | AttributeTarget | ObjectTarget | FactoryTarget


def target_resolver(on: object = None) -> TargetResolver:
    """Interpret the ``on`` option of a method-name registration.

    ``None`` means the world, a string names a world attribute, a function
    or method is a factory, and anything else is the target itself.
    Resolver instances are returned unchanged.
    """
    if isinstance(on, WorldTarget | AttributeTarget | ObjectTarget | FactoryTarget):
        return on
    if on is None:
        return WorldTarget()
    if isinstance(on, str):
        return AttributeTarget(on)
    if inspect.isroutine(on) or isinstance(on, functools.partial):
        return FactoryTarget(on)
    return ObjectTarget(on)


def check_arity(
    implementation: cabc.Callable[..., object],
    argument_count: int,
    location: Location | None,
) -> None:
    """Ensure *implementation* accepts *argument_count* positional arguments.

    Callables whose signature cannot be introspected are accepted.

    Raises
    ------
    ArityMismatchError
        If the declared positional parameters cannot take the arguments.

    """
    try:
        signature = inspect.signature(implementation)
    except (TypeError, ValueError):
        return
    required = declared = 0
    variadic = False
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
        elif parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            declared += 1
            if parameter.default is inspect.Parameter.empty:
                required += 1
    if argument_count < required or (not variadic and argument_count > declared):
        raise ArityMismatchError(argument_count, declared, location)


class StepDefinition:
    """A pattern bound to an implementation.

    Parameters
    ----------
    registry : StepRegistry
        The registry owning this definition; it supplies the world for
        method-name dispatch.
    expression : CucumberExpression | RegularExpression
        The matcher built from the registered pattern.
    implementation : Callable[..., object] | str
        The callable to run, or the name of a method to call on the
        dispatch target.
    on : object
        Dispatch target for method-name implementations; see
        :func:`target_resolver`.
    location : Location | None
        Where the definition was registered. Defaults to the location of
        the implementation's code, or the caller for method names.

    Raises
    ------
    TypeError
        If ``implementation`` is neither callable nor a string, or ``on``
        is given for a callable implementation.

    """

    __slots__ = (
        "_expression",
        "_id",
        "_implementation",
        "_location",
        "_registry",
        "_target",
    )

    def __init__(
        self,
        registry: StepRegistry,
        expression: CucumberExpression | RegularExpression,
        implementation: cabc.Callable[..., object] | str,
        *,
        on: object = None,
        location: Location | None = None,
    ) -> None:
        """Bind *expression* to *implementation*."""
        if isinstance(implementation, str):
            self._target: TargetResolver | None = target_resolver(on)
            default_location = Location.of_caller()
        elif callable(implementation):
            if on is not None:
                msg = "on= is only supported for method name implementations"
                raise TypeError(msg)
            self._target = None
            default_location = Location.of_callable(implementation)
            if default_location is None:
                default_location = Location.of_caller()
        else:
            msg = "implementation must be callable or a method name"
            raise TypeError(msg)
        self._id = uuid.uuid4().hex
        self._registry = registry
        self._expression = expression
        self._implementation = implementation
        self._location = location if location is not None else default_location

    @property
    def id(self) -> str:
        """Unique identifier of this definition."""
        return self._id

    @property
    def registry(self) -> StepRegistry:
        """The owning registry."""
        return self._registry

    @property
    def expression(self) -> CucumberExpression | RegularExpression:
        """The matcher for this definition."""
        return self._expression

    @property
    def pattern(self) -> str:
        """The pattern source as registered."""
        return self._expression.source

    @property
    def location(self) -> Location | None:
        """Where the definition was registered."""
        return self._location

    @property
    def file_colon_line(self) -> str:
        """The location rendered as ``file:line``."""
        return str(self._location) if self._location is not None else "?"

    @property
    def method_name(self) -> str | None:
        """Name of the dispatched method, or ``None`` for callables."""
        if isinstance(self._implementation, str):
            return self._implementation
        return None

    def match(self, step_text: str) -> StepMatch | None:
        """Match *step_text*, binding freshly captured arguments."""
        arguments = self._expression.match(step_text)
        if arguments is None:
            return None
        return StepMatch(self, step_text, arguments)

    def _resolve_implementation(self) -> cabc.Callable[..., object]:
        if self._target is None:
            return typ.cast("cabc.Callable[..., object]", self._implementation)
        world = self._registry.current_world
        if world is None and isinstance(self._target, WorldTarget | AttributeTarget):
            msg = (
                f"cannot call {self._implementation!r} for {self.pattern!r}: "
                "no world is active"
            )
            raise TargetResolutionError(msg)
        target = self._target.resolve(world)
        if target is None:
            msg = (
                f"cannot call {self._implementation!r} for {self.pattern!r}: "
                "the target resolved to None"
            )
            raise TargetResolutionError(msg)
        return getattr(target, typ.cast("str", self._implementation))

    def invoke(self, args: cabc.Sequence[object]) -> object:
        """Run the implementation with *args* after checking its arity.

        Raises
        ------
        ArityMismatchError
            If the implementation cannot accept ``len(args)`` arguments;
            the implementation is not called.
        TargetResolutionError
            If a method-name definition has no target to dispatch to.

        """
        implementation = self._resolve_implementation()
        check_arity(implementation, len(args), self._location)
        return implementation(*args)

    def backtrace_line(self) -> str:
        """Describe the definition for error reports."""
        return f"{self.file_colon_line}:in `{self.pattern}'"

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Return a JSON-ready description of the pattern."""
        regexp = getattr(self._expression, "regexp", None)
        if regexp is None:
            return {
                "source": {"type": "cucumber expression", "expression": self.pattern}
            }
        flags = "".join(
            letter for flag, letter in _REGEXP_FLAGS if regexp.flags & flag
        )
        return {
            "source": {"type": "regular expression", "expression": self.pattern},
            "regexp": {"source": regexp.pattern, "flags": flags},
        }

    def __repr__(self) -> str:
        """Show the pattern and location."""
        return f"<StepDefinition {self.pattern!r} at {self.file_colon_line}>"
