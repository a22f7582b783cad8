"""gherkin-glue package."""

from __future__ import annotations

from .config import GlueConfig
from .context import current_step_var
from .dsl import LOG_MEDIA_TYPE
from .errors import (
    Ambiguous,
    AmbiguousParameterTypeError,
    ArityMismatchError,
    GlueError,
    Pending,
    TargetResolutionError,
    UndefinedDynamicStep,
    UndefinedParameterTypeError,
)
from .expression_generator import ExpressionGenerator, GeneratedExpression
from .interceptor import Pipe
from .log_filter import RECOMMENDED_LOG_FORMAT, StepContextLogFilter
from .multiline_argument import DataTable, DocString
from .parameter_types import Argument, ParameterType, ParameterTypeRegistry
from .registry import LoggingUserInterface, StepMatchSearch, StepRegistry
from .snippet import SNIPPET_TYPES, describe_snippet_types
from .step_definition import (
    AttributeTarget,
    FactoryTarget,
    Location,
    ObjectTarget,
    StepDefinition,
    WorldTarget,
)
from .step_match import StepMatch
from .steps_parser import StepsParseError, parse_steps

PACKAGE_NAME = "gherkin_glue"

__all__ = [
    "LOG_MEDIA_TYPE",
    "RECOMMENDED_LOG_FORMAT",
    "SNIPPET_TYPES",
    "Ambiguous",
    "AmbiguousParameterTypeError",
    "Argument",
    "ArityMismatchError",
    "AttributeTarget",
    "DataTable",
    "DocString",
    "ExpressionGenerator",
    "FactoryTarget",
    "GeneratedExpression",
    "GlueConfig",
    "GlueError",
    "Location",
    "LoggingUserInterface",
    "ObjectTarget",
    "ParameterType",
    "ParameterTypeRegistry",
    "Pending",
    "Pipe",
    "StepContextLogFilter",
    "StepDefinition",
    "StepMatch",
    "StepMatchSearch",
    "StepRegistry",
    "StepsParseError",
    "TargetResolutionError",
    "UndefinedDynamicStep",
    "UndefinedParameterTypeError",
    "WorldTarget",
    "current_step_var",
    "describe_snippet_types",
    "parse_steps",
]
