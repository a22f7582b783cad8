"""Context variables describing the step currently being executed."""

from __future__ import annotations

import contextvars
import typing as typ

if typ.TYPE_CHECKING:
    from .step_match import StepMatch

current_step_var: contextvars.ContextVar[StepMatch | None] = contextvars.ContextVar(
    "current_step", default=None
)
