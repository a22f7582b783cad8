"""Configuration for step matching and snippet rendering."""

from __future__ import annotations

import dataclasses as dc

from .snippet import DEFAULT_SNIPPET_TYPE, SNIPPET_TYPES


@dc.dataclass(frozen=True)
class GlueConfig:
    """Options read by the registry.

    Parameters
    ----------
    guess : bool
        When several definitions match a step, pick the most specific one
        instead of raising :class:`~gherkin_glue.errors.Ambiguous`.
        Defaults to ``False``.
    snippet_type : str
        Style used by :meth:`StepRegistry.snippet_text`; one of
        ``cucumber_expression``, ``regexp``, ``classic`` or ``percent``.

    Raises
    ------
    TypeError
        If ``guess`` is not a bool.
    ValueError
        If ``snippet_type`` is unknown.

    """

    guess: bool = False
    snippet_type: str = DEFAULT_SNIPPET_TYPE

    def __post_init__(self) -> None:
        """Validate the options."""
        if not isinstance(self.guess, bool):
            msg = "guess must be a bool"
            raise TypeError(msg)
        if self.snippet_type not in SNIPPET_TYPES:
            known = ", ".join(SNIPPET_TYPES)
            msg = f"snippet_type must be one of: {known}"
            raise ValueError(msg)
