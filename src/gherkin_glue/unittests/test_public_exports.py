"""Unit tests for package public exports."""

from __future__ import annotations


class TestPublicExports:
    """Tests for package public exports."""

    def test_public_exports_in_all(self) -> None:
        """Verify expected names are present in __all__."""
        import gherkin_glue

        assert "StepRegistry" in gherkin_glue.__all__
        assert "GlueConfig" in gherkin_glue.__all__
        assert "StepContextLogFilter" in gherkin_glue.__all__
        assert "UndefinedDynamicStep" in gherkin_glue.__all__

    def test_all_names_resolve(self) -> None:
        """Verify every name in __all__ is importable from the root."""
        import gherkin_glue

        missing = [
            name for name in gherkin_glue.__all__ if not hasattr(gherkin_glue, name)
        ]
        assert missing == []

    def test_errors_share_a_base_class(self) -> None:
        """Verify every library error derives from GlueError."""
        from gherkin_glue import (
            Ambiguous,
            ArityMismatchError,
            GlueError,
            Pending,
            UndefinedDynamicStep,
        )

        for error in (Ambiguous, ArityMismatchError, Pending, UndefinedDynamicStep):
            assert issubclass(error, GlueError)
