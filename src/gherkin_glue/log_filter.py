"""Logging filter that tags records with the step being executed."""

from __future__ import annotations

import logging

from .context import current_step_var

PLACEHOLDER = "-"
RECOMMENDED_LOG_FORMAT = (
    "%(asctime)s %(levelname)s [%(step_location)s] [%(step_text)s] "
    "%(name)s: %(message)s"
)


class StepContextLogFilter(logging.Filter):
    """Add ``step_text`` and ``step_location`` attributes to log records.

    Values come from :data:`~gherkin_glue.context.current_step_var`. When no
    step is executing the attributes are set to ``"-"``. Attributes already
    present on a record are left untouched, so callers can pass them via
    ``extra``. The filter never drops records.

    Examples
    --------
    Attach the filter to a handler::

        handler = logging.StreamHandler()
        handler.addFilter(StepContextLogFilter())
        handler.setFormatter(logging.Formatter(RECOMMENDED_LOG_FORMAT))

    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject the step attributes and keep the record."""
        match = current_step_var.get()
        if match is None:
            step_text = step_location = PLACEHOLDER
        else:
            step_text = match.step_text
            step_location = match.file_colon_line
        if not hasattr(record, "step_text"):
            record.step_text = step_text
        if not hasattr(record, "step_location"):
            record.step_location = step_location
        return True
