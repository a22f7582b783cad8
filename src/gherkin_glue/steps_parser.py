"""Parse a block of Gherkin step lines for dynamic ``steps`` calls.

The block is wrapped in a one-scenario feature and handed to the Gherkin
parser, so step lines, doc strings, tables, comments and their escapes
follow the Gherkin grammar exactly. Line numbers refer to the block.

Examples
--------
Parse a step with a data table::

    parsed = parse_steps('''
        Given a list of cukes
          | name  |
          | gherk |
    ''')
    assert parsed[0].text == "a list of cukes"

"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from gherkin.errors import CompositeParserException, ParserException
from gherkin.parser import Parser

from .multiline_argument import DataTable, DocString

if typ.TYPE_CHECKING:
    from .multiline_argument import MultilineArgument

SCENARIO_HEADER = "Feature: steps\nScenario: steps\n"
TABLE_STEP = "* table\n"

_LOCATION_PREFIX = re.compile(r"^\(\d+:\d+\): ")


class StepsParseError(ValueError):
    """Raised when a block of steps cannot be parsed."""

    def __init__(self, message: str, line: int) -> None:
        """Attach the 1-based *line* number to *message*."""
        self.line = line
        super().__init__(f"line {line}: {message}")


@dc.dataclass(frozen=True)
class ParsedStep:
    """A step read from a block of text."""

    keyword: str
    text: str
    line: int
    multiline_argument: MultilineArgument = None


def _parse_error(error: ParserException, header_lines: int) -> StepsParseError:
    message = _LOCATION_PREFIX.sub("", str(error))
    line = max(error.location["line"] - header_lines, 1)
    return StepsParseError(message, line)


def _first_text_line(text: str, wanted: str) -> int:
    for number, line in enumerate(text.splitlines(), start=1):
        if line.strip() == wanted:
            return number
    return 1


def _scenario_steps(text: str, header: str) -> list[dict[str, typ.Any]]:
    """Parse *text* below *header* and return the scenario's step nodes."""
    header_lines = header.count("\n")
    try:
        document = Parser().parse(header + text)
    except CompositeParserException as err:
        raise _parse_error(err.errors[0], header_lines) from err
    except ParserException as err:
        raise _parse_error(err, header_lines) from err

    scenario, *others = document["feature"]["children"]
    if others:
        extra = others[0].get("scenario") or others[0].get("rule") or {}
        line = extra.get("location", {}).get("line", header_lines + 1)
        msg = "expected a step, got a new scenario"
        raise StepsParseError(msg, line - header_lines)
    scenario = scenario["scenario"]
    description = scenario.get("description", "").strip()
    if description:
        # Text before the first step reads as a scenario description.
        first = description.splitlines()[0].strip()
        msg = f"expected a step, got {first!r}"
        raise StepsParseError(msg, _first_text_line(text, first))
    return scenario["steps"]


def _multiline_argument(step: dict[str, typ.Any]) -> MultilineArgument:
    if "docString" in step:
        doc_string = step["docString"]
        return DocString(doc_string["content"], doc_string.get("mediaType") or "")
    if "dataTable" in step:
        rows = step["dataTable"]["rows"]
        return DataTable([cell["value"] for cell in row["cells"]] for row in rows)
    return None


def parse_steps(text: str) -> list[ParsedStep]:
    """Parse *text* into steps with their multiline arguments.

    Parameters
    ----------
    text : str
        One or more step lines, each optionally followed by a doc string
        or data table.

    Returns
    -------
    list[ParsedStep]
        The steps in order of appearance.

    Raises
    ------
    StepsParseError
        If a line is neither a step, a comment, a doc string nor a table
        row, or a multiline argument is malformed.

    """
    header_lines = SCENARIO_HEADER.count("\n")
    return [
        ParsedStep(
            keyword=step["keyword"],
            text=step["text"],
            line=step["location"]["line"] - header_lines,
            multiline_argument=_multiline_argument(step),
        )
        for step in _scenario_steps(text, SCENARIO_HEADER)
    ]


def parse_table(text: str) -> DataTable:
    """Parse ``| a | b |`` rows into a :class:`DataTable`.

    Raises
    ------
    StepsParseError
        If *text* holds anything other than table rows and comments.

    """
    steps = _scenario_steps(text, SCENARIO_HEADER + TABLE_STEP)
    if len(steps) > 1:
        header_lines = (SCENARIO_HEADER + TABLE_STEP).count("\n")
        msg = f"expected a table row, got {steps[1]['text']!r}"
        raise StepsParseError(msg, steps[1]["location"]["line"] - header_lines)
    argument = _multiline_argument(steps[0])
    if not isinstance(argument, DataTable):
        msg = "expected a table row"
        raise StepsParseError(msg, 1)
    return argument
