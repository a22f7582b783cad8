"""Multiline arguments attached to a step: data tables and doc strings.

A step carries either nothing (``None``), a :class:`DataTable` or a
:class:`DocString`. The argument is passed to the implementation after the
captured arguments, and snippets name it with ``block_parameter_name``.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class DocString(str):
    """Text block attached to a step, with an optional content type."""

    block_parameter_name: typ.ClassVar[str] = "doc_string"

    content_type: str

    def __new__(cls, content: str, content_type: str = "") -> DocString:
        """Create the doc string with its *content_type*."""
        instance = super().__new__(cls, content)
        instance.content_type = content_type
        return instance

    def snippet_comment(self) -> str | None:
        """Doc strings need no explanatory comment in snippets."""
        return None

    def __repr__(self) -> str:
        """Show the content and content type."""
        return f"DocString({str(self)!r}, content_type={self.content_type!r})"


class DataTable:
    """Rows of cells attached to a step.

    Parameters
    ----------
    raw : Iterable[Iterable[str]]
        The table rows; every row must have the same number of cells.

    Raises
    ------
    ValueError
        If rows have different lengths.

    """

    __slots__ = ("_raw",)

    block_parameter_name: typ.ClassVar[str] = "table"

    def __init__(self, raw: cabc.Iterable[cabc.Iterable[str]]) -> None:
        """Copy *raw* into an immutable grid."""
        rows = tuple(tuple(row) for row in raw)
        widths = {len(row) for row in rows}
        if len(widths) > 1:
            msg = "all rows of a data table must have the same number of cells"
            raise ValueError(msg)
        self._raw = rows

    @classmethod
    def snippet_comment(cls) -> str:
        """Comment naming this class for snippets that receive a table."""
        return f"# table is a {cls.__module__}.{cls.__qualname__}"

    @property
    def raw(self) -> list[list[str]]:
        """A fresh copy of the cells, row by row."""
        return [list(row) for row in self._raw]

    @property
    def headers(self) -> list[str]:
        """The first row."""
        return list(self._raw[0]) if self._raw else []

    def rows(self) -> list[list[str]]:
        """Every row except the header row."""
        return [list(row) for row in self._raw[1:]]

    def hashes(self) -> list[dict[str, str]]:
        """Rows after the header as dicts keyed by header cell."""
        headers = self._raw[0] if self._raw else ()
        return [dict(zip(headers, row, strict=True)) for row in self._raw[1:]]

    def rows_hash(self) -> dict[str, str]:
        """Map the first column onto the second for a two-column table.

        Raises
        ------
        ValueError
            If the table does not have exactly two columns.

        """
        if any(len(row) != 2 for row in self._raw):  # noqa: PLR2004
            msg = "rows_hash requires a table with exactly two columns"
            raise ValueError(msg)
        return {key: value for key, value in self._raw}

    def transpose(self) -> DataTable:
        """Return a new table with rows and columns swapped."""
        return DataTable(zip(*self._raw, strict=True))

    def __iter__(self) -> cabc.Iterator[list[str]]:
        """Iterate over copies of every row, header included."""
        return iter(self.raw)

    def __len__(self) -> int:
        """Number of rows, header included."""
        return len(self._raw)

    def __eq__(self, other: object) -> bool:
        """Tables are equal when their cells are equal."""
        if not isinstance(other, DataTable):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        """Hash the cells."""
        return hash(self._raw)

    def __repr__(self) -> str:
        """Show the cells."""
        return f"DataTable({self.raw!r})"


MultilineArgument = DataTable | DocString | None
