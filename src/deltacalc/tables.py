"""Named integer tables and the table set expressions evaluate against."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import polars as pl

from deltacalc.expressions.errors import MissingCellError, MissingTableError


class Table:
    """A named two-dimensional grid of integers.

    Rows may have different lengths.  Coordinate ``(x, y)`` addresses
    column ``x`` of row ``y``.  Reads and writes outside the grid never
    raise: ``get`` returns ``None`` and ``set`` does nothing.
    """

    def __init__(self, name: str, data: Iterable[Iterable[int]] | None = None) -> None:
        """Initialize a table.

        Args:
            name: Table name, used as its key in a ``TableSet``.
            data: Initial rows.  Each row is copied.
        """
        self.name = name
        self.data: list[list[int]] = [list(row) for row in data or []]

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {self.data!r})"

    @property
    def n_rows(self) -> int:
        return len(self.data)

    def row_length(self, y: int) -> int:
        """Number of cells in row *y*, or 0 when the row does not exist."""
        if 0 <= y < len(self.data):
            return len(self.data[y])
        return 0

    def contains(self, x: int, y: int) -> bool:
        return 0 <= y < len(self.data) and 0 <= x < len(self.data[y])

    def get(self, x: int, y: int) -> int | None:
        """Return the cell at ``(x, y)``, or ``None`` when out of range."""
        if not self.contains(x, y):
            return None
        return self.data[y][x]

    def set(self, x: int, y: int, value: int) -> None:
        """Overwrite the cell at ``(x, y)``.  Out-of-range writes are ignored."""
        if self.contains(x, y):
            self.data[y][x] = value

    def rows(self) -> list[list[int]]:
        """Return a copy of the grid."""
        return [list(row) for row in self.data]

    # ------------------------------------------------------------------
    # Polars interop
    # ------------------------------------------------------------------

    @classmethod
    def from_frame(cls, name: str, df: pl.DataFrame) -> Table:
        """Build a table from a DataFrame, one grid row per frame row.

        Nulls may only pad the end of a row, so padded frames produced by
        ``to_frame`` round-trip back into ragged rows.

        Args:
            name: Table name.
            df: Frame whose columns hold integers.

        Returns:
            A new ``Table``.

        Raises:
            ValueError: If a column is not an integer (or all-null) column,
                or a value follows a null within a row.
        """
        for column, dtype in zip(df.columns, df.dtypes):
            if not (dtype.is_integer() or dtype == pl.Null):
                raise ValueError(f"Column {column!r} of table {name!r} has non-integer dtype {dtype}")

        data: list[list[int]] = []
        for y, record in enumerate(df.iter_rows()):
            row: list[int] = []
            ended = False
            for x, value in enumerate(record):
                if value is None:
                    ended = True
                elif ended:
                    raise ValueError(f"Row {y} of table {name!r} has a value at column {x} after a null")
                else:
                    row.append(value)
            data.append(row)
        return cls(name, data)

    def to_frame(self) -> pl.DataFrame:
        """Return the grid as a DataFrame with columns ``c0..cN``.

        Short rows are padded with nulls.  A table whose rows are all empty
        still gets one all-null column so its row count survives.
        """
        width = max((len(row) for row in self.data), default=0)
        if self.data and width == 0:
            width = 1
        columns: dict[str, list[int | None]] = {f"c{i}": [] for i in range(width)}
        for row in self.data:
            for i in range(width):
                columns[f"c{i}"].append(row[i] if i < len(row) else None)
        return pl.DataFrame(columns, schema={name: pl.Int64 for name in columns})


class TableSet(dict):
    """Mapping of table name to ``Table``.

    Expressions only look tables up by name; they never own them.
    """

    def add(self, table: Table) -> Table:
        """Register *table* under its own name.

        Raises:
            ValueError: If a table with the same name is already present.
        """
        if table.name in self:
            raise ValueError(f"Table {table.name!r} already exists")
        self[table.name] = table
        return table

    def lookup(self, table: str, x: int, y: int) -> int:
        """Strictly resolve a cell value.

        Raises:
            MissingTableError: If *table* is not in the set.
            MissingCellError: If ``(x, y)`` is outside the table.
        """
        found = self.get(table)
        if found is None:
            raise MissingTableError(table, available=sorted(self.keys()))
        value = found.get(x, y)
        if value is None:
            raise MissingCellError(table, x, y)
        return value

    @classmethod
    def from_rows(cls, mapping: Mapping[str, Iterable[Iterable[int]]]) -> TableSet:
        """Build a table set from ``{name: rows}``."""
        table_set = cls()
        for name, rows in mapping.items():
            table_set.add(Table(name, rows))
        return table_set

    @classmethod
    def from_frames(cls, mapping: Mapping[str, pl.DataFrame]) -> TableSet:
        """Build a table set from ``{name: DataFrame}``."""
        table_set = cls()
        for name, df in mapping.items():
            table_set.add(Table.from_frame(name, df))
        return table_set

    def to_frames(self) -> dict[str, pl.DataFrame]:
        return {name: table.to_frame() for name, table in self.items()}

    def snapshot(self) -> dict[str, Any]:
        """Return ``{name: rows}`` copies of every table."""
        return {name: table.rows() for name, table in self.items()}
