"""
SQL text helpers shared by the target template sets.

Builds the statements generated code runs (insert, update, delete, select
by index, stored procedure calls) for a driver, honouring the configured
identifier escaping and the target's placeholder style.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import EscapeMode
from .query import bind_marker
from .schema import Field, Index, Proc, Table

# Identifier quote characters per driver
_QUOTES = {
    "mysql": ("`", "`"),
    "sqlserver": ("[", "]"),
}


def native_placeholder(driver: str) -> Callable[[int], str]:
    """Placeholder style of the driver itself ($1, @p1, :1 or ?)."""
    return lambda n: bind_marker(driver, n)


@dataclass
class Statement:
    """SQL text split in lines plus the fields bound to its placeholders."""

    lines: List[str]
    args: List[Field] = field(default_factory=list)
    # sequence column filled in by the database on insert
    sequence: Optional[Field] = None
    # the sequence value is returned by the statement itself
    returning: bool = False

    @property
    def text(self) -> str:
        return "".join(self.lines)


class SqlBuilder:
    """Builds driver-specific SQL statements for schema entities."""

    def __init__(self, driver: str, schema: str = "",
                 escape_mode: EscapeMode = EscapeMode.NONE,
                 placeholder: Optional[Callable[[int], str]] = None):
        self.driver = driver
        self.schema = schema
        self.escape_mode = escape_mode
        self.placeholder = placeholder or native_placeholder(driver)

    def quote(self, name: str, kind: str) -> str:
        """Quote an identifier of kind 'schema', 'table' or 'column' when escaping is on."""
        if not self.escape_mode.escapes(kind):
            return name
        left, right = _QUOTES.get(self.driver, ('"', '"'))
        return f"{left}{name}{right}"

    def table_name(self, name: str) -> str:
        """Schema-qualified (unless sqlite) table name."""
        table = self.quote(name, "table")
        if self.schema and self.driver not in ("sqlite3", "sqlite"):
            return f"{self.quote(self.schema, 'schema')}.{table}"
        return table

    def columns(self, fields: List[Field]) -> str:
        return ", ".join(self.quote(f.name, "column") for f in fields)

    def placeholders(self, count: int, start: int = 1) -> str:
        return ", ".join(self.placeholder(n) for n in range(start, start + count))

    def where(self, fields: List[Field], start: int = 1) -> str:
        return " AND ".join(
            f"{self.quote(f.name, 'column')} = {self.placeholder(start + i)}"
            for i, f in enumerate(fields)
        )

    def select(self, table: Table, index: Index) -> Statement:
        """SELECT all columns of a table filtered by the fields of an index."""
        return self.select_by(table, index.fields)

    def select_by(self, table: Table, fields: List[Field]) -> Statement:
        """SELECT all columns of a table filtered by equality on fields."""
        return Statement(
            lines=[
                "SELECT ",
                f"{self.columns(table.columns)} ",
                f"FROM {self.table_name(table.name)} ",
                f"WHERE {self.where(fields)}",
            ],
            args=list(fields),
        )

    def insert(self, table: Table) -> Statement:
        """INSERT a row, leaving a sequence primary key to the database."""
        sequence = next((c for c in table.primary_keys if c.is_sequence), None)
        columns = [c for c in table.columns if not _same(c, sequence)]
        lines = [
            f"INSERT INTO {self.table_name(table.name)} (",
            self.columns(columns),
            ") VALUES (",
            self.placeholders(len(columns)),
            ")",
        ]
        returning = False
        if sequence is not None:
            if self.driver in ("postgres", "pgx", "sqlite3", "sqlite"):
                lines.append(f" RETURNING {self.quote(sequence.name, 'column')}")
                returning = True
            elif self.driver == "sqlserver":
                lines.append("; SELECT ID = CONVERT(BIGINT, SCOPE_IDENTITY())")
                returning = True
        return Statement(lines=lines, args=columns, sequence=sequence, returning=returning)

    def update(self, table: Table) -> Optional[Statement]:
        """UPDATE the non-key columns of a row by primary key."""
        keys = table.primary_keys
        columns = [c for c in table.columns if not c.is_primary]
        if not keys or not columns:
            return None
        assignments = ", ".join(
            f"{self.quote(c.name, 'column')} = {self.placeholder(i)}"
            for i, c in enumerate(columns, 1)
        )
        return Statement(
            lines=[
                f"UPDATE {self.table_name(table.name)} SET ",
                f"{assignments} ",
                f"WHERE {self.where(keys, start=len(columns) + 1)}",
            ],
            args=columns + list(keys),
        )

    def delete(self, table: Table) -> Optional[Statement]:
        """DELETE a row by primary key."""
        if not table.primary_keys:
            return None
        return Statement(
            lines=[
                f"DELETE FROM {self.table_name(table.name)} ",
                f"WHERE {self.where(table.primary_keys)}",
            ],
            args=list(table.primary_keys),
        )

    def call(self, proc: Proc) -> Statement:
        """Call a stored procedure with its parameters."""
        name = self.table_name(proc.name)
        args = self.placeholders(len(proc.params))
        if self.driver == "mysql":
            line = f"CALL {name}({args})"
        elif self.driver == "sqlserver":
            line = f"EXEC {name} {args}".rstrip()
        elif self.driver in ("oracle", "godror"):
            line = f"BEGIN {name}({args}); END;"
        elif proc.is_void:
            line = f"SELECT {name}({args})"
        else:
            line = f"SELECT * FROM {name}({args})"
        return Statement(lines=[line], args=list(proc.params))


def _same(column: Field, other: Optional[Field]) -> bool:
    return other is not None and column.name == other.name
