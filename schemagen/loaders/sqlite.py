"""
Loader introspecting a SQLite database.

SQLite has a single schema per connection ("main"), no enums and no stored
procedures. Tables, columns, indexes and foreign keys are read through the
table_info, index_list, index_info and foreign_key_list PRAGMAs.
"""

import sqlite3
from pathlib import Path
from typing import Any, List, Optional, Union

from ..logging_config import get_logger
from . import (
    Loader,
    LoadError,
    RawColumn,
    RawEnum,
    RawEnumValue,
    RawForeignKey,
    RawIndex,
    RawIndexColumn,
    RawProc,
    RawProcParam,
    RawTable,
)

logger = get_logger(__name__)


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SqliteLoader(Loader):
    """
    Loader reading schema facts from a SQLite database.

    Args:
        database: Path of the database file, or an open sqlite3 connection
    """

    driver = "sqlite3"

    def __init__(self, database: Union[str, Path, sqlite3.Connection]):
        if isinstance(database, sqlite3.Connection):
            self.conn = database
            self._owned = False
        else:
            path = Path(database)
            if not path.exists():
                raise LoadError(
                    f"SQLite database not found: {path}", details={"database": str(path)}
                )
            try:
                self.conn = sqlite3.connect(str(path))
            except sqlite3.Error as e:
                raise LoadError(f"Cannot open SQLite database {path}: {e}") from e
            self._owned = True
        logger.debug("SqliteLoader initialized")

    def close(self) -> None:
        if self._owned:
            self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _query(self, sql: str, params: tuple = ()) -> List[Any]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error("SQLite query failed: %s", e)
            raise LoadError(f"SQLite query failed: {e}", details={"sql": sql}) from e

    def schema_name(self) -> str:
        return "main"

    def enums(self, schema: str) -> List[RawEnum]:
        return []

    def enum_values(self, schema: str, enum: str) -> List[RawEnumValue]:
        return []

    def procs(self, schema: str) -> List[RawProc]:
        return []

    def proc_params(self, schema: str, proc: str) -> List[RawProcParam]:
        return []

    def tables(self, schema: str, kind: str) -> List[RawTable]:
        rows = self._query(
            "SELECT name FROM sqlite_master "
            "WHERE type = ? AND name NOT LIKE 'sqlite_%' ORDER BY name",
            (kind,),
        )
        return [RawTable(name=row[0], type=kind) for row in rows]

    def table_columns(self, schema: str, table: str) -> List[RawColumn]:
        # cid, name, type, notnull, dflt_value, pk
        rows = self._query(f"PRAGMA table_info({_quote(table)})")
        pk_count = sum(1 for row in rows if row[5])
        columns = []
        for cid, name, data_type, not_null, default, pk in rows:
            data_type = data_type or "blob"
            columns.append(
                RawColumn(
                    name=name,
                    data_type=data_type,
                    ordinal=cid + 1,
                    not_null=bool(not_null),
                    default=default,
                    is_primary=pk > 0,
                    # INTEGER PRIMARY KEY is an alias of the rowid
                    is_sequence=pk > 0 and pk_count == 1 and data_type.lower() == "integer",
                )
            )
        return columns

    def indexes(self, schema: str, table: str) -> List[RawIndex]:
        # seq, name, unique, origin, partial
        rows = self._query(f"PRAGMA index_list({_quote(table)})")
        indexes = []
        for row in sorted(rows, key=lambda r: r[1]):
            if not self._on_columns(row[1]):
                logger.debug("Skipping expression index %s on %s", row[1], table)
                continue
            indexes.append(
                RawIndex(name=row[1], is_unique=bool(row[2]), is_primary=row[3] == "pk")
            )
        return indexes

    def index_columns(self, schema: str, table: str, index: str) -> List[RawIndexColumn]:
        # seqno, cid, name
        rows = self._query(f"PRAGMA index_info({_quote(index)})")
        return [RawIndexColumn(column=row[2], seq_no=row[0] + 1) for row in rows]

    def _on_columns(self, index: str) -> bool:
        """True when every member of an index is a named table column."""
        rows = self._query(f"PRAGMA index_info({_quote(index)})")
        # cid is -1 for the rowid and -2 for an expression
        return all(row[1] >= 0 and row[2] is not None for row in rows)

    def foreign_keys(self, schema: str, table: str) -> List[RawForeignKey]:
        # id, seq, table, from, to, on_update, on_delete, match
        rows = self._query(f"PRAGMA foreign_key_list({_quote(table)})")
        foreign_keys = []
        for row in sorted(rows, key=lambda r: (r[0], r[1])):
            column = row[3]
            # identifiers are case-insensitive, use the declared spelling
            ref_table = self._table_name(row[2])
            if row[4] is None:
                ref_column = self._primary_key(ref_table)
            else:
                ref_column = self._column_name(ref_table, row[4])
            foreign_keys.append(
                RawForeignKey(
                    name=f"{table}_{column}_fkey",
                    column=column,
                    ref_table=ref_table,
                    ref_column=ref_column,
                )
            )
        return foreign_keys

    def _table_name(self, name: str) -> str:
        rows = self._query(
            "SELECT name FROM sqlite_master "
            "WHERE type IN ('table', 'view') AND lower(name) = lower(?)",
            (name,),
        )
        return rows[0][0] if rows else name

    def _column_name(self, table: str, name: str) -> str:
        for row in self._query(f"PRAGMA table_info({_quote(table)})"):
            if row[1].lower() == name.lower():
                return row[1]
        return name

    def _primary_key(self, table: str) -> Optional[str]:
        """Primary key column a foreign key without explicit columns refers to."""
        for row in self._query(f"PRAGMA table_info({_quote(table)})"):
            if row[5] == 1:
                return row[1]
        return None
