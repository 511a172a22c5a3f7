"""
Loader backed by a facts document.

A facts document is a JSON-style dictionary describing a schema, either
dumped from a live database by another tool or written by hand:

    {
      "driver": "postgres",
      "schema": "public",
      "enums": [{"name": "status", "values": ["active", "disabled"]}],
      "procs": [{"name": "add", "return_type": "integer",
                 "params": [{"name": "a", "type": "integer"}]}],
      "tables": [{"name": "user",
                  "columns": [{"name": "id", "type": "integer",
                               "not_null": true, "is_primary": true,
                               "is_sequence": true}],
                  "indexes": [{"name": "user_name_idx", "columns": ["name"],
                               "is_unique": true}],
                  "foreign_keys": [{"name": "fk", "column": "team_id",
                                    "ref_table": "team", "ref_column": "id"}]}],
      "views": []
    }
"""

from typing import Any, Dict, List, Optional

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


class FactsLoader(Loader):
    """Loader reading raw facts from an in-memory facts document."""

    def __init__(self, document: Dict[str, Any]):
        if not isinstance(document, dict):
            raise LoadError("Facts document must be a JSON object")
        self.document = document
        self.driver = document.get("driver", "")
        logger.debug("FactsLoader initialized (driver=%s)", self.driver)

    def schema_name(self) -> str:
        return self.document.get("schema", "")

    def _check_schema(self, schema: str) -> None:
        expected = self.schema_name()
        if expected and schema and schema != expected:
            raise LoadError(
                f"Facts document describes schema '{expected}', not '{schema}'",
                details={"schema": schema},
            )

    def _find(self, section: str, name: str) -> Dict[str, Any]:
        for item in self.document.get(section, []):
            if item.get("name") == name:
                return item
        raise LoadError(
            f"No entry '{name}' in section '{section}'",
            details={"section": section, "name": name},
        )

    def _table(self, name: str) -> Dict[str, Any]:
        for section in ("tables", "views"):
            for item in self.document.get(section, []):
                if item.get("name") == name:
                    return item
        raise LoadError(f"Unknown table '{name}'", details={"table": name})

    def enums(self, schema: str) -> List[RawEnum]:
        self._check_schema(schema)
        return [
            RawEnum(name=e["name"], comment=e.get("comment", ""))
            for e in self.document.get("enums", [])
        ]

    def enum_values(self, schema: str, enum: str) -> List[RawEnumValue]:
        values = []
        for i, value in enumerate(self._find("enums", enum).get("values", []), 1):
            if isinstance(value, str):
                values.append(RawEnumValue(name=value, ordinal=i))
            else:
                values.append(
                    RawEnumValue(
                        name=value["name"],
                        ordinal=value.get("ordinal", i),
                        const_value=value.get("const_value"),
                    )
                )
        return values

    def procs(self, schema: str) -> List[RawProc]:
        self._check_schema(schema)
        return [
            RawProc(
                name=p["name"],
                return_type=p.get("return_type", "void"),
                comment=p.get("comment", ""),
            )
            for p in self.document.get("procs", [])
        ]

    def proc_params(self, schema: str, proc: str) -> List[RawProcParam]:
        return [
            RawProcParam(name=p["name"], type=p["type"], ordinal=p.get("ordinal", i))
            for i, p in enumerate(self._find("procs", proc).get("params", []), 1)
        ]

    def tables(self, schema: str, kind: str) -> List[RawTable]:
        self._check_schema(schema)
        section = "views" if kind == "view" else "tables"
        return [
            RawTable(
                name=t["name"],
                type=kind,
                manual=t.get("manual", False),
                comment=t.get("comment", ""),
            )
            for t in self.document.get(section, [])
        ]

    def table_columns(self, schema: str, table: str) -> List[RawColumn]:
        columns = []
        for i, c in enumerate(self._table(table).get("columns", []), 1):
            try:
                columns.append(
                    RawColumn(
                        name=c["name"],
                        data_type=c["type"],
                        ordinal=c.get("ordinal", i),
                        not_null=c.get("not_null", False),
                        default=_default(c.get("default")),
                        is_primary=c.get("is_primary", False),
                        is_sequence=c.get("is_sequence", False),
                        comment=c.get("comment", ""),
                    )
                )
            except KeyError as e:
                raise LoadError(
                    f"Column {i} of table '{table}' is missing {e}",
                    details={"table": table},
                ) from e
        return columns

    def indexes(self, schema: str, table: str) -> List[RawIndex]:
        return [
            RawIndex(
                name=i["name"],
                is_unique=i.get("is_unique", False),
                is_primary=i.get("is_primary", False),
            )
            for i in self._table(table).get("indexes", [])
        ]

    def index_columns(self, schema: str, table: str, index: str) -> List[RawIndexColumn]:
        for i in self._table(table).get("indexes", []):
            if i["name"] == index:
                return [
                    RawIndexColumn(column=c, seq_no=n)
                    for n, c in enumerate(i.get("columns", []), 1)
                ]
        raise LoadError(
            f"Unknown index '{index}' on table '{table}'",
            details={"table": table, "index": index},
        )

    def foreign_keys(self, schema: str, table: str) -> List[RawForeignKey]:
        return [
            RawForeignKey(
                name=fk["name"],
                column=fk["column"],
                ref_table=fk["ref_table"],
                ref_column=fk.get("ref_column", "id"),
            )
            for fk in self._table(table).get("foreign_keys", [])
        ]


def _default(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
