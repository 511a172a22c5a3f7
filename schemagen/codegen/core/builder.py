"""
Schema IR builder.

Turns the raw, unordered facts returned by a Loader into a single
normalized Schema: columns ordered by ordinal position, indexes and foreign
keys attached to their tables, foreign keys resolved by name against the
schema's tables.
"""

from __future__ import annotations

import re
from dataclasses import replace
from threading import Event
from typing import TYPE_CHECKING, Dict, List, Optional

from ...logging_config import get_logger
from .errors import (
    DanglingForeignKeyError,
    DuplicateEntityError,
    LoadError,
    SchemaGenError,
)
from .schema import TABLE, VIEW, Datatype, Enum, Field, ForeignKey, Index, Proc, Schema, Table

if TYPE_CHECKING:
    from ...loaders import Loader, RawForeignKey

logger = get_logger(__name__)

_PREC_RE = re.compile(r"^(?P<head>[^(]*?)\s*\(\s*(?P<prec>\d+)\s*(?:,\s*(?P<scale>\d+)\s*)?\)(?P<tail>.*)$")


def parse_type(raw: str, nullable: bool = False) -> Datatype:
    """
    Parse a raw database type name into a Datatype.

    Handles precision/scale ("numeric(10,2)"), array suffixes ("integer[]")
    and multi-word names ("timestamp(6) with time zone").

    Args:
        raw: Type name as reported by the database
        nullable: Whether the column accepts NULL

    Returns:
        Parsed Datatype
    """
    typ = " ".join(raw.split())
    array = False
    while typ.endswith("[]"):
        array = True
        typ = typ[:-2].rstrip()

    prec = scale = 0
    match = _PREC_RE.match(typ)
    if match:
        prec = int(match.group("prec"))
        scale = int(match.group("scale") or 0)
        typ = " ".join(f"{match.group('head')} {match.group('tail')}".split())

    return Datatype(type=typ, prec=prec, scale=scale, nullable=nullable, array=array)


def index_func_name(table: str, fields: List[str]) -> str:
    """Derive the lookup function name for an index over fields."""
    return f"{table}_by_{'_'.join(fields)}".lower()


class SchemaBuilder:
    """Builds a Schema from a Loader's raw facts."""

    def __init__(
        self,
        loader: Loader,
        schema_name: str = "",
        driver: str = "",
        cancel: Optional[Event] = None,
    ):
        self.loader = loader
        self.schema_name = schema_name or loader.schema_name()
        self.driver = driver or loader.driver
        self.cancel = cancel

    def _call(self, method: str, *args):
        """Call a loader method, wrapping failures in LoadError."""
        if self.cancel is not None and self.cancel.is_set():
            raise LoadError(
                f"Schema load cancelled before {method}",
                details={"schema": self.schema_name, "operation": method},
            )
        try:
            return getattr(self.loader, method)(*args)
        except SchemaGenError:
            raise
        except Exception as e:
            raise LoadError(
                f"Loader {method} failed: {e}",
                details={"schema": self.schema_name, "operation": method},
            ) from e

    def build(self) -> Schema:
        """
        Build the schema.

        Returns:
            The normalized Schema

        Raises:
            LoadError: If the loader fails or the build is cancelled
            DuplicateEntityError: If two entities share a name in one scope
            DanglingForeignKeyError: If a foreign key cannot be resolved
        """
        logger.info("Building schema '%s' (driver=%s)", self.schema_name, self.driver)

        enums = [self._build_enum(raw) for raw in self._call("enums", self.schema_name)]
        _check_unique("enum", [e.name for e in enums], self.schema_name)

        procs = [self._build_proc(raw) for raw in self._call("procs", self.schema_name)]
        _check_unique("proc", [p.name for p in procs], self.schema_name)

        raw_fkeys: Dict[str, List[RawForeignKey]] = {}
        tables = self._build_tables(TABLE, raw_fkeys)
        views = self._build_tables(VIEW, raw_fkeys)
        _check_unique("table", [t.name for t in tables + views], self.schema_name)

        by_name = {t.name: t for t in tables + views}
        for table in tables + views:
            table.foreign_keys = self._resolve_foreign_keys(
                table, raw_fkeys.get(table.name, []), by_name
            )

        schema = Schema(
            driver=self.driver,
            name=self.schema_name,
            enums=enums,
            procs=procs,
            tables=tables,
            views=views,
        )
        logger.info(
            "Built schema '%s': %d tables, %d views, %d enums, %d procs",
            schema.name,
            len(tables),
            len(views),
            len(enums),
            len(procs),
        )
        return schema

    def _build_enum(self, raw) -> Enum:
        raw_values = sorted(
            self._call("enum_values", self.schema_name, raw.name), key=lambda v: v.ordinal
        )
        values = [
            Field(
                name=v.name,
                datatype=Datatype(type=raw.name),
                const_value=v.const_value if v.const_value is not None else v.ordinal,
            )
            for v in raw_values
        ]
        _check_unique("enum value", [v.name for v in values], raw.name)
        return Enum(name=raw.name, values=values, comment=raw.comment)

    def _build_proc(self, raw) -> Proc:
        raw_params = sorted(
            self._call("proc_params", self.schema_name, raw.name), key=lambda p: p.ordinal
        )
        params = [Field(name=p.name, datatype=parse_type(p.type)) for p in raw_params]
        _check_unique("parameter", [p.name for p in params], raw.name)
        return Proc(
            name=raw.name,
            params=params,
            return_field=Field(name="r0", datatype=parse_type(raw.return_type or "void")),
            comment=raw.comment,
        )

    def _build_tables(self, kind: str, raw_fkeys: Dict[str, list]) -> List[Table]:
        tables = []
        for raw in self._call("tables", self.schema_name, kind):
            table = Table(type=kind, name=raw.name, manual=raw.manual, comment=raw.comment)
            table.columns = self._build_columns(raw.name)
            table.indexes = self._build_indexes(table)

            # columns covered by a primary index are primary keys
            for index in table.indexes:
                if index.is_primary:
                    for f in index.fields:
                        column = table.get_column(f.name)
                        column.is_primary = True
                        column.datatype.nullable = False
                        f.is_primary = True

            table.primary_keys = [c for c in table.columns if c.is_primary]
            if kind == TABLE and table.primary_keys and not any(
                i.is_primary for i in table.indexes
            ):
                names = [c.name for c in table.primary_keys]
                table.indexes.insert(
                    0,
                    Index(
                        name=f"{table.name}_pkey",
                        func_name=index_func_name(table.name, names),
                        fields=[
                            replace(c, datatype=replace(c.datatype))
                            for c in table.primary_keys
                        ],
                        is_unique=True,
                        is_primary=True,
                    ),
                )
            table.indexes = _one_index_per_lookup(table)

            if kind == TABLE:
                raw_fkeys[table.name] = self._call(
                    "foreign_keys", self.schema_name, table.name
                )
            logger.debug(
                "Loaded %s '%s' (%d columns, %d indexes)",
                kind,
                table.name,
                len(table.columns),
                len(table.indexes),
            )
            tables.append(table)
        return tables

    def _build_columns(self, table: str) -> List[Field]:
        raw_columns = sorted(
            self._call("table_columns", self.schema_name, table), key=lambda c: c.ordinal
        )
        columns = [
            Field(
                name=c.name,
                datatype=parse_type(c.data_type, nullable=not (c.not_null or c.is_primary)),
                default=c.default,
                comment=c.comment,
                is_primary=c.is_primary,
                is_sequence=c.is_sequence,
            )
            for c in raw_columns
        ]
        _check_unique("column", [c.name for c in columns], table)
        return columns

    def _build_indexes(self, table: Table) -> List[Index]:
        indexes = []
        for raw in self._call("indexes", self.schema_name, table.name):
            raw_columns = sorted(
                self._call("index_columns", self.schema_name, table.name, raw.name),
                key=lambda c: c.seq_no,
            )
            fields = []
            for rc in raw_columns:
                column = table.get_column(rc.column)
                if column is None:
                    raise LoadError(
                        f"Index '{raw.name}' on '{table.name}' uses unknown column '{rc.column}'",
                        details={"table": table.name, "index": raw.name},
                    )
                fields.append(replace(column, datatype=replace(column.datatype)))
            indexes.append(
                Index(
                    name=raw.name,
                    func_name=index_func_name(table.name, [f.name for f in fields]),
                    fields=fields,
                    is_unique=raw.is_unique,
                    is_primary=raw.is_primary,
                )
            )
        _check_unique("index", [i.name for i in indexes], table.name)
        return indexes

    def _resolve_foreign_keys(
        self, table: Table, raw_fkeys: List[RawForeignKey], by_name: Dict[str, Table]
    ) -> List[ForeignKey]:
        foreign_keys = []
        used = set()
        for raw in raw_fkeys:
            ref = by_name.get(raw.ref_table)
            if ref is None:
                raise DanglingForeignKeyError(table.name, raw.name, raw.ref_table)

            column = table.get_column(raw.column)
            if column is None:
                raise DanglingForeignKeyError(
                    table.name,
                    raw.name,
                    raw.ref_table,
                    reason=f"column '{raw.column}' does not exist",
                )
            ref_column = ref.get_column(raw.ref_column)
            if ref_column is None:
                raise DanglingForeignKeyError(
                    table.name,
                    raw.name,
                    raw.ref_table,
                    reason=f"referenced column '{raw.ref_table}.{raw.ref_column}' does not exist",
                )

            ref_index = None
            for index in ref.indexes:
                if [f.name for f in index.fields] == [ref_column.name]:
                    ref_index = index
                    break

            resolved = _smart_name(raw.column, ref.name)
            if resolved in used:
                resolved = f"{ref.name}_by_{raw.column}"
            used.add(resolved)

            foreign_keys.append(
                ForeignKey(
                    name=raw.name,
                    resolved_name=resolved,
                    field=replace(column, datatype=replace(column.datatype)),
                    ref_index=ref_index.name if ref_index else "",
                    ref_table=ref.name,
                    ref_field=replace(ref_column, datatype=replace(ref_column.datatype)),
                    ref_func_name=(
                        ref_index.func_name
                        if ref_index
                        else index_func_name(ref.name, [ref_column.name])
                    ),
                )
            )
        _check_unique("foreign key", [fk.name for fk in foreign_keys], table.name)
        return foreign_keys


def _smart_name(column: str, ref_table: str) -> str:
    """Name a foreign key after its column, or the referenced table."""
    lower = column.lower()
    if lower.endswith("_id") and len(column) > 3:
        return column[:-3]
    return ref_table


def _one_index_per_lookup(table: Table) -> List[Index]:
    """
    Keep a single index per lookup function name.

    Indexes over the same columns derive the same function; the primary
    index wins over a unique one, which wins over a plain one, and the
    first declared wins a tie.
    """
    best: Dict[str, Index] = {}
    for index in table.indexes:
        kept = best.get(index.func_name)
        if kept is None or (index.is_primary, index.is_unique) > (kept.is_primary, kept.is_unique):
            best[index.func_name] = index
    indexes = []
    for index in table.indexes:
        if best[index.func_name] is index:
            indexes.append(index)
        else:
            logger.info(
                "Index '%s' on '%s' duplicates '%s', no lookup generated for it",
                index.name,
                table.name,
                best[index.func_name].name,
            )
    return indexes


def _check_unique(kind: str, names: List[str], scope: str) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise DuplicateEntityError(kind, name, scope)
        seen.add(name)


def build_schema(
    loader: Loader,
    schema_name: str = "",
    *,
    driver: str = "",
    cancel: Optional[Event] = None,
) -> Schema:
    """
    Convenience function to build a Schema from a loader.

    Args:
        loader: Producer of raw schema facts
        schema_name: Schema to load (defaults to the loader's schema)
        driver: Driver name override
        cancel: Optional event aborting the build when set

    Returns:
        The normalized Schema
    """
    return SchemaBuilder(loader, schema_name, driver=driver, cancel=cancel).build()
