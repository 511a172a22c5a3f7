"""
Go-specific type system for code generation.

Maps SQL datatypes to Go types. Nullable columns use the database/sql Null
wrappers, arrays become slices, enums registered for the run map to their
generated type, and anything unrecognised falls back to the custom types
package (or []byte when none is configured).
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from ...core.schema import Datatype, Field
from ...core.types import TypeRegistry


@dataclass(frozen=True)
class GoType:
    """
    Immutable representation of a Go type.

    Carries the type name, its zero value for return statements, and the
    packages it needs imported.
    """

    name: str
    zero: str = "nil"
    imports_needed: Set[str] = field(default_factory=frozenset)
    nullable: bool = False

    @property
    def value_field(self) -> str:
        """Field holding the value of a sql.Null* wrapper ('' for plain types)."""
        if self.name.startswith("sql.Null"):
            return self.name[len("sql.Null"):]
        return ""


# Go builtin types with their abbreviations for local variable names
GO_KNOWN_TYPES = {
    "bool": "b",
    "string": "s",
    "byte": "b",
    "rune": "r",
    "int": "i",
    "int8": "i",
    "int16": "i",
    "int32": "i",
    "int64": "i",
    "uint": "u",
    "uint8": "u",
    "uint16": "u",
    "uint32": "u",
    "uint64": "u",
    "float32": "f",
    "float64": "f",
    "Slice": "s",
    "StringSlice": "ss",
}

_NULL_TYPES = {
    "bool": GoType("sql.NullBool", "sql.NullBool{}", frozenset({"database/sql"}), True),
    "string": GoType("sql.NullString", "sql.NullString{}", frozenset({"database/sql"}), True),
    "int": GoType("sql.NullInt64", "sql.NullInt64{}", frozenset({"database/sql"}), True),
    "float": GoType("sql.NullFloat64", "sql.NullFloat64{}", frozenset({"database/sql"}), True),
    "time": GoType("sql.NullTime", "sql.NullTime{}", frozenset({"database/sql"}), True),
}

_STRING_TYPES = {
    "char", "character", "varchar", "character varying", "nchar", "nvarchar",
    "text", "ntext", "tinytext", "mediumtext", "longtext", "clob", "nclob",
    "string", "citext", "uuid", "uniqueidentifier", "xml", "inet", "cidr",
    "macaddr", "varchar2", "nvarchar2", "enum", "set",
}
_BYTES_TYPES = {
    "bytea", "blob", "tinyblob", "mediumblob", "longblob", "binary", "varbinary",
    "image", "raw", "json", "jsonb",
}
_TIME_TYPES = {
    "date", "time", "timetz", "timestamp", "timestamptz", "datetime", "datetime2",
    "smalldatetime", "datetimeoffset", "time with time zone",
    "time without time zone", "timestamp with time zone",
    "timestamp without time zone",
}
_FLOAT32_TYPES = {"real", "float4"}
_FLOAT64_TYPES = {
    "double", "double precision", "float", "float8", "numeric", "decimal",
    "money", "smallmoney", "number",
}

_UNSIGNED_RE = re.compile(r"\s+unsigned$")


@dataclass
class GoTypeConfig:
    """Configuration for Go type mapping behavior."""

    # Go type used for 32 bit integer columns
    int32_type: str = "int"
    # Go type used for unsigned 32 bit integer columns
    uint32_type: str = "uint"
    # Package prefix for types with no Go mapping
    custom_types_package: str = ""


class GoTypeMapper:
    """
    Maps schema fields to Go types.

    Enum types are looked up in the run's type registry so that enums
    registered while emitting resolve to their generated type.
    """

    def __init__(self, config: Optional[GoTypeConfig] = None,
                 types: Optional[TypeRegistry] = None, type_name=None):
        """
        Initialize with type configuration.

        Args:
            config: Type mapping options
            types: Known types of the run (enum types are registered here)
            type_name: Callable turning an SQL type name into a Go type name
        """
        self.config = config or GoTypeConfig()
        self.types = types or TypeRegistry(GO_KNOWN_TYPES, GO_KNOWN_TYPES)
        self.type_name = type_name or (lambda name: name)
        self._cache: Dict[tuple, GoType] = {}

    def map_field_type(self, f: Field) -> GoType:
        """Map a schema field to a Go type."""
        return self.map_datatype(f.datatype)

    def map_datatype(self, dt: Datatype) -> GoType:
        key = (dt.type, dt.prec, dt.scale, dt.nullable, dt.array)
        if key not in self._cache:
            self._cache[key] = self._map(dt)
        return self._cache[key]

    def _map(self, dt: Datatype) -> GoType:
        base = self._map_base(dt)
        if dt.array:
            return GoType(f"[]{base.name}", "nil", base.imports_needed)
        if dt.nullable:
            return self._nullable(base)
        return base

    def _map_base(self, dt: Datatype) -> GoType:
        """Map the base type without considering nullability."""
        raw = dt.type.lower().strip()
        unsigned = bool(_UNSIGNED_RE.search(raw))
        raw = _UNSIGNED_RE.sub("", raw)

        if raw in ("bool", "boolean", "bit") or (raw == "tinyint" and dt.prec == 1):
            return GoType("bool", "false")
        if raw in ("tinyint", "int1"):
            return _int("uint8" if unsigned else "int8")
        if raw in ("smallint", "int2", "smallserial", "serial2", "year"):
            return _int("uint16" if unsigned else "int16")
        if raw in ("integer", "int", "int4", "mediumint", "serial", "serial4"):
            return _int(self.config.uint32_type if unsigned else self.config.int32_type)
        if raw in ("bigint", "int8", "bigserial", "serial8"):
            return _int("uint64" if unsigned else "int64")
        if raw in _FLOAT32_TYPES:
            return GoType("float32", "0")
        if raw in _FLOAT64_TYPES:
            return GoType("float64", "0")
        if raw in _STRING_TYPES:
            return GoType("string", '""')
        if raw in _BYTES_TYPES:
            return GoType("[]byte", "nil")
        if raw in _TIME_TYPES:
            return GoType("time.Time", "time.Time{}", frozenset({"time"}))

        enum_type = self.type_name(dt.type)
        if self.types.is_known(enum_type) and enum_type not in GO_KNOWN_TYPES:
            return GoType(enum_type, "0")

        if self.config.custom_types_package:
            name = f"{self.config.custom_types_package}.{self.type_name(dt.type)}"
            return GoType(name, f"{name}{{}}")
        return GoType("[]byte", "nil")

    def _nullable(self, base: GoType) -> GoType:
        if base.name == "bool":
            return _NULL_TYPES["bool"]
        if base.name == "string":
            return _NULL_TYPES["string"]
        if base.name.startswith(("int", "uint")):
            return _NULL_TYPES["int"]
        if base.name.startswith("float"):
            return _NULL_TYPES["float"]
        if base.name == "time.Time":
            return _NULL_TYPES["time"]
        if self.types.is_known(base.name) and base.name not in GO_KNOWN_TYPES:
            # generated enums come with a Null wrapper
            return GoType(f"Null{base.name}", f"Null{base.name}{{}}", nullable=True)
        # slices are already nilable
        return base


def _int(name: str) -> GoType:
    return GoType(name, "0")
