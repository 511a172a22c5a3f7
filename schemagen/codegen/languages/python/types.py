"""
Python type mapping for SQL datatypes.

Nullable columns become "T | None", arrays become list[T], and enums
registered for the run map to their generated enum class.
"""

from typing import Callable, Optional

from ...core.schema import Datatype, Field
from ...core.types import TypeRegistry
from .config import PYTHON_DEFAULTS, PYTHON_TYPE_MAP

# Python builtin types with their abbreviations for local variable names
PYTHON_KNOWN_TYPES = {
    "bool": "b",
    "int": "i",
    "float": "f",
    "str": "s",
    "bytes": "bs",
    "Decimal": "d",
    "Any": "v",
}

_KINDS = {
    "bool": ("bool", "boolean", "bit"),
    "int": (
        "tinyint", "int1", "smallint", "int2", "integer", "int", "int4",
        "mediumint", "bigint", "int8", "serial", "smallserial", "bigserial",
        "serial2", "serial4", "serial8", "year",
    ),
    "float": (
        "real", "float4", "double", "double precision", "float", "float8",
    ),
    "decimal": ("numeric", "decimal", "money", "smallmoney", "number"),
    "str": (
        "char", "character", "varchar", "character varying", "nchar",
        "nvarchar", "text", "ntext", "tinytext", "mediumtext", "longtext",
        "clob", "nclob", "string", "citext", "uuid", "uniqueidentifier", "xml",
        "inet", "cidr", "macaddr", "varchar2", "nvarchar2", "enum", "set",
    ),
    "bytes": (
        "bytea", "blob", "tinyblob", "mediumblob", "longblob", "binary",
        "varbinary", "image", "raw",
    ),
    "date": ("date",),
    "time": ("time", "timetz", "time with time zone", "time without time zone"),
    "datetime": (
        "timestamp", "timestamptz", "datetime", "datetime2", "smalldatetime",
        "datetimeoffset", "timestamp with time zone", "timestamp without time zone",
    ),
    "json": ("json", "jsonb"),
}
_KIND_BY_TYPE = {sql: kind for kind, names in _KINDS.items() for sql in names}


class PythonTypeMapper:
    """Maps schema fields to Python type annotations."""

    def __init__(self, types: Optional[TypeRegistry] = None,
                 type_name: Optional[Callable[[str], str]] = None):
        self.types = types or TypeRegistry(PYTHON_KNOWN_TYPES, PYTHON_KNOWN_TYPES)
        self.type_name = type_name or (lambda name: name)

    def enum_class(self, dt: Datatype) -> str:
        """Generated enum class for a datatype, or '' when it is not an enum."""
        name = self.type_name(dt.type)
        if self.types.is_known(name) and name not in PYTHON_KNOWN_TYPES:
            return name
        return ""

    def base_type(self, dt: Datatype) -> str:
        raw = dt.type.lower().replace(" unsigned", "").strip()
        if raw == "tinyint" and dt.prec == 1:
            return "bool"
        kind = _KIND_BY_TYPE.get(raw)
        if kind:
            return PYTHON_TYPE_MAP[kind]
        return self.enum_class(dt) or "Any"

    def annotation(self, f: Field) -> str:
        """Type annotation of a field."""
        dt = f.datatype
        python_type = self.base_type(dt)
        if dt.array:
            python_type = f"list[{python_type}]"
        if self.default(f) == "None" and python_type != "Any":
            python_type = f"{python_type} | None"
        return python_type

    def default(self, f: Field) -> str:
        """Default value expression of a field."""
        if f.datatype.nullable or f.datatype.array:
            return "None"
        return PYTHON_DEFAULTS.get(self.base_type(f.datatype), "None")
