"""
Core schema representation for code generation.

Normalized in-memory model of one database schema (tables, views, indexes,
foreign keys, enums, stored procedures) plus hand-written queries. Loader
output is converted into this format by the builder so that every template
set works with the same structures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

TABLE = "table"
VIEW = "view"


@dataclass
class Datatype:
    """A SQL datatype."""

    type: str
    prec: int = 0
    scale: int = 0
    nullable: bool = False
    array: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "prec": self.prec,
            "scale": self.scale,
            "nullable": self.nullable,
            "array": self.array,
        }


@dataclass
class Field:
    """A column, index member, enum value, or stored procedure parameter."""

    name: str
    datatype: Datatype = field(default_factory=lambda: Datatype(type=""))
    default: Optional[str] = None
    comment: str = ""
    is_primary: bool = False
    is_sequence: bool = False
    const_value: Optional[int] = None
    interpolate: bool = False
    join: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {"name": self.name, "datatype": self.datatype.to_dict()}
        if self.default is not None:
            result["default"] = self.default
        if self.comment:
            result["comment"] = self.comment
        if self.is_primary:
            result["is_primary"] = True
        if self.is_sequence:
            result["is_sequence"] = True
        if self.const_value is not None:
            result["const_value"] = self.const_value
        if self.interpolate:
            result["interpolate"] = True
        if self.join:
            result["join"] = True
        return result


@dataclass
class Index:
    """An index on a table."""

    name: str
    func_name: str = ""
    fields: List[Field] = field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False

    def __post_init__(self):
        # a primary index is always unique
        if self.is_primary:
            self.is_unique = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "func_name": self.func_name,
            "fields": [f.to_dict() for f in self.fields],
            "is_unique": self.is_unique,
            "is_primary": self.is_primary,
        }


@dataclass
class ForeignKey:
    """
    A foreign key.

    The referenced table is held by name only and resolved against the
    owning schema when needed.
    """

    name: str
    resolved_name: str
    field: Field
    ref_index: str
    ref_table: str
    ref_field: Field
    ref_func_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "resolved_name": self.resolved_name,
            "column": self.field.to_dict(),
            "ref_index": self.ref_index,
            "ref_table": self.ref_table,
            "ref_column": self.ref_field.to_dict(),
            "ref_func_name": self.ref_func_name,
        }


@dataclass
class Table:
    """A table or view."""

    type: str
    name: str
    columns: List[Field] = field(default_factory=list)
    primary_keys: List[Field] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    manual: bool = False
    comment: str = ""

    @property
    def is_view(self) -> bool:
        return self.type == VIEW

    def get_column(self, name: str) -> Optional[Field]:
        """Get column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "table_name": self.name,
            "fields": [c.to_dict() for c in self.columns],
            "primary_keys": [c.to_dict() for c in self.primary_keys],
            "indexes": [i.to_dict() for i in self.indexes],
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
            "manual": self.manual,
            "comment": self.comment,
        }


@dataclass
class Enum:
    """An enum type."""

    name: str
    values: List[Field] = field(default_factory=list)
    comment: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "values": [v.to_dict() for v in self.values],
            "comment": self.comment,
        }


@dataclass
class Proc:
    """A stored procedure."""

    name: str
    params: List[Field] = field(default_factory=list)
    return_field: Field = field(default_factory=lambda: Field(name="r0"))
    comment: str = ""

    @property
    def is_void(self) -> bool:
        return self.return_field.datatype.type in ("", "void", "trigger")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "params": [p.to_dict() for p in self.params],
            "return": self.return_field.to_dict(),
            "comment": self.comment,
        }


@dataclass
class Schema:
    """A SQL schema."""

    driver: str
    name: str
    enums: List[Enum] = field(default_factory=list)
    procs: List[Proc] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)
    views: List[Table] = field(default_factory=list)

    def get_table(self, name: str) -> Optional[Table]:
        """Get a table or view by name."""
        for table in self.tables + self.views:
            if table.name == name:
                return table
        return None

    def get_enum(self, name: str) -> Optional[Enum]:
        """Get enum by name."""
        for enum in self.enums:
            if enum.name == name:
                return enum
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.driver,
            "name": self.name,
            "enums": [e.to_dict() for e in self.enums],
            "procs": [p.to_dict() for p in self.procs],
            "tables": [t.to_dict() for t in self.tables],
            "views": [v.to_dict() for v in self.views],
        }


@dataclass
class Query:
    """A hand-written query."""

    driver: str
    name: str
    comment: str = ""
    exec: bool = False
    flat: bool = False
    one: bool = False
    interpolate: bool = False
    type: str = ""
    type_comment: str = ""
    fields: List[Field] = field(default_factory=list)
    manual_fields: bool = False
    params: List[Field] = field(default_factory=list)
    query: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "driver": self.driver,
            "name": self.name,
            "comment": self.comment,
            "exec": self.exec,
            "flat": self.flat,
            "one": self.one,
            "interpolate": self.interpolate,
            "type": self.type,
            "type_comment": self.type_comment,
            "fields": [f.to_dict() for f in self.fields],
            "manual_fields": self.manual_fields,
            "params": [p.to_dict() for p in self.params],
            "query": list(self.query),
            "comments": list(self.comments),
        }


@dataclass
class XO:
    """Everything collected for one generation run."""

    queries: List[Query] = field(default_factory=list)
    schemas: List[Schema] = field(default_factory=list)

    def emit(self, value: Union[Query, Schema]) -> None:
        """
        Add a query or a schema.

        Raises:
            TypeError: If value is neither a Query nor a Schema
        """
        if isinstance(value, Query):
            self.queries.append(value)
        elif isinstance(value, Schema):
            self.schemas.append(value)
        else:
            raise TypeError(
                f"XO accepts Query or Schema values, got {type(value).__name__}"
            )
