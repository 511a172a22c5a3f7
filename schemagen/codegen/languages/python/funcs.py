"""
Helper functions exposed to the Python templates.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from ...core.config import GeneratorConfig
from ...core.naming import NameSanitizer, NamingCase, ShortNameScope
from ...core.schema import Enum, Field, Query, Table
from ...core.sqlgen import SqlBuilder
from ...core.types import TypeRegistry
from .config import PythonStyle
from .naming import PYTHON_RESERVED_WORDS, python_identifier
from .types import PythonTypeMapper

_INTERPOLATED_RE = re.compile(r"\{([A-Za-z_]\w*)\}")
_ANONYMOUS_MARKER = re.compile(r"\?")

# Members of generated models that columns must not shadow
MODEL_MEMBERS = (
    "from_row", "exists", "deleted", "insert", "update", "delete", "save",
    "model_config", "model_fields", "field",
)

# Bind markers the driver-native query text may contain
_NATIVE_MARKERS = {
    "postgres": re.compile(r"\$(\d+)"),
    "pgx": re.compile(r"\$(\d+)"),
    "sqlserver": re.compile(r"@p(\d+)"),
    "oracle": re.compile(r":(\d+)"),
    "godror": re.compile(r":(\d+)"),
}


def python_placeholder(driver: str) -> Callable[[int], str]:
    """DB-API parameter marker of the usual Python driver for a database."""
    if driver in ("postgres", "pgx", "mysql"):
        return lambda n: "%s"
    if driver in ("oracle", "godror"):
        return lambda n: f":{n}"
    return lambda n: "?"


def py_class_name(name: str) -> str:
    """Python class name for an SQL name (e.g. 'auth_user' -> 'AuthUser')."""
    return python_identifier(name, NamingCase.PASCAL_CASE)


@dataclass
class PyField:
    """An attribute or parameter of generated code."""

    field: Field
    name: str
    annotation: str
    default: str


@dataclass
class PyStatement:
    """Python expression of SQL text plus the values it binds, in order."""

    expr: str
    args: List[str] = field(default_factory=list)


class PyFuncs:
    """Template helpers for one Python generation run."""

    def __init__(self, config: GeneratorConfig, types: TypeRegistry):
        self.config = config
        self.mapper = PythonTypeMapper(types, py_class_name)
        self.placeholder = python_placeholder(config.driver)
        self.sql = SqlBuilder(
            config.driver, config.schema, config.escape_mode, self.placeholder
        )
        self.style = PythonStyle(
            config.custom.get("style", PythonStyle.DATACLASS.value)
        )
        self._attributes: Dict[str, List[PyField]] = {}

    def as_dict(self) -> Dict[str, Any]:
        return {
            "py_class": py_class_name,
            "py_name": self.py_name,
            "py_fields": self.py_fields,
            "py_attrs": self.py_attrs,
            "param_args": self.param_args,
            "py_params": self.py_params,
            "attr_of": self.attr_of,
            "enum_members": self.enum_members,
            "from_db": self.from_db,
            "to_db": self.to_db,
            "row_args": self.row_args,
            "py_tuple": py_tuple,
            "py_sql": self.py_sql,
            "py_query": self.py_query,
            "annotation": self.mapper.annotation,
            "sql": self.sql,
            "style": self.style.value,
        }

    def py_name(self, name: str) -> str:
        return python_identifier(
            name, NamingCase.SNAKE_CASE, self.config.conflict_suffix
        )

    def py_attrs(self, fields: List[Field]) -> List[PyField]:
        """Model attributes for fields, with clashing names made unique."""
        sanitizer = NameSanitizer(PYTHON_RESERVED_WORDS)
        for name in MODEL_MEMBERS:
            sanitizer.add_used_name(name)
        result = []
        for column in fields:
            name = sanitizer.sanitize_name(
                column.name, NamingCase.SNAKE_CASE, self.config.conflict_suffix
            )
            if name[0].isdigit():
                name = f"n{name}"
            annotation = self.mapper.annotation(column)
            default = self.mapper.default(column)
            result.append(PyField(column, name, annotation, default))
        return result

    def py_fields(self, table: Table) -> List[PyField]:
        """Attributes of a table's model."""
        if table.name not in self._attributes:
            self._attributes[table.name] = self.py_attrs(table.columns)
        return self._attributes[table.name]

    def attr_of(self, table: Table, f: Field) -> str:
        """Model attribute name of a column."""
        for pf in self.py_fields(table):
            if pf.field.name == f.name:
                return pf.name
        return self.py_name(f.name)

    def py_params(self, fields: List[Field], names: ShortNameScope) -> List[PyField]:
        """Function parameters for fields, unique within the render scope."""
        return [
            PyField(f, names.claim(self.py_name(f.name)),
                    self.mapper.annotation(f), self.mapper.default(f))
            for f in fields
        ]

    def enum_members(self, enum: Enum) -> List[Tuple[str, str]]:
        """(member name, label) pairs of an enum."""
        sanitizer = NameSanitizer(PYTHON_RESERVED_WORDS)
        return [
            (
                sanitizer.sanitize_name(
                    v.name, NamingCase.SCREAMING_SNAKE, self.config.conflict_suffix
                ),
                v.name,
            )
            for v in enum.values
        ]

    def from_db(self, expr: str, f: Field) -> str:
        """Convert a value read from the database to the field's Python type."""
        enum_class = self.mapper.enum_class(f.datatype)
        if not enum_class or f.datatype.array:
            return expr
        if f.datatype.nullable:
            return f"{enum_class}({expr}) if {expr} is not None else None"
        return f"{enum_class}({expr})"

    def to_db(self, expr: str, f: Field) -> str:
        """Convert a Python value of the field to what the driver binds."""
        if not self.mapper.enum_class(f.datatype) or f.datatype.array:
            return expr
        return f"{expr}.value if {expr} is not None else None"

    def row_args(self, obj: str, table: Table, fields: List[Field]) -> str:
        """Parameter tuple of model attributes for a statement."""
        return py_tuple(
            [self.to_db(f"{obj}.{self.attr_of(table, f)}", f) for f in fields]
        )

    def param_args(self, params: List[PyField]) -> str:
        """Parameter tuple of function parameters for a statement."""
        return py_tuple([self.to_db(p.name, p.field) for p in params])

    def py_sql(self, lines: List[str]) -> str:
        return json.dumps("".join(lines))

    def py_query(self, query: Query, params: List[PyField]) -> PyStatement:
        """
        Python expression for a hand-written query.

        Native bind markers are rewritten to the DB-API marker of the driver;
        interpolated parameters are spliced into the string.
        """
        by_name = {p.field.name: p for p in params}
        bound = [p for p in params if not p.field.interpolate]
        native = _NATIVE_MARKERS.get(query.driver)
        escape_percent = self.placeholder(1) == "%s"
        args: List[str] = []
        pieces: List[str] = []

        def mark(match: re.Match) -> str:
            index = int(match.group(1)) - 1 if native else len(args)
            if index >= len(bound):
                return match.group(0)
            param = bound[index]
            args.append(self.to_db(param.name, param.field))
            return self.placeholder(len(args))

        def literal(text: str) -> None:
            if escape_percent:
                text = text.replace("%", "%%")
            text = (native or _ANONYMOUS_MARKER).sub(mark, text)
            if text:
                pieces.append(json.dumps(text))

        text = " ".join(query.query)
        pos = 0
        for match in _INTERPOLATED_RE.finditer(text):
            param = by_name.get(match.group(1))
            if param is None or not param.field.interpolate:
                continue
            literal(text[pos:match.start()])
            pieces.append(f"str({param.name})")
            pos = match.end()
        literal(text[pos:])
        return PyStatement(" + ".join(pieces) or '""', args)


def py_tuple(items: List[str]) -> str:
    """Python tuple expression of items."""
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


def python_funcs(config: GeneratorConfig, types: TypeRegistry) -> Dict[str, Any]:
    """Create the template helpers for a run."""
    return PyFuncs(config, types).as_dict()
