"""
Helper functions exposed to the Go templates.

One GoFuncs instance is created per generation run; its helpers turn IR
entities into Go identifiers, Go types and Go string literals holding the
SQL the generated code executes.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List

from ...core.config import GeneratorConfig
from ...core.naming import NameSanitizer, NamingCase, ShortNameScope
from ...core.schema import Field, Query, Table
from ...core.sqlgen import SqlBuilder
from ...core.types import TypeRegistry
from .naming import GO_BUILTIN_TYPES, GO_RESERVED_WORDS, create_go_sanitizer
from .post import GO_IMPORTS
from .types import GoTypeConfig, GoTypeMapper

_INTERPOLATED_RE = re.compile(r"\{([A-Za-z_]\w*)\}")


@dataclass
class GoField:
    """A struct field or function parameter of generated code."""

    field: Field
    name: str
    type: str
    zero: str


def go_type_name(name: str) -> str:
    """Exported Go identifier for an SQL name (e.g. 'auth_user_id' -> 'AuthUserID')."""
    result = create_go_sanitizer().convert(name, NamingCase.PASCAL_CASE)
    if result and result[0].isdigit():
        result = f"X{result}"
    return result


def go_literal(text: str) -> str:
    """Go string literal for text, raw unless it holds a backtick."""
    if "`" in text:
        return json.dumps(text)
    return f"`{text}`"


class GoFuncs:
    """Template helpers for one Go generation run."""

    def __init__(self, config: GeneratorConfig, types: TypeRegistry):
        self.config = config
        self.types = types
        self.sanitizer = create_go_sanitizer()
        self.mapper = GoTypeMapper(
            GoTypeConfig(
                int32_type=config.int32_type,
                uint32_type=config.uint32_type,
                custom_types_package=config.custom_types_package,
            ),
            types,
            go_type_name,
        )
        self.sql = SqlBuilder(config.driver, config.schema, config.escape_mode)
        self._struct_fields: Dict[str, List[GoField]] = {}

    def as_dict(self) -> Dict[str, Any]:
        return {
            "go_name": self.go_name,
            "go_param": self.go_param,
            "go_type": self.go_type,
            "go_zero": self.go_zero,
            "go_fields": self.go_fields,
            "go_params": self.go_params,
            "field_of": self.field_of,
            "scan_refs": self.scan_refs,
            "args": self.args,
            "go_sql": self.go_sql,
            "go_query": self.go_query,
            "convert": self.convert,
            "sql": self.sql,
        }

    def go_name(self, name: str) -> str:
        return go_type_name(name)

    def go_param(self, name: str) -> str:
        """Unexported identifier, suffixed when it clashes with a keyword, builtin or package."""
        result = self.sanitizer.convert(name, NamingCase.CAMEL_CASE)
        if result and result[0].isdigit():
            result = f"v{result}"
        taken = GO_RESERVED_WORDS | GO_BUILTIN_TYPES | set(GO_IMPORTS)
        while result in taken:
            result = f"{result}{self.config.conflict_suffix}"
        return result

    def go_type(self, f: Field) -> str:
        return self.mapper.map_field_type(f).name

    def go_zero(self, f: Field) -> str:
        return self.mapper.map_field_type(f).zero

    def go_fields(self, table: Table) -> List[GoField]:
        """Struct fields of a table, with clashing names made unique."""
        if table.name not in self._struct_fields:
            sanitizer = NameSanitizer(initialisms=self.sanitizer.initialisms)
            result = []
            for column in table.columns:
                name = sanitizer.sanitize_name(
                    column.name, NamingCase.PASCAL_CASE, self.config.conflict_suffix
                )
                if name[0].isdigit():
                    name = f"X{name}"
                go_type = self.mapper.map_field_type(column)
                result.append(GoField(column, name, go_type.name, go_type.zero))
            self._struct_fields[table.name] = result
        return self._struct_fields[table.name]

    def field_of(self, table: Table, f: Field) -> str:
        """Struct field name of a column."""
        for gf in self.go_fields(table):
            if gf.field.name == f.name:
                return gf.name
        return self.go_name(f.name)

    def go_params(self, fields: List[Field], names: ShortNameScope) -> List[GoField]:
        """Function parameters for fields, unique within the render scope."""
        result = []
        for f in fields:
            go_type = self.mapper.map_field_type(f)
            name = names.claim(self.go_param(f.name))
            result.append(GoField(f, name, go_type.name, go_type.zero))
        return result

    def scan_refs(self, recv: str, table: Table, fields: List[Field]) -> str:
        """Scan destinations (&r.A, &r.B) for columns of a row variable."""
        return ", ".join(f"&{recv}.{self.field_of(table, f)}" for f in fields)

    def args(self, recv: str, table: Table, fields: List[Field]) -> str:
        """Trailing call arguments (, r.A, r.B) for columns of a row variable."""
        return "".join(f", {recv}.{self.field_of(table, f)}" for f in fields)

    def go_sql(self, lines: List[str]) -> str:
        """Go expression concatenating SQL lines into one string."""
        return " +\n\t\t".join(go_literal(line) for line in lines)

    def go_query(self, query: Query, params: List[GoField]) -> str:
        """
        Go expression for a hand-written query.

        Interpolated parameters are spliced into the string; everything else
        stays in literals.
        """
        by_name = {p.field.name: p for p in params}
        pieces = []
        for n, line in enumerate(query.query):
            if n < len(query.query) - 1:
                line += " "
            pos = 0
            for match in _INTERPOLATED_RE.finditer(line):
                param = by_name.get(match.group(1))
                if param is None or not param.field.interpolate:
                    continue
                if match.start() > pos:
                    pieces.append(go_literal(line[pos:match.start()]))
                if param.type == "string":
                    pieces.append(param.name)
                else:
                    pieces.append(f"fmt.Sprint({param.name})")
                pos = match.end()
            if pos < len(line):
                pieces.append(go_literal(line[pos:]))
        return " +\n\t\t".join(pieces) or '""'

    def convert(self, expr: str, src: Field, dst: Field) -> str:
        """Convert a value of the Go type of src to the Go type of dst."""
        src_type = self.mapper.map_field_type(src)
        dst_type = self.mapper.map_field_type(dst)
        if src_type.name == dst_type.name:
            return expr
        if src_type.value_field and not dst_type.value_field:
            expr = f"{expr}.{src_type.value_field}"
            value_type = {
                "Int64": "int64", "Float64": "float64", "String": "string",
                "Bool": "bool", "Time": "time.Time",
            }.get(src_type.value_field)
            if value_type == dst_type.name:
                return expr
        if dst_type.value_field and not src_type.value_field:
            field_name = dst_type.value_field
            value = expr
            if field_name != "Time" and src_type.name != field_name.lower():
                value = f"{field_name.lower()}({expr})"
            return f"{dst_type.name}{{{field_name}: {value}, Valid: true}}"
        return f"{dst_type.name}({expr})"


def go_funcs(config: GeneratorConfig, types: TypeRegistry) -> Dict[str, Any]:
    """Create the template helpers for a run."""
    return GoFuncs(config, types).as_dict()
