"""
Hand-written query parsing.

Query text marks its parameters as %%name type%%; a parameter written as
%%name type,interpolate%% is substituted into the query text instead of
being bound. Result columns are described manually as "name type, ...".
"""

import re
from pathlib import Path
from typing import Dict, List, Union

from ...logging_config import get_logger
from .builder import parse_type
from .errors import QueryError
from .schema import Field, Query

logger = get_logger(__name__)

_PARAM_RE = re.compile(r"%%\s*([A-Za-z_]\w*)\s+([^%]+?)\s*%%")
_FIELD_RE = re.compile(r"\s*([A-Za-z_]\w*)\s+((?:[^,(]|\([^)]*\))+?)\s*(?:,|$)")

# Drivers whose placeholders cannot be reused by position
_ANONYMOUS = "?"


def bind_marker(driver: str, n: int) -> str:
    """Return the n-th (1-based) bind placeholder for a driver."""
    if driver in ("postgres", "pgx"):
        return f"${n}"
    if driver == "sqlserver":
        return f"@p{n}"
    if driver in ("oracle", "godror"):
        return f":{n}"
    return _ANONYMOUS


def parse_fields(text: str) -> List[Field]:
    """
    Parse a manual result field list.

    Args:
        text: Comma separated "name type" pairs, e.g. "id integer, total numeric(10,2)"

    Returns:
        Ordered result fields
    """
    fields = []
    text = text.strip()
    pos = 0
    while pos < len(text):
        match = _FIELD_RE.match(text, pos)
        if not match or match.end() == pos:
            raise QueryError(f"Invalid field list near: {text[pos:]!r}", details={"fields": text})
        fields.append(Field(name=match.group(1), datatype=parse_type(match.group(2))))
        pos = match.end()
    seen = set()
    for f in fields:
        if f.name in seen:
            raise QueryError(f"Duplicate result field '{f.name}'", details={"fields": text})
        seen.add(f.name)
    return fields


def parse_query(
    name: str,
    sql: str,
    *,
    driver: str,
    fields: str = "",
    type_name: str = "",
    type_comment: str = "",
    comment: str = "",
    exec: bool = False,
    flat: bool = False,
    one: bool = False,
    interpolate: bool = False,
) -> Query:
    """
    Parse a hand-written query into a Query.

    Args:
        name: Name of the generated function
        sql: Query text with %%name type%% parameters
        driver: Driver the query targets (decides bind placeholders)
        fields: Manual result field list
        type_name: Name of the result type (defaults to name)
        type_comment: Comment for the result type
        comment: Comment for the generated function
        exec: Query returns no rows
        flat: Return result columns directly instead of a type
        one: Query returns a single row
        interpolate: Interpolate every parameter into the query text

    Returns:
        The parsed Query

    Raises:
        QueryError: If the query or its field list is invalid
    """
    if not name:
        raise QueryError("Query name is required")
    if exec and (one or flat or fields):
        raise QueryError(
            f"Query '{name}': exec queries cannot return rows",
            details={"query": name},
        )
    if flat and not one:
        raise QueryError(
            f"Query '{name}': flat queries must return a single row",
            details={"query": name},
        )

    comments: List[str] = []
    body: List[str] = []
    for line in sql.strip().splitlines():
        stripped = line.strip()
        if not body and stripped.startswith("--"):
            comments.append(stripped[2:].strip())
        elif stripped:
            body.append(line.rstrip())
    if not body:
        raise QueryError(f"Query '{name}' is empty", details={"query": name})

    params: List[Field] = []
    markers: Dict[str, str] = {}
    any_interpolated = False

    def replace(match: re.Match) -> str:
        nonlocal any_interpolated
        pname, rest = match.group(1), match.group(2)
        opts = [o.strip() for o in rest.split(",")]
        typ = opts[0]
        interp = interpolate or "interpolate" in opts[1:]

        if pname in markers:
            existing = next(p for p in params if p.name == pname)
            if existing.interpolate != interp or existing.datatype.type != parse_type(typ).type:
                raise QueryError(
                    f"Query '{name}': parameter '{pname}' redeclared differently",
                    details={"query": name, "param": pname},
                )
            if markers[pname] == _ANONYMOUS:
                raise QueryError(
                    f"Query '{name}': parameter '{pname}' is reused, "
                    f"which driver '{driver}' cannot bind by position",
                    details={"query": name, "param": pname},
                )
            return markers[pname]

        field = Field(name=pname, datatype=parse_type(typ), interpolate=interp)
        params.append(field)
        if interp:
            any_interpolated = True
            markers[pname] = "{" + pname + "}"
        else:
            bound = sum(1 for p in params if not p.interpolate)
            markers[pname] = bind_marker(driver, bound)
        return markers[pname]

    query_lines = [_PARAM_RE.sub(replace, line) for line in body]

    result_fields = parse_fields(fields) if fields else []
    if not exec and not result_fields:
        raise QueryError(
            f"Query '{name}' needs result fields unless it is an exec query",
            details={"query": name},
        )

    query = Query(
        driver=driver,
        name=name,
        comment=comment,
        exec=exec,
        flat=flat,
        one=one,
        interpolate=interpolate or any_interpolated,
        type="" if exec or flat else (type_name or name),
        type_comment=type_comment,
        fields=result_fields,
        manual_fields=bool(result_fields),
        params=params,
        query=query_lines,
        comments=comments,
    )
    logger.debug(
        "Parsed query '%s' (%d params, %d fields)", name, len(params), len(result_fields)
    )
    return query


def load_query_file(path: Union[str, Path], **kwargs) -> Query:
    """Read a query file and parse it, naming the query after the file stem."""
    path = Path(path)
    try:
        sql = path.read_text(encoding="utf-8")
    except OSError as e:
        raise QueryError(f"Cannot read query file {path}: {e}") from e
    kwargs.setdefault("name", path.stem)
    return parse_query(sql=sql, **kwargs)
