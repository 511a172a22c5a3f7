"""
Post-processing of generated Go files.

Adds the import block the file needs, normalizes whitespace the way gofmt
would, and rejects output that is not structurally valid Go (unbalanced
delimiters, unterminated literals, missing package clause).
"""

import re
from typing import List, Set

from ....logging_config import get_logger
from ...core.generator import format_code

logger = get_logger(__name__)

# Package selector -> import path
GO_IMPORTS = {
    "context": "context",
    "sql": "database/sql",
    "driver": "database/sql/driver",
    "errors": "errors",
    "fmt": "fmt",
    "strconv": "strconv",
    "strings": "strings",
    "time": "time",
}

_SELECTOR_RE = re.compile(r"(?<![\w.])([a-z]\w*)\.[A-Za-z_]")
_PACKAGE_RE = re.compile(r"^package\s+[A-Za-z_]\w*\s*$", re.M)
_PAIRS = {")": "(", "]": "[", "}": "{"}


class GoSyntaxError(ValueError):
    """Raised when generated Go source is structurally invalid."""


def strip_literals(source: str) -> str:
    """
    Blank out comments and string, rune and raw literals.

    Newlines are kept so that line numbers stay valid.

    Raises:
        GoSyntaxError: On an unterminated literal or comment
    """
    out: List[str] = []
    i, n, line = 0, len(source), 1
    while i < n:
        ch = source[i]
        if source.startswith("//", i):
            end = source.find("\n", i)
            i = n if end == -1 else end
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise GoSyntaxError(f"line {line}: unterminated block comment")
            out.append("\n" * source.count("\n", i, end))
            line += source.count("\n", i, end)
            i = end + 2
            continue
        if ch == "`":
            end = source.find("`", i + 1)
            if end == -1:
                raise GoSyntaxError(f"line {line}: unterminated raw string")
            out.append('""' + "\n" * source.count("\n", i, end))
            line += source.count("\n", i, end)
            i = end + 1
            continue
        if ch in ('"', "'"):
            j = i + 1
            while j < n and source[j] != ch:
                if source[j] == "\n":
                    raise GoSyntaxError(f"line {line}: unterminated literal")
                j += 2 if source[j] == "\\" else 1
            if j >= n:
                raise GoSyntaxError(f"line {line}: unterminated literal")
            out.append('""')
            i = j + 1
            continue
        if ch == "\n":
            line += 1
        out.append(ch)
        i += 1
    return "".join(out)


def check_syntax(source: str) -> None:
    """
    Check that Go source has a package clause and balanced delimiters.

    Raises:
        GoSyntaxError: If the source is not structurally valid
    """
    code = strip_literals(source)
    if not _PACKAGE_RE.search(code):
        raise GoSyntaxError("missing package clause")

    stack = []
    for line_no, text in enumerate(code.split("\n"), 1):
        for ch in text:
            if ch in "([{":
                stack.append((ch, line_no))
            elif ch in _PAIRS:
                if not stack or stack[-1][0] != _PAIRS[ch]:
                    raise GoSyntaxError(f"line {line_no}: unexpected '{ch}'")
                stack.pop()
    if stack:
        ch, line_no = stack[-1]
        raise GoSyntaxError(f"line {line_no}: unclosed '{ch}'")


def get_go_imports(source: str) -> List[str]:
    """
    Determine what imports are needed based on package selectors in use.

    Args:
        source: Go source without an import block

    Returns:
        Sorted list of import paths
    """
    code = strip_literals(source)
    imports: Set[str] = set()
    for match in _SELECTOR_RE.finditer(code):
        path = GO_IMPORTS.get(match.group(1))
        if path:
            imports.add(path)
    return sorted(imports)


def format_go_imports(imports: List[str]) -> str:
    """Format import statements for Go."""
    if not imports:
        return ""

    if len(imports) == 1:
        return f'import "{imports[0]}"\n'

    lines = ["import ("]
    for imp in imports:
        lines.append(f'\t"{imp}"')
    lines.append(")\n")

    return "\n".join(lines)


def format_whitespace(source: str) -> str:
    """Squeeze blank lines like gofmt and drop blank lines at block edges."""
    result: List[str] = []
    for line in format_code(source, max_blank_lines=1).split("\n"):
        if not line and result and result[-1].endswith(("{", "(")):
            continue
        if line.lstrip().startswith(("}", ")")) and result and not result[-1]:
            result.pop()
        result.append(line)
    return "\n".join(result)


def add_imports(source: str) -> str:
    """Insert the import block after the package clause."""
    block = format_go_imports(get_go_imports(source))
    if not block:
        return source
    match = _PACKAGE_RE.search(source)
    if not match:
        raise GoSyntaxError("missing package clause")
    end = match.end()
    return f"{source[:end]}\n\n{block}{source[end:]}"


def post_process(source: str) -> str:
    """
    Post-process one generated Go file.

    Raises:
        GoSyntaxError: If the source is not structurally valid Go
    """
    check_syntax(source)
    result = format_whitespace(add_imports(source))
    logger.debug("Post-processed Go file (%d lines)", result.count("\n"))
    return result
