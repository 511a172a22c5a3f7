"""
Go-specific naming utilities and sanitization.

Handles Go reserved words, builtins, initialisms and package names.
"""

import re
from typing import List

from ...core.naming import NameSanitizer


# Go reserved words
GO_RESERVED_WORDS = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Go builtin types and functions
GO_BUILTIN_TYPES = {
    "bool",
    "byte",
    "complex64",
    "complex128",
    "error",
    "float32",
    "float64",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "rune",
    "string",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
    "append",
    "cap",
    "close",
    "complex",
    "copy",
    "delete",
    "imag",
    "len",
    "make",
    "new",
    "panic",
    "print",
    "println",
    "real",
    "recover",
}


# Words kept upper-case in exported identifiers (golint initialisms)
GO_INITIALISMS = {
    "ACL", "API", "ASCII", "CPU", "CSS", "DNS", "EOF", "GUID", "HTML", "HTTP",
    "HTTPS", "ID", "IP", "JSON", "LHS", "QPS", "RAM", "RHS", "RPC", "SLA",
    "SMTP", "SQL", "SSH", "TCP", "TLS", "TTL", "UDP", "UI", "UID", "UUID",
    "URI", "URL", "UTF8", "VM", "XML", "XMPP", "XSRF", "XSS",
}


def create_go_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Go."""
    return NameSanitizer(GO_RESERVED_WORDS, GO_BUILTIN_TYPES, GO_INITIALISMS)


_PACKAGE_RE = re.compile(r"^[a-z][a-z0-9]*$")


def validate_go_package_name(name: str) -> List[str]:
    """
    Check a name used in the generated 'package' clause.

    Go package names are short lower-case words without underscores,
    and cannot be keywords.

    Returns:
        List of problems (empty if the name is usable)
    """
    if not name:
        return ["package name is empty"]
    problems = []
    if not _PACKAGE_RE.match(name):
        problems.append("must start with a letter and hold only lower-case letters and digits")
    if name in GO_RESERVED_WORDS:
        problems.append("is a Go keyword")
    return problems
