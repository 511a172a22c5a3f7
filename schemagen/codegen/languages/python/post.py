"""
Post-processing of generated Python modules.

Adds the imports the module uses, cleans up blank lines, and checks that
the result parses.
"""

import ast
import re
from typing import List

from ....logging_config import get_logger
from ...core.generator import format_code
from .config import PYTHON_IMPORT_MAP, STYLE_IMPORTS

logger = get_logger(__name__)

_FUTURE = "from __future__ import annotations"


def _import_names():
    names = dict(PYTHON_IMPORT_MAP)
    for style_imports in STYLE_IMPORTS.values():
        names.update(style_imports)
    return names


def get_python_imports(source: str) -> List[str]:
    """
    Determine the import statements a module needs.

    Returns:
        Sorted import statements: plain imports first, then from-imports
    """
    imports = set()
    for name, statement in _import_names().items():
        if re.search(rf"(?<![\w.]){re.escape(name)}\b", source):
            imports.add(statement)

    return sorted(imports, key=lambda x: (0 if x.startswith("import ") else 1, x))


def add_imports(source: str) -> str:
    """Insert imports after the __future__ import (or at the top)."""
    imports = get_python_imports(source)
    if not imports:
        return source
    block = "\n".join(imports)
    if _FUTURE in source:
        return source.replace(_FUTURE, f"{_FUTURE}\n\n{block}\n", 1)
    return f"{block}\n\n{source}"


def post_process(source: str) -> str:
    """
    Post-process one generated Python module.

    Raises:
        SyntaxError: If the module does not parse
    """
    result = format_code(add_imports(source))
    ast.parse(result)
    logger.debug("Post-processed Python module (%d lines)", result.count("\n"))
    return result
