"""
Python-specific configuration and type mappings.

Declares the flags of the Python template set, the SQL to Python type
mapping, and the imports generated modules may need.
"""

import re
from enum import Enum
from typing import List

from ...core.config import Flag, GeneratorConfig
from ...core.errors import ConfigError
from .naming import PYTHON_RESERVED_WORDS


class PythonStyle(Enum):
    """Python model styles."""

    DATACLASS = "dataclass"
    PYDANTIC = "pydantic"


PYTHON_FLAGS: List[Flag] = [
    Flag(
        key="not_first",
        desc="disable module docstring (ie, not first generated file)",
        short="2",
        default=False,
    ),
    Flag(key="package_name", desc="module name", default="", placeholder="<name>"),
    Flag(
        key="style",
        desc="model style",
        default=PythonStyle.DATACLASS.value,
        placeholder=PythonStyle.DATACLASS.value,
        enums=tuple(s.value for s in PythonStyle),
    ),
    Flag(key="conflict_suffix", desc="name conflict suffix", default="_", placeholder="_"),
    Flag(
        key="escape_mode",
        desc="escape fields",
        default="none",
        placeholder="none",
        enums=("none", "schema", "table", "column", "all"),
    ),
]

# SQL type name -> Python type
PYTHON_TYPE_MAP = {
    "bool": "bool",
    "int": "int",
    "float": "float",
    "decimal": "Decimal",
    "str": "str",
    "bytes": "bytes",
    "date": "datetime.date",
    "time": "datetime.time",
    "datetime": "datetime.datetime",
    "json": "Any",
}

# Zero values for non-nullable fields
PYTHON_DEFAULTS = {
    "bool": "False",
    "int": "0",
    "float": "0.0",
    "str": '""',
    "bytes": 'b""',
}

# Name used in generated code -> import statement
PYTHON_IMPORT_MAP = {
    "Any": "from typing import Any",
    "Sequence": "from typing import Sequence",
    "Decimal": "from decimal import Decimal",
    "datetime": "import datetime",
    "enum": "import enum",
    "logging": "import logging",
}

# Additional imports by style
STYLE_IMPORTS = {
    PythonStyle.DATACLASS: {
        "dataclass": "from dataclasses import dataclass, field",
    },
    PythonStyle.PYDANTIC: {
        "BaseModel": "from pydantic import BaseModel, PrivateAttr",
    },
}

_MODULE_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def validate_python_config(config: GeneratorConfig) -> None:
    """
    Validate Python-specific configuration.

    Raises:
        ConfigError: If the module name is not a valid Python module name
    """
    name = config.package_name
    if name and (not _MODULE_RE.match(name) or name in PYTHON_RESERVED_WORDS):
        raise ConfigError(
            f"Invalid module name: {name}",
            details={"flag": "package_name", "value": name},
        )
