"""
Python template set.

Generates one Python module per schema: dataclass or Pydantic models per
table and view with DB-API insert/update/delete methods, lookup functions
per index, foreign key accessors, enum classes, stored procedure wrappers
and custom query functions.
"""

from pathlib import Path

from ...core.templates import ENTITY_KINDS, Template, TemplateSet
from ...core.types import TypeRegistry
from .config import PYTHON_FLAGS, PythonStyle, validate_python_config
from .funcs import PyFuncs, py_class_name, python_funcs
from .naming import (
    PYTHON_BUILTIN_TYPES,
    PYTHON_RESERVED_WORDS,
    create_python_sanitizer,
)
from .post import post_process
from .types import PYTHON_KNOWN_TYPES, PythonTypeMapper

TEMPLATE_DIR = Path(__file__).parent / "templates"
FILE_EXT = ".py"

__all__ = [
    "FILE_EXT",
    "PyFuncs",
    "PythonStyle",
    "PythonTypeMapper",
    "create_python_sanitizer",
    "create_python_template_set",
    "python_file_name",
]


def python_file_name(gen_type: str, tpl: Template, config=None) -> str:
    """Everything of a run goes into one module named after the package."""
    return config.package if config is not None else "models"


def create_python_template_set() -> TemplateSet:
    """Create the Python template set."""
    return TemplateSet(
        name="python",
        files=TEMPLATE_DIR,
        file_ext=FILE_EXT,
        template_suffix=".py.j2",
        description="Python dataclass or Pydantic models for DB-API drivers",
        aliases=["py"],
        flags=list(PYTHON_FLAGS),
        types=TypeRegistry(PYTHON_KNOWN_TYPES, PYTHON_KNOWN_TYPES),
        reserved_words=PYTHON_RESERVED_WORDS | PYTHON_BUILTIN_TYPES,
        funcs=python_funcs,
        header_template=lambda config: Template("hdr"),
        kinds=ENTITY_KINDS,
        # one self-contained module per run, so the prelude is always rendered
        package_templates=lambda config: [Template("db", name="db")],
        file_name=python_file_name,
        post=post_process,
        type_name=py_class_name,
        validate=validate_python_config,
    )
