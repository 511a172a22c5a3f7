"""
Go template set.

Generates Go models for database/sql from a schema: one struct per table
or view with insert/update/delete methods, lookup functions per index,
foreign key accessors, enum types, stored procedure wrappers and custom
query functions.
"""

from pathlib import Path

from ...core.templates import ENTITY_KINDS, SCHEMA_KINDS, Template, TemplateSet
from ...core.types import TypeRegistry
from .config import GO_FLAGS, validate_go_config
from .funcs import GoFuncs, go_funcs, go_type_name
from .naming import GO_BUILTIN_TYPES, GO_RESERVED_WORDS, create_go_sanitizer
from .post import GO_IMPORTS, post_process
from .types import GO_KNOWN_TYPES, GoType, GoTypeConfig, GoTypeMapper

TEMPLATE_DIR = Path(__file__).parent / "templates"
FILE_EXT = ".xo.go"

__all__ = [
    "FILE_EXT",
    "GoFuncs",
    "GoType",
    "GoTypeConfig",
    "GoTypeMapper",
    "create_go_sanitizer",
    "create_go_template_set",
    "go_file_name",
    "go_type_name",
]


def go_file_name(gen_type: str, tpl: Template, config=None) -> str:
    """
    Output file base name for a Go template.

    Schema objects go to one file per Go type (e.g. 'authpermission');
    everything else is named after the template's own name.
    """
    if gen_type == "schema" and tpl.template in SCHEMA_KINDS:
        return go_type_name(tpl.type).lower()
    return go_type_name(tpl.name or tpl.type).lower()


def go_package_templates(config) -> list:
    """The shared db file, left out of runs that are not the first."""
    if config.not_first:
        return []
    return [Template("db", name="db")]


def create_go_template_set() -> TemplateSet:
    """Create the Go template set."""
    return TemplateSet(
        name="go",
        files=TEMPLATE_DIR,
        file_ext=FILE_EXT,
        template_suffix=".go.j2",
        description="Go models for database/sql",
        aliases=["golang"],
        flags=list(GO_FLAGS),
        types=TypeRegistry(GO_KNOWN_TYPES, GO_KNOWN_TYPES),
        reserved_words=GO_RESERVED_WORDS | GO_BUILTIN_TYPES | set(GO_IMPORTS),
        funcs=go_funcs,
        header_template=lambda config: Template("hdr"),
        kinds=ENTITY_KINDS,
        package_templates=go_package_templates,
        file_name=go_file_name,
        post=post_process,
        type_name=go_type_name,
        validate=validate_go_config,
    )
