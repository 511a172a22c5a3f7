"""
Core code generation components.

Provides the schema IR, the builder, naming and type utilities, the
template machinery and the emitter used by all target template sets.
"""

from .builder import SchemaBuilder, build_schema, parse_type
from .config import EscapeMode, Flag, GeneratorConfig, ConfigManager, load_config
from .errors import (
    ConfigError,
    DanglingForeignKeyError,
    DuplicateEntityError,
    LoadError,
    PostProcessError,
    QueryError,
    RenderError,
    SchemaGenError,
    TemplateNotFoundError,
    UnknownTargetError,
)
from .generator import Emitter, GeneratedFile, GenerationResult, GenerationRun, RunState
from .naming import NameSanitizer, NamingCase, ShortNameScope
from .query import parse_query
from .schema import XO, Datatype, Enum, Field, ForeignKey, Index, Proc, Query, Schema, Table
from .sqlgen import SqlBuilder
from .templates import Template, TemplateEngine, TemplateSet
from .types import TypeRegistry

__all__ = [
    # Schema IR
    "XO",
    "Schema",
    "Table",
    "Field",
    "Datatype",
    "Index",
    "ForeignKey",
    "Enum",
    "Proc",
    "Query",
    # Building
    "SchemaBuilder",
    "build_schema",
    "parse_type",
    "parse_query",
    # Naming and types - language-agnostic
    "NameSanitizer",
    "NamingCase",
    "ShortNameScope",
    "TypeRegistry",
    "SqlBuilder",
    # Configuration system
    "EscapeMode",
    "Flag",
    "GeneratorConfig",
    "ConfigManager",
    "load_config",
    # Template system - language-agnostic
    "Template",
    "TemplateEngine",
    "TemplateSet",
    # Emitting
    "Emitter",
    "GenerationRun",
    "GenerationResult",
    "GeneratedFile",
    "RunState",
    # Errors
    "SchemaGenError",
    "ConfigError",
    "LoadError",
    "UnknownTargetError",
    "DuplicateEntityError",
    "DanglingForeignKeyError",
    "TemplateNotFoundError",
    "RenderError",
    "PostProcessError",
    "QueryError",
]
