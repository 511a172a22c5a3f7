"""
Schemagen Code Generation Module

Generates source code in various languages from database schemas and
hand-written queries.
"""

from .registry import (
    TemplateSetRegistry,
    create_default_registry,
    get_registry,
    list_supported_targets,
    lookup,
)
from .core.builder import build_schema
from .core.config import ConfigManager, GeneratorConfig, load_config
from .core.errors import SchemaGenError
from .core.generator import (
    Emitter,
    GeneratedFile,
    GenerationResult,
    GenerationRun,
    RunState,
)
from .core.query import load_query_file, parse_query
from .core.schema import XO, Datatype, Enum, Field, ForeignKey, Index, Proc, Query, Schema, Table
from .core.templates import Template, TemplateSet

# Version info
__version__ = "0.1.0"


# Convenience functions
def generate_from_loader(loader, target="go", schema_name="", config=None,
                         config_file=None, queries=(), registry=None, cancel=None):
    """
    Generate code for a schema read through a loader.

    Args:
        loader: Loader implementation to read the schema from
        target: Target template set key
        schema_name: Schema to read (defaults to the loader's default schema)
        config: Configuration overrides dict
        config_file: Path to a JSON configuration file
        queries: Hand-written queries emitted after the schema
        registry: Template set registry (defaults to the process-wide one)
        cancel: threading.Event that stops the run between loader calls

    Returns:
        GenerationResult with generated files
    """
    run = GenerationRun(
        registry or get_registry(),
        target,
        loader=loader,
        schema_name=schema_name or loader.schema_name(),
        queries=queries,
        config=config,
        config_file=config_file,
        cancel=cancel,
    )
    return run.run()


def generate_queries(queries, target="go", config=None, config_file=None, registry=None):
    """
    Generate code for hand-written queries only.

    Args:
        queries: Parsed Query objects
        target: Target template set key
        config: Configuration overrides dict
        config_file: Path to a JSON configuration file
        registry: Template set registry (defaults to the process-wide one)

    Returns:
        GenerationResult with generated files
    """
    run = GenerationRun(
        registry or get_registry(),
        target,
        queries=queries,
        config=config,
        config_file=config_file,
    )
    return run.run()


# Export main interfaces
__all__ = [
    "TemplateSetRegistry",
    "TemplateSet",
    "Template",
    "Emitter",
    "GenerationRun",
    "GenerationResult",
    "GeneratedFile",
    "RunState",
    "SchemaGenError",
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
    "GeneratorConfig",
    "ConfigManager",
    "load_config",
    "build_schema",
    "parse_query",
    "load_query_file",
    "generate_from_loader",
    "generate_queries",
    "create_default_registry",
    "get_registry",
    "list_supported_targets",
    "lookup",
]
