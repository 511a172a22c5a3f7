"""
Error taxonomy for schema code generation.

All errors inherit from SchemaGenError and carry:
- A unique error code for programmatic handling
- A human-readable message
- Optional details describing the entity or template involved
"""

from typing import Any, Dict, Optional


class SchemaGenError(Exception):
    """
    Base class for all schemagen errors.

    Attributes:
        code: Unique error code for programmatic handling
        message: Human-readable error message
        details: Additional error context
    """

    code: str = "SCHEMAGEN_ERROR"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        return {"code": self.code, "message": self.message, "details": self.details}


class ConfigError(SchemaGenError):
    """A configuration value or file is invalid."""

    code = "CONFIG_ERROR"


class LoadError(SchemaGenError):
    """A loader failed to produce schema facts."""

    code = "LOAD_FAILED"


class UnknownTargetError(SchemaGenError):
    """No template set is registered for the requested target."""

    code = "UNKNOWN_TARGET"

    def __init__(self, target: str, available: Optional[list] = None):
        available = available or []
        message = f"Unknown target: {target}"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message, details={"target": target, "available": available})
        self.target = target


class DuplicateEntityError(SchemaGenError):
    """Two entities share the same name in the same scope."""

    code = "DUPLICATE_ENTITY"

    def __init__(self, kind: str, name: str, scope: str = ""):
        where = f" in {scope}" if scope else ""
        super().__init__(
            f"Duplicate {kind} '{name}'{where}",
            details={"kind": kind, "name": name, "scope": scope},
        )
        self.kind = kind
        self.name = name


class DanglingForeignKeyError(SchemaGenError):
    """A foreign key references a table or column that does not exist."""

    code = "DANGLING_FOREIGN_KEY"

    def __init__(self, table: str, foreign_key: str, ref_table: str, reason: str = ""):
        message = (
            f"Foreign key '{foreign_key}' on table '{table}' "
            f"references unknown table '{ref_table}'"
        )
        if reason:
            message = f"Foreign key '{foreign_key}' on table '{table}': {reason}"
        super().__init__(
            message,
            details={"table": table, "foreign_key": foreign_key, "ref_table": ref_table},
        )
        self.table = table
        self.foreign_key = foreign_key
        self.ref_table = ref_table


class TemplateNotFoundError(SchemaGenError):
    """The template set does not provide the selected template kind."""

    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, template: str, target: str = ""):
        where = f" for target '{target}'" if target else ""
        super().__init__(
            f"Template '{template}' not found{where}",
            details={"template": template, "target": target},
        )
        self.template = template


class RenderError(SchemaGenError):
    """Template execution failed for an entity."""

    code = "RENDER_FAILED"

    def __init__(self, template: str, entity: str, cause: BaseException):
        super().__init__(
            f"Failed to render template '{template}' for {entity}: {cause}",
            details={"template": template, "entity": entity},
        )
        self.template = template
        self.entity = entity
        self.cause = cause


class PostProcessError(SchemaGenError):
    """The post-processing hook rejected generated output."""

    code = "POST_PROCESS_FAILED"

    def __init__(self, file_name: str, cause: BaseException):
        super().__init__(
            f"Post-processing failed for '{file_name}': {cause}",
            details={"file": file_name},
        )
        self.file_name = file_name
        self.cause = cause


class QueryError(SchemaGenError):
    """A hand-written query could not be parsed."""

    code = "QUERY_ERROR"
