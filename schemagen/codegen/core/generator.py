"""
Emitter and generation run.

The emitter walks the Schema IR in declaration order, renders each entity
through the template set, groups the output per file, and passes every file
through the set's post-processing hook. A generation run drives the whole
INIT -> BUILD -> EMIT -> DONE sequence and stops at the first error.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from threading import Event
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ...logging_config import get_logger
from .builder import build_schema
from .config import GeneratorConfig
from .errors import (
    PostProcessError,
    RenderError,
    SchemaGenError,
    TemplateNotFoundError,
)
from .naming import ShortNameScope
from .schema import XO, Query, Schema
from .templates import Template, TemplateSet

logger = get_logger(__name__)

# Context alias of the rendered entity, per template kind
KIND_ALIASES = {
    "typedef": "table",
    "index": "index",
    "foreignkey": "fk",
    "enum": "enum",
    "proc": "proc",
    "query": "query",
}


class RunState(Enum):
    """States of a generation run."""

    INIT = "init"
    BUILD = "build"
    EMIT = "emit"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GeneratedFile:
    """A generated source file."""

    name: str
    ext: str
    content: str

    @property
    def path(self) -> str:
        return f"{self.name}{self.ext}"


@dataclass
class GenerationResult:
    """Container for generation results and metadata."""

    files: Dict[str, GeneratedFile] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def write_all(self, base_dir: Union[Path, str]) -> List[Path]:
        """
        Write all generated files to disk.

        Args:
            base_dir: Base directory to write files to

        Returns:
            List of paths to written files
        """
        base_path = Path(base_dir)
        base_path.mkdir(parents=True, exist_ok=True)
        written = []

        for gf in self.files.values():
            file_path = base_path / gf.path
            file_path.write_text(gf.content, encoding="utf-8")
            written.append(file_path)
            logger.debug("Wrote %s", file_path)

        return written


class FirstFlag:
    """Run-level flag that is true exactly once."""

    def __init__(self):
        self._first = True

    def __call__(self) -> bool:
        if self._first:
            self._first = False
            return True
        return False


def validate_schema(schema: Schema) -> List[str]:
    """
    Collect warnings for schema shapes that generate limited code.

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []
    for table in schema.tables:
        if not table.primary_keys:
            warnings.append(
                f"Table '{table.name}' has no primary key - "
                "update and delete helpers are not generated"
            )
        if not table.columns:
            warnings.append(f"Table '{table.name}' has no columns")
    for enum in schema.enums:
        if not enum.values:
            warnings.append(f"Enum '{enum.name}' has no values")
    return warnings


def format_code(code: str, max_blank_lines: int = 2) -> str:
    """
    Basic cleanup of generated code.

    Strips trailing whitespace, limits consecutive blank lines, and ends
    the code with exactly one newline.

    Args:
        code: Raw generated code
        max_blank_lines: Maximum number of consecutive blank lines kept

    Returns:
        Formatted code
    """
    lines = code.split("\n")
    formatted_lines = []
    blank_count = 0

    for line in lines:
        stripped = line.rstrip()
        if not stripped:
            blank_count += 1
            if blank_count <= max_blank_lines and formatted_lines:
                formatted_lines.append("")
        else:
            blank_count = 0
            formatted_lines.append(stripped)

    while formatted_lines and not formatted_lines[-1]:
        formatted_lines.pop()
    return "\n".join(formatted_lines) + "\n"


# (gen type, schema context, template)
_Entry = Tuple[str, Optional[Schema], Template]


class Emitter:
    """Renders IR entities through a template set."""

    def __init__(self, template_set: TemplateSet, config: GeneratorConfig):
        self.template_set = template_set
        self.config = config
        self.engine = template_set.create_engine()
        # per-run copy, the registered set stays read-only
        self.types = template_set.types.copy()
        self.first = FirstFlag()
        self._funcs: Optional[Dict[str, Any]] = None
        self._package_done = False
        self.kinds = template_set.entity_kinds()

    @property
    def funcs(self) -> Dict[str, Any]:
        """Template helpers, created on first render once the driver is known."""
        if self._funcs is None:
            make = self.template_set.funcs
            self._funcs = make(self.config, self.types) if make else {}
        return self._funcs

    def schema_templates(self, schema: Schema) -> List[Template]:
        """Templates for every schema entity, in declaration order."""
        templates = []
        for enum in schema.enums:
            templates.append(Template("enum", name=enum.name, type=enum.name, data=enum))
        for proc in schema.procs:
            templates.append(Template("proc", name=proc.name, type=proc.name, data=proc))
        for table in schema.tables + schema.views:
            templates.append(
                Template("typedef", name=table.name, type=table.name, data=table)
            )
            for index in table.indexes:
                templates.append(
                    Template("index", name=index.name, type=table.name, data=index)
                )
            for fk in table.foreign_keys:
                templates.append(
                    Template("foreignkey", name=fk.name, type=table.name, data=fk)
                )
        return templates

    def query_templates(self, queries: Iterable[Query]) -> List[Template]:
        return [
            Template("query", name=q.name, type=q.type or q.name, data=q) for q in queries
        ]

    def emit_schema(self, schema: Schema) -> GenerationResult:
        """Render every entity of a schema."""
        return self.emit_xo(XO(schemas=[schema]))

    def emit_queries(
        self, queries: Iterable[Query], schema: Optional[Schema] = None
    ) -> GenerationResult:
        """Render hand-written queries, optionally against a schema context."""
        xo = XO(queries=list(queries))
        if schema is not None:
            self.config.driver = self.config.driver or schema.driver
            self.config.schema = self.config.schema or schema.name
            return self._emit(
                [("query", schema, t) for t in self.query_templates(xo.queries)],
                [],
            )
        return self.emit_xo(xo)

    def emit_xo(self, xo: XO) -> GenerationResult:
        """Render all schemas, then all queries, of a run."""
        if not self.config.driver:
            drivers = [s.driver for s in xo.schemas] + [q.driver for q in xo.queries]
            self.config.driver = next((d for d in drivers if d), "")
        if not self.config.schema and xo.schemas:
            self.config.schema = xo.schemas[0].name
        entries: List[_Entry] = []
        warnings: List[str] = []
        for schema in xo.schemas:
            self._register_enums(schema)
            warnings.extend(validate_schema(schema))
            entries.extend(("schema", schema, t) for t in self.schema_templates(schema))
        context = xo.schemas[0] if xo.schemas else None
        entries.extend(("query", context, t) for t in self.query_templates(xo.queries))
        result = self._emit(entries, warnings)
        result.metadata.update(
            {
                "schema_count": len(xo.schemas),
                "query_count": len(xo.queries),
                "table_count": sum(len(s.tables) for s in xo.schemas),
                "view_count": sum(len(s.views) for s in xo.schemas),
            }
        )
        return result

    def _register_enums(self, schema: Schema) -> None:
        to_type = self.template_set.type_name or (lambda name: name)
        for enum in schema.enums:
            self.types.add_type(to_type(enum.name))

    def _emit(self, entries: List[_Entry], warnings: List[str]) -> GenerationResult:
        buffers: Dict[str, List[str]] = {}

        if not self._package_done and self.template_set.package_templates:
            package = [
                ("package", None, t)
                for t in self.template_set.package_templates(self.config)
            ]
            entries = package + entries
            self._package_done = True

        for gen_type, schema, tpl in entries:
            if gen_type != "package" and tpl.template not in self.kinds:
                logger.debug("Kind '%s' not in the set, skipping %s", tpl.template, tpl.entity)
                continue
            file_name = self.template_set.file_name(gen_type, tpl, self.config)
            logger.debug("Rendering %s into '%s'", tpl.entity, file_name)
            buffers.setdefault(file_name, []).append(self._render(tpl, schema))

        files: Dict[str, GeneratedFile] = {}
        for file_name, chunks in buffers.items():
            source = self._render_header(file_name) + "".join(chunks)
            files[file_name] = GeneratedFile(
                name=file_name,
                ext=self.template_set.file_ext,
                content=self._post(file_name, source),
            )

        logger.info(
            "Emitted %d file(s) for target '%s'", len(files), self.template_set.name
        )
        return GenerationResult(
            files=files,
            warnings=warnings,
            metadata={
                "target": self.template_set.name,
                "file_extension": self.template_set.file_ext,
                "file_count": len(files),
            },
        )

    def _context(self, tpl: Template, schema: Optional[Schema]) -> Dict[str, Any]:
        context = dict(self.funcs)
        context.update(
            config=self.config,
            schema=schema,
            template=tpl,
            data=tpl.data,
            first=self.first,
            names=ShortNameScope(
                self.types,
                conflict_suffix=self.config.conflict_suffix,
                reserved=self.template_set.reserved_words,
            ),
        )
        alias = KIND_ALIASES.get(tpl.template)
        if alias:
            context[alias] = tpl.data
        if tpl.template in ("index", "foreignkey") and schema is not None:
            context["table"] = schema.get_table(tpl.type)
        if tpl.template == "foreignkey" and schema is not None:
            context["ref_table"] = schema.get_table(tpl.data.ref_table)
        return context

    def _render(self, tpl: Template, schema: Optional[Schema]) -> str:
        template_file = self.template_set.template_file(tpl.template)
        try:
            return self.engine.render_template(template_file, self._context(tpl, schema))
        except TemplateNotFoundError as e:
            logger.error("Template %s missing for %s", template_file, tpl.entity)
            raise TemplateNotFoundError(tpl.template, self.template_set.name) from e
        except Exception as e:
            logger.error("Rendering %s failed: %s", tpl.entity, e)
            raise RenderError(tpl.template, tpl.entity, e) from e

    def _render_header(self, file_name: str) -> str:
        if not self.template_set.header_template:
            return ""
        tpl = self.template_set.header_template(self.config)
        tpl.name = tpl.name or file_name
        return self._render(tpl, None)

    def _post(self, file_name: str, source: str) -> str:
        if not self.template_set.post:
            return source
        try:
            return self.template_set.post(source)
        except Exception as e:
            logger.error("Post-processing '%s' failed: %s", file_name, e)
            raise PostProcessError(file_name, e) from e


class GenerationRun:
    """
    One generation run for one target.

    INIT resolves the template set and validates flags, BUILD loads the
    schema through the loader, EMIT renders. Any error moves the run to
    FAILED, keeps the first error, and is re-raised to the caller.
    """

    def __init__(
        self,
        registry,
        target: str,
        loader=None,
        schema_name: str = "",
        queries: Iterable[Query] = (),
        config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
        cancel: Optional[Event] = None,
    ):
        self.registry = registry
        self.target = target
        self.loader = loader
        self.schema_name = schema_name
        self.queries = list(queries)
        self.config_overrides = config or {}
        self.config_file = config_file
        self.cancel = cancel

        self.state = RunState.INIT
        self.error: Optional[BaseException] = None
        self.config: Optional[GeneratorConfig] = None
        self.xo = XO()

    def _transition(self, state: RunState) -> None:
        logger.info("Run for target '%s': %s -> %s", self.target, self.state.value, state.value)
        self.state = state

    def run(self) -> GenerationResult:
        """
        Execute the run.

        Returns:
            GenerationResult with the generated files

        Raises:
            SchemaGenError: The first error encountered
        """
        try:
            template_set = self.registry.lookup(self.target)
            overrides = dict(self.config_overrides)
            if self.schema_name:
                overrides.setdefault("schema", self.schema_name)
            self.config = template_set.load_config(overrides, self.config_file)

            self._transition(RunState.BUILD)
            if self.loader is not None:
                self.xo.emit(
                    build_schema(self.loader, self.config.schema, cancel=self.cancel)
                )
            for query in self.queries:
                self.xo.emit(query)

            self._transition(RunState.EMIT)
            result = Emitter(template_set, self.config).emit_xo(self.xo)

            self._transition(RunState.DONE)
            return result
        except Exception as e:
            self.error = e
            self.state = RunState.FAILED
            if isinstance(e, SchemaGenError):
                logger.error("Run for target '%s' failed: %s", self.target, e.message)
            raise
