"""
Template engine and template set descriptors.

Provides a thin Jinja2 wrapper with code generation filters, the Template
record the emitter renders, and the TemplateSet descriptor a target
language registers.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from jinja2 import (
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
)

from .config import ConfigManager, Flag, GeneratorConfig
from .errors import TemplateNotFoundError
from .types import TypeRegistry

# Template kinds rendered per schema object
SCHEMA_KINDS = ("typedef", "enum", "index", "foreignkey", "proc")
# Every entity kind the emitter selects
ENTITY_KINDS = SCHEMA_KINDS + ("query",)


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, files: Union[Path, Dict[str, str], None] = None):
        """
        Initialize template engine.

        Args:
            files: Directory containing template files, or a mapping of
                template names to template sources
        """
        self.files = files
        self._env = self._setup_environment()

    def _setup_environment(self) -> Environment:
        """Setup Jinja2 environment with code generation utilities."""
        if isinstance(self.files, Path):
            loader = FileSystemLoader(str(self.files))
        else:
            loader = DictLoader(dict(self.files or {}))

        env = Environment(
            loader=loader,
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        env.filters["comment"] = comment_lines
        return env

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Errors raised by the template propagate unchanged so that the caller
        can attach entity information.

        Raises:
            TemplateNotFoundError: If the template does not exist
        """
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(template_name) from e
        return template.render(**context)

    def list_templates(self) -> List[str]:
        """Names of all templates the engine can load."""
        return self._env.list_templates()


# Template filters for code generation

def comment_lines(value: Any, style: str = "//") -> str:
    """Add comment markers to each line."""
    lines = str(value).split("\n")
    return "\n".join(f"{style} {line}" if line.strip() else style for line in lines)


@dataclass
class Template:
    """One template render: the template kind plus the entity it renders."""

    template: str
    name: str = ""
    type: str = ""
    data: Any = None

    @property
    def entity(self) -> str:
        """Human-readable identity of the rendered entity."""
        label = self.name or self.type or "package"
        return f"{self.template} '{label}'"


def default_file_name(
    gen_type: str, tpl: Template, config: Optional[GeneratorConfig] = None
) -> str:
    """
    Compute the output file base name for a template.

    Schema object templates are grouped in one file per type; everything
    else uses the template's own name.
    """
    if gen_type == "schema" and tpl.template in SCHEMA_KINDS:
        return tpl.type.lower()
    return (tpl.name or tpl.type).lower()


@dataclass
class TemplateSet:
    """A registered bundle of templates, flags, and hooks for one target."""

    name: str
    files: Union[Path, Dict[str, str]]
    file_ext: str
    template_suffix: str = ""
    description: str = ""
    aliases: List[str] = field(default_factory=list)
    flags: List[Flag] = field(default_factory=list)
    types: TypeRegistry = field(default_factory=TypeRegistry)
    reserved_words: Set[str] = field(default_factory=set)
    # entity kinds the set renders, None for the kinds it ships templates for
    kinds: Optional[Tuple[str, ...]] = None
    # (config, types) -> helper functions exposed to templates
    funcs: Optional[Callable[[GeneratorConfig, TypeRegistry], Dict[str, Any]]] = None
    header_template: Optional[Callable[[GeneratorConfig], Template]] = None
    package_templates: Optional[Callable[[GeneratorConfig], List[Template]]] = None
    file_name: Callable[[str, Template, GeneratorConfig], str] = default_file_name
    post: Optional[Callable[[str], str]] = None
    # entity name -> target type name, used for enums added to the run's types
    type_name: Optional[Callable[[str], str]] = None
    # extra validation of a resolved configuration, raises ConfigError
    validate: Optional[Callable[[GeneratorConfig], None]] = None

    def add_type(self, type_name: str, short_name: Optional[str] = None) -> None:
        """Register a type as known for every run of this set."""
        self.types.add_type(type_name, short_name)

    def entity_kinds(self) -> Set[str]:
        """
        Entity kinds the emitter selects for this set.

        A declared kind whose template is missing fails the render with
        TemplateNotFoundError; kinds outside the set are not rendered.
        """
        if self.kinds is not None:
            return set(self.kinds)
        shipped = set(self.create_engine().list_templates())
        return {k for k in ENTITY_KINDS if self.template_file(k) in shipped}

    def template_file(self, kind: str) -> str:
        """Template file name for a template kind."""
        return f"{kind}{self.template_suffix}"

    def create_engine(self) -> TemplateEngine:
        return TemplateEngine(self.files)

    def config_manager(self) -> ConfigManager:
        return ConfigManager(self.flags)

    def load_config(self, custom_config: Optional[Dict[str, Any]] = None,
                    config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """Resolve and validate a configuration for this set."""
        config = self.config_manager().get_config(custom_config, config_file)
        config.target = self.name
        if self.validate:
            self.validate(config)
        return config
