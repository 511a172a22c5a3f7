"""
Configuration management for code generation.

Template sets declare their options as Flag descriptors. A GeneratorConfig
is resolved from the flag defaults, an optional JSON configuration file and
explicit overrides; enumerated flags are validated before any schema is
loaded or rendered.
"""

import json
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Union

from ...logging_config import get_logger
from .errors import ConfigError

logger = get_logger(__name__)


class EscapeMode(Enum):
    """Which SQL identifiers are quoted in generated queries."""

    NONE = "none"
    SCHEMA = "schema"
    TABLE = "table"
    COLUMN = "column"
    ALL = "all"

    def escapes(self, kind: str) -> bool:
        """Return True when identifiers of kind ('schema', 'table', 'column') are quoted."""
        return self is EscapeMode.ALL or self.value == kind


@dataclass
class Flag:
    """A configuration option declared by a template set."""

    key: str
    desc: str
    short: Optional[str] = None
    default: Any = None
    placeholder: str = ""
    enums: Sequence[str] = ()

    @property
    def is_bool(self) -> bool:
        return isinstance(self.default, bool)

    @property
    def option(self) -> str:
        """Command line spelling of the flag key."""
        return self.key.replace("_", "-")

    def parse(self, value: Any) -> Any:
        """
        Convert and validate a raw flag value.

        Raises:
            ConfigError: If the value is not legal for this flag
        """
        if value is None:
            return self.default

        if self.is_bool:
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in ("1", "true", "yes", "on"):
                return True
            if text in ("0", "false", "no", "off", ""):
                return False
            raise ConfigError(
                f"Invalid boolean for {self.key}: {value!r}",
                details={"flag": self.key, "value": value},
            )

        if isinstance(value, Enum):
            value = value.value
        if self.enums:
            text = str(value).strip().lower()
            if text not in self.enums:
                raise ConfigError(
                    f"Invalid value for {self.key}: {value!r} "
                    f"(expected one of: {', '.join(self.enums)})",
                    details={"flag": self.key, "value": value, "enums": list(self.enums)},
                )
            return text

        return value if value != "" or self.default is None else self.default


@dataclass
class GeneratorConfig:
    """Resolved configuration for one generation run."""

    # Run settings
    target: str = ""
    schema: str = ""
    output_dir: Optional[str] = None
    # Database driver of the schema or queries being rendered
    driver: str = ""

    # Template set flags
    not_first: bool = False
    int32_type: str = "int"
    uint32_type: str = "uint"
    package_name: str = ""
    build_tags: str = ""
    custom_types_package: str = ""
    conflict_suffix: str = "Val"
    escape_mode: EscapeMode = EscapeMode.NONE

    # Target-specific settings without a dedicated field
    custom: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.escape_mode, EscapeMode):
            try:
                self.escape_mode = EscapeMode(str(self.escape_mode).lower())
            except ValueError as e:
                raise ConfigError(
                    f"Invalid escape mode: {self.escape_mode!r}",
                    details={"flag": "escape_mode", "value": self.escape_mode},
                ) from e
        if not self.conflict_suffix:
            self.conflict_suffix = "Val"

    @property
    def package(self) -> str:
        """Package name, falling back to the output directory name."""
        name = self.package_name
        if not name and self.output_dir:
            name = Path(self.output_dir).resolve().name
        name = re.sub(r"\W", "", (name or "").lower())
        return name or "models"

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            if f.name == "custom":
                result.update(value)
            else:
                result[f.name] = value
        return result


_CONFIG_FIELDS = {f.name for f in fields(GeneratorConfig)} - {"custom"}


class ConfigManager:
    """Resolves configurations against a template set's flags."""

    def __init__(self, flags: Iterable[Flag] = ()):
        """
        Initialize configuration manager.

        Args:
            flags: Flag descriptors declared by the template set
        """
        self.flags: Dict[str, Flag] = {f.key: f for f in flags}

    def defaults(self) -> Dict[str, Any]:
        return {key: flag.default for key, flag in self.flags.items() if flag.default is not None}

    def get_config(self, custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Build a validated configuration.

        Args:
            custom_config: Configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Resolved GeneratorConfig

        Raises:
            ConfigError: If a value is invalid or the file cannot be read
        """
        values = self.defaults()

        if config_file:
            values.update(self._load_config_file(config_file))

        if custom_config:
            values.update({k: v for k, v in custom_config.items() if v is not None})

        for key, flag in self.flags.items():
            values[key] = flag.parse(values.get(key))

        return self._dict_to_config(values)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == '.json':
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.debug("Loaded configuration file %s", path)
        return {k.replace("-", "_"): v for k, v in config.items()}

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        config_args = {}
        custom_args = dict(config_dict.pop("custom", None) or {})

        for key, value in config_dict.items():
            if key in _CONFIG_FIELDS:
                config_args[key] = value
            else:
                custom_args[key] = value

        return GeneratorConfig(custom=custom_args, **config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e


def load_config(flags: Iterable[Flag] = (), custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        flags: Flags of the target template set
        custom_config: Configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Resolved configuration
    """
    return ConfigManager(flags).get_config(custom_config, config_file)
