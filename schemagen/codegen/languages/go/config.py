"""
Go-specific configuration and validation.

Declares the flags the Go template set accepts and validates the resolved
configuration against Go rules.
"""

from typing import List

from ...core.config import Flag, GeneratorConfig
from ...core.errors import ConfigError
from ...core.naming import DEFAULT_CONFLICT_SUFFIX
from .naming import validate_go_package_name

ESCAPE_MODES = ("none", "schema", "table", "column", "all")

GO_FLAGS: List[Flag] = [
    Flag(
        key="not_first",
        desc="disable package comment (ie, not first generated file)",
        short="2",
        default=False,
    ),
    Flag(key="int32_type", desc="int32 type", default="int", placeholder="int"),
    Flag(key="uint32_type", desc="uint32 type", default="uint", placeholder="uint"),
    Flag(key="package_name", desc="package name", default="", placeholder="<name>"),
    Flag(key="build_tags", desc="build tags", default="", placeholder="<tags>"),
    Flag(
        key="custom_types_package",
        desc="package name for custom types",
        default="",
        placeholder="<name>",
    ),
    Flag(
        key="conflict_suffix",
        desc="name conflict suffix",
        default=DEFAULT_CONFLICT_SUFFIX,
        placeholder=DEFAULT_CONFLICT_SUFFIX,
    ),
    Flag(
        key="escape_mode",
        desc="escape fields",
        default="none",
        placeholder="none",
        enums=ESCAPE_MODES,
    ),
]

VALID_INT_TYPES = {"int", "int32", "int64"}
VALID_UINT_TYPES = {"uint", "uint32", "uint64"}


def validate_go_config(config: GeneratorConfig) -> None:
    """
    Validate Go-specific configuration.

    Raises:
        ConfigError: If a setting cannot produce valid Go
    """
    if config.int32_type not in VALID_INT_TYPES:
        raise ConfigError(
            f"Invalid int32_type: {config.int32_type}",
            details={"flag": "int32_type", "value": config.int32_type},
        )
    if config.uint32_type not in VALID_UINT_TYPES:
        raise ConfigError(
            f"Invalid uint32_type: {config.uint32_type}",
            details={"flag": "uint32_type", "value": config.uint32_type},
        )
    if config.package_name:
        errors = validate_go_package_name(config.package_name)
        if errors:
            raise ConfigError(
                f"Invalid package name '{config.package_name}': {'; '.join(errors)}",
                details={"flag": "package_name", "value": config.package_name},
            )
    if config.custom_types_package and not config.custom_types_package.isidentifier():
        raise ConfigError(
            f"Invalid custom types package: {config.custom_types_package}",
            details={"flag": "custom_types_package", "value": config.custom_types_package},
        )
