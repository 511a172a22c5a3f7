"""Tests for configuration resolution."""

import json

import pytest

from schemagen.codegen.core.config import (
    ConfigManager,
    EscapeMode,
    Flag,
    GeneratorConfig,
    load_config,
)
from schemagen.codegen.core.errors import ConfigError

FLAGS = [
    Flag(key="not_first", desc="not first", short="2", default=False),
    Flag(key="int32_type", desc="int32 type", default="int"),
    Flag(key="escape_mode", desc="escape", default="none",
         enums=("none", "schema", "table", "column", "all")),
]


class TestFlag:
    """Tests for Flag value parsing."""

    @pytest.mark.parametrize("raw,expected", [
        (True, True), ("yes", True), ("1", True), ("off", False), ("", False), (None, False),
    ])
    def test_bool(self, raw, expected):
        assert FLAGS[0].parse(raw) is expected

    def test_invalid_bool(self):
        with pytest.raises(ConfigError, match="not_first"):
            FLAGS[0].parse("maybe")

    def test_enum_is_normalized(self):
        assert FLAGS[2].parse("TABLE") == "table"
        assert FLAGS[2].parse(EscapeMode.ALL) == "all"

    def test_invalid_enum(self):
        with pytest.raises(ConfigError) as exc_info:
            FLAGS[2].parse("everything")
        assert exc_info.value.details["flag"] == "escape_mode"

    def test_option_spelling(self):
        assert FLAGS[1].option == "int32-type"
        assert FLAGS[0].is_bool
        assert not FLAGS[1].is_bool


class TestGeneratorConfig:
    """Tests for GeneratorConfig."""

    def test_defaults(self):
        config = GeneratorConfig()
        assert config.not_first is False
        assert config.int32_type == "int"
        assert config.uint32_type == "uint"
        assert config.package_name == ""
        assert config.build_tags == ""
        assert config.custom_types_package == ""
        assert config.conflict_suffix == "Val"
        assert config.escape_mode is EscapeMode.NONE

    def test_escape_mode_from_string(self):
        assert GeneratorConfig(escape_mode="Column").escape_mode is EscapeMode.COLUMN

    def test_invalid_escape_mode(self):
        with pytest.raises(ConfigError):
            GeneratorConfig(escape_mode="sometimes")

    def test_escape_mode_escapes(self):
        assert EscapeMode.ALL.escapes("table")
        assert EscapeMode.TABLE.escapes("table")
        assert not EscapeMode.TABLE.escapes("column")
        assert not EscapeMode.NONE.escapes("schema")

    def test_empty_conflict_suffix_falls_back(self):
        assert GeneratorConfig(conflict_suffix="").conflict_suffix == "Val"

    def test_package_name(self, tmp_path):
        assert GeneratorConfig().package == "models"
        assert GeneratorConfig(package_name="My-Models").package == "mymodels"
        out = tmp_path / "dbmodels"
        assert GeneratorConfig(output_dir=str(out)).package == "dbmodels"

    def test_to_dict_flattens_custom(self):
        data = GeneratorConfig(custom={"style": "pydantic"}).to_dict()
        assert data["style"] == "pydantic"
        assert data["escape_mode"] == "none"
        assert "custom" not in data


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults_and_overrides(self):
        config = ConfigManager(FLAGS).get_config({"int32_type": "int64", "not_first": "true"})
        assert config.int32_type == "int64"
        assert config.not_first is True
        assert config.escape_mode is EscapeMode.NONE

    def test_none_overrides_are_ignored(self):
        config = ConfigManager(FLAGS).get_config({"int32_type": None})
        assert config.int32_type == "int"

    def test_unknown_keys_go_to_custom(self):
        config = ConfigManager(FLAGS).get_config({"style": "pydantic"})
        assert config.custom == {"style": "pydantic"}

    def test_config_file(self, tmp_path):
        path = tmp_path / "schemagen.json"
        path.write_text(json.dumps({"int32-type": "int32", "escape_mode": "all"}))
        config = ConfigManager(FLAGS).get_config({"escape_mode": "table"}, path)
        assert config.int32_type == "int32"
        # overrides win over the file
        assert config.escape_mode is EscapeMode.TABLE

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(FLAGS, config_file=tmp_path / "missing.json")

    def test_config_file_must_be_json(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("a: 1")
        with pytest.raises(ConfigError, match="must be JSON"):
            load_config(FLAGS, config_file=path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(FLAGS, config_file=path)

    def test_config_file_must_hold_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(FLAGS, config_file=path)

    def test_invalid_enum_fails_before_anything_else(self):
        with pytest.raises(ConfigError):
            load_config(FLAGS, {"escape_mode": "sometimes"})

    def test_save_config_round_trip(self, tmp_path):
        manager = ConfigManager(FLAGS)
        path = tmp_path / "saved.json"
        manager.save_config(manager.get_config({"int32_type": "int64"}), path)
        assert manager.get_config(config_file=path).int32_type == "int64"
