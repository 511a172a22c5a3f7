"""Tests for naming utilities and the known-types registry."""

import pytest

from schemagen.codegen.core.naming import NameSanitizer, NamingCase, ShortNameScope
from schemagen.codegen.core.types import TypeRegistry


class TestNameSanitizer:
    """Tests for NameSanitizer."""

    @pytest.mark.parametrize(
        "name,case,expected",
        [
            ("userName", NamingCase.SNAKE_CASE, "user_name"),
            ("user_name", NamingCase.CAMEL_CASE, "userName"),
            ("user_name", NamingCase.PASCAL_CASE, "UserName"),
            ("user_name", NamingCase.KEBAB_CASE, "user-name"),
            ("userName", NamingCase.SCREAMING_SNAKE, "USER_NAME"),
            ("HTTPServer", NamingCase.SNAKE_CASE, "http_server"),
        ],
    )
    def test_convert(self, name, case, expected):
        assert NameSanitizer().convert(name, case) == expected

    def test_invalid_characters(self):
        sanitizer = NameSanitizer()
        assert sanitizer.convert("first name!") == "first_name"
        assert sanitizer.convert("!!!") == "field"

    def test_initialisms(self):
        sanitizer = NameSanitizer(initialisms={"id", "url"})
        assert sanitizer.convert("user_id", NamingCase.PASCAL_CASE) == "UserID"
        assert sanitizer.convert("avatar_url", NamingCase.CAMEL_CASE) == "avatarURL"

    def test_reserved_words_get_suffix(self):
        sanitizer = NameSanitizer(reserved_words={"type"})
        assert sanitizer.sanitize_name("type") == "typeVal"
        assert sanitizer.is_reserved("type")

    def test_conflicts_get_suffix(self):
        sanitizer = NameSanitizer()
        assert sanitizer.sanitize_name("user-name") == "user_name"
        assert sanitizer.sanitize_name("user_name") == "user_nameVal"
        assert sanitizer.sanitize_name("USER_NAME", suffix_on_conflict="_x") == "user_name_x"

    def test_same_input_same_output(self):
        sanitizer = NameSanitizer()
        assert sanitizer.sanitize_name("a") == sanitizer.sanitize_name("a") == "a"

    def test_conflict_resolution_is_deterministic(self):
        fields = ["id", "ID", "Id", "name", "Name", "class"]

        def resolve():
            sanitizer = NameSanitizer(reserved_words={"class"})
            return [sanitizer.sanitize_name(f, NamingCase.SNAKE_CASE, "_") for f in fields]

        first = resolve()
        assert first == resolve()
        assert first == ["id", "id_", "id__", "name", "name_", "class_"]

    def test_reset_used_names(self):
        sanitizer = NameSanitizer()
        sanitizer.sanitize_name("a")
        sanitizer.reset_used_names()
        sanitizer.add_used_name("b")
        assert sanitizer.sanitize_name("a") == "a"
        assert sanitizer.sanitize_name("b") == "bVal"


class TestShortNameScope:
    """Tests for short local variable names."""

    def test_two_ints_get_i_and_i2(self):
        scope = ShortNameScope(TypeRegistry(["int"], {"int": "i"}))
        assert scope.name_for("int") == "i"
        assert scope.name_for("int") == "i2"

    def test_abbreviation_without_registered_short_name(self):
        scope = ShortNameScope(TypeRegistry())
        assert scope.names_for(["int", "int", "int"]) == ["i", "i2", "i3"]

    def test_reserved_name_gets_conflict_suffix(self):
        scope = ShortNameScope(TypeRegistry(), conflict_suffix="X", reserved={"s"})
        assert scope.name_for("string") == "sX"

    def test_reserve_marks_names_taken(self):
        scope = ShortNameScope(TypeRegistry())
        scope.reserve("ap")
        assert scope.name_for("AuthPermission") == "apVal"

    def test_claim(self):
        scope = ShortNameScope(conflict_suffix="_")
        assert scope.claim("db") == "db"
        assert scope.claim("db") == "db_"

    def test_scopes_are_independent(self):
        types = TypeRegistry()
        assert ShortNameScope(types).name_for("int") == "i"
        assert ShortNameScope(types).name_for("int") == "i"


class TestTypeRegistry:
    """Tests for TypeRegistry."""

    def test_known_types(self):
        types = TypeRegistry(["int", "string"])
        assert types.is_known("int")
        assert types.is_known("[]int")
        assert types.is_known("*string")
        assert not types.is_known("UserStatus")

    def test_add_type(self):
        types = TypeRegistry()
        types.add_type("UserStatus", "us")
        assert types.is_known("UserStatus")
        assert types.short_name("UserStatus") == "us"
        assert "UserStatus" in types.known_types()

    @pytest.mark.parametrize(
        "type_name,expected",
        [
            ("NullString", "ns"),
            ("time.Time", "t"),
            ("AuthPermission", "ap"),
            ("[]byte", "b"),
            ("JSON", "j"),
        ],
    )
    def test_short_name_from_initials(self, type_name, expected):
        assert TypeRegistry().short_name(type_name) == expected

    def test_copy_is_independent(self):
        types = TypeRegistry(["int"])
        run_types = types.copy()
        run_types.add_type("UserStatus")
        assert run_types.is_known("UserStatus")
        assert not types.is_known("UserStatus")
