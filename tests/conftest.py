"""
Shared test fixtures.
"""

import copy

import pytest

from schemagen.codegen.core.templates import TemplateSet
from schemagen.codegen.registry import create_default_registry
from schemagen.loaders.facts import FactsLoader

# === Facts documents ===

USER_FACTS = {
    "driver": "postgres",
    "schema": "public",
    "tables": [
        {
            "name": "user",
            "columns": [
                {
                    "name": "id",
                    "type": "integer",
                    "not_null": True,
                    "is_primary": True,
                    "is_sequence": True,
                },
                {"name": "name", "type": "text", "not_null": True},
            ],
        }
    ],
}

AUTH_FACTS = {
    "driver": "postgres",
    "schema": "public",
    "enums": [
        {"name": "user_status", "values": ["active", "disabled"]},
    ],
    "procs": [
        {
            "name": "add_numbers",
            "return_type": "integer",
            "params": [
                {"name": "a", "type": "integer"},
                {"name": "b", "type": "integer"},
            ],
        },
        {"name": "refresh_stats", "return_type": "void"},
    ],
    "tables": [
        {
            "name": "django_content_type",
            "columns": [
                {
                    "name": "id",
                    "type": "integer",
                    "not_null": True,
                    "is_primary": True,
                    "is_sequence": True,
                },
                {"name": "app_label", "type": "character varying(100)", "not_null": True},
                {"name": "model", "type": "character varying(100)", "not_null": True},
            ],
            "indexes": [
                {
                    "name": "django_content_type_app_label_model_key",
                    "columns": ["app_label", "model"],
                    "is_unique": True,
                },
            ],
        },
        {
            "name": "auth_permission",
            "columns": [
                {
                    "name": "id",
                    "type": "integer",
                    "not_null": True,
                    "is_primary": True,
                    "is_sequence": True,
                },
                {"name": "name", "type": "character varying(255)", "not_null": True},
                {"name": "content_type_id", "type": "integer", "not_null": True},
                {"name": "codename", "type": "character varying(100)", "not_null": True},
                {"name": "status", "type": "user_status"},
                {"name": "updated_at", "type": "timestamp with time zone"},
            ],
            "indexes": [
                {
                    "name": "auth_permission_content_type_id_idx",
                    "columns": ["content_type_id"],
                },
            ],
            "foreign_keys": [
                {
                    "name": "auth_permission_content_type_id_fkey",
                    "column": "content_type_id",
                    "ref_table": "django_content_type",
                    "ref_column": "id",
                },
            ],
        },
    ],
    "views": [
        {
            "name": "permission_names",
            "columns": [
                {"name": "codename", "type": "character varying(100)"},
            ],
        }
    ],
}


@pytest.fixture
def user_facts():
    """Facts of a schema with a single 'user' table."""
    return copy.deepcopy(USER_FACTS)


@pytest.fixture
def auth_facts():
    """Facts of a schema with an enum, procs, tables, a view and a foreign key."""
    return copy.deepcopy(AUTH_FACTS)


@pytest.fixture
def user_loader(user_facts):
    return FactsLoader(user_facts)


@pytest.fixture
def auth_loader(auth_facts):
    return FactsLoader(auth_facts)


# === Template sets ===


class PostRecorder:
    """Post-processing hook recording every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, source: str) -> str:
        self.calls.append(source)
        return source


@pytest.fixture
def post_recorder():
    return PostRecorder()


@pytest.fixture
def minimal_set(post_recorder):
    """A template set with a single typedef template and no header."""
    return TemplateSet(
        name="mini",
        files={
            "typedef": (
                "type {{ table.name }}"
                "{% for c in table.columns %} {{ c.name }}{% endfor %}\n"
            ),
        },
        file_ext=".txt",
        post=post_recorder,
    )


@pytest.fixture
def registry():
    """A fresh registry with the bundled target sets."""
    return create_default_registry()
