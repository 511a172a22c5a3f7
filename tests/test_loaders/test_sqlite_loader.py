"""Tests for the SQLite loader."""

import sqlite3

import pytest

from schemagen.codegen.core.builder import build_schema
from schemagen.codegen.core.errors import LoadError
from schemagen.loaders.sqlite import SqliteLoader

DDL = """
CREATE TABLE team (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE member (
    id INTEGER PRIMARY KEY,
    team_id INTEGER NOT NULL REFERENCES team(id),
    email TEXT,
    joined DATETIME
);
CREATE INDEX member_email_idx ON member (email);
CREATE TABLE tag (
    member_id INTEGER NOT NULL REFERENCES member,
    label TEXT NOT NULL,
    PRIMARY KEY (member_id, label)
);
CREATE VIEW member_emails AS SELECT email FROM member;
"""


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "app.db"
    conn = sqlite3.connect(str(path))
    conn.executescript(DDL)
    conn.close()
    return path


@pytest.fixture
def sqlite_loader(db_path):
    with SqliteLoader(db_path) as loader:
        yield loader


class TestSqliteLoader:
    """Tests for SqliteLoader facts."""

    def test_missing_database(self, tmp_path):
        with pytest.raises(LoadError, match="not found"):
            SqliteLoader(tmp_path / "missing.db")

    def test_schema_and_driver(self, sqlite_loader):
        assert sqlite_loader.schema_name() == "main"
        assert sqlite_loader.driver == "sqlite3"
        assert sqlite_loader.enums("main") == []
        assert sqlite_loader.procs("main") == []

    def test_tables_and_views(self, sqlite_loader):
        assert [t.name for t in sqlite_loader.tables("main", "table")] == ["member", "tag", "team"]
        assert [t.name for t in sqlite_loader.tables("main", "view")] == ["member_emails"]

    def test_columns(self, sqlite_loader):
        columns = sqlite_loader.table_columns("main", "member")
        assert [c.name for c in columns] == ["id", "team_id", "email", "joined"]
        assert [c.ordinal for c in columns] == [1, 2, 3, 4]
        assert columns[0].is_primary and columns[0].is_sequence
        assert columns[1].not_null
        assert not columns[2].not_null

    def test_composite_key_is_not_a_sequence(self, sqlite_loader):
        columns = sqlite_loader.table_columns("main", "tag")
        assert all(c.is_primary for c in columns)
        assert not any(c.is_sequence for c in columns)

    def test_indexes(self, sqlite_loader):
        indexes = sqlite_loader.indexes("main", "tag")
        assert len(indexes) == 1
        assert indexes[0].is_primary and indexes[0].is_unique
        columns = sqlite_loader.index_columns("main", "tag", indexes[0].name)
        assert [(c.column, c.seq_no) for c in columns] == [("member_id", 1), ("label", 2)]

    def test_foreign_keys(self, sqlite_loader):
        fk = sqlite_loader.foreign_keys("main", "member")[0]
        assert fk.name == "member_team_id_fkey"
        assert (fk.column, fk.ref_table, fk.ref_column) == ("team_id", "team", "id")

    def test_foreign_key_without_columns_uses_primary_key(self, sqlite_loader):
        fk = sqlite_loader.foreign_keys("main", "tag")[0]
        assert fk.ref_column == "id"

    def test_query_errors_are_wrapped(self, db_path):
        conn = sqlite3.connect(str(db_path))
        loader = SqliteLoader(conn)
        conn.close()
        with pytest.raises(LoadError, match="SQLite query failed"):
            loader.tables("main", "table")


class TestSqliteSchema:
    """Tests for a schema built from SQLite."""

    def test_build(self, sqlite_loader):
        schema = build_schema(sqlite_loader)
        assert schema.driver == "sqlite3"
        assert schema.name == "main"
        assert [t.name for t in schema.tables] == ["member", "tag", "team"]
        assert [v.name for v in schema.views] == ["member_emails"]

    def test_rowid_primary_key_gets_an_index(self, sqlite_loader):
        team = build_schema(sqlite_loader).get_table("team")
        assert team.indexes[0].name == "team_pkey"
        assert team.indexes[0].func_name == "team_by_id"
        assert [c.name for c in team.primary_keys] == ["id"]

    def test_foreign_key_resolution(self, sqlite_loader):
        member = build_schema(sqlite_loader).get_table("member")
        fk = member.foreign_keys[0]
        assert fk.resolved_name == "team"
        assert fk.ref_index == "team_pkey"
        assert fk.ref_func_name == "team_by_id"


class TestSqliteEdgeCases:
    """Tests for valid SQLite schemas outside the common shapes."""

    @pytest.fixture
    def conn(self):
        conn = sqlite3.connect(":memory:")
        yield conn
        conn.close()

    def test_expression_index_is_skipped(self, conn):
        conn.executescript(
            "CREATE TABLE person (id INTEGER PRIMARY KEY, name TEXT NOT NULL);"
            "CREATE INDEX person_lower_name ON person (lower(name));"
            "CREATE INDEX person_name_idx ON person (name);"
        )
        loader = SqliteLoader(conn)

        assert [i.name for i in loader.indexes("main", "person")] == ["person_name_idx"]
        person = build_schema(loader).get_table("person")
        assert [i.name for i in person.indexes] == ["person_pkey", "person_name_idx"]

    def test_foreign_key_reference_case(self, conn):
        conn.executescript(
            "CREATE TABLE team (id INTEGER PRIMARY KEY, name TEXT);"
            "CREATE TABLE player (id INTEGER PRIMARY KEY,"
            " team_id INTEGER REFERENCES Team(ID));"
        )
        loader = SqliteLoader(conn)

        fk = loader.foreign_keys("main", "player")[0]
        assert (fk.ref_table, fk.ref_column) == ("team", "id")
        player = build_schema(loader).get_table("player")
        assert player.foreign_keys[0].ref_table == "team"
        assert player.foreign_keys[0].ref_func_name == "team_by_id"
