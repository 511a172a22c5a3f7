"""Tests for the emitter and the generation run state machine."""

from threading import Event

import pytest

from schemagen.codegen.core.builder import build_schema
from schemagen.codegen.core.config import GeneratorConfig
from schemagen.codegen.core.errors import (
    DanglingForeignKeyError,
    LoadError,
    PostProcessError,
    RenderError,
    TemplateNotFoundError,
    UnknownTargetError,
)
from schemagen.codegen.core.generator import (
    Emitter,
    FirstFlag,
    GenerationResult,
    GenerationRun,
    GeneratedFile,
    RunState,
    format_code,
    validate_schema,
)
from schemagen.codegen.core.query import parse_query
from schemagen.codegen.core.schema import XO, Schema, Table
from schemagen.codegen.core.templates import Template, TemplateSet
from schemagen.codegen.registry import TemplateSetRegistry
from schemagen.loaders.facts import FactsLoader


@pytest.fixture
def mini_registry(minimal_set):
    registry = TemplateSetRegistry()
    registry.register("mini", minimal_set)
    return registry


def make_set(files, **kwargs):
    return TemplateSet(name="test", files=files, file_ext=".txt", **kwargs)


class TestEmitter:
    """Tests for Emitter."""

    def test_single_table_produces_one_file(self, minimal_set, post_recorder, user_loader):
        schema = build_schema(user_loader)
        result = Emitter(minimal_set, GeneratorConfig()).emit_schema(schema)

        assert list(result.files) == ["user"]
        content = result.files["user"].content
        assert "id" in content
        assert "name" in content
        assert result.files["user"].path == "user.txt"
        assert len(post_recorder.calls) == 1

    def test_entities_of_one_type_share_a_file(self, auth_loader):
        template_set = make_set(
            {
                "typedef": "T {{ table.name }}\n",
                "index": "I {{ index.name }}\n",
                "foreignkey": "F {{ fk.name }} -> {{ ref_table.name }}\n",
            }
        )
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(auth_loader))

        assert list(result.files) == ["django_content_type", "auth_permission", "permission_names"]
        assert result.files["auth_permission"].content.splitlines() == [
            "T auth_permission",
            "I auth_permission_pkey",
            "I auth_permission_content_type_id_idx",
            "F auth_permission_content_type_id_fkey -> django_content_type",
        ]

    def test_undeclared_kinds_are_skipped(self, minimal_set, auth_loader):
        assert minimal_set.entity_kinds() == {"typedef"}
        result = Emitter(minimal_set, GeneratorConfig()).emit_schema(build_schema(auth_loader))
        assert "user_status" not in result.files
        assert "add_numbers" not in result.files
        assert "auth_permission" in result.files

    def test_declared_kind_without_template(self, auth_loader):
        template_set = make_set(
            {"typedef": "T\n", "index": "I\n"},
            kinds=("typedef", "index", "foreignkey"),
        )
        with pytest.raises(TemplateNotFoundError) as exc_info:
            Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(auth_loader))
        assert exc_info.value.details == {"template": "foreignkey", "target": "test"}

    def test_declared_kinds_limit_rendering(self, auth_loader):
        template_set = make_set(
            {"typedef": "T\n", "index": "I\n"},
            kinds=("typedef",),
        )
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(auth_loader))
        assert result.files["auth_permission"].content == "T\n"

    def test_short_names_within_a_render(self, user_loader):
        template_set = make_set(
            {"typedef": "{{ names.name_for('int') }} {{ names.name_for('int') }}\n"}
        )
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(user_loader))
        assert result.files["user"].content == "i i2\n"

    def test_short_names_reset_per_render(self, auth_loader):
        template_set = make_set({"typedef": "{{ names.name_for('int') }}\n"})
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(auth_loader))
        assert all(f.content == "i\n" for f in result.files.values())

    def test_header_is_rendered_per_file(self, user_loader):
        template_set = make_set(
            {"hdr": "// {{ template.name }}\n", "typedef": "T\n"},
            header_template=lambda config: Template("hdr"),
        )
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(user_loader))
        assert result.files["user"].content == "// user\nT\n"

    def test_package_templates_render_once(self, user_loader):
        template_set = make_set(
            {"db": "package\n", "typedef": "T\n"},
            package_templates=lambda config: [Template("db", name="db")],
        )
        emitter = Emitter(template_set, GeneratorConfig())
        first = emitter.emit_schema(build_schema(user_loader))
        second = emitter.emit_schema(build_schema(user_loader))

        assert set(first.files) == {"db", "user"}
        assert set(second.files) == {"user"}

    def test_package_templates_hook_sees_the_config(self, user_loader):
        template_set = make_set(
            {"db": "package\n", "typedef": "T\n"},
            package_templates=lambda config: (
                [] if config.not_first else [Template("db", name="db")]
            ),
        )
        result = Emitter(template_set, GeneratorConfig(not_first=True)).emit_schema(
            build_schema(user_loader)
        )
        assert set(result.files) == {"user"}

    def test_missing_package_template(self, user_loader):
        template_set = make_set(
            {"typedef": "T\n"},
            package_templates=lambda config: [Template("db", name="db")],
        )
        with pytest.raises(TemplateNotFoundError) as exc_info:
            Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(user_loader))
        assert exc_info.value.details == {"template": "db", "target": "test"}

    def test_render_error_names_the_entity(self, user_loader):
        template_set = make_set({"typedef": "{{ table.no_such_attribute }}\n"})
        with pytest.raises(RenderError) as exc_info:
            Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(user_loader))
        assert exc_info.value.details["entity"] == "typedef 'user'"

    def test_post_process_error(self, user_loader):
        def reject(source):
            raise ValueError("unbalanced braces")

        template_set = make_set({"typedef": "T\n"}, post=reject)
        with pytest.raises(PostProcessError, match="unbalanced braces") as exc_info:
            Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(user_loader))
        assert exc_info.value.details["file"] == "user"

    def test_first_flag_is_true_once_per_run(self, auth_loader):
        template_set = make_set({"typedef": "{{ 'first' if first() else 'later' }}\n"})
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(auth_loader))
        contents = [f.content for f in result.files.values()]
        assert contents == ["first\n", "later\n", "later\n"]

    def test_driver_comes_from_schema(self, user_loader):
        template_set = make_set({"typedef": "{{ config.driver }}\n"})
        config = GeneratorConfig()
        result = Emitter(template_set, config).emit_schema(build_schema(user_loader))
        assert result.files["user"].content == "postgres\n"
        assert config.driver == "postgres"

    def test_enums_are_known_for_the_run_only(self, minimal_set, auth_loader):
        emitter = Emitter(minimal_set, GeneratorConfig())
        emitter.emit_schema(build_schema(auth_loader))
        assert emitter.types.is_known("user_status")
        assert not minimal_set.types.is_known("user_status")

    def test_funcs_are_exposed_to_templates(self, user_loader):
        template_set = make_set(
            {"typedef": "{{ shout(table.name) }}\n"},
            funcs=lambda config, types: {"shout": lambda s: s.upper()},
        )
        result = Emitter(template_set, GeneratorConfig()).emit_schema(build_schema(user_loader))
        assert result.files["user"].content == "USER\n"

    def test_queries_use_their_name(self):
        template_set = make_set({"query": "{{ query.name }} {{ query.query | join(' ') }}\n"})
        query = parse_query(
            "ActiveUsers", "SELECT id FROM users WHERE active = %%active bool%%",
            driver="postgres", fields="id integer",
        )
        result = Emitter(template_set, GeneratorConfig()).emit_queries([query])
        assert list(result.files) == ["activeusers"]
        assert result.files["activeusers"].content == (
            "ActiveUsers SELECT id FROM users WHERE active = $1\n"
        )

    def test_metadata_and_warnings(self, minimal_set, auth_loader):
        schema = build_schema(auth_loader)
        schema.tables.append(Table(type="table", name="audit_log"))
        result = Emitter(minimal_set, GeneratorConfig()).emit_schema(schema)

        assert result.metadata["target"] == "mini"
        assert result.metadata["schema_count"] == 1
        assert result.metadata["table_count"] == 3
        assert result.metadata["view_count"] == 1
        assert result.metadata["file_count"] == len(result.files)
        assert any("audit_log" in w and "primary key" in w for w in result.warnings)


class TestGenerationRun:
    """Tests for GenerationRun."""

    def test_successful_run(self, mini_registry, user_loader):
        run = GenerationRun(mini_registry, "mini", loader=user_loader)
        assert run.state is RunState.INIT

        result = run.run()

        assert run.state is RunState.DONE
        assert run.error is None
        assert list(result.files) == ["user"]
        assert run.config.target == "mini"
        assert run.config.driver == "postgres"

    def test_dangling_foreign_key_fails_the_build(self, mini_registry, user_facts, post_recorder):
        user_facts["tables"][0]["foreign_keys"] = [
            {"name": "user_ghost_fkey", "column": "id", "ref_table": "ghost"}
        ]
        run = GenerationRun(mini_registry, "mini", loader=FactsLoader(user_facts))

        with pytest.raises(DanglingForeignKeyError):
            run.run()

        assert run.state is RunState.FAILED
        assert isinstance(run.error, DanglingForeignKeyError)
        assert run.xo.schemas == []
        assert post_recorder.calls == []

    def test_unknown_target_fails_in_init(self, mini_registry, user_loader):
        run = GenerationRun(mini_registry, "cobol", loader=user_loader)
        with pytest.raises(UnknownTargetError):
            run.run()
        assert run.state is RunState.FAILED

    def test_cancelled_run(self, mini_registry, user_loader):
        cancel = Event()
        cancel.set()
        run = GenerationRun(mini_registry, "mini", loader=user_loader, cancel=cancel)
        with pytest.raises(LoadError):
            run.run()
        assert run.state is RunState.FAILED

    def test_schema_name_reaches_config(self, mini_registry, user_loader):
        run = GenerationRun(mini_registry, "mini", loader=user_loader, schema_name="public")
        run.run()
        assert run.config.schema == "public"

    def test_queries_only(self, registry):
        query = parse_query(
            "CountUsers", "SELECT count(*) FROM users", driver="postgres",
            fields="count integer", one=True, flat=True,
        )
        run = GenerationRun(registry, "go", queries=[query])
        result = run.run()
        assert "countusers" in result.files
        assert result.metadata["query_count"] == 1


class TestHelpers:
    """Tests for small emitter helpers."""

    def test_first_flag(self):
        first = FirstFlag()
        assert first() is True
        assert first() is False
        assert first() is False

    def test_xo_rejects_other_values(self):
        with pytest.raises(TypeError):
            XO().emit("not a schema")

    def test_validate_schema(self):
        schema = Schema(driver="postgres", name="public", tables=[Table(type="table", name="t")])
        warnings = validate_schema(schema)
        assert len(warnings) == 2

    def test_format_code(self):
        assert format_code("a  \n\n\n\n\nb\n\n") == "a\n\n\nb\n"

    def test_write_all(self, tmp_path):
        result = GenerationResult(files={"user": GeneratedFile("user", ".txt", "T\n")})
        written = result.write_all(tmp_path / "out")
        assert written == [tmp_path / "out" / "user.txt"]
        assert written[0].read_text() == "T\n"
