# pyright: reportAny=false, reportUnknownArgumentType=false
from pathlib import Path

import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from gittimelapse.config._loader import (
    _parse_env_value,
    copy_value,
    deep_merge,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from gittimelapse.exceptions import ConfigLoadError


class TestReadTomlFile:
    def test_parses_valid_toml(self, fs: FakeFilesystem) -> None:
        content = """
[display]
mode = "regular"
context_lines = 5
"""
        path = Path("/test/config.toml")
        fs.create_file(path, contents=content)

        result = read_toml_file(path)

        assert result == {"display": {"mode": "regular", "context_lines": 5}}

    def test_raises_file_not_found_for_missing_file(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            read_toml_file(Path("/test/missing.toml"))

    def test_config_load_error_includes_location(self, fs: FakeFilesystem) -> None:
        content = """[display]
mode = "aligned"

[history
"""
        path = Path("/test/syntax_error.toml")
        fs.create_file(path, contents=content)

        with pytest.raises(ConfigLoadError) as exc_info:
            read_toml_file(path)

        error = exc_info.value
        assert error.path == path
        assert error.line == 4
        assert error.column is not None
        assert isinstance(error.__cause__, Exception)


class TestDeepMerge:
    def test_nested_tables_are_merged(self) -> None:
        base = {"display": {"mode": "aligned", "context_lines": 3}}
        override = {"display": {"mode": "regular"}}

        result = deep_merge(base, override)

        assert result == {"display": {"mode": "regular", "context_lines": 3}}

    def test_arrays_are_replaced(self) -> None:
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_table_replaced_by_scalar(self) -> None:
        assert deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}

    def test_inputs_are_not_modified(self) -> None:
        base = {"history": {"revision": "HEAD"}, "tags": ["a"]}
        override = {"history": {"first_parent": True}}

        result = deep_merge(base, override)
        result["history"]["revision"] = "main"
        result["tags"].append("b")

        assert base == {"history": {"revision": "HEAD"}, "tags": ["a"]}
        assert override == {"history": {"first_parent": True}}


class TestCopyValue:
    def test_copies_nested_containers(self) -> None:
        original = {"a": [{"b": 1}]}

        copied = copy_value(original)
        copied["a"][0]["b"] = 2

        assert original == {"a": [{"b": 1}]}


class TestParseEnvValue:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("FALSE", False),
            ("42", 42),
            ("-3", -3),
            ("1.5", 1.5),
            ('["a", "b"]', ["a", "b"]),
            ('{"k": 1}', {"k": 1}),
            ("[not json", "[not json"),
            ("regular", "regular"),
            ("yes", "yes"),
            ("1.2.3", "1.2.3"),
        ],
    )
    def test_type_inference(self, raw: str, expected: object) -> None:
        assert _parse_env_value(raw) == expected


class TestParseEnvVars:
    def test_sections_split_on_double_underscore(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITTIMELAPSE_DISPLAY__MODE", "regular")
        monkeypatch.setenv("GITTIMELAPSE_HISTORY__FIRST_PARENT", "true")
        monkeypatch.setenv("GITTIMELAPSE_DISPLAY__CONTEXT_LINES", "7")

        result = parse_env_vars()

        assert result == {
            "display": {"mode": "regular", "context_lines": 7},
            "history": {"first_parent": True},
        }

    def test_variables_without_section_are_skipped(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITTIMELAPSE_DEBUG", "1")
        monkeypatch.setenv("GITTIMELAPSE_STRICT_CONFIG", "1")

        assert parse_env_vars() == {}

    def test_other_prefixes_are_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OTHER_DISPLAY__MODE", "regular")

        assert parse_env_vars() == {}

    def test_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CUSTOM_LOGGING__LEVEL", "debug")

        assert parse_env_vars("CUSTOM_") == {"logging": {"level": "debug"}}


class TestSetNestedKey:
    def test_creates_intermediate_tables(self) -> None:
        data: dict[str, object] = {}

        set_nested_key(data, "a.b.c", 1)

        assert data == {"a": {"b": {"c": 1}}}

    def test_replaces_scalar_on_path(self) -> None:
        data: dict[str, object] = {"a": 1}

        set_nested_key(data, "a.b", 2)

        assert data == {"a": {"b": 2}}

    def test_preserves_siblings(self) -> None:
        data: dict[str, object] = {"a": {"x": 1}}

        set_nested_key(data, "a.y", 2)

        assert data == {"a": {"x": 1, "y": 2}}
