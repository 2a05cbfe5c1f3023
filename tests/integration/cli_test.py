"""Integration tests for the saae command line."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from saae.cli.app import app
from saae.core.parser import parse_source
from saae.core.paths import token_paths

runner = CliRunner()

SOURCE = "let x = 1\n"


def _path_of(content: str, kind: str | None = None) -> str:
    tree = parse_source(SOURCE)
    return next(
        path
        for path, token in token_paths(tree.root)
        if token.content == content and (kind is None or token.kind == kind)
    )


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "main.swift"
    path.write_text(SOURCE)
    return path


@pytest.mark.parametrize(
    "args",
    [[], ["check"], ["tokens"], ["resolve"], ["delete"], ["replace-token"], ["document"], ["header"]],
    ids=["root", "check", "tokens", "resolve", "delete", "replace-token", "document", "header"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


class TestCheck:
    def test_clean_file_as_json(self, source_file: Path) -> None:
        result = runner.invoke(app, ["check", str(source_file), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == []

    def test_clean_file(self, source_file: Path) -> None:
        result = runner.invoke(app, ["check", str(source_file)])
        assert result.exit_code == 0
        assert "No syntax errors" in result.output

    def test_broken_file_as_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.swift"
        path.write_text("struct A {\n    let x: Int\n")
        result = runner.invoke(app, ["check", str(path), "--json"])
        assert result.exit_code == 0
        records = json.loads(result.output)
        assert records
        assert {"message", "location", "span", "fix_its", "notes", "context_lines"} <= set(records[0])

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["check", str(tmp_path / "absent.swift")])
        assert result.exit_code == 1
        assert "File not found" in result.output


class TestInspect:
    def test_tokens_on_a_line(self, source_file: Path) -> None:
        result = runner.invoke(app, ["tokens", str(source_file), "--line", "1"])
        assert result.exit_code == 0
        assert "let" in result.output
        assert "(4 tokens)" in result.output

    def test_resolve_token(self, source_file: Path) -> None:
        result = runner.invoke(app, ["resolve", str(source_file), _path_of("x")])
        assert result.exit_code == 0
        assert "1:5" in result.output
        assert result.output.rstrip().endswith("x")

    def test_resolve_unknown_path(self, source_file: Path) -> None:
        result = runner.invoke(app, ["resolve", str(source_file), "9999"])
        assert result.exit_code == 1
        assert "Node not found at path: 9999" in result.output


class TestEdit:
    def test_replace_token_prints_the_result(self, source_file: Path) -> None:
        result = runner.invoke(app, ["replace-token", str(source_file), _path_of("x"), "y"])
        assert result.exit_code == 0
        assert result.output == "let y = 1\n"
        assert source_file.read_text() == SOURCE

    def test_replace_token_writes_the_file(self, source_file: Path) -> None:
        result = runner.invoke(app, ["replace-token", str(source_file), _path_of("x"), "y", "--write"])
        assert result.exit_code == 0
        assert source_file.read_text() == "let y = 1\n"

    def test_document(self, source_file: Path) -> None:
        result = runner.invoke(app, ["document", str(source_file), _path_of("let"), "--text", "The answer."])
        assert result.exit_code == 0
        assert result.output == "/// The answer.\nlet x = 1\n"

    def test_header(self, source_file: Path) -> None:
        result = runner.invoke(app, ["header", str(source_file), "Copyright 2024"])
        assert result.exit_code == 0
        assert result.output == "// Copyright 2024\nlet x = 1\n"

    def test_delete(self, source_file: Path) -> None:
        result = runner.invoke(app, ["delete", str(source_file), _path_of("1")])
        assert result.exit_code == 0
        assert result.output == "let x = \n"

    def test_delete_eof_is_refused(self, source_file: Path) -> None:
        result = runner.invoke(app, ["delete", str(source_file), _path_of("", kind="eof")])
        assert result.exit_code == 1
        assert "Invalid replacement context" in result.output
        assert source_file.read_text() == SOURCE
