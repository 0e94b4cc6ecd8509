"""Tests for the jvl command line."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from jaivalens import __version__
from jaivalens.cli.main import cli
from jaivalens.cli.utils import source_path_for

runner = CliRunner()


def _write_tree(path: Path, nodes: list[dict[str, Any]]) -> Path:
    path.write_text(json.dumps(nodes))
    return path


def _main_tree() -> list[dict[str, Any]]:
    return [
        {"type": "TNumberVar", "name": "x", "lineNumber": 1, "value": 1},
        {
            "type": "TFunction",
            "name": "F~add",
            "lineNumber": 2,
            "args": ["a", "b"],
            "isArgOptional": [False, False],
            "body": {"type": "TCodeblock", "lines": [], "lineNumber": 2, "lineEnd": 4},
        },
    ]


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml")
    monkeypatch.chdir(tmp_path)


class TestSourcePathFor:
    def test_strips_json_suffix(self, tmp_path: Path) -> None:
        assert source_path_for(tmp_path / "main.jiv.json") == (tmp_path / "main.jiv").resolve()

    def test_explicit_source_wins(self, tmp_path: Path) -> None:
        assert source_path_for(tmp_path / "t.json", tmp_path / "x.jiv") == (
            tmp_path / "x.jiv"
        ).resolve()

    def test_other_suffix_kept(self, tmp_path: Path) -> None:
        assert source_path_for(tmp_path / "main.tree") == (tmp_path / "main.tree").resolve()


class TestCli:
    """End-to-end command tests."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def teardown_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_index_json(self, tmp_path: Path) -> None:
        # Given
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        # When
        result = runner.invoke(cli, ["index", str(tree), "--json"])

        # Then
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["x"] == [{"scope": [-1, -1], "line": 1, "kind": "var", "hover": "x <- 1"}]
        assert payload["a"][0]["scope"] == [2, 4]
        assert payload["add"][0]["hover"] == "add(a, b)"

    def test_index_table(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["index", str(tree)])

        assert result.exit_code == 0, result.output
        assert "global" in result.output
        assert "add" in result.output

    def test_index_empty(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "empty.jiv.json", [])

        result = runner.invoke(cli, ["index", str(tree)])

        assert result.exit_code == 0
        assert "No symbols" in result.output

    def test_hover(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["hover", str(tree), "a", "--line", "3"])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "[parameter] a"

    def test_hover_not_visible(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["hover", str(tree), "a", "-l", "9"])

        assert result.exit_code == 1
        assert "'a' is not visible at line 9" in result.output

    def test_hover_verbose(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["-v", "hover", str(tree), "x", "-l", "1"])

        assert result.exit_code == 0, result.output
        assert "x <- 1" in result.output

    def test_complete_json(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["complete", str(tree), "--line", "3", "--json"])

        assert result.exit_code == 0, result.output
        items = json.loads(result.output)
        assert [item["label"] for item in items] == ["x", "add", "a", "b"]
        assert items[1]["insertText"] == "add(${1:a}, ${2:b})"

    def test_complete_plain(self, tmp_path: Path) -> None:
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["complete", str(tree), "-l", "1"])

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines == ["x\tvariable\tx", "add\tfunction\tadd(${1:a}, ${2:b})"]

    def test_invalid_tree_json(self, tmp_path: Path) -> None:
        tree = tmp_path / "bad.jiv.json"
        tree.write_text("{nope")

        result = runner.invoke(cli, ["index", str(tree)])

        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_missing_tree(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["index", str(tmp_path / "absent.json")])
        assert result.exit_code == 2

    def test_invalid_config(self, tmp_path: Path) -> None:
        config_dir = tmp_path / ".jaivalens"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("index:\n  max_string_length: 0\n")
        tree = _write_tree(tmp_path / "main.jiv.json", _main_tree())

        result = runner.invoke(cli, ["--config-root", str(tmp_path), "index", str(tree)])

        assert result.exit_code == 1
        assert "CONFIG_INVALID_VALUE" in result.output


class TestDumpLib:
    """Persisted libraries feed later queries."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def teardown_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def _lib_tree(self, tmp_path: Path) -> Path:
        return _write_tree(
            tmp_path / "lib.jiv.json",
            [
                {
                    "type": "TFunction",
                    "name": "F~push",
                    "lineNumber": 1,
                    "args": ["arr", "value"],
                    "body": {"type": "TCodeblock", "lines": [], "lineNumber": 1, "lineEnd": 3},
                    "exportSymbol": True,
                },
                {"type": "TNumberVar", "name": "hidden", "lineNumber": 4, "value": 0},
            ],
        )

    def test_dump_lib_writes_exported_symbols(self, tmp_path: Path) -> None:
        # Given
        lib_tree = self._lib_tree(tmp_path)
        output = tmp_path / "out" / "lib.json"

        # When
        result = runner.invoke(cli, ["dump-lib", str(output), str(lib_tree)])

        # Then
        assert result.exit_code == 0, result.output
        assert "Wrote 1 file(s)" in result.output
        payload = json.loads(output.read_text())
        [entries] = payload.values()
        assert list(entries) == ["push"]
        assert entries["push"][0]["range"] == [-1, -1]

    def test_lib_option_resolves_imports(self, tmp_path: Path) -> None:
        lib_tree = self._lib_tree(tmp_path)
        output = tmp_path / "lib.table.json"
        runner.invoke(cli, ["dump-lib", str(output), str(lib_tree)])
        main_tree = _write_tree(
            tmp_path / "main.jiv.json",
            [{"type": "TImport", "lineNumber": 1, "filePath": "./lib.jiv", "symbols": []}],
        )

        result = runner.invoke(
            cli, ["hover", str(main_tree), "push", "-l", "5", "--lib", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "push(arr, value)"
