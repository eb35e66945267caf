"""Tests for the command-line entry point (create_digitaltwin.cli)."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from create_digitaltwin.cli import build_parser, main


pytestmark = pytest.mark.unit


def _output(capsys) -> str:
    return " ".join(capsys.readouterr().out.split())


@pytest.fixture(autouse=True)
def _clean_env():
    """Keep CREATE_DT_* settings from the developer's shell out of the tests."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("CREATE_DT_")}
    with patch.dict(os.environ, env, clear=True):
        yield


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["demo"])
        assert args.project_name == "demo"
        assert args.path is None
        assert args.database == "sqlite"
        assert args.storage == "local"
        assert args.storage_path is None
        assert not (args.redis or args.docker or args.examples or args.offline)

    def test_all_flags(self):
        args = build_parser().parse_args([
            "demo", "--path", "out", "--database", "postgresql", "--storage", "ovh",
            "--storage-path", "./files", "--redis", "--docker", "--examples", "--offline",
        ])
        assert args.path == "out"
        assert args.database == "postgresql"
        assert args.storage == "ovh"
        assert args.storage_path == "./files"
        assert args.redis and args.docker and args.examples and args.offline

    def test_rejects_unknown_database(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["demo", "--database", "mysql"])


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


class TestMain:
    def test_creates_project(self, tmp_path: Path, capsys):
        target = tmp_path / "demo"
        code = main(["demo", "--path", str(target), "--offline"])

        assert code == 0
        assert (target / "package.json").is_file()
        assert (target / "dt.js").is_file()
        manifest = json.loads((target / "package.json").read_text(encoding="utf-8"))
        assert manifest["dependencies"]["digitaltwin-core"] == "^0.3.3"
        out = _output(capsys)
        assert "Project created successfully!" in out
        assert "npm install" in out
        assert "node dt test" in out

    def test_full_options(self, tmp_path: Path):
        target = tmp_path / "twin"
        code = main([
            "twin", "--path", str(target), "--database", "postgresql", "--storage", "ovh",
            "--redis", "--docker", "--examples", "--offline",
        ])
        assert code == 0
        assert (target / "docker-compose.yml").is_file()
        assert (target / "src" / "components" / "index.ts").is_file()

    def test_offline_from_environment(self, tmp_path: Path):
        target = tmp_path / "demo"
        with patch.dict(os.environ, {"CREATE_DT_OFFLINE": "1"}), \
                patch("httpx.AsyncClient") as mock_cls:
            code = main(["demo", "--path", str(target)])
        assert code == 0
        mock_cls.assert_not_called()

    def test_invalid_name(self, tmp_path: Path, capsys):
        code = main(["Bad_Name", "--path", str(tmp_path / "x"), "--offline"])
        assert code == 1
        assert "Error creating project: Invalid project_name" in _output(capsys)
        assert not (tmp_path / "x").exists()

    def test_invalid_storage_path(self, tmp_path: Path, capsys):
        code = main([
            "demo", "--path", str(tmp_path / "x"), "--storage-path", "./it's", "--offline",
        ])
        assert code == 1
        assert "Invalid local_storage_path" in _output(capsys)

    def test_rejects_non_empty_destination(self, tmp_path: Path, capsys):
        target = tmp_path / "demo"
        target.mkdir()
        (target / "keep.txt").write_text("x", encoding="utf-8")

        code = main(["demo", "--path", str(target), "--offline"])

        assert code == 1
        assert "already exists and is not empty" in _output(capsys)
        assert [p.name for p in target.iterdir()] == ["keep.txt"]

    def test_accepts_empty_destination(self, tmp_path: Path):
        target = tmp_path / "demo"
        target.mkdir()
        assert main(["demo", "--path", str(target), "--offline"]) == 0

    def test_bad_timeout_setting(self, tmp_path: Path, capsys):
        with patch.dict(os.environ, {"CREATE_DT_LOOKUP_TIMEOUT": "soon"}):
            code = main(["demo", "--path", str(tmp_path / "demo")])
        assert code == 1
        assert "Error creating project:" in _output(capsys)

    def test_emission_error(self, tmp_path: Path, capsys):
        target = tmp_path / "demo"
        with patch(
            "create_digitaltwin.scaffolder.generator._write_file",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            code = main(["demo", "--path", str(target), "--offline"])
        assert code == 1
        assert "Error creating project: Cannot write" in _output(capsys)
