"""
tests/test_scaffolder.py
Integration tests for expressgen.generator.ProjectScaffolder.
"""

from __future__ import annotations

import json
import pathlib

import pytest

from expressgen.errors import ConfigError, ProjectRootError
from expressgen.generator import ProjectScaffolder
from expressgen.models import DEFAULT_ANCHOR_MARKER, GeneratorConfig
from expressgen.templates import SCAFFOLD_DIRECTORIES


def _manifest(root: pathlib.Path) -> dict:
    return json.loads((root / "package.json").read_text(encoding="utf-8"))


class TestScaffold:

    def test_layout(self, project_root: pathlib.Path) -> None:
        for name in SCAFFOLD_DIRECTORIES:
            assert (project_root / "src" / name).is_dir()
        for rel in (
            "src/index.js",
            "src/config/database.js",
            "src/config/key.js",
            "src/middleware/jwtMiddleware.js",
            "src/controller/authController.js",
            "src/routes/authRoutes.js",
            "env.example",
            ".gitignore",
            "package.json",
        ):
            assert (project_root / rel).is_file(), rel

    def test_entry_point_has_anchor(self, project_root: pathlib.Path) -> None:
        text = (project_root / "src" / "index.js").read_text(encoding="utf-8")
        assert text.count(DEFAULT_ANCHOR_MARKER) == 1

    def test_new_manifest(self, tmp_path: pathlib.Path) -> None:
        root = tmp_path / "Shop API"
        root.mkdir()
        report = ProjectScaffolder().scaffold(root)
        assert report.manifest_created is True
        manifest = _manifest(root)
        assert manifest["name"] == "shop-api"
        assert manifest["main"] == "src/index.js"
        assert manifest["scripts"]["dev"] == "nodemon src/index.js"
        assert "express" in manifest["dependencies"]
        assert (root / "package.json").read_text(encoding="utf-8").endswith("}\n")

    def test_existing_manifest_is_preserved(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "mine", "version": "2.0.0", "dependencies": {"express": "^5.0.0"}}),
            encoding="utf-8",
        )
        report = ProjectScaffolder().scaffold(tmp_path)
        manifest = _manifest(tmp_path)
        assert report.manifest_created is False
        assert manifest["name"] == "mine"
        assert manifest["version"] == "2.0.0"
        assert manifest["dependencies"]["express"] == "^5.0.0"
        assert "mysql2" in manifest["dependencies"]

    def test_rerun_is_idempotent(self, project_root: pathlib.Path, take_snapshot) -> None:
        before = take_snapshot(project_root)
        report = ProjectScaffolder().scaffold(project_root)
        assert take_snapshot(project_root) == before
        assert report.created_directories == []

    def test_first_run_reports_directories(self, tmp_path: pathlib.Path) -> None:
        report = ProjectScaffolder().scaffold(tmp_path)
        assert "src" in report.created_directories
        assert "src/routes" in report.created_directories
        assert "initialised" in report.summary()

    def test_dry_run(self, tmp_path: pathlib.Path) -> None:
        report = ProjectScaffolder(GeneratorConfig(dry_run=True)).scaffold(tmp_path)
        assert list(tmp_path.iterdir()) == []
        assert len(report.files) == 9

    def test_custom_src_dir(self, tmp_path: pathlib.Path) -> None:
        ProjectScaffolder(GeneratorConfig(src_dir="app")).scaffold(tmp_path)
        assert (tmp_path / "app" / "index.js").is_file()
        assert _manifest(tmp_path)["scripts"]["start"] == "node app/index.js"


class TestScaffoldErrors:

    def test_missing_root(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ProjectRootError):
            ProjectScaffolder().scaffold(tmp_path / "missing")

    def test_root_is_file(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "file"
        target.write_text("", encoding="utf-8")
        with pytest.raises(ProjectRootError):
            ProjectScaffolder().scaffold(target)

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_bad_manifest(self, tmp_path: pathlib.Path, content: str) -> None:
        (tmp_path / "package.json").write_text(content, encoding="utf-8")
        with pytest.raises(ConfigError):
            ProjectScaffolder().scaffold(tmp_path)
        assert not (tmp_path / "src").exists()
        assert [p.name for p in tmp_path.iterdir()] == ["package.json"]
