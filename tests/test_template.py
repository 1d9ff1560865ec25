"""Unit tests for template discovery and validation (sitebatch.template).

Tests cover:
- locate() in the workspace, in ancestors, within and beyond the depth bound
- the fallback directory checked once the filesystem root is reached
- validate() for missing directories and missing resources
- resolve() and load_catalog()
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sitebatch.errors import MissingTemplateFile, TemplateNotFound
from sitebatch.template import GAMES_FILE, SITE_CONFIG_FILE, TemplateLocator

pytestmark = pytest.mark.unit


class TestLocate:
    def test_found_in_workspace(self, workspace: Path, template_project: Path):
        assert TemplateLocator().locate(workspace, "site31") == template_project.resolve()

    def test_found_in_ancestor(self, tmp_path: Path):
        target = tmp_path / "site31"
        target.mkdir()
        start = tmp_path / "a" / "b"
        start.mkdir(parents=True)
        assert TemplateLocator().locate(start, "site31") == target.resolve()

    def test_nearest_match_wins(self, tmp_path: Path):
        (tmp_path / "site31").mkdir()
        start = tmp_path / "a"
        (start / "site31").mkdir(parents=True)
        assert TemplateLocator().locate(start, "site31") == (start / "site31").resolve()

    def test_depth_bound_respected(self, tmp_path: Path):
        (tmp_path / "site31").mkdir()
        start = tmp_path / "a" / "b" / "c"
        start.mkdir(parents=True)
        # c, b, a, tmp_path: found at the 4th level
        assert TemplateLocator(max_depth=4).locate(start, "site31") is not None
        assert TemplateLocator(max_depth=3).locate(start, "site31") is None

    def test_not_found_returns_none(self, workspace: Path):
        assert TemplateLocator(max_depth=2).locate(workspace, "site-does-not-exist-31") is None

    def test_fallback_checked_at_filesystem_root(self, tmp_path: Path):
        start = tmp_path / "workspace"
        start.mkdir()
        fallback = tmp_path / "shared-templates" / "site31"
        fallback.mkdir(parents=True)
        depth = len(start.resolve().parents) + 1
        locator = TemplateLocator(max_depth=depth + 5, fallback_dir="shared-templates")
        assert locator.locate(start, "site31") == fallback.resolve()

    def test_fallback_not_checked_when_bound_hit_first(self, tmp_path: Path):
        start = tmp_path / "workspace"
        start.mkdir()
        (tmp_path / "shared-templates" / "site31").mkdir(parents=True)
        locator = TemplateLocator(max_depth=1, fallback_dir="shared-templates")
        assert locator.locate(start, "site31") is None

    def test_does_not_validate_contents(self, workspace: Path):
        (workspace / "site31").mkdir()
        assert TemplateLocator().locate(workspace, "site31") is not None


class TestValidate:
    def test_valid_template(self, template_project: Path):
        assert TemplateLocator().validate(template_project) == template_project

    def test_missing_directory(self, workspace: Path):
        with pytest.raises(TemplateNotFound):
            TemplateLocator().validate(workspace / "nope")

    @pytest.mark.parametrize("resource", [SITE_CONFIG_FILE, GAMES_FILE])
    def test_missing_resource_named(self, template_project: Path, resource: str):
        (template_project / resource).unlink()
        with pytest.raises(MissingTemplateFile) as excinfo:
            TemplateLocator().validate(template_project)
        assert excinfo.value.resource == resource
        assert resource in str(excinfo.value)


class TestResolve:
    def test_resolve_found(self, workspace: Path, template_project: Path):
        assert TemplateLocator().resolve(workspace, "site31") == template_project.resolve()

    def test_resolve_not_found(self, workspace: Path):
        with pytest.raises(TemplateNotFound, match="site77"):
            TemplateLocator(max_depth=1).resolve(workspace, "site77")


class TestLoadCatalog:
    def test_reads_games(self, template_project: Path):
        catalog = TemplateLocator().load_catalog(template_project)
        assert len(catalog["games"]) == 18

    def test_malformed_json(self, template_project: Path):
        (template_project / GAMES_FILE).write_text("{", encoding="utf-8")
        with pytest.raises(MissingTemplateFile, match="readable"):
            TemplateLocator().load_catalog(template_project)

    def test_non_object(self, template_project: Path):
        (template_project / GAMES_FILE).write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(MissingTemplateFile, match="JSON object"):
            TemplateLocator().load_catalog(template_project)
