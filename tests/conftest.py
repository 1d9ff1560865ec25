"""Shared pytest fixtures for the batch site generator test suite.

Provides reusable fixtures for:
- A workspace directory containing a valid template project
- Sample game catalogs (mixed html5 / non-html5 records)
- In-memory fakes for the git and GitHub CLI capabilities
- Mock subprocess helpers
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from sitebatch.config import Config, GenerationSettings


SITE_CONFIG_JS = """\
import { games } from './games-index.js';

const site = {
  "name": "template.example",
  "title": "Template Title",
  "description": "Template description",
  "logo": "/images/logo.png",
  "favicon": "/favicon.ico",
  "keywords": ["template"],
  "author": "template.example Team",
  "language": "en",
  "url": "https://template.example",
  "twitterCard": "/images/summary_large_image.png",
  "ogImage": "/images/og-image.png",
};

export default site;
"""


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------

def make_catalog(html5: int, other: int = 0) -> dict[str, Any]:
    """Build a ``games.json`` document with *html5* eligible and *other* ineligible games."""
    games: list[dict[str, Any]] = []
    for i in range(html5):
        games.append({"id": f"h{i}", "title": f"HTML5 Game {i}", "tags": ["html5", "puzzle"]})
    for i in range(other):
        games.append({"id": f"f{i}", "title": f"Flash Game {i}", "tags": ["flash"]})
    return {"version": 2, "games": games}


@pytest.fixture
def sample_catalog() -> dict[str, Any]:
    """Twelve html5 games, five flash games and one untagged record."""
    catalog = make_catalog(html5=12, other=5)
    catalog["games"].append({"id": "untagged", "title": "No tags"})
    return catalog


# ---------------------------------------------------------------------------
# Workspace & template
# ---------------------------------------------------------------------------

def build_template(root: Path, name: str = "site31", html5: int = 15, other: int = 3) -> Path:
    """Create a template project under *root* and return its path."""
    template = root / name
    (template / "data").mkdir(parents=True)
    (template / "data" / "site-config.js").write_text(SITE_CONFIG_JS, encoding="utf-8")
    (template / "data" / "games.json").write_text(
        json.dumps(make_catalog(html5, other), indent=2), encoding="utf-8"
    )
    (template / "index.html").write_text("<html></html>\n", encoding="utf-8")
    (template / "images").mkdir()
    (template / "images" / "logo.png").write_bytes(b"\x89PNG")
    # Version-control metadata that must never be copied.
    (template / ".git" / "refs").mkdir(parents=True)
    (template / ".git" / "config").write_text(
        '[remote "origin"]\n\turl = git@github.com:someone/site31.git\n', encoding="utf-8"
    )
    return template


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace root (auto-cleanup)."""
    root = tmp_path / "workspace"
    root.mkdir()
    yield root


@pytest.fixture
def template_project(workspace: Path) -> Path:
    """Valid template ``site31`` with 15 html5 and 3 flash games."""
    return build_template(workspace)


@pytest.fixture
def batch_config(workspace: Path, tmp_path: Path) -> Config:
    """Config pointing at the temporary workspace with one base domain."""
    return Config(
        workspace_root=workspace,
        domains=["x.io"],
        account="test-account",
        mapping_path=tmp_path / "generated-sites-map.json",
    )


@pytest.fixture
def batch_settings() -> GenerationSettings:
    return GenerationSettings(
        template_name="site31",
        starting_name="site40",
        subdomain_count=1,
        prefix_length=4,
        games_min=5,
        games_max=10,
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so plans are reproducible."""
    return random.Random(1234)


# ---------------------------------------------------------------------------
# Capability fakes
# ---------------------------------------------------------------------------

class FakeVcs:
    """Records every call; optionally fails on a named operation."""

    def __init__(self, available: bool = True, remotes: list[str] | None = None,
                 fail_on: str | None = None, fail_for: str | None = None) -> None:
        self.available = available
        self.remotes = list(remotes or [])
        self.fail_on = fail_on
        self.fail_for = fail_for
        self.calls: list[tuple[str, str]] = []

    def _record(self, op: str, path: Path) -> None:
        from sitebatch.vcs import CommandError

        self.calls.append((op, path.name))
        if op == self.fail_on and (self.fail_for is None or path.name == self.fail_for):
            raise CommandError(f"git {op} failed", command=f"git {op}", stderr="boom")

    async def is_available(self) -> bool:
        return self.available

    async def init(self, path: Path) -> None:
        self._record("init", path)

    async def add_all(self, path: Path) -> None:
        self._record("add", path)

    async def commit(self, path: Path, message: str) -> None:
        self._record("commit", path)

    async def list_remotes(self, path: Path) -> list[str]:
        self._record("list_remotes", path)
        return list(self.remotes)

    async def remove_remote(self, path: Path, name: str) -> None:
        self._record(f"remove_remote:{name}", path)


class FakeHost:
    """In-memory GitHub stand-in."""

    def __init__(self, installed: bool = True, authenticated: bool = True,
                 fail_for: str | None = None) -> None:
        self.installed = installed
        self.authenticated = authenticated
        self.fail_for = fail_for
        self.created: list[str] = []

    async def is_installed(self) -> bool:
        return self.installed

    async def is_authenticated(self) -> tuple[bool, str]:
        if self.authenticated:
            return True, ""
        return False, "You are not logged into any GitHub hosts."

    async def create_private_repo(self, path: Path, full_name: str) -> str:
        from sitebatch.vcs import CommandError

        if self.fail_for and path.name == self.fail_for:
            raise CommandError("gh repo create failed", command="gh repo create", stderr="HTTP 422")
        self.created.append(full_name)
        return f"https://github.com/{full_name}"


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Factories (for tests that need non-default variants)
# ---------------------------------------------------------------------------

@pytest.fixture
def catalog_factory():
    return make_catalog


@pytest.fixture
def template_factory():
    return build_template


@pytest.fixture
def vcs_factory():
    return FakeVcs


@pytest.fixture
def host_factory():
    return FakeHost
