"""Creation of a single site project from the template.

A materialized project is a full copy of the template (version-control
metadata excluded) whose ``data/site-config.js`` carries a freshly rendered
``site`` block and whose ``data/games.json`` holds a random subset of the
eligible games.
"""

from __future__ import annotations

import asyncio
import json
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sitebatch.catalog import CatalogPartitioner
from sitebatch.config import SiteTemplateConfig
from sitebatch.errors import CatalogWriteWarning, MaterializationFailed
from sitebatch.template import GAMES_FILE, SITE_CONFIG_FILE
from sitebatch.templates import TemplateRenderer
from sitebatch.utils import console, load_json, print_warning

VCS_METADATA_DIRS = frozenset({".git"})

_SITE_BLOCK_RE = re.compile(r"const site = \{[\s\S]*?\};")


@dataclass
class SiteProject:
    """One generated site: directory, name, domain and curated catalog size."""

    name: str
    path: Path
    domain: str
    games_count: int
    games_selected: int = 0
    catalog_warning: str | None = None
    remote_url: str | None = None

    def mapping_entry(self) -> dict[str, str]:
        return {"siteName": self.name, "domain": self.domain}


@dataclass
class SiteContext:
    """Values rendered into a project's ``site`` block."""

    domain: str
    template: SiteTemplateConfig = field(default_factory=SiteTemplateConfig)

    def as_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "title": self.template.title,
            "description": self.template.description,
            "keywords": list(self.template.keywords),
            "author": f"{self.domain} Team",
            "language": self.template.language,
            "url": f"https://{self.domain}",
            "logo": self.template.logo,
            "favicon": self.template.favicon,
            "twitter_card": self.template.twitter_card,
            "og_image": self.template.og_image,
        }


def _ignore_vcs_metadata(directory: str, names: list[str]) -> set[str]:
    return {name for name in names if name in VCS_METADATA_DIRS}


def replace_site_block(content: str, site_block: str) -> str:
    """Swap the first ``const site = {...};`` block in *content* for *site_block*.

    Raises:
        ValueError: If *content* has no such block.
    """
    new_content, replaced = _SITE_BLOCK_RE.subn(lambda _: site_block, content, count=1)
    if not replaced:
        raise ValueError("no 'const site = {...};' block found")
    return new_content


class ProjectMaterializer:
    """Copies the template into a new project and rewrites its site data."""

    def __init__(
        self,
        partitioner: CatalogPartitioner,
        site_template: SiteTemplateConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.partitioner = partitioner
        self.site_template = site_template or SiteTemplateConfig()
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    async def materialize(
        self,
        template_path: str | Path,
        dest_path: str | Path,
        domain: str,
        games_count: int,
        catalog: dict[str, Any] | None = None,
    ) -> SiteProject:
        """Create one site project.

        Args:
            template_path: Validated template directory.
            dest_path: Project directory to create. Must not exist.
            domain: Domain assigned to this project.
            games_count: Number of games the project's catalog is trimmed to.
            catalog: Template catalog already read by the caller. When omitted
                the copied ``games.json`` is read instead.

        Raises:
            MaterializationFailed: If the destination exists, the copy fails or
                the site configuration cannot be rewritten.
        """
        src = Path(template_path)
        dest = Path(dest_path)
        site = SiteProject(name=dest.name, path=dest, domain=domain, games_count=games_count)

        if dest.exists():
            raise MaterializationFailed(
                site.name,
                f"{dest} already exists; the conflict check should have caught this",
            )

        console.print(f"  -> Creating project: [bold]{site.name}[/bold]")
        console.print(f"     Assigned domain: [cyan]{domain}[/cyan]")

        try:
            await asyncio.to_thread(
                shutil.copytree, src, dest, ignore=_ignore_vcs_metadata
            )
        except (OSError, shutil.Error) as exc:
            raise MaterializationFailed(site.name, f"copy failed: {exc}") from exc

        await self._rewrite_site_config(site)

        try:
            site.games_selected = await self._write_catalog(site, catalog)
        except CatalogWriteWarning as warning:
            site.catalog_warning = str(warning)
            print_warning(f"     Warning while processing {GAMES_FILE}: {warning}")

        console.print(f"  [green]{site.name} generated.[/green]")
        return site

    # -- Steps -------------------------------------------------------------

    async def _rewrite_site_config(self, site: SiteProject) -> None:
        config_path = site.path / SITE_CONFIG_FILE
        site_block = self.renderer.render_site_object(
            SiteContext(domain=site.domain, template=self.site_template).as_dict()
        )
        try:
            content = await asyncio.to_thread(config_path.read_text, encoding="utf-8")
            content = replace_site_block(content, site_block)
            await asyncio.to_thread(config_path.write_text, content, encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise MaterializationFailed(
                site.name, f"could not rewrite {SITE_CONFIG_FILE}: {exc}"
            ) from exc

    async def _write_catalog(
        self, site: SiteProject, catalog: dict[str, Any] | None
    ) -> int:
        games_path = site.path / GAMES_FILE
        try:
            document = await asyncio.to_thread(load_json, games_path)
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogWriteWarning(f"could not read {games_path}: {exc}") from exc

        if not isinstance(document, dict) or not isinstance(document.get("games"), list):
            raise CatalogWriteWarning(f"{games_path} has no 'games' list; left unchanged")

        source = catalog if catalog is not None else document
        total = len(document["games"])
        selected = self.partitioner.select_games(source, site.games_count)
        document["games"] = selected
        console.print(
            f"     games: {total} in template -> {len(selected)} html5 selected"
        )

        content = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        try:
            await asyncio.to_thread(games_path.write_text, content, encoding="utf-8")
        except OSError as exc:
            raise CatalogWriteWarning(f"could not write {games_path}: {exc}") from exc
        return len(selected)
