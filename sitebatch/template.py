"""Template project discovery and validation.

The template is an ordinary site project living somewhere near the workspace.
``TemplateLocator.locate`` searches the workspace and its ancestors for it;
``validate`` confirms the two resources every copy depends on are present.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sitebatch.errors import MissingTemplateFile, TemplateNotFound
from sitebatch.utils import console, load_json

SITE_CONFIG_FILE = "data/site-config.js"
GAMES_FILE = "data/games.json"
REQUIRED_FILES: tuple[str, ...] = (SITE_CONFIG_FILE, GAMES_FILE)


class TemplateLocator:
    """Finds and validates template project directories.

    Args:
        max_depth: How many directories (the start directory included) are
            checked while walking up.
        fallback_dir: Directory next to the start directory's parent that is
            checked once if the filesystem root is reached inside the bound.
    """

    def __init__(self, max_depth: int = 5, fallback_dir: str = "wjspark") -> None:
        self.max_depth = max_depth
        self.fallback_dir = fallback_dir

    def locate(self, workspace_root: str | Path, template_name: str) -> Path | None:
        """Return the first existing ``<dir>/<template_name>``, or ``None``."""
        start = Path(workspace_root).resolve()
        current = start
        for _ in range(self.max_depth):
            candidate = current / template_name
            if candidate.exists():
                return candidate

            parent = current.parent
            if parent == current:
                fallback = start.parent / self.fallback_dir / template_name
                if fallback.exists():
                    return fallback
                return None
            current = parent
        return None

    def resolve(self, workspace_root: str | Path, template_name: str) -> Path:
        """Locate and validate in one step.

        Raises:
            TemplateNotFound: If no directory of that name is found.
            MissingTemplateFile: If the directory lacks a required resource.
        """
        found = self.locate(workspace_root, template_name)
        if found is None:
            raise TemplateNotFound(template_name, workspace_root)
        self.validate(found)
        return found

    def validate(self, path: str | Path) -> Path:
        """Check the template exists and holds every required resource."""
        template_path = Path(path)
        if not template_path.is_dir():
            raise TemplateNotFound(template_path.name, template_path.parent)

        for resource in REQUIRED_FILES:
            if not (template_path / resource).is_file():
                raise MissingTemplateFile(template_path, resource)

        console.print(f"[green]+[/green] Template project validated: {template_path}")
        return template_path

    def load_catalog(self, path: str | Path) -> dict[str, Any]:
        """Read the template's game catalog.

        Raises:
            MissingTemplateFile: If the catalog is unreadable or not a JSON object.
        """
        catalog_path = Path(path) / GAMES_FILE
        try:
            data = load_json(catalog_path)
        except (OSError, json.JSONDecodeError) as exc:
            raise MissingTemplateFile(path, f"a readable {GAMES_FILE} ({exc})") from exc
        if not isinstance(data, dict):
            raise MissingTemplateFile(path, f"a JSON object in {GAMES_FILE}")
        return data
