"""Jinja2 rendering of the per-site configuration block.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``sitebatch/templates/`` directory and renders them with site-specific context
data.  Values destined for JavaScript source go through the ``js`` filter,
which emits JSON literals so quotes and non-ASCII text survive intact.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Undefined, select_autoescape

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

SITE_OBJECT_TEMPLATE = "site_object.js.j2"


class TemplateRenderer:
    """Renders Jinja2 templates shipped with the package.

    Undefined variables raise instead of rendering as empty strings, so a
    missing site field can never silently produce a broken config file.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["js"] = _js_literal_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory.
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_site_object(self, context: dict[str, Any]) -> str:
        """Render the ``const site = {...};`` block for one project."""
        return self.render(SITE_OBJECT_TEMPLATE, context).rstrip("\n")


def _js_literal_filter(value: Any) -> str:
    """Encode a value as a JSON literal that is also valid JavaScript."""
    if isinstance(value, Undefined):
        value._fail_with_undefined_error()
    return json.dumps(value, ensure_ascii=False)
