"""Batch site generator configuration.

Centralised, typed configuration for the whole batch run. All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from sitebatch.errors import ConfigError

PLACEHOLDER_ACCOUNT = "YourGitHubUsername"


class SiteTemplateConfig(BaseModel):
    """Values written into every generated ``data/site-config.js``.

    The domain-derived fields (name, author, url) are filled in per project;
    everything here is applied uniformly to the whole batch.
    """

    title: str = Field(default="game92 Games - Online HTML5 Games Platform")
    description: str = Field(
        default=(
            "Discover endless entertainment with our collection of premium HTML5 "
            "games. Play instantly in your browser - featuring mind-bending puzzles, "
            "thrilling adventures, strategic challenges, and fast-paced action games "
            "for all ages."
        )
    )
    keywords: list[str] = Field(
        default_factory=lambda: [
            "Web Games",
            "Interactive Entertainment",
            "Instant Play Games",
            "Cross-Platform Gaming",
            "Educational Games",
            "Multiplayer Games",
            "Retro Games",
            "Mobile-Friendly Games",
            "Gaming Portal",
            "Flash Alternative",
        ]
    )
    language: str = Field(default="en")
    logo: str = Field(default="/images/logo.png")
    favicon: str = Field(default="/favicon.ico")
    twitter_card: str = Field(default="/images/summary_large_image.png")
    og_image: str = Field(default="/images/og-image.png")


class GenerationSettings(BaseModel):
    """Per-run answers: which template, where to start numbering, how many games."""

    template_name: str = Field(..., min_length=1)
    starting_name: str = Field(..., min_length=1)
    subdomain_count: int = Field(default=1, ge=0)
    prefix_length: int = Field(default=5, ge=3, le=10)
    games_min: int = Field(default=10, ge=1)
    games_max: int = Field(default=20, ge=1)

    @model_validator(mode="after")
    def _check_games_range(self) -> "GenerationSettings":
        if self.games_max < self.games_min:
            raise ValueError(
                f"games_max ({self.games_max}) cannot be smaller than games_min ({self.games_min})"
            )
        return self


class Config(BaseModel):
    """Global batch configuration.

    Holds the base domains, the hosting account and the site template record.
    Instances are typically created once by the CLI entry point and then
    passed through the rest of the system.
    """

    workspace_root: Path = Field(default=Path(".."))
    domains: list[str] = Field(default_factory=lambda: ["game92.vip"])
    account: str = Field(default="")
    repo_prefix: str = Field(default="wj-")
    commit_message: str = Field(default="feat: Initial commit")
    fallback_dir: str = Field(default="wjspark")
    template_depth: int = Field(default=5, ge=1)
    mapping_path: Path = Field(default=Path("generated-sites-map.json"))
    site_template: SiteTemplateConfig = Field(default_factory=SiteTemplateConfig)

    @field_validator("domains")
    @classmethod
    def _check_domains(cls, value: list[str]) -> list[str]:
        cleaned = [d.strip().lower() for d in value if d.strip()]
        if not cleaned:
            raise ValueError("at least one base domain is required")
        duplicates = sorted({d for d in cleaned if cleaned.count(d) > 1})
        if duplicates:
            raise ValueError(f"duplicate base domains: {', '.join(duplicates)}")
        return cleaned

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def workspace_path(self) -> Path:
        """Absolute workspace root under which every site project is created."""
        return self.workspace_root.expanduser().resolve()

    @property
    def account_configured(self) -> bool:
        return bool(self.account.strip()) and self.account != PLACEHOLDER_ACCOUNT

    def total_sites(self, subdomain_count: int) -> int:
        """Number of projects one run creates: every base plus its subdomains."""
        return len(self.domains) * (1 + subdomain_count)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a configuration file written by :meth:`save` (or by hand).

        Raises:
            ConfigError: If the file is missing or is not valid JSON.
            pydantic.ValidationError: If the values fail validation.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(path, str(exc)) from exc
        if not isinstance(data, dict):
            raise ConfigError(path, "top-level value must be an object")
        return cls.model_validate(data)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            SITEBATCH_WORKSPACE, SITEBATCH_DOMAINS (comma-separated),
            SITEBATCH_ACCOUNT, SITEBATCH_REPO_PREFIX, SITEBATCH_MAPPING_PATH,
            SITEBATCH_FALLBACK_DIR.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SITEBATCH_WORKSPACE"):
            kwargs["workspace_root"] = Path(os.environ["SITEBATCH_WORKSPACE"])
        if os.environ.get("SITEBATCH_DOMAINS"):
            kwargs["domains"] = [
                d.strip() for d in os.environ["SITEBATCH_DOMAINS"].split(",") if d.strip()
            ]
        if os.environ.get("SITEBATCH_ACCOUNT"):
            kwargs["account"] = os.environ["SITEBATCH_ACCOUNT"]
        if "SITEBATCH_REPO_PREFIX" in os.environ:
            kwargs["repo_prefix"] = os.environ["SITEBATCH_REPO_PREFIX"]
        if os.environ.get("SITEBATCH_MAPPING_PATH"):
            kwargs["mapping_path"] = Path(os.environ["SITEBATCH_MAPPING_PATH"])
        if os.environ.get("SITEBATCH_FALLBACK_DIR"):
            kwargs["fallback_dir"] = os.environ["SITEBATCH_FALLBACK_DIR"]
        return cls(**kwargs)


def format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ``ValidationError`` into one readable line per field."""
    lines = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "config"
        lines.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "\n".join(lines)
