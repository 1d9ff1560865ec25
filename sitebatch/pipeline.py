"""Batch site generation pipeline orchestrator.

Runs the five stages of one batch:

Stage 1: PREFLIGHT -- Check git, the GitHub CLI login and the target account.
Stage 2: PLAN      -- Validate the template, check catalog capacity, plan
                      domains, names and per-site game counts.
Stage 3: GENERATE  -- Materialize one project per planned domain.
Stage 4: PUBLISH   -- Commit and push every project to a private repository.
Stage 5: RECORD    -- Write the site -> domain mapping file.

Every check that can fail before a project exists runs in stages 1-2, so a
misconfigured run aborts without touching the workspace.

Usage::

    sitebatch --template site31 --start site47
    sitebatch --config batch.json --skip-publish
"""

from __future__ import annotations

import asyncio
import random
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt

from sitebatch.catalog import CatalogPartitioner
from sitebatch.config import Config, GenerationSettings, format_validation_error
from sitebatch.domains import DomainPlanner
from sitebatch.errors import BatchError, DependencyError, InvalidNameFormat, MappingWriteFailed
from sitebatch.materializer import ProjectMaterializer, SiteProject
from sitebatch.naming import NameAllocator, parse_site_name
from sitebatch.publisher import PublishCoordinator
from sitebatch.template import TemplateLocator
from sitebatch.utils import (
    console,
    format_duration,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
)
from sitebatch.vcs import GitClient, GitHubCliClient, RemoteHostClient, VcsClient


# ---------------------------------------------------------------------------
# Run plan and result
# ---------------------------------------------------------------------------


@dataclass
class BatchPlan:
    """Everything decided before the first project is created."""

    template_path: Path
    catalog: dict[str, Any]
    eligible_games: int
    names: list[str]
    domains: list[str]
    counts: list[int]

    def assignments(self) -> list[tuple[str, str, int]]:
        """Return the ``(name, domain, games_count)`` triple for every project."""
        return list(zip(self.names, self.domains, self.counts))


@dataclass
class BatchResult:
    """Accumulated outcome of one batch run, threaded through every stage."""

    sites: list[SiteProject] = field(default_factory=list)
    mapping_path: Path | None = None
    stages_completed: list[int] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    failed_stage: int | None = None

    @property
    def published(self) -> dict[str, str]:
        """``{site name: remote URL}`` for every site pushed so far."""
        return {site.name: site.remote_url for site in self.sites if site.remote_url}

    def mapping(self) -> list[dict[str, str]]:
        return [site.mapping_entry() for site in self.sites]


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class BatchPipeline:
    """Drives one batch run, strictly sequentially.

    Attributes:
        config: Workspace, domains, account and site template.
        settings: This run's template, starting name and game-count range.
        skip_publish: Generate and record sites without pushing them.
    """

    def __init__(
        self,
        config: Config,
        settings: GenerationSettings,
        *,
        vcs: VcsClient | None = None,
        host: RemoteHostClient | None = None,
        rng: random.Random | None = None,
        skip_publish: bool = False,
    ) -> None:
        self.config = config
        self.settings = settings
        self.skip_publish = skip_publish
        self.vcs = vcs or GitClient()
        self.host = host or GitHubCliClient()

        rng = rng or random.Random()
        self.allocator = NameAllocator(config.workspace_path)
        self.locator = TemplateLocator(
            max_depth=config.template_depth, fallback_dir=config.fallback_dir
        )
        self.partitioner = CatalogPartitioner(rng)
        self.planner = DomainPlanner(rng)
        self.materializer = ProjectMaterializer(self.partitioner, config.site_template)
        self.publisher = PublishCoordinator(
            self.vcs,
            self.host,
            account=config.account,
            repo_prefix=config.repo_prefix,
            commit_message=config.commit_message,
        )

    @property
    def total_sites(self) -> int:
        return self.config.total_sites(self.settings.subdomain_count)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> BatchResult:
        """Execute every stage and return the accumulated ``BatchResult``.

        A ``BatchError`` in any stage stops the run; projects created before
        the failure are left in place.
        """
        result = BatchResult()
        run_start = time.monotonic()

        console.print(
            Panel(
                f"[bold bright_cyan]Batch site generator[/bold bright_cyan]\n"
                f"Workspace : {self.config.workspace_path}\n"
                f"Template  : {self.settings.template_name}\n"
                f"Start     : {self.settings.starting_name}\n"
                f"Sites     : {self.total_sites}",
                title="[bold]Batch Start[/bold]",
                border_style="bright_cyan",
            )
        )

        stage = 1
        try:
            print_stage_header(stage)
            await self.preflight()
            result.stages_completed.append(stage)

            stage = 2
            print_stage_header(stage)
            plan = self.plan()
            result.stages_completed.append(stage)

            stage = 3
            print_stage_header(stage)
            await self.generate(plan, result)
            result.stages_completed.append(stage)

            stage = 4
            if self.skip_publish:
                print_warning("Publishing skipped (--skip-publish).")
            else:
                print_stage_header(stage)
                await self.publisher.publish_all(result.sites)
                result.stages_completed.append(stage)

            stage = 5
            print_stage_header(stage)
            result.mapping_path = await self.record(result)
            result.stages_completed.append(stage)
            result.success = True
        except BatchError as exc:
            result.error = str(exc)
            result.failed_stage = stage
            print_error(f"Stage {stage} failed: {exc}")

        self._print_final_summary(result, time.monotonic() - run_start)
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def preflight(self) -> None:
        """Check the external tools publishing depends on.

        Raises:
            DependencyError: If git or the GitHub CLI is unusable, or no
                account is configured.
        """
        if self.skip_publish:
            console.print("  [dim]Publishing disabled; tool checks skipped.[/dim]")
            return

        if not await self.vcs.is_available():
            raise DependencyError("git is not installed or not on PATH.")
        console.print("  [green]+[/green] git available")

        if not await self.host.is_installed():
            raise DependencyError(
                "GitHub CLI (`gh`) is not installed or not on PATH. "
                "Install it from https://cli.github.com/"
            )
        authenticated, detail = await self.host.is_authenticated()
        if not authenticated:
            raise DependencyError(
                "GitHub CLI is not logged in or its authorisation expired. "
                f"Run `gh auth login` and try again.\n{detail}".rstrip()
            )
        console.print("  [green]+[/green] GitHub CLI authenticated")

        if not self.config.account_configured:
            raise DependencyError("Set the GitHub account (user or organisation) in the config.")
        console.print(f"  [green]+[/green] Publishing to account [bold]{self.config.account}[/bold]")

    def plan(self) -> BatchPlan:
        """Validate inputs and decide every name, domain and game count."""
        settings = self.settings
        workspace = self.config.workspace_path

        template_path = self.locator.resolve(workspace, settings.template_name)
        catalog = self.locator.load_catalog(template_path)
        eligible = self.partitioner.ensure_capacity(catalog, settings.games_max)
        console.print(f"  [green]+[/green] {eligible} html5 game(s) in template catalog")

        counts = self.partitioner.plan_counts(
            settings.games_min, settings.games_max, self.total_sites
        )
        domains = self.planner.expand(
            self.config.domains, settings.subdomain_count, settings.prefix_length
        )
        names = self.allocator.require_free(settings.starting_name, len(domains))

        plan = BatchPlan(
            template_path=template_path,
            catalog=catalog,
            eligible_games=eligible,
            names=names,
            domains=domains,
            counts=counts,
        )
        print_summary_table(
            {name: f"{domain} ({count} games)" for name, domain, count in plan.assignments()},
            title="Planned Sites",
        )
        return plan

    async def generate(self, plan: BatchPlan, result: BatchResult) -> None:
        """Materialize every planned project, appending each to *result*."""
        workspace = self.config.workspace_path
        console.print(
            f"Creating {len(plan.names)} site(s) from template "
            f"[bold]{plan.template_path.name}[/bold], starting at {plan.names[0]}"
        )
        for name, domain, count in plan.assignments():
            site = await self.materializer.materialize(
                plan.template_path,
                workspace / name,
                domain,
                count,
                catalog=plan.catalog,
            )
            result.sites.append(site)

    async def record(self, result: BatchResult) -> Path:
        """Write the ``[{siteName, domain}]`` mapping file."""
        try:
            path = await save_json(result.mapping(), self.config.mapping_path)
        except OSError as exc:
            raise MappingWriteFailed(self.config.mapping_path, exc) from exc
        console.print(f"  -> Site mapping saved to: {path}")
        return path

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_final_summary(self, result: BatchResult, elapsed: float) -> None:
        if result.success:
            border_style = "bold green"
            status_text = (
                f"[bold green]{len(result.sites)} site(s) generated"
                f"{'' if self.skip_publish else ' and published'}[/bold green]"
            )
        else:
            border_style = "bold red"
            status_text = "[bold red]BATCH FAILED[/bold red]"

        lines = [
            status_text,
            "",
            f"Duration : {format_duration(elapsed)}",
            f"Created  : {', '.join(site.name for site in result.sites) or 'none'}",
        ]
        if result.published:
            lines.append(f"Published: {len(result.published)}")
        if result.mapping_path:
            lines.append(f"Mapping  : {result.mapping_path}")
        warnings = [site.name for site in result.sites if site.catalog_warning]
        if warnings:
            lines.append(f"Catalog warnings: {', '.join(warnings)}")
        if result.error:
            lines.extend(["", f"Error    : {result.error}"])

        console.print()
        console.print(
            Panel("\n".join(lines), title="[bold]Batch Complete[/bold]", border_style=border_style)
        )


# ---------------------------------------------------------------------------
# Interactive prompts
# ---------------------------------------------------------------------------


def _ask_name(message: str) -> str:
    while True:
        answer = Prompt.ask(message, console=console).strip()
        try:
            parse_site_name(answer)
        except InvalidNameFormat as exc:
            print_error(str(exc))
            continue
        return answer


def _ask_int(message: str, default: int, minimum: int, maximum: int | None = None) -> int:
    while True:
        value = IntPrompt.ask(message, default=default, console=console)
        if value < minimum or (maximum is not None and value > maximum):
            bound = f"between {minimum} and {maximum}" if maximum is not None else f">= {minimum}"
            print_error(f"Value must be {bound}.")
            continue
        return value


def prompt_starting_name(allocator: NameAllocator, total_sites: int) -> str:
    """Ask for a starting name until none of the sequential names exist."""
    while True:
        name = _ask_name(f"Starting project name (creates {total_sites} project(s), e.g. site47)")
        conflicts = allocator.find_conflicts(name, total_sites)
        if not conflicts:
            return name
        print_error("These folders already exist, choose another starting name:")
        for conflict in sorted(conflicts):
            console.print(f"   - {conflict}")


def collect_settings(config: Config, answers: dict[str, Any], interactive: bool) -> GenerationSettings:
    """Fill in missing generation settings, prompting when *interactive*.

    Raises:
        pydantic.ValidationError: If the final values are invalid.
    """
    values = {key: value for key, value in answers.items() if value is not None}

    if interactive:
        console.print(f"[dim]Workspace root: {config.workspace_path}[/dim]")
        if "template_name" not in values:
            values["template_name"] = _ask_name("Template project folder (e.g. site31)")
        if "subdomain_count" not in values:
            values["subdomain_count"] = _ask_int("Subdomains per base domain", 1, 0)
        if "prefix_length" not in values and values["subdomain_count"] > 0:
            values["prefix_length"] = _ask_int("Random subdomain prefix length", 5, 3, 10)
        if "games_min" not in values:
            values["games_min"] = _ask_int("Minimum games per site", 10, 1)
        if "games_max" not in values:
            values["games_max"] = _ask_int("Maximum games per site", 20, values["games_min"])
        if "starting_name" not in values:
            total = config.total_sites(values["subdomain_count"])
            allocator = NameAllocator(config.workspace_path)
            values["starting_name"] = prompt_starting_name(allocator, total)

    return GenerationSettings(**values)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="sitebatch",
        description="Generate and publish a batch of game sites from one template project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  sitebatch\n"
            "  sitebatch --template site31 --start site47 --subdomains 2\n"
            "  sitebatch --config batch.json --no-input --template site31 --start site47\n"
        ),
    )
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="JSON configuration file (default: environment variables)")
    parser.add_argument("--workspace", type=Path, default=None,
                        help="Directory the site projects are created in")
    parser.add_argument("--domain", action="append", dest="domains", default=None,
                        help="Base domain; repeat for several (overrides the config)")
    parser.add_argument("--account", default=None, help="GitHub user or organisation")
    parser.add_argument("--template", dest="template_name", default=None,
                        help="Template project folder name (e.g. site31)")
    parser.add_argument("--start", dest="starting_name", default=None,
                        help="First project name (e.g. site47)")
    parser.add_argument("--subdomains", dest="subdomain_count", type=int, default=None,
                        help="Random subdomains generated per base domain")
    parser.add_argument("--prefix-length", type=int, default=None,
                        help="Length of the random subdomain prefix (3-10)")
    parser.add_argument("--games-min", type=int, default=None,
                        help="Minimum games per site")
    parser.add_argument("--games-max", type=int, default=None,
                        help="Maximum games per site")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed the random generator (reproducible plans)")
    parser.add_argument("--skip-publish", action="store_true",
                        help="Generate sites and the mapping without pushing them")
    parser.add_argument("--no-input", action="store_true",
                        help="Never prompt; fail when a required value is missing")
    return parser


def load_config(args) -> Config:
    """Build the ``Config`` from a file or the environment, then apply CLI overrides."""
    config = Config.load(args.config) if args.config else Config.from_env()
    overrides: dict[str, Any] = {}
    if args.workspace is not None:
        overrides["workspace_root"] = args.workspace
    if args.domains:
        overrides["domains"] = args.domains
    if args.account is not None:
        overrides["account"] = args.account
    if overrides:
        config = Config.model_validate({**config.model_dump(), **overrides})
    return config


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``sitebatch`` / ``python -m sitebatch``."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        answers = {
            "template_name": args.template_name,
            "starting_name": args.starting_name,
            "subdomain_count": args.subdomain_count,
            "prefix_length": args.prefix_length,
            "games_min": args.games_min,
            "games_max": args.games_max,
        }
        settings = collect_settings(config, answers, interactive=not args.no_input)
    except ValidationError as exc:
        print_error(f"Invalid configuration:\n{format_validation_error(exc)}")
        sys.exit(1)
    except BatchError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    rng = random.Random(args.seed) if args.seed is not None else None
    pipeline = BatchPipeline(config, settings, rng=rng, skip_publish=args.skip_publish)
    result = asyncio.run(pipeline.run())

    if result.success:
        print_success("Batch completed successfully!")
    else:
        sys.exit(1)


if __name__ == "__main__":
    main()
