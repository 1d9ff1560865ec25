"""Publishing of materialized site projects to a remote host.

Each project becomes its own repository: a fresh local history with a single
commit, no inherited remotes, and a private remote named after the project.
Publishing is strictly sequential and stops at the first failure.
"""

from __future__ import annotations

from sitebatch.errors import PublishFailed
from sitebatch.materializer import SiteProject
from sitebatch.utils import console
from sitebatch.vcs import CommandError, RemoteHostClient, VcsClient


class PublishCoordinator:
    """Commits and pushes site projects through the VCS and host capabilities."""

    def __init__(
        self,
        vcs: VcsClient,
        host: RemoteHostClient,
        account: str,
        repo_prefix: str = "wj-",
        commit_message: str = "feat: Initial commit",
    ) -> None:
        self.vcs = vcs
        self.host = host
        self.account = account
        self.repo_prefix = repo_prefix
        self.commit_message = commit_message

    def remote_name(self, site: SiteProject) -> str:
        """Return ``<account>/<repo_prefix><site name>``."""
        return f"{self.account}/{self.repo_prefix}{site.name}"

    async def publish(self, site: SiteProject) -> str:
        """Publish one project and return its remote URL.

        Raises:
            PublishFailed: If any step fails; later steps are not attempted.
        """
        console.print(f"\n  -> Publishing: [bold]{site.name}[/bold]")
        full_name = self.remote_name(site)
        try:
            await self.vcs.init(site.path)
            await self.vcs.add_all(site.path)
            await self.vcs.commit(site.path, self.commit_message)

            for remote in await self.vcs.list_remotes(site.path):
                await self.vcs.remove_remote(site.path, remote)

            console.print(f"     Creating and pushing private repository: {full_name}")
            url = await self.host.create_private_repo(site.path, full_name)
        except (CommandError, OSError) as exc:
            raise PublishFailed(site.name, exc) from exc

        site.remote_url = url
        console.print(f"  [green]{site.name} published:[/green] {url}")
        return url

    async def publish_all(self, sites: list[SiteProject]) -> dict[str, str]:
        """Publish *sites* in order, returning ``{site name: remote URL}``."""
        published: dict[str, str] = {}
        for site in sites:
            published[site.name] = await self.publish(site)
        return published
