"""Version-control and remote-hosting capabilities.

The publisher depends only on the two narrow protocols defined here,
``VcsClient`` and ``RemoteHostClient``.  The shipped implementations drive the
``git`` and ``gh`` command-line tools; tests substitute in-memory fakes.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

GITHUB_URL = "https://github.com"


class CommandError(Exception):
    """Raised when an external version-control or hosting command fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


async def _run_tool(
    program: str,
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 120.0,
) -> tuple[str, str]:
    """Run a tool asynchronously and return (stdout, stderr).

    Raises CommandError if the tool is missing, times out or exits non-zero.
    """
    cmd = [program] + list(args)
    cmd_str = " ".join(cmd)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError as exc:
        raise CommandError(
            f"Executable not found: {program}", command=cmd_str
        ) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        raise CommandError(
            f"Command timed out after {timeout}s: {cmd_str}",
            command=cmd_str,
        )

    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

    if process.returncode != 0:
        raise CommandError(
            f"Command failed (exit {process.returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
        )

    return stdout, stderr


# ---------------------------------------------------------------------------
# Capability contracts
# ---------------------------------------------------------------------------


class VcsClient(Protocol):
    """Local version-control operations on a project directory."""

    async def is_available(self) -> bool: ...

    async def init(self, path: Path) -> None: ...

    async def add_all(self, path: Path) -> None: ...

    async def commit(self, path: Path, message: str) -> None: ...

    async def list_remotes(self, path: Path) -> list[str]: ...

    async def remove_remote(self, path: Path, name: str) -> None: ...


class RemoteHostClient(Protocol):
    """Remote repository hosting operations."""

    async def is_installed(self) -> bool: ...

    async def is_authenticated(self) -> tuple[bool, str]: ...

    async def create_private_repo(self, path: Path, full_name: str) -> str: ...


# ---------------------------------------------------------------------------
# git
# ---------------------------------------------------------------------------


class GitClient:
    """``VcsClient`` backed by the ``git`` executable."""

    def __init__(self, executable: str = "git", timeout: float = 60.0) -> None:
        self.executable = executable
        self.timeout = timeout

    async def _git(self, *args: str, cwd: Path | None = None) -> str:
        stdout, _ = await _run_tool(self.executable, *args, cwd=cwd, timeout=self.timeout)
        return stdout

    async def is_available(self) -> bool:
        try:
            await self._git("--version")
        except CommandError:
            return False
        return True

    async def init(self, path: Path) -> None:
        await self._git("init", cwd=path)

    async def add_all(self, path: Path) -> None:
        await self._git("add", ".", cwd=path)

    async def commit(self, path: Path, message: str) -> None:
        await self._git("commit", "-m", message, cwd=path)

    async def list_remotes(self, path: Path) -> list[str]:
        stdout = await self._git("remote", cwd=path)
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    async def remove_remote(self, path: Path, name: str) -> None:
        await self._git("remote", "remove", name, cwd=path)


# ---------------------------------------------------------------------------
# GitHub CLI
# ---------------------------------------------------------------------------


class GitHubCliClient:
    """``RemoteHostClient`` backed by the GitHub CLI (``gh``).

    Authentication is whatever ``gh auth login`` set up; this client never
    handles credentials itself.
    """

    def __init__(self, executable: str = "gh", timeout: float = 300.0) -> None:
        self.executable = executable
        self.timeout = timeout

    async def is_installed(self) -> bool:
        try:
            await _run_tool(self.executable, "--version", timeout=30.0)
        except CommandError:
            return False
        return True

    async def is_authenticated(self) -> tuple[bool, str]:
        """Return ``(True, "")`` when logged in, else ``(False, <gh stderr>)``."""
        try:
            await _run_tool(self.executable, "auth", "status", timeout=30.0)
        except CommandError as exc:
            return False, exc.stderr or str(exc)
        return True, ""

    async def create_private_repo(self, path: Path, full_name: str) -> str:
        """Create ``full_name`` as a private repo from *path* and push to it.

        Returns:
            The repository URL reported by ``gh`` (or derived from the name).
        """
        stdout, _ = await _run_tool(
            self.executable,
            "repo",
            "create",
            full_name,
            "--source=.",
            "--push",
            "--private",
            cwd=path,
            timeout=self.timeout,
        )
        for line in stdout.splitlines():
            line = line.strip()
            if line.startswith(GITHUB_URL):
                return line
        return f"{GITHUB_URL}/{full_name}"
