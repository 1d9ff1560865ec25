"""Sequential project naming and workspace collision detection.

Project names have the form ``<prefix><integer>`` (``site47``).  A batch of K
projects takes K consecutive numbers starting at the user-chosen base.  The
allocator only *reports* names that already exist; it never skips past them.
"""

from __future__ import annotations

import re
from pathlib import Path

from sitebatch.errors import InvalidNameFormat, NameConflict

_NAME_RE = re.compile(r"^(?P<prefix>.*?)(?P<number>\d+)$")


def parse_site_name(name: str) -> tuple[str, int]:
    """Split ``site47`` into ``("site", 47)``.

    Raises:
        InvalidNameFormat: If the name does not end in an integer.
    """
    match = _NAME_RE.match(name.strip())
    if not match:
        raise InvalidNameFormat(name)
    return match.group("prefix"), int(match.group("number"))


class NameAllocator:
    """Derives sequential project names and checks them against the workspace."""

    def __init__(self, workspace_root: str | Path) -> None:
        self.workspace_root = Path(workspace_root)

    def candidate_names(self, starting_name: str, count: int) -> list[str]:
        """Return ``count`` names counting up from *starting_name*.

        Zero padding in the starting number is kept as a minimum width, so
        ``site007`` continues with ``site008``.
        """
        prefix, base = parse_site_name(starting_name)
        width = len(starting_name.strip()) - len(prefix)
        return [f"{prefix}{base + offset:0{width}d}" for offset in range(count)]

    def find_conflicts(self, starting_name: str, count: int) -> set[str]:
        """Return the candidate names that already exist under the workspace root."""
        return {
            name
            for name in self.candidate_names(starting_name, count)
            if (self.workspace_root / name).exists()
        }

    def require_free(self, starting_name: str, count: int) -> list[str]:
        """Return the candidate names, or raise ``NameConflict`` if any are taken."""
        conflicts = self.find_conflicts(starting_name, count)
        if conflicts:
            raise NameConflict(conflicts)
        return self.candidate_names(starting_name, count)
