"""Exception taxonomy for the batch site generator.

Every fatal condition raised by the pipeline derives from ``BatchError`` so the
orchestrator can report it uniformly and exit non-zero.  ``CatalogWriteWarning``
is the one non-fatal member: the materializer catches it, prints it and keeps
going.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class BatchError(Exception):
    """Base class for every error raised by the batch pipeline."""


class ConfigError(BatchError):
    """Raised when a configuration file cannot be read or parsed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Could not load configuration from {self.path}: {reason}")


class DependencyError(BatchError):
    """Raised by the preflight checks when a required tool is missing or unusable."""


class InvalidNameFormat(BatchError):
    """Raised when a project name does not end in an integer."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Cannot extract a site number from '{name}' "
            "(expected a name ending in digits, e.g. site47)."
        )


class NameConflict(BatchError):
    """Raised when sequential project names already exist in the workspace."""

    def __init__(self, conflicts: Iterable[str]) -> None:
        self.conflicts = sorted(conflicts, key=_natural_key)
        super().__init__(
            "Project folders already exist: " + ", ".join(self.conflicts)
        )


class TemplateNotFound(BatchError):
    """Raised when the template project directory cannot be found."""

    def __init__(self, template_name: str, searched_from: str | Path) -> None:
        self.template_name = template_name
        self.searched_from = Path(searched_from)
        super().__init__(
            f"Template folder '{template_name}' not found in {self.searched_from} "
            "or any of its parent directories."
        )


class MissingTemplateFile(BatchError):
    """Raised when the template lacks one of its required resources."""

    def __init__(self, template_path: str | Path, resource: str) -> None:
        self.template_path = Path(template_path)
        self.resource = resource
        super().__init__(f"Template project {self.template_path} is missing {resource}")


class RangeTooSmall(BatchError):
    """Raised when the games-count range cannot give every site a distinct value."""

    def __init__(self, games_min: int, games_max: int, total_sites: int) -> None:
        self.games_min = games_min
        self.games_max = games_max
        self.total_sites = total_sites
        width = max(games_max - games_min + 1, 0)
        super().__init__(
            f"Games range [{games_min}, {games_max}] holds {width} value(s), "
            f"fewer than the {total_sites} site(s) to create. Widen the range."
        )


class InsufficientEligibleGames(BatchError):
    """Raised when the template catalog cannot satisfy the configured maximum."""

    def __init__(self, eligible: int, required: int) -> None:
        self.eligible = eligible
        self.required = required
        super().__init__(
            f"Template has only {eligible} html5 game(s), "
            f"cannot satisfy the maximum of {required}."
        )


class MaterializationFailed(BatchError):
    """Raised when a project directory cannot be created from the template."""

    def __init__(self, project_name: str, message: str) -> None:
        self.project_name = project_name
        super().__init__(f"Failed to create {project_name}: {message}")


class PrefixSpaceExhausted(BatchError):
    """Raised when a base domain cannot get enough distinct random subdomains."""

    def __init__(self, prefix_length: int, subdomain_count: int, capacity: int) -> None:
        self.prefix_length = prefix_length
        self.subdomain_count = subdomain_count
        self.capacity = capacity
        super().__init__(
            f"Prefix length {prefix_length} allows {capacity} distinct subdomain(s) "
            f"per base domain, fewer than the {subdomain_count} requested."
        )


class MappingWriteFailed(BatchError):
    """Raised when the site mapping file cannot be written."""

    def __init__(self, path: str | Path, cause: BaseException | str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not write site mapping {self.path}: {cause}")


class CatalogWriteWarning(BatchError):
    """Non-fatal problem while trimming a project's game catalog."""


class PublishFailed(BatchError):
    """Raised when any publish step fails for a project."""

    def __init__(self, project_name: str, cause: BaseException | str) -> None:
        self.project_name = project_name
        self.cause = cause
        super().__init__(f"Publishing {project_name} failed: {cause}")


def _natural_key(name: str) -> tuple[str, int]:
    head = name.rstrip("0123456789")
    tail = name[len(head):]
    return (head, int(tail) if tail else -1)
