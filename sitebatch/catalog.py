"""Game catalog filtering and per-site partitioning.

Two independent random draws happen per batch:

* ``plan_counts`` gives every site a distinct catalog size by shuffling the
  whole ``[games_min, games_max]`` range and taking a prefix of it.
* ``select_games`` picks which eligible games a single site receives, using a
  fresh shuffle on every call.

Both use ``random.Random.shuffle`` (Fisher-Yates), never rejection sampling.
"""

from __future__ import annotations

import random
from typing import Any

from sitebatch.errors import InsufficientEligibleGames, RangeTooSmall
from sitebatch.utils import print_warning

ELIGIBLE_TAG = "html5"


def is_eligible(game: Any) -> bool:
    """Return ``True`` for catalog records carrying the ``html5`` tag."""
    if not isinstance(game, dict):
        return False
    tags = game.get("tags")
    return isinstance(tags, list) and ELIGIBLE_TAG in tags


def catalog_games(catalog: dict[str, Any]) -> list[Any]:
    """Return the ``games`` list of a catalog document (empty if absent)."""
    games = catalog.get("games")
    return games if isinstance(games, list) else []


class CatalogPartitioner:
    """Draws per-site game counts and per-site game subsets.

    Args:
        rng: Source of randomness. Tests pass a seeded ``random.Random``.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def eligible_games(self, catalog: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the catalog's ``html5``-tagged records, in catalog order."""
        return [game for game in catalog_games(catalog) if is_eligible(game)]

    def ensure_capacity(self, catalog: dict[str, Any], games_max: int) -> int:
        """Check the catalog can supply *games_max* eligible games.

        Returns:
            The number of eligible games.

        Raises:
            InsufficientEligibleGames: If fewer than *games_max* are eligible.
        """
        eligible = len(self.eligible_games(catalog))
        if eligible < games_max:
            raise InsufficientEligibleGames(eligible, games_max)
        return eligible

    def plan_counts(self, games_min: int, games_max: int, total_sites: int) -> list[int]:
        """Return *total_sites* distinct counts drawn from ``[games_min, games_max]``.

        Raises:
            RangeTooSmall: If the range holds fewer integers than *total_sites*.
        """
        possible = list(range(games_min, games_max + 1))
        if len(possible) < total_sites:
            raise RangeTooSmall(games_min, games_max, total_sites)
        self.rng.shuffle(possible)
        return possible[:total_sites]

    def select_games(self, catalog: dict[str, Any], count: int) -> list[dict[str, Any]]:
        """Return ``min(count, eligible)`` randomly chosen eligible games.

        The catalog itself is not modified.
        """
        eligible = self.eligible_games(catalog)
        if len(eligible) < count:
            print_warning(
                f"     html5 games available ({len(eligible)}) fewer than requested "
                f"({count}); using all of them."
            )
        self.rng.shuffle(eligible)
        return eligible[:count]
