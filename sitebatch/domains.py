"""Expansion of base domains into base + random-subdomain variants."""

from __future__ import annotations

import random
import string

from sitebatch.errors import PrefixSpaceExhausted

PREFIX_ALPHABET = string.ascii_lowercase + string.digits


class DomainPlanner:
    """Plans the ordered list of domains one batch run will serve.

    Args:
        rng: Source of randomness. Tests pass a seeded ``random.Random``.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def random_prefix(self, length: int) -> str:
        """Return *length* characters drawn from ``[a-z0-9]``."""
        return "".join(self.rng.choice(PREFIX_ALPHABET) for _ in range(length))

    def expand(
        self,
        base_domains: list[str],
        subdomain_count: int,
        prefix_length: int,
    ) -> list[str]:
        """Return each base domain followed by its generated subdomains.

        ``expand(["a.com"], 2, 5)`` gives ``["a.com", "x1y2z.a.com",
        "k9m3q.a.com"]``.  A generated domain that was already produced in this
        call is redrawn, so the result never repeats a domain.

        Raises:
            PrefixSpaceExhausted: If *prefix_length* cannot yield
                *subdomain_count* distinct prefixes.
        """
        if subdomain_count > 0:
            capacity = len(PREFIX_ALPHABET) ** prefix_length if prefix_length >= 1 else 0
            if subdomain_count > capacity:
                raise PrefixSpaceExhausted(prefix_length, subdomain_count, capacity)

        planned: list[str] = []
        seen: set[str] = set()
        for base in base_domains:
            planned.append(base)
            seen.add(base)
            for _ in range(subdomain_count):
                domain = f"{self.random_prefix(prefix_length)}.{base}"
                while domain in seen:
                    domain = f"{self.random_prefix(prefix_length)}.{base}"
                planned.append(domain)
                seen.add(domain)
        return planned
