"""Unit tests for domain expansion (sitebatch.domains)."""

from __future__ import annotations

import random
import re

import pytest

from sitebatch.domains import PREFIX_ALPHABET, DomainPlanner
from sitebatch.errors import PrefixSpaceExhausted

pytestmark = pytest.mark.unit


class TestRandomPrefix:
    @pytest.mark.parametrize("length", [3, 5, 10])
    def test_length_and_alphabet(self, rng, length: int):
        prefix = DomainPlanner(rng).random_prefix(length)
        assert len(prefix) == length
        assert set(prefix) <= set(PREFIX_ALPHABET)

    def test_alphabet_is_lowercase_and_digits(self):
        assert PREFIX_ALPHABET == "abcdefghijklmnopqrstuvwxyz0123456789"


class TestExpand:
    def test_single_base_two_subdomains(self, rng):
        domains = DomainPlanner(rng).expand(["a.com"], 2, 5)
        assert len(domains) == 3
        assert domains[0] == "a.com"
        assert domains[1] != domains[2]
        for sub in domains[1:]:
            assert re.fullmatch(r"[a-z0-9]{5}\.a\.com", sub)

    def test_no_subdomains(self, rng):
        assert DomainPlanner(rng).expand(["a.com", "b.io"], 0, 5) == ["a.com", "b.io"]

    def test_each_base_followed_by_its_subdomains(self, rng):
        domains = DomainPlanner(rng).expand(["a.com", "b.io"], 2, 4)
        assert len(domains) == 6
        assert domains[0] == "a.com"
        assert all(d.endswith(".a.com") for d in domains[1:3])
        assert domains[3] == "b.io"
        assert all(d.endswith(".b.io") for d in domains[4:6])

    def test_empty_bases(self, rng):
        assert DomainPlanner(rng).expand([], 3, 5) == []

    def test_repeated_draw_is_redrawn(self):
        planner = DomainPlanner(random.Random(0))
        prefixes = iter(["aaa", "aaa", "bbb"])
        planner.random_prefix = lambda length: next(prefixes)
        assert planner.expand(["a.com"], 2, 3) == ["a.com", "aaa.a.com", "bbb.a.com"]

    def test_all_domains_unique_for_many_seeds(self):
        for seed in range(50):
            domains = DomainPlanner(random.Random(seed)).expand(["a.com", "b.com"], 5, 3)
            assert len(set(domains)) == len(domains) == 12

    def test_zero_prefix_length_rejected(self, rng):
        with pytest.raises(PrefixSpaceExhausted) as excinfo:
            DomainPlanner(rng).expand(["a.com"], 2, 0)
        assert excinfo.value.capacity == 0

    def test_more_subdomains_than_prefixes_rejected(self, rng):
        with pytest.raises(PrefixSpaceExhausted, match="36 distinct"):
            DomainPlanner(rng).expand(["a.com"], 37, 1)

    def test_full_prefix_space_used(self, rng):
        domains = DomainPlanner(rng).expand(["a.com"], 36, 1)
        assert len(set(domains)) == 37

    def test_zero_prefix_length_allowed_without_subdomains(self, rng):
        assert DomainPlanner(rng).expand(["a.com"], 0, 0) == ["a.com"]
