# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""Tests for reaction pools and ShuffleCycle."""

import random

import pytest

from kopi_rush.reactions import (
    CORRECT_REACTIONS,
    CROWD_COMMENTS,
    QUOTES,
    WRONG_REACTIONS,
    ShuffleCycle,
)


class TestPools:
    """Tests for the text pools."""

    @pytest.mark.parametrize("pool", [WRONG_REACTIONS, CORRECT_REACTIONS, QUOTES, CROWD_COMMENTS])
    def test_non_empty_and_unique(self, pool):
        assert pool
        assert all(line.strip() for line in pool)
        assert len(pool) == len(set(pool))


class TestShuffleCycle:
    """Tests for ShuffleCycle."""

    def test_no_repeats_within_a_cycle(self):
        items = list("abcdefg")
        cycle = ShuffleCycle(items, random.Random(3))
        dealt = [cycle.next() for _ in range(len(items))]
        assert sorted(dealt) == sorted(items)

    def test_reshuffles_after_exhaustion(self):
        items = [1, 2, 3]
        cycle = ShuffleCycle(items, random.Random(9))
        dealt = [cycle.next() for _ in range(9)]
        for start in (0, 3, 6):
            assert sorted(dealt[start:start + 3]) == items

    def test_seeded_order_repeats(self):
        a = ShuffleCycle(WRONG_REACTIONS, random.Random(42))
        b = ShuffleCycle(WRONG_REACTIONS, random.Random(42))
        assert [a.next() for _ in range(20)] == [b.next() for _ in range(20)]

    def test_reset_starts_a_new_cycle(self):
        cycle = ShuffleCycle(list(range(5)), random.Random(1))
        cycle.next()
        cycle.reset()
        assert sorted(cycle.next() for _ in range(5)) == list(range(5))

    def test_len(self):
        assert len(ShuffleCycle(QUOTES)) == len(QUOTES)

    def test_single_item(self):
        cycle = ShuffleCycle(["only"])
        assert [cycle.next() for _ in range(3)] == ["only"] * 3

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            ShuffleCycle([])
