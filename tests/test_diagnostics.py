"""Tests for diagnostics.py"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import random

import pytest

from mahjong_trainer.core.tile import make_tiles_from_string
from mahjong_trainer.engine.diagnostics import (
    REFERENCE_HANDS, EstimatorComparison, compare_estimators, run_shanten_self_check,
)
from mahjong_trainer.rules.shanten import ShantenCache, calculate_shanten, fast_shanten


class TestSelfCheck:
    def test_all_reference_hands_pass(self):
        results = run_shanten_self_check()
        assert len(results) == len(REFERENCE_HANDS)
        failed = [r.name for r in results if not r.passed]
        assert failed == []

    def test_clears_given_cache(self):
        cache = ShantenCache()
        cache.put(((0,) * 27, (0,)), 2)
        run_shanten_self_check(cache)
        assert ((0,) * 27, (0,)) not in cache


class TestEstimatorComparison:
    def test_record(self):
        comparison = EstimatorComparison()
        comparison.record(1, 1)
        comparison.record(4, 3)
        comparison.record(2, 1)
        assert comparison.samples == 3
        assert comparison.agreements == 2
        assert comparison.confusion[(2, 1)] == 1
        assert abs(comparison.agreement_rate - 2 / 3) < 1e-9

    def test_empty_rate(self):
        assert EstimatorComparison().agreement_rate == 0.0

    def test_compare_estimators(self):
        comparison = compare_estimators(7, 1, 30, rng=random.Random(31))
        assert comparison.samples == 30
        assert sum(comparison.confusion.values()) == 30
        assert 0.0 <= comparison.agreement_rate <= 1.0

    @pytest.mark.parametrize("size,suits,samples", [(7, 2, 20), (13, 1, 12)])
    def test_agreement_matches_confusion(self, size, suits, samples):
        comparison = compare_estimators(size, suits, samples, rng=random.Random(size))
        assert comparison.samples == samples
        agreeing = sum(n for (fast, exact), n in comparison.confusion.items()
                       if min(fast, 3) == exact)
        assert comparison.agreements == agreeing
        assert all(0 <= exact <= 3 for _, exact in comparison.confusion)

    def test_thirteen_tile_fast_zero_can_hide_one_shanten(self):
        # 3 sets + 2 proto-melds with no pair: the estimate says tenpai,
        # but a draw only completes one proto and leaves a lone tile
        hand = make_tiles_from_string("123s456s789s13m57m")
        assert fast_shanten(hand) == 0
        assert calculate_shanten(hand, cache=ShantenCache()) == 1
