"""Tests for generator.py"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import random

import pytest

from mahjong_trainer.core.hand import has_exact_quad, has_invalid_tile_count
from mahjong_trainer.core.tile import make_pool, make_tiles_from_string
from mahjong_trainer.engine.config import GeneratorConfig, Level
from mahjong_trainer.engine.generator import (
    FALLBACK_HANDS, GenerationStatus, generate_by_breaking, generate_complete_hand,
    generate_efficiency_hand, generate_not_tenpai_hand, generate_rehab_hand,
)
from mahjong_trainer.rules.agari import decompose, get_waits, is_win
from mahjong_trainer.rules.shanten import (
    ShantenCache, calculate_shanten, clear_shanten_cache, default_cache,
)


def assert_waits_sound(hand, waits, pool):
    for tile in pool:
        if hand.count(tile) >= 4:
            assert tile not in waits
            continue
        assert (tile in waits) == is_win(hand + [tile])


class TestRehabHand:
    def test_single_suit_easy(self):
        outcome = generate_rehab_hand(7, "Easy", 1, rng=random.Random(1))
        assert outcome.status == GenerationStatus.FOUND
        puzzle = outcome.puzzle
        assert len(puzzle.hand) == 7
        assert puzzle.hand == sorted(puzzle.hand)
        assert puzzle.is_tenpai
        assert puzzle.waits
        assert_waits_sound(puzzle.hand, puzzle.waits, puzzle.pool)

    def test_level_accepts_enum(self):
        outcome = generate_rehab_hand(7, Level.MEDIUM, 2, rng=random.Random(2))
        assert outcome.found
        assert len(outcome.puzzle.pool) == 18

    def test_multi_suit_has_no_quads(self):
        rng = random.Random(3)
        for _ in range(10):
            puzzle = generate_rehab_hand(7, Level.HARD, 2, rng=rng).puzzle
            assert not has_exact_quad(puzzle.hand)
            assert not has_invalid_tile_count(puzzle.hand)

    @pytest.mark.parametrize("size,waits", [
        (7, ["2s", "5s", "8s"]),
        (13, ["1s", "4s", "7s"]),
    ])
    def test_exhausted_uses_fallback(self, size, waits):
        config = GeneratorConfig(rehab_max_attempts=0)
        outcome = generate_rehab_hand(size, Level.EASY, 1, config, random.Random(4))
        assert outcome.status == GenerationStatus.EXHAUSTED_FALLBACK
        puzzle = outcome.puzzle
        assert len(puzzle.hand) == size
        assert puzzle.hand == make_tiles_from_string(FALLBACK_HANDS[size])
        assert [t.code for t in puzzle.waits] == waits

    @pytest.mark.parametrize("suits", [1, 2, 3])
    def test_fallback_fits_every_pool(self, suits):
        config = GeneratorConfig(rehab_max_attempts=0)
        for size in (7, 13):
            puzzle = generate_rehab_hand(size, Level.EASY, suits, config,
                                         random.Random(9)).puzzle
            assert len(puzzle.waits) == 3
            assert_waits_sound(puzzle.hand, puzzle.waits, puzzle.pool)

    @pytest.mark.parametrize("suits,level,seed", [
        (1, Level.MEDIUM, 41),
        (2, Level.EASY, 42),
        (3, Level.EASY, 43),
    ])
    def test_thirteen_tiles(self, suits, level, seed):
        config = GeneratorConfig(rehab_max_attempts=10000)
        outcome = generate_rehab_hand(13, level, suits, config, random.Random(seed))
        assert outcome.status == GenerationStatus.FOUND
        puzzle = outcome.puzzle
        assert len(puzzle.hand) == 13
        assert puzzle.waits
        assert_waits_sound(puzzle.hand, puzzle.waits, puzzle.pool)

    def test_hard_can_serve_not_tenpai(self):
        config = GeneratorConfig(not_tenpai_chance=1.0)
        outcome = generate_rehab_hand(7, Level.HARD, 1, config, random.Random(5))
        assert outcome.found
        assert not outcome.puzzle.is_tenpai
        assert outcome.puzzle.waits == []

    def test_easy_mostly_few_waits(self):
        rng = random.Random(6)
        counts = [len(generate_rehab_hand(7, Level.EASY, 1, rng=rng).puzzle.waits)
                  for _ in range(40)]
        assert all(c >= 1 for c in counts)
        assert sum(1 for c in counts if c <= 3) > 24

    @pytest.mark.parametrize("size,suits,level", [
        (8, 1, "Easy"),
        (7, 0, "Easy"),
        (7, 4, "Easy"),
        (7, 1, "Expert"),
    ])
    def test_invalid_parameters(self, size, suits, level):
        with pytest.raises(ValueError):
            generate_rehab_hand(size, level, suits)


class TestNotTenpaiHand:
    def test_has_no_waits(self):
        outcome = generate_not_tenpai_hand(7, 1, rng=random.Random(7))
        assert outcome.found
        puzzle = outcome.puzzle
        assert len(puzzle.hand) == 7
        assert get_waits(puzzle.hand, puzzle.pool) == []

    def test_exhausted_fails(self):
        config = GeneratorConfig(not_tenpai_max_attempts=0)
        outcome = generate_not_tenpai_hand(7, 1, config, random.Random(8))
        assert outcome.failed
        assert outcome.puzzle is None


class TestEfficiencyHand:
    @pytest.mark.parametrize("suits,seed", [(1, 11), (2, 12)])
    def test_puzzle_constraints(self, suits, seed):
        outcome = generate_efficiency_hand(7, suits, rng=random.Random(seed))
        assert outcome.status == GenerationStatus.FOUND
        puzzle = outcome.puzzle
        assert len(puzzle.base_hand) == 7
        assert len(puzzle.hand) == 8
        assert puzzle.drawn_tile in puzzle.hand

        cache = ShantenCache()
        assert calculate_shanten(puzzle.base_hand, puzzle.pool, cache) in (1, 2)
        eff = puzzle.efficiency
        assert eff.best_shanten == 1
        assert eff.max_ukeire > 3
        assert eff.best_discards

    @pytest.mark.parametrize("suits,seed", [(1, 100), (1, 101), (2, 102)])
    def test_thirteen_tiles(self, suits, seed):
        outcome = generate_efficiency_hand(13, suits, rng=random.Random(seed))
        assert outcome.status == GenerationStatus.FOUND
        puzzle = outcome.puzzle
        assert len(puzzle.base_hand) == 13
        assert len(puzzle.hand) == 14
        cache = ShantenCache()
        assert calculate_shanten(puzzle.base_hand, puzzle.pool, cache) in (1, 2)
        assert puzzle.efficiency.best_shanten == 1

    def test_breaking_single_suit_thirteen(self):
        # Fast estimates of 0 must not stall the breaking loop
        outcome = generate_by_breaking(13, 1, rng=random.Random(103))
        assert outcome.found
        assert len(outcome.puzzle.base_hand) == 13

    def test_session_cache_does_not_touch_default(self):
        clear_shanten_cache()
        generate_efficiency_hand(7, 1, rng=random.Random(13))
        assert len(default_cache()) == 0

    def test_shared_cache_is_filled(self):
        cache = ShantenCache()
        generate_efficiency_hand(7, 1, rng=random.Random(14), cache=cache)
        assert len(cache) > 0

    def test_to_dict(self):
        outcome = generate_efficiency_hand(7, 1, rng=random.Random(15))
        d = outcome.to_dict()
        assert d["status"] == "found"
        assert len(d["puzzle"]["hand"]) == 8
        assert d["puzzle"]["drawn_tile"] in d["puzzle"]["hand"]


class TestBreaking:
    def test_complete_hand_decomposes(self):
        rng = random.Random(21)
        for _ in range(20):
            hand = generate_complete_hand(7, ["s", "m"], rng)
            assert len(hand) == 8
            pair, melds = decompose(hand)
            assert len(melds) == 2
            assert {t.suit_char for t in hand} <= {"s", "m"}

    def test_breaking_multi_suit(self):
        outcome = generate_by_breaking(7, 3, rng=random.Random(22))
        assert outcome.found
        puzzle = outcome.puzzle
        assert not has_exact_quad(puzzle.hand)
        assert puzzle.efficiency.best_shanten == 1
        assert puzzle.efficiency.max_ukeire > 3

    def test_exhausted_fails(self):
        config = GeneratorConfig(breaking_max_attempts=0)
        outcome = generate_by_breaking(7, 2, make_pool(2), config, random.Random(23))
        assert outcome.status == GenerationStatus.FAILED
