"""Tests for efficiency.py"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from mahjong_trainer.core.tile import Tile, make_pool, make_tiles_from_string, pool_for_tiles
from mahjong_trainer.rules.efficiency import best_shanten_after_discard, get_efficiency
from mahjong_trainer.rules.shanten import ShantenCache


def T(s):
    return make_tiles_from_string(s)


@pytest.fixture
def single_suit_result():
    # 1234679s + 8s: four discards reach tenpai with two 3-copy waits each
    return get_efficiency(T("1234679s"), Tile.from_code("8s"), make_pool(1), ShantenCache())


class TestGetEfficiency:
    def test_shanten_before_and_after(self, single_suit_result):
        assert single_suit_result.initial_shanten == 1
        assert single_suit_result.best_shanten == 0

    def test_best_discards(self, single_suit_result):
        assert single_suit_result.max_ukeire == 6
        assert [t.code for t in single_suit_result.best_discards] == ["1s", "4s", "6s", "9s"]
        assert len(single_suit_result.all_results) == 4

    def test_accepted_tiles_for_discard(self, single_suit_result):
        option = next(o for o in single_suit_result.all_results
                      if o.discard == Tile.from_code("4s"))
        assert option.shanten == 0
        assert [(a.tile.code, a.count) for a in option.accepted_tiles] == [("6s", 3), ("9s", 3)]

    def test_accepted_counts_reflect_live_copies(self, single_suit_result):
        full = T("12346789s")
        for option in single_suit_result.all_results:
            for a in option.accepted_tiles:
                assert a.count == max(0, 4 - full.count(a.tile))
            assert option.ukeire == sum(a.count for a in option.accepted_tiles)

    def test_discarded_value_never_accepted(self, single_suit_result):
        for option in single_suit_result.all_results:
            assert option.discard not in [a.tile for a in option.accepted_tiles]

    def test_multi_suit_stays_one_shanten(self):
        base = T("123s3467m")
        drawn = Tile.from_code("9p")
        eff = get_efficiency(base, drawn, pool_for_tiles(base + [drawn]), ShantenCache())
        assert eff.initial_shanten == 1
        assert eff.best_shanten == 1
        assert all(o.shanten == 1 for o in eff.all_results)
        ukeires = [o.ukeire for o in eff.all_results]
        assert ukeires == sorted(ukeires, reverse=True)
        assert eff.max_ukeire == ukeires[0]

    def test_top_n_truncates(self):
        eff = get_efficiency(T("1234679s"), Tile.from_code("8s"), make_pool(1),
                             ShantenCache(), top_n=2)
        assert len(eff.all_results) == 2
        # best_discards is taken before truncation
        assert len(eff.best_discards) == 4

    def test_to_dict(self, single_suit_result):
        d = single_suit_result.to_dict()
        assert d["drawn_tile"] == "8s"
        assert d["best_discards"] == ["1s", "4s", "6s", "9s"]
        assert d["all_results"][0]["accepted_tiles"][0]["count"] == 3


class TestBestShantenAfterDiscard:
    def test_reaches_tenpai(self):
        assert best_shanten_after_discard(T("12346789s"), make_pool(1), ShantenCache()) == 0

    def test_stays_one_shanten(self):
        tiles = T("123s3467m9p")
        assert best_shanten_after_discard(tiles, pool_for_tiles(tiles), ShantenCache()) == 1
