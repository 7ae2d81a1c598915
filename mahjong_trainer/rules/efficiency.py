"""Tile efficiency (牌効率) - rank discards by ukeire (受け入れ).

For a base hand plus one drawn tile, every distinct discard is scored by the
exact shanten it leaves, and the discards reaching the best shanten are
ranked by how many live tiles would improve the hand further.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from mahjong_trainer.core.tile import (
    ALL_TILES, MAX_COPIES, NUM_KINDS, Tile, neighbor_indices, tiles_to_array,
    tiles_to_codes,
)
from mahjong_trainer.rules.agari import is_win_array
from mahjong_trainer.rules.shanten import (
    ShantenCache, default_cache, pool_indices, shanten_array,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_RESULTS = 5


@dataclass(frozen=True)
class AcceptedTile:
    """A tile that improves the hand, with its remaining live copies."""
    tile: Tile
    count: int

    def to_dict(self) -> dict:
        return {"tile": self.tile.code, "count": self.count}


@dataclass(frozen=True)
class DiscardOption:
    """Result of discarding one tile from the full hand."""
    discard: Tile
    shanten: int
    ukeire: int
    accepted_tiles: Tuple[AcceptedTile, ...]

    def to_dict(self) -> dict:
        return {
            "discard": self.discard.code,
            "shanten": self.shanten,
            "ukeire": self.ukeire,
            "accepted_tiles": [a.to_dict() for a in self.accepted_tiles],
        }


@dataclass(frozen=True)
class EfficiencyResult:
    """Ranked discards for a (base hand, drawn tile) pair.

    Attributes:
        drawn_tile: The tile added to the base hand
        initial_shanten: Exact shanten of the base hand before the draw
        best_shanten: Best shanten reachable with a single discard
        max_ukeire: Highest ukeire among discards reaching best_shanten
        best_discards: Every discard tying on max_ukeire
        all_results: Top discards by ukeire, descending
    """
    drawn_tile: Tile
    initial_shanten: int
    best_shanten: int
    max_ukeire: int
    best_discards: Tuple[Tile, ...]
    all_results: Tuple[DiscardOption, ...]

    def to_dict(self) -> dict:
        return {
            "drawn_tile": self.drawn_tile.code,
            "initial_shanten": self.initial_shanten,
            "best_shanten": self.best_shanten,
            "max_ukeire": self.max_ukeire,
            "best_discards": tiles_to_codes(self.best_discards),
            "all_results": [r.to_dict() for r in self.all_results],
        }


def get_efficiency(base_hand: Iterable[Tile], drawn_tile: Tile,
                   pool: Iterable[Tile], cache: Optional[ShantenCache] = None,
                   top_n: int = DEFAULT_TOP_RESULTS) -> EfficiencyResult:
    """Rank every discard of base_hand + drawn_tile by ukeire."""
    if cache is None:
        cache = default_cache()
    pool_idx = pool_indices(pool)

    full = tiles_to_array(base_hand)
    initial_shanten = shanten_array(list(full), pool_idx, cache)
    full[drawn_tile.index] += 1

    # Shanten left by each distinct discard
    discard_shanten = {}
    for discard in range(NUM_KINDS):
        if full[discard] == 0:
            continue
        full[discard] -= 1
        discard_shanten[discard] = shanten_array(full, pool_idx, cache)
        full[discard] += 1
    best_shanten = min(discard_shanten.values())

    options: List[DiscardOption] = []
    for discard, current in discard_shanten.items():
        if current != best_shanten:
            continue
        after = list(full)
        after[discard] -= 1
        accepted = _accepted_tiles(after, full, discard, current, pool_idx, cache)
        ukeire = sum(a.count for a in accepted)
        options.append(DiscardOption(ALL_TILES[discard], current, ukeire,
                                     tuple(accepted)))

    options.sort(key=lambda o: o.ukeire, reverse=True)
    max_ukeire = options[0].ukeire if options else 0
    logger.debug("Efficiency for +%s: best shanten %d, max ukeire %d, %r",
                 drawn_tile, best_shanten, max_ukeire, cache)

    return EfficiencyResult(
        drawn_tile=drawn_tile,
        initial_shanten=initial_shanten,
        best_shanten=best_shanten,
        max_ukeire=max_ukeire,
        best_discards=tuple(o.discard for o in options if o.ukeire == max_ukeire),
        all_results=tuple(options[:top_n]),
    )


def _accepted_tiles(hand: List[int], full: List[int], discard: int,
                    current: int, pool: Tuple[int, ...],
                    cache: ShantenCache) -> List[AcceptedTile]:
    """Tiles that win (at tenpai) or lower the shanten of `hand`.

    Only tiles within rank distance 2 of the hand can join a meld or
    proto-meld, so the rest of the pool is never tested.
    """
    pool_set = set(pool)
    accepted = []
    for draw in neighbor_indices(hand):
        if draw not in pool_set or draw == discard:
            continue
        count = max(0, MAX_COPIES - full[draw])
        if count == 0:
            continue

        hand[draw] += 1
        if current == 0:
            improves = is_win_array(hand)
        else:
            improves = _best_after_discard(hand, pool, cache) < current
        hand[draw] -= 1

        if improves:
            accepted.append(AcceptedTile(ALL_TILES[draw], count))
    return accepted


def _best_after_discard(tiles: List[int], pool: Tuple[int, ...],
                        cache: ShantenCache) -> int:
    best = 100
    for discard in range(NUM_KINDS):
        if tiles[discard] == 0:
            continue
        tiles[discard] -= 1
        best = min(best, shanten_array(tiles, pool, cache))
        tiles[discard] += 1
    return best


def best_shanten_after_discard(tiles: Iterable[Tile], pool: Iterable[Tile],
                               cache: Optional[ShantenCache] = None) -> int:
    """Best exact shanten reachable by discarding one tile."""
    if cache is None:
        cache = default_cache()
    return _best_after_discard(tiles_to_array(tiles), pool_indices(pool), cache)
