"""Shanten (向聴数) calculation.

Shanten = number of tile exchanges needed to reach tenpai (waiting to win).
-1 means an empty hand.
0 means tenpai (one tile away).
3 is a ceiling: the exact simulation does not look deeper than two
draw/discard steps.

Two estimators live here. `fast_shanten` counts melds and proto-melds and is
only a pre-filter. `calculate_shanten` is defined by simulating draws and
discards over the pool, so it is exact up to the ceiling, and memoizes into a
caller-owned `ShantenCache`.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from mahjong_trainer.core.tile import (
    NUM_KINDS, Tile, neighbor_indices, pool_for_tiles, tiles_to_array,
)
from mahjong_trainer.rules.agari import is_win_array

logger = logging.getLogger(__name__)

SHANTEN_CEILING = 3

# (counts, pool indices) identifies a hand for memoization
HandKey = Tuple[Tuple[int, ...], Tuple[int, ...]]


class ShantenCache:
    """Memo of exact shanten results, owned by one generation session.

    Keys are pure hand content (plus the pool), so a cache must not be shared
    between sessions running at the same time.
    """

    def __init__(self):
        self._results: Dict[HandKey, int] = {}
        # (counts, pool, level) -> whether the hand is within `level` shanten
        self._levels: Dict[Tuple[Tuple[int, ...], Tuple[int, ...], int], bool] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: HandKey) -> Optional[int]:
        value = self._results.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: HandKey, value: int):
        self._results[key] = value

    def peek(self, key: HandKey) -> Optional[int]:
        """Like get, without touching the hit/miss counters."""
        return self._results.get(key)

    def get_level(self, key: HandKey, level: int) -> Optional[bool]:
        return self._levels.get((key[0], key[1], level))

    def put_level(self, key: HandKey, level: int, within: bool):
        self._levels[(key[0], key[1], level)] = within

    def clear(self):
        self._results.clear()
        self._levels.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self):
        return len(self._results)

    def __contains__(self, key) -> bool:
        return key in self._results

    def __repr__(self):
        return (f"ShantenCache(entries={len(self._results)}, "
                f"hits={self.hits}, misses={self.misses})")


_default_cache = ShantenCache()


def default_cache() -> ShantenCache:
    """The process-wide cache used when no cache is passed."""
    return _default_cache


def clear_shanten_cache():
    """Reset the process-wide cache. Call once per new generation session."""
    logger.debug("Clearing shanten cache: %r", _default_cache)
    _default_cache.clear()


# --- Approximate shanten (pre-filter) ---

def fast_analyze(tiles: Iterable[Tile]) -> Tuple[int, int]:
    """Greedy (sets, protos) decomposition maximizing sets*2 + protos."""
    return _fast_analyze(tiles_to_array(tiles), {})


def _fast_analyze(tiles: List[int], memo: dict) -> Tuple[int, int]:
    key = tuple(tiles)
    cached = memo.get(key)
    if cached is not None:
        return cached

    idx = 0
    while idx < NUM_KINDS and tiles[idx] == 0:
        idx += 1
    if idx >= NUM_KINDS:
        return 0, 0

    rank0 = idx % 9
    best = (0, 0)
    best_score = 0

    def consider(sets: int, protos: int):
        nonlocal best, best_score
        score = sets * 2 + protos
        if score > best_score:
            best = (sets, protos)
            best_score = score

    # Triplet
    if tiles[idx] >= 3:
        tiles[idx] -= 3
        sets, protos = _fast_analyze(tiles, memo)
        tiles[idx] += 3
        consider(sets + 1, protos)

    # Sequence
    if rank0 <= 6 and tiles[idx + 1] >= 1 and tiles[idx + 2] >= 1:
        tiles[idx] -= 1
        tiles[idx + 1] -= 1
        tiles[idx + 2] -= 1
        sets, protos = _fast_analyze(tiles, memo)
        tiles[idx] += 1
        tiles[idx + 1] += 1
        tiles[idx + 2] += 1
        consider(sets + 1, protos)

    # Pair
    if tiles[idx] >= 2:
        tiles[idx] -= 2
        sets, protos = _fast_analyze(tiles, memo)
        tiles[idx] += 2
        consider(sets, protos + 1)

    # Proto-sequences: adjacent (12) and gap (13)
    for d in (1, 2):
        if rank0 + d <= 8 and tiles[idx + d] >= 1:
            tiles[idx] -= 1
            tiles[idx + d] -= 1
            sets, protos = _fast_analyze(tiles, memo)
            tiles[idx] += 1
            tiles[idx + d] += 1
            consider(sets, protos + 1)

    # Skip this tile
    tiles[idx] -= 1
    sets, protos = _fast_analyze(tiles, memo)
    tiles[idx] += 1
    consider(sets, protos)

    memo[key] = best
    return best


def fast_shanten(tiles: Iterable[Tile]) -> int:
    """Approximate shanten. Never trust it as the final answer."""
    return fast_shanten_array(tiles_to_array(tiles))


def fast_shanten_array(tiles_27: List[int]) -> int:
    total = sum(tiles_27)
    if total == 0:
        return -1

    sets_needed = total // 3
    memo: dict = {}
    best = 100

    # Try each tile as the pair
    for head in range(NUM_KINDS):
        if tiles_27[head] < 2:
            continue
        tiles_27[head] -= 2
        sets, protos = _fast_analyze(tiles_27, memo)
        tiles_27[head] += 2
        missing = max(0, sets_needed - sets)
        best = min(best, missing - min(protos, missing))

    # Also try without designating a pair yet
    sets, protos = _fast_analyze(tiles_27, memo)
    missing = max(0, sets_needed - sets)
    best = min(best, missing - min(protos, missing + 1) + 1)

    return best


# --- Exact shanten (draw/discard simulation) ---

def calculate_shanten(tiles: Iterable[Tile], pool: Optional[Iterable[Tile]] = None,
                      cache: Optional[ShantenCache] = None) -> int:
    """Exact shanten in {-1, 0, 1, 2, 3}.

    `pool` defaults to every rank of each suit appearing in `tiles`.
    """
    tiles = list(tiles)
    if not tiles:
        return -1
    if pool is None:
        pool = pool_for_tiles(tiles)
    if cache is None:
        cache = _default_cache
    return shanten_array(tiles_to_array(tiles), pool_indices(pool), cache)


def pool_indices(pool: Iterable[Tile]) -> Tuple[int, ...]:
    return tuple(sorted({t.index for t in pool}))


def shanten_array(tiles_27: List[int], pool: Tuple[int, ...],
                  cache: ShantenCache) -> int:
    """Exact shanten of a count array; `pool` is a sorted index tuple."""
    if sum(tiles_27) == 0:
        return -1

    key = (tuple(tiles_27), pool)
    cached = cache.get(key)
    if cached is not None:
        return cached

    result = SHANTEN_CEILING
    for level in range(SHANTEN_CEILING):
        if _within(tiles_27, level, pool, cache):
            result = level
            break

    cache.put(key, result)
    return result


def _within(tiles: List[int], level: int, pool: Tuple[int, ...],
            cache: ShantenCache) -> bool:
    """Whether the hand reaches tenpai within `level` draw/discard steps."""
    key = (tuple(tiles), pool)
    known = cache.peek(key)
    if known is not None:
        return known <= level

    memo = cache.get_level(key, level)
    if memo is not None:
        return memo

    if level == 0:
        result = _is_tenpai(tiles, pool)
    else:
        result = False
        for draw in pool:
            tiles[draw] += 1
            for discard in range(NUM_KINDS):
                if tiles[discard] == 0:
                    continue
                tiles[discard] -= 1
                ok = _within(tiles, level - 1, pool, cache)
                tiles[discard] += 1
                if ok:
                    result = True
                    break
            tiles[draw] -= 1
            if result:
                break

    cache.put_level(key, level, result)
    return result


def _is_tenpai(tiles: List[int], pool: Tuple[int, ...]) -> bool:
    # A winning tile always joins a held tile in a pair or meld, so only
    # neighbours of the hand can complete it.
    pool_set = set(pool)
    for idx in neighbor_indices(tiles):
        if idx not in pool_set:
            continue
        tiles[idx] += 1
        win = is_win_array(tiles)
        tiles[idx] -= 1
        if win:
            return True
    return False
