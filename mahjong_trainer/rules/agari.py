"""Win (和了) detection - n melds + one pair.

Public functions take tile lists; the `*_array` variants work on 27-length
count arrays and are what the shanten and efficiency code call in loops.
"""

from typing import Iterable, List, Optional, Tuple

from mahjong_trainer.core.meld import Meld
from mahjong_trainer.core.tile import (
    ALL_TILES, MAX_COPIES, NUM_KINDS, Tile, tiles_to_array,
)


def is_win(tiles: Iterable[Tile]) -> bool:
    """Check if the tiles form a complete hand (3n+2 tiles)."""
    return is_win_array(tiles_to_array(tiles))


def is_win_array(tiles_27: List[int]) -> bool:
    if sum(tiles_27) % 3 != 2:
        return False

    for head in range(NUM_KINDS):
        if tiles_27[head] < 2:
            continue
        tiles_27[head] -= 2
        ok = _can_form_sets(tiles_27, 0)
        tiles_27[head] += 2
        if ok:
            return True
    return False


def can_form_sets(tiles: Iterable[Tile]) -> bool:
    """Whether the tiles split exactly into triplets and sequences."""
    arr = tiles_to_array(tiles)
    if sum(arr) % 3 != 0:
        return False
    return _can_form_sets(arr, 0)


def _can_form_sets(tiles: List[int], start: int) -> bool:
    """Backtrack on the lowest remaining tile: it must open a triplet or a sequence."""
    idx = start
    while idx < NUM_KINDS and tiles[idx] == 0:
        idx += 1
    if idx >= NUM_KINDS:
        return True

    if tiles[idx] >= 3:
        tiles[idx] -= 3
        ok = _can_form_sets(tiles, idx)
        tiles[idx] += 3
        if ok:
            return True

    if idx % 9 <= 6 and tiles[idx + 1] >= 1 and tiles[idx + 2] >= 1:
        tiles[idx] -= 1
        tiles[idx + 1] -= 1
        tiles[idx + 2] -= 1
        ok = _can_form_sets(tiles, idx)
        tiles[idx] += 1
        tiles[idx + 1] += 1
        tiles[idx + 2] += 1
        if ok:
            return True

    return False


def decompose(tiles: Iterable[Tile]) -> Optional[Tuple[Tile, List[Meld]]]:
    """Return (pair, melds) for the first decomposition found, or None."""
    arr = tiles_to_array(tiles)
    if sum(arr) % 3 != 2:
        return None

    for head in range(NUM_KINDS):
        if arr[head] < 2:
            continue
        remaining = list(arr)
        remaining[head] -= 2
        melds: List[Meld] = []
        if _extract_melds(remaining, 0, melds):
            return ALL_TILES[head], melds
    return None


def _extract_melds(tiles: List[int], start: int, result: List[Meld]) -> bool:
    idx = start
    while idx < NUM_KINDS and tiles[idx] == 0:
        idx += 1
    if idx >= NUM_KINDS:
        return True

    if tiles[idx] >= 3:
        tiles[idx] -= 3
        result.append(Meld.triplet(ALL_TILES[idx]))
        if _extract_melds(tiles, idx, result):
            return True
        result.pop()
        tiles[idx] += 3

    if idx % 9 <= 6 and tiles[idx + 1] >= 1 and tiles[idx + 2] >= 1:
        tiles[idx] -= 1
        tiles[idx + 1] -= 1
        tiles[idx + 2] -= 1
        result.append(Meld.sequence(ALL_TILES[idx]))
        if _extract_melds(tiles, idx, result):
            return True
        result.pop()
        tiles[idx] += 1
        tiles[idx + 1] += 1
        tiles[idx + 2] += 1

    return False


def get_waits(hand: Iterable[Tile], pool: Iterable[Tile]) -> List[Tile]:
    """Find all pool tiles that would complete this hand.

    Values already held four times are never waits.
    """
    arr = tiles_to_array(hand)
    waits = []
    for tile in pool:
        if arr[tile.index] >= MAX_COPIES:
            continue
        arr[tile.index] += 1
        if is_win_array(arr):
            waits.append(tile)
        arr[tile.index] -= 1
    return waits
