"""Hand helpers - tile multisets, copy limits and canonical ordering."""

from typing import Iterable, List

from .tile import MAX_COPIES, Tile, tiles_to_array


def sort_tiles(tiles: Iterable[Tile]) -> List[Tile]:
    """Sort by suit (s, m, p) then rank."""
    return sorted(tiles)


def has_invalid_tile_count(tiles: Iterable[Tile]) -> bool:
    """Whether any value appears more than four times."""
    return any(c > MAX_COPIES for c in tiles_to_array(tiles))


def has_exact_quad(tiles: Iterable[Tile]) -> bool:
    """Whether any value appears exactly four times (a dead wait)."""
    return any(c == MAX_COPIES for c in tiles_to_array(tiles))


def is_valid_hand(tiles: Iterable[Tile], forbid_quads: bool = False) -> bool:
    """Copy-limit check used by the generators.

    With `forbid_quads`, a value held four times is rejected as well.
    """
    tiles = list(tiles)
    if has_invalid_tile_count(tiles):
        return False
    return not (forbid_quads and has_exact_quad(tiles))


def hand_signature(tiles: Iterable[Tile]) -> str:
    """Canonical text signature of a hand ('1s,1s,2m')."""
    return ",".join(t.code for t in sort_tiles(tiles))
