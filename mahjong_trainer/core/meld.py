"""Meld (面子) data structures - triplets and sequences."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .tile import ALL_TILES, Tile


class MeldType(Enum):
    TRIPLET = "triplet"    # 刻子
    SEQUENCE = "sequence"  # 顺子


@dataclass(frozen=True)
class Meld:
    """A frozen meld of three tiles.

    Attributes:
        meld_type: Triplet or sequence
        tiles: The three tiles, lowest first
    """
    meld_type: MeldType
    tiles: Tuple[Tile, ...]

    @classmethod
    def triplet(cls, tile: Tile) -> 'Meld':
        return cls(MeldType.TRIPLET, (tile, tile, tile))

    @classmethod
    def sequence(cls, start: Tile) -> 'Meld':
        """Sequence starting at `start`; its rank must be 7 or lower."""
        if start.rank > 7:
            raise ValueError(f"sequence cannot start at {start.code}")
        idx = start.index
        return cls(MeldType.SEQUENCE, tuple(ALL_TILES[idx:idx + 3]))

    @property
    def first(self) -> Tile:
        return self.tiles[0]

    def __str__(self):
        return "".join(str(t.rank) for t in self.tiles) + self.first.suit_char
