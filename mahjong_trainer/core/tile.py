"""Tile definition with text codes ("5s") and 27-slot count encoding."""

from enum import IntEnum
from typing import Iterable, List


class TileSuit(IntEnum):
    SOU = 0   # 索子
    MAN = 1   # 万子
    PIN = 2   # 筒子


SUIT_CHARS = ('s', 'm', 'p')
SUIT_BY_CHAR = {ch: TileSuit(i) for i, ch in enumerate(SUIT_CHARS)}

RANKS = range(1, 10)
NUM_KINDS = 27  # 9 ranks x 3 suits
MAX_COPIES = 4


class Tile:
    """Immutable tile value. Ordered by suit (s, m, p) then rank."""
    __slots__ = ('_index', '_suit', '_rank')

    def __init__(self, index: int):
        if not (0 <= index < NUM_KINDS):
            raise ValueError(f"tile index must be 0..26, got {index}")
        self._index = index
        self._suit = TileSuit(index // 9)
        self._rank = index % 9 + 1

    @classmethod
    def from_code(cls, code: str) -> 'Tile':
        """Parse a two-character code like '7p'."""
        if len(code) != 2 or not code[0].isdigit() or code[1] not in SUIT_BY_CHAR:
            raise ValueError(f"invalid tile code: {code!r}")
        rank = int(code[0])
        if rank not in RANKS:
            raise ValueError(f"invalid tile rank in {code!r}")
        return ALL_TILES[SUIT_BY_CHAR[code[1]] * 9 + rank - 1]

    @property
    def index(self) -> int:
        return self._index

    @property
    def suit(self) -> TileSuit:
        return self._suit

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def suit_char(self) -> str:
        return SUIT_CHARS[self._suit]

    @property
    def code(self) -> str:
        return f"{self._rank}{self.suit_char}"

    def __repr__(self):
        return f"Tile({self.code})"

    def __str__(self):
        return self.code

    def __eq__(self, other):
        if isinstance(other, Tile):
            return self._index == other._index
        return NotImplemented

    def __hash__(self):
        return self._index

    def __lt__(self, other):
        if isinstance(other, Tile):
            return self._index < other._index
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, Tile):
            return self._index <= other._index
        return NotImplemented


# Pre-create every tile value; Tile.from_code returns these shared instances
ALL_TILES = [Tile(i) for i in range(NUM_KINDS)]


def tiles_to_array(tiles: Iterable[Tile]) -> List[int]:
    """Convert tiles to a 27-length count array."""
    arr = [0] * NUM_KINDS
    for t in tiles:
        arr[t.index] += 1
    return arr


def make_tiles(codes: Iterable[str]) -> List[Tile]:
    """Parse a sequence of wire codes like ['1s', '2s', '7p']."""
    return [Tile.from_code(c) for c in codes]


def tiles_to_codes(tiles: Iterable[Tile]) -> List[str]:
    return [t.code for t in tiles]


def make_tiles_from_string(s: str) -> List[Tile]:
    """Parse a shorthand string like '123s456m11p' into tiles."""
    tiles = []
    numbers = []
    for ch in s:
        if ch.isdigit():
            numbers.append(int(ch))
        elif ch in SUIT_BY_CHAR:
            offset = SUIT_BY_CHAR[ch] * 9
            for n in numbers:
                if n not in RANKS:
                    raise ValueError(f"invalid tile rank {n} in {s!r}")
                tiles.append(ALL_TILES[offset + n - 1])
            numbers = []
        elif not ch.isspace():
            raise ValueError(f"unexpected character {ch!r} in {s!r}")
    if numbers:
        raise ValueError(f"ranks without a suit in {s!r}")
    return tiles


def make_pool(suit_count: int) -> List[Tile]:
    """All tile values of the first `suit_count` suits, in s, m, p order."""
    return ALL_TILES[:suit_count * 9]


def pool_for_tiles(tiles: Iterable[Tile]) -> List[Tile]:
    """All tile values of every suit appearing in `tiles`."""
    suits = {t.suit for t in tiles}
    return [t for t in ALL_TILES if t.suit in suits]


def neighbor_indices(counts: List[int]) -> List[int]:
    """Indices within rank distance 2 (same suit) of any held tile.

    Any tile able to join a meld or proto-meld with the held tiles lies in
    this set.
    """
    near = [False] * NUM_KINDS
    for idx, c in enumerate(counts):
        if c == 0:
            continue
        base = idx - idx % 9
        rank0 = idx % 9
        for d in range(max(0, rank0 - 2), min(8, rank0 + 2) + 1):
            near[base + d] = True
    return [i for i in range(NUM_KINDS) if near[i]]
