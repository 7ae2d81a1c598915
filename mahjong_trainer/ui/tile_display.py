"""Tile display formatting with colors for terminal output."""

from typing import Iterable, Optional, Set

from rich.table import Table
from rich.text import Text

from mahjong_trainer.core.tile import Tile, TileSuit
from mahjong_trainer.rules.agari import decompose
from mahjong_trainer.rules.efficiency import EfficiencyResult


# Color schemes
SUIT_COLORS = {
    TileSuit.SOU: "green",
    TileSuit.MAN: "red",
    TileSuit.PIN: "blue",
}


def tile_to_rich_text(tile: Tile, highlight: bool = False, dim: bool = False) -> Text:
    """Convert a tile to a Rich Text object with appropriate colors."""
    style = f"bold {SUIT_COLORS[tile.suit]}"
    if highlight:
        style += " on white"
    if dim:
        style = "dim"
    return Text(f"[{tile.code}]", style=style)


def tiles_to_rich_text(tiles: Iterable[Tile], separator: str = " ",
                       highlight: Optional[Set[Tile]] = None) -> Text:
    """Convert a list of tiles to Rich Text."""
    result = Text()
    for i, tile in enumerate(tiles):
        if i > 0:
            result.append(separator)
        result.append_text(tile_to_rich_text(
            tile, highlight=bool(highlight and tile in highlight)))
    return result


def format_pool(pool: Iterable[Tile], found: Set[Tile], wrong: Set[Tile]) -> Text:
    """Pool with already-found tiles highlighted and wrong guesses dimmed."""
    result = Text()
    for i, tile in enumerate(pool):
        if i > 0:
            result.append(" ")
        result.append_text(tile_to_rich_text(
            tile, highlight=tile in found, dim=tile in wrong))
    return result


def efficiency_table(eff: EfficiencyResult) -> Table:
    """Ranked discards with their accepted tiles."""
    table = Table(title=f"Best achievable: {eff.best_shanten}-shanten",
                  show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Discard")
    table.add_column("Ukeire", justify="right")
    table.add_column("Accepted tiles")

    best = set(eff.best_discards)
    for rank, option in enumerate(eff.all_results, start=1):
        accepted = Text()
        for i, a in enumerate(option.accepted_tiles):
            if i > 0:
                accepted.append(" ")
            accepted.append_text(tile_to_rich_text(a.tile))
            accepted.append(f"x{a.count}", style="dim")
        table.add_row(
            str(rank),
            tile_to_rich_text(option.discard, highlight=option.discard in best),
            str(option.ukeire),
            accepted,
        )
    return table


def describe_win(tiles: Iterable[Tile]) -> Optional[str]:
    """One winning split of a complete hand, e.g. '123s 456s 11m'."""
    split = decompose(tiles)
    if split is None:
        return None
    pair, melds = split
    return " ".join([str(m) for m in melds] + [f"{pair.rank}{pair.rank}{pair.suit_char}"])
