"""Practice hand generation by rejection sampling.

Every generator draws random candidates, validates them against the
difficulty constraints and retries up to a ceiling from GeneratorConfig.
The outcome always says how the hand was obtained: FOUND, EXHAUSTED_FALLBACK
(a canned hand was substituted) or FAILED (nothing to offer).
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from mahjong_trainer.core.hand import hand_signature, is_valid_hand, sort_tiles
from mahjong_trainer.core.meld import Meld
from mahjong_trainer.core.tile import (
    ALL_TILES, NUM_KINDS, SUIT_BY_CHAR, Tile, make_pool, make_tiles_from_string,
    tiles_to_array, tiles_to_codes,
)
from mahjong_trainer.engine.config import GeneratorConfig, Level
from mahjong_trainer.rules.agari import get_waits, is_win
from mahjong_trainer.rules.efficiency import (
    EfficiencyResult, best_shanten_after_discard, get_efficiency,
)
from mahjong_trainer.rules.shanten import (
    ShantenCache, calculate_shanten, fast_shanten, fast_shanten_array,
)

logger = logging.getLogger(__name__)

# Known 3-wait sou hands served when generation runs out of attempts,
# keyed by hand size. Sou is in every pool.
FALLBACK_HANDS = {
    7: "2345678s",        # waits 2s 5s 8s
    13: "1123456888999s",  # waits 1s 4s 7s
}

# After the extra draw, the best discard must leave exactly this shanten
TARGET_SHANTEN_AFTER_DRAW = 1

PERTURB_OFFSETS = (-2, -1, 1, 2)


class GenerationStatus(Enum):
    FOUND = "found"
    EXHAUSTED_FALLBACK = "exhausted_fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class WinPuzzle:
    """A wait-recognition puzzle: find every tile that completes `hand`."""
    hand: List[Tile]
    waits: List[Tile]
    pool: List[Tile]
    is_tenpai: bool

    def to_dict(self) -> dict:
        return {
            "hand": tiles_to_codes(self.hand),
            "waits": tiles_to_codes(self.waits),
            "pool": tiles_to_codes(self.pool),
            "is_tenpai": self.is_tenpai,
        }


@dataclass(frozen=True)
class EfficiencyPuzzle:
    """A discard puzzle: `hand` is base_hand plus drawn_tile."""
    hand: List[Tile]
    base_hand: List[Tile]
    drawn_tile: Tile
    pool: List[Tile]
    efficiency: EfficiencyResult

    def to_dict(self) -> dict:
        return {
            "hand": tiles_to_codes(self.hand),
            "base_hand": tiles_to_codes(self.base_hand),
            "drawn_tile": self.drawn_tile.code,
            "pool": tiles_to_codes(self.pool),
            "efficiency": self.efficiency.to_dict(),
        }


@dataclass(frozen=True)
class GenerationOutcome:
    status: GenerationStatus
    puzzle: Optional[Union[WinPuzzle, EfficiencyPuzzle]] = None
    attempts: int = 0

    @property
    def found(self) -> bool:
        return self.status == GenerationStatus.FOUND

    @property
    def failed(self) -> bool:
        return self.status == GenerationStatus.FAILED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "attempts": self.attempts,
            "puzzle": self.puzzle.to_dict() if self.puzzle is not None else None,
        }


def _random_hand(size: int, pool: Sequence[Tile], rng: random.Random) -> List[Tile]:
    return [rng.choice(pool) for _ in range(size)]


def _fast_best_after_discard(tiles: List[Tile]) -> int:
    arr = tiles_to_array(tiles)
    best = 100
    for discard in range(NUM_KINDS):
        if arr[discard] == 0:
            continue
        arr[discard] -= 1
        best = min(best, fast_shanten_array(arr))
        arr[discard] += 1
    return best


# --- Win (wait recognition) training ---

def generate_rehab_hand(size: int, level: Union[Level, str], suit_count: int,
                        config: Optional[GeneratorConfig] = None,
                        rng: Optional[random.Random] = None) -> GenerationOutcome:
    """Generate a hand whose wait count follows the level's distribution.

    Never fails: when attempts run out the canned hand of the same size from
    FALLBACK_HANDS is returned with status EXHAUSTED_FALLBACK.
    """
    GeneratorConfig.validate_session(size, suit_count)
    level = Level.parse(level)
    config = config or GeneratorConfig()
    rng = rng or random.Random()
    pool = make_pool(suit_count)
    forbid_quads = suit_count >= 2

    if level == Level.HARD and rng.random() < config.not_tenpai_chance:
        outcome = generate_not_tenpai_hand(size, suit_count, config, rng)
        if outcome.found:
            return outcome

    requirement = config.requirement_for(level)
    for attempt in range(1, config.rehab_max_attempts + 1):
        hand = _random_hand(size, pool, rng)
        if not is_valid_hand(hand, forbid_quads):
            continue

        waits = get_waits(hand, pool)
        primary = rng.random() < requirement.primary_chance
        if requirement.accepts(len(waits), primary):
            logger.info("Generated hand on attempt %d with %d waits (%s mode)",
                        attempt, len(waits), level.value)
            return GenerationOutcome(
                GenerationStatus.FOUND,
                WinPuzzle(sort_tiles(hand), waits, pool, is_tenpai=True),
                attempt,
            )

    logger.warning("Failed to generate hand within %d attempts, using fallback",
                   config.rehab_max_attempts)
    fallback = make_tiles_from_string(FALLBACK_HANDS[size])
    return GenerationOutcome(
        GenerationStatus.EXHAUSTED_FALLBACK,
        WinPuzzle(fallback, get_waits(fallback, pool), pool, is_tenpai=True),
        config.rehab_max_attempts,
    )


def generate_not_tenpai_hand(size: int, suit_count: int,
                             config: Optional[GeneratorConfig] = None,
                             rng: Optional[random.Random] = None) -> GenerationOutcome:
    """Build a tenpai hand, then shift one tile so that it waits on nothing."""
    config = config or GeneratorConfig()
    rng = rng or random.Random()
    pool = make_pool(suit_count)
    forbid_quads = suit_count >= 2

    for attempt in range(1, config.not_tenpai_max_attempts + 1):
        hand = _random_hand(size, pool, rng)
        if not is_valid_hand(hand, forbid_quads):
            continue

        waits = get_waits(hand, pool)
        if not 1 <= len(waits) <= 4:
            continue

        i = rng.randrange(len(hand))
        old = hand[i]
        rank = min(9, max(1, old.rank + rng.choice(PERTURB_OFFSETS)))
        shifted = ALL_TILES[old.suit * 9 + rank - 1]
        if shifted == old:
            continue
        hand[i] = shifted
        if not is_valid_hand(hand, forbid_quads):
            continue

        if not get_waits(hand, pool):
            logger.info("Generated not-tenpai hand on attempt %d", attempt)
            return GenerationOutcome(
                GenerationStatus.FOUND,
                WinPuzzle(sort_tiles(hand), [], pool, is_tenpai=False),
                attempt,
            )

    logger.warning("Failed to generate not-tenpai hand, falling back to regular generation")
    return GenerationOutcome(GenerationStatus.FAILED,
                             attempts=config.not_tenpai_max_attempts)


# --- Efficiency (discard) training ---

def generate_efficiency_hand(size: int, suit_count: int,
                             config: Optional[GeneratorConfig] = None,
                             rng: Optional[random.Random] = None,
                             cache: Optional[ShantenCache] = None) -> GenerationOutcome:
    """Generate a 1- or 2-shanten hand plus a draw that leaves it 1-shanten.

    Single-suit hands are sampled directly; multi-suit hands (and single-suit
    sessions that run out of attempts) are built by breaking a complete hand.
    Each session gets its own ShantenCache unless one is passed in.
    """
    GeneratorConfig.validate_session(size, suit_count)
    config = config or GeneratorConfig()
    rng = rng or random.Random()
    cache = cache if cache is not None else ShantenCache()
    pool = make_pool(suit_count)

    if suit_count == 1:
        for attempt in range(1, config.efficiency_max_attempts + 1):
            base_hand = _random_hand(size, pool, rng)
            if not is_valid_hand(base_hand):
                continue
            if is_win(base_hand):
                continue

            # The estimate only drops clearly bad hands. It reads many
            # 1-shanten hands as 0, so a fast 0 still goes to the exact check.
            if fast_shanten(base_hand) > 2:
                continue

            drawn_tile = rng.choice(pool)
            full_hand = base_hand + [drawn_tile]
            if not is_valid_hand(full_hand):
                continue
            if _fast_best_after_discard(full_hand) > TARGET_SHANTEN_AFTER_DRAW:
                continue

            puzzle = _verify_efficiency_puzzle(
                base_hand, drawn_tile, pool, config.single_suit_min_ukeire,
                config, cache)
            if puzzle is not None:
                logger.info("Generated hand on attempt %d, ukeire: %d",
                            attempt, puzzle.efficiency.max_ukeire)
                return GenerationOutcome(GenerationStatus.FOUND, puzzle, attempt)

        logger.info("Random sampling exhausted after %d attempts, breaking complete hands",
                    config.efficiency_max_attempts)

    return generate_by_breaking(size, suit_count, pool, config, rng, cache)


def _verify_efficiency_puzzle(base_hand: List[Tile], drawn_tile: Tile,
                              pool: List[Tile], min_ukeire: int,
                              config: GeneratorConfig, cache: ShantenCache,
                              expected_shanten: Optional[int] = None
                              ) -> Optional[EfficiencyPuzzle]:
    """Exact checks shared by both efficiency generators."""
    base_shanten = calculate_shanten(base_hand, pool, cache)
    if base_shanten not in (1, 2):
        return None
    if expected_shanten is not None and base_shanten != expected_shanten:
        logger.debug("Exact shanten %d disagrees with estimate %d for %s",
                     base_shanten, expected_shanten, hand_signature(base_hand))
        return None

    full_hand = base_hand + [drawn_tile]
    if best_shanten_after_discard(full_hand, pool, cache) != TARGET_SHANTEN_AFTER_DRAW:
        return None

    eff = get_efficiency(base_hand, drawn_tile, pool, cache, config.top_results)
    if eff.max_ukeire <= min_ukeire:
        logger.debug("Rejected %s +%s: ukeire %d", hand_signature(base_hand),
                     drawn_tile, eff.max_ukeire)
        return None

    return EfficiencyPuzzle(sort_tiles(full_hand), sort_tiles(base_hand),
                            drawn_tile, pool, eff)


def generate_complete_hand(size: int, suits: Sequence[str],
                           rng: Optional[random.Random] = None) -> List[Tile]:
    """Random n melds + one pair, 3n+2 tiles for a `size` = 3n+1 session."""
    rng = rng or random.Random()
    suit_offsets = [SUIT_BY_CHAR[s] * 9 for s in suits]
    hand: List[Tile] = []

    for _ in range(size // 3):
        offset = rng.choice(suit_offsets)
        if rng.random() > 0.5:
            meld = Meld.sequence(ALL_TILES[offset + rng.randrange(7)])
        else:
            meld = Meld.triplet(ALL_TILES[offset + rng.randrange(9)])
        hand.extend(meld.tiles)

    pair = ALL_TILES[rng.choice(suit_offsets) + rng.randrange(9)]
    hand.extend([pair, pair])
    return hand


def generate_by_breaking(size: int, suit_count: int,
                         pool: Optional[List[Tile]] = None,
                         config: Optional[GeneratorConfig] = None,
                         rng: Optional[random.Random] = None,
                         cache: Optional[ShantenCache] = None) -> GenerationOutcome:
    """Break a synthesized complete hand down to 1 or 2 shanten.

    Returns FAILED when attempts run out; there is no canned fallback.
    """
    config = config or GeneratorConfig()
    rng = rng or random.Random()
    cache = cache if cache is not None else ShantenCache()
    pool = pool or make_pool(suit_count)
    suits = sorted({t.suit_char for t in pool}, key=lambda s: SUIT_BY_CHAR[s])
    forbid_quads = suit_count >= 2

    for attempt in range(1, config.breaking_max_attempts + 1):
        complete = generate_complete_hand(size, suits, rng)
        if not is_valid_hand(complete, forbid_quads):
            continue
        if not is_win(complete):
            continue

        # Dropping any tile of a complete hand leaves a tenpai hand of `size`
        base_hand = list(complete)
        del base_hand[rng.randrange(len(base_hand))]

        current = 0
        target = 1 if rng.random() > 0.5 else 2
        steps = 0
        while current < target and steps < config.max_break_steps:
            steps += 1
            i = rng.randrange(len(base_hand))
            new_tile = rng.choice([t for t in pool if t != base_hand[i]])
            candidate = list(base_hand)
            candidate[i] = new_tile
            if not is_valid_hand(candidate, forbid_quads):
                continue
            s = fast_shanten(candidate)
            if s == 0:
                # A fast 0 stalls the loop on hands that are really 1-shanten
                s = calculate_shanten(candidate, pool, cache)
            if current <= s <= target:
                base_hand = candidate
                current = s

        if current not in (1, 2):
            continue

        drawn_tile = rng.choice(pool)
        if not is_valid_hand(base_hand + [drawn_tile], forbid_quads):
            continue

        puzzle = _verify_efficiency_puzzle(
            base_hand, drawn_tile, pool, config.multi_suit_min_ukeire,
            config, cache, expected_shanten=current)
        if puzzle is not None:
            logger.info("Generated hand by breaking on attempt %d, ukeire: %d",
                        attempt, puzzle.efficiency.max_ukeire)
            return GenerationOutcome(GenerationStatus.FOUND, puzzle, attempt)

    logger.warning("Failed to generate hand using breaking method")
    return GenerationOutcome(GenerationStatus.FAILED,
                             attempts=config.breaking_max_attempts)
