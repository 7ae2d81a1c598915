"""Engine self-checks - reference shanten table and estimator agreement."""

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from mahjong_trainer.core.hand import is_valid_hand
from mahjong_trainer.core.tile import Tile, make_pool, make_tiles, pool_for_tiles
from mahjong_trainer.rules.shanten import ShantenCache, calculate_shanten, fast_shanten

logger = logging.getLogger(__name__)

# (name, tiles, expected exact shanten)
REFERENCE_HANDS = [
    ("Tenpai 1", ['1s', '2s', '3s', '5s', '6s', '7s', '1m'], 0),
    ("Tenpai 2", ['1s', '2s', '3s', '7p', '8p', '1m', '1m'], 0),
    ("Tenpai 3", ['1s', '2s', '3s', '1p', '2p', '3p', '4p'], 0),
    ("1-shanten 1", ['1s', '2s', '3s', '4s', '6s', '7s', '9s'], 1),
    ("1-shanten 2", ['1s', '2s', '3s', '3m', '4m', '6m', '7m'], 1),
    # Commonly listed as tenpai (0), which contradicts the draw definition:
    # the lone 1s can only pair with a drawn 1s, and 11+445678 does not
    # split into sets, so no single draw wins. Expected value is 1.
    ("Base example", ['1s', '4s', '4s', '5s', '6s', '7s', '8s'], 1),
    ("Base example, discard 1s", ['4s', '4s', '5s', '6s', '7s', '8s', '9s'], 0),
    ("Base example, discard 4s", ['1s', '4s', '5s', '6s', '7s', '8s', '9s'], 0),
    ("Base example, discard 6s", ['1s', '4s', '4s', '5s', '7s', '8s', '9s'], 1),
]


@dataclass(frozen=True)
class SelfCheckCase:
    name: str
    tiles: List[Tile]
    expected: int
    actual: int

    @property
    def passed(self) -> bool:
        return self.expected == self.actual


def run_shanten_self_check(cache: Optional[ShantenCache] = None) -> List[SelfCheckCase]:
    """Evaluate the reference table with a fresh (or cleared) cache."""
    if cache is None:
        cache = ShantenCache()
    cache.clear()

    results = []
    for name, codes, expected in REFERENCE_HANDS:
        tiles = make_tiles(codes)
        actual = calculate_shanten(tiles, pool_for_tiles(tiles), cache)
        results.append(SelfCheckCase(name, tiles, expected, actual))

    passed = sum(1 for r in results if r.passed)
    logger.info("Shanten self-check: %d/%d passed", passed, len(results))
    for r in results:
        if not r.passed:
            logger.warning("%s: expected %d, got %d (%s)", r.name, r.expected,
                           r.actual, " ".join(t.code for t in r.tiles))
    return results


@dataclass
class EstimatorComparison:
    """Agreement between fast_shanten and calculate_shanten over samples.

    `confusion[(fast, exact)]` counts samples per estimate pair.
    """
    samples: int = 0
    agreements: int = 0
    confusion: Counter = field(default_factory=Counter)

    @property
    def agreement_rate(self) -> float:
        return self.agreements / self.samples if self.samples else 0.0

    def record(self, fast: int, exact: int):
        self.samples += 1
        # The exact value is capped at 3, so compare on the same scale
        if min(fast, 3) == exact:
            self.agreements += 1
        self.confusion[(fast, exact)] += 1


def compare_estimators(size: int, suit_count: int, samples: int,
                       rng: Optional[random.Random] = None,
                       cache: Optional[ShantenCache] = None) -> EstimatorComparison:
    """Sample random valid hands and tally fast vs. exact shanten."""
    rng = rng or random.Random()
    cache = cache if cache is not None else ShantenCache()
    pool = make_pool(suit_count)
    comparison = EstimatorComparison()

    while comparison.samples < samples:
        hand = [rng.choice(pool) for _ in range(size)]
        if not is_valid_hand(hand):
            continue
        comparison.record(fast_shanten(hand), calculate_shanten(hand, pool, cache))

    logger.info("Estimator agreement over %d hands (%d tiles, %d suits): %.1f%%",
                comparison.samples, size, suit_count,
                comparison.agreement_rate * 100)
    return comparison
