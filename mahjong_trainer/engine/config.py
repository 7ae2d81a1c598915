"""Generator configuration - difficulty levels, attempt ceilings, thresholds."""

from enum import Enum
from typing import Dict, Optional


class Level(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value) -> 'Level':
        """Accept a Level, its value ('Easy') or its name ('easy')."""
        if isinstance(value, Level):
            return value
        text = str(value).strip()
        for level in cls:
            if text.lower() in (level.value.lower(), level.name.lower()):
                return level
        raise ValueError(f"unknown level: {value!r}")


class WaitRequirement:
    """Probabilistic wait-count target for one difficulty level.

    Each attempt flips a coin: with `primary_chance` the hand must fall in
    the primary regime, otherwise in the other one. The low regime is
    1..threshold waits (inclusive when `primary_is_low`, exclusive
    otherwise); the high regime runs up to `max_waits`.
    """

    def __init__(self, primary_chance: float, primary_is_low: bool,
                 threshold: int, max_waits: int = 15):
        self.primary_chance = primary_chance
        self.primary_is_low = primary_is_low
        self.threshold = threshold
        self.max_waits = max_waits

    def is_low(self, wait_count: int) -> bool:
        if self.primary_is_low:
            return 1 <= wait_count <= self.threshold
        return 1 <= wait_count < self.threshold

    def is_high(self, wait_count: int) -> bool:
        if self.primary_is_low:
            return self.threshold < wait_count <= self.max_waits
        return self.threshold <= wait_count <= self.max_waits

    def accepts(self, wait_count: int, primary: bool) -> bool:
        """Whether `wait_count` satisfies the regime picked for this attempt."""
        want_low = self.primary_is_low == primary
        if want_low:
            return self.is_low(wait_count)
        return self.is_high(wait_count)

    def __repr__(self):
        regime = "low" if self.primary_is_low else "high"
        return (f"WaitRequirement({self.primary_chance:.0%} {regime}, "
                f"threshold={self.threshold}, max={self.max_waits})")


def default_wait_requirements() -> Dict[Level, WaitRequirement]:
    return {
        # 85% have at most 3 waits
        Level.EASY: WaitRequirement(0.85, primary_is_low=True, threshold=3),
        # 60% have at least 3 waits
        Level.MEDIUM: WaitRequirement(0.60, primary_is_low=False, threshold=3),
        # 80% have at least 3 waits
        Level.HARD: WaitRequirement(0.80, primary_is_low=False, threshold=3),
    }


VALID_SIZES = (7, 13)
MAX_SUITS = 3


class GeneratorConfig:
    """Generator configuration."""

    def __init__(
        self,
        rehab_max_attempts: int = 3000,
        not_tenpai_chance: float = 0.1,  # Hard only
        not_tenpai_max_attempts: int = 1000,
        efficiency_max_attempts: int = 1000,
        breaking_max_attempts: int = 500,
        max_break_steps: int = 20,
        single_suit_min_ukeire: int = 5,  # accepted when strictly greater
        multi_suit_min_ukeire: int = 3,
        top_results: int = 5,
        wait_requirements: Optional[Dict[Level, WaitRequirement]] = None,
    ):
        self.rehab_max_attempts = rehab_max_attempts
        self.not_tenpai_chance = not_tenpai_chance
        self.not_tenpai_max_attempts = not_tenpai_max_attempts
        self.efficiency_max_attempts = efficiency_max_attempts
        self.breaking_max_attempts = breaking_max_attempts
        self.max_break_steps = max_break_steps
        self.single_suit_min_ukeire = single_suit_min_ukeire
        self.multi_suit_min_ukeire = multi_suit_min_ukeire
        self.top_results = top_results
        self.wait_requirements = wait_requirements or default_wait_requirements()

    def requirement_for(self, level: Level) -> WaitRequirement:
        return self.wait_requirements[level]

    @staticmethod
    def validate_session(size: int, suit_count: int):
        """Raise ValueError for session parameters the product does not offer."""
        if size not in VALID_SIZES:
            raise ValueError(f"hand size must be one of {VALID_SIZES}, got {size}")
        if not (1 <= suit_count <= MAX_SUITS):
            raise ValueError(f"suit count must be 1..{MAX_SUITS}, got {suit_count}")
