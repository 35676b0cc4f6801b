import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from prefixle.puzzle_state import PuzzleState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementTier:
    threshold: float
    name: str


# Thresholds are found-word counts
ABSOLUTE_TIERS = [
    AchievementTier(1, "First Word"),
    AchievementTier(5, "Word Finder"),
    AchievementTier(10, "Prefix Pro"),
    AchievementTier(20, "Syllable Star"),
    AchievementTier(30, "Lexicon Legend"),
]

# Thresholds are fractions of the day's possible words
PROPORTIONAL_TIERS = [
    AchievementTier(0.1, "Getting Started"),
    AchievementTier(0.25, "Warming Up"),
    AchievementTier(0.5, "Halfway There"),
    AchievementTier(0.75, "Word Wizard"),
    AchievementTier(1.0, "Puzzle Master"),
]


class AchievementTracker:
    """Observer that recomputes the day's achievement tier after each accepted word."""

    def __init__(self, tiers: Optional[Sequence[AchievementTier]] = None, proportional: bool = False):
        if tiers is None:
            tiers = PROPORTIONAL_TIERS if proportional else ABSOLUTE_TIERS
        self.tiers: List[AchievementTier] = sorted(tiers, key=lambda t: t.threshold)
        self.proportional = proportional

    @classmethod
    def for_mode(cls, mode: str) -> "AchievementTracker":
        return cls(proportional=(mode == "proportional"))

    def _progress(self, state: PuzzleState) -> float:
        if not self.proportional:
            return state.found_count
        if state.possible_words <= 0:
            return 0.0
        return state.found_count / state.possible_words

    def _rank(self, name: str) -> int:
        for i, tier in enumerate(self.tiers):
            if tier.name == name:
                return i
        return -1

    def tier_for(self, state: PuzzleState) -> Optional[AchievementTier]:
        progress = self._progress(state)
        for tier in reversed(self.tiers):
            if progress >= tier.threshold:
                return tier
        return None

    def recompute(self, state: PuzzleState) -> Optional[str]:
        """
        Update state.current_achievement_tier if a higher tier has been reached.

        Returns the newly unlocked tier name, or None when nothing changed.
        Tiers are never lowered within a day.
        """
        tier = self.tier_for(state)
        if tier is None or tier.name == state.current_achievement_tier:
            return None
        current = state.current_achievement_tier
        current_rank = self._rank(current)
        # A tier from another tier list can't be ranked; keep it
        if current and current_rank < 0:
            logger.debug(f"Keeping unranked tier '{current}' on {state.date}")
            return None
        if self._rank(tier.name) <= current_rank:
            return None
        state.current_achievement_tier = tier.name
        logger.info(f"Achievement unlocked on {state.date}: {tier.name}")
        return tier.name

    __call__ = recompute
