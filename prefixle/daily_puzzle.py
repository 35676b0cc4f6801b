from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

CONSONANT_BLENDS = [
    "bl", "br", "ch", "cl", "cr", "dr", "fl", "fr", "gl", "gr", "pl", "pr", "sc",
    "sh", "sk", "sl", "sm", "sn", "sp", "st", "sw", "th", "tr", "tw", "wh",
]
COMMON_STARTS = [
    "co", "re", "in", "de", "pr", "st", "ca", "ma", "pa", "ba", "mo", "ha", "se",
    "di", "po", "ti", "fi", "la", "ra", "su", "ve",
]

EPOCH = date(1970, 1, 1)


def _dedupe(items: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


ALL_PREFIXES = _dedupe(CONSONANT_BLENDS + COMMON_STARTS)


@dataclass(frozen=True)
class DailyPuzzle:
    prefix: str
    syllable_count: int
    date: str
    day_of_week: str


def date_key(day: date) -> int:
    """Year, zero-based month and day of month written one after another, read as one number."""
    return int(f"{day.year}{day.month - 1}{day.day}")


def days_since_epoch(day: date) -> int:
    return day.toordinal() - EPOCH.toordinal()


class DailyPuzzleSelector:
    """Derives each day's prefix and syllable count from the calendar date alone."""

    def __init__(self, prefixes: Optional[Sequence[str]] = None):
        self.prefixes = _dedupe(ALL_PREFIXES if prefixes is None else prefixes)
        if not self.prefixes:
            raise ValueError("Prefix list is empty; cannot choose a daily puzzle")

    def prefix_for(self, day: date) -> str:
        return self.prefixes[date_key(day) % len(self.prefixes)]

    def syllable_count_for(self, day: date) -> int:
        # Cycles 1, 2, 3
        return days_since_epoch(day) % 3 + 1

    def puzzle_for(self, day: Optional[date] = None) -> DailyPuzzle:
        day = day or date.today()
        return DailyPuzzle(
            prefix=self.prefix_for(day),
            syllable_count=self.syllable_count_for(day),
            date=day.isoformat(),
            day_of_week=day.strftime("%A"),
        )
