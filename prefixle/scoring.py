from typing import Iterable, Optional, Tuple

FREQUENCY_TAG_PREFIX = "f:"

COMMON = "common"
MODERATE = "moderate"
CHALLENGING = "challenging"


def extract_frequency(tags: Iterable[str]) -> Optional[float]:
    """Return the per-million frequency from an 'f:<number>' tag, or None if there isn't a usable one."""
    for tag in tags or ():
        if isinstance(tag, str) and tag.startswith(FREQUENCY_TAG_PREFIX):
            try:
                return float(tag[len(FREQUENCY_TAG_PREFIX):])
            except ValueError:
                continue
    return None


def points_for_frequency(frequency: Optional[float]) -> int:
    # Missing frequency counts as rare
    if frequency is None:
        return 3
    if frequency > 10:
        return 1
    if frequency > 1:
        return 2
    return 3


def category_for_points(points: int) -> str:
    if points == 1:
        return COMMON
    if points == 2:
        return MODERATE
    return CHALLENGING


def score_tags(tags: Iterable[str]) -> Tuple[int, str]:
    """Points and category for a lookup entry's tags."""
    points = points_for_frequency(extract_frequency(tags))
    return points, category_for_points(points)
