"""
Client for the word lookup service (Datamuse-compatible /words endpoint).
All calls go through the RateLimiter; failures never escape to callers.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

import requests

from prefixle.config import (
    DATAMUSE_API_URL,
    LOOKUP_MAX_RESULTS,
    FALLBACK_POSSIBLE_WORDS,
    FALLBACK_MAX_POINTS,
)
from prefixle.plural_guard import is_likely_plural
from prefixle.rate_limiter import RateLimiter, LookupUnavailable
from prefixle.scoring import extract_frequency, points_for_frequency

logger = logging.getLogger(__name__)

PROPER_NOUN_TAG = "prop"
PLURAL_TAG = "pl"
# s = syllables, f = frequency, p = parts of speech
METADATA_FLAGS = "sfp"


@dataclass(frozen=True)
class LookupResult:
    spelling: str
    num_syllables: int = 0
    tags: FrozenSet[str] = field(default_factory=frozenset)
    exists: bool = True

    @property
    def frequency(self) -> Optional[float]:
        return extract_frequency(self.tags)

    @property
    def is_proper_noun(self) -> bool:
        return PROPER_NOUN_TAG in self.tags

    @property
    def is_plural(self) -> bool:
        return PLURAL_TAG in self.tags

    @classmethod
    def from_entry(cls, entry: Dict) -> "LookupResult":
        """Build a result from one service entry; raises ValueError on a malformed entry."""
        if not isinstance(entry, dict) or not isinstance(entry.get("word"), str):
            raise ValueError(f"Malformed lookup entry: {entry!r}")
        syllables = entry.get("numSyllables") or 0
        tags = entry.get("tags") or []
        if not isinstance(syllables, int) or not isinstance(tags, list):
            raise ValueError(f"Malformed lookup entry: {entry!r}")
        return cls(
            spelling=entry["word"],
            num_syllables=syllables,
            tags=frozenset(t for t in tags if isinstance(t, str)),
        )


@dataclass(frozen=True)
class PuzzleTotals:
    possible_words: int
    max_possible_points: int


FALLBACK_TOTALS = PuzzleTotals(FALLBACK_POSSIBLE_WORDS, FALLBACK_MAX_POINTS)


class LexicalClient:
    def __init__(self, rate_limiter: Optional[RateLimiter] = None, api_url: str = DATAMUSE_API_URL,
                 max_results: int = LOOKUP_MAX_RESULTS):
        self.rate_limiter = rate_limiter or RateLimiter()
        self.api_url = api_url
        self.max_results = max_results

    def _query(self, pattern: str, endpoint: str) -> List[LookupResult]:
        params = {"sp": pattern, "md": METADATA_FLAGS, "max": self.max_results}

        def request(timeout: float) -> requests.Response:
            return requests.get(self.api_url, params=params, timeout=timeout)

        response = self.rate_limiter.call_with_timeout_and_retry(request, endpoint=endpoint)
        data = response.json()
        if not isinstance(data, list):
            raise ValueError(f"Expected a list from lookup service, got {type(data).__name__}")
        return [LookupResult.from_entry(entry) for entry in data]

    def estimate_puzzle_totals(self, prefix: str, syllable_count: int) -> PuzzleTotals:
        """
        Estimate how many words (and points) today's puzzle holds.

        Proper nouns, plurals (flagged by the service or by the local heuristic)
        and words with the wrong syllable count are left out. Any lookup failure
        returns FALLBACK_TOTALS so play is never blocked.
        """
        try:
            results = self._query(f"{prefix}*", endpoint="prefix")
        except (LookupUnavailable, ValueError) as e:
            logger.warning(f"Could not estimate totals for '{prefix}' ({syllable_count} syllables): {e}. "
                           f"Using fallback {FALLBACK_TOTALS}")
            return FALLBACK_TOTALS

        possible_words = 0
        max_points = 0
        for result in results:
            if result.is_proper_noun or result.is_plural:
                continue
            if result.num_syllables != syllable_count:
                continue
            if is_likely_plural(result.spelling):
                continue
            possible_words += 1
            max_points += points_for_frequency(result.frequency)
        logger.info(f"Estimated {possible_words} words / {max_points} points for prefix '{prefix}'")
        return PuzzleTotals(possible_words, max_points)

    def lookup_exact(self, word: str, syllable_count: int) -> Optional[LookupResult]:
        """Return the matching entry if the word is a valid answer, else None."""
        try:
            results = self._query(word, endpoint="exact")
        except (LookupUnavailable, ValueError) as e:
            logger.warning(f"Lookup for '{word}' failed: {e}")
            return None
        if not results:
            return None

        result = results[0]
        if result.spelling != word:
            return None
        if result.num_syllables != syllable_count:
            logger.debug(f"'{word}' has {result.num_syllables} syllables, need {syllable_count}")
            return None
        if result.is_proper_noun or word != word.lower() or result.is_plural:
            return None
        return result
