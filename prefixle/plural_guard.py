"""
Suffix heuristics for spotting plurals, so that a word and its plural
(e.g. "broker" / "brokers") can't both be scored.
"""

from dataclasses import dataclass
from typing import Container, Optional, Set

# Endings that look plural but usually aren't: discuss, famous, physics
NON_PLURAL_ENDINGS = ("ss", "ous", "ics")
PLURAL_ENDINGS = ("s", "es", "ers", "ors", "ies")

SINGULAR_FOUND = "singular_found"
PLURAL_FOUND = "plural_found"


@dataclass(frozen=True)
class PluralCollision:
    direction: str
    existing_word: str


def is_likely_plural(word: str) -> bool:
    if any(word.endswith(ending) for ending in NON_PLURAL_ENDINGS):
        return False
    for ending in PLURAL_ENDINGS:
        if ending == "s":
            if word.endswith("s") and not word.endswith("ss"):
                return True
        elif word.endswith(ending):
            return True
    return False


def get_singular_form(word: str) -> Optional[str]:
    """Strip the first matching plural suffix: ies -> y, es -> '', s -> ''."""
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("es"):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return None


def derive_plural_candidates(word: str) -> Set[str]:
    candidates = {word + "s", word + "es"}
    if word.endswith("y"):
        candidates.add(word[:-1] + "ies")
    return candidates


def find_collision(word: str, found_words: Container[str]) -> Optional[PluralCollision]:
    """
    Check a candidate against the words already found in both directions.

    Returns a PluralCollision naming the word already found, or None when the
    candidate is free of singular/plural clashes.
    """
    singular = get_singular_form(word)
    if singular and singular in found_words:
        return PluralCollision(SINGULAR_FOUND, singular)
    for plural in sorted(derive_plural_candidates(word)):
        if plural in found_words:
            return PluralCollision(PLURAL_FOUND, plural)
    return None
