import os
import json
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from prefixle.config import STATE_KEY
from prefixle.daily_puzzle import DailyPuzzle
from prefixle.scoring import category_for_points

logger = logging.getLogger(__name__)


@dataclass
class PuzzleState:
    prefix: str
    syllable_count: int
    date: str
    day_of_week: str = ""
    found_words: Dict[str, Dict] = field(default_factory=dict)
    total_score: int = 0
    current_achievement_tier: str = ""
    possible_words: int = 0
    max_possible_points: int = 0

    @classmethod
    def fresh(cls, puzzle: DailyPuzzle) -> "PuzzleState":
        return cls(
            prefix=puzzle.prefix.lower(),
            syllable_count=puzzle.syllable_count,
            date=puzzle.date,
            day_of_week=puzzle.day_of_week,
        )

    @property
    def found_count(self) -> int:
        return len(self.found_words)

    def add_word(self, word: str, points: int, category: str) -> None:
        self.found_words[word.lower()] = {"points": points, "category": category}
        self.recompute_total()

    def recompute_total(self) -> int:
        self.total_score = sum(entry["points"] for entry in self.found_words.values())
        return self.total_score

    def to_dict(self) -> Dict:
        return {
            "prefix": self.prefix,
            "syllableCount": self.syllable_count,
            "foundWords": self.found_words,
            "totalScore": self.total_score,
            "currentAchievementTier": self.current_achievement_tier,
            "possibleWords": self.possible_words,
            "maxPossiblePoints": self.max_possible_points,
            "date": self.date,
            "dayOfWeek": self.day_of_week,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PuzzleState":
        """Rebuild a state from its persisted form. Missing fields take defaults; the total is recomputed."""
        found_words = {}
        for word, entry in (data.get("foundWords") or {}).items():
            points = int(entry.get("points", 0)) if isinstance(entry, dict) else 0
            if not 1 <= points <= 3:
                logger.warning(f"Dropping stored word '{word}' with invalid points {points}")
                continue
            found_words[str(word).lower()] = {
                "points": points,
                "category": entry.get("category") or category_for_points(points),
            }
        state = cls(
            prefix=str(data["prefix"]).lower(),
            syllable_count=int(data["syllableCount"]),
            date=str(data["date"]),
            day_of_week=data.get("dayOfWeek") or "",
            found_words=found_words,
            current_achievement_tier=data.get("currentAchievementTier") or "",
            possible_words=int(data.get("possibleWords") or 0),
            max_possible_points=int(data.get("maxPossiblePoints") or 0),
        )
        state.recompute_total()
        return state


class StateStore:
    """Keyed JSON blob store for the day's puzzle state."""

    def __init__(self, state_file: Union[str, Path] = "game_data/puzzle_state.json", key: str = STATE_KEY):
        self.state_file = Path(state_file)
        self.key = key

    def _read_all(self) -> Dict:
        if not self.state_file.exists():
            return {}
        with open(self.state_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write_atomic(self, data: Dict) -> None:
        """Write to a temp file beside the target, then swap it in."""
        fd, tmp_name = tempfile.mkstemp(prefix=".puzzle_state.", suffix=".tmp", dir=self.state_file.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.state_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load_raw(self) -> Optional[Dict]:
        """Return the stored blob, or None if there is none or it can't be read."""
        # ValueError covers malformed JSON and bytes that are not UTF-8
        try:
            blob = self._read_all().get(self.key)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read puzzle state from {self.state_file}: {e}")
            return None
        return blob if isinstance(blob, dict) else None

    def load(self, today: str) -> Optional[PuzzleState]:
        """Load the stored state only if it belongs to `today` (ISO date)."""
        blob = self.load_raw()
        if not blob or blob.get("date") != today:
            return None
        try:
            return PuzzleState.from_dict(blob)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Discarding corrupt puzzle state for {today}: {e}")
            return None

    def save(self, state: PuzzleState) -> bool:
        """Persist the state. Returns False (after logging) if the write failed."""
        try:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning(f"Overwriting unreadable puzzle state file {self.state_file}")
                data = {}
            data[self.key] = state.to_dict()
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(data)
        except OSError as e:
            logger.error(f"Failed to save puzzle state to {self.state_file}: {e}")
            return False
        return True
