from typing import Dict, List, Optional, Union
import json
import logging
from pathlib import Path
from datetime import date, datetime, timedelta
import pandas as pd

from prefixle.puzzle_state import PuzzleState

logger = logging.getLogger(__name__)


class GameStats:
    def __init__(self, stats_file: Union[str, Path] = "game_data/stats.json"):
        self.stats_file = Path(stats_file)
        self._load_stats()

    def _load_stats(self) -> None:
        """Load statistics from file or start empty if missing or unreadable."""
        self.stats = {"days": {}}
        if not self.stats_file.exists():
            return
        try:
            with open(self.stats_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read stats from {self.stats_file}: {e}")
            return
        if isinstance(data, dict) and isinstance(data.get("days"), dict):
            self.stats = data

    def _save_stats(self) -> None:
        """Save statistics to file."""
        try:
            self.stats_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.stats_file, 'w', encoding='utf-8') as f:
                json.dump(self.stats, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save stats to {self.stats_file}: {e}")

    def record_day(self, state: PuzzleState) -> None:
        """Record the summary of a finished day. Recording the same date again overwrites it."""
        self.stats["days"][state.date] = {
            "date": state.date,
            "prefix": state.prefix,
            "syllable_count": state.syllable_count,
            "score": state.total_score,
            "found_count": state.found_count,
            "possible_words": state.possible_words,
            "achievement": state.current_achievement_tier,
            "recorded_at": datetime.now().isoformat(),
        }
        self._save_stats()

    def get_days(self) -> List[Dict]:
        return sorted(self.stats["days"].values(), key=lambda d: d["date"])

    def current_streak(self, today: Optional[date] = None) -> int:
        """Consecutive played days ending yesterday or today."""
        played = {d["date"] for d in self.stats["days"].values() if d.get("found_count", 0) > 0}
        day = today or date.today()
        if day.isoformat() not in played:
            day -= timedelta(days=1)
        streak = 0
        while day.isoformat() in played:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def get_history_stats(self, today: Optional[date] = None) -> Dict:
        days = self.get_days()
        if not days:
            return {"days_played": 0, "best_score": 0, "avg_score": 0.0, "current_streak": 0}
        scores = [d["score"] for d in days]
        return {
            "days_played": len(days),
            "best_score": max(scores),
            "avg_score": sum(scores) / len(scores),
            "current_streak": self.current_streak(today),
        }

    def score_trend(self) -> pd.DataFrame:
        """Score and found-word count per recorded date, oldest first."""
        days = self.get_days()
        if not days:
            return pd.DataFrame(columns=["date", "score", "found_count"])
        df = pd.DataFrame(days)[["date", "score", "found_count"]]
        df["date"] = pd.to_datetime(df["date"]).dt.date
        return df.sort_values("date").reset_index(drop=True)
