from typing import Callable, Dict, Optional
from datetime import date
import logging
import threading

from prefixle.config import Settings
from prefixle.daily_puzzle import DailyPuzzleSelector
from prefixle.lexical_client import LexicalClient
from prefixle.rate_limiter import RateLimiter
from prefixle.plural_guard import is_likely_plural, find_collision, SINGULAR_FOUND
from prefixle.scoring import score_tags
from prefixle.puzzle_state import PuzzleState, StateStore
from prefixle.achievements import AchievementTracker
from prefixle.game_stats import GameStats

logger = logging.getLogger(__name__)

AchievementObserver = Callable[[PuzzleState], Optional[str]]


def _result(success: bool, message: str, points: int = 0, achievement: Optional[str] = None) -> Dict:
    return {"success": success, "message": message, "points": points, "achievement": achievement}


class SubmissionPipeline:
    """Validates, scores and records submitted words for one day's PuzzleState."""

    def __init__(self, state: PuzzleState, client: LexicalClient, store: Optional[StateStore] = None,
                 observer: Optional[AchievementObserver] = None, plural_check_before_lookup: bool = True):
        self.state = state
        self.client = client
        self.store = store
        self.observer = observer
        self.plural_check_before_lookup = plural_check_before_lookup

    def submit_word(self, raw_input: str) -> Dict:
        """
        Run a submission through the local checks and the remote lookup.

        Returns a dict with 'success', 'message', 'points' (0 on rejection) and
        'achievement' (a newly unlocked tier name, or None).
        """
        word = (raw_input or "").strip().lower()
        state = self.state

        if not word:
            return _result(False, "Please enter a word")

        if not word.startswith(state.prefix):
            return _result(False, f'Word must start with "{state.prefix.upper()}"')

        if word in state.found_words:
            return _result(False, f'"{word}" has already been found')

        collision = find_collision(word, state.found_words)
        if collision:
            if collision.direction == SINGULAR_FOUND:
                message = f'"{word}" is a plural of "{collision.existing_word}", which you already found'
            else:
                message = f'You already found "{collision.existing_word}", the plural of "{word}"'
            return _result(False, message)

        if self.plural_check_before_lookup and is_likely_plural(word):
            return _result(False, f'Plural words are not allowed: "{word}"')

        result = self.client.lookup_exact(word, state.syllable_count)
        if result is None:
            return _result(False, f'"{word}" is not a valid {state.syllable_count}-syllable word')

        if not self.plural_check_before_lookup and is_likely_plural(word):
            return _result(False, f'Plural words are not allowed: "{word}"')

        points, category = score_tags(result.tags)
        state.add_word(word, points, category)
        logger.info(f"Accepted '{word}' for {points} points ({category}); total {state.total_score}")

        achievement = self.observer(state) if self.observer else None
        self.persist()

        plural = "" if points == 1 else "s"
        return _result(True, f'"{word}" accepted! +{points} point{plural} ({category})', points, achievement)

    def persist(self) -> None:
        if self.store is not None and not self.store.save(self.state):
            logger.warning("Continuing with in-memory puzzle state only")

    def get_progress_snapshot(self) -> Dict:
        state = self.state
        return {
            "prefix": state.prefix,
            "syllableCount": state.syllable_count,
            "totalScore": state.total_score,
            "foundCount": state.found_count,
            "possibleWords": state.possible_words,
            "maxPossiblePoints": state.max_possible_points,
            "currentAchievementTier": state.current_achievement_tier,
            "foundWords": sorted(state.found_words),
            "date": state.date,
        }


class PuzzleGame:
    """Today's puzzle: loads or creates the state and serialises submissions."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[LexicalClient] = None,
                 selector: Optional[DailyPuzzleSelector] = None, store: Optional[StateStore] = None,
                 stats: Optional[GameStats] = None, tracker: Optional[AchievementTracker] = None,
                 today: Optional[date] = None):
        self.settings = settings or Settings.from_env()
        if client is None:
            limiter = RateLimiter(
                delay_ms=self.settings.api_delay_ms,
                timeout_ms=self.settings.api_timeout_ms,
                max_retries=self.settings.api_max_retries,
                backoff_ms=self.settings.api_retry_backoff_ms,
            )
            client = LexicalClient(limiter, api_url=self.settings.api_url,
                                   max_results=self.settings.lookup_max_results)
        self.client = client
        self.selector = selector or DailyPuzzleSelector()
        self.store = store or StateStore(self.settings.state_file)
        self.stats = stats or GameStats(self.settings.stats_file)
        self.tracker = tracker or AchievementTracker.for_mode(self.settings.achievement_mode)
        self._lock = threading.Lock()

        self.puzzle = self.selector.puzzle_for(today)
        self.state = self._load_or_create()
        self.pipeline = SubmissionPipeline(
            self.state, self.client, self.store, self.tracker,
            plural_check_before_lookup=self.settings.plural_check_before_lookup,
        )

    def _load_or_create(self) -> PuzzleState:
        state = self.store.load(self.puzzle.date)
        if state is not None:
            logger.info(f"Resuming puzzle for {state.date}: prefix '{state.prefix}', {state.found_count} words found")
            return state

        stale = self.store.load_raw()
        if stale and stale.get("date") != self.puzzle.date:
            self._record_stale_day(stale)

        state = PuzzleState.fresh(self.puzzle)
        totals = self.client.estimate_puzzle_totals(state.prefix, state.syllable_count)
        state.possible_words = totals.possible_words
        state.max_possible_points = totals.max_possible_points
        logger.info(f"New puzzle for {state.date}: prefix '{state.prefix}', {state.syllable_count} syllables")
        if not self.store.save(state):
            logger.warning("Continuing with in-memory puzzle state only")
        return state

    def _record_stale_day(self, blob: Dict) -> None:
        try:
            previous = PuzzleState.from_dict(blob)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Not recording unreadable previous day: {e}")
            return
        self.stats.record_day(previous)

    def submit_word(self, raw_input: str) -> Dict:
        with self._lock:
            return self.pipeline.submit_word(raw_input)

    def get_progress_snapshot(self) -> Dict:
        with self._lock:
            return self.pipeline.get_progress_snapshot()

    def get_history_stats(self) -> Dict:
        return self.stats.get_history_stats(date.fromisoformat(self.puzzle.date))
