import pytest
from datetime import date
from unittest.mock import Mock

from prefixle.achievements import AchievementTracker
from prefixle.config import Settings
from prefixle.daily_puzzle import DailyPuzzleSelector
from prefixle.game_logic import SubmissionPipeline, PuzzleGame
from prefixle.game_stats import GameStats
from prefixle.lexical_client import LookupResult, PuzzleTotals, FALLBACK_TOTALS
from prefixle.puzzle_state import PuzzleState, StateStore


def found(word, frequency, syllables=2):
    return LookupResult(word, syllables, frozenset({"n", f"f:{frequency}"}))


@pytest.fixture
def client():
    client = Mock()
    client.lookup_exact.side_effect = lambda word, syllables: found(word, 15)
    client.estimate_puzzle_totals.return_value = PuzzleTotals(40, 90)
    return client


@pytest.fixture
def state():
    return PuzzleState(prefix="br", syllable_count=2, date="2026-10-19", day_of_week="Monday",
                       possible_words=40, max_possible_points=90)


@pytest.fixture
def pipeline(state, client, tmp_path):
    store = StateStore(tmp_path / "puzzle_state.json")
    return SubmissionPipeline(state, client, store, AchievementTracker())


@pytest.mark.unit
def test_accepts_common_word(pipeline, state):
    result = pipeline.submit_word("  Brother ")
    assert result["success"] is True
    assert result["points"] == 1
    assert "brother" in result["message"]
    assert state.found_words["brother"] == {"points": 1, "category": "common"}
    assert state.total_score == 1


@pytest.mark.unit
def test_points_follow_frequency(pipeline, client, state):
    client.lookup_exact.side_effect = lambda word, syllables: found(word, 5)
    assert pipeline.submit_word("broker")["points"] == 2
    client.lookup_exact.side_effect = lambda word, syllables: found(word, 0.5)
    assert pipeline.submit_word("brisket")["points"] == 3
    assert state.found_words["brisket"]["category"] == "challenging"
    assert state.total_score == 5


@pytest.mark.unit
def test_empty_input(pipeline, client):
    result = pipeline.submit_word("   ")
    assert result == {"success": False, "message": "Please enter a word", "points": 0, "achievement": None}
    client.lookup_exact.assert_not_called()


@pytest.mark.unit
def test_wrong_prefix_names_prefix(pipeline, client):
    result = pipeline.submit_word("crane")
    assert result["success"] is False
    assert '"BR"' in result["message"]
    client.lookup_exact.assert_not_called()


@pytest.mark.unit
def test_duplicate_leaves_state_unchanged(pipeline, client, state):
    pipeline.submit_word("brother")
    before = dict(state.found_words)
    result = pipeline.submit_word("BROTHER")
    assert result["success"] is False
    assert "already been found" in result["message"]
    assert state.found_words == before
    assert state.total_score == 1
    assert client.lookup_exact.call_count == 1


@pytest.mark.unit
def test_plural_after_singular_rejected_without_lookup(pipeline, client, state):
    pipeline.submit_word("brother")
    client.lookup_exact.reset_mock()
    result = pipeline.submit_word("brothers")
    assert result["success"] is False
    assert 'plural of "brother"' in result["message"]
    assert state.total_score == 1
    client.lookup_exact.assert_not_called()


@pytest.mark.unit
def test_singular_after_plural_rejected(client):
    state = PuzzleState(prefix="bo", syllable_count=2, date="2026-10-19")
    state.add_word("bounties", 2, "moderate")
    result = SubmissionPipeline(state, client).submit_word("bounty")
    assert result["success"] is False
    assert 'You already found "bounties"' in result["message"]
    client.lookup_exact.assert_not_called()


@pytest.mark.unit
def test_likely_plural_short_circuits(pipeline, client):
    result = pipeline.submit_word("brokers")
    assert result["success"] is False
    assert "Plural" in result["message"]
    client.lookup_exact.assert_not_called()


@pytest.mark.unit
def test_plural_check_after_lookup(state, client):
    pipeline = SubmissionPipeline(state, client, plural_check_before_lookup=False)
    result = pipeline.submit_word("brokers")
    assert result["success"] is False
    client.lookup_exact.assert_called_once_with("brokers", 2)
    assert state.found_words == {}


@pytest.mark.unit
def test_invalid_word(pipeline, client, state):
    client.lookup_exact.side_effect = None
    client.lookup_exact.return_value = None
    result = pipeline.submit_word("brzzt")
    assert result["success"] is False
    assert result["message"] == '"brzzt" is not a valid 2-syllable word'
    assert state.found_words == {}


@pytest.mark.unit
def test_achievement_reported_once(pipeline):
    assert pipeline.submit_word("brother")["achievement"] == "First Word"
    assert pipeline.submit_word("broker")["achievement"] is None
    assert pipeline.get_progress_snapshot()["currentAchievementTier"] == "First Word"


@pytest.mark.unit
def test_accepted_word_is_persisted(pipeline):
    pipeline.submit_word("brother")
    loaded = pipeline.store.load("2026-10-19")
    assert loaded.found_words == {"brother": {"points": 1, "category": "common"}}
    assert loaded.current_achievement_tier == "First Word"


@pytest.mark.unit
def test_persistence_failure_keeps_playing(state, client):
    store = Mock()
    store.save.return_value = False
    pipeline = SubmissionPipeline(state, client, store)
    assert pipeline.submit_word("brother")["success"] is True
    assert state.total_score == 1


@pytest.mark.unit
def test_progress_snapshot(pipeline):
    pipeline.submit_word("brother")
    snapshot = pipeline.get_progress_snapshot()
    assert snapshot == {
        "prefix": "br",
        "syllableCount": 2,
        "totalScore": 1,
        "foundCount": 1,
        "possibleWords": 40,
        "maxPossiblePoints": 90,
        "currentAchievementTier": "First Word",
        "foundWords": ["brother"],
        "date": "2026-10-19",
    }


@pytest.fixture
def game_factory(tmp_path, client):
    settings = Settings(data_dir=str(tmp_path))

    def make(day):
        return PuzzleGame(settings=settings, client=client, selector=DailyPuzzleSelector(["br"]),
                          today=day)
    return make


@pytest.mark.local
def test_new_day_estimates_totals(game_factory, client):
    game = game_factory(date(2026, 10, 19))
    client.estimate_puzzle_totals.assert_called_once_with("br", game.puzzle.syllable_count)
    snapshot = game.get_progress_snapshot()
    assert snapshot["possibleWords"] == 40
    assert snapshot["maxPossiblePoints"] == 90


@pytest.mark.local
def test_estimate_fallback_is_used(game_factory, client):
    client.estimate_puzzle_totals.return_value = FALLBACK_TOTALS
    game = game_factory(date(2026, 10, 19))
    assert game.state.possible_words == 20
    assert game.state.max_possible_points == 60


@pytest.mark.local
def test_same_day_resumes_saved_progress(game_factory, client):
    first = game_factory(date(2026, 10, 19))
    assert first.submit_word("brother")["success"] is True

    client.estimate_puzzle_totals.reset_mock()
    second = game_factory(date(2026, 10, 19))
    client.estimate_puzzle_totals.assert_not_called()
    assert second.state == first.state


@pytest.mark.local
def test_next_day_starts_fresh_and_records_history(game_factory, client, tmp_path):
    first = game_factory(date(2026, 10, 19))
    first.submit_word("brother")

    second = game_factory(date(2026, 10, 20))
    assert second.state.found_words == {}
    assert second.state.date == "2026-10-20"
    history = second.get_history_stats()
    assert history["days_played"] == 1
    assert history["best_score"] == 1
    assert history["current_streak"] == 1
    assert GameStats(tmp_path / "stats.json").get_days()[0]["date"] == "2026-10-19"


@pytest.mark.local
def test_undecodable_state_file_does_not_stop_play(tmp_path, client):
    state_file = tmp_path / "puzzle_state.json"
    state_file.write_bytes(b"\xff\xfe\x00garbage")
    game = PuzzleGame(settings=Settings(data_dir=str(tmp_path)), client=client,
                      selector=DailyPuzzleSelector(["br"]), today=date(2026, 10, 19))
    assert game.state.found_words == {}

    state_file.write_bytes(b"\xff\xfe\x00garbage")
    result = game.submit_word("brother")
    assert result["success"] is True
    assert game.state.total_score == 1
    assert StateStore(state_file).load("2026-10-19").found_words == {"brother": {"points": 1, "category": "common"}}


@pytest.mark.local
def test_undecodable_stats_file_does_not_stop_game_start(tmp_path, client):
    (tmp_path / "stats.json").write_bytes(b"\xff\xfe\x00garbage")
    game = PuzzleGame(settings=Settings(data_dir=str(tmp_path)), client=client,
                      selector=DailyPuzzleSelector(["br"]), today=date(2026, 10, 19))
    assert game.get_history_stats()["days_played"] == 0
