from datetime import datetime

import pytest

from app.state import ModeSettings, SessionMode
from services.performance import DAY, PerformanceTracker
from services.results import SessionResult
from utils import db_helper


def make_result(wpm=50, accuracy=97, chars=100, errors=3, ended_at=1_700_000_000.0,
                mode=SessionMode.PRACTICE, skipped=False):
    return SessionResult(
        mode=mode.value,
        wpm=wpm,
        raw_wpm=wpm + 2,
        accuracy=accuracy,
        consistency=90.0,
        efficiency=wpm * accuracy / 100.0,
        correct_chars=chars - errors,
        incorrect_chars=errors,
        time_elapsed=30.0,
        total_characters=chars,
        target_characters=chars,
        was_skipped=skipped,
        started_at=ended_at - 30.0,
        ended_at=ended_at,
        settings=ModeSettings(mode=mode),
    )


@pytest.fixture
def tracker(tmp_path, wall_clock):
    return PerformanceTracker(tmp_path / "results.db", clock=wall_clock)


def test_empty_history(tracker):
    stats = tracker.stats_for_timeframe("all")
    assert stats["total_tests"] == 0
    assert stats["improvement_rate"] == 0
    ov = tracker.overview()
    assert ov["current_wpm"] == 0
    assert ov["streak"] == 0
    assert tracker.insights() == []


def test_skipped_results_are_not_stored(tracker):
    assert not tracker.record(make_result(chars=5, skipped=True))
    assert tracker.tests_by_timeframe() == []


def test_record_round_trips_row(tracker):
    assert tracker.record(make_result(mode=SessionMode.TIMED))
    (row,) = tracker.tests_by_timeframe()
    assert row["mode"] == "timed"
    assert row["wpm"] == 50
    assert row["aborted"] is False
    assert row["settings"]["mode"] == "timed"


def test_aggregates(tracker, wall_clock):
    now = wall_clock()
    for i, wpm in enumerate([40, 50, 60, 70]):
        tracker.record(make_result(wpm=wpm, accuracy=90 + i, ended_at=now - (4 - i) * 60))
    stats = tracker.stats_for_timeframe("all")
    assert stats["total_tests"] == 4
    assert stats["average_wpm"] == 55
    assert stats["best_wpm"] == 70
    assert stats["average_accuracy"] == 92  # 91.5 rounds up
    assert stats["total_time"] == 120.0
    assert stats["total_errors"] == 12
    # newer half (65) against older half (45)
    assert stats["improvement_rate"] == 44


def test_timeframes_filter_by_end_time(tracker, wall_clock):
    now = wall_clock()
    tracker.record(make_result(wpm=30, ended_at=now - 40 * DAY))
    tracker.record(make_result(wpm=40, ended_at=now - 3 * DAY))
    tracker.record(make_result(wpm=50, ended_at=now - 60))
    assert [t["wpm"] for t in tracker.tests_by_timeframe("today")] == [50]
    assert [t["wpm"] for t in tracker.tests_by_timeframe("1week")] == [50, 40]
    assert [t["wpm"] for t in tracker.tests_by_timeframe("1month")] == [50, 40]
    assert [t["wpm"] for t in tracker.tests_by_timeframe("all")] == [50, 40, 30]


def test_stats_by_mode(tracker):
    tracker.record(make_result(wpm=40, mode=SessionMode.TIMED))
    tracker.record(make_result(wpm=60, mode=SessionMode.TIMED))
    tracker.record(make_result(wpm=30, mode=SessionMode.DEVELOPER))
    by_mode = tracker.stats_by_mode()
    assert by_mode["timed"]["count"] == 2
    assert by_mode["timed"]["average_wpm"] == 50
    assert by_mode["timed"]["best_wpm"] == 60
    assert by_mode["developer"]["count"] == 1


def test_trends_are_oldest_first_and_grouped_by_day(tracker, wall_clock):
    now = wall_clock()
    tracker.record(make_result(wpm=45, ended_at=now - 2 * DAY))
    tracker.record(make_result(wpm=55, ended_at=now - 10))
    trend = tracker.performance_trends("1week")
    assert [t["wpm"] for t in trend] == [45, 55]
    by_day = tracker.history_by_day("1week")
    assert datetime.fromtimestamp(now - 10).date().isoformat() in by_day
    assert sum(len(v) for v in by_day.values()) == 2


def test_streak_and_insights(tracker, wall_clock):
    now = wall_clock()
    for i in range(5):
        tracker.record(make_result(wpm=50 + i, accuracy=98, ended_at=now - (5 - i) * 60))
    ov = tracker.overview()
    assert ov["streak"] == 5
    assert ov["current_wpm"] == 54
    assert ov["best_wpm"] == 54
    assert ov["total_tests"] == 5
    assert ov["error_rate"] == 3
    kinds = [msg for _, msg in tracker.insights()]
    assert any("streak" in m for m in kinds)
    assert any("improving" in m for m in kinds)


def test_low_accuracy_breaks_streak(tracker, wall_clock):
    now = wall_clock()
    tracker.record(make_result(accuracy=98, ended_at=now - 120))
    tracker.record(make_result(accuracy=80, ended_at=now - 60))
    assert tracker.overview()["streak"] == 0
    assert any(kind == "tip" for kind, _ in tracker.insights())


def test_clear(tracker):
    tracker.record(make_result())
    tracker.clear()
    assert tracker.tests_by_timeframe() == []


def test_storage_failure_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    broken = PerformanceTracker(blocker / "results.db")
    assert not broken.record(make_result())
    assert broken.tests_by_timeframe() == []
    assert "Failed to store result" in caplog.text


def test_db_helper_insert_returns_row_id(tmp_path):
    path = tmp_path / "r.db"
    row = {"mode": "practice", "wpm": 10, "ended_at": 1.0, "settings": {"mode": "practice"}}
    assert db_helper.insert_result(path, row) == 1
    assert db_helper.insert_result(path, row) == 2
    assert len(db_helper.fetch_results(path, since=0.5)) == 2
    assert db_helper.fetch_results(path, since=2.0) == []
