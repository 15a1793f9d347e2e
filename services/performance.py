from __future__ import annotations
from datetime import datetime
import logging
from pathlib import Path
import time
from typing import Any, Callable, Dict, List, Optional

from app.calculation import round_half_up
from app.errors import DatabaseError
from services.results import SessionResult
from utils import db_helper

log = logging.getLogger(__name__)

DAY = 24 * 60 * 60
TIMEFRAMES = {
    "today": DAY,
    "1day": DAY,
    "1week": 7 * DAY,
    "1month": 30 * DAY,
    "all": None,
}
RECENT_WINDOW = 10


def row_from_result(result: SessionResult) -> Dict[str, Any]:
    return {
        "mode": result.mode,
        "wpm": result.wpm,
        "raw_wpm": result.raw_wpm,
        "accuracy": result.accuracy,
        "consistency": result.consistency,
        "efficiency": result.efficiency,
        "correct_chars": result.correct_chars,
        "incorrect_chars": result.incorrect_chars,
        "time_elapsed": result.time_elapsed,
        "total_characters": result.total_characters,
        "target_characters": result.target_characters,
        "aborted": int(result.aborted),
        "started_at": result.started_at,
        "ended_at": result.ended_at,
        "settings": result.settings.as_dict(),
    }


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class PerformanceTracker:
    """
    Persistence/analytics sink for session results plus the dashboard's
    aggregations. Storage problems are logged; they never reach the caller
    that reported the result.
    """

    def __init__(self, db_path: Path, clock: Callable[[], float] = time.time):
        self.db_path = Path(db_path)
        self._clock = clock

    # ---------------- sink ----------------
    def record(self, result: SessionResult) -> bool:
        if result.was_skipped:
            log.info("Not storing skipped attempt (%d chars)", result.total_characters)
            return False
        try:
            db_helper.insert_result(self.db_path, row_from_result(result))
        except DatabaseError:
            log.exception("Failed to store result")
            return False
        return True

    def clear(self) -> None:
        db_helper.clear_results(self.db_path)

    # ---------------- queries ----------------
    def tests_by_timeframe(self, timeframe: str = "all") -> List[Dict[str, Any]]:
        """Stored results, newest first."""
        span = TIMEFRAMES.get(timeframe)
        since: Optional[float] = None if span is None else self._clock() - span
        try:
            return db_helper.fetch_results(self.db_path, since)
        except DatabaseError:
            log.exception("Failed to read results")
            return []

    def stats_for_timeframe(self, timeframe: str = "all") -> Dict[str, Any]:
        tests = self.tests_by_timeframe(timeframe)
        if not tests:
            return {
                "total_tests": 0, "average_wpm": 0, "best_wpm": 0, "average_accuracy": 0,
                "total_time": 0.0, "total_characters": 0, "total_errors": 0, "improvement_rate": 0,
            }

        improvement = 0
        if len(tests) >= 4:
            mid = len(tests) // 2
            recent_avg = _mean([t["wpm"] for t in tests[:mid]])
            older_avg = _mean([t["wpm"] for t in tests[mid:]])
            if older_avg > 0:
                improvement = round_half_up((recent_avg - older_avg) / older_avg * 100)

        return {
            "total_tests": len(tests),
            "average_wpm": round_half_up(_mean([t["wpm"] for t in tests])),
            "best_wpm": max(t["wpm"] for t in tests),
            "average_accuracy": round_half_up(_mean([t["accuracy"] for t in tests])),
            "total_time": sum(t["time_elapsed"] for t in tests),
            "total_characters": sum(t["total_characters"] for t in tests),
            "total_errors": sum(t["incorrect_chars"] for t in tests),
            "improvement_rate": improvement,
        }

    def stats_by_mode(self, timeframe: str = "all") -> Dict[str, Dict[str, Any]]:
        out: Dict[str, Dict[str, Any]] = {}
        for t in self.tests_by_timeframe(timeframe):
            s = out.setdefault(t["mode"] or "practice",
                               {"count": 0, "total_wpm": 0, "total_accuracy": 0, "best_wpm": 0})
            s["count"] += 1
            s["total_wpm"] += t["wpm"]
            s["total_accuracy"] += t["accuracy"]
            s["best_wpm"] = max(s["best_wpm"], t["wpm"])
        for s in out.values():
            s["average_wpm"] = round_half_up(s["total_wpm"] / s["count"])
            s["average_accuracy"] = round_half_up(s["total_accuracy"] / s["count"])
        return out

    def history_by_day(self, timeframe: str = "1week") -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for t in self.tests_by_timeframe(timeframe):
            day = datetime.fromtimestamp(t["ended_at"]).date().isoformat()
            grouped.setdefault(day, []).append(t)
        return grouped

    def performance_trends(self, timeframe: str = "1week") -> List[Dict[str, Any]]:
        tests = sorted(self.tests_by_timeframe(timeframe), key=lambda t: t["ended_at"])
        return [
            {
                "date": datetime.fromtimestamp(t["ended_at"]).date().isoformat(),
                "wpm": t["wpm"],
                "accuracy": t["accuracy"],
                "timestamp": t["ended_at"],
            }
            for t in tests
        ]

    def overview(self) -> Dict[str, Any]:
        tests = self.tests_by_timeframe("all")
        oldest_first = list(reversed(tests))

        streak, window = 0, []
        for t in oldest_first:
            window = (window + [t["wpm"]])[-RECENT_WINDOW:]
            avg = round_half_up(_mean(window))
            if t["accuracy"] >= 95 and t["wpm"] >= avg * 0.9:
                streak += 1
            else:
                streak = 0

        recent = tests[:RECENT_WINDOW]
        chars = sum(t["total_characters"] for t in recent)
        errors = sum(t["incorrect_chars"] for t in recent)
        return {
            "current_wpm": tests[0]["wpm"] if tests else 0,
            "average_wpm": round_half_up(_mean([t["wpm"] for t in recent])),
            "best_wpm": max((t["wpm"] for t in tests), default=0),
            "streak": streak,
            "error_rate": round_half_up(errors / chars * 100) if chars else 0,
            "total_tests": len(tests),
            "total_time": sum(t["time_elapsed"] for t in tests),
        }

    def insights(self) -> List[tuple[str, str]]:
        ov = self.overview()
        recent = self.tests_by_timeframe("all")[:3]
        today = self.stats_for_timeframe("today")
        out: List[tuple[str, str]] = []
        if ov["streak"] >= 5:
            out.append(("success", f"Amazing! You're on a {ov['streak']} test streak!"))
        if ov["total_tests"] and ov["current_wpm"] > ov["average_wpm"] * 1.1:
            out.append(("success", "Great job! You're typing faster than your average!"))
        if len(recent) == 3:
            oldest_first = list(reversed(recent))
            if all(b["wpm"] >= a["wpm"] for a, b in zip(oldest_first, oldest_first[1:])):
                out.append(("success", "You're improving! Keep up the great work!"))
        if today["total_tests"] and today["average_accuracy"] < 90:
            out.append(("tip", "Focus on accuracy - slow down to improve precision"))
        return out
