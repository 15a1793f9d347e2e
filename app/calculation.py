from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import bisect
import math
from typing import List

CHARS_PER_WORD = 5.0


class CharClass(str, Enum):
    UNTYPED = "untyped"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    CURRENT = "current"


@dataclass(frozen=True)
class Metrics:
    correct_chars: int = 0
    incorrect_chars: int = 0
    typed_chars: int = 0
    target_chars: int = 0
    elapsed_seconds: float = 0.0
    wpm: int = 0
    raw_wpm: int = 0
    accuracy: int = 100
    consistency: float = 100.0
    efficiency: float = 0.0
    keystrokes_per_minute: int = 0
    correct_keystrokes_per_minute: int = 0
    error_rate: float = 0.0
    progress: int = 0


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3, -2.5 -> -2); Python's round() would give 2."""
    return int(math.floor(value + 0.5))


def count_chars(target: str, typed: str) -> tuple[int, int]:
    """
    Positional comparison: typed[i] is correct iff it equals target[i].
    No alignment is attempted, so a skipped character turns every following
    character incorrect. Scans the typed buffer only.
    """
    correct = 0
    for i, ch in enumerate(typed):
        if i < len(target) and ch == target[i]:
            correct += 1
    return correct, len(typed) - correct


def classify(target: str, typed: str) -> List[CharClass]:
    out: List[CharClass] = []
    for i, ch in enumerate(target):
        if i < len(typed):
            out.append(CharClass.CORRECT if typed[i] == ch else CharClass.INCORRECT)
        elif i == len(typed):
            out.append(CharClass.CURRENT)
        else:
            out.append(CharClass.UNTYPED)
    return out


def accuracy(correct: int, typed_len: int) -> float:
    if typed_len <= 0:
        return 100.0
    return 100.0 * correct / typed_len


def wpm(chars: int, elapsed_seconds: float) -> float:
    # WPM = (chars / 5) / minutes
    minutes = elapsed_seconds / 60.0
    if minutes <= 0:
        return 0.0
    return (chars / CHARS_PER_WORD) / minutes


def consistency(incorrect: int, target_len: int) -> float:
    """Penalty heuristic on error density, not a variance measure."""
    if target_len <= 0:
        return 100.0
    return max(0.0, 100.0 - (incorrect / target_len * 100.0 * 2))


def efficiency(wpm_value: float, accuracy_value: float) -> float:
    return wpm_value * accuracy_value / 100.0


def per_minute(count: int, elapsed_seconds: float) -> float:
    if elapsed_seconds <= 0:
        return 0.0
    return count / elapsed_seconds * 60.0


def compute_metrics(target: str, typed: str, elapsed_seconds: float) -> Metrics:
    correct, incorrect = count_chars(target, typed)
    typed_len = len(typed)
    acc = round_half_up(accuracy(correct, typed_len))
    speed = round_half_up(wpm(correct, elapsed_seconds))
    return Metrics(
        correct_chars=correct,
        incorrect_chars=incorrect,
        typed_chars=typed_len,
        target_chars=len(target),
        elapsed_seconds=max(0.0, elapsed_seconds),
        wpm=speed,
        raw_wpm=round_half_up(wpm(typed_len, elapsed_seconds)),
        accuracy=acc,
        consistency=consistency(incorrect, len(target)),
        efficiency=efficiency(speed, acc),
        keystrokes_per_minute=round_half_up(per_minute(typed_len, elapsed_seconds)),
        correct_keystrokes_per_minute=round_half_up(per_minute(correct, elapsed_seconds)),
        error_rate=(100.0 * incorrect / typed_len) if typed_len else 0.0,
        progress=min(100, round_half_up(100.0 * typed_len / len(target))) if target else 0,
    )


# -------- rating / insights (summary + dashboard) --------
RATING_TIERS = [
    (95.0, "Exceptional", "Outstanding performance!"),
    (85.0, "Excellent", "Great typing skills!"),
    (75.0, "Very Good", "Above average performance"),
    (65.0, "Good", "Solid typing ability"),
    (50.0, "Fair", "Room for improvement"),
]


def overall_score(wpm_value: float, accuracy_value: float, consistency_value: float) -> float:
    # 100 WPM counts as a full speed score
    speed_score = min(wpm_value, 100.0)
    return speed_score * 0.4 + accuracy_value * 0.4 + consistency_value * 0.2


def performance_rating(wpm_value: float, accuracy_value: float, consistency_value: float) -> tuple[str, str]:
    score = overall_score(wpm_value, accuracy_value, consistency_value)
    for threshold, name, blurb in RATING_TIERS:
        if score >= threshold:
            return name, blurb
    return "Needs Work", "Focus on practice"


def result_insights(wpm_value: float, accuracy_value: float, consistency_value: float,
                    errors: int, total_chars: int) -> List[tuple[str, str]]:
    """(category, message) pairs shown under the session summary."""
    out: List[tuple[str, str]] = []
    if wpm_value >= 80:
        out.append(("speed", f"High speed achieved. Keep practicing to push beyond {min(120, wpm_value + 10)} WPM."))
    elif wpm_value < 50:
        out.append(("speed", "Drill high-frequency words to build speed."))
    if accuracy_value >= 98:
        out.append(("accuracy", "Outstanding precision."))
    elif accuracy_value < 90:
        out.append(("accuracy", "Focus on accuracy over speed. Slow down to build muscle memory."))
    if consistency_value >= 90:
        out.append(("consistency", "Your typing rhythm is very consistent."))
    elif consistency_value < 70:
        out.append(("consistency", "Work on keeping a steady rhythm."))
    if total_chars and errors > total_chars * 0.15:
        out.append(("errors", "High error rate. Practice common letter combinations."))
    if wpm_value > 60 and accuracy_value > 95:
        out.append(("overall", "Excellent balance of speed and accuracy."))
    return out



# -------- WPM-over-time graph --------
def instant_wpm(times: List[float], cumulative_wpm: List[float], window_seconds: float = 2.0) -> List[float]:
    """
    Convert cumulative-average WPM samples (what the engine records on each
    tick) into WPM over a trailing window.
    """
    n = len(times)
    if n == 0 or n != len(cumulative_wpm) or window_seconds <= 0:
        return [0.0] * len(cumulative_wpm)

    # estimated correct chars typed by each sample time
    chars = [w * CHARS_PER_WORD * max(0.0, t) / 60.0 for t, w in zip(times, cumulative_wpm)]
    out = []
    for i, t in enumerate(times):
        j = bisect.bisect_left(times, t - window_seconds)
        in_window = max(0.0, chars[i] - chars[j])
        out.append(in_window * 60.0 / (CHARS_PER_WORD * window_seconds))
    return out


def smooth_wpm_time_aware(times: List[float], values: List[float], tau_seconds: float = 2.5) -> List[float]:
    """Exponential smoothing that respects uneven gaps between samples."""
    if not times or len(times) != len(values):
        return list(values)
    out = [values[0]]
    for i in range(1, len(times)):
        dt = max(1e-6, times[i] - times[i - 1])
        alpha = 1.0 - math.exp(-dt / tau_seconds)
        out.append(alpha * values[i] + (1.0 - alpha) * out[-1])
    return out
