from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Callable, List, Tuple

from app.calculation import Metrics
from app.state import ModeSettings

log = logging.getLogger(__name__)

# attempts shorter than this are shown but never enter long-run statistics
MIN_PROGRESS_CHARS = 10


@dataclass(frozen=True)
class SessionResult:
    mode: str
    wpm: int
    raw_wpm: int
    accuracy: int
    consistency: float
    efficiency: float
    correct_chars: int
    incorrect_chars: int
    time_elapsed: float
    total_characters: int
    target_characters: int
    was_skipped: bool
    aborted: bool = False
    keystrokes_per_minute: int = 0
    correct_keystrokes_per_minute: int = 0
    error_rate: float = 0.0
    started_at: float = 0.0
    ended_at: float = 0.0
    settings: ModeSettings = field(default_factory=ModeSettings)
    samples: Tuple[Tuple[float, float], ...] = ()

    @property
    def errors(self) -> int:
        return self.incorrect_chars


ResultListener = Callable[[SessionResult], None]


class ResultEmitter:
    """
    Builds the one result of a session and hands it to listeners.

    Every result is returned and delivered, skipped ones included; whether it
    is persisted is the listener's call (see ``was_skipped``).
    """

    def __init__(self, listeners: List[ResultListener] | None = None):
        self._listeners: List[ResultListener] = list(listeners or [])

    def add_listener(self, fn: ResultListener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: ResultListener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def build(self, metrics: Metrics, settings: ModeSettings, *, aborted: bool = False,
              started_at: float = 0.0, ended_at: float = 0.0,
              samples: Tuple[Tuple[float, float], ...] = ()) -> SessionResult:
        return SessionResult(
            mode=settings.mode.value,
            wpm=metrics.wpm,
            raw_wpm=metrics.raw_wpm,
            accuracy=metrics.accuracy,
            consistency=metrics.consistency,
            efficiency=metrics.efficiency,
            correct_chars=metrics.correct_chars,
            incorrect_chars=metrics.incorrect_chars,
            time_elapsed=metrics.elapsed_seconds,
            total_characters=metrics.typed_chars,
            target_characters=metrics.target_chars,
            was_skipped=metrics.typed_chars < MIN_PROGRESS_CHARS,
            aborted=aborted,
            keystrokes_per_minute=metrics.keystrokes_per_minute,
            correct_keystrokes_per_minute=metrics.correct_keystrokes_per_minute,
            error_rate=metrics.error_rate,
            started_at=started_at,
            ended_at=ended_at,
            settings=settings,
            samples=tuple(samples),
        )

    def emit(self, metrics: Metrics, settings: ModeSettings, **kwargs) -> SessionResult:
        result = self.build(metrics, settings, **kwargs)
        log.info(
            "Session finished: mode=%s wpm=%d acc=%d%% chars=%d skipped=%s",
            result.mode, result.wpm, result.accuracy, result.total_characters, result.was_skipped,
        )
        for fn in list(self._listeners):
            try:
                fn(result)
            except Exception:
                # a failing consumer must not break the session that produced the result
                log.exception("Result listener %r failed", fn)
        return result
