from __future__ import annotations
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

from app.calculation import CharClass, Metrics, classify, compute_metrics
from app.state import ModeSettings, SessionState, SessionStatus
from app.validation import require_target
from services.results import ResultEmitter, SessionResult

log = logging.getLogger(__name__)

Clock = Callable[[], float]


class TypingEngine:
    """
    One typing session: target text, typed buffer, lifecycle and metrics.

    Keystrokes (``submit``/``process_key``/``backspace``) and timer ticks
    (``tick``) mutate the same buffer/state pair and are serialized through
    one lock. Rejected input is a normal outcome and is reported by a False
    return value, never an exception.
    """

    def __init__(
        self,
        target_text: str,
        settings: ModeSettings | None = None,
        clock: Clock = time.monotonic,
        wall_clock: Clock = time.time,
        emitter: ResultEmitter | None = None,
    ):
        self.settings = settings or ModeSettings()
        self.emitter = emitter or ResultEmitter()
        self._clock = clock
        self._wall_clock = wall_clock
        self._lock = threading.RLock()
        self.state = SessionState()
        self.target = require_target(target_text)
        self.typed = ""
        self.result: Optional[SessionResult] = None
        self._metrics = compute_metrics(self.target, "", 0.0)
        self._samples: List[Tuple[float, float]] = []
        self._started_wall = 0.0

    # ---------------- queries ----------------
    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def is_complete(self) -> bool:
        return self.state.status is SessionStatus.COMPLETE

    def elapsed_seconds(self) -> float:
        with self._lock:
            return self._elapsed(self._clock())

    def remaining_seconds(self) -> Optional[float]:
        limit = self.settings.time_limit
        if not limit:
            return None
        return max(0.0, float(limit) - self.elapsed_seconds())

    def metrics(self) -> Metrics:
        with self._lock:
            return self._metrics

    def classification(self) -> List[CharClass]:
        with self._lock:
            return classify(self.target, self.typed)

    def samples(self) -> List[Tuple[float, float]]:
        with self._lock:
            return list(self._samples)

    # ---------------- input ----------------
    def submit(self, candidate: str) -> bool:
        """Offer a whole new buffer value. Returns False when it was rejected."""
        with self._lock:
            if not self.state.accepts_input:
                return False
            now = self._clock()
            if self._time_is_up(now):
                log.debug("Input after the %ss limit, ending session", self.settings.time_limit)
                self._finish(now, aborted=False)
                return False
            if len(candidate) > len(self.target):
                return False
            if self.state.status is SessionStatus.IDLE:
                if not candidate:
                    return True
                self.state.start(now)
                self._started_wall = self._wall_clock()
                log.debug("Session started (%s)", self.settings.mode.value)
            self.typed = candidate
            self._recompute(now)
            if self.typed == self.target:
                self._finish(now, aborted=False)
            return True

    def process_key(self, ch: str) -> bool:
        if not ch:
            return False
        with self._lock:
            return self.submit(self.typed + ch)

    def backspace(self) -> bool:
        with self._lock:
            if not self.typed:
                return False
            return self.submit(self.typed[:-1])

    # ---------------- lifecycle ----------------
    def pause(self) -> bool:
        with self._lock:
            now = self._clock()
            if not self.state.pause(now):
                return False
            self._recompute(now)
            log.debug("Session paused at %.2fs", self._metrics.elapsed_seconds)
            return True

    def resume(self) -> bool:
        with self._lock:
            if not self.state.resume(self._clock()):
                return False
            log.debug("Session resumed")
            return True

    def toggle_pause(self) -> bool:
        with self._lock:
            if self.state.status is SessionStatus.PAUSED:
                return self.resume()
            return self.pause()

    def finalize(self, aborted: bool = True) -> SessionResult:
        """
        Force completion (finish button, abort, timer expiry). Allowed from any
        state, paused included. Once complete, returns the existing result.
        """
        with self._lock:
            if self.result is not None:
                return self.result
            return self._finish(self._clock(), aborted=aborted)

    def tick(self) -> Metrics:
        with self._lock:
            if self.state.status is not SessionStatus.ACTIVE:
                return self._metrics
            now = self._clock()
            self._recompute(now)
            self._samples.append((self._metrics.elapsed_seconds, float(self._metrics.wpm)))
            if self._time_is_up(now):
                log.debug("Time limit of %ss reached", self.settings.time_limit)
                self._finish(now, aborted=False)
            return self._metrics

    def reset(self, text: str | None = None, settings: ModeSettings | None = None) -> None:
        with self._lock:
            if text is not None:
                self.target = require_target(text)
            if settings is not None:
                self.settings = settings
            self.state.reset()
            self.typed = ""
            self.result = None
            self._samples.clear()
            self._started_wall = 0.0
            self._metrics = compute_metrics(self.target, "", 0.0)

    # ---------------- internals ----------------
    def _elapsed(self, now: float) -> float:
        elapsed = self.state.elapsed(now)
        limit = self.settings.time_limit
        # a timed session never runs past its limit, whenever the expiry is noticed
        return min(elapsed, float(limit)) if limit else elapsed

    def _time_is_up(self, now: float) -> bool:
        limit = self.settings.time_limit
        return bool(limit) and self.state.status is SessionStatus.ACTIVE \
            and self.state.elapsed(now) >= float(limit)

    def _recompute(self, now: float) -> None:
        self._metrics = compute_metrics(self.target, self.typed, self._elapsed(now))

    def _finish(self, now: float, aborted: bool) -> SessionResult:
        self.state.complete(now)
        self._recompute(now)
        self.result = self.emitter.emit(
            self._metrics,
            self.settings,
            aborted=aborted,
            started_at=self._started_wall,
            ended_at=self._wall_clock(),
            samples=tuple(self._samples),
        )
        return self.result
