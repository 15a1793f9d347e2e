from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETE = "complete"


class SessionMode(str, Enum):
    PRACTICE = "practice"
    TIMED = "timed"
    CUSTOM = "custom"
    DEVELOPER = "developer"


@dataclass(frozen=True)
class ModeSettings:
    """Per-mode metadata; the only thing that differs between typing modes."""
    mode: SessionMode = SessionMode.PRACTICE
    time_limit: Optional[float] = None
    content_type: Optional[str] = None
    text_title: Optional[str] = None
    language: Optional[str] = None
    difficulty: Optional[str] = None
    snippet_title: Optional[str] = None
    include_numbers: Optional[bool] = None
    include_punctuation: Optional[bool] = None
    include_capitals: Optional[bool] = None

    def as_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "time_limit": self.time_limit,
            "content_type": self.content_type,
            "text_title": self.text_title,
            "language": self.language,
            "difficulty": self.difficulty,
            "snippet_title": self.snippet_title,
            "include_numbers": self.include_numbers,
            "include_punctuation": self.include_punctuation,
            "include_capitals": self.include_capitals,
        }


@dataclass
class SessionState:
    """
    Lifecycle + timing of one typing session.

    All methods take the current monotonic time so the owner decides which
    clock is used. Transitions that are not allowed return False and leave
    the state untouched.
    """
    status: SessionStatus = SessionStatus.IDLE
    started_at: Optional[float] = None
    _frozen_elapsed: float = field(default=0.0, repr=False)

    def reset(self) -> None:
        self.status = SessionStatus.IDLE
        self.started_at = None
        self._frozen_elapsed = 0.0

    @property
    def is_running(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def accepts_input(self) -> bool:
        return self.status in (SessionStatus.IDLE, SessionStatus.ACTIVE)

    def start(self, now: float) -> bool:
        if self.status is not SessionStatus.IDLE:
            return False
        self.started_at = now
        self._frozen_elapsed = 0.0
        self.status = SessionStatus.ACTIVE
        return True

    def pause(self, now: float) -> bool:
        if self.status is not SessionStatus.ACTIVE:
            return False
        self._frozen_elapsed = self.elapsed(now)
        self.status = SessionStatus.PAUSED
        return True

    def resume(self, now: float) -> bool:
        if self.status is not SessionStatus.PAUSED:
            return False
        # shift the start forward so the paused span never counts
        self.started_at = now - self._frozen_elapsed
        self.status = SessionStatus.ACTIVE
        return True

    def complete(self, now: float) -> bool:
        if self.status is SessionStatus.COMPLETE:
            return False
        if self.status is SessionStatus.ACTIVE:
            self._frozen_elapsed = self.elapsed(now)
        self.status = SessionStatus.COMPLETE
        return True

    def elapsed(self, now: float) -> float:
        if self.status is SessionStatus.ACTIVE and self.started_at is not None:
            # never go backwards, even if the clock does
            return max(self._frozen_elapsed, now - self.started_at)
        return self._frozen_elapsed
