# core/chrono.py
from PySide6.QtCore import QObject, QTimer, Signal

from app.state import SessionStatus
from services.typing_engine import TypingEngine


class SessionDriver(QObject):
    """
    Qt side of a TypingEngine: runs the periodic tick while the session is
    active and republishes engine changes as signals.
    """
    metricsChanged = Signal(object)   # Metrics
    statusChanged = Signal(str)       # SessionStatus value
    finished = Signal(object)         # SessionResult

    def __init__(self, engine: TypingEngine, tick_ms: int = 100, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._status = engine.status

        self._tick = QTimer(self)
        self._tick.setInterval(tick_ms)
        self._tick.timeout.connect(self._on_tick)

    @property
    def ticking(self) -> bool:
        return self._tick.isActive()

    def submit(self, candidate: str) -> bool:
        ok = self.engine.submit(candidate)
        if ok or self.engine.status is not self._status:
            self._publish()
        return ok

    def process_key(self, ch: str) -> bool:
        ok = self.engine.process_key(ch)
        if ok or self.engine.status is not self._status:
            self._publish()
        return ok

    def backspace(self) -> bool:
        ok = self.engine.backspace()
        if ok or self.engine.status is not self._status:
            self._publish()
        return ok

    def pause(self):
        if self.engine.pause():
            self._publish()

    def resume(self):
        if self.engine.resume():
            self._publish()

    def toggle_pause(self):
        if self.engine.toggle_pause():
            self._publish()

    def finish(self):
        if self.engine.status is SessionStatus.COMPLETE:
            return
        self.engine.finalize(aborted=True)
        self._publish()

    def reset(self, text=None, settings=None):
        self.engine.reset(text, settings)
        self._publish()

    def _on_tick(self):
        self.engine.tick()
        self._publish()

    def _publish(self):
        status = self.engine.status
        if status is SessionStatus.ACTIVE:
            if not self._tick.isActive():
                self._tick.start()
        elif self._tick.isActive():
            self._tick.stop()

        self.metricsChanged.emit(self.engine.metrics())

        if status is not self._status:
            self._status = status
            self.statusChanged.emit(status.value)
            if status is SessionStatus.COMPLETE and self.engine.result is not None:
                self.finished.emit(self.engine.result)
