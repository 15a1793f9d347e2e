# core/threads.py
import logging
from pathlib import Path

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from app.validation import normalize_text

log = logging.getLogger(__name__)


class TextLoadWorkerSignals(QObject):
    loaded = Signal(str, str)   # title, text
    failed = Signal(str)


class TextLoadWorker(QRunnable):
    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.signals = TextLoadWorkerSignals()

    def run(self):
        try:
            with open(self.path, "r", encoding="utf-8", errors="ignore") as f:
                data = normalize_text(f.read())
        except OSError as e:
            self.signals.failed.emit(str(e))
            return
        if not data:
            self.signals.failed.emit(f"{self.path} is empty")
            return
        self.signals.loaded.emit(Path(self.path).stem, data)


class ResultSaveWorker(QRunnable):
    """Hands a finished result to the tracker off the UI thread."""

    def __init__(self, tracker, result):
        super().__init__()
        self.tracker = tracker
        self.result = result

    def run(self):
        self.tracker.record(self.result)


class Workers:
    pool = QThreadPool.globalInstance()

    @classmethod
    def save_result(cls, tracker, result) -> None:
        cls.pool.start(ResultSaveWorker(tracker, result))
