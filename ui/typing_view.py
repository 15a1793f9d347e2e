from __future__ import annotations
from html import escape

from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QHBoxLayout, QSizePolicy

from app.calculation import CharClass, Metrics
from app.state import ModeSettings, SessionMode, SessionStatus
from core.chrono import SessionDriver
from services.content import FALLBACK_TEXT
from services.results import ResultEmitter
from services.typing_engine import TypingEngine
from ui.widgets.code_block import CodeBlock


def _looks_like_code(text: str) -> bool:
    """Multi-line text with indentation or braces renders better as a code block."""
    lines = text.splitlines()
    if len(lines) < 2:
        return False
    for ln in lines:
        if ln.startswith(("\t", "  ")) or "{" in ln or "}" in ln or "=>" in ln:
            return True
    return False


class TypingView(QWidget):
    finished = Signal(object)        # SessionResult
    resetRequested = Signal()

    def __init__(self, emitter: ResultEmitter, parent=None):
        super().__init__(parent)
        self.setFocusPolicy(Qt.StrongFocus)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 30, 0, 30)
        root.setSpacing(28)

        stats = QHBoxLayout()
        stats.setSpacing(40)

        self.lblTimer = QLabel("0.0 s", self)
        self.lblTimer.setObjectName("lblTimer")
        self.lblWPM = QLabel("0 WPM", self)
        self.lblWPM.setObjectName("lblWPM")
        self.lblAcc = QLabel("100 %", self)
        self.lblAcc.setObjectName("lblAcc")
        for lab in (self.lblTimer, self.lblWPM, self.lblAcc):
            lab.setAlignment(Qt.AlignCenter)
            stats.addWidget(lab)
        root.addLayout(stats)

        self.lblStatus = QLabel("Start typing to begin", self)
        self.lblStatus.setObjectName("lblStatus")
        self.lblStatus.setAlignment(Qt.AlignCenter)
        self.lblStatus.setWordWrap(True)
        root.addWidget(self.lblStatus)

        self.lblLine = QLabel("", self)
        self.lblLine.setObjectName("lblLine")
        self.lblLine.setTextFormat(Qt.RichText)
        self.lblLine.setWordWrap(True)
        self.lblLine.setAlignment(Qt.AlignCenter)
        self.lblLine.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.lblLine.setMinimumWidth(900)
        self.lblLine.setMaximumWidth(1100)
        self.lblLine.setMinimumHeight(140)
        self.lblLine.setStyleSheet("font-size: 30px; line-height: 1.35;")

        self.codeBlock = CodeBlock(self, font_size=18)
        self.codeBlock.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.codeBlock.setMinimumWidth(900)
        self.codeBlock.setMaximumWidth(1100)
        self.codeBlock.setMinimumHeight(300)
        self.codeBlock.setVisible(False)

        root.addWidget(self.lblLine, stretch=1, alignment=Qt.AlignHCenter)
        root.addWidget(self.codeBlock, stretch=1, alignment=Qt.AlignHCenter)

        self.engine = TypingEngine(FALLBACK_TEXT, emitter=emitter)
        self.driver = SessionDriver(self.engine, tick_ms=100, parent=self)
        self.driver.metricsChanged.connect(self.on_metrics)
        self.driver.statusChanged.connect(self.on_status)
        self.driver.finished.connect(self.finished.emit)

        self._caret_on = True
        self._caret_timer = QTimer(self)
        self._caret_timer.setInterval(500)
        self._caret_timer.timeout.connect(self._toggle_caret)
        self._caret_timer.start()

        self._is_code_mode = False
        self._hint = ""

        self._approx_chars_per_line = 60
        self._visible_lines = 3
        self._win_start = 0

        self._colors = {
            CharClass.CORRECT: "#10b981",
            CharClass.INCORRECT: "#ef4444",
            CharClass.CURRENT: "#f59e0b",
            CharClass.UNTYPED: "#64748b",
            "caret": "#3b82f6",
        }

    # ---------------- session ----------------
    def start_session(self, text: str, settings: ModeSettings, hint: str = ""):
        """Load a new target; the clock starts with the first keystroke."""
        self._is_code_mode = settings.mode is SessionMode.DEVELOPER or _looks_like_code(text)
        self._hint = hint
        self._win_start = 0
        self.driver.reset(text, settings)
        if self._is_code_mode:
            self.codeBlock.set_code(self.engine.target)
        self.codeBlock.setVisible(self._is_code_mode)
        self.lblLine.setVisible(not self._is_code_mode)
        self._render()
        self.setFocus()

    def restart(self):
        self.start_session(self.engine.target, self.engine.settings, self._hint)

    def toggle_pause(self):
        self.driver.toggle_pause()

    def finish(self):
        self.driver.finish()

    # ---------------- theme ----------------
    def set_theme(self, theme):
        self.setStyleSheet(
            f"""
            QLabel#lblLine {{ color: {theme.text}; }}
            QLabel#lblTimer, QLabel#lblAcc {{ color: {theme.text_muted}; font-size: 22px; }}
            QLabel#lblWPM   {{ color: {theme.primary}; font-size: 22px; }}
            QLabel#lblStatus {{ color: {theme.text_muted}; }}
            """
        )
        self._colors[CharClass.CORRECT] = theme.correct
        self._colors[CharClass.INCORRECT] = theme.incorrect
        self._colors[CharClass.CURRENT] = theme.current
        self._colors[CharClass.UNTYPED] = theme.text_muted
        self._colors["caret"] = theme.caret
        self.codeBlock.set_theme(theme)
        self._render()

    # ---------------- engine signals ----------------
    @Slot(object)
    def on_metrics(self, m: Metrics):
        remaining = self.engine.remaining_seconds()
        if remaining is not None:
            self.lblTimer.setText(f"{remaining:0.0f} s left")
        else:
            self.lblTimer.setText(f"{m.elapsed_seconds:0.1f} s")
        self.lblWPM.setText(f"{m.wpm} WPM")
        self.lblAcc.setText(f"{m.accuracy} %")
        self._render()

    @Slot(str)
    def on_status(self, status: str):
        self._caret_on = True
        self._refresh_status_label()

    def _refresh_status_label(self):
        status = self.engine.status
        if status is SessionStatus.PAUSED:
            text = "Paused - press Esc to resume"
        elif status is SessionStatus.COMPLETE:
            text = "Done - press Tab for another round"
        elif status is SessionStatus.ACTIVE:
            text = self._hint or f"{self.engine.metrics().progress}% complete"
        else:
            text = self._hint or "Start typing to begin"
        self.lblStatus.setText(text)

    # ---------------- rendering ----------------
    def _toggle_caret(self):
        self._caret_on = not self._caret_on
        if self.engine.status is SessionStatus.ACTIVE:
            self._render()

    def _render(self):
        classes = self.engine.classification()
        caret = len(self.engine.typed)
        if self.engine.status is SessionStatus.ACTIVE:
            self._refresh_status_label()

        if self._is_code_mode:
            self.codeBlock.set_typing_state(classes, caret)
            self.codeBlock.set_caret_visible(self.engine.status is not SessionStatus.COMPLETE)
            return

        tgt = self.engine.target
        window_chars = self._approx_chars_per_line * self._visible_lines

        # keep the caret inside the middle band of the visible window
        if caret < self._win_start + window_chars * 0.3 or caret > self._win_start + window_chars * 0.7:
            new_start = max(0, caret - window_chars // 2)
            while new_start > 0 and not tgt[new_start - 1].isspace():
                new_start -= 1
            self._win_start = new_start

        start = self._win_start
        end = min(len(tgt), start + window_chars)
        while end < len(tgt) and not tgt[end].isspace():
            end += 1

        parts: list[str] = []
        for idx in range(start, end):
            cls = classes[idx]
            ch = escape(tgt[idx]) if tgt[idx] != "\n" else "&#8629;<br>"
            style = f"color:{self._colors[cls]}"
            if cls is CharClass.INCORRECT:
                style += f"; border-bottom:2px solid {self._colors[cls]}"
            if idx == caret:
                caret_col = self._colors["caret"] if self._caret_on else "transparent"
                parts.append(f'<span style="color:{caret_col}">|</span>')
            parts.append(f'<span style="{style}">{ch}</span>')
        if caret >= end:
            parts.append(f'<span style="color:{self._colors["caret"]}">|</span>')

        self.lblLine.setText("".join(parts))

    # ---------------- keyboard ----------------
    def keyPressEvent(self, ev):
        key = ev.key()
        if key == Qt.Key_Escape:
            self.toggle_pause()
            return
        if key == Qt.Key_Tab and not self._is_code_mode:
            self.resetRequested.emit()
            return
        if self.engine.status is SessionStatus.COMPLETE and key == Qt.Key_Tab:
            self.resetRequested.emit()
            return

        nk = self._normalize_key(ev)
        if nk is None:
            return super().keyPressEvent(ev)

        if nk == "<BACKSPACE>":
            self.driver.backspace()
        elif nk == "\n" and self._is_code_mode:
            # carry the current line's indentation like an editor would
            line = self.engine.typed.rsplit("\n", 1)[-1]
            indent = line[: len(line) - len(line.lstrip(" \t"))]
            if not self.driver.submit(self.engine.typed + "\n" + indent):
                self.driver.process_key("\n")
        elif nk == "\t" and self._is_code_mode:
            # snippets are space-indented; Tab inserts two spaces
            if not self.driver.submit(self.engine.typed + "  "):
                self.driver.process_key(" ")
        else:
            self.driver.process_key(nk)
        ev.accept()

    def _normalize_key(self, ev) -> str | None:
        if ev.modifiers() & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier):
            return None
        key = ev.key()
        t = ev.text()
        if key == Qt.Key_Backspace:
            return "<BACKSPACE>"
        if key in (Qt.Key_Return, Qt.Key_Enter):
            return "\n"
        if key == Qt.Key_Tab:
            return "\t"
        if t and (t >= " " or t == "\t"):
            return t
        return None

    def focusNextPrevChild(self, next_):
        # keep Tab for the view itself
        return False
