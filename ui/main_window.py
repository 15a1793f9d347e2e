# ui/main_window.py
import logging

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QMenu, QMessageBox, QStackedWidget,
    QToolButton, QPushButton
)
from PySide6.QtGui import QAction
from PySide6.QtCore import Qt, QTimer

from app.config import custom_texts_path, db_path, load_settings, save_settings, themes_path
from app.errors import ContentError
from app.state import ModeSettings, SessionMode
from app.themes import THEMES, load_custom_themes, theme_by_name
from core.threads import Workers
from services.content import ContentLibrary, TextCriteria
from services.performance import PerformanceTracker
from services.results import ResultEmitter
from ui.custom_text_dialog import CustomTextDialog
from ui.dashboard import DashboardView
from ui.session_summary import SessionSummary
from ui.typing_view import TypingView
from ui.widgets.session_dialog import PracticeDialog, SessionDialog, SnippetDialog

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, home):
        super().__init__()
        self.setWindowTitle("TypeSprint")
        self.resize(1200, 760)
        self.home = home

        self.settings = load_settings(home)
        self.themes = load_custom_themes(themes_path(home))
        if len(self.themes) > len(THEMES):
            log.info("Loaded %d custom theme(s)", len(self.themes) - len(THEMES))
        self.theme = theme_by_name(self.settings.theme, self.themes)

        self.content = ContentLibrary(custom_texts_path(home))
        self.tracker = PerformanceTracker(db_path(home))
        self.emitter = ResultEmitter()
        self.emitter.add_listener(lambda r: Workers.save_result(self.tracker, r))

        self.mode = SessionMode.PRACTICE
        self._custom_index = 0

        root = QWidget(self)
        root_v = QVBoxLayout(root)
        root_v.setContentsMargins(16, 24, 16, 16)
        root_v.setSpacing(24)
        self._build_top_bar(root_v)

        self.stack = QStackedWidget(self)
        self.typing = TypingView(self.emitter, self)
        self.typing.finished.connect(self._on_session_finished)
        self.typing.resetRequested.connect(self._new_text)
        self.dashboard = DashboardView(self.tracker, self)

        test_page = QWidget(self)
        test_h = QHBoxLayout(test_page)
        test_h.addStretch(1)
        test_h.addWidget(self.typing, 1)
        test_h.addStretch(1)
        self.stack.addWidget(test_page)
        self.stack.addWidget(self.dashboard)
        root_v.addWidget(self.stack, 1)
        self.setCentralWidget(root)

        # keep keyboard input flowing to the typing view
        self.setFocusPolicy(Qt.NoFocus)

        self.menuBar().setVisible(False)
        self._apply_theme(self.theme.name, persist=False)
        self._start_mode(SessionMode.PRACTICE)

    # ---------------- Top Bar ----------------
    def _build_top_bar(self, parent_layout):
        bar = QWidget(self)
        bar.setObjectName("TopBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(14, 12, 14, 12)
        h.setSpacing(10)

        self.theme_menu = QMenu(self)
        self._rebuild_theme_menu()
        theme_btn = QToolButton(bar)
        theme_btn.setText("Theme")
        theme_btn.setObjectName("TopBtn")
        theme_btn.setMenu(self.theme_menu)
        theme_btn.setPopupMode(QToolButton.InstantPopup)
        theme_btn.setFocusPolicy(Qt.NoFocus)
        h.addWidget(theme_btn)

        for label, mode in [
            ("Practice", SessionMode.PRACTICE),
            ("Timed", SessionMode.TIMED),
            ("Custom", SessionMode.CUSTOM),
            ("Developer", SessionMode.DEVELOPER),
        ]:
            btn = QPushButton(label, bar)
            btn.clicked.connect(lambda _=False, m=mode: self._open_mode(m))
            btn.setObjectName("TopBtn")
            btn.setFocusPolicy(Qt.NoFocus)
            h.addWidget(btn)

        btn_dash = QPushButton("Dashboard", bar)
        btn_dash.clicked.connect(self._show_dashboard)
        btn_dash.setObjectName("TopBtn")
        btn_dash.setFocusPolicy(Qt.NoFocus)
        h.addWidget(btn_dash)

        h.addStretch(1)

        self.btnNew = QPushButton("New text", bar)
        self.btnPause = QPushButton("Pause / Resume", bar)
        self.btnFinish = QPushButton("Finish", bar)
        self.btnReset = QPushButton("Reset", bar)
        for button, handler in [
            (self.btnNew, self._new_text),
            (self.btnPause, self._on_pause),
            (self.btnFinish, self._on_finish),
            (self.btnReset, self._on_reset),
        ]:
            button.clicked.connect(handler)
            button.setObjectName("TopBtn")
            button.setFocusPolicy(Qt.NoFocus)
            h.addWidget(button)

        parent_layout.addWidget(bar)

        self._topbar_qss = """
        QWidget#TopBar {
            background: rgba(255,255,255,0.04);
            border: 1px solid rgba(255,255,255,0.08);
            border-radius: 14px;
        }
        QPushButton#TopBtn, QToolButton#TopBtn {
            background: transparent;
            border: 1px solid rgba(255,255,255,0.10);
            border-radius: 9px;
            padding: 6px 12px;
        }
        QPushButton#TopBtn:hover, QToolButton#TopBtn:hover {
            border-color: rgba(255,255,255,0.32);
            background: rgba(255,255,255,0.06);
        }
        QToolButton::menu-indicator { image: none; width: 0px; height: 0px; }
        """

    # ---------------- Theme ----------------
    def _rebuild_theme_menu(self):
        self.theme_menu.clear()
        for t in self.themes:
            act = QAction(t.name, self)
            act.triggered.connect(lambda _=False, name=t.name: self._apply_theme(name))
            self.theme_menu.addAction(act)

    def _apply_theme(self, name, persist=True):
        theme = theme_by_name(name, self.themes)
        self.theme = theme
        self.typing.set_theme(theme)
        self.dashboard.set_theme(theme)
        self.setStyleSheet(
            f"""
            QWidget {{ background: {theme.background}; color: {theme.text}; }}
            {self._topbar_qss}
            """
        )
        if persist and self.settings.theme != theme.name:
            self.settings.theme = theme.name
            save_settings(self.settings, self.home)

    # ---------------- Modes ----------------
    def _open_mode(self, mode: SessionMode):
        """Show the options dialog for ``mode`` and start a session on accept."""
        if mode is SessionMode.CUSTOM:
            dlg = CustomTextDialog(self.content, self._custom_index, self)
            if not dlg.exec():
                return
            self._custom_index = dlg.selected_index
        else:
            dialog_cls = {
                SessionMode.PRACTICE: PracticeDialog,
                SessionMode.TIMED: SessionDialog,
                SessionMode.DEVELOPER: SnippetDialog,
            }[mode]
            dlg = dialog_cls(self.settings, self)
            if not dlg.exec():
                return
            self.settings = dlg.config
            save_settings(self.settings, self.home)
        self._start_mode(mode)

    def _start_mode(self, mode: SessionMode):
        self.mode = mode
        s = self.settings
        hint = ""
        try:
            if mode is SessionMode.TIMED:
                text = self.content.generate_timed_text(
                    s.content_type, s.include_numbers, s.include_punctuation, s.include_capitals
                )
                ms = ModeSettings(
                    mode=mode, time_limit=float(s.duration), content_type=s.content_type,
                    include_numbers=s.include_numbers, include_punctuation=s.include_punctuation,
                    include_capitals=s.include_capitals,
                )
            elif mode is SessionMode.CUSTOM:
                if not self.content.custom_texts:
                    raise ContentError("No custom texts yet")
                idx = min(self._custom_index, len(self.content.custom_texts) - 1)
                item = self.content.custom_texts[idx]
                text = item["text"]
                ms = ModeSettings(mode=mode, text_title=item["title"])
            elif mode is SessionMode.DEVELOPER:
                snip = self.content.snippet(s.language, s.snippet_difficulty)
                text = self.content.snippet_target(snip)
                ms = ModeSettings(mode=mode, language=s.language, difficulty=s.snippet_difficulty,
                                  snippet_title=snip.title)
                hint = " · ".join([f"{snip.title}: {snip.description}", *snip.hints])
            else:
                text = self.content.get_text(TextCriteria(s.category, s.difficulty, s.length))
                ms = ModeSettings(mode=mode, content_type=s.category, difficulty=s.difficulty)
        except ContentError as e:
            QMessageBox.warning(self, "TypeSprint", str(e))
            return

        self.stack.setCurrentIndex(0)
        self.typing.start_session(text, ms, hint)
        self.setWindowTitle(f"TypeSprint · {mode.value.title()}")

    def _show_dashboard(self):
        self.typing.driver.pause()
        self.dashboard.refresh()
        self.stack.setCurrentIndex(1)

    # ---------------- Controls ----------------
    def _new_text(self):
        self._start_mode(self.mode)

    def _on_pause(self):
        self.typing.toggle_pause()

    def _on_finish(self):
        self.typing.finish()

    def _on_reset(self):
        self.stack.setCurrentIndex(0)
        self.typing.restart()

    # ---------------- Results ----------------
    def _on_session_finished(self, result):
        self.setWindowTitle(f"TypeSprint · {result.wpm} WPM")
        # let the driver finish emitting before a modal loop starts
        QTimer.singleShot(0, lambda: self._show_summary(result))

    def _show_summary(self, result):
        SessionSummary(result, self.theme.primary, self).exec()
        self.typing.setFocus()
