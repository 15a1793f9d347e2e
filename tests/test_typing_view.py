from PySide6.QtCore import Qt

from app.state import ModeSettings, SessionMode, SessionStatus
from services.results import ResultEmitter
from ui.typing_view import TypingView


def make_view(qtbot, text="hello world", mode=SessionMode.PRACTICE):
    view = TypingView(ResultEmitter())
    qtbot.addWidget(view)
    view.show()
    view.start_session(text, ModeSettings(mode=mode))
    return view


def test_keys_reach_the_engine(qtbot):
    view = make_view(qtbot)
    qtbot.keyClicks(view, "helo")
    assert view.engine.typed == "helo"
    qtbot.keyClick(view, Qt.Key_Backspace)
    assert view.engine.typed == "hel"
    assert view.lblAcc.text() == "100 %"


def test_escape_toggles_pause(qtbot):
    view = make_view(qtbot)
    qtbot.keyClicks(view, "he")
    qtbot.keyClick(view, Qt.Key_Escape)
    assert view.engine.status is SessionStatus.PAUSED
    assert "Paused" in view.lblStatus.text()
    qtbot.keyClicks(view, "l")
    assert view.engine.typed == "he"
    qtbot.keyClick(view, Qt.Key_Escape)
    assert view.engine.status is SessionStatus.ACTIVE


def test_completion_emits_finished(qtbot):
    view = make_view(qtbot, text="abc")
    with qtbot.waitSignal(view.finished, timeout=1000) as blocker:
        qtbot.keyClicks(view, "abc")
    assert blocker.args[0].was_skipped


def test_tab_requests_new_text(qtbot):
    view = make_view(qtbot)
    with qtbot.waitSignal(view.resetRequested, timeout=1000):
        qtbot.keyClick(view, Qt.Key_Tab)


def test_code_mode_carries_indentation(qtbot):
    view = make_view(qtbot, text="  a = 1\n  b = 2", mode=SessionMode.DEVELOPER)
    assert view.codeBlock.isVisibleTo(view)
    qtbot.keyClicks(view, "  a = 1")
    qtbot.keyClick(view, Qt.Key_Return)
    assert view.engine.typed == "  a = 1\n  "
    qtbot.keyClicks(view, "b = 2")
    assert view.engine.is_complete


def test_code_mode_tab_inserts_spaces(qtbot):
    view = make_view(qtbot, text="def f():\n  return 1", mode=SessionMode.DEVELOPER)
    qtbot.keyClicks(view, "def f():")
    qtbot.keyClick(view, Qt.Key_Return)
    qtbot.keyClick(view, Qt.Key_Tab)
    assert view.engine.typed == "def f():\n  "
    assert view.engine.metrics().incorrect_chars == 0


def test_code_mode_tab_near_the_end_inserts_one_space(qtbot):
    view = make_view(qtbot, text="ab ", mode=SessionMode.DEVELOPER)
    qtbot.keyClicks(view, "ab")
    qtbot.keyClick(view, Qt.Key_Tab)
    assert view.engine.typed == "ab "
    assert view.engine.is_complete
