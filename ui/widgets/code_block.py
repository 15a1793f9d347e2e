from typing import List

from PySide6.QtWidgets import QPlainTextEdit, QTextEdit
from PySide6.QtGui import QFont, QTextCharFormat, QColor, QTextCursor, QPainter
from PySide6.QtCore import Qt, QRect, QTimer

from app.calculation import CharClass


class CodeBlock(QPlainTextEdit):
    """Monospace snippet display for developer drills, colored per character."""

    def __init__(self, parent=None, font_size: int = 16):
        super().__init__(parent)

        self.setReadOnly(True)
        self.setTextInteractionFlags(Qt.NoTextInteraction)
        self.setFocusPolicy(Qt.NoFocus)

        font = QFont("Courier New", font_size)
        if not font.exactMatch():
            font = QFont("Consolas", font_size)
        font.setFixedPitch(True)
        font.setStyleHint(QFont.Monospace)
        self.setFont(font)

        self.setLineWrapMode(QPlainTextEdit.NoWrap)
        self.setTabStopDistance(4 * self.fontMetrics().horizontalAdvance(" "))

        self._classes: List[CharClass] = []
        self._caret_pos = 0
        self._caret_visible = True
        self._blink_state = True

        self._colors = {
            CharClass.CORRECT: QColor("#10b981"),
            CharClass.INCORRECT: QColor("#ef4444"),
            CharClass.CURRENT: QColor("#f59e0b"),
            CharClass.UNTYPED: QColor("#64748b"),
        }
        self._caret_color = QColor("#3b82f6")

        self._blink_timer = QTimer(self)
        self._blink_timer.timeout.connect(self._blink_caret)
        self._blink_timer.start(500)

    def _blink_caret(self):
        if self._caret_visible:
            self._blink_state = not self._blink_state
            self.viewport().update()

    def set_code(self, code: str):
        self.setPlainText(code)
        self._classes = []
        self._caret_pos = 0
        self._apply_colors()

    def set_typing_state(self, classes: List[CharClass], caret_pos: int):
        self._classes = classes
        self._caret_pos = max(0, min(caret_pos, len(self.toPlainText())))
        self._blink_state = True
        self._apply_colors()

        cursor = QTextCursor(self.document())
        cursor.setPosition(self._caret_pos)
        self.setTextCursor(cursor)
        self.ensureCursorVisible()
        self.viewport().update()

    def set_caret_visible(self, visible: bool):
        self._caret_visible = visible
        self.viewport().update()

    def _apply_colors(self):
        selections = []
        for i in range(len(self.toPlainText())):
            cls = self._classes[i] if i < len(self._classes) else CharClass.UNTYPED
            cursor = QTextCursor(self.document())
            cursor.setPosition(i)
            cursor.setPosition(i + 1, QTextCursor.KeepAnchor)

            fmt = QTextCharFormat()
            fmt.setForeground(self._colors[cls])
            if cls is CharClass.INCORRECT:
                bg = QColor(self._colors[cls])
                bg.setAlpha(40)
                fmt.setBackground(bg)

            selection = QTextEdit.ExtraSelection()
            selection.cursor = cursor
            selection.format = fmt
            selections.append(selection)

        self.setExtraSelections(selections)

    def set_theme(self, theme):
        self._colors[CharClass.CORRECT] = QColor(theme.correct)
        self._colors[CharClass.INCORRECT] = QColor(theme.incorrect)
        self._colors[CharClass.CURRENT] = QColor(theme.current)
        self._colors[CharClass.UNTYPED] = QColor(theme.text_muted)
        self._caret_color = QColor(theme.caret)
        self.setStyleSheet(
            f"QPlainTextEdit {{ background-color: {theme.surface}; color: {theme.text_muted};"
            f" border: none; padding: 15px; }}"
        )
        self._apply_colors()

    def paintEvent(self, event):
        super().paintEvent(event)

        if self._caret_visible and self._blink_state:
            painter = QPainter(self.viewport())
            cursor = QTextCursor(self.document())
            cursor.setPosition(self._caret_pos)
            rect = self.cursorRect(cursor)
            painter.fillRect(QRect(rect.x(), rect.y(), 3, rect.height()), self._caret_color)
            painter.end()
