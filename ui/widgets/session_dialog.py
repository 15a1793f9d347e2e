# ui/widgets/session_dialog.py
from dataclasses import replace

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QComboBox, QCheckBox
)

from app.config import DURATION_OPTIONS, Settings
from services.content import LIBRARY, TIMED_CONTENT_TYPES, ContentLibrary


def _combo(parent, items, current):
    """items: list of (data, label)."""
    cmb = QComboBox(parent)
    for data, label in items:
        cmb.addItem(label, data)
    idx = cmb.findData(current)
    cmb.setCurrentIndex(max(0, idx))
    return cmb


class _OptionsDialog(QDialog):
    def __init__(self, title: str, settings: Settings, parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumWidth(340)
        self._settings = settings
        self.form = QVBoxLayout(self)
        self.form.setSpacing(12)

    def _add_row(self, label: str, widget):
        self.form.addWidget(QLabel(label, self))
        self.form.addWidget(widget)

    def _finish_layout(self):
        row = QHBoxLayout()
        btn_start = QPushButton("Start", self)
        btn_start.clicked.connect(self.accept)
        btn_cancel = QPushButton("Cancel", self)
        btn_cancel.clicked.connect(self.reject)
        row.addWidget(btn_start)
        row.addWidget(btn_cancel)
        self.form.addStretch(1)
        self.form.addLayout(row)


class PracticeDialog(_OptionsDialog):
    def __init__(self, settings: Settings, parent=None):
        super().__init__("Practice Options", settings, parent)
        self.cmb_category = _combo(self, [(c, c.title()) for c in LIBRARY], settings.category)
        self.cmb_difficulty = _combo(self, [(d, d.title()) for d in ("easy", "medium", "hard")],
                                     settings.difficulty)
        self.cmb_length = _combo(self, [(d, d.title()) for d in ("short", "medium", "long")],
                                 settings.length)
        self._add_row("Category:", self.cmb_category)
        self._add_row("Difficulty:", self.cmb_difficulty)
        self._add_row("Length:", self.cmb_length)
        self._finish_layout()

    @property
    def config(self) -> Settings:
        return replace(
            self._settings,
            category=self.cmb_category.currentData(),
            difficulty=self.cmb_difficulty.currentData(),
            length=self.cmb_length.currentData(),
        )


class SessionDialog(_OptionsDialog):
    """Timed test options."""

    def __init__(self, settings: Settings, parent=None):
        super().__init__("Timed Test", settings, parent)
        self.cmb_time = _combo(self, [(d, f"{d} s") for d in DURATION_OPTIONS], settings.duration)
        self.cmb_source = _combo(self, list(TIMED_CONTENT_TYPES.items()), settings.content_type)
        self.chk_numbers = QCheckBox("Include numbers", self)
        self.chk_numbers.setChecked(settings.include_numbers)
        self.chk_punct = QCheckBox("Include punctuation", self)
        self.chk_punct.setChecked(settings.include_punctuation)
        self.chk_caps = QCheckBox("Include capitals", self)
        self.chk_caps.setChecked(settings.include_capitals)

        self._add_row("Time limit:", self.cmb_time)
        self._add_row("Text source:", self.cmb_source)
        for chk in (self.chk_numbers, self.chk_punct, self.chk_caps):
            self.form.addWidget(chk)
        self._finish_layout()

    @property
    def config(self) -> Settings:
        return replace(
            self._settings,
            duration=self.cmb_time.currentData(),
            content_type=self.cmb_source.currentData(),
            include_numbers=self.chk_numbers.isChecked(),
            include_punctuation=self.chk_punct.isChecked(),
            include_capitals=self.chk_caps.isChecked(),
        )


class SnippetDialog(_OptionsDialog):
    def __init__(self, settings: Settings, parent=None):
        super().__init__("Developer Drill", settings, parent)
        self.cmb_language = _combo(self, list(ContentLibrary.languages().items()), settings.language)
        self.cmb_difficulty = _combo(
            self, [(d, d.title()) for d in ("beginner", "intermediate", "advanced")],
            settings.snippet_difficulty,
        )
        self._add_row("Language:", self.cmb_language)
        self._add_row("Difficulty:", self.cmb_difficulty)
        self._finish_layout()

    @property
    def config(self) -> Settings:
        return replace(
            self._settings,
            language=self.cmb_language.currentData(),
            snippet_difficulty=self.cmb_difficulty.currentData(),
        )
