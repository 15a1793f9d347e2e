from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QPlainTextEdit, QPushButton, QFileDialog, QMessageBox
)

from app.errors import ContentError
from core.threads import TextLoadWorker, Workers
from services.content import ContentLibrary


class CustomTextDialog(QDialog):
    """
    Manage the user's own practice texts. After accept(), ``selected_index``
    points into ``content.custom_texts``.
    """

    def __init__(self, content: ContentLibrary, selected: int = 0, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Custom Text")
        self.resize(560, 480)
        self.content = content
        self.selected_index = selected

        root = QVBoxLayout(self)
        root.addWidget(QLabel("Your texts:", self))
        self.list = QListWidget(self)
        root.addWidget(self.list, stretch=1)

        root.addWidget(QLabel("Add a new text:", self))
        self.title_edit = QLineEdit(self)
        self.title_edit.setPlaceholderText("Title")
        root.addWidget(self.title_edit)
        self.text_edit = QPlainTextEdit(self)
        self.text_edit.setPlaceholderText("Paste or type the text to practice...")
        root.addWidget(self.text_edit, stretch=1)

        row = QHBoxLayout()
        btn_add = QPushButton("Add", self)
        btn_add.clicked.connect(self._add)
        btn_load = QPushButton("Load file…", self)
        btn_load.clicked.connect(self._load_file)
        btn_remove = QPushButton("Remove selected", self)
        btn_remove.clicked.connect(self._remove)
        for b in (btn_add, btn_load, btn_remove):
            row.addWidget(b)
        row.addStretch(1)
        btn_start = QPushButton("Start", self)
        btn_start.clicked.connect(self._accept)
        btn_cancel = QPushButton("Cancel", self)
        btn_cancel.clicked.connect(self.reject)
        row.addWidget(btn_start)
        row.addWidget(btn_cancel)
        root.addLayout(row)

        self._refresh()

    def _refresh(self):
        self.list.clear()
        for item in self.content.custom_texts:
            preview = item["text"][:60].replace("\n", " ")
            self.list.addItem(f"{item['title']}  ({len(item['text'])} chars)  {preview}")
        if self.content.custom_texts:
            self.list.setCurrentRow(min(self.selected_index, len(self.content.custom_texts) - 1))

    def _add(self):
        try:
            idx = self.content.add_custom_text(self.text_edit.toPlainText(), self.title_edit.text())
        except ContentError as e:
            QMessageBox.warning(self, "Custom Text", str(e))
            return
        self.text_edit.clear()
        self.title_edit.clear()
        self.selected_index = idx
        self._refresh()

    def _remove(self):
        row = self.list.currentRow()
        if row < 0:
            return
        self.content.remove_custom_text(row)
        self.selected_index = 0
        self._refresh()

    def _load_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open text", "", "Text (*.txt)")
        if not path:
            return
        worker = TextLoadWorker(path)
        worker.signals.loaded.connect(self._on_loaded)
        worker.signals.failed.connect(self._on_load_failed)
        Workers.pool.start(worker)

    def _on_loaded(self, title: str, text: str):
        self.title_edit.setText(title)
        self.text_edit.setPlainText(text)

    def _on_load_failed(self, msg: str):
        QMessageBox.warning(self, "Load Text", msg)

    def _accept(self):
        if not self.content.custom_texts:
            QMessageBox.information(self, "Custom Text", "Add a text first.")
            return
        self.selected_index = max(0, self.list.currentRow())
        self.accept()
