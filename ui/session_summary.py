# ui/session_summary.py
from __future__ import annotations
from PySide6.QtWidgets import QDialog, QGridLayout, QVBoxLayout, QLabel, QPushButton
import pyqtgraph as pg

from app.calculation import (
    instant_wpm,
    performance_rating,
    result_insights,
    smooth_wpm_time_aware,
)
from services.results import SessionResult
from utils.graph_helper import setup_wpm_plot, update_curve


class SessionSummary(QDialog):
    """Final stats, a rating, a few tips, and WPM over time."""

    def __init__(self, result: SessionResult, line_color: str = "#3b82f6", parent=None):
        super().__init__(parent)
        self.setWindowTitle("Session Summary")
        self.resize(720, 520)

        root = QVBoxLayout(self)

        rating, blurb = performance_rating(result.wpm, result.accuracy, result.consistency)
        head = QLabel(f"<h2>{rating}</h2><p>{blurb}</p>", self)
        root.addWidget(head)

        grid = QGridLayout()
        cells = [
            ("WPM", f"{result.wpm}"),
            ("Raw WPM", f"{result.raw_wpm}"),
            ("Accuracy", f"{result.accuracy}%"),
            ("Consistency", f"{result.consistency:.1f}%"),
            ("Efficiency", f"{result.efficiency:.0f}"),
            ("Time", f"{result.time_elapsed:.1f}s"),
            ("Characters", f"{result.correct_chars}/{result.incorrect_chars}/{result.total_characters}"),
            ("Keys/min", f"{result.keystrokes_per_minute}"),
        ]
        for i, (name, value) in enumerate(cells):
            grid.addWidget(QLabel(name, self), (i // 4) * 2, i % 4)
            val = QLabel(value, self)
            val.setStyleSheet("font-size: 20px; font-weight: 600;")
            grid.addWidget(val, (i // 4) * 2 + 1, i % 4)
        root.addLayout(grid)

        if result.was_skipped:
            note = QLabel("Fewer than 10 characters typed: this attempt is not added to your history.", self)
            note.setWordWrap(True)
            root.addWidget(note)

        for _, message in result_insights(result.wpm, result.accuracy, result.consistency,
                                          result.errors, result.total_characters):
            tip = QLabel(f"• {message}", self)
            tip.setWordWrap(True)
            root.addWidget(tip)

        times = [t for t, _ in result.samples]
        wpms = [w for _, w in result.samples]
        if len(times) >= 2:
            plot = pg.PlotWidget()
            curve = setup_wpm_plot(plot, line_color)
            plot.setLabel("bottom", "Time (s)")
            update_curve(curve, smooth_wpm_time_aware(times, instant_wpm(times, wpms)), x=times)
            root.addWidget(plot, stretch=1)

        btn = QPushButton("OK", self)
        btn.clicked.connect(self.accept)
        root.addWidget(btn)
