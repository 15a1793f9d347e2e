from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QComboBox,
    QPushButton, QTableWidget, QTableWidgetItem, QMessageBox
)
import pyqtgraph as pg

from app.errors import DatabaseError
from services.performance import PerformanceTracker
from utils.graph_helper import setup_wpm_plot, update_curve

_TIMEFRAMES = [("today", "Today"), ("1week", "Last 7 days"), ("1month", "Last 30 days"), ("all", "All time")]


class DashboardView(QWidget):
    def __init__(self, tracker: PerformanceTracker, parent=None):
        super().__init__(parent)
        self.tracker = tracker

        root = QVBoxLayout(self)
        root.setContentsMargins(24, 16, 24, 16)

        top = QHBoxLayout()
        top.addWidget(QLabel("<h2>Performance</h2>", self))
        top.addStretch(1)
        self.cmb_timeframe = QComboBox(self)
        for key, label in _TIMEFRAMES:
            self.cmb_timeframe.addItem(label, key)
        self.cmb_timeframe.setCurrentIndex(1)
        self.cmb_timeframe.currentIndexChanged.connect(self.refresh)
        top.addWidget(self.cmb_timeframe)
        btn_clear = QPushButton("Clear history", self)
        btn_clear.setFocusPolicy(Qt.NoFocus)
        btn_clear.clicked.connect(self._clear)
        top.addWidget(btn_clear)
        root.addLayout(top)

        grid = QGridLayout()
        self._cards = {}
        for i, (key, title) in enumerate([
            ("total_tests", "Tests"), ("average_wpm", "Avg WPM"), ("best_wpm", "Best WPM"),
            ("average_accuracy", "Avg accuracy"), ("total_time", "Time typed"),
            ("improvement_rate", "Improvement"), ("streak", "Streak"), ("error_rate", "Error rate"),
        ]):
            grid.addWidget(QLabel(title, self), (i // 4) * 2, i % 4)
            val = QLabel("-", self)
            val.setStyleSheet("font-size: 22px; font-weight: 600;")
            grid.addWidget(val, (i // 4) * 2 + 1, i % 4)
            self._cards[key] = val
        root.addLayout(grid)

        self.plot = pg.PlotWidget()
        self._curve = setup_wpm_plot(self.plot, "#3b82f6")
        root.addWidget(self.plot, stretch=2)

        self.table = QTableWidget(0, 4, self)
        self.table.setHorizontalHeaderLabels(["Mode", "Tests", "Avg WPM", "Best WPM"])
        self.table.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.table, stretch=1)

        self.lblInsights = QLabel("", self)
        self.lblInsights.setWordWrap(True)
        root.addWidget(self.lblInsights)

    def set_theme(self, theme):
        self._curve.setPen(pg.mkPen(theme.primary, width=2.5))

    def refresh(self):
        timeframe = self.cmb_timeframe.currentData()
        stats = self.tracker.stats_for_timeframe(timeframe)
        overview = self.tracker.overview()

        self._cards["total_tests"].setText(str(stats["total_tests"]))
        self._cards["average_wpm"].setText(str(stats["average_wpm"]))
        self._cards["best_wpm"].setText(str(stats["best_wpm"]))
        self._cards["average_accuracy"].setText(f"{stats['average_accuracy']}%")
        self._cards["total_time"].setText(f"{stats['total_time'] / 60:.1f} min")
        self._cards["improvement_rate"].setText(f"{stats['improvement_rate']:+d}%")
        self._cards["streak"].setText(str(overview["streak"]))
        self._cards["error_rate"].setText(f"{overview['error_rate']}%")

        trend = self.tracker.performance_trends(timeframe)
        update_curve(self._curve, [t["wpm"] for t in trend])

        by_mode = self.tracker.stats_by_mode(timeframe)
        self.table.setRowCount(len(by_mode))
        for i, (mode, s) in enumerate(sorted(by_mode.items())):
            self.table.setItem(i, 0, QTableWidgetItem(mode.title()))
            self.table.setItem(i, 1, QTableWidgetItem(str(s["count"])))
            self.table.setItem(i, 2, QTableWidgetItem(str(s["average_wpm"])))
            self.table.setItem(i, 3, QTableWidgetItem(str(s["best_wpm"])))

        insights = self.tracker.insights()
        self.lblInsights.setText("\n".join(f"• {msg}" for _, msg in insights) or "Keep practicing!")

    def _clear(self):
        answer = QMessageBox.question(self, "Clear history", "Delete all stored results?")
        if answer != QMessageBox.Yes:
            return
        try:
            self.tracker.clear()
        except DatabaseError as e:
            QMessageBox.warning(self, "Clear history", str(e))
        self.refresh()
