# gui_app.py
# PyProbe GUI: pick files, sniff image type and read build dates.
# Requirements: PySide6.

from __future__ import annotations
import logging
import sys
from typing import List, Optional

from PySide6.QtCore import Qt, QThread, Signal, Slot
from PySide6.QtWidgets import (
    QApplication, QFileDialog, QHBoxLayout, QLabel, QMainWindow, QProgressBar,
    QPushButton, QTreeWidget, QTreeWidgetItem, QVBoxLayout, QWidget,
)

from .events.weak import WeakEvent
from .probe import probe_file

logger = logging.getLogger(__name__)


# ------------------------ Probe thread ------------------------
class ProbeWorker(QThread):
    found = Signal(dict)          # emits item dict
    status = Signal(str)          # status text
    finished_probe = Signal()

    def __init__(self, paths: List[str]):
        super().__init__()
        self.paths = list(paths)
        self._stop = False

    def stop(self):
        self._stop = True

    def run(self):
        try:
            for i, path in enumerate(self.paths, 1):
                if self._stop:
                    break
                self.status.emit(f"Probing {i}/{len(self.paths)}: {path}")
                self.found.emit(probe_file(path))
            self.status.emit(f"Done: {len(self.paths)} files")
        finally:
            self.finished_probe.emit()


# ------------------------ UI ------------------------
class ResultsTree(QTreeWidget):
    def __init__(self):
        super().__init__()
        self.setHeaderLabels(["Name", "Type", "Build date", "Note"])
        self.setColumnWidth(0, 280)

    def add_item(self, item: dict):
        node = QTreeWidgetItem()
        node.setText(0, item.get("name", ""))
        node.setText(1, item.get("type") or "")
        node.setText(2, item.get("build_date") or "")
        node.setText(3, item.get("note", ""))
        node.setToolTip(0, item.get("path", ""))
        if item.get("note"):
            node.setForeground(3, Qt.red)
        self.addTopLevelItem(node)


class SummaryLabel(QLabel):
    def __init__(self):
        super().__init__("No files probed")
        self.images = 0
        self.binaries = 0

    def reset(self):
        self.images = self.binaries = 0
        self.setText("No files probed")

    def count_item(self, item: dict):
        if item.get("type") not in (None, "unknown"):
            self.images += 1
        elif item.get("build_date"):
            self.binaries += 1
        self.setText(f"{self.images} images, {self.binaries} binaries with a build date")


class ProbePage(QWidget):
    def __init__(self):
        super().__init__()
        # Result widgets subscribe weakly; shutdown() closes the subscriptions.
        self.results = WeakEvent("results")
        self.paths: List[str] = []

        outer = QVBoxLayout(self)
        top = QHBoxLayout()
        self.add_btn = QPushButton("Add files…")
        self.clear_btn = QPushButton("Clear")
        self.start_btn = QPushButton("Probe")
        self.stop_btn = QPushButton("Stop")
        self.stop_btn.setEnabled(False)
        for b in (self.add_btn, self.clear_btn, self.start_btn, self.stop_btn):
            top.addWidget(b)
        top.addStretch(1)
        outer.addLayout(top)

        self.progress = QProgressBar()
        self.progress.setRange(0, 1)
        outer.addWidget(self.progress)
        self.status = QLabel("…")
        outer.addWidget(self.status)

        self.tree = ResultsTree()
        outer.addWidget(self.tree)
        self.summary = SummaryLabel()
        outer.addWidget(self.summary)

        self._subs = [
            self.results.subscribe(self.tree.add_item),
            self.results.subscribe(self.summary.count_item),
        ]

        self.worker: Optional[ProbeWorker] = None
        self.add_btn.clicked.connect(self._add_files)
        self.clear_btn.clicked.connect(self._clear)
        self.start_btn.clicked.connect(self._start)
        self.stop_btn.clicked.connect(self._stop)

    @Slot()
    def _add_files(self):
        files, _ = QFileDialog.getOpenFileNames(self, "Pick files to probe")
        self.paths.extend(f for f in files if f not in self.paths)
        self.status.setText(f"{len(self.paths)} files queued")

    @Slot()
    def _clear(self):
        self.paths.clear()
        self.tree.clear()
        self.summary.reset()
        self.status.setText("…")

    @Slot()
    def _start(self):
        if not self.paths or (self.worker and self.worker.isRunning()):
            return
        self.tree.clear()
        self.summary.reset()
        self.progress.setRange(0, 0)
        self.worker = ProbeWorker(self.paths)
        self.worker.found.connect(self._on_found)
        self.worker.status.connect(self.status.setText)
        self.worker.finished_probe.connect(self._on_finished)
        self.start_btn.setEnabled(False)
        self.stop_btn.setEnabled(True)
        self.worker.start()

    @Slot()
    def _stop(self):
        if self.worker and self.worker.isRunning():
            self.worker.stop()
            self.status.setText("Stopping...")

    @Slot(dict)
    def _on_found(self, item: dict):
        self.results.emit(item)

    @Slot()
    def _on_finished(self):
        self.progress.setRange(0, 1)
        self.start_btn.setEnabled(True)
        self.stop_btn.setEnabled(False)

    def shutdown(self):
        for sub in self._subs:
            sub.close()
        if self.worker and self.worker.isRunning():
            self.worker.stop()
            self.worker.wait(1000)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("PyProbe – image type & build date")
        self.resize(900, 600)
        self.page = ProbePage()
        self.setCentralWidget(self.page)

    def closeEvent(self, event):
        self.page.shutdown()
        super().closeEvent(event)


def main() -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    w = MainWindow()
    w.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
