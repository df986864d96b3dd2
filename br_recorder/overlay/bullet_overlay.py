"""
Bullet overlay: a small always-on-top window showing the shells loaded this round.
"""
import logging

from PyQt5.QtCore import QObject, QSettings, Qt, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (QCheckBox, QFrame, QGraphicsDropShadowEffect, QHBoxLayout,
                             QLabel, QVBoxLayout, QWidget)

from br_recorder.gamestate.signals import (BulletFilling, IdentifyFailed, ModelLoadFailed,
                                           ScreenshotFailed)

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    ScreenshotFailed: "Game window not found or minimized",
    IdentifyFailed: "Could not read the screen",
    ModelLoadFailed: "Model failed to load, detection disabled",
}


class QtSignalSink(QObject):
    """Signal sink that hands detector signals to the GUI thread.

    ``emit`` is called from the detector thread; Qt queues the
    ``signal_received`` delivery onto the receiver's thread.
    """
    signal_received = pyqtSignal(object)

    def emit(self, signal):
        self.signal_received.emit(signal)


class CountPanel(QFrame):
    """Panel showing one shell count."""

    def __init__(self, title: str, color: str):
        super().__init__()
        self.setFixedSize(110, 80)
        self.setStyleSheet(f"""
            QFrame {{
                background: rgba(30, 34, 42, 0.95);
                border: 2px solid {color};
                border-radius: 8px;
            }}
        """)

        shadow = QGraphicsDropShadowEffect()
        shadow.setBlurRadius(10)
        shadow.setColor(QColor(0, 0, 0, 150))
        shadow.setOffset(2, 2)
        self.setGraphicsEffect(shadow)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)

        title_label = QLabel(title)
        title_label.setStyleSheet(f"color: {color}; font-weight: bold; font-size: 13px; border: none;")
        self.value_label = QLabel("-")
        self.value_label.setAlignment(Qt.AlignCenter)
        self.value_label.setStyleSheet("color: #FFF; font-size: 26px; font-weight: bold; border: none;")

        layout.addWidget(title_label)
        layout.addWidget(self.value_label)

    def set_value(self, value):
        self.value_label.setText("-" if value is None else str(value))


class BulletOverlay(QWidget):
    """Main overlay window; toggles the detector and renders its signals."""

    def __init__(self, detector, sink: QtSignalSink):
        super().__init__()
        self.detector = detector
        self.settings = QSettings("br_recorder", "overlay")

        self.setWindowTitle("Buckshot Roulette Recorder")
        self.setWindowFlags(Qt.WindowStaysOnTopHint)
        self.setStyleSheet("background: #1e2228;")

        layout = QVBoxLayout(self)

        self.ai_checkbox = QCheckBox("AI detection")
        self.ai_checkbox.setStyleSheet("color: #DDD;")
        self.ai_checkbox.toggled.connect(self.detector.set_enabled)
        layout.addWidget(self.ai_checkbox)

        counts = QHBoxLayout()
        self.real_panel = CountPanel("Live", "#F44336")
        self.empty_panel = CountPanel("Blank", "#2196F3")
        counts.addWidget(self.real_panel)
        counts.addWidget(self.empty_panel)
        layout.addLayout(counts)

        self.status_label = QLabel("Detection off")
        self.status_label.setStyleSheet("color: #AAA; font-size: 11px;")
        layout.addWidget(self.status_label)

        sink.signal_received.connect(self.on_signal)
        self._restore_geometry()

    def on_signal(self, signal):
        if isinstance(signal, BulletFilling):
            self.real_panel.set_value(signal.max_real)
            self.empty_panel.set_value(signal.max_empty)
            self.status_label.setText("Shells loaded")
            return

        self.status_label.setText(STATUS_TEXT.get(type(signal), signal.name))
        if isinstance(signal, ModelLoadFailed):
            # The detector already disabled itself; keep the box in sync
            self.ai_checkbox.blockSignals(True)
            self.ai_checkbox.setChecked(False)
            self.ai_checkbox.blockSignals(False)
            logger.error("Model load failed: %s", signal.message)

    def _restore_geometry(self):
        geometry = self.settings.value("geometry")
        if geometry is not None:
            self.restoreGeometry(geometry)
        else:
            self.resize(260, 170)

    def closeEvent(self, event):
        self.settings.setValue("geometry", self.saveGeometry())
        self.detector.shutdown(timeout=3.0)
        event.accept()
