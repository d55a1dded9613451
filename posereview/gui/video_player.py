"""Video player widget with pose overlay, joint inspection and frame export"""
import logging

import cv2
import numpy as np
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QPushButton, QHBoxLayout,
    QComboBox, QCheckBox, QFileDialog, QMessageBox, QSizePolicy
)

from ..core.config import ReviewConfig
from ..core.errors import DetectorInitError
from ..core.export import capture_filename, frame_filename
from ..core.hit_test import InteractionMode
from ..core.media import MediaSource
from ..core.playback import PlaybackState
from ..core.pose import PoseDetector
from ..core.session import ReviewSession

logger = logging.getLogger(__name__)


class VideoSurfaceLabel(QLabel):
    """Display label reporting pointer positions and its rendered size"""

    pointer_moved = Signal(float, float)
    pointer_clicked = Signal(float, float)
    pointer_left = Signal()
    resized = Signal(int, int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        # Ignore the pixmap size so the label never grows to fit its own frame
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)

    def mouseMoveEvent(self, event):
        pos = event.position()
        self.pointer_moved.emit(pos.x(), pos.y())
        super().mouseMoveEvent(event)

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self.pointer_clicked.emit(pos.x(), pos.y())
        super().mousePressEvent(event)

    def leaveEvent(self, event):
        self.pointer_left.emit()
        super().leaveEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.resized.emit(self.width(), self.height())


class VideoPlayer(QWidget):
    """Video player widget with play/continue, pose overlay, and frame export"""

    # Signal emitted with a status line for the main window
    status_message = Signal(str)

    def __init__(self, config: ReviewConfig = None, parent=None):
        super().__init__(parent)
        self.config = config or ReviewConfig()
        self.video_path = None
        self.session = None
        self.media = MediaSource(self, tick_interval_ms=self.config.tick_interval_ms)
        self.media.frame_ready.connect(self._refresh_display)
        self.media.can_play.connect(lambda: self.play_pause_btn.setEnabled(True))
        self.media.ended.connect(lambda: self.status_message.emit("End of video"))

        try:
            self.pose_detector = PoseDetector()
            self.detector_error = None
        except DetectorInitError as e:
            logger.warning("%s", e)
            self.pose_detector = None
            self.detector_error = str(e)

        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(5)

        # Video display
        self.video_label = VideoSurfaceLabel()
        self.video_label.setMinimumSize(560, 420)
        self.video_label.setStyleSheet("QLabel { background-color: #1a1a1a; border-radius: 4px; }")
        self.video_label.pointer_moved.connect(self._on_pointer_moved)
        self.video_label.pointer_clicked.connect(self._on_pointer_clicked)
        self.video_label.pointer_left.connect(self._on_pointer_left)
        self.video_label.resized.connect(self.media.notify_display_resized)
        layout.addWidget(self.video_label, 1)

        # Loading / error message
        self.message_label = QLabel("Open a video to start reviewing")
        self.message_label.setAlignment(Qt.AlignCenter)
        self.message_label.setStyleSheet("QLabel { color: #e0e0e0; padding: 4px; }")
        layout.addWidget(self.message_label)

        # Playback controls row
        playback_layout = QHBoxLayout()

        self.play_pause_btn = QPushButton("▶")
        self.play_pause_btn.setFixedWidth(50)
        self.play_pause_btn.clicked.connect(self._toggle_play_pause)
        self.play_pause_btn.setEnabled(False)
        self.play_pause_btn.setToolTip("Play/Pause")
        playback_layout.addWidget(self.play_pause_btn)

        self.continue_btn = QPushButton("Continue")
        self.continue_btn.clicked.connect(self._continue)
        self.continue_btn.setVisible(False)
        self.continue_btn.setToolTip("Resume playback from this pause point")
        playback_layout.addWidget(self.continue_btn)

        self.time_label = QLabel("0.00 s")
        self.time_label.setFixedWidth(80)
        self.time_label.setAlignment(Qt.AlignCenter)
        self.media.time_updated.connect(lambda t: self.time_label.setText(f"{t:.2f} s"))
        playback_layout.addWidget(self.time_label)

        playback_layout.addStretch()

        # Interaction mode
        playback_layout.addWidget(QLabel("Inspect:"))
        self.mode_combo = QComboBox()
        self.mode_combo.addItem("Hover", InteractionMode.HOVER)
        self.mode_combo.addItem("Click", InteractionMode.CLICK)
        self.mode_combo.currentIndexChanged.connect(self._on_mode_change)
        self.mode_combo.setFixedWidth(80)
        playback_layout.addWidget(self.mode_combo)

        layout.addLayout(playback_layout)

        # Overlay controls row
        overlay_layout = QHBoxLayout()

        self.keypoints_checkbox = QCheckBox("Keypoints")
        self.keypoints_checkbox.setChecked(True)
        self.keypoints_checkbox.toggled.connect(self._toggle_keypoints)
        self.keypoints_checkbox.setEnabled(False)
        overlay_layout.addWidget(self.keypoints_checkbox)

        self.dimming_checkbox = QCheckBox("Dimming")
        self.dimming_checkbox.setChecked(True)
        self.dimming_checkbox.toggled.connect(self._toggle_dimming)
        self.dimming_checkbox.setEnabled(False)
        self.dimming_checkbox.setToolTip("Dim everything outside the detected body")
        overlay_layout.addWidget(self.dimming_checkbox)

        overlay_layout.addStretch()

        self.capture_btn = QPushButton("Capture")
        self.capture_btn.clicked.connect(self.capture_frame)
        self.capture_btn.setEnabled(False)
        self.capture_btn.setToolTip("Save the raw video frame")
        overlay_layout.addWidget(self.capture_btn)

        self.save_btn = QPushButton("Save Frame")
        self.save_btn.clicked.connect(self.save_frame)
        self.save_btn.setEnabled(False)
        self.save_btn.setToolTip("Save the frame with the overlay and joint details")
        overlay_layout.addWidget(self.save_btn)

        layout.addLayout(overlay_layout)

    def load_video(self, video_path: str):
        """Load a video file"""
        if self.session:
            self.session.teardown()
            self.session.deleteLater()

        self.session = ReviewSession(
            self.media,
            detector=self.pose_detector,
            config=self.config,
            interaction_mode=self.mode_combo.currentData(),
            parent=self,
        )
        self.session.overlay_updated.connect(self._refresh_display)
        self.session.state_changed.connect(self._on_state_changed)
        self.session.message.connect(self._show_error)
        self.session.set_show_dimming(self.dimming_checkbox.isChecked())
        self.session.set_show_keypoints(self.keypoints_checkbox.isChecked())

        self.message_label.setText("Loading video...")
        if not self.media.load(video_path):
            self.video_path = None
            return False

        self.video_path = video_path
        self.media.notify_display_resized(self.video_label.width(), self.video_label.height())

        overlay_ready = self.session.overlay_available
        self.keypoints_checkbox.setEnabled(overlay_ready)
        self.dimming_checkbox.setEnabled(overlay_ready)
        self.save_btn.setEnabled(True)
        self.capture_btn.setEnabled(True)
        if overlay_ready:
            self.message_label.setText("")
        else:
            self.message_label.setText(self.detector_error or "Pose overlay unavailable")
        self._refresh_display()
        return True

    # ── playback ──

    def _toggle_play_pause(self):
        if not self.session:
            return
        if self.session.state == PlaybackState.PLAYING:
            self.session.pause()
        else:
            self.session.resume()

    def _continue(self):
        if self.session:
            self.session.resume()

    def _on_state_changed(self, state: PlaybackState):
        playing = state == PlaybackState.PLAYING
        paused = state == PlaybackState.PAUSED
        self.play_pause_btn.setText("⏸" if playing else "▶")
        self.play_pause_btn.setEnabled(state in (PlaybackState.READY, PlaybackState.PLAYING,
                                                 PlaybackState.PAUSED))
        self.continue_btn.setVisible(paused)
        if paused:
            self.status_message.emit(f"Paused at {self.media.current_time:.2f} s")

    def _show_error(self, message: str):
        self.message_label.setText(message)
        if self.session and self.session.state == PlaybackState.ERROR:
            # Loading errors block the player
            self.play_pause_btn.setEnabled(False)
            self.save_btn.setEnabled(False)
            self.capture_btn.setEnabled(False)
        self.status_message.emit(message)

    # ── overlay options ──

    def _toggle_keypoints(self, checked: bool):
        if self.session:
            self.session.set_show_keypoints(checked)

    def _toggle_dimming(self, checked: bool):
        if self.session:
            self.session.set_show_dimming(checked)

    def _on_mode_change(self, index: int):
        if self.session:
            self.session.interaction_mode = self.mode_combo.itemData(index)
            self.session.clear_selection()

    # ── pointer ──

    def _on_pointer_moved(self, x: float, y: float):
        if self.session:
            self.session.pointer_moved(x, y)

    def _on_pointer_clicked(self, x: float, y: float):
        if self.session:
            self.session.pointer_clicked(x, y)

    def _on_pointer_left(self):
        if self.session:
            self.session.pointer_left()

    # ── display ──

    def _refresh_display(self, *_):
        if not self.session:
            return
        frame = self.session.render_display()
        if frame is None:
            return

        frame_rgb = cv2.cvtColor(np.ascontiguousarray(frame), cv2.COLOR_BGR2RGB)
        h, w, ch = frame_rgb.shape
        bytes_per_line = ch * w
        qt_image = QImage(frame_rgb.data, w, h, bytes_per_line, QImage.Format_RGB888).copy()
        self.video_label.setPixmap(QPixmap.fromImage(qt_image))

    # ── export ──

    def save_frame(self):
        """Save the annotated frame at native resolution"""
        if not self.session:
            return
        data = self.session.export_frame()
        if data is None:
            QMessageBox.warning(self, "Save Frame", "The video frame is not ready yet.")
            return
        self._write_image(data, frame_filename())

    def capture_frame(self):
        """Save the raw frame without overlay"""
        if not self.session:
            return
        data = self.session.capture_frame()
        if data is None:
            QMessageBox.warning(self, "Capture", "The video frame is not ready yet.")
            return
        self._write_image(data, capture_filename())

    def _write_image(self, data: bytes, default_name: str):
        file_path, _ = QFileDialog.getSaveFileName(
            self, "Save Frame", default_name, "PNG Images (*.png)"
        )
        if not file_path:
            return
        try:
            with open(file_path, 'wb') as f:
                f.write(data)
            self.status_message.emit(f"Saved {file_path}")
        except OSError as e:
            QMessageBox.critical(self, "Export Error", f"Failed to save frame:\n{str(e)}")

    def cleanup(self):
        """Cleanup resources"""
        if self.session:
            self.session.teardown()
        self.media.release()
        if self.pose_detector:
            try:
                self.pose_detector.release()
            except Exception as e:
                logger.debug("Ignoring detector cleanup error: %s", e)
