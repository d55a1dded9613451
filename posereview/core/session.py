"""
Review session: one loaded video with its overlay engine.

Owns the mapper, overlay pipeline, playback controller, detection loop and
exporter, and is the single place that subscribes to the media source.
``teardown()`` releases every subscription and stops detection.
"""
import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
from PySide6.QtCore import QObject, Signal

from .config import ReviewConfig
from .detection import DetectionDispatcher, DetectionLoop, Dispatch
from .errors import ExportPreconditionError
from .export import FrameExporter, capture_frame
from .hit_test import HitTester, InteractionMode, SelectedJointDetail
from .mapping import CoordinateMapper
from .media import MediaHandlers, MediaSource, MediaSubscription
from .overlay import OverlayPipeline
from .playback import PlaybackController, PlaybackState, qt_single_shot
from .pose import Pose

logger = logging.getLogger(__name__)


class ReviewSession(QObject):
    overlay_updated = Signal()
    selection_changed = Signal(object)    # Optional[SelectedJointDetail]
    state_changed = Signal(object)        # PlaybackState
    message = Signal(str)                 # user-facing error text

    def __init__(self, media: MediaSource, detector=None, config: Optional[ReviewConfig] = None,
                 dispatch: Optional[Dispatch] = None, ticker=None, defer=qt_single_shot,
                 interaction_mode: InteractionMode = InteractionMode.HOVER, parent=None):
        super().__init__(parent)
        self.config = config or ReviewConfig()
        self.media = media
        self.interaction_mode = interaction_mode

        self.mapper = CoordinateMapper()
        self.pipeline = OverlayPipeline(self.mapper, config=self.config)
        self.hit_tester = HitTester(self.mapper, self.config)
        self.exporter = FrameExporter()
        self.controller = PlaybackController(media.pause, media.play, self.config, defer)

        self._dispatcher = None
        if dispatch is None and detector is not None:
            self._dispatcher = DetectionDispatcher(detector, self)
            dispatch = self._dispatcher

        # No detector: overlay features are unavailable, playback still works
        self.loop: Optional[DetectionLoop] = None
        if dispatch is not None:
            self.loop = DetectionLoop(self.controller, self.pipeline, dispatch,
                                      self._detection_frame, self.config, ticker, parent=self)
            self.loop.overlay_updated.connect(self.overlay_updated)

        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.selection_cleared.connect(self.clear_selection)
        self.controller.error_raised.connect(self.message)

        self._subscription = MediaSubscription(media, MediaHandlers(
            metadata_ready=self._on_metadata_ready,
            time_update=self.controller.on_time_update,
            played=self.controller.on_played,
            paused=self.controller.on_paused,
            display_resized=self.set_display_size,
            load_error=self.controller.on_load_error,
        ))
        self._torn_down = False

    # ── state ──

    @property
    def state(self) -> PlaybackState:
        return self.controller.state

    @property
    def overlay_available(self) -> bool:
        return self.loop is not None

    @property
    def current_pose(self) -> Optional[Pose]:
        return self.loop.current_pose if self.loop else None

    @property
    def selection(self) -> Optional[SelectedJointDetail]:
        return self.loop.selection if self.loop else None

    # ── media events ──

    def _on_metadata_ready(self, width: int, height: int):
        self.mapper.set_native_size(width, height)
        self.controller.on_metadata_ready()
        if self.loop and self.controller.is_active:
            self.loop.start()

    def _on_state_changed(self, state: PlaybackState):
        if state == PlaybackState.ERROR and self.loop:
            self.loop.stop()
        self.state_changed.emit(state)

    def _detection_frame(self) -> Optional[np.ndarray]:
        if not self.mapper.is_ready:
            return None
        return self.media.current_frame

    # ── display ──

    def set_display_size(self, width: int, height: int):
        """Rendered element size changed"""
        if (width, height) == (self.mapper.display_width, self.mapper.display_height):
            return
        self.pipeline.resize(width, height)
        # Display-space positions are stale after a resize
        self.clear_selection(redraw=False)
        self.redraw()

    def set_show_dimming(self, show: bool):
        self.pipeline.show_dimming = show
        self.redraw()

    def set_show_keypoints(self, show: bool):
        self.pipeline.show_keypoints = show
        self.redraw()

    def redraw(self):
        if self.loop:
            self.loop.redraw()

    def render_display(self) -> Optional[np.ndarray]:
        """Current frame at display size with the overlay blended on top"""
        frame = self.media.current_frame
        if frame is None:
            return None
        if not self.mapper.is_ready:
            return frame
        size = (int(self.mapper.display_width), int(self.mapper.display_height))
        display = cv2.resize(frame, size, interpolation=cv2.INTER_AREA)
        return self.pipeline.surface.composite_onto(display)

    # ── pointer ──

    def pointer_moved(self, x: float, y: float):
        if self.interaction_mode == InteractionMode.HOVER:
            self._select_at(x, y)

    def pointer_clicked(self, x: float, y: float):
        if self.interaction_mode == InteractionMode.CLICK:
            self._select_at(x, y)

    def pointer_left(self):
        if self.interaction_mode == InteractionMode.HOVER:
            self.clear_selection()

    def _select_at(self, x: float, y: float):
        # Joints are only inspectable on a paused frame
        if self.loop is None or not self.controller.is_paused:
            return
        self._set_selection(self.hit_tester.select(x, y, self.loop.current_pose))

    def clear_selection(self, redraw: bool = True):
        self._set_selection(None, redraw)

    def _set_selection(self, detail: Optional[SelectedJointDetail], redraw: bool = True):
        if self.loop is None or detail == self.loop.selection:
            return
        self.loop.selection = detail
        self.selection_changed.emit(detail)
        if redraw:
            self.loop.redraw()

    # ── playback ──

    def pause(self):
        self.controller.pause()

    def resume(self) -> bool:
        return self.controller.resume()

    # ── export ──

    def export_frame(self) -> Optional[bytes]:
        """Annotated frame as PNG at native resolution"""
        try:
            return self.exporter.export(self.media.current_frame, self._export_layer(), self.selection)
        except ExportPreconditionError as e:
            logger.warning("Cannot export frame: %s", e)
            return None

    def save_frame(self, directory) -> Optional[Path]:
        return self.exporter.save(directory, self.media.current_frame,
                                  self._export_layer(), self.selection)

    def _export_layer(self):
        # The exporter draws its own info box, so leave the live tooltip out
        return self.pipeline.export_layer(self.current_pose)

    def capture_frame(self) -> Optional[bytes]:
        """Raw frame as PNG"""
        try:
            return capture_frame(self.media.current_frame)
        except ExportPreconditionError as e:
            logger.warning("Cannot capture frame: %s", e)
            return None

    # ── teardown ──

    def teardown(self):
        if self._torn_down:
            return
        self._torn_down = True
        self._subscription.release()
        if self.loop:
            self.loop.stop()
        self.controller.teardown()
        if self._dispatcher:
            self._dispatcher.shutdown()
        logger.debug("Review session torn down")
