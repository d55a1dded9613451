"""Rate-limited pose detection loop"""
import logging
import time
from typing import Callable, List, Optional

import numpy as np
from PySide6.QtCore import QObject, QThread, QTimer, Signal, Slot

from .config import ReviewConfig
from .hit_test import SelectedJointDetail
from .overlay import OverlayPipeline
from .playback import PlaybackController
from .pose import Pose

logger = logging.getLogger(__name__)

ResultCallback = Callable[[List[Pose]], None]
ErrorCallback = Callable[[str], None]
Dispatch = Callable[[np.ndarray, ResultCallback, ErrorCallback], None]


class PoseEstimationWorker(QThread):
    """Background worker for a single pose estimation"""
    poses_ready = Signal(int, object)  # request id, List[Pose]
    error = Signal(int, str)  # request id, error_msg

    def __init__(self, request_id: int, detector, frame: np.ndarray):
        super().__init__()
        self.request_id = request_id
        self.detector = detector
        self.frame = frame

    def run(self):
        try:
            poses = self.detector.estimate_poses(self.frame, flip_horizontal=False, max_poses=1)
            self.poses_ready.emit(self.request_id, poses)
        except Exception as e:
            self.error.emit(self.request_id, str(e))


class DetectionDispatcher(QObject):
    """Runs estimations on worker threads; callbacks fire on the UI thread"""

    def __init__(self, detector, parent=None):
        super().__init__(parent)
        self.detector = detector
        self._callbacks = {}
        self._workers: List[PoseEstimationWorker] = []
        self._next_id = 0

    def __call__(self, frame: np.ndarray, on_result: ResultCallback, on_error: ErrorCallback):
        self._workers = [w for w in self._workers if not w.isFinished()]

        self._next_id += 1
        request_id = self._next_id
        self._callbacks[request_id] = (on_result, on_error)

        worker = PoseEstimationWorker(request_id, self.detector, frame.copy())
        worker.poses_ready.connect(self._on_poses_ready)
        worker.error.connect(self._on_error)
        self._workers.append(worker)
        worker.start()

    @Slot(int, object)
    def _on_poses_ready(self, request_id: int, poses):
        callbacks = self._callbacks.pop(request_id, None)
        if callbacks:
            callbacks[0](poses)

    @Slot(int, str)
    def _on_error(self, request_id: int, message: str):
        callbacks = self._callbacks.pop(request_id, None)
        if callbacks:
            callbacks[1](message)

    def shutdown(self):
        """Wait for in-flight workers; their results are dropped"""
        self._callbacks.clear()
        for worker in self._workers:
            worker.wait()
        self._workers = []


class DetectionLoop(QObject):
    """
    Drives pose detection and overlay redraws.

    While playing, each ticker tick dispatches a detection if the 30 fps gate
    is open and nothing is in flight. ``detection_due`` from the controller
    forces one pass regardless of the gate. Results arriving after ``stop()``
    are discarded.
    """

    overlay_updated = Signal()
    detection_failed = Signal(str)

    def __init__(self, controller: PlaybackController, pipeline: OverlayPipeline,
                 dispatch: Dispatch, frame_source: Callable[[], Optional[np.ndarray]],
                 config: Optional[ReviewConfig] = None, ticker=None,
                 clock: Callable[[], float] = time.monotonic, parent=None):
        super().__init__(parent)
        self.config = config or ReviewConfig()
        self.controller = controller
        self.pipeline = pipeline
        self._dispatch_fn = dispatch
        self._frame_source = frame_source
        self._clock = clock

        self._ticker = ticker if ticker is not None else QTimer(self)
        self._ticker.timeout.connect(self._on_tick)

        self.current_pose: Optional[Pose] = None
        self.selection: Optional[SelectedJointDetail] = None

        self._running = False
        self._pending = False
        self._pass_due = False
        self._generation = 0
        self._last_dispatch_ms: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_pending(self) -> bool:
        return self._pending

    def start(self):
        if self._running:
            return
        self._running = True
        self.controller.detection_due.connect(self.request_pass)
        self._ticker.start(self.config.tick_interval_ms)
        logger.debug("Detection loop started")

    def stop(self):
        """No detection is dispatched or applied after this returns"""
        if not self._running:
            return
        self._running = False
        self._ticker.stop()
        self.controller.detection_due.disconnect(self.request_pass)
        self._generation += 1
        self._pending = False
        self._pass_due = False
        logger.debug("Detection loop stopped")

    def request_pass(self):
        """One detection regardless of the rate gate"""
        if not self._running:
            return
        if self._pending:
            self._pass_due = True
            return
        self._dispatch()

    def redraw(self):
        """Redraw the overlay from the last pose"""
        self.pipeline.draw(self.current_pose, self.selection)
        self.overlay_updated.emit()

    # ── internals ──

    def _on_tick(self):
        if not self._running or not self.controller.is_playing:
            return

        now_ms = self._clock() * 1000
        if (self._last_dispatch_ms is not None
                and now_ms - self._last_dispatch_ms < self.config.detection_interval_ms):
            return
        if self._pending:
            return
        self._last_dispatch_ms = now_ms
        self._dispatch()

    def _dispatch(self):
        frame = self._frame_source()
        if frame is None:
            logger.debug("Skipping detection, no frame available")
            return

        self._pending = True
        generation = self._generation
        self._dispatch_fn(
            frame,
            lambda poses: self._on_result(generation, poses),
            lambda message: self._on_error(generation, message),
        )

    def _on_result(self, generation: int, poses: Optional[List[Pose]]):
        if generation != self._generation:
            logger.debug("Discarding detection result from a stopped loop")
            return
        self._pending = False

        pose = self._pick_pose(poses)
        if pose is None:
            logger.debug("No valid poses detected; keeping previous overlay")
        else:
            self.current_pose = pose
            self.redraw()
        self._drain_pass()

    def _on_error(self, generation: int, message: str):
        if generation != self._generation:
            return
        self._pending = False
        logger.warning("Error in pose detection: %s", message)
        self.detection_failed.emit(str(message))
        self._drain_pass()

    def _drain_pass(self):
        if self._pass_due and self._running:
            self._pass_due = False
            self._dispatch()

    def _pick_pose(self, poses: Optional[List[Pose]]) -> Optional[Pose]:
        for pose in poses or []:
            if pose is not None and pose.keypoints and pose.score >= self.config.confidence_threshold:
                return pose
        return None
