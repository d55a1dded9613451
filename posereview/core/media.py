"""Playable media source with element-style events"""
import logging
import time
from dataclasses import dataclass, fields
from typing import Callable, List, Optional, Tuple

import numpy as np
from PySide6.QtCore import QObject, QTimer, Signal

from .errors import MediaLoadError, ResumePlaybackError
from .video import VideoReader

logger = logging.getLogger(__name__)


class MediaSource(QObject):
    """
    A video file played against the wall clock.

    Emits the events a media element would: metadata, can-play, time
    updates, play/pause, decoded frames and load errors. The display widget
    reports its rendered size through ``notify_display_resized``.
    """

    metadata_ready = Signal(int, int)      # native width, height
    can_play = Signal()
    time_updated = Signal(float)           # seconds
    played = Signal()
    paused = Signal()
    ended = Signal()
    frame_ready = Signal(object)           # BGR np.ndarray
    display_resized = Signal(int, int)     # rendered width, height
    load_error = Signal(str)

    def __init__(self, parent=None, clock: Callable[[], float] = time.monotonic,
                 tick_interval_ms: int = 16):
        super().__init__(parent)
        # Wall-clock sampling period, independent of the clip frame rate
        self.tick_interval_ms = tick_interval_ms
        self.reader: Optional[VideoReader] = None
        self.current_frame: Optional[np.ndarray] = None
        self.current_index = -1
        self._position = 0.0
        self._paused = True
        self._clock = clock
        self._play_start_wall = 0.0
        self._play_start_pos = 0.0

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._advance)

    # ── properties ──

    @property
    def is_loaded(self) -> bool:
        return self.reader is not None

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def current_time(self) -> float:
        return self._position

    @property
    def duration(self) -> float:
        return self.reader.duration if self.reader else 0.0

    @property
    def video_width(self) -> int:
        return self.reader.width if self.reader else 0

    @property
    def video_height(self) -> int:
        return self.reader.height if self.reader else 0

    # ── commands ──

    def load(self, video_path: str) -> bool:
        """Open *video_path*. Emits ``load_error`` and returns False on failure."""
        self.release()
        try:
            self.reader = VideoReader(video_path)
        except MediaLoadError as e:
            self.reader = None
            logger.error("Video loading error: %s", e)
            self.load_error.emit(str(e))
            return False

        logger.info("Video metadata loaded: %dx%d, %.2fs at %.1f fps",
                    self.reader.width, self.reader.height, self.reader.duration, self.reader.fps)
        self._position = 0.0
        self._paused = True
        self.metadata_ready.emit(self.reader.width, self.reader.height)

        if not self._show_frame(0):
            message = f"Failed to decode first frame of {video_path}"
            self.release()
            self.load_error.emit(message)
            return False

        self.can_play.emit()
        return True

    def play(self):
        if self.reader is None:
            raise ResumePlaybackError("No video loaded")
        if not self._paused:
            return

        # Restart from the top once the end was reached
        if self._position >= self.duration - 1 / self.reader.fps:
            self._position = 0.0
            self._show_frame(0)

        self._paused = False
        self._play_start_wall = self._clock()
        self._play_start_pos = self._position
        self._timer.start(self.tick_interval_ms)
        self.played.emit()

    def pause(self):
        if self._paused:
            return
        self._paused = True
        self._timer.stop()
        self.paused.emit()

    def seek(self, seconds: float):
        if self.reader is None:
            return
        self._position = max(0.0, min(self.duration, seconds))
        self._play_start_wall = self._clock()
        self._play_start_pos = self._position
        self._show_frame(self.reader.frame_index_at(self._position))
        self.time_updated.emit(self._position)

    def notify_display_resized(self, width: int, height: int):
        self.display_resized.emit(int(width), int(height))

    def release(self):
        """Stop playback and close the file"""
        self._timer.stop()
        self._paused = True
        if self.reader:
            self.reader.release()
        self.reader = None
        self.current_frame = None
        self.current_index = -1

    # ── playback clock ──

    def _advance(self):
        if self.reader is None or self._paused:
            return

        position = self._play_start_pos + (self._clock() - self._play_start_wall)
        if position >= self.duration:
            self._position = self.duration
            self._show_frame(self.reader.frame_count - 1)
            self.time_updated.emit(self._position)
            self.pause()
            self.ended.emit()
            return

        self._position = position
        index = self.reader.frame_index_at(position)
        if index != self.current_index:
            self._show_frame(index)
        self.time_updated.emit(position)

    def _show_frame(self, index: int) -> bool:
        frame = self.reader.read_frame(index)
        if frame is None:
            logger.warning("Could not decode frame %d", index)
            return False
        self.current_frame = frame
        self.current_index = index
        self.frame_ready.emit(frame)
        return True


@dataclass
class MediaHandlers:
    """Typed callbacks a consumer can register on a MediaSource"""
    metadata_ready: Optional[Callable[[int, int], None]] = None
    time_update: Optional[Callable[[float], None]] = None
    played: Optional[Callable[[], None]] = None
    paused: Optional[Callable[[], None]] = None
    frame_ready: Optional[Callable[[np.ndarray], None]] = None
    display_resized: Optional[Callable[[int, int], None]] = None
    load_error: Optional[Callable[[str], None]] = None


# handler field -> MediaSource signal
_SIGNALS = {
    'metadata_ready': 'metadata_ready',
    'time_update': 'time_updated',
    'played': 'played',
    'paused': 'paused',
    'frame_ready': 'frame_ready',
    'display_resized': 'display_resized',
    'load_error': 'load_error',
}


class MediaSubscription:
    """Connected handlers for one consumer; ``release()`` disconnects them all"""

    def __init__(self, media: MediaSource, handlers: MediaHandlers):
        self.media = media
        self._connections: List[Tuple[object, Callable]] = []
        for f in fields(handlers):
            handler = getattr(handlers, f.name)
            if handler is None:
                continue
            signal = getattr(media, _SIGNALS[f.name])
            signal.connect(handler)
            self._connections.append((signal, handler))

    @property
    def active(self) -> bool:
        return bool(self._connections)

    def release(self):
        for signal, handler in self._connections:
            try:
                signal.disconnect(handler)
            except (RuntimeError, TypeError):
                pass  # Media already destroyed
        self._connections = []
