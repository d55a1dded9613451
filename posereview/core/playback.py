"""Playback pause-point state machine"""
import logging
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from .config import ReviewConfig
from .errors import ResumePlaybackError

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


def qt_single_shot(delay_ms: int, callback: Callable[[], None]):
    QTimer.singleShot(delay_ms, callback)


class PlaybackController(QObject):
    """
    Tracks playback state and pauses at scheduled pause points.

    Transitions:
      LOADING -> READY             metadata available
      READY/PLAYING -> PAUSED      manual pause, or time update near a pause point
      PAUSED/READY -> PLAYING      resume / play event (clears joint selection)
      any -> ERROR                 media load error (terminal)

    An automatic pause waits ``pause_settle_ms`` for the frame to settle
    before emitting ``detection_due``; a manual pause emits it right away.
    """

    state_changed = Signal(object)   # PlaybackState
    detection_due = Signal()
    selection_cleared = Signal()
    error_raised = Signal(str)

    def __init__(self, pause_media: Callable[[], None], resume_media: Callable[[], None],
                 config: Optional[ReviewConfig] = None,
                 defer: Callable[[int, Callable[[], None]], None] = qt_single_shot,
                 parent=None):
        super().__init__(parent)
        self.config = config or ReviewConfig()
        self.schedule = self.config.pause_schedule()
        self._pause_media = pause_media
        self._resume_media = resume_media
        self._defer = defer

        self.state = PlaybackState.LOADING
        self.error_message: Optional[str] = None
        self.current_time = 0.0
        self._fired = set()          # schedule indices already paused at
        self._settle_token = 0
        self._torn_down = False

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackState.PAUSED

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    @property
    def is_active(self) -> bool:
        return not self._torn_down and self.state != PlaybackState.ERROR

    def _set_state(self, state: PlaybackState):
        if state == self.state:
            return
        logger.debug("Playback %s -> %s", self.state.value, state.value)
        self.state = state
        self.state_changed.emit(state)

    # ── media events ──

    def on_metadata_ready(self, *_):
        if self.is_active and self.state == PlaybackState.LOADING:
            self._set_state(PlaybackState.READY)

    def on_time_update(self, current_time: float):
        if not self.is_active:
            return

        tolerance = self.schedule.tolerance
        # Re-arm pause points once playback moves back before their window
        self._fired = {idx for idx in self._fired
                       if current_time > self.schedule.points[idx] - tolerance}
        self.current_time = current_time

        if self.state != PlaybackState.PLAYING:
            return

        idx = self.schedule.match(current_time)
        if idx is None or idx in self._fired:
            return
        self._fired.add(idx)
        self._auto_pause(idx)

    def on_played(self):
        if not self.is_active or self.state == PlaybackState.PLAYING:
            return
        self._settle_token += 1
        self._set_state(PlaybackState.PLAYING)
        self.selection_cleared.emit()

    def on_paused(self):
        # Already PAUSED when we issued the pause ourselves
        if not self.is_active or self.state == PlaybackState.PAUSED:
            return
        self._set_state(PlaybackState.PAUSED)
        self.detection_due.emit()

    def on_load_error(self, message: str):
        if self._torn_down or self.state == PlaybackState.ERROR:
            return
        logger.error("Video loading error: %s", message)
        self.error_message = message
        self._set_state(PlaybackState.ERROR)
        self.error_raised.emit(message)

    # ── commands ──

    def pause(self):
        """Pause on behalf of the reviewer"""
        if not self.is_active or self.state not in (PlaybackState.READY, PlaybackState.PLAYING):
            return
        self._set_state(PlaybackState.PAUSED)
        self._pause_media()
        self.detection_due.emit()

    def resume(self) -> bool:
        """Resume playback. Returns False (state unchanged) if the media refuses."""
        if not self.is_active or self.state not in (PlaybackState.READY, PlaybackState.PAUSED):
            return False
        try:
            self._resume_media()
        except ResumePlaybackError as e:
            message = f"Failed to play video: {e}"
            logger.error(message)
            self.error_raised.emit(message)
            return False

        # The media usually reports "played" itself; this covers the case where it does not
        self.on_played()
        return True

    def teardown(self):
        """Drop pending settle callbacks and ignore further events"""
        self._torn_down = True
        self._settle_token += 1

    # ── internals ──

    def _auto_pause(self, schedule_idx: int):
        point = self.schedule.points[schedule_idx]
        logger.info("Pausing at %.2fs (pause point %gs)", self.current_time, point)
        self._set_state(PlaybackState.PAUSED)
        self._pause_media()

        self._settle_token += 1
        token = self._settle_token
        self._defer(self.config.pause_settle_ms, lambda: self._on_settled(token))

    def _on_settled(self, token: int):
        if self._torn_down or token != self._settle_token or self.state != PlaybackState.PAUSED:
            return
        self.detection_due.emit()
