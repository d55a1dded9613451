"""Video reading utilities"""
import cv2
import numpy as np
from typing import Optional

from .errors import MediaLoadError

FALLBACK_FPS = 30.0


class VideoReader:
    """Read frames from a video file"""

    def __init__(self, video_path: str):
        self.video_path = video_path
        self.cap = cv2.VideoCapture(video_path)

        if not self.cap.isOpened():
            raise MediaLoadError(f"Failed to open video file: {video_path}")

        fps = self.cap.get(cv2.CAP_PROP_FPS)
        self.fps = fps if fps and fps > 0 else FALLBACK_FPS
        self.frame_count = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        # Validate that we got reasonable values
        if self.frame_count <= 0 or self.width <= 0 or self.height <= 0:
            self.cap.release()
            raise MediaLoadError(
                f"Invalid video properties: frames={self.frame_count}, size={self.width}x{self.height}"
            )
        self._next_frame = 0

    @property
    def duration(self) -> float:
        """Length in seconds"""
        return self.frame_count / self.fps

    def frame_index_at(self, seconds: float) -> int:
        index = int(seconds * self.fps)
        return max(0, min(self.frame_count - 1, index))

    def read_frame(self, frame_number: Optional[int] = None) -> Optional[np.ndarray]:
        """Read a specific frame or the next frame"""
        # Sequential reads skip the (slow) seek
        if frame_number is not None and frame_number != self._next_frame:
            self.cap.set(cv2.CAP_PROP_POS_FRAMES, frame_number)
            self._next_frame = frame_number

        ret, frame = self.cap.read()
        if not ret:
            return None
        self._next_frame += 1
        return frame

    def release(self):
        """Release video capture"""
        if self.cap:
            self.cap.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
