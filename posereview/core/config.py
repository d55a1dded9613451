"""Review session configuration"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple


MODEL_DIR = Path.home() / ".posereview" / "models"

DEFAULT_PAUSE_POINTS = (3.0, 7.0)


class PauseSchedule:
    """Ordered timestamps (seconds) at which playback pauses for a detection pass.

    Entries closer together than twice the tolerance window would overlap and
    could double-pause, so they are rejected up front.
    """

    def __init__(self, points: Iterable[float] = DEFAULT_PAUSE_POINTS, tolerance: float = 0.1):
        self.tolerance = float(tolerance)
        self.points: Tuple[float, ...] = tuple(sorted(float(p) for p in points))

        for earlier, later in zip(self.points, self.points[1:]):
            if later - earlier < 2 * self.tolerance:
                raise ValueError(
                    f"Pause points {earlier:g}s and {later:g}s are closer than "
                    f"{2 * self.tolerance:g}s and would overlap"
                )

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def match(self, current_time: float) -> Optional[int]:
        """Index of the entry whose window contains *current_time*, or None"""
        for idx, point in enumerate(self.points):
            if abs(current_time - point) < self.tolerance:
                return idx
        return None

    def __repr__(self) -> str:
        return f"PauseSchedule({list(self.points)!r}, tolerance={self.tolerance})"


@dataclass(frozen=True)
class ReviewConfig:
    """Named overlay constants. Fixed for a session."""
    confidence_threshold: float = 0.3
    detection_fps: float = 30
    hit_radius_px: float = 15
    dim_padding_px: float = 50
    pause_settle_ms: int = 200
    pause_tolerance_sec: float = 0.1
    pause_points: Sequence[float] = field(default=DEFAULT_PAUSE_POINTS)

    # Drawing
    marker_radius: int = 6
    bone_width: int = 2
    marker_outline_width: int = 2
    dim_alpha: float = 0.7
    tick_interval_ms: int = 16

    @property
    def detection_interval_ms(self) -> float:
        return 1000 / self.detection_fps

    def pause_schedule(self) -> PauseSchedule:
        return PauseSchedule(self.pause_points, self.pause_tolerance_sec)
