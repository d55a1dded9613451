"""Spotlight dimming around the detected body"""
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import ReviewConfig
from .mapping import CoordinateMapper
from .pose import Keypoint, Pose, confident_keypoints
from .surface import DESTINATION_OUT, SOURCE_OVER, OverlaySurface


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


def bounding_box(keypoints: Iterable[Keypoint], threshold: float) -> Optional[BoundingBox]:
    """Box around keypoints scoring above *threshold*, None if none do"""
    valid = confident_keypoints(keypoints, threshold)
    if not valid:
        return None

    xs = [kp.x for kp in valid]
    ys = [kp.y for kp in valid]
    return BoundingBox(
        x=min(xs),
        y=min(ys),
        width=max(xs) - min(xs),
        height=max(ys) - min(ys),
    )


class DimmingCompositor:
    """Dim the whole frame and cut a padded hole over the body"""

    def __init__(self, mapper: CoordinateMapper, config: Optional[ReviewConfig] = None):
        self.mapper = mapper
        self.config = config or ReviewConfig()

    def spotlight(self, pose: Optional[Pose]):
        """Display-space (x, y, w, h) of the cut-out, or None"""
        if pose is None:
            return None
        box = bounding_box(pose.keypoints, self.config.confidence_threshold)
        # A single point (or a line) gives a degenerate box; skip it
        if box is None or box.width <= 0 or box.height <= 0:
            return None

        left, top = self.mapper.to_display(box.x, box.y)
        right, bottom = self.mapper.to_display(box.x + box.width, box.y + box.height)
        padding = self.config.dim_padding_px
        return (left - padding, top - padding,
                (right - left) + padding * 2, (bottom - top) + padding * 2)

    def apply(self, surface: OverlaySurface, pose: Optional[Pose]) -> bool:
        """Returns True if the dim layer was painted"""
        hole = self.spotlight(pose)
        if hole is None or surface.is_empty:
            return False

        surface.fill_rect(0, 0, surface.width, surface.height, (0, 0, 0, self.config.dim_alpha))
        surface.set_composite_operation(DESTINATION_OUT)
        try:
            surface.fill_rect(*hole, (0, 0, 0, 1.0))
        finally:
            surface.set_composite_operation(SOURCE_OVER)
        return True
