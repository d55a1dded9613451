"""Per-frame overlay draw pipeline"""
from typing import Optional

from .config import ReviewConfig
from .dimming import DimmingCompositor
from .hit_test import SelectedJointDetail
from .mapping import CoordinateMapper
from .pose import Pose
from .render import SkeletonRenderer
from .surface import OverlaySurface


class OverlayPipeline:
    """Clear, dim, bones, markers, tooltip; in that order.

    Markers sit on top of the dim layer and the tooltip on top of
    everything, so the order must not change.
    """

    def __init__(self, mapper: CoordinateMapper, surface: Optional[OverlaySurface] = None,
                 config: Optional[ReviewConfig] = None):
        self.config = config or ReviewConfig()
        self.mapper = mapper
        self.surface = surface or OverlaySurface()
        self.renderer = SkeletonRenderer(mapper, self.config)
        self.dimmer = DimmingCompositor(mapper, self.config)
        self.show_dimming = True
        self.show_keypoints = True

    def resize(self, width: int, height: int):
        """Match the surface and mapper to a new display size"""
        self.mapper.set_display_size(width, height)
        self.surface.resize(width, height)

    def draw(self, pose: Optional[Pose], detail: Optional[SelectedJointDetail] = None):
        self.paint(self.surface, pose, detail)

    def export_layer(self, pose: Optional[Pose]) -> OverlaySurface:
        """Fresh layer at the display size with everything but the live tooltip"""
        layer = OverlaySurface(self.surface.width, self.surface.height)
        self.paint(layer, pose)
        return layer

    def paint(self, surface: OverlaySurface, pose: Optional[Pose],
              detail: Optional[SelectedJointDetail] = None):
        surface.clear()
        if pose is None or surface.is_empty:
            return

        if self.show_dimming:
            self.dimmer.apply(surface, pose)
        if self.show_keypoints:
            self.renderer.draw(surface, pose)
        if detail is not None:
            self.renderer.draw_tooltip(surface, detail)
