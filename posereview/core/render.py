"""Skeleton, joint marker and tooltip drawing"""
from typing import Optional

from .config import ReviewConfig
from .mapping import CoordinateMapper
from .pose import BONE_CONNECTIONS, Pose
from .surface import OverlaySurface, text_size

# Joint marker colors by body region
JOINT_COLORS = {
    'head': '#FF0000',
    'torso': '#00FF00',
    'arms': '#0000FF',
    'legs': '#FFA500',
    'default': '#FFFFFF',
}

BONE_COLOR = (255, 255, 255, 0.8)
OUTLINE_COLOR = '#FFFFFF'

TOOLTIP_WIDTH = 150
TOOLTIP_PADDING = 8
TOOLTIP_LINE_HEIGHT = 20
TOOLTIP_OFFSET = 15
TOOLTIP_BACKGROUND = (0, 0, 0, 0.8)
TOOLTIP_BORDER = (255, 255, 255, 0.5)
TOOLTIP_FONT_SCALE = 0.45


def joint_region(joint_name: Optional[str]) -> str:
    if not joint_name:
        return 'default'
    if 'nose' in joint_name or 'eye' in joint_name or 'ear' in joint_name:
        return 'head'
    if 'shoulder' in joint_name or 'hip' in joint_name:
        return 'torso'
    if 'elbow' in joint_name or 'wrist' in joint_name:
        return 'arms'
    if 'knee' in joint_name or 'ankle' in joint_name:
        return 'legs'
    return 'default'


def joint_color(joint_name: Optional[str]) -> str:
    return JOINT_COLORS[joint_region(joint_name)]


class SkeletonRenderer:
    """Draw bones and joint markers for a pose in display space.

    Does not clear the surface; the caller owns clearing.
    """

    def __init__(self, mapper: CoordinateMapper, config: Optional[ReviewConfig] = None):
        self.mapper = mapper
        self.config = config or ReviewConfig()

    def draw(self, surface: OverlaySurface, pose: Optional[Pose]):
        """Bones first, then markers on top"""
        if pose is None:
            return
        self.draw_skeleton(surface, pose)
        self.draw_markers(surface, pose)

    def draw_skeleton(self, surface: OverlaySurface, pose: Pose):
        keypoint_map = pose.keypoint_map(self.config.confidence_threshold)
        for start_name, end_name in BONE_CONNECTIONS:
            start = keypoint_map.get(start_name)
            end = keypoint_map.get(end_name)
            if start is None or end is None:
                continue
            surface.line(self.mapper.to_display(start.x, start.y),
                         self.mapper.to_display(end.x, end.y),
                         BONE_COLOR, self.config.bone_width)

    def draw_markers(self, surface: OverlaySurface, pose: Pose):
        radius = self.config.marker_radius
        for keypoint in pose.confident(self.config.confidence_threshold):
            center = self.mapper.to_display(keypoint.x, keypoint.y)
            surface.circle(center, radius, joint_color(keypoint.name))
            surface.circle(center, radius, OUTLINE_COLOR, self.config.marker_outline_width)

    def draw_tooltip(self, surface: OverlaySurface, detail):
        """Detail box beside the selected joint, kept on the surface"""
        if detail is None or surface.is_empty:
            return

        lines = [detail.name]
        if detail.side:
            lines.append(f"Side: {detail.side}")
        if detail.angle is not None:
            lines.append(f"Angle: {detail.angle} deg")
        if detail.note:
            lines.append(detail.note)

        box_height = TOOLTIP_LINE_HEIGHT * len(lines) + TOOLTIP_PADDING * 2
        box_width = max([TOOLTIP_WIDTH] + [
            text_size(line, TOOLTIP_FONT_SCALE)[0] + TOOLTIP_PADDING * 2 for line in lines
        ])

        x, y = detail.position
        box_x = x + TOOLTIP_OFFSET
        box_y = y - box_height / 2
        if box_x + box_width > surface.width:
            box_x = x - box_width - TOOLTIP_OFFSET
        if box_y + box_height > surface.height:
            box_y = surface.height - box_height - TOOLTIP_PADDING
        if box_y < TOOLTIP_PADDING:
            box_y = TOOLTIP_PADDING

        surface.fill_rect(box_x, box_y, box_width, box_height, TOOLTIP_BACKGROUND)
        surface.stroke_rect(box_x, box_y, box_width, box_height, TOOLTIP_BORDER)
        for idx, line in enumerate(lines):
            surface.text((box_x + TOOLTIP_PADDING, box_y + TOOLTIP_LINE_HEIGHT * (idx + 1)),
                         line, '#FFFFFF', TOOLTIP_FONT_SCALE)
