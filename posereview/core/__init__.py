"""
Overlay engine - playback pause points, pose overlay drawing, joint
inspection and frame export.
"""

from .config import (
    ReviewConfig,
    PauseSchedule,
)

from .errors import (
    ReviewError,
    MediaLoadError,
    DetectorInitError,
    DetectionError,
    ExportPreconditionError,
    ResumePlaybackError,
)

from .pose import (
    Keypoint,
    Pose,
    BONE_CONNECTIONS,
    build_keypoint_map,
    PoseDetector,
)

from .mapping import CoordinateMapper
from .angles import joint_angle, joint_side, joint_note
from .surface import OverlaySurface
from .render import SkeletonRenderer, joint_color
from .dimming import BoundingBox, DimmingCompositor, bounding_box
from .hit_test import HitTester, InteractionMode, SelectedJointDetail
from .overlay import OverlayPipeline
from .playback import PlaybackController, PlaybackState
from .detection import DetectionLoop, DetectionDispatcher
from .export import FrameExporter, capture_frame, frame_filename, capture_filename
from .media import MediaSource, MediaHandlers, MediaSubscription
from .session import ReviewSession

__all__ = [
    # Configuration
    'ReviewConfig',
    'PauseSchedule',
    # Errors
    'ReviewError',
    'MediaLoadError',
    'DetectorInitError',
    'DetectionError',
    'ExportPreconditionError',
    'ResumePlaybackError',
    # Pose model
    'Keypoint',
    'Pose',
    'BONE_CONNECTIONS',
    'build_keypoint_map',
    'PoseDetector',
    # Geometry and drawing
    'CoordinateMapper',
    'joint_angle',
    'joint_side',
    'joint_note',
    'OverlaySurface',
    'SkeletonRenderer',
    'joint_color',
    'BoundingBox',
    'DimmingCompositor',
    'bounding_box',
    'HitTester',
    'InteractionMode',
    'SelectedJointDetail',
    'OverlayPipeline',
    # Playback and detection
    'PlaybackController',
    'PlaybackState',
    'DetectionLoop',
    'DetectionDispatcher',
    # Export
    'FrameExporter',
    'capture_frame',
    'frame_filename',
    'capture_filename',
    # Media and session
    'MediaSource',
    'MediaHandlers',
    'MediaSubscription',
    'ReviewSession',
]
