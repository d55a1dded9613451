"""Errors raised by the review core.

Geometry helpers never raise; only media, detector and export paths do.
"""


class ReviewError(Exception):
    """Base class for review errors"""


class MediaLoadError(ReviewError):
    """The video could not be opened or decoded"""


class DetectorInitError(ReviewError):
    """The pose model failed to initialize; playback still works"""


class DetectionError(ReviewError):
    """A single pose estimation call failed"""


class ExportPreconditionError(ReviewError):
    """Export was requested before the frame or overlay was available"""


class ResumePlaybackError(ReviewError):
    """The media refused to resume playback"""
