"""Detection space <-> display space mapping"""
from typing import Tuple


class CoordinateMapper:
    """Scale native video pixel coordinates onto the rendered display.

    X and Y are scaled independently; aspect distortion from a stretched
    display is reproduced, not corrected. Scales are derived from the
    current sizes on every call, so a resize takes effect immediately.
    """

    def __init__(self, native_width: float = 0, native_height: float = 0,
                 display_width: float = 0, display_height: float = 0):
        self.native_width = native_width
        self.native_height = native_height
        self.display_width = display_width
        self.display_height = display_height

    def set_native_size(self, width: float, height: float):
        self.native_width = width
        self.native_height = height

    def set_display_size(self, width: float, height: float):
        self.display_width = width
        self.display_height = height

    @property
    def is_ready(self) -> bool:
        return bool(self.native_width and self.native_height
                    and self.display_width and self.display_height)

    @property
    def scale(self) -> Tuple[float, float]:
        """(sx, sy) native -> display, or (1, 1) when degenerate"""
        if not self.is_ready:
            return 1.0, 1.0
        return (self.display_width / self.native_width,
                self.display_height / self.native_height)

    def to_display(self, x: float, y: float) -> Tuple[float, float]:
        if not self.is_ready:
            return x, y
        sx, sy = self.scale
        return x * sx, y * sy

    def to_native(self, x: float, y: float) -> Tuple[float, float]:
        if not self.is_ready:
            return x, y
        sx, sy = self.scale
        return x / sx, y / sy

    def __repr__(self) -> str:
        return (f"CoordinateMapper(native={self.native_width}x{self.native_height}, "
                f"display={self.display_width}x{self.display_height})")
