"""RGBA overlay surface drawn with OpenCV.

Pixels are stored as straight-alpha BGRA ``uint8`` so they composite
directly over OpenCV (BGR) video frames. Colors are given as RGB hex strings
or ``(r, g, b[, a])`` tuples with alpha in ``[0, 1]``.
"""
import math
from typing import List, Sequence, Tuple, Union

import cv2
import numpy as np

SOURCE_OVER = "source-over"
DESTINATION_OUT = "destination-out"

# Sub-pixel precision for cv2 drawing calls
_SHIFT = 4
_ONE = 1 << _SHIFT

FONT = cv2.FONT_HERSHEY_SIMPLEX

Color = Tuple[int, int, int, float]
ColorLike = Union[str, Sequence[float]]


def parse_color(color: ColorLike) -> Color:
    """Normalize '#RRGGBB' or (r, g, b[, a]) to (r, g, b, a)"""
    if isinstance(color, str):
        value = color.lstrip('#')
        if len(value) != 6:
            raise ValueError(f"Unsupported color: {color!r}")
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), 1.0
    if len(color) == 3:
        r, g, b = color
        return int(r), int(g), int(b), 1.0
    r, g, b, a = color
    return int(r), int(g), int(b), float(a)


def _fixed(value: float) -> int:
    return int(round(value * _ONE))


def text_size(text: str, scale: float = 0.5, thickness: int = 1) -> Tuple[int, int]:
    """(width, height) of *text* in pixels"""
    (w, h), baseline = cv2.getTextSize(text, FONT, scale, thickness)
    return w, h + baseline


class OverlaySurface:
    """Transparent drawing layer the size of the display"""

    def __init__(self, width: int = 0, height: int = 0):
        self.width = 0
        self.height = 0
        self.pixels = np.zeros((0, 0, 4), dtype=np.uint8)
        self.composite_operation = SOURCE_OVER
        # Drawn primitives since the last clear
        self.operations: List[tuple] = []
        self.resize(width, height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def resize(self, width: int, height: int):
        """Resize the layer. Existing content is discarded."""
        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = width, height
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.operations = []

    def clear(self):
        self.pixels[:] = 0
        self.operations = []
        self.composite_operation = SOURCE_OVER

    def set_composite_operation(self, operation: str):
        if operation not in (SOURCE_OVER, DESTINATION_OUT):
            raise ValueError(f"Unsupported composite operation: {operation!r}")
        self.composite_operation = operation

    # ── primitives ──

    def fill_rect(self, x: float, y: float, width: float, height: float, color: ColorLike):
        color = parse_color(color)
        self.operations.append(("fill_rect", (x, y, width, height), color, self.composite_operation))
        x0 = max(0, math.floor(x))
        y0 = max(0, math.floor(y))
        x1 = min(self.width, math.ceil(x + width))
        y1 = min(self.height, math.ceil(y + height))
        if x1 <= x0 or y1 <= y0:
            return
        mask = self._mask()
        mask[y0:y1, x0:x1] = 255
        self._composite(mask, color)

    def stroke_rect(self, x: float, y: float, width: float, height: float,
                    color: ColorLike, thickness: int = 1):
        color = parse_color(color)
        self.operations.append(("stroke_rect", (x, y, width, height), color, self.composite_operation))
        mask = self._mask()
        cv2.rectangle(mask, (int(round(x)), int(round(y))),
                      (int(round(x + width)), int(round(y + height))), 255, thickness)
        self._composite(mask, color)

    def line(self, start: Tuple[float, float], end: Tuple[float, float],
             color: ColorLike, width: int = 1):
        color = parse_color(color)
        self.operations.append(("line", (start, end), color, self.composite_operation))
        mask = self._mask()
        cv2.line(mask, (_fixed(start[0]), _fixed(start[1])), (_fixed(end[0]), _fixed(end[1])),
                 255, width, cv2.LINE_AA, _SHIFT)
        self._composite(mask, color)

    def circle(self, center: Tuple[float, float], radius: float, color: ColorLike,
               thickness: int = -1):
        """Filled circle when *thickness* is negative, outline otherwise"""
        color = parse_color(color)
        self.operations.append(("circle", (center, radius, thickness), color, self.composite_operation))
        mask = self._mask()
        cv2.circle(mask, (_fixed(center[0]), _fixed(center[1])), _fixed(radius),
                   255, thickness, cv2.LINE_AA, _SHIFT)
        self._composite(mask, color)

    def text(self, origin: Tuple[float, float], text: str, color: ColorLike,
             scale: float = 0.5, thickness: int = 1):
        """Draw *text* with its baseline starting at *origin*"""
        color = parse_color(color)
        self.operations.append(("text", (origin, text), color, self.composite_operation))
        mask = self._mask()
        cv2.putText(mask, text, (int(round(origin[0])), int(round(origin[1]))),
                    FONT, scale, 255, thickness, cv2.LINE_AA)
        self._composite(mask, color)

    # ── readback ──

    def rgba_at(self, x: float, y: float) -> Tuple[int, int, int, int]:
        """(r, g, b, a) of the pixel containing (x, y); alpha in 0-255"""
        b, g, r, a = self.pixels[int(y), int(x)]
        return int(r), int(g), int(b), int(a)

    def alpha_at(self, x: float, y: float) -> float:
        return self.pixels[int(y), int(x), 3] / 255.0

    def scaled(self, width: int, height: int) -> np.ndarray:
        """Layer pixels resized to (width, height)"""
        if (width, height) == (self.width, self.height):
            return self.pixels.copy()
        # Resample premultiplied so transparent pixels don't bleed black into edges
        layer = self.pixels.astype(np.float32)
        layer[..., :3] *= layer[..., 3:4] / 255.0
        layer = cv2.resize(layer, (int(width), int(height)), interpolation=cv2.INTER_LINEAR)
        alpha = layer[..., 3:4] / 255.0
        layer[..., :3] /= np.maximum(alpha, 1e-6)
        return np.clip(np.round(layer), 0, 255).astype(np.uint8)

    def composite_onto(self, frame: np.ndarray) -> np.ndarray:
        """Blend this layer over a BGR frame, scaling it to the frame size"""
        h, w = frame.shape[:2]
        if self.is_empty:
            return frame.copy()
        return composite_over(frame, self.scaled(w, h))

    # ── internals ──

    def _mask(self) -> np.ndarray:
        return np.zeros((self.height, self.width), dtype=np.uint8)

    def _composite(self, mask: np.ndarray, color: Color):
        rows = np.flatnonzero(mask.any(axis=1))
        if rows.size == 0:
            return
        cols = np.flatnonzero(mask.any(axis=0))
        region = (slice(rows[0], rows[-1] + 1), slice(cols[0], cols[-1] + 1))

        r, g, b, a = color
        src_a = mask[region].astype(np.float32) / 255.0 * a
        dst = self.pixels[region].astype(np.float32)
        dst_a = dst[..., 3] / 255.0

        patch = self.pixels[region]
        if self.composite_operation == DESTINATION_OUT:
            out_a = dst_a * (1.0 - src_a)
            patch[..., 3] = np.clip(np.round(out_a * 255), 0, 255).astype(np.uint8)
            return

        out_a = src_a + dst_a * (1.0 - src_a)
        src_bgr = np.array([b, g, r], dtype=np.float32)
        weighted = (src_bgr * src_a[..., None]
                    + dst[..., :3] * (dst_a * (1.0 - src_a))[..., None])
        out_bgr = weighted / np.maximum(out_a, 1e-6)[..., None]

        patch[..., :3] = np.clip(np.round(out_bgr), 0, 255).astype(np.uint8)
        patch[..., 3] = np.clip(np.round(out_a * 255), 0, 255).astype(np.uint8)


def composite_over(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Alpha-blend a BGRA overlay onto a same-sized BGR frame"""
    alpha = overlay[..., 3:4].astype(np.float32) / 255.0
    blended = (frame[..., :3].astype(np.float32) * (1.0 - alpha)
               + overlay[..., :3].astype(np.float32) * alpha)
    return np.clip(np.round(blended), 0, 255).astype(np.uint8)
