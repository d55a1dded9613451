"""Still-frame export"""
import logging
import time
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from .errors import ExportPreconditionError, ReviewError
from .hit_test import SelectedJointDetail
from .surface import OverlaySurface, composite_over, text_size

logger = logging.getLogger(__name__)

INFO_BOX_OFFSET = 20
INFO_BOX_PADDING = 10
INFO_LINE_HEIGHT = 26
INFO_FONT_SCALE = 0.6


def _now_ms() -> int:
    return int(time.time() * 1000)


def frame_filename(now_ms: Optional[int] = None) -> str:
    return f"frame_{now_ms if now_ms is not None else _now_ms()}.png"


def capture_filename(now_ms: Optional[int] = None) -> str:
    return f"athlete-frame-{now_ms if now_ms is not None else _now_ms()}.png"


def encode_png(image: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode('.png', image)
    if not ok:
        raise ReviewError("PNG encoding failed")
    return buffer.tobytes()


def capture_frame(frame: Optional[np.ndarray]) -> bytes:
    """The raw video frame as PNG, without overlay"""
    if frame is None:
        raise ExportPreconditionError("Video frame not available")
    return encode_png(frame)


class FrameExporter:
    """Composite frame + overlay + joint detail at native resolution"""

    def compose(self, frame: Optional[np.ndarray], overlay: Optional[OverlaySurface],
                detail: Optional[SelectedJointDetail] = None) -> np.ndarray:
        if frame is None:
            raise ExportPreconditionError("Video frame not available")
        if overlay is None or overlay.is_empty:
            raise ExportPreconditionError("Overlay surface not initialized")

        image = overlay.composite_onto(frame)
        if detail is not None:
            h, w = image.shape[:2]
            image = self._draw_info_box(image, detail, w / overlay.width, h / overlay.height)
        return image

    def export(self, frame: Optional[np.ndarray], overlay: Optional[OverlaySurface],
               detail: Optional[SelectedJointDetail] = None) -> bytes:
        return encode_png(self.compose(frame, overlay, detail))

    def save(self, directory, frame: Optional[np.ndarray], overlay: Optional[OverlaySurface],
             detail: Optional[SelectedJointDetail] = None,
             now_ms: Optional[int] = None) -> Optional[Path]:
        """Write ``frame_<unix-ms>.png`` into *directory*; None if not ready"""
        try:
            data = self.export(frame, overlay, detail)
        except ExportPreconditionError as e:
            logger.warning("Cannot export frame: %s", e)
            return None

        path = Path(directory) / frame_filename(now_ms)
        path.write_bytes(data)
        logger.info("Exported frame to %s", path)
        return path

    def _draw_info_box(self, image: np.ndarray, detail: SelectedJointDetail,
                       scale_x: float, scale_y: float) -> np.ndarray:
        h, w = image.shape[:2]
        scale = max(1.0, (scale_x + scale_y) / 2)
        font_scale = INFO_FONT_SCALE * scale
        thickness = max(1, round(scale))
        padding = INFO_BOX_PADDING * scale
        line_height = INFO_LINE_HEIGHT * scale

        lines: List[str] = [detail.name.upper()]
        if detail.angle is not None:
            lines.append(f"Angle: {detail.angle} deg")

        box_w = max(text_size(line, font_scale, thickness)[0] for line in lines) + padding * 2
        box_h = line_height * len(lines) + padding

        joint_x = detail.position[0] * scale_x
        joint_y = detail.position[1] * scale_y
        # Keep the box inside the image
        box_x = min(max(0.0, joint_x + INFO_BOX_OFFSET * scale), max(0.0, w - box_w))
        box_y = min(max(0.0, joint_y - box_h / 2), max(0.0, h - box_h))

        layer = OverlaySurface(w, h)
        layer.fill_rect(box_x, box_y, box_w, box_h, (0, 0, 0, 0.8))
        layer.stroke_rect(box_x, box_y, box_w, box_h, (255, 255, 255, 0.5), thickness)
        for idx, line in enumerate(lines):
            layer.text((box_x + padding, box_y + line_height * (idx + 1)),
                       line, '#FFFFFF', font_scale, thickness)
        return composite_over(image, layer.pixels)
