import os

# Headless Qt for CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import cv2
import numpy as np
import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def video_file(tmp_path):
    """3 second 64x48 clip at 10 fps with a moving bright square"""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    for i in range(30):
        frame = np.full((48, 64, 3), 40, dtype=np.uint8)
        cv2.rectangle(frame, (i, 10), (i + 10, 30), (255, 255, 255), -1)
        writer.write(frame)
    writer.release()
    return str(path)
