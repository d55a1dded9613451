"""Pose data model and MediaPipe pose detection"""
import logging
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import cv2
import mediapipe as mp
import numpy as np

from .config import MODEL_DIR
from .errors import DetectionError, DetectorInitError

logger = logging.getLogger(__name__)

MODEL_URL = "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_lite/float16/latest/pose_landmarker_lite.task"

# BlazePose landmark order (index -> name)
LANDMARK_NAMES = (
    "nose",
    "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer",
    "left_ear", "right_ear",
    "mouth_left", "mouth_right",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_pinky", "right_pinky",
    "left_index", "right_index",
    "left_thumb", "right_thumb",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
    "left_heel", "right_heel",
    "left_foot_index", "right_foot_index",
)

# Skeleton graph: face, shoulders, arms, torso sides, hips, legs
BONE_CONNECTIONS = (
    ("nose", "left_eye"), ("nose", "right_eye"),
    ("left_eye", "left_ear"), ("right_eye", "right_ear"),
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"),
    ("right_shoulder", "right_elbow"),
    ("left_elbow", "left_wrist"),
    ("right_elbow", "right_wrist"),
    ("left_shoulder", "left_hip"),
    ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_hip", "left_knee"),
    ("right_hip", "right_knee"),
    ("left_knee", "left_ankle"),
    ("right_knee", "right_ankle"),
)


@dataclass(frozen=True)
class Keypoint:
    """A named landmark in detection (native video pixel) space"""
    name: str
    x: float
    y: float
    score: float

    def is_confident(self, threshold: float) -> bool:
        return self.score > threshold


@dataclass
class Pose:
    """Keypoints of one detected body"""
    keypoints: List[Keypoint] = field(default_factory=list)
    score: float = 0.0

    def confident(self, threshold: float) -> List[Keypoint]:
        """Keypoints clearing *threshold*, in detection order"""
        return confident_keypoints(self.keypoints, threshold)

    def keypoint_map(self, threshold: Optional[float] = None) -> Dict[str, Keypoint]:
        keypoints = self.keypoints if threshold is None else self.confident(threshold)
        return build_keypoint_map(keypoints)


KeypointMap = Dict[str, Keypoint]


def confident_keypoints(keypoints: Iterable[Keypoint], threshold: float) -> List[Keypoint]:
    return [kp for kp in keypoints if kp is not None and kp.is_confident(threshold)]


def build_keypoint_map(keypoints: Iterable[Keypoint]) -> KeypointMap:
    """Map joint name -> keypoint for O(1) lookup"""
    return {kp.name: kp for kp in keypoints if kp is not None and kp.name}


def download_pose_model(model_dir: Path = MODEL_DIR) -> str:
    """Download MediaPipe pose landmarker model if not present"""
    model_dir.mkdir(parents=True, exist_ok=True)
    model_path = model_dir / "pose_landmarker_lite.task"

    if not model_path.exists():
        logger.info("Downloading pose detection model to %s", model_path)
        try:
            # Add user agent to avoid 403 errors
            req = urllib.request.Request(MODEL_URL, headers={'User-Agent': 'Mozilla/5.0'})
            with urllib.request.urlopen(req) as response, open(model_path, 'wb') as out_file:
                out_file.write(response.read())
        except Exception as e:
            logger.error("Error downloading model: %s. Download manually from %s and save to %s",
                         e, MODEL_URL, model_path)
            raise

    return str(model_path)


class PoseDetector:
    """Estimate poses using MediaPipe"""

    def __init__(self, model_path: Optional[str] = None, min_confidence: float = 0.5):
        try:
            base_options = mp.tasks.BaseOptions(
                model_asset_path=model_path or download_pose_model()
            )
            options = mp.tasks.vision.PoseLandmarkerOptions(
                base_options=base_options,
                running_mode=mp.tasks.vision.RunningMode.IMAGE,
                num_poses=1,
                min_pose_detection_confidence=min_confidence,
                min_pose_presence_confidence=min_confidence,
                min_tracking_confidence=min_confidence
            )
            self.landmarker = mp.tasks.vision.PoseLandmarker.create_from_options(options)
        except Exception as e:
            raise DetectorInitError(f"Failed to initialize pose detector: {e}") from e

    def estimate_poses(self, frame: np.ndarray, flip_horizontal: bool = False,
                       max_poses: int = 1) -> List[Pose]:
        """Detect poses in a BGR frame. Coordinates are in frame pixels."""
        if frame is None:
            return []

        try:
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
            results = self.landmarker.detect(mp_image)
        except Exception as e:
            raise DetectionError(f"Pose estimation failed: {e}") from e

        if not results or not results.pose_landmarks:
            return []

        h, w = frame.shape[:2]
        poses = []
        for landmarks in results.pose_landmarks[:max_poses]:
            poses.append(landmarks_to_pose(landmarks, w, h, flip_horizontal))
        return poses

    def release(self):
        """Release resources"""
        self.landmarker.close()


def landmarks_to_pose(landmarks, width: int, height: int, flip_horizontal: bool = False) -> Pose:
    """Convert normalized MediaPipe landmarks into a pixel-space Pose.

    Landmark visibility is used as the keypoint score; the pose score is
    the mean keypoint score.
    """
    keypoints = []
    for idx, landmark in enumerate(landmarks):
        if idx >= len(LANDMARK_NAMES):
            break
        x = landmark.x * width
        if flip_horizontal:
            x = width - x
        score = getattr(landmark, 'visibility', None)
        keypoints.append(Keypoint(
            name=LANDMARK_NAMES[idx],
            x=float(x),
            y=float(landmark.y * height),
            score=float(score) if score is not None else 1.0,
        ))

    score = float(np.mean([kp.score for kp in keypoints])) if keypoints else 0.0
    return Pose(keypoints=keypoints, score=score)
