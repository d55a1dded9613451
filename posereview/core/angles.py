"""Joint angle geometry"""
import math
from typing import Dict, Optional

from .pose import Keypoint

# joint -> (proximal, vertex, distal)
ANGLE_JOINTS = {
    'elbow': ('shoulder', 'elbow', 'wrist'),
    'knee': ('hip', 'knee', 'ankle'),
}

JOINT_NOTES = {
    'left_knee': 'Check knee alignment',
    'right_knee': 'Check knee alignment',
    'left_ankle': 'Monitor foot strike',
    'right_ankle': 'Monitor foot strike',
    'left_hip': 'Check hip rotation',
    'right_hip': 'Check hip rotation',
    'left_shoulder': 'Check shoulder level',
    'right_shoulder': 'Check shoulder level',
    'left_elbow': 'Check arm swing',
    'right_elbow': 'Check arm swing',
}


def joint_angle(keypoint_map: Dict[str, Keypoint], joint_name: str) -> Optional[int]:
    """Angle in degrees at an elbow or knee, None when no angle applies.

    The value is |atan2(distal - vertex) - atan2(proximal - vertex)| and is
    not folded into [0, 180].
    """
    if not joint_name:
        return None

    for joint, (a_name, b_name, c_name) in ANGLE_JOINTS.items():
        if joint in joint_name:
            break
    else:
        return None

    side = 'left' if 'left' in joint_name else 'right'
    a = keypoint_map.get(f"{side}_{a_name}")
    b = keypoint_map.get(f"{side}_{b_name}")
    c = keypoint_map.get(f"{side}_{c_name}")
    if a is None or b is None or c is None:
        return None

    radians = math.atan2(c.y - b.y, c.x - b.x) - math.atan2(a.y - b.y, a.x - b.x)
    return abs(round(math.degrees(radians)))


def joint_side(joint_name: str) -> Optional[str]:
    if 'left' in joint_name:
        return 'Left'
    if 'right' in joint_name:
        return 'Right'
    return None


def joint_note(joint_name: str) -> Optional[str]:
    return JOINT_NOTES.get(joint_name)
