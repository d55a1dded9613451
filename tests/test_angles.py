from helpers import make_pose

from posereview.core.angles import joint_angle, joint_note, joint_side


def test_right_angle_at_elbow():
    pose = make_pose({
        'left_shoulder': (100, 0),
        'left_elbow': (100, 100),
        'left_wrist': (200, 100),
    })
    assert joint_angle(pose.keypoint_map(), 'left_elbow') == 90


def test_straight_knee():
    pose = make_pose({
        'right_hip': (50, 0),
        'right_knee': (50, 100),
        'right_ankle': (50, 200),
    })
    assert joint_angle(pose.keypoint_map(), 'right_knee') == 180


def test_angle_is_not_folded():
    # atan2 difference wraps past 180 for this configuration
    pose = make_pose({
        'left_hip': (0, -100),
        'left_knee': (0, 0),
        'left_ankle': (-100, 10),
    })
    angle = joint_angle(pose.keypoint_map(), 'left_knee')
    assert angle > 180


def test_no_angle_for_other_joints():
    pose = make_pose({
        'left_shoulder': (0, 0),
        'left_hip': (0, 100),
        'left_knee': (0, 200),
    })
    assert joint_angle(pose.keypoint_map(), 'left_hip') is None
    assert joint_angle(pose.keypoint_map(), '') is None


def test_missing_endpoint_gives_none():
    pose = make_pose({
        'left_shoulder': (100, 0),
        'left_elbow': (100, 100),
        'left_wrist': (200, 100, 0.1),
    })
    assert joint_angle(pose.keypoint_map(0.3), 'left_elbow') is None


def test_side_and_note():
    assert joint_side('left_knee') == 'Left'
    assert joint_side('right_wrist') == 'Right'
    assert joint_side('nose') is None
    assert joint_note('right_knee') == 'Check knee alignment'
    assert joint_note('left_ankle') == 'Monitor foot strike'
    assert joint_note('nose') is None
