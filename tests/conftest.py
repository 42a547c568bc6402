# tests/conftest.py
import math

import pytest

from fitness_engine.pose_detection.keypoints import Pose


def point_at(origin, direction_deg, length=100.0):
    """Point at `length` px from origin in the given image-space direction."""
    radians = math.radians(direction_deg)
    return (origin[0] + length * math.cos(radians), origin[1] + length * math.sin(radians))


def build_squat_pose(knee_angle, timestamp=None, confidence=0.9):
    """Left-side standing/squatting figure with the given hip-knee-ankle angle."""
    knee = (200.0, 300.0)
    ankle = (200.0, 400.0)
    # Ankle hangs straight down (90 deg); the hip sits knee_angle away from it
    hip = point_at(knee, 90 + knee_angle)
    shoulder = (hip[0], hip[1] - 150.0)
    return Pose.from_points({
        "nose": (shoulder[0], shoulder[1] - 50.0),
        "left_shoulder": shoulder,
        "left_hip": hip,
        "left_knee": knee,
        "left_ankle": ankle,
    }, confidence=confidence, timestamp=timestamp)


def build_pushup_pose(elbow_angle, hip_y=200.0, timestamp=None):
    """Side-on plank with a straight body line unless hip_y moves the hip off it."""
    shoulder = (100.0, 200.0)
    elbow = (100.0, 300.0)
    # Shoulder is straight above the elbow (-90 deg)
    wrist = point_at(elbow, -90 + elbow_angle)
    return Pose.from_points({
        "nose": (60.0, 200.0),
        "left_shoulder": shoulder,
        "left_elbow": elbow,
        "left_wrist": wrist,
        "left_hip": (250.0, hip_y),
        "left_ankle": (400.0, 200.0),
    }, timestamp=timestamp)


def build_situp_pose(hip_angle, timestamp=None, knee_x=400.0, right_knee_x=None, ankle=(480.0, 400.0)):
    """Bent-knee sit-up figure with the given shoulder-hip-knee angle."""
    hip = (300.0, 400.0)
    knee = (knee_x, 320.0)
    knee_direction = math.degrees(math.atan2(knee[1] - hip[1], knee[0] - hip[0]))
    shoulder = point_at(hip, knee_direction + hip_angle, 150.0)
    points = {
        "nose": point_at(hip, knee_direction + hip_angle, 200.0),
        "left_shoulder": shoulder,
        "left_hip": hip,
        "left_knee": knee,
    }
    if ankle is not None:
        points["left_ankle"] = ankle
    if right_knee_x is not None:
        points["right_knee"] = (right_knee_x, 320.0)
    return Pose.from_points(points, timestamp=timestamp)


def build_pullup_pose(flexed, nose_y=None, hip_x=200.0, timestamp=None):
    """Dead hang (flexed=False) or top of a pull-up under a bar at y=100."""
    if flexed:
        points = {
            "left_wrist": (200.0, 100.0),
            "left_elbow": (240.0, 130.0),
            "left_shoulder": (200.0, 160.0),
            "left_hip": (hip_x, 260.0),
            "nose": (200.0, 90.0 if nose_y is None else nose_y),
        }
    else:
        points = {
            "left_wrist": (200.0, 100.0),
            "left_elbow": (200.0, 150.0),
            "left_shoulder": (200.0, 200.0),
            "left_hip": (hip_x, 300.0),
            "nose": (200.0, 170.0 if nose_y is None else nose_y),
        }
    return Pose.from_points(points, timestamp=timestamp)


def build_standing_pose(ankle_y=500.0, left_ankle_y=None, right_ankle_y=None,
                        knee_gap=40.0, shoulder_x=200.0, timestamp=None):
    """Front-facing standing figure; nose 400 px above the ankles at rest."""
    left_y = ankle_y if left_ankle_y is None else left_ankle_y
    right_y = ankle_y if right_ankle_y is None else right_ankle_y
    offset = ankle_y - 500.0
    return Pose.from_points({
        "nose": (200.0, 100.0 + offset),
        "left_shoulder": (shoulder_x - 10.0, 150.0 + offset),
        "right_shoulder": (shoulder_x + 10.0, 150.0 + offset),
        "left_hip": (190.0, 300.0 + offset),
        "right_hip": (210.0, 300.0 + offset),
        "left_knee": (200.0 - knee_gap / 2, 400.0 + offset),
        "right_knee": (200.0 + knee_gap / 2, 400.0 + offset),
        "left_ankle": (190.0, left_y),
        "right_ankle": (210.0, right_y),
    }, timestamp=timestamp)


@pytest.fixture
def squat_pose():
    return build_squat_pose


@pytest.fixture
def pushup_pose():
    return build_pushup_pose


@pytest.fixture
def situp_pose():
    return build_situp_pose


@pytest.fixture
def pullup_pose():
    return build_pullup_pose


@pytest.fixture
def standing_pose():
    return build_standing_pose
