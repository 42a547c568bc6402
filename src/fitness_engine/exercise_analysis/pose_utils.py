"""
pose_utils.py - Shared geometry and keypoint gating utilities.
"""
import numpy as np
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..pose_detection.keypoints import Keypoint, Pose

MIN_CONFIDENCE = 0.3

Point = Union[Keypoint, Sequence[float]]


def _xy(point: Point) -> Tuple[float, float]:
    if isinstance(point, Keypoint):
        return point.x, point.y
    return float(point[0]), float(point[1])


# --- Math & Geometry Utilities ---
def calculate_angle(a: Point, b: Point, c: Point) -> float:
    """
    Calculate the interior angle at point 'b' between vectors 'ba' and 'bc'.

    Point ordering convention:
    - a: First point (e.g., hip for knee angle)
    - b: Vertex (e.g., knee for knee angle)
    - c: Last point (e.g., ankle for knee angle)

    The angle is the absolute difference of the two atan2 directions, reflected
    into the 0-180 range.

    Args:
        a: First point (Keypoint or [x, y])
        b: Vertex point (Keypoint or [x, y])
        c: Last point (Keypoint or [x, y])
    Returns:
        Angle in degrees within [0, 180]
    """
    ax, ay = _xy(a)
    bx, by = _xy(b)
    cx, cy = _xy(c)
    radians = np.arctan2(cy - by, cx - bx) - np.arctan2(ay - by, ax - bx)
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def calculate_length(a: Point, b: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return float(np.linalg.norm(np.array(_xy(a)) - np.array(_xy(b))))


def get_keypoint(pose: Pose, name: str, min_confidence: float = MIN_CONFIDENCE) -> Optional[Keypoint]:
    """
    Return the named keypoint only if its confidence meets the gate.

    A None result means "unknown"; callers must never read it as a zero position.
    """
    keypoint = pose.find(name)
    if keypoint is None or keypoint.confidence < min_confidence:
        return None
    return keypoint


def get_side_keypoints(pose: Pose, side: str, parts: Iterable[str],
                       min_confidence: float = MIN_CONFIDENCE) -> Optional[List[Keypoint]]:
    """Return the side's keypoints in order, or None if any of them fails the gate."""
    keypoints = []
    for part in parts:
        keypoint = get_keypoint(pose, f"{side}_{part}", min_confidence)
        if keypoint is None:
            return None
        keypoints.append(keypoint)
    return keypoints


def first_available_side(pose: Pose, parts: Iterable[str],
                         min_confidence: float = MIN_CONFIDENCE) -> Optional[Tuple[str, List[Keypoint]]]:
    """Prefer the left side, fall back to the right. Returns (side, keypoints) or None."""
    parts = list(parts)
    for side in ("left", "right"):
        keypoints = get_side_keypoints(pose, side, parts, min_confidence)
        if keypoints is not None:
            return side, keypoints
    return None


def calculate_side_angle(pose: Pose, parts: Sequence[str], default: float = 180.0,
                         min_confidence: float = MIN_CONFIDENCE) -> float:
    """Angle at parts[1] for the first side where all three keypoints are usable."""
    found = first_available_side(pose, parts, min_confidence)
    if found is None:
        return default
    _, (a, b, c) = found
    return calculate_angle(a, b, c)


def average_y(pose: Pose, names: Iterable[str], min_confidence: float = MIN_CONFIDENCE) -> Optional[float]:
    """Mean y of the usable keypoints among names, None if none are usable."""
    values = [kp.y for kp in (get_keypoint(pose, n, min_confidence) for n in names) if kp is not None]
    return float(np.mean(values)) if values else None


def horizontal_separation(pose: Pose, left: str, right: str,
                          min_confidence: float = MIN_CONFIDENCE) -> Optional[float]:
    left_kp = get_keypoint(pose, left, min_confidence)
    right_kp = get_keypoint(pose, right, min_confidence)
    if left_kp is None or right_kp is None:
        return None
    return abs(left_kp.x - right_kp.x)


def has_keypoint_groups(pose: Pose, groups: Iterable[Iterable[str]],
                        min_confidence: float = MIN_CONFIDENCE) -> bool:
    """True when every OR-group has at least one keypoint passing the gate."""
    return all(
        any(get_keypoint(pose, name, min_confidence) is not None for name in group)
        for group in groups
    )


def calculate_form_score(form_issues: Sequence[str], penalty_per_issue: int = 15) -> int:
    """Form score 0-100: 15 points off per issue, never negative."""
    return max(0, 100 - len(form_issues) * penalty_per_issue)
