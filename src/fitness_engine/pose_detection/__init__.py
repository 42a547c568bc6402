"""
Pose input contract: keypoint data model and pose sources.
"""

from .keypoints import KEYPOINT_NAMES, Keypoint, Pose
from .base_source import BasePoseSource, JsonlPoseSource

__all__ = [
    'KEYPOINT_NAMES',
    'Keypoint',
    'Pose',
    'BasePoseSource',
    'JsonlPoseSource',
]
