"""
fitness_engine - pose-based exercise tracking and normative fitness scoring.
"""

from .pose_detection import Keypoint, Pose
from .exercise_analysis import ANALYZER_REGISTRY, ExercisePhase
from .tracker import ExerciseState, ExerciseTracker, RepetitionData, SessionSummary
from .scoring import TestScore, calculate_score, get_grade_description, get_test_info

__version__ = "0.1.0"

__all__ = [
    'ANALYZER_REGISTRY',
    'ExercisePhase',
    'ExerciseState',
    'ExerciseTracker',
    'Keypoint',
    'Pose',
    'RepetitionData',
    'SessionSummary',
    'TestScore',
    'calculate_score',
    'get_grade_description',
    'get_test_info',
]
