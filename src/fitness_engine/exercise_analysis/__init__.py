"""
Exercise analysis package: pose geometry and per-exercise analyzers.
"""

from .base_analyzer import (
    ANALYZER_REGISTRY,
    AnalysisResult,
    BaseExerciseAnalyzer,
    CalibrationBaseline,
    ExercisePhase,
    create_analyzer,
    register_analyzer,
)
from .squat_analyzer import SquatAnalyzer
from .pushup_analyzer import PushupAnalyzer
from .situp_analyzer import SitupAnalyzer
from .pullup_analyzer import PullupAnalyzer
from .jump_analyzer import JumpAnalyzer
from .running_analyzer import RunningAnalyzer

__all__ = [
    'ANALYZER_REGISTRY',
    'AnalysisResult',
    'BaseExerciseAnalyzer',
    'CalibrationBaseline',
    'ExercisePhase',
    'create_analyzer',
    'register_analyzer',
    'SquatAnalyzer',
    'PushupAnalyzer',
    'SitupAnalyzer',
    'PullupAnalyzer',
    'JumpAnalyzer',
    'RunningAnalyzer',
]
