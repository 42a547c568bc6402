import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..pose_detection.keypoints import Pose
from .pose_utils import MIN_CONFIDENCE, average_y, get_keypoint, has_keypoint_groups

logger = logging.getLogger("ExerciseAnalyzer")


class ExercisePhase(Enum):
    """Stage of a repetition cycle. What "down" and "up" mean depends on the exercise."""
    IDLE = "idle"
    STARTING = "starting"
    DOWN = "down"
    UP = "up"
    COMPLETED = "completed"


@dataclass
class AnalysisResult:
    """Geometric reading of one pose for one exercise."""
    primary_value: Optional[float]  # reported to the UI as current_angle
    measurements: Dict[str, float] = field(default_factory=dict)
    is_armed: bool = False  # reference position, e.g. standing for squats
    is_engaged: bool = False  # opposite extreme, e.g. squat depth
    form_issues: List[str] = field(default_factory=list)  # issue codes, most severe first


@dataclass(frozen=True)
class CalibrationBaseline:
    """Reference measurements captured from a still pose before the test."""
    ankle_y: Optional[float] = None
    body_height: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.ankle_y is not None and bool(self.body_height)

    @classmethod
    def from_pose(cls, pose: Pose, min_confidence: float = MIN_CONFIDENCE) -> "CalibrationBaseline":
        left_ankle = get_keypoint(pose, "left_ankle", min_confidence)
        right_ankle = get_keypoint(pose, "right_ankle", min_confidence)
        nose = get_keypoint(pose, "nose", min_confidence)

        ankle_y = None
        if left_ankle and right_ankle:
            ankle_y = average_y(pose, ["left_ankle", "right_ankle"], min_confidence)

        body_height = None
        reference_ankle = left_ankle or right_ankle
        if nose and reference_ankle:
            body_height = abs(nose.y - reference_ankle.y)

        return cls(ankle_y=ankle_y, body_height=body_height)


# --- Analyzer Registry ---
ANALYZER_REGISTRY: Dict[str, type] = {}


def register_analyzer(test_type: str):
    def decorator(cls):
        ANALYZER_REGISTRY[test_type] = cls
        cls.test_type = test_type
        return cls
    return decorator


def create_analyzer(test_type: str, config: Dict[str, Any]) -> "BaseExerciseAnalyzer":
    """Instantiate the registered analyzer for a test type."""
    try:
        analyzer_cls = ANALYZER_REGISTRY[test_type]
    except KeyError:
        raise ValueError(f"Unsupported exercise type: {test_type}") from None
    return analyzer_cls(config)


class BaseExerciseAnalyzer(ABC):
    """Base class for per-exercise pose analysis."""

    test_type: str = ""
    # Which phase the reference ("armed") and extreme ("engaged") positions map to
    armed_phase: ExercisePhase = ExercisePhase.UP
    engaged_phase: ExercisePhase = ExercisePhase.DOWN
    # Each inner list is an OR-group: one usable keypoint per group is enough
    required_keypoint_groups: Sequence[Sequence[str]] = ()
    default_thresholds: Dict[str, float] = {}
    phase_messages: Dict[str, str] = {}
    counts_reps: bool = True

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the analyzer with configuration parameters.

        Args:
            config: Tracker configuration; thresholds are read from config["exercises"][test_type]
        """
        config = config or {}
        self.min_confidence = config.get("min_confidence", MIN_CONFIDENCE)
        self.thresholds = self._load_thresholds(config)

    def _load_thresholds(self, config: Dict[str, Any]) -> Dict[str, float]:
        thresholds = dict(self.default_thresholds)
        exercise_config = config.get("exercises", {}).get(self.test_type)
        if exercise_config is None:
            logger.warning(f"No thresholds configured for {self.test_type}, using defaults")
            return thresholds
        thresholds.update(exercise_config)
        return thresholds

    def has_sufficient_keypoints(self, pose: Pose) -> bool:
        return has_keypoint_groups(pose, self.required_keypoint_groups, self.min_confidence)

    def keypoint(self, pose: Pose, name: str):
        return get_keypoint(pose, name, self.min_confidence)

    @abstractmethod
    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        """
        Analyze a single pose.

        Args:
            pose: Current frame's keypoints
            baseline: Calibration baseline, only used by height-based exercises

        Returns:
            AnalysisResult with measurements, position predicates and form issues
        """
        pass
