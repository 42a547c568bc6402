from typing import Optional

from ..pose_detection.keypoints import Pose
from .base_analyzer import AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline, register_analyzer
from .pose_utils import calculate_length, first_available_side


@register_analyzer("running")
class RunningAnalyzer(BaseExerciseAnalyzer):
    """
    Running in place. There is no repetition cycle: this analyzer only reports the
    per-frame ankle heights and stride estimate, and the tracker turns the ankle
    history into steps and cadence.
    """

    counts_reps = False
    required_keypoint_groups = (
        ("left_hip", "right_hip"),
        ("left_ankle", "right_ankle"),
    )
    default_thresholds = {
        "history_length": 10,
        "peak_window": 5,
        "min_lift_px": 10,
        "min_step_interval_ms": 200,
        "cadence_intervals": 10,
        "stride_factor": 1.3,
        "max_torso_lean_px": 40,
    }
    phase_messages = {
        "idle": "Get ready to run in place",
        "starting": "Start running in place",
    }

    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        t = self.thresholds
        measurements = {}
        for side in ("left", "right"):
            ankle = self.keypoint(pose, f"{side}_ankle")
            if ankle is not None:
                measurements[f"{side}_ankle_y"] = ankle.y

        stride_length = 0.0
        leg = first_available_side(pose, ("hip", "ankle"), self.min_confidence)
        if leg is not None:
            _, (hip, ankle) = leg
            stride_length = calculate_length(hip, ankle) * t["stride_factor"]
        measurements["stride_length"] = stride_length

        form_issues = []
        torso = first_available_side(pose, ("shoulder", "hip"), self.min_confidence)
        if torso is not None:
            _, (shoulder, hip) = torso
            if abs(shoulder.x - hip.x) > t["max_torso_lean_px"]:
                form_issues.append("running_torso_lean")

        return AnalysisResult(
            primary_value=None,
            measurements=measurements,
            form_issues=form_issues,
        )
