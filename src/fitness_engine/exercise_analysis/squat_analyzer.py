from typing import Optional

from ..pose_detection.keypoints import Pose
from .base_analyzer import (AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline,
                            ExercisePhase, register_analyzer)
from .pose_utils import calculate_side_angle


@register_analyzer("squats")
class SquatAnalyzer(BaseExerciseAnalyzer):
    """Knee angle drives the cycle: standing (up) -> squat depth (down) -> standing."""

    armed_phase = ExercisePhase.UP
    engaged_phase = ExercisePhase.DOWN
    required_keypoint_groups = (
        ("left_hip", "right_hip"),
        ("left_knee", "right_knee"),
        ("left_ankle", "right_ankle"),
    )
    default_thresholds = {
        "standing_knee_angle": 160,
        "standing_tolerance": 10,
        "squat_knee_angle": 90,
        "squat_tolerance": 15,
        "knee_forward_px": 30,
        "min_hip_angle": 70,
    }
    phase_messages = {"down": "Good depth! Now stand back up"}

    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        t = self.thresholds
        knee_angle = calculate_side_angle(pose, ("hip", "knee", "ankle"), min_confidence=self.min_confidence)
        hip_angle = calculate_side_angle(pose, ("shoulder", "hip", "knee"), min_confidence=self.min_confidence)

        is_squat_position = knee_angle <= t["squat_knee_angle"] + t["squat_tolerance"]
        is_standing_position = knee_angle >= t["standing_knee_angle"] - t["standing_tolerance"]

        form_issues = []
        left_knee = self.keypoint(pose, "left_knee")
        left_ankle = self.keypoint(pose, "left_ankle")
        if left_knee and left_ankle and left_knee.x < left_ankle.x - t["knee_forward_px"]:
            form_issues.append("squat_knees_forward")
        if hip_angle < t["min_hip_angle"]:
            form_issues.append("squat_forward_lean")

        return AnalysisResult(
            primary_value=knee_angle,
            measurements={"knee_angle": knee_angle, "hip_angle": hip_angle},
            is_armed=is_standing_position,
            is_engaged=is_squat_position,
            form_issues=form_issues,
        )
