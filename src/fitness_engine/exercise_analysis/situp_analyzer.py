from typing import Optional

from ..pose_detection.keypoints import Pose
from .base_analyzer import (AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline,
                            ExercisePhase, register_analyzer)
from .pose_utils import calculate_angle, calculate_side_angle, first_available_side, horizontal_separation


@register_analyzer("situps")
class SitupAnalyzer(BaseExerciseAnalyzer):
    """Hip angle drives the cycle: torso down -> torso up -> torso down."""

    armed_phase = ExercisePhase.DOWN
    engaged_phase = ExercisePhase.UP
    required_keypoint_groups = (
        ("left_shoulder", "right_shoulder"),
        ("left_hip", "right_hip"),
        ("left_knee", "right_knee"),
    )
    default_thresholds = {
        "down_hip_angle": 160,
        "down_tolerance": 10,
        "up_hip_angle": 45,
        "up_tolerance": 20,
        "max_knee_separation_px": 100,
        "max_knee_angle": 130,
    }
    phase_messages = {
        "down": "Good! Now curl back up",
        "up": "Great crunch! Lower with control",
    }

    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        t = self.thresholds
        hip_angle = calculate_side_angle(pose, ("shoulder", "hip", "knee"), min_confidence=self.min_confidence)

        is_torso_down = hip_angle >= t["down_hip_angle"] - t["down_tolerance"]
        is_torso_up = hip_angle <= t["up_hip_angle"] + t["up_tolerance"]

        measurements = {"hip_angle": hip_angle}
        form_issues = []

        knee_separation = horizontal_separation(pose, "left_knee", "right_knee", self.min_confidence)
        if knee_separation is not None:
            measurements["knee_separation"] = knee_separation
            if knee_separation > t["max_knee_separation_px"]:
                form_issues.append("situp_knees_apart")

        # Knee bend only counts when a full hip-knee-ankle chain is visible
        leg = first_available_side(pose, ("hip", "knee", "ankle"), self.min_confidence)
        if leg is not None:
            _, (hip, knee, ankle) = leg
            knee_angle = calculate_angle(hip, knee, ankle)
            measurements["knee_angle"] = knee_angle
            if knee_angle > t["max_knee_angle"]:
                form_issues.append("situp_legs_straight")

        return AnalysisResult(
            primary_value=hip_angle,
            measurements=measurements,
            is_armed=is_torso_down,
            is_engaged=is_torso_up,
            form_issues=form_issues,
        )
