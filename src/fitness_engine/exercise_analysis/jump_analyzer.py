from typing import Optional

from ..pose_detection.keypoints import Pose
from .base_analyzer import (AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline,
                            ExercisePhase, register_analyzer)
from .pose_utils import average_y, horizontal_separation


@register_analyzer("jump")
class JumpAnalyzer(BaseExerciseAnalyzer):
    """
    Vertical jump: grounded (down) -> airborne (up) -> grounded.

    Height is the ankle rise above the calibrated baseline divided by the calibrated
    body height. Without a baseline the height stays 0 and the athlete is never airborne.
    """

    armed_phase = ExercisePhase.DOWN
    engaged_phase = ExercisePhase.UP
    required_keypoint_groups = (("left_ankle", "right_ankle"),)
    default_thresholds = {
        "jump_threshold": 0.1,
        "max_knee_separation_px": 100,
    }
    phase_messages = {
        "down": "Load up and jump!",
        "up": "Nice jump! Land softly",
    }

    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        t = self.thresholds
        # y grows downward, so a smaller ankle y means higher off the ground
        current_height = average_y(pose, ["left_ankle", "right_ankle"], self.min_confidence) or 0.0

        jump_height = 0.0
        is_in_air = False
        if baseline is not None and baseline.is_complete:
            jump_height = (baseline.ankle_y - current_height) / baseline.body_height
            is_in_air = jump_height > t["jump_threshold"]

        form_issues = []
        knee_distance = horizontal_separation(pose, "left_knee", "right_knee", self.min_confidence)
        if knee_distance is not None and knee_distance > t["max_knee_separation_px"]:
            form_issues.append("jump_knees_apart")

        return AnalysisResult(
            primary_value=jump_height * 100,  # percent of body height
            measurements={"current_height": current_height, "jump_height": jump_height},
            is_armed=not is_in_air,
            is_engaged=is_in_air,
            form_issues=form_issues,
        )
