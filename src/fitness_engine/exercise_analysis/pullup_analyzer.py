from typing import Optional

from ..pose_detection.keypoints import Pose
from .base_analyzer import (AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline,
                            ExercisePhase, register_analyzer)
from .pose_utils import calculate_side_angle, first_available_side


@register_analyzer("pullups")
class PullupAnalyzer(BaseExerciseAnalyzer):
    """
    Elbow angle plus chin height drive the cycle: dead hang (down) -> chin over bar (up) -> dead hang.

    The bar is not detected; the higher of the two wrists stands in for it since the
    hands grip the bar.
    """

    armed_phase = ExercisePhase.DOWN
    engaged_phase = ExercisePhase.UP
    required_keypoint_groups = (
        ("left_shoulder", "right_shoulder"),
        ("left_elbow", "right_elbow"),
        ("left_wrist", "right_wrist"),
        ("nose",),
    )
    default_thresholds = {
        "extended_elbow_angle": 160,
        "extended_tolerance": 10,
        "flexed_elbow_angle": 90,
        "flexed_tolerance": 20,
        "max_swing_px": 40,
    }
    phase_messages = {
        "down": "Full hang! Now pull up",
        "up": "Chin over the bar! Lower with control",
    }

    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        t = self.thresholds
        elbow_angle = calculate_side_angle(pose, ("shoulder", "elbow", "wrist"), min_confidence=self.min_confidence)

        measurements = {"elbow_angle": elbow_angle}
        nose = self.keypoint(pose, "nose")
        wrists = [w for w in (self.keypoint(pose, "left_wrist"), self.keypoint(pose, "right_wrist")) if w]
        chin_above_bar = False
        if nose and wrists:
            bar_y = min(w.y for w in wrists)
            measurements["chin_clearance"] = bar_y - nose.y
            chin_above_bar = nose.y < bar_y

        is_arms_extended = elbow_angle >= t["extended_elbow_angle"] - t["extended_tolerance"]
        is_arms_flexed = elbow_angle <= t["flexed_elbow_angle"] + t["flexed_tolerance"]

        form_issues = []
        if is_arms_flexed and not chin_above_bar:
            form_issues.append("pullup_chin_below_bar")

        torso = first_available_side(pose, ("shoulder", "hip"), self.min_confidence)
        if torso is not None:
            _, (shoulder, hip) = torso
            swing = abs(shoulder.x - hip.x)
            measurements["swing"] = swing
            if swing > t["max_swing_px"]:
                form_issues.append("pullup_body_swing")

        return AnalysisResult(
            primary_value=elbow_angle,
            measurements=measurements,
            is_armed=is_arms_extended,
            is_engaged=chin_above_bar and is_arms_flexed,
            form_issues=form_issues,
        )
