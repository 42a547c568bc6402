from typing import Optional

from ..pose_detection.keypoints import Pose
from .base_analyzer import (AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline,
                            ExercisePhase, register_analyzer)
from .pose_utils import calculate_angle, calculate_side_angle


@register_analyzer("pushups")
class PushupAnalyzer(BaseExerciseAnalyzer):
    """Elbow angle drives the cycle: arms extended (up) -> arms bent (down) -> extended."""

    armed_phase = ExercisePhase.UP
    engaged_phase = ExercisePhase.DOWN
    required_keypoint_groups = (
        ("left_shoulder", "right_shoulder"),
        ("left_elbow", "right_elbow"),
        ("left_wrist", "right_wrist"),
    )
    default_thresholds = {
        "up_elbow_angle": 160,
        "up_tolerance": 15,
        "down_elbow_angle": 90,
        "down_tolerance": 15,
        "min_body_alignment": 160,
        "hip_sag_px": 20,
    }

    def analyze(self, pose: Pose, baseline: Optional[CalibrationBaseline] = None) -> AnalysisResult:
        t = self.thresholds
        elbow_angle = calculate_side_angle(pose, ("shoulder", "elbow", "wrist"), min_confidence=self.min_confidence)

        # Body line is only measured on the left side
        left_shoulder = self.keypoint(pose, "left_shoulder")
        left_hip = self.keypoint(pose, "left_hip")
        left_ankle = self.keypoint(pose, "left_ankle")
        body_alignment = 180.0
        if left_shoulder and left_hip and left_ankle:
            body_alignment = calculate_angle(left_shoulder, left_hip, left_ankle)

        is_down_position = elbow_angle <= t["down_elbow_angle"] + t["down_tolerance"]
        is_up_position = elbow_angle >= t["up_elbow_angle"] - t["up_tolerance"]

        form_issues = []
        if body_alignment < t["min_body_alignment"] and left_hip and left_shoulder:
            if left_hip.y < left_shoulder.y:
                form_issues.append("pushup_hips_high")
            elif left_hip.y > left_shoulder.y + t["hip_sag_px"]:
                form_issues.append("pushup_hips_sagging")

        return AnalysisResult(
            primary_value=elbow_angle,
            measurements={"elbow_angle": elbow_angle, "body_alignment": body_alignment},
            is_armed=is_up_position,
            is_engaged=is_down_position,
            form_issues=form_issues,
        )
