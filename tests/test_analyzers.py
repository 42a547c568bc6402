# tests/test_analyzers.py

import pytest

from fitness_engine.exercise_analysis import (
    ANALYZER_REGISTRY,
    CalibrationBaseline,
    ExercisePhase,
    JumpAnalyzer,
    PullupAnalyzer,
    PushupAnalyzer,
    RunningAnalyzer,
    SitupAnalyzer,
    SquatAnalyzer,
    create_analyzer,
)
from fitness_engine.exercise_analysis.config_utils import load_tracker_config, merge_config
from fitness_engine.pose_detection.keypoints import Pose

CONFIG = load_tracker_config()


class TestRegistry:
    def test_all_exercises_registered(self):
        assert set(ANALYZER_REGISTRY) == {"squats", "pushups", "situps", "pullups", "jump", "running"}

    def test_create_analyzer_returns_registered_class(self):
        assert isinstance(create_analyzer("squats", CONFIG), SquatAnalyzer)

    def test_unknown_test_type_is_rejected(self):
        with pytest.raises(ValueError, match="Unsupported exercise type"):
            create_analyzer("yoga", CONFIG)

    def test_config_overrides_thresholds(self):
        config = merge_config(CONFIG, {"exercises": {"squats": {"squat_knee_angle": 70}}})
        analyzer = SquatAnalyzer(config)
        assert analyzer.thresholds["squat_knee_angle"] == 70
        assert analyzer.thresholds["standing_knee_angle"] == 160

    def test_missing_section_uses_defaults(self):
        analyzer = PushupAnalyzer({"exercises": {}})
        assert analyzer.thresholds == PushupAnalyzer.default_thresholds


class TestSquatAnalyzer:
    """Knee angle bands and squat form checks"""

    def setup_method(self):
        self.analyzer = SquatAnalyzer(CONFIG)

    def test_standing_is_armed(self, squat_pose):
        result = self.analyzer.analyze(squat_pose(170))
        assert result.primary_value == pytest.approx(170.0)
        assert result.is_armed and not result.is_engaged
        assert result.form_issues == []

    def test_depth_is_engaged(self, squat_pose):
        result = self.analyzer.analyze(squat_pose(85))
        assert result.is_engaged and not result.is_armed
        assert result.form_issues == []

    def test_mid_range_is_neither(self, squat_pose):
        result = self.analyzer.analyze(squat_pose(125))
        assert not result.is_engaged and not result.is_armed

    def test_knees_forward(self):
        pose = Pose.from_points({
            "left_shoulder": (160, 100), "left_hip": (160, 250),
            "left_knee": (150, 320), "left_ankle": (200, 400),
        })
        assert "squat_knees_forward" in self.analyzer.analyze(pose).form_issues

    def test_forward_lean(self):
        pose = Pose.from_points({
            "left_shoulder": (300, 300), "left_hip": (200, 200),
            "left_knee": (200, 300), "left_ankle": (200, 400),
        })
        result = self.analyzer.analyze(pose)
        assert result.measurements["hip_angle"] < 70
        assert "squat_forward_lean" in result.form_issues

    def test_required_keypoints(self, squat_pose):
        assert self.analyzer.has_sufficient_keypoints(squat_pose(170))
        assert not self.analyzer.has_sufficient_keypoints(Pose.from_points({"nose": (0, 0)}))


class TestPushupAnalyzer:
    def setup_method(self):
        self.analyzer = PushupAnalyzer(CONFIG)

    def test_arms_extended_is_armed(self, pushup_pose):
        result = self.analyzer.analyze(pushup_pose(170))
        assert result.is_armed and not result.is_engaged
        assert result.measurements["body_alignment"] == pytest.approx(180.0)
        assert result.form_issues == []

    def test_arms_bent_is_engaged(self, pushup_pose):
        result = self.analyzer.analyze(pushup_pose(80))
        assert result.is_engaged
        assert result.primary_value == pytest.approx(80.0)

    def test_hips_high(self, pushup_pose):
        assert self.analyzer.analyze(pushup_pose(170, hip_y=120)).form_issues == ["pushup_hips_high"]

    def test_hips_sagging(self, pushup_pose):
        assert self.analyzer.analyze(pushup_pose(170, hip_y=280)).form_issues == ["pushup_hips_sagging"]

    def test_alignment_defaults_to_straight_without_left_side(self):
        pose = Pose.from_points({
            "right_shoulder": (100, 200), "right_elbow": (100, 300), "right_wrist": (100, 400),
        })
        result = self.analyzer.analyze(pose)
        assert result.measurements["body_alignment"] == 180.0
        assert result.form_issues == []


class TestSitupAnalyzer:
    def setup_method(self):
        self.analyzer = SitupAnalyzer(CONFIG)

    def test_torso_down_is_armed(self, situp_pose):
        result = self.analyzer.analyze(situp_pose(170))
        assert result.is_armed and not result.is_engaged
        assert result.form_issues == []

    def test_torso_up_is_engaged(self, situp_pose):
        result = self.analyzer.analyze(situp_pose(40))
        assert result.is_engaged and not result.is_armed
        assert result.primary_value == pytest.approx(40.0)

    def test_knees_apart(self, situp_pose):
        result = self.analyzer.analyze(situp_pose(170, right_knee_x=550))
        assert result.measurements["knee_separation"] == pytest.approx(150.0)
        assert "situp_knees_apart" in result.form_issues

    def test_legs_straight(self, situp_pose):
        result = self.analyzer.analyze(situp_pose(170, ankle=(500.0, 240.0)))
        assert "situp_legs_straight" in result.form_issues

    def test_knee_angle_skipped_without_ankle(self, situp_pose):
        result = self.analyzer.analyze(situp_pose(170, ankle=None))
        assert "knee_angle" not in result.measurements
        assert result.form_issues == []


class TestPullupAnalyzer:
    def setup_method(self):
        self.analyzer = PullupAnalyzer(CONFIG)

    def test_dead_hang_is_armed(self, pullup_pose):
        result = self.analyzer.analyze(pullup_pose(flexed=False))
        assert result.is_armed and not result.is_engaged
        assert result.form_issues == []

    def test_chin_over_bar_is_engaged(self, pullup_pose):
        result = self.analyzer.analyze(pullup_pose(flexed=True))
        assert result.is_engaged
        assert result.measurements["chin_clearance"] == pytest.approx(10.0)
        assert result.form_issues == []

    def test_flexed_with_chin_below_bar(self, pullup_pose):
        result = self.analyzer.analyze(pullup_pose(flexed=True, nose_y=120))
        assert not result.is_engaged
        assert result.form_issues == ["pullup_chin_below_bar"]

    def test_body_swing(self, pullup_pose):
        result = self.analyzer.analyze(pullup_pose(flexed=False, hip_x=260))
        assert result.form_issues == ["pullup_body_swing"]

    def test_nose_is_required(self, pullup_pose):
        pose = pullup_pose(flexed=False)
        without_nose = Pose(tuple(kp for kp in pose if kp.name != "nose"))
        assert not self.analyzer.has_sufficient_keypoints(without_nose)


class TestJumpAnalyzer:
    def setup_method(self):
        self.analyzer = JumpAnalyzer(CONFIG)

    def test_phases(self):
        assert self.analyzer.armed_phase == ExercisePhase.DOWN
        assert self.analyzer.engaged_phase == ExercisePhase.UP

    def test_uncalibrated_never_airborne(self, standing_pose):
        result = self.analyzer.analyze(standing_pose(ankle_y=300))
        assert result.measurements["jump_height"] == 0.0
        assert not result.is_engaged
        assert result.is_armed

    def test_height_ratio_against_baseline(self, standing_pose):
        baseline = CalibrationBaseline.from_pose(standing_pose())
        assert baseline.ankle_y == pytest.approx(500.0)
        assert baseline.body_height == pytest.approx(400.0)

        result = self.analyzer.analyze(standing_pose(ankle_y=420), baseline)
        assert result.measurements["jump_height"] == pytest.approx(0.2)
        assert result.primary_value == pytest.approx(20.0)
        assert result.is_engaged

    def test_small_hop_is_not_airborne(self, standing_pose):
        baseline = CalibrationBaseline.from_pose(standing_pose())
        result = self.analyzer.analyze(standing_pose(ankle_y=470), baseline)
        assert not result.is_engaged

    def test_knees_apart(self, standing_pose):
        result = self.analyzer.analyze(standing_pose(knee_gap=150))
        assert result.form_issues == ["jump_knees_apart"]


class TestCalibrationBaseline:
    def test_ankle_height_needs_both_ankles(self):
        pose = Pose.from_points({"nose": (0, 100), "left_ankle": (0, 500)})
        baseline = CalibrationBaseline.from_pose(pose)
        assert baseline.ankle_y is None
        assert baseline.body_height == pytest.approx(400.0)
        assert not baseline.is_complete

    def test_body_height_falls_back_to_right_ankle(self):
        pose = Pose.from_points({"nose": (0, 120), "right_ankle": (0, 520)})
        assert CalibrationBaseline.from_pose(pose).body_height == pytest.approx(400.0)


class TestRunningAnalyzer:
    def setup_method(self):
        self.analyzer = RunningAnalyzer(CONFIG)

    def test_reports_ankles_and_stride(self, standing_pose):
        result = self.analyzer.analyze(standing_pose(left_ankle_y=480))
        assert result.measurements["left_ankle_y"] == 480
        assert result.measurements["right_ankle_y"] == 500
        # Left hip (190, 300) to left ankle (190, 480), times 1.3
        assert result.measurements["stride_length"] == pytest.approx(180 * 1.3)
        assert result.primary_value is None
        assert not result.is_armed and not result.is_engaged

    def test_torso_lean(self, standing_pose):
        assert self.analyzer.analyze(standing_pose(shoulder_x=260)).form_issues == ["running_torso_lean"]

    def test_does_not_count_reps(self):
        assert RunningAnalyzer.counts_reps is False
