from typing import Dict, Optional, Sequence

# Form issue code -> spoken/displayed correction
FORM_ISSUE_MESSAGES: Dict[str, str] = {
    # Squat issues
    "squat_knees_forward": "Knees going too far forward",
    "squat_forward_lean": "Keep chest up - too much forward lean",

    # Push-up issues
    "pushup_hips_high": "Hips too high - maintain straight body line",
    "pushup_hips_sagging": "Hips sagging - engage core",

    # Sit-up issues
    "situp_knees_apart": "Keep knees together",
    "situp_legs_straight": "Keep your knees bent and feet flat",

    # Pull-up issues
    "pullup_chin_below_bar": "Pull higher - get your chin above the bar",
    "pullup_body_swing": "Avoid swinging - keep your body still",

    # Jump issues
    "jump_knees_apart": "Keep knees together during jump",

    # Running issues
    "running_torso_lean": "Stay tall - avoid leaning while running",
}

PHASE_MESSAGES: Dict[str, str] = {
    "idle": "Get ready to start",
    "starting": "Starting position detected",
    "down": "Good! Now push back up",
    "up": "Great form! Keep going",
    "completed": "Rep completed!",
}

REPOSITION_MESSAGE = "Position yourself so camera can see your full body"
CALIBRATED_MESSAGE = "Baseline set. Begin exercise!"


class FeedbackGenerator:
    @staticmethod
    def form_issue(code: str) -> str:
        return FORM_ISSUE_MESSAGES.get(code, code.replace("_", " ").capitalize())

    @staticmethod
    def phase_message(phase: str, overrides: Optional[Dict[str, str]] = None) -> str:
        if overrides and phase in overrides:
            return overrides[phase]
        return PHASE_MESSAGES.get(phase, "")

    @staticmethod
    def reposition() -> str:
        return REPOSITION_MESSAGE

    @staticmethod
    def calibrated() -> str:
        return CALIBRATED_MESSAGE

    @classmethod
    def for_frame(cls, form_issues: Sequence[str], phase: str,
                  overrides: Optional[Dict[str, str]] = None) -> str:
        """Most severe issue wins; with none, encourage according to the phase."""
        if form_issues:
            return cls.form_issue(form_issues[0])
        return cls.phase_message(phase, overrides)
