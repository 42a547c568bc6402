"""
score_feedback.py - End-of-test feedback sentences for a scored test.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

# Highest tier first: (minimum value, message)
PERFORMANCE_TIERS: Tuple[Tuple[float, str], ...] = (
    (80, "Excellent performance! You are in the top 20%."),
    (60, "Good job! Above average performance."),
    (40, "Average performance. Keep practicing to improve."),
    (20, "Below average. Consider more focused training."),
    (0, "Keep working at it! Consistent practice will help."),
)

FORM_TIERS: Tuple[Tuple[float, str], ...] = (
    (90, "Outstanding form throughout the test!"),
    (75, "Good form overall, with minor areas for improvement."),
    (60, "Focus on maintaining proper form to maximize results."),
    (0, "Form needs significant improvement for safety and effectiveness."),
)

# Tip shown only when the raw score is below the threshold
LOW_SCORE_TIPS: Dict[str, Tuple[float, str]] = {
    "squats": (20, "Try to maintain a steady pace and focus on depth."),
    "pushups": (15, "Start with modified push-ups to build strength."),
    "situps": (25, "Focus on core engagement and controlled movements."),
    "pullups": (3, "Consider assisted pull-ups or negatives to build strength."),
}

TEST_TIPS: Dict[str, Tuple[str, ...]] = {
    "squats": ("Remember: keep your chest up and knees tracking over toes.",),
    "pushups": ("Tip: maintain a straight line from head to heels.",),
    "jump": (
        "Tip: use arm swing to generate more power.",
        "Focus on explosive hip extension for maximum height.",
    ),
    "situps": ("Tip: keep your back flat and avoid pulling on your neck.",),
    "pullups": ("Tip: engage your back muscles and avoid swinging.",),
    "running": (
        "Tip: maintain a consistent cadence for better efficiency.",
        "Focus on quick, light foot contacts with the ground.",
    ),
    "plank": (
        "Keep glutes and core tight; avoid sagging hips.",
        "Think long spine and steady breathing to extend your hold.",
    ),
    "wall_sit": (
        "Press your lower back into the wall and keep knees at 90°.",
        "Distribute weight through heels to stay stable.",
    ),
    "burpees": (
        "Stay smooth through the transition to keep reps consistent.",
        "Land softly and brace your core before each jump.",
    ),
    "lunges": (
        "Keep front knee tracking over the middle of the foot.",
        "Drive through the front heel and stay tall through the torso.",
    ),
    "mountain_climbers": (
        "Maintain a solid plank; minimize hip bounce.",
        "Pull knees toward chest quickly while keeping shoulders stacked.",
    ),
    "broad_jump": (
        "Load hips back and swing arms aggressively for distance.",
        "Stick the landing softly with knees bent and balanced.",
    ),
    "single_leg_balance": (
        "Focus on a fixed point to improve stability.",
        "Engage glutes and keep hips level to reduce wobble.",
    ),
    "lateral_hops": (
        "Stay on the balls of your feet and keep hops quick and light.",
        "Use arms for balance and control side-to-side drift.",
    ),
    "hand_release_pushups": (
        "Lock in a tight plank and avoid low back sag.",
        "Release hands briefly each rep to standardize range of motion.",
    ),
    "shuttle_run": (
        "Turn low and drive off the outside foot to accelerate faster.",
        "Control breathing and pace early to finish strong.",
    ),
}

CONSISTENT_PACE_MESSAGE = "Great consistency in your repetition timing!"
INCONSISTENT_PACE_MESSAGE = "Work on maintaining a more consistent pace."


def _tier_message(value: float, tiers: Sequence[Tuple[float, str]]) -> str:
    for minimum, message in tiers:
        if value >= minimum:
            return message
    return tiers[-1][1]


def tips_for_test(test_type: str, raw_score: float) -> List[str]:
    tips = []
    low_score = LOW_SCORE_TIPS.get(test_type)
    if low_score is not None and raw_score < low_score[0]:
        tips.append(low_score[1])
    tips.extend(TEST_TIPS.get(test_type, ()))
    return tips


def consistency_remark(durations: Sequence[float], min_reps: int = 3) -> Optional[str]:
    """Praise or flag the spread of rep durations; None when there are too few reps or it is unremarkable."""
    if len(durations) < min_reps:
        return None
    durations = np.asarray(durations, dtype=float)
    mean = float(np.mean(durations))
    std_dev = float(np.std(durations))
    if std_dev < mean * 0.15:
        return CONSISTENT_PACE_MESSAGE
    if std_dev > mean * 0.3:
        return INCONSISTENT_PACE_MESSAGE
    return None


def generate_score_feedback(test_type: str, raw_score: float, percentile: float,
                            average_form_score: float, durations: Sequence[float]) -> List[str]:
    """
    Assemble feedback in a fixed order: performance tier, form tier, test tips,
    then an optional consistency remark.
    """
    feedback = [
        _tier_message(percentile, PERFORMANCE_TIERS),
        _tier_message(average_form_score, FORM_TIERS),
    ]
    feedback.extend(tips_for_test(test_type, raw_score))
    remark = consistency_remark(durations)
    if remark:
        feedback.append(remark)
    return feedback
