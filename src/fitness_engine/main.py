import argparse
import json
import logging
import sys

from .exercise_analysis import ANALYZER_REGISTRY
from .pose_detection import JsonlPoseSource
from .scoring import calculate_score, get_grade_description
from .tracker import ExerciseTracker


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fitness Engine - score a recorded pose stream")
    parser.add_argument(
        "--poses",
        type=str,
        required=True,
        help="Path to a JSON-lines file with one pose per line"
    )
    parser.add_argument(
        "--test",
        type=str,
        default="squats",
        choices=sorted(ANALYZER_REGISTRY),
        help="Type of test to track"
    )
    parser.add_argument(
        "--gender",
        type=str,
        default="male",
        choices=["male", "female", "other"],
        help="Athlete gender for normative lookup"
    )
    parser.add_argument(
        "--dob",
        type=str,
        required=True,
        help="Athlete date of birth (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--height-cm",
        type=float,
        default=None,
        help="Athlete height in cm, used to scale jump height and running distance"
    )
    parser.add_argument(
        "--calibrate-frames",
        type=int,
        default=1,
        help="Number of leading frames to skip before tracking; the last of them sets the baseline"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log phase changes and counts"
    )
    return parser


def run(args) -> dict:
    tracker = ExerciseTracker(args.test)
    calibrate_frames = max(0, args.calibrate_frames)
    calibration_pose = None
    frames = 0

    for index, pose in enumerate(JsonlPoseSource(args.poses).poses()):
        frames += 1
        if index < calibrate_frames:
            calibration_pose = pose
            if index == calibrate_frames - 1:
                tracker.calibrate(calibration_pose)
            continue
        tracker.process_pose(pose)

    if calibration_pose is not None and tracker.baseline is None:
        # Stream shorter than the calibration window
        tracker.calibrate(calibration_pose)

    summary = tracker.summarize(args.height_cm)
    score = calculate_score(
        args.test,
        summary.raw_score,
        summary.repetitions,
        args.gender,
        args.dob,
    )
    return {
        "frames": frames,
        "session": summary.to_dict(),
        "score": score.to_dict(),
        "grade_description": get_grade_description(score.grade),
    }


def main(argv=None):
    """Main entry point for the Fitness Engine CLI."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger("ExerciseTracker").setLevel(logging.DEBUG)

    try:
        result = run(args)
    except (OSError, ValueError) as e:
        print(f"Error scoring test: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
