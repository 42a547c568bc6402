import logging
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .exercise_analysis import (AnalysisResult, BaseExerciseAnalyzer, CalibrationBaseline,
                                ExercisePhase, create_analyzer)
from .exercise_analysis.config_utils import load_tracker_config, merge_config
from .exercise_analysis.pose_utils import calculate_form_score
from .feedback.messages import FeedbackGenerator
from .pose_detection.keypoints import Pose
from .scoring.scoring_engine import calculate_average_form_score

_TRACKER_CONFIG = load_tracker_config()

# --- Logger Setup ---
logger = logging.getLogger("ExerciseTracker")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


@dataclass(frozen=True)
class RepetitionData:
    """One completed repetition. Times are in milliseconds."""
    start_time: float
    end_time: float
    duration: float
    form_score: int
    issues: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["issues"] = list(self.issues)
        return data


@dataclass
class ExerciseState:
    """Per-frame snapshot handed to the UI. A new object is returned for every frame."""
    phase: ExercisePhase
    rep_count: int
    form_score: int
    feedback: str
    current_angle: Optional[float] = None
    cadence: Optional[float] = None  # steps/min, running only

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


@dataclass(frozen=True)
class RunningState:
    left_history: Tuple[float, ...] = ()
    right_history: Tuple[float, ...] = ()
    step_times: Tuple[float, ...] = ()
    total_stride_px: float = 0.0
    cadence: Optional[float] = None


@dataclass(frozen=True)
class TrackerState:
    """Everything a session accumulates. Updated only through the advance_* functions."""
    phase: ExercisePhase = ExercisePhase.IDLE
    rep_count: int = 0
    form_score: int = 100
    current_angle: Optional[float] = None
    feedback: str = FeedbackGenerator.phase_message("idle")
    rep_start_time: float = 0.0
    last_phase_change_time: Optional[float] = None
    repetitions: Tuple[RepetitionData, ...] = ()
    best_jump_height: float = 0.0
    running: RunningState = field(default_factory=RunningState)

    def snapshot(self) -> ExerciseState:
        return ExerciseState(
            phase=self.phase,
            rep_count=self.rep_count,
            form_score=self.form_score,
            feedback=self.feedback,
            current_angle=self.current_angle,
            cadence=self.running.cadence,
        )


@dataclass
class SessionSummary:
    """End-of-session hand-off for the persistence layer."""
    test_type: str
    rep_count: int
    raw_score: float
    repetitions: List[RepetitionData]
    average_form_score: float
    cadence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_type": self.test_type,
            "rep_count": self.rep_count,
            "raw_score": self.raw_score,
            "repetitions": [rep.to_dict() for rep in self.repetitions],
            "average_form_score": self.average_form_score,
            "cadence": self.cadence,
        }


# --- Pure transition functions ---
def can_change_phase(state: TrackerState, now: float, min_phase_duration_ms: float) -> bool:
    if state.last_phase_change_time is None:
        return True
    return now - state.last_phase_change_time >= min_phase_duration_ms


def advance_cycle(state: TrackerState, analysis: AnalysisResult, now: float,
                  analyzer: BaseExerciseAnalyzer, min_phase_duration_ms: float) -> TrackerState:
    """
    One frame of the armed -> engaged -> armed repetition cycle.

    The rep is counted on the return to the armed (reference) position, not at the
    extreme. Any phase change is held back until min_phase_duration_ms has passed
    since the previous one.

    Args:
        state: Session state before this frame
        analysis: This frame's analyzer output
        now: Frame time in ms
        analyzer: Supplies the armed/engaged phases and phase messages
        min_phase_duration_ms: Debounce between phase changes

    Returns:
        New TrackerState
    """
    armed, engaged = analyzer.armed_phase, analyzer.engaged_phase
    allowed = can_change_phase(state, now, min_phase_duration_ms)
    updates: Dict[str, Any] = {}

    if state.phase in (ExercisePhase.IDLE, ExercisePhase.STARTING):
        if analysis.is_armed and allowed:
            updates.update(phase=armed, rep_start_time=now, last_phase_change_time=now)
    elif state.phase == armed:
        if analysis.is_engaged and allowed:
            updates.update(phase=engaged, last_phase_change_time=now)
    elif state.phase == engaged:
        if analysis.is_armed and allowed:
            rep = RepetitionData(
                start_time=state.rep_start_time,
                end_time=now,
                duration=now - state.rep_start_time,
                form_score=calculate_form_score(analysis.form_issues),
                issues=tuple(analysis.form_issues),
            )
            updates.update(
                phase=armed,
                rep_count=state.rep_count + 1,
                repetitions=state.repetitions + (rep,),
                rep_start_time=now,
                last_phase_change_time=now,
            )

    phase = updates.get("phase", state.phase)
    # Only heights reached while airborne count towards the best jump
    jump_height = analysis.measurements.get("jump_height", 0.0) if phase == engaged else 0.0
    return replace(
        state,
        current_angle=analysis.primary_value,
        form_score=calculate_form_score(analysis.form_issues),
        feedback=FeedbackGenerator.for_frame(analysis.form_issues, phase.value, analyzer.phase_messages),
        best_jump_height=max(state.best_jump_height, jump_height),
        **updates,
    )


def _is_lift_peak(history: Tuple[float, ...], window: int, min_lift: float) -> bool:
    if len(history) < window:
        return False
    samples = history[-window:]
    middle = samples[window // 2]
    # Smaller y is higher in image coordinates
    return middle <= samples[0] - min_lift and middle <= samples[-1] - min_lift


def advance_running(state: TrackerState, analysis: AnalysisResult, now: float,
                    thresholds: Dict[str, float], phase_messages: Optional[Dict[str, str]] = None) -> TrackerState:
    """
    One frame of step detection for running in place.

    Each ankle keeps a rolling height history; a step is a lift peak in the latest
    window, at least min_step_interval_ms after the previous step on either side.
    Cadence averages the most recent inter-step intervals.
    """
    history_length = int(thresholds["history_length"])
    window = int(thresholds["peak_window"])
    running = state.running

    histories = {"left": running.left_history, "right": running.right_history}
    updated_sides = []
    for side in histories:
        ankle_y = analysis.measurements.get(f"{side}_ankle_y")
        if ankle_y is not None:
            histories[side] = (histories[side] + (ankle_y,))[-history_length:]
            updated_sides.append(side)

    # A side without a new sample this frame keeps its old window and must not re-fire
    peak = any(_is_lift_peak(histories[side], window, thresholds["min_lift_px"]) for side in updated_sides)
    last_step = running.step_times[-1] if running.step_times else None
    is_step = peak and (last_step is None or now - last_step >= thresholds["min_step_interval_ms"])

    step_times = running.step_times
    total_stride = running.total_stride_px
    cadence = running.cadence
    rep_count = state.rep_count
    if is_step:
        # Only the window used for cadence is kept; rep_count holds the total
        step_times = (step_times + (now,))[-(int(thresholds["cadence_intervals"]) + 1):]
        total_stride += analysis.measurements.get("stride_length", 0.0)
        rep_count += 1
        intervals = np.diff(step_times)
        if len(intervals) > 0 and np.mean(intervals) > 0:
            cadence = float(60000.0 / np.mean(intervals))

    if analysis.form_issues:
        feedback = FeedbackGenerator.form_issue(analysis.form_issues[0])
    elif cadence is not None:
        feedback = f"Keep it up! {cadence:.0f} steps/min"
    else:
        feedback = FeedbackGenerator.phase_message(state.phase.value, phase_messages)

    return replace(
        state,
        rep_count=rep_count,
        form_score=calculate_form_score(analysis.form_issues),
        feedback=feedback,
        running=RunningState(
            left_history=histories["left"],
            right_history=histories["right"],
            step_times=step_times,
            total_stride_px=total_stride,
            cadence=cadence,
        ),
    )


def apply_calibration(state: TrackerState, analysis: Optional[AnalysisResult], now: float,
                      analyzer: BaseExerciseAnalyzer) -> TrackerState:
    """
    Enter STARTING, or go straight to the armed position if the athlete is already in it.

    Only an idle or starting session changes phase; mid-session calibration just
    refreshes the baseline and leaves the rep in progress alone.
    """
    if state.phase not in (ExercisePhase.IDLE, ExercisePhase.STARTING):
        return replace(state, feedback=FeedbackGenerator.calibrated())
    updates: Dict[str, Any] = {"phase": ExercisePhase.STARTING, "feedback": FeedbackGenerator.calibrated()}
    if analyzer.counts_reps and analysis is not None and analysis.is_armed:
        updates.update(phase=analyzer.armed_phase, rep_start_time=now, last_phase_change_time=now)
    return replace(state, **updates)


class ExerciseTracker:
    """Per-session repetition tracker. One instance belongs to one test session."""

    def __init__(self, test_type: str, config: Optional[Dict[str, Any]] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize the tracker.

        Args:
            test_type: Exercise to track (squats, pushups, situps, pullups, jump, running)
            config: Overrides merged over tracker_config.json
            clock: Returns the current time in ms; defaults to the wall clock
        """
        self.test_type = test_type
        self.config = merge_config(_TRACKER_CONFIG, config)
        self.analyzer = create_analyzer(test_type, self.config)
        self.min_phase_duration_ms = self.config.get("min_phase_duration_ms", 200)
        self._clock = clock or (lambda: time.time() * 1000.0)
        self._baseline: Optional[CalibrationBaseline] = None
        self._state = TrackerState()

    def _now(self, pose: Pose, now: Optional[float]) -> float:
        if now is not None:
            return now
        if pose.timestamp is not None:
            return pose.timestamp
        return self._clock()

    @property
    def baseline(self) -> Optional[CalibrationBaseline]:
        return self._baseline

    @property
    def state(self) -> TrackerState:
        return self._state

    def reset(self) -> None:
        """Reset tracker for a new test."""
        self._baseline = None
        self._state = TrackerState()
        logger.debug(f"[{self.test_type}] Tracker reset")

    def calibrate(self, pose: Pose, now: Optional[float] = None) -> ExerciseState:
        """Set baseline measurements from a standing pose."""
        now = self._now(pose, now)
        self._baseline = CalibrationBaseline.from_pose(pose, self.analyzer.min_confidence)
        if not self._baseline.is_complete and self.test_type in ("jump", "running"):
            logger.warning(f"[{self.test_type}] Incomplete calibration baseline: {self._baseline}")
        analysis = None
        if self.analyzer.has_sufficient_keypoints(pose):
            analysis = self.analyzer.analyze(pose, self._baseline)
        self._state = apply_calibration(self._state, analysis, now, self.analyzer)
        logger.info(f"[{self.test_type}] Calibrated, phase={self._state.phase.value}")
        return self._state.snapshot()

    def process_pose(self, pose: Pose, now: Optional[float] = None) -> ExerciseState:
        """
        Process a new pose frame and update state.

        Args:
            pose: Current frame
            now: Frame time in ms; falls back to pose.timestamp, then the clock

        Returns:
            ExerciseState snapshot for this frame
        """
        if not self.analyzer.has_sufficient_keypoints(pose):
            self._state = replace(self._state, feedback=FeedbackGenerator.reposition())
            return self._state.snapshot()

        now = self._now(pose, now)
        analysis = self.analyzer.analyze(pose, self._baseline)
        previous = self._state
        if self.analyzer.counts_reps:
            self._state = advance_cycle(previous, analysis, now, self.analyzer, self.min_phase_duration_ms)
        else:
            self._state = advance_running(previous, analysis, now, self.analyzer.thresholds,
                                          self.analyzer.phase_messages)

        if self._state.phase != previous.phase:
            logger.debug(f"[{self.test_type}] Phase {previous.phase.value} -> {self._state.phase.value} at {now:.0f}ms")
        if self._state.rep_count > previous.rep_count:
            logger.debug(f"[{self.test_type}] Count {self._state.rep_count} at {now:.0f}ms")
        return self._state.snapshot()

    def get_repetitions(self) -> List[RepetitionData]:
        return list(self._state.repetitions)

    def get_state(self) -> ExerciseState:
        return self._state.snapshot()

    def raw_score(self, athlete_height_cm: Optional[float] = None) -> float:
        """
        Aggregate score for this session in the test's metric.

        Rep tests report the rep count. Jump reports the best height in cm and running
        the estimated distance in metres, both scaled from body-height units by the
        athlete's height.
        """
        height_cm = athlete_height_cm or self.config.get("default_athlete_height_cm", 170)
        if self.test_type == "jump":
            return round(self._state.best_jump_height * height_cm, 1)
        if self.test_type == "running":
            if self._baseline is None or not self._baseline.body_height:
                return 0.0
            metres_per_px = (height_cm / 100.0) / self._baseline.body_height
            return round(self._state.running.total_stride_px * metres_per_px, 1)
        return float(self._state.rep_count)

    def summarize(self, athlete_height_cm: Optional[float] = None) -> SessionSummary:
        repetitions = self.get_repetitions()
        return SessionSummary(
            test_type=self.test_type,
            rep_count=self._state.rep_count,
            raw_score=self.raw_score(athlete_height_cm),
            repetitions=repetitions,
            average_form_score=calculate_average_form_score(repetitions),
            cadence=self._state.running.cadence,
        )
