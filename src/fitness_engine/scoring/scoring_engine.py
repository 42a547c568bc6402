"""
scoring_engine.py - Turns a raw test result into a percentile, grade and feedback
using age/gender normative tables.
"""
import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..exercise_analysis.config_utils import load_normative_data, load_test_catalog
from ..feedback.score_feedback import generate_score_feedback

# --- Logger Setup ---
logger = logging.getLogger("ScoringEngine")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

MIN_AGE = 18
MAX_AGE = 55
DEFAULT_PERCENTILE = 50
MAX_PERCENTILE = 99
PERFORMANCE_WEIGHT = 0.8
FORM_WEIGHT = 0.2

# Highest grade first: (minimum adjusted percentile, grade)
GRADE_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (80, "A"),
    (60, "B"),
    (40, "C"),
    (20, "D"),
)

GRADE_DESCRIPTIONS = {
    "A": "Excellent - Top 20%",
    "B": "Good - Above Average",
    "C": "Average - Middle Range",
    "D": "Below Average - Needs Improvement",
    "F": "Poor - Significant Improvement Needed",
}


@dataclass(frozen=True)
class Percentiles:
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float


@dataclass(frozen=True)
class NormativeData:
    """Reference percentile band for one test, gender and age range."""
    test_type: str
    gender: str
    age_min: int
    age_max: int
    percentiles: Percentiles

    def matches(self, test_type: str, gender: str, age: int) -> bool:
        return (
            self.test_type == test_type
            and self.gender == gender
            and self.age_min <= age <= self.age_max
        )


@dataclass
class TestScore:
    raw_score: float
    standardized_score: int
    percentile: int
    grade: str
    feedback: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class NormativeTable:
    """Immutable, versioned set of NormativeData rows."""

    def __init__(self, rows: Sequence[NormativeData], version: str = "unversioned", updated: Optional[str] = None):
        self.rows: Tuple[NormativeData, ...] = tuple(rows)
        self.version = version
        self.updated = updated

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormativeTable":
        rows = [
            NormativeData(
                test_type=row["test_type"],
                gender=row["gender"],
                age_min=int(row["age_min"]),
                age_max=int(row["age_max"]),
                percentiles=Percentiles(**row["percentiles"]),
            )
            for row in data.get("rows", [])
        ]
        return cls(rows, version=str(data.get("version", "unversioned")), updated=data.get("updated"))

    @classmethod
    def load(cls, data_path: str = None) -> "NormativeTable":
        return cls.from_dict(load_normative_data(data_path))

    def lookup(self, test_type: str, gender: str, age: int) -> Optional[NormativeData]:
        """Find the band for this athlete. 'other' uses the male norms."""
        gender = (gender or "").lower()
        gender_to_use = "male" if gender == "other" else gender
        for row in self.rows:
            if row.matches(test_type, gender_to_use, age):
                return row
        return None

    def test_types(self) -> List[str]:
        return sorted({row.test_type for row in self.rows})


@lru_cache(maxsize=1)
def get_normative_table() -> NormativeTable:
    table = NormativeTable.load()
    logger.debug(f"Loaded normative data version {table.version} ({len(table.rows)} rows)")
    return table


@lru_cache(maxsize=1)
def _test_catalog() -> Dict[str, Any]:
    return load_test_catalog()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_age(date_of_birth: Union[date, datetime, str], today: Optional[date] = None) -> int:
    """Whole years, minus one if this year's birthday has not happened yet."""
    if isinstance(date_of_birth, str):
        date_of_birth = date.fromisoformat(date_of_birth[:10])
    elif isinstance(date_of_birth, datetime):
        date_of_birth = date_of_birth.date()
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def calculate_percentile(raw_score: float, norm_data: NormativeData) -> int:
    """
    Piecewise-linear percentile between the (p10,10) (p25,25) (p50,50) (p75,75) (p90,90)
    anchors. Below p10 the percentile scales linearly from 0; above p90 it extrapolates
    by 10 points per p90 of excess, capped at 99.
    """
    p = norm_data.percentiles
    anchors = ((p.p10, 10), (p.p25, 25), (p.p50, 50), (p.p75, 75), (p.p90, 90))

    if raw_score <= p.p10:
        value = 10.0 if p.p10 <= 0 else raw_score / p.p10 * 10
    else:
        value = None
        for (low_score, low_pct), (high_score, high_pct) in zip(anchors, anchors[1:]):
            # raw_score > low_score here, so high_score > low_score whenever this matches
            if raw_score <= high_score:
                value = low_pct + (raw_score - low_score) / (high_score - low_score) * (high_pct - low_pct)
                break
        if value is None:
            if p.p90 <= 0:
                return MAX_PERCENTILE
            value = 90 + (raw_score - p.p90) / p.p90 * 10

    return max(0, min(MAX_PERCENTILE, _round_half_up(value)))


def calculate_average_form_score(repetitions: Sequence[Any]) -> float:
    """Mean rep form score; 100 when nothing was tracked rep by rep."""
    if not repetitions:
        return 100.0
    return float(np.mean([rep.form_score for rep in repetitions]))


def adjust_percentile(percentile: float, average_form_score: float) -> int:
    """Form can only scale the percentile down by up to 20%, never replace it."""
    form_adjustment = (average_form_score / 100.0) * FORM_WEIGHT
    return _round_half_up(percentile * PERFORMANCE_WEIGHT + percentile * form_adjustment)


def get_grade(percentile: float) -> str:
    for minimum, grade in GRADE_THRESHOLDS:
        if percentile >= minimum:
            return grade
    return "F"


def get_grade_description(grade: str) -> str:
    try:
        return GRADE_DESCRIPTIONS[grade]
    except KeyError:
        raise ValueError(f"Unknown grade: {grade}") from None


def get_test_info(test_type: str) -> Dict[str, Any]:
    """Name, description, instructions, duration (s) and metric for a test type."""
    catalog = _test_catalog()
    if test_type not in catalog:
        raise ValueError(f"Unknown test type: {test_type}")
    return dict(catalog[test_type])


def calculate_score(
    test_type: str,
    raw_score: float,
    repetitions: Sequence[Any],
    gender: str,
    date_of_birth: Union[date, datetime, str],
    today: Optional[date] = None,
    table: Optional[NormativeTable] = None,
) -> TestScore:
    """
    Calculate the comprehensive score for a completed test.

    Args:
        test_type: Test identifier, e.g. "squats"
        raw_score: Rep count, or best height/distance in the test's metric
        repetitions: RepetitionData list from the tracker (may be empty)
        gender: "male", "female" or "other"
        date_of_birth: date or ISO date string
        today: Reference date for the age calculation, defaults to today
        table: Normative table, defaults to the packaged dataset

    Returns:
        TestScore
    """
    table = table or get_normative_table()
    age = max(MIN_AGE, min(MAX_AGE, calculate_age(date_of_birth, today)))

    norm_data = table.lookup(test_type, gender, age)
    percentile = DEFAULT_PERCENTILE
    if norm_data is not None:
        percentile = calculate_percentile(raw_score, norm_data)
    else:
        logger.warning(f"No normative data for {test_type}/{gender}/age {age}; using median percentile")

    average_form_score = calculate_average_form_score(repetitions)
    adjusted_percentile = adjust_percentile(percentile, average_form_score)

    feedback = generate_score_feedback(
        test_type,
        raw_score,
        percentile,
        average_form_score,
        [rep.duration for rep in repetitions],
    )

    return TestScore(
        raw_score=raw_score,
        standardized_score=_round_half_up(adjusted_percentile),
        percentile=percentile,
        grade=get_grade(adjusted_percentile),
        feedback=feedback,
    )
