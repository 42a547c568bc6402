"""
Scoring engine: normative lookup, percentile, grade and feedback.
"""

from .scoring_engine import (
    NormativeData,
    NormativeTable,
    Percentiles,
    TestScore,
    adjust_percentile,
    calculate_age,
    calculate_average_form_score,
    calculate_percentile,
    calculate_score,
    get_grade,
    get_grade_description,
    get_normative_table,
    get_test_info,
)

__all__ = [
    'NormativeData',
    'NormativeTable',
    'Percentiles',
    'TestScore',
    'adjust_percentile',
    'calculate_age',
    'calculate_average_form_score',
    'calculate_percentile',
    'calculate_score',
    'get_grade',
    'get_grade_description',
    'get_normative_table',
    'get_test_info',
]
