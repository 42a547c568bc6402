"""
Feedback text: live form/phase messages and end-of-test score feedback.
"""

from .messages import FORM_ISSUE_MESSAGES, PHASE_MESSAGES, FeedbackGenerator
from .score_feedback import consistency_remark, generate_score_feedback, tips_for_test

__all__ = [
    'FORM_ISSUE_MESSAGES',
    'PHASE_MESSAGES',
    'FeedbackGenerator',
    'consistency_remark',
    'generate_score_feedback',
    'tips_for_test',
]
