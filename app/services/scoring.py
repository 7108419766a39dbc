"""Score for a solved question.

The score is a sum of a constant base and three components that decay
linearly toward zero, scaled by the fraction of test cases passed:

* time since the team's first attempt on the question, capped at
  ``MAX_TIME`` seconds;
* the team's syntax-error count on the question, capped at ``MAX_SYNTAX``;
* the team's wrong-submission count on the question, capped at
  ``MAX_WRONG``.

A full pass always yields at least ``BASE``.
"""
from __future__ import annotations

# Weights
BASE = 5.0
TIME_MAX = 8.0
SYNTAX_MAX = 10.0
WRONG_MAX = 7.0

# Limits
MAX_TIME = 45 * 60  # seconds
MAX_SYNTAX = 30
MAX_WRONG = 30

MAX_SCORE = BASE + TIME_MAX + SYNTAX_MAX + WRONG_MAX


def _linear_decay(weight: float, value: float, cap: float) -> float:
    return max(0.0, weight * (1 - min(value, cap) / cap))


def compute_score(
    passed_count: int,
    total_testcases: int,
    elapsed_seconds: float,
    syntax_errors: int,
    wrong_submissions: int,
) -> float:
    """Return the score earned for *passed_count* of *total_testcases*.

    Raises:
        ValueError: if ``total_testcases`` is not positive, ``passed_count``
            is outside ``0..total_testcases`` or any counter is negative.
    """
    if total_testcases <= 0:
        raise ValueError('total_testcases must be positive')
    if passed_count < 0 or passed_count > total_testcases:
        raise ValueError(
            f'passed_count {passed_count} outside 0..{total_testcases}'
        )
    if elapsed_seconds < 0 or syntax_errors < 0 or wrong_submissions < 0:
        raise ValueError('elapsed time and penalty counts must be non-negative')

    time_score = _linear_decay(TIME_MAX, elapsed_seconds, MAX_TIME)
    syntax_score = _linear_decay(SYNTAX_MAX, syntax_errors, MAX_SYNTAX)
    wrong_score = _linear_decay(WRONG_MAX, wrong_submissions, MAX_WRONG)

    total = BASE + time_score + syntax_score + wrong_score
    return (passed_count / total_testcases) * total
