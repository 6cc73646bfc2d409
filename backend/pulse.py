"""Pulse-check tallies for answered questions."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from models import PulseFeedback, QuestionStatus


def aggregate_pulse_check(records: Iterable) -> Dict[str, int]:
    """Count feedback records per category. All three keys are always present."""
    stats = {feedback.value: 0 for feedback in PulseFeedback}
    for record in records:
        stats[PulseFeedback(record.feedback).value] += 1
    return stats


def pulse_stats_for(question) -> Optional[Dict[str, int]]:
    """Tally for an answered question, ``None`` for any other status.

    ``None`` means the stats field is left out of the response, which is not
    the same as reporting zeros.
    """
    if question.status != QuestionStatus.ANSWERED:
        return None
    return aggregate_pulse_check(question.pulse_feedback)
