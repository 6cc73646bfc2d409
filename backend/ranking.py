"""Display order for question lists.

Host and participant views share one ordering:

1. ``being_answered`` questions first,
2. ``answered`` questions last,
3. otherwise (and within those two groups) more votes first,
4. then older questions first.

The question id breaks any remaining tie so the result never depends on
the order rows came back from the database.
"""

from __future__ import annotations

from typing import Iterable, List, TypeVar

from models import QuestionStatus

Q = TypeVar("Q")

PARTICIPANT_VISIBLE_STATUSES = (
    QuestionStatus.APPROVED,
    QuestionStatus.BEING_ANSWERED,
    QuestionStatus.ANSWERED,
)


def _status_rank(status) -> int:
    if status == QuestionStatus.BEING_ANSWERED:
        return 0
    if status == QuestionStatus.ANSWERED:
        return 2
    return 1


def _sort_key(question):
    return (
        _status_rank(question.status),
        -question.vote_count,
        question.created_at,
        str(question.id),
    )


def rank_questions(questions: Iterable[Q]) -> List[Q]:
    """Return a new, ordered list; the input is left untouched."""
    return sorted(questions, key=_sort_key)
