import random
from datetime import datetime, timedelta

from models import Question, QuestionStatus
from ranking import rank_questions

T0 = datetime(2026, 3, 1, 9, 0)


def q(qid, status=QuestionStatus.APPROVED, votes=0, minutes=0):
    return Question(id=qid, status=status, vote_count=votes, created_at=T0 + timedelta(minutes=minutes))


def ids(questions):
    return [question.id for question in questions]


def test_more_votes_first():
    ranked = rank_questions([q("a", votes=1), q("b", votes=5), q("c", votes=3)])
    assert ids(ranked) == ["b", "c", "a"]


def test_equal_votes_older_first():
    older, newer = q("older", votes=2, minutes=0), q("newer", votes=2, minutes=10)
    assert ids(rank_questions([newer, older])) == ["older", "newer"]
    assert ids(rank_questions([older, newer])) == ["older", "newer"]


def test_being_answered_beats_votes():
    ranked = rank_questions([
        q("popular", votes=1000),
        q("live", status=QuestionStatus.BEING_ANSWERED, votes=0),
    ])
    assert ids(ranked) == ["live", "popular"]


def test_answered_sinks_to_bottom():
    ranked = rank_questions([
        q("done", status=QuestionStatus.ANSWERED, votes=999),
        q("pending", status=QuestionStatus.PENDING, votes=0, minutes=5),
        q("open", votes=1),
    ])
    assert ids(ranked) == ["open", "pending", "done"]


def test_groups_keep_vote_then_age_order():
    ranked = rank_questions([
        q("ans-old", status=QuestionStatus.ANSWERED, votes=1, minutes=0),
        q("ans-top", status=QuestionStatus.ANSWERED, votes=4, minutes=3),
        q("ans-new", status=QuestionStatus.ANSWERED, votes=1, minutes=9),
        q("live-b", status=QuestionStatus.BEING_ANSWERED, votes=2),
        q("live-a", status=QuestionStatus.BEING_ANSWERED, votes=7),
    ])
    assert ids(ranked) == ["live-a", "live-b", "ans-top", "ans-old", "ans-new"]


def test_does_not_mutate_input():
    questions = [q("a", votes=1), q("b", votes=2)]
    ranked = rank_questions(questions)
    assert ids(questions) == ["a", "b"]
    assert ranked is not questions


def test_idempotent_and_input_order_independent():
    statuses = list(QuestionStatus)
    rng = random.Random(3)
    questions = [
        q(f"q{i}", status=rng.choice(statuses), votes=rng.randint(0, 3), minutes=rng.randint(0, 5))
        for i in range(40)
    ]
    once = rank_questions(questions)
    assert ids(rank_questions(once)) == ids(once)

    shuffled = questions[:]
    rng.shuffle(shuffled)
    assert ids(rank_questions(shuffled)) == ids(once)


def test_plain_string_statuses():
    ranked = rank_questions([q("a", status="approved", votes=3), q("b", status="being_answered")])
    assert ids(ranked) == ["b", "a"]
