# FILE: tests/test_scoring.py

import pytest
from quiz_backend.models.attempts import AnswerEntry
from quiz_backend.models.quizzes import QuestionSnapshot, QuestionType
from quiz_backend.services.scoring import score


def _q(qid, correct, points=1, type=QuestionType.SINGLE, deleted=False):
    return QuestionSnapshot(
        id=qid,
        text=f"question {qid}",
        type=type,
        options=[f"opt{i}" for i in range(len(correct))],
        correct_options=correct,
        points=points,
        is_deleted=deleted,
    )


def _answers(**vectors):
    return {qid: AnswerEntry(question_id=qid, answer=v) for qid, v in vectors.items()}


def test_one_right_one_wrong():
    """Two 2-point questions, one answered correctly"""
    snapshot = [_q("q1", [1, 0], points=2), _q("q2", [0, 1], points=2)]
    result = score(snapshot, _answers(q1=[1, 0], q2=[1, 0]))

    assert result.total_score == 2
    assert result.total_quiz_score == 4
    assert result.score_percentage == 5.0
    graded = result.by_question()
    assert graded["q1"].correct is True
    assert graded["q1"].points_earned == 2
    assert graded["q2"].correct is False
    assert graded["q2"].points_earned == 0


def test_missing_answer_counts_as_unanswered():
    snapshot = [_q("q1", [1, 0]), _q("q2", [0, 1])]
    result = score(snapshot, _answers(q1=[1, 0]))

    assert result.total_score == 1
    assert result.by_question()["q2"].correct is False


def test_multi_select_is_all_or_nothing():
    snapshot = [_q("q1", [1, 0, 1], points=3, type=QuestionType.MULTIPLE)]

    assert score(snapshot, _answers(q1=[1, 0, 0])).total_score == 0
    assert score(snapshot, _answers(q1=[1, 1, 1])).total_score == 0
    assert score(snapshot, _answers(q1=[1, 0, 1])).total_score == 3


def test_deleted_questions_are_ignored():
    snapshot = [_q("q1", [1, 0], points=2), _q("q2", [0, 1], points=5, deleted=True)]
    result = score(snapshot, _answers(q1=[1, 0], q2=[0, 1]))

    assert result.total_score == 2
    assert result.total_quiz_score == 2
    assert result.score_percentage == 10.0
    assert "q2" not in result.by_question()


def test_empty_quiz_scores_zero_percent():
    result = score([], {})
    assert result.total_quiz_score == 0
    assert result.score_percentage == 0.0


def test_answer_of_wrong_length_is_incorrect():
    # A corrected snapshot may change the option count of an answered question
    snapshot = [_q("q1", [0, 0, 1])]
    result = score(snapshot, _answers(q1=[1, 0]))
    assert result.by_question()["q1"].correct is False


def test_score_is_deterministic():
    snapshot = [_q("q1", [1, 0], points=1.5), _q("q2", [0, 1], points=2.25), _q("q3", [1, 0], points=0.1)]
    answers = _answers(q1=[1, 0], q3=[1, 0])

    first = score(snapshot, answers)
    second = score(snapshot, answers)

    assert first == second
    assert first.score_percentage == pytest.approx((1.5 + 0.1) / 3.85 * 10)
