# FILE: tests/test_snapshot_builder.py

from datetime import timedelta

import pytest
from quiz_backend.errors import InvalidQuestion, NotFound
from quiz_backend.models.quizzes import BankQuestion, QuestionSnapshot, QuestionType
from quiz_backend.services.snapshot_builder import validate_question

from conftest import PASSWORD, T0, two_question_request


def _bank_question(qid, text="Capital of France?", correct=(0, 1, 0), points=1):
    return BankQuestion(
        id=qid,
        subject_id="geo",
        text=text,
        type=QuestionType.SINGLE,
        options=["Berlin", "Paris", "Rome"],
        correct_options=list(correct),
        points=points,
    )


@pytest.fixture
def bank_quiz(services, teacher):
    services.bank.add_question(_bank_question("b1"))
    services.bank.add_question(_bank_question("b2", text="Capital of Italy?", correct=(0, 0, 1), points=2))
    request = two_question_request(questions=[], bank_question_ids=["b1", "b2"])
    return services.quiz_admin.create_quiz(request, teacher)


def test_build_copies_bank_questions(services, bank_quiz):
    quiz = services.snapshots.build(bank_quiz.id)

    assert [q.text for q in quiz.snapshot_questions] == ["Capital of France?", "Capital of Italy?"]
    assert [q.points for q in quiz.snapshot_questions] == [1, 2]
    # fresh ids, decoupled from the bank
    assert {q.id for q in quiz.snapshot_questions}.isdisjoint({"b1", "b2"})
    assert quiz.snapshot_built_at == T0


def test_build_is_idempotent(services, bank_quiz):
    first = services.snapshots.build(bank_quiz.id)
    second = services.snapshots.build(bank_quiz.id)

    assert first.snapshot_questions == second.snapshot_questions


def test_bank_edits_do_not_reach_existing_snapshot(services, bank_quiz, student):
    services.quiz_attempts.enroll(bank_quiz.id, student, PASSWORD)
    before = services.quizzes.get(bank_quiz.id).snapshot_questions

    # a later line for the same id supersedes the bank entry
    services.bank.add_question(_bank_question("b1", text="Capital of Spain?", correct=(1, 0, 0)))
    assert services.bank.get_questions(["b1"])[0].text == "Capital of Spain?"

    after = services.snapshots.build(bank_quiz.id).snapshot_questions
    assert after == before
    assert after[0].text == "Capital of France?"


def test_enroll_builds_snapshot_once_for_all_students(services, bank_quiz, student, other_student):
    services.quiz_attempts.enroll(bank_quiz.id, student, PASSWORD)
    ids_after_first = [q.id for q in services.quizzes.get(bank_quiz.id).snapshot_questions]

    services.quiz_attempts.enroll(bank_quiz.id, other_student, PASSWORD)
    ids_after_second = [q.id for q in services.quizzes.get(bank_quiz.id).snapshot_questions]

    assert ids_after_first == ids_after_second


def test_missing_bank_question(services, teacher):
    request = two_question_request(questions=[], bank_question_ids=["nope"])
    quiz = services.quiz_admin.create_quiz(request, teacher)

    with pytest.raises(NotFound):
        services.snapshots.build(quiz.id)
    assert services.quizzes.get(quiz.id).snapshot_questions == []


def test_quiz_with_inline_questions_is_not_rebuilt(services, quiz):
    rebuilt = services.snapshots.build(quiz.id)
    assert rebuilt.snapshot_questions == quiz.snapshot_questions


@pytest.mark.parametrize("type_, correct, ok", [
    (QuestionType.SINGLE, [1, 0, 0], True),
    (QuestionType.SINGLE, [1, 1, 0], False),
    (QuestionType.SINGLE, [0, 0, 0], False),
    (QuestionType.MULTIPLE, [1, 1, 0], True),
    (QuestionType.MULTIPLE, [0, 0, 0], False),
    (QuestionType.OTHER, [0, 0, 1], True),
    (QuestionType.SINGLE, [1, 0], False),
    (QuestionType.SINGLE, [2, 0, 0], False),
])
def test_validate_question(type_, correct, ok):
    question = QuestionSnapshot(id="q", text="t", type=type_, options=["a", "b", "c"], correct_options=correct)
    if ok:
        validate_question(question)
    else:
        with pytest.raises(InvalidQuestion):
            validate_question(question)


def test_validate_question_rejects_single_option_and_bad_points():
    with pytest.raises(InvalidQuestion):
        validate_question(QuestionSnapshot(id="q", text="t", options=["a"], correct_options=[1]))
    with pytest.raises(InvalidQuestion):
        validate_question(QuestionSnapshot(id="q", text="t", options=["a", "b"], correct_options=[1, 0], points=0))


def test_create_quiz_rejects_invalid_inline_question(services, teacher):
    request = two_question_request()
    request.questions[0].correct_options = [1, 1]

    with pytest.raises(InvalidQuestion):
        services.quiz_admin.create_quiz(request, teacher)
    assert services.quizzes.list() == []


def test_create_quiz_requires_start_before_end():
    with pytest.raises(ValueError):
        two_question_request(end_time=T0 - timedelta(minutes=1))


def test_create_quiz_rejects_inline_and_bank_questions_together(services, teacher):
    services.bank.add_question(_bank_question("b1"))
    request = two_question_request(bank_question_ids=["b1"])

    with pytest.raises(InvalidQuestion):
        services.quiz_admin.create_quiz(request, teacher)
    assert services.quizzes.list() == []


def test_naive_window_times_are_read_as_utc():
    request = two_question_request(start_time=T0.replace(tzinfo=None), end_time=T0 + timedelta(hours=1))

    assert request.start_time == T0
    assert request.start_time.tzinfo is not None


def test_mixed_offsets_still_check_window():
    with pytest.raises(ValueError):
        two_question_request(start_time=(T0 + timedelta(hours=2)).replace(tzinfo=None), end_time=T0)
    with pytest.raises(ValueError):
        two_question_request(start_time=T0, end_time=T0.replace(tzinfo=None))
