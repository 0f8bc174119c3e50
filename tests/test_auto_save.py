# FILE: tests/test_auto_save.py

import threading

import pytest
from quiz_backend.errors import Forbidden, InvalidAnswer, InvalidState
from quiz_backend.models.attempts import AttemptStatus


def test_auto_save_stores_answer(services, attempt, student, question_ids):
    result = services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [1, 0])

    entry = result.attempt.answers[question_ids[0]]
    assert entry.answer == [1, 0]
    assert entry.correct is None
    assert entry.points_earned is None
    assert result.total_questions == 2
    assert result.answered_total == 1


def test_same_vector_twice_is_a_no_op(services, attempt, student, question_ids):
    first = services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [0, 1])
    second = services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [0, 1])

    assert second.attempt == first.attempt
    assert services.attempts.get(attempt.id).version == first.attempt.version


def test_later_vector_wins(services, attempt, student, question_ids):
    services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [0, 1])
    services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [1, 0])

    assert services.attempts.get(attempt.id).answers[question_ids[0]].answer == [1, 0]


def test_all_zero_vector_clears_progress(services, attempt, student, question_ids):
    services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [1, 0])
    result = services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [0, 0])

    assert result.answered_total == 0


@pytest.mark.parametrize("answer", [[1], [1, 0, 0], [2, 0], []])
def test_invalid_vector_is_rejected_without_write(services, attempt, student, question_ids, answer):
    before = services.attempts.get(attempt.id)

    with pytest.raises(InvalidAnswer):
        services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], answer)

    assert services.attempts.get(attempt.id) == before


def test_unknown_question_is_rejected(services, attempt, student):
    with pytest.raises(InvalidAnswer):
        services.quiz_attempts.auto_save(attempt.id, student, "not-a-question", [1, 0])


def test_other_student_cannot_save(services, attempt, other_student, question_ids):
    with pytest.raises(Forbidden):
        services.quiz_attempts.auto_save(attempt.id, other_student, question_ids[0], [1, 0])


def test_no_auto_save_after_submit(services, attempt, student, question_ids):
    services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [1, 0])
    services.quiz_attempts.submit(attempt.id, student)

    with pytest.raises(InvalidState):
        services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [0, 1])
    assert services.attempts.get(attempt.id).answers[question_ids[0]].answer == [1, 0]


def test_no_auto_save_after_ban(services, attempt, student, teacher, question_ids):
    services.quiz_attempts.ban(attempt.id, teacher)

    with pytest.raises(InvalidState):
        services.quiz_attempts.auto_save(attempt.id, student, question_ids[1], [0, 1])


def test_concurrent_saves_never_interleave(services, attempt, student, question_ids):
    vectors = [[1, 0], [0, 1]]
    errors = []
    barrier = threading.Barrier(8)

    def worker(n):
        barrier.wait()
        try:
            for i in range(20):
                qid = question_ids[(n + i) % 2]
                services.quiz_attempts.auto_save(attempt.id, student, qid, vectors[(n * i) % 2])
        except Exception as e:  # collected and asserted below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    stored = services.attempts.get(attempt.id)
    assert set(stored.answers) == set(question_ids)
    for entry in stored.answers.values():
        assert entry.answer in vectors


def test_save_racing_submit_is_applied_or_rejected(services, attempt, student, question_ids):
    outcomes = []
    barrier = threading.Barrier(2)

    def save():
        barrier.wait()
        try:
            services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [1, 0])
            outcomes.append("saved")
        except InvalidState:
            outcomes.append("rejected")

    def submit():
        barrier.wait()
        services.quiz_attempts.submit(attempt.id, student)

    threads = [threading.Thread(target=save), threading.Thread(target=submit)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    final = services.attempts.get(attempt.id)
    assert final.status is AttemptStatus.SUBMITTED
    if outcomes == ["saved"]:
        # a save that was applied must be part of what got graded
        assert question_ids[0] in final.answers
        assert final.answers[question_ids[0]].correct is True
    else:
        assert outcomes == ["rejected"]
        assert question_ids[0] not in final.answers


def test_save_landing_after_end_time_is_rejected(services, quiz, attempt, student, question_ids, clock, monkeypatch):
    # the deadline check before the write passed just before endTime
    monkeypatch.setattr(services.enforcer, "enforce", services.attempts.get)
    clock.set(quiz.end_time)

    with pytest.raises(InvalidState):
        services.quiz_attempts.auto_save(attempt.id, student, question_ids[0], [1, 0])

    stored = services.attempts.get(attempt.id)
    assert stored.answers == {}
    assert stored.version == attempt.version
