from __future__ import annotations

import pytest

from compliancedb.apps.training.catalog import QuizQuestion
from compliancedb.apps.training.quiz import percent_half_up, score_quiz


def _questions(n: int):
    return [
        QuizQuestion(id=f"q{i}", question=f"Question {i}", options=["a", "b", "c", "d"], correct_answer=i % 4)
        for i in range(1, n + 1)
    ]


def _answers(questions, correct: int):
    answers = {}
    for index, q in enumerate(questions):
        answers[q.id] = q.correct_answer if index < correct else (q.correct_answer + 1) % 4
    return answers


def test_four_of_five_passes_at_threshold():
    questions = _questions(5)

    result = score_quiz(questions, _answers(questions, 4))

    assert result.score_percent == 80
    assert result.passed is True
    assert result.correct_count == 4


def test_three_of_five_fails():
    questions = _questions(5)

    result = score_quiz(questions, _answers(questions, 3))

    assert result.score_percent == 60
    assert result.passed is False


def test_missing_answers_count_as_incorrect():
    questions = _questions(3)

    result = score_quiz(questions, {"q1": questions[0].correct_answer})

    assert result.correct_count == 1
    assert result.score_percent == 33
    assert result.correctness() == {"q1": True, "q2": False, "q3": False}


def test_non_integer_and_out_of_range_answers_are_incorrect():
    questions = _questions(3)

    result = score_quiz(questions, {"q1": True, "q2": "2", "q3": 99})

    assert result.correct_count == 0
    assert result.passed is False


def test_unknown_question_ids_are_ignored():
    questions = _questions(2)
    answers = _answers(questions, 2)
    answers["not-a-question"] = 0

    result = score_quiz(questions, answers)

    assert result.total_questions == 2
    assert result.score_percent == 100


def test_per_question_outcome_carries_explanation():
    questions = [
        QuizQuestion(id="x", question="?", options=["a", "b"], correct_answer=1, explanation="because"),
    ]

    result = score_quiz(questions, {"x": 0})

    outcome = result.per_question[0]
    assert outcome.selected == 0
    assert outcome.correct_answer == 1
    assert outcome.explanation == "because"


@pytest.mark.parametrize(
    "correct,total,expected",
    [(1, 8, 13), (2, 8, 25), (1, 3, 33), (2, 3, 67), (1, 2, 50), (0, 4, 0), (0, 0, 0)],
)
def test_percent_rounds_half_up(correct, total, expected):
    assert percent_half_up(correct, total) == expected


def test_custom_passing_score():
    questions = _questions(4)

    result = score_quiz(questions, _answers(questions, 3), passing_score=70)

    assert result.score_percent == 75
    assert result.passed is True
