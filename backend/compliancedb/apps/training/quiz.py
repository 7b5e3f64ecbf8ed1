from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .catalog import PASSING_SCORE, QuizQuestion


@dataclass(frozen=True)
class QuestionOutcome:
    question_id: str
    selected: Optional[int]
    correct_answer: int
    is_correct: bool
    explanation: str = ""


@dataclass(frozen=True)
class QuizScore:
    score_percent: int
    passed: bool
    correct_count: int
    total_questions: int
    per_question: List[QuestionOutcome] = field(default_factory=list)

    def correctness(self) -> Dict[str, bool]:
        return {o.question_id: o.is_correct for o in self.per_question}


def _selected_index(value: Any) -> Optional[int]:
    # bool is an int subclass; True must not read as option 1.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def percent_half_up(correct: int, total: int) -> int:
    """100 * correct / total rounded half-up (2/8 -> 25, 1/8 -> 13)."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def score_quiz(
    questions: Sequence[QuizQuestion],
    answers: Mapping[str, Any],
    *,
    passing_score: int = PASSING_SCORE,
) -> QuizScore:
    """
    Score a submission against the answer key.

    A missing, non-integer or out-of-range answer counts as incorrect;
    answers for question ids not in `questions` are ignored.
    """
    outcomes: List[QuestionOutcome] = []
    for question in questions:
        selected = _selected_index(answers.get(question.id))
        outcomes.append(
            QuestionOutcome(
                question_id=question.id,
                selected=selected,
                correct_answer=question.correct_answer,
                is_correct=selected is not None and selected == question.correct_answer,
                explanation=question.explanation,
            )
        )

    correct = sum(1 for o in outcomes if o.is_correct)
    score = percent_half_up(correct, len(outcomes))
    return QuizScore(
        score_percent=score,
        passed=score >= passing_score,
        correct_count=correct,
        total_questions=len(outcomes),
        per_question=outcomes,
    )
