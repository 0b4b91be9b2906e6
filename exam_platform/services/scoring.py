"""
Scoring of a submission against an exam's answer key.

Pure functions: the same key and answers always produce the same graded
answers and score, so a score can be recomputed from stored answers.

Policy:
- choice questions are correct only when the set of submitted option ids is
  exactly the set of correct option ids (for single_choice that is the one
  correct id, and a string answer is taken whole rather than split on commas);
- essay questions are never auto-scored (``is_correct`` stays None, 0 points);
- unanswered questions are recorded with an empty ``submitted_text``.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from exam_platform.models import Answer, AnswerKeyEntry, QuestionType, ScoreResult, SubmittedValue


def submitted_option_ids(value: SubmittedValue, split_commas: bool = True) -> list[str]:
    """
    Option ids from a submitted value: a single id, a list, or (when
    ``split_commas``) a comma-separated string.
    """
    if value is None:
        return []
    if isinstance(value, list):
        parts = value
    elif split_commas:
        parts = value.split(",")
    else:
        parts = [value]
    return sorted({p.strip() for p in parts if p and p.strip()})


def grade_answer(attempt_id: str, entry: AnswerKeyEntry, value: SubmittedValue) -> Answer:
    if entry.type == QuestionType.essay:
        if isinstance(value, list):
            text = "\n".join(value)
        else:
            text = value or ""
        return Answer(
            attempt_id=attempt_id,
            question_id=entry.question_id,
            submitted_text=text,
            is_correct=None,
            points_awarded=0,
        )

    # a single_choice answer is one id, compared as sent
    chosen = submitted_option_ids(value, split_commas=entry.type == QuestionType.multiple_choice)
    is_correct = bool(entry.correct_option_ids) and set(chosen) == set(entry.correct_option_ids)
    return Answer(
        attempt_id=attempt_id,
        question_id=entry.question_id,
        submitted_text=",".join(chosen),
        is_correct=is_correct,
        points_awarded=entry.points if is_correct else 0,
    )


def percentage(earned: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(earned * 100.0 / total, 2)


def grade_submission(
    attempt_id: str,
    answer_key: Iterable[AnswerKeyEntry],
    answers: Mapping[str, SubmittedValue],
) -> tuple[list[Answer], ScoreResult]:
    """Grade one answer per question of the key; answers to unknown questions are ignored."""
    graded: list[Answer] = []
    total_points = 0
    for entry in answer_key:
        graded.append(grade_answer(attempt_id, entry, answers.get(entry.question_id)))
        total_points += entry.points

    earned = sum(a.points_awarded for a in graded)
    result = ScoreResult(
        score=percentage(earned, total_points),
        total_questions=len(graded),
        correct_answers=sum(1 for a in graded if a.is_correct),
    )
    return graded, result
