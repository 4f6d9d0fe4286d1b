"""Check a selected option against a Question and build feedback text."""
from __future__ import annotations

import random

from study_quiz.models import QUESTION_TYPE, AnswerResult, Question

POSITIVE_MESSAGES = [
    "Excellent work!",
    "That's correct! Well done!",
    "Perfect! You really know your stuff!",
    "Brilliant! Keep it up!",
    "Outstanding! That's the right answer!",
    "Superb! Your studying is paying off!",
]

ENCOURAGING_MESSAGES = [
    "Not quite, but don't give up!",
    "That's not correct, but you're learning!",
    "Incorrect, but every mistake is a learning opportunity!",
    "Not this time, but you'll get the next one!",
    "Oops! Let's review this concept.",
    "That's not it, but don't be discouraged!",
]


def _validate(question: Question | None, selected_index: int) -> None:
    if question is None:
        raise ValueError("Question is required for validation")
    if question.type != QUESTION_TYPE:
        raise ValueError(f"Unsupported question type: {question.type}")
    if not question.options:
        raise ValueError("Question must have options")
    if not 0 <= question.correct_answer < len(question.options):
        raise ValueError(f"correct_answer out of range: {question.correct_answer}")
    if isinstance(selected_index, bool) or not isinstance(selected_index, int):
        raise ValueError(f"Selected answer must be an integer index (got {selected_index!r})")
    if not 0 <= selected_index < len(question.options):
        raise ValueError(
            f"Invalid answer index: {selected_index}. "
            f"Must be between 0 and {len(question.options) - 1}"
        )


def build_feedback(
    is_correct: bool,
    correct_answer: str,
    user_answer: str,
    explanation: str = "",
    rng: random.Random | None = None,
) -> str:
    rng = rng if rng is not None else random
    if is_correct:
        return f'{rng.choice(POSITIVE_MESSAGES)}\n\n"{correct_answer}" is the correct answer!'

    feedback = (
        f"{rng.choice(ENCOURAGING_MESSAGES)}\n\n"
        f'You selected: "{user_answer}"\n'
        f'The correct answer is: "{correct_answer}"'
    )
    if explanation and explanation.strip():
        feedback += f"\n\n{explanation.strip()}"
    return feedback


def check_answer(
    question: Question | None,
    selected_index: int,
    rng: random.Random | None = None,
) -> AnswerResult:
    """Compare *selected_index* with the question's correct answer.

    Raises ``ValueError`` for a malformed question or an out-of-range index.
    """
    _validate(question, selected_index)
    is_correct = selected_index == question.correct_answer
    correct_text = question.options[question.correct_answer]
    user_text = question.options[selected_index]
    return AnswerResult(
        is_correct=is_correct,
        feedback=build_feedback(is_correct, correct_text, user_text, question.explanation, rng),
        correct_answer=correct_text,
        user_answer=user_text,
        explanation=question.explanation or "",
    )
