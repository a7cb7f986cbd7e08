"""Platform-owned session state machine helpers."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import GenerationError, WorkflowError
from .models import MAX_ROUNDS, QUESTION_STEPS, Question, Session, SessionStep

logger = logging.getLogger(__name__)


STEP_LABELS = {
    SessionStep.INITIAL_IDEA: "Initial",
    SessionStep.QUESTIONS_ROUND_1: "Questions 1/3",
    SessionStep.QUESTIONS_ROUND_2: "Questions 2/3",
    SessionStep.QUESTIONS_ROUND_3: "Questions 3/3",
    SessionStep.FINAL_WRITEUP: "Writeup",
    SessionStep.GENERATE_FILE_STRUCTURE: "File Structure",
    SessionStep.CONVERT_TO_JSON: "Complete",
}


def step_label(step: SessionStep) -> str:
    """Short human label for a step, as shown in session listings."""
    return STEP_LABELS[step]


def advance_step(session: Session, target: SessionStep) -> None:
    """Move ``session`` forward to ``target``.

    Raises WorkflowError if ``target`` would move the session backwards.
    Re-entering the current step is allowed.
    """
    if target < session.current_step:
        raise WorkflowError(
            f"Session {session.id} cannot move from {session.current_step.value} "
            f"back to {target.value}"
        )
    if target is not session.current_step:
        logger.debug("Session %s: %s -> %s", session.id, session.current_step.value, target.value)
    session.current_step = target


def round_number_for_step(step: SessionStep) -> Optional[int]:
    """Return 1-3 for a question step, None otherwise."""
    if step in QUESTION_STEPS:
        return QUESTION_STEPS.index(step) + 1
    return None


def step_after_round(round_number: int) -> SessionStep:
    """Step that follows a completed question round."""
    if round_number < MAX_ROUNDS:
        return QUESTION_STEPS[round_number]
    return SessionStep.FINAL_WRITEUP


def validate_question_shape(questions: list[Question], questions_count: int,
                            answers_per_question: int) -> None:
    """Raise GenerationError unless the round has the configured shape."""
    if len(questions) != questions_count:
        raise GenerationError(
            f"Expected {questions_count} questions, got {len(questions)}."
        )
    for i, question in enumerate(questions, 1):
        if len(question.choices) != answers_per_question:
            raise GenerationError(
                f"Question {i} has {len(question.choices)} choices, "
                f"expected {answers_per_question}."
            )


def normalize_answers(answers: list[str], questions_count: int) -> list[str]:
    """Pad with skips or truncate so answers align index-for-index with questions."""
    if len(answers) > questions_count:
        logger.warning(
            "Dropping %d extra answer(s) beyond %d questions",
            len(answers) - questions_count, questions_count,
        )
        return list(answers[:questions_count])
    return list(answers) + [""] * (questions_count - len(answers))
