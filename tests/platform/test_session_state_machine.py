"""Tests for platform session state-machine helpers."""

import pytest

from plan_platform.errors import GenerationError, WorkflowError
from plan_platform.models import Question, Session, SessionConfig, SessionStep
from plan_platform.session_state_machine import (
    advance_step,
    normalize_answers,
    round_number_for_step,
    step_after_round,
    step_label,
    validate_question_shape,
)


def _session(step=SessionStep.INITIAL_IDEA) -> Session:
    return Session(id="s1", idea="Idea", config=SessionConfig(), current_step=step)


def test_advance_step_moves_forward():
    session = _session()
    advance_step(session, SessionStep.QUESTIONS_ROUND_1)
    assert session.current_step is SessionStep.QUESTIONS_ROUND_1


def test_advance_step_allows_staying_put():
    session = _session(SessionStep.GENERATE_FILE_STRUCTURE)
    advance_step(session, SessionStep.GENERATE_FILE_STRUCTURE)
    assert session.current_step is SessionStep.GENERATE_FILE_STRUCTURE


def test_advance_step_refuses_regression():
    session = _session(SessionStep.FINAL_WRITEUP)
    with pytest.raises(WorkflowError):
        advance_step(session, SessionStep.QUESTIONS_ROUND_3)
    assert session.current_step is SessionStep.FINAL_WRITEUP


def test_round_number_for_step():
    assert round_number_for_step(SessionStep.QUESTIONS_ROUND_1) == 1
    assert round_number_for_step(SessionStep.QUESTIONS_ROUND_3) == 3
    assert round_number_for_step(SessionStep.FINAL_WRITEUP) is None


def test_step_after_round():
    assert step_after_round(1) is SessionStep.QUESTIONS_ROUND_2
    assert step_after_round(2) is SessionStep.QUESTIONS_ROUND_3
    assert step_after_round(3) is SessionStep.FINAL_WRITEUP


def test_step_labels():
    assert step_label(SessionStep.INITIAL_IDEA) == "Initial"
    assert step_label(SessionStep.QUESTIONS_ROUND_2) == "Questions 2/3"
    assert step_label(SessionStep.GENERATE_FILE_STRUCTURE) == "File Structure"
    assert step_label(SessionStep.CONVERT_TO_JSON) == "Complete"


class TestValidateQuestionShape:
    def test_accepts_matching_shape(self):
        questions = [Question("A?", ["1", "2"]), Question("B?", ["1", "2"])]
        validate_question_shape(questions, 2, 2)

    def test_wrong_question_count(self):
        with pytest.raises(GenerationError, match="Expected 3 questions, got 1"):
            validate_question_shape([Question("A?", ["1", "2"])], 3, 2)

    def test_wrong_choice_count(self):
        questions = [Question("A?", ["1", "2"]), Question("B?", ["1"])]
        with pytest.raises(GenerationError, match="Question 2 has 1 choices"):
            validate_question_shape(questions, 2, 2)


class TestNormalizeAnswers:
    def test_pads_missing_answers_with_skips(self):
        assert normalize_answers(["a"], 3) == ["a", "", ""]

    def test_truncates_extra_answers(self, caplog):
        assert normalize_answers(["a", "b", "c"], 2) == ["a", "b"]
        assert "Dropping 1 extra answer" in caplog.text

    def test_exact_length_is_unchanged(self):
        answers = ["a", ""]
        assert normalize_answers(answers, 2) == ["a", ""]
