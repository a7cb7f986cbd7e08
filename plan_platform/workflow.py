"""
Workflow engine driving a session through the fixed step sequence.

Each step handler returns an explicit ``StepResult``; the run loop decides
what to do with it (continue, stop, export, or save-then-raise), so the
save-on-failure path is a visible branch rather than an exception handler
side effect.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from .errors import GenerationError, StorageError, WorkflowError
from .exporter import Exporter
from .models import MAX_ROUNDS, QuestionRound, Session, SessionStep
from .persistence import SessionStore
from .ports import AnswerCollector, GenerationGateway
from .session_state_machine import (
    advance_step,
    normalize_answers,
    round_number_for_step,
    step_after_round,
    validate_question_shape,
)

logger = logging.getLogger(__name__)


class StepOutcome(Enum):
    ADVANCE = "advance"
    PAUSE = "pause"
    FINALIZE = "finalize"
    COMPLETE = "complete"
    RECOVERABLE_FAILURE = "recoverable_failure"
    FATAL_FAILURE = "fatal_failure"


@dataclass
class StepResult:
    """What a step handler asks the run loop to do next."""
    outcome: StepOutcome
    error: Optional[Exception] = None

    @classmethod
    def advance(cls) -> "StepResult":
        return cls(StepOutcome.ADVANCE)

    @classmethod
    def pause(cls) -> "StepResult":
        return cls(StepOutcome.PAUSE)

    @classmethod
    def finalize(cls) -> "StepResult":
        return cls(StepOutcome.FINALIZE)

    @classmethod
    def complete(cls) -> "StepResult":
        return cls(StepOutcome.COMPLETE)

    @classmethod
    def recoverable(cls, error: Exception) -> "StepResult":
        return cls(StepOutcome.RECOVERABLE_FAILURE, error)

    @classmethod
    def fatal(cls, error: Exception) -> "StepResult":
        return cls(StepOutcome.FATAL_FAILURE, error)


class WorkflowStatus(Enum):
    PAUSED = "paused"
    FINALIZED = "finalized"
    COMPLETED = "completed"


@dataclass
class WorkflowResult:
    status: WorkflowStatus
    session: Session
    exported_files: list[Path] = field(default_factory=list)


def summarize_writeup(writeup: str) -> str:
    headings = sum(1 for line in writeup.splitlines() if line.lstrip().startswith("#"))
    return f"{len(writeup)} characters, {headings} sections"


class WorkflowEngine:
    """Runs a session from its current step until it pauses, finalizes or completes.

    The engine owns the session for the duration of ``run``: every mutation
    is followed by a save before the next generation or prompt begins.
    """

    def __init__(
        self,
        store: SessionStore,
        gateway: GenerationGateway,
        collector: AnswerCollector,
        exporter: Exporter,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.collector = collector
        self.exporter = exporter
        self.notify = notify
        self._handlers: dict[SessionStep, Callable[[Session], Awaitable[StepResult]]] = {
            SessionStep.INITIAL_IDEA: self._start,
            SessionStep.QUESTIONS_ROUND_1: self._questions_round,
            SessionStep.QUESTIONS_ROUND_2: self._questions_round,
            SessionStep.QUESTIONS_ROUND_3: self._questions_round,
            SessionStep.FINAL_WRITEUP: self._final_writeup,
            SessionStep.GENERATE_FILE_STRUCTURE: self._file_structure,
            SessionStep.CONVERT_TO_JSON: self._converted,
        }

    def _notify(self, message: str) -> None:
        logger.debug(message)
        if self.notify is not None:
            self.notify(message)

    async def run(self, session: Session) -> WorkflowResult:
        while True:
            step = session.current_step
            result = await self._handlers[step](session)

            if result.outcome is StepOutcome.ADVANCE:
                continue
            if result.outcome is StepOutcome.PAUSE:
                self._notify(f"Session {session.id} paused. Resume with: makeaplan resume {session.id}")
                return WorkflowResult(WorkflowStatus.PAUSED, session)
            if result.outcome is StepOutcome.FINALIZE:
                return WorkflowResult(WorkflowStatus.FINALIZED, session, self._export(session))
            if result.outcome is StepOutcome.COMPLETE:
                return WorkflowResult(WorkflowStatus.COMPLETED, session, self._export(session))
            if result.outcome is StepOutcome.RECOVERABLE_FAILURE:
                logger.warning("Step %s failed for session %s: %s", step.value, session.id, result.error)
                self._save_after_failure(session)
                raise result.error
            # FATAL_FAILURE: the record is left as it was last saved
            logger.error("Session %s is inconsistent at %s: %s", session.id, step.value, result.error)
            raise result.error

    def _save_after_failure(self, session: Session) -> None:
        try:
            self.store.save(session)
        except StorageError as e:
            logger.error("Could not save session %s after a failed step: %s", session.id, e)
            self._notify(f"Warning: progress for session {session.id} could not be saved: {e}")

    def _export(self, session: Session) -> list[Path]:
        fmt = self.collector.select_export_format()
        return self.exporter.export_session(session, fmt)

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    async def _start(self, session: Session) -> StepResult:
        advance_step(session, SessionStep.QUESTIONS_ROUND_1)
        self.store.save(session)
        return StepResult.advance()

    async def _questions_round(self, session: Session) -> StepResult:
        round_number = round_number_for_step(session.current_step)
        if len(session.question_rounds) != round_number - 1:
            return StepResult.fatal(WorkflowError(
                f"Session {session.id} is at round {round_number} but has "
                f"{len(session.question_rounds)} recorded round(s)"
            ))

        config = session.config
        questions_count = config.questions_for_round(round_number)

        self._notify(f"Generating round {round_number} questions...")
        try:
            questions = await self.gateway.generate_questions(
                session.idea,
                round_number,
                session.prior_qa(),
                questions_count=questions_count,
                answers_per_question=config.answers_per_question,
            )
            validate_question_shape(questions, questions_count, config.answers_per_question)
        except GenerationError as e:
            return StepResult.recoverable(e)

        answers = normalize_answers(
            self.collector.ask_questions(questions, round_number), len(questions),
        )
        session.question_rounds.append(QuestionRound(
            round_number=round_number,
            questions=questions,
            answers=answers,
        ))
        advance_step(session, step_after_round(round_number))
        self.store.save(session)

        if not self.collector.confirm_continue():
            return StepResult.pause()
        return StepResult.advance()

    async def _final_writeup(self, session: Session) -> StepResult:
        if len(session.question_rounds) != MAX_ROUNDS:
            return StepResult.fatal(WorkflowError(
                f"Session {session.id} reached the writeup with "
                f"{len(session.question_rounds)} of {MAX_ROUNDS} rounds"
            ))

        self._notify("Generating technical specification...")
        try:
            writeup = await self.gateway.generate_writeup(
                session.idea, session.all_questions(), session.all_answers(),
            )
        except GenerationError as e:
            return StepResult.recoverable(e)

        session.writeup = writeup
        advance_step(session, SessionStep.GENERATE_FILE_STRUCTURE)
        self.store.save(session)
        self._notify(f"Technical specification generated ({summarize_writeup(writeup)})")

        if not self.collector.confirm_continue("Generate file structure?"):
            return StepResult.finalize()
        return StepResult.advance()

    async def _file_structure(self, session: Session) -> StepResult:
        if not session.writeup:
            return StepResult.fatal(WorkflowError(
                f"Session {session.id} is at the file structure step without a writeup"
            ))

        if session.file_structure is None:
            self._notify("Generating file structure...")
            try:
                session.file_structure = await self.gateway.generate_file_structure(session.writeup)
            except GenerationError as e:
                return StepResult.recoverable(e)
            self.store.save(session)
            lines = len([line for line in session.file_structure.splitlines() if line.strip()])
            self._notify(f"File structure generated ({lines} entries)")

        if not self.collector.confirm_continue("Convert to JSON format?"):
            self.store.save(session)
            return StepResult.finalize()

        self._notify("Converting file structure to JSON...")
        try:
            tree = await self.gateway.convert_to_json(session.file_structure)
        except GenerationError as e:
            return StepResult.recoverable(e)

        session.file_structure_json = tree
        advance_step(session, SessionStep.CONVERT_TO_JSON)
        self.store.save(session)
        self._notify(f"File structure converted ({tree.count()} nodes)")
        return StepResult.complete()

    async def _converted(self, session: Session) -> StepResult:
        return StepResult.complete()
