"""
Data structures for the makeaplan system.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional


Provider = Literal["anthropic", "openai"]
ExportFormat = Literal["markdown", "json", "both"]


class SessionStep(Enum):
    """Position of a session in the fixed, linear workflow.

    Members compare by their position in the workflow, never by value.
    """

    INITIAL_IDEA = "INITIAL_IDEA"
    QUESTIONS_ROUND_1 = "QUESTIONS_ROUND_1"
    QUESTIONS_ROUND_2 = "QUESTIONS_ROUND_2"
    QUESTIONS_ROUND_3 = "QUESTIONS_ROUND_3"
    FINAL_WRITEUP = "FINAL_WRITEUP"
    GENERATE_FILE_STRUCTURE = "GENERATE_FILE_STRUCTURE"
    CONVERT_TO_JSON = "CONVERT_TO_JSON"

    @property
    def ordinal(self) -> int:
        return _STEP_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self is SessionStep.CONVERT_TO_JSON

    def next(self) -> "SessionStep":
        """Return the step that follows this one (the terminal step returns itself)."""
        if self.is_terminal:
            return self
        return _STEP_ORDER[self.ordinal + 1]

    def __lt__(self, other):
        if not isinstance(other, SessionStep):
            return NotImplemented
        return self.ordinal < other.ordinal

    def __le__(self, other):
        if not isinstance(other, SessionStep):
            return NotImplemented
        return self.ordinal <= other.ordinal

    def __gt__(self, other):
        if not isinstance(other, SessionStep):
            return NotImplemented
        return self.ordinal > other.ordinal

    def __ge__(self, other):
        if not isinstance(other, SessionStep):
            return NotImplemented
        return self.ordinal >= other.ordinal


_STEP_ORDER = tuple(SessionStep)

QUESTION_STEPS = (
    SessionStep.QUESTIONS_ROUND_1,
    SessionStep.QUESTIONS_ROUND_2,
    SessionStep.QUESTIONS_ROUND_3,
)

MAX_ROUNDS = len(QUESTION_STEPS)


def utcnow() -> datetime:
    """Timezone-aware current time; all session timestamps use UTC."""
    return datetime.now(timezone.utc)


@dataclass
class Question:
    """A generated multiple-choice question."""
    question: str
    choices: list[str] = field(default_factory=list)


@dataclass
class QuestionRound:
    """One round of questions and the user's index-aligned answers ("" = skipped)."""
    round_number: int
    questions: list[Question]
    answers: list[str]
    timestamp: datetime = field(default_factory=utcnow)

    def qa_pairs(self) -> list[tuple[str, str]]:
        return [
            (q.question, self.answers[i] if i < len(self.answers) else "")
            for i, q in enumerate(self.questions)
        ]


@dataclass
class FileStructureItem:
    """A node of the generated project tree."""
    type: Literal["file", "directory"]
    name: str
    description: Optional[str] = None
    children: Optional[list["FileStructureItem"]] = None

    def count(self) -> int:
        """Number of nodes in this subtree, including this one."""
        return 1 + sum(child.count() for child in self.children or [])


@dataclass(frozen=True)
class SessionConfig:
    """Generation parameters chosen when the session is created."""
    first_round_questions: int = 5
    subsequent_round_questions: int = 5
    answers_per_question: int = 4
    provider: Provider = "anthropic"
    model: Optional[str] = None

    def questions_for_round(self, round_number: int) -> int:
        if round_number == 1:
            return self.first_round_questions
        return self.subsequent_round_questions


@dataclass
class Session:
    """The unit of persisted work.

    ``id``, ``idea``, ``created_at`` and ``config`` never change after
    creation. ``current_step`` is only moved forward by the workflow engine.
    """
    id: str
    idea: str
    config: SessionConfig
    current_step: SessionStep = SessionStep.INITIAL_IDEA
    question_rounds: list[QuestionRound] = field(default_factory=list)
    writeup: Optional[str] = None
    file_structure: Optional[str] = None
    file_structure_json: Optional[FileStructureItem] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def all_questions(self) -> list[str]:
        return [q.question for r in self.question_rounds for q in r.questions]

    def all_answers(self) -> list[str]:
        return [a for r in self.question_rounds for a in r.answers]

    def prior_qa(self) -> list[dict[str, str]]:
        """Flattened question/answer context from every recorded round."""
        return [
            {"question": question, "answer": answer}
            for r in self.question_rounds
            for question, answer in r.qa_pairs()
        ]


SUMMARY_IDEA_LENGTH = 50


@dataclass
class SessionSummary:
    """Listing entry for a stored session."""
    id: str
    idea: str
    updated_at: datetime
    step: SessionStep

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        idea = session.idea[:SUMMARY_IDEA_LENGTH]
        if len(session.idea) > SUMMARY_IDEA_LENGTH:
            idea += "..."
        return cls(
            id=session.id,
            idea=idea,
            updated_at=session.updated_at,
            step=session.current_step,
        )
