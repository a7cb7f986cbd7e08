"""
Shared fixtures for makeaplan tests.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from plan_platform.errors import GenerationError
from plan_platform.exporter import Exporter
from plan_platform.models import (
    FileStructureItem,
    Question,
    QuestionRound,
    Session,
    SessionConfig,
    SessionStep,
    utcnow,
)
from plan_platform.persistence import SessionStore
from plan_platform.runtime.llm.base import LLMResponse, LLMToolResponse


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real user config, sessions and API keys."""
    monkeypatch.setenv("MAKEAPLAN_USER_CONFIG_PATH", str(tmp_path / "config" / "config.json"))
    monkeypatch.setenv("MAKEAPLAN_SESSIONS_DIR", str(tmp_path / "sessions"))
    for var in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_MODEL", "OPENAI_MODEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "sessions")


@pytest.fixture
def exporter(tmp_path):
    out = tmp_path / "exports"
    out.mkdir()
    return Exporter(out)


@pytest.fixture
def mock_llm_client():
    """Create a mock LLMClient.

    Provides the two abstract methods as AsyncMock instances:
    - create_message           → returns LLMResponse
    - create_message_with_tool → returns LLMToolResponse
    """
    client = AsyncMock()
    client.create_message = AsyncMock()
    client.create_message_with_tool = AsyncMock()
    return client


@pytest.fixture
def text_response():
    def _make(text: str, truncated: bool = False):
        return LLMResponse(text=text, truncated=truncated)
    return _make


@pytest.fixture
def tool_response():
    def _make(tool_input: dict | None = None, raw_text: str = ""):
        return LLMToolResponse(tool_input=tool_input or {}, raw_text=raw_text)
    return _make


def make_questions(count: int, choices: int, prefix: str = "Q") -> list[Question]:
    return [
        Question(
            question=f"{prefix}{i}?",
            choices=[f"{prefix}{i} option {c}" for c in range(1, choices + 1)],
        )
        for i in range(1, count + 1)
    ]


def sample_tree() -> FileStructureItem:
    return FileStructureItem(
        type="directory",
        name="todo-app",
        children=[
            FileStructureItem(type="file", name="README.md", description="Overview"),
            FileStructureItem(
                type="directory",
                name="src",
                children=[FileStructureItem(type="file", name="main.py")],
            ),
        ],
    )


class FakeGateway:
    """Scripted GenerationGateway that records every call."""

    def __init__(self, questions_per_round=None, writeup="# Spec\n\n## Overview\nText",
                 file_structure="todo-app/\n├── README.md\n└── src/\n    └── main.py",
                 tree=None):
        self.questions_per_round = questions_per_round
        self.writeup = writeup
        self.file_structure = file_structure
        self.tree = tree if tree is not None else sample_tree()
        self.calls = []
        self.fail = {}

    def fail_on(self, method: str, message: str = "provider unavailable"):
        self.fail[method] = GenerationError(message)

    def _check(self, method):
        if method in self.fail:
            raise self.fail[method]

    async def generate_questions(self, idea, round_number, prior_qa, *,
                                 questions_count, answers_per_question):
        self.calls.append(("generate_questions", round_number, list(prior_qa)))
        self._check("generate_questions")
        if self.questions_per_round is not None:
            return self.questions_per_round[round_number]
        return make_questions(questions_count, answers_per_question, prefix=f"R{round_number}Q")

    async def generate_writeup(self, idea, all_questions, all_answers):
        self.calls.append(("generate_writeup", list(all_questions), list(all_answers)))
        self._check("generate_writeup")
        return self.writeup

    async def generate_file_structure(self, writeup):
        self.calls.append(("generate_file_structure",))
        self._check("generate_file_structure")
        return self.file_structure

    async def convert_to_json(self, file_structure):
        self.calls.append(("convert_to_json",))
        self._check("convert_to_json")
        return self.tree

    def called(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class FakeCollector:
    """Scripted AnswerCollector: answers with the first choice, confirms by default."""

    def __init__(self, confirms=None, export_format="markdown", answers=None):
        self.confirms = list(confirms) if confirms is not None else []
        self.export_format = export_format
        self.answers = answers
        self.prompts = []
        self.asked_rounds = []

    def ask_questions(self, questions, round_number):
        self.asked_rounds.append(round_number)
        if self.answers is not None:
            return list(self.answers)
        return [q.choices[0] for q in questions]

    def confirm_continue(self, prompt="Continue to next step?"):
        self.prompts.append(prompt)
        return self.confirms.pop(0) if self.confirms else True

    def select_export_format(self):
        return self.export_format


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fake_collector():
    return FakeCollector()


def completed_round(round_number: int, count: int = 2, choices: int = 2) -> QuestionRound:
    questions = make_questions(count, choices, prefix=f"R{round_number}Q")
    return QuestionRound(
        round_number=round_number,
        questions=questions,
        answers=[q.choices[0] for q in questions],
    )


@pytest.fixture
def make_session():
    """Build an in-memory session positioned at ``step`` with consistent artifacts."""
    def _make(step: SessionStep = SessionStep.INITIAL_IDEA, idea: str = "Todo app",
              config: SessionConfig | None = None, session_id: str = "abcd1234",
              age_days: int = 0) -> Session:
        config = config or SessionConfig(first_round_questions=2, subsequent_round_questions=2,
                                         answers_per_question=2)
        when = utcnow() - timedelta(days=age_days)
        session = Session(id=session_id, idea=idea, config=config, current_step=step,
                          created_at=when, updated_at=when)
        rounds_done = min(max(step.ordinal - SessionStep.QUESTIONS_ROUND_1.ordinal, 0), 3)
        session.question_rounds = [completed_round(n) for n in range(1, rounds_done + 1)]
        if step >= SessionStep.GENERATE_FILE_STRUCTURE:
            session.writeup = "# Spec\n\n## Overview\nText"
        if step >= SessionStep.CONVERT_TO_JSON:
            session.file_structure = "todo-app/\n└── README.md"
            session.file_structure_json = sample_tree()
        return session
    return _make
