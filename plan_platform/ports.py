"""Ports the workflow engine depends on: generation and answer collection."""

from __future__ import annotations

from typing import Protocol

from .models import ExportFormat, FileStructureItem, Question


class GenerationGateway(Protocol):
    """Port for the four language-model generation steps.

    Every call may suspend on network I/O and may raise ``GenerationError``.
    No call retries internally.
    """

    async def generate_questions(
        self,
        idea: str,
        round_number: int,
        prior_qa: list[dict[str, str]],
        *,
        questions_count: int,
        answers_per_question: int,
    ) -> list[Question]:
        ...

    async def generate_writeup(
        self,
        idea: str,
        all_questions: list[str],
        all_answers: list[str],
    ) -> str:
        ...

    async def generate_file_structure(self, writeup: str) -> str:
        ...

    async def convert_to_json(self, file_structure: str) -> FileStructureItem:
        ...


class AnswerCollector(Protocol):
    """Port for the user-facing prompts the workflow needs."""

    def ask_questions(self, questions: list[Question], round_number: int) -> list[str]:
        """Return one answer per question, in order ("" means skipped)."""
        ...

    def confirm_continue(self, prompt: str = "Continue to next step?") -> bool:
        ...

    def select_export_format(self) -> ExportFormat:
        ...
