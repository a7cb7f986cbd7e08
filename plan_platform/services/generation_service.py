"""
LLM-backed generation gateway.

Implements the ``GenerationGateway`` port over the provider-agnostic
``LLMClient``: questions and the JSON conversion use forced tool calls,
the writeup and file structure are plain text extracted from tags.
"""

import json
import logging
import re

from pydantic import ValidationError as PydanticValidationError

from contracts.v1.adapters import parse_file_tree
from contracts.v1.schemas import GeneratedQuestionsContract
from plan_platform.errors import GenerationError
from plan_platform.models import FileStructureItem, Question
from plan_platform.runtime.config import resolve_model
from plan_platform.runtime.llm import LLMClient, LLMToolResponse
from plan_platform.runtime.prompts import (
    FILE_TREE_TOOL,
    QUESTIONS_TOOL,
    SYSTEM_PROMPT,
    get_file_structure_prompt,
    get_json_conversion_prompt,
    get_questions_prompt,
    get_writeup_prompt,
)

logger = logging.getLogger(__name__)

_QUESTION_RE = re.compile(
    r"<question>[\s\S]*?<text>([\s\S]*?)</text>[\s\S]*?<choices>([\s\S]*?)</choices>[\s\S]*?</question>"
)
_CHOICE_RE = re.compile(r"<choice>([\s\S]*?)</choice>")


def extract_tagged(text: str, tag: str) -> str:
    """Return the body of the first ``<tag>`` block, or the whole text stripped."""
    match = re.search(rf"<{tag}>([\s\S]*?)</{tag}>", text)
    return match.group(1).strip() if match else text.strip()


def parse_questions_text(text: str) -> list[Question]:
    """Parse ``<question><text/><choices/></question>`` blocks from plain text."""
    questions = []
    for match in _QUESTION_RE.finditer(text):
        choices = [c.strip() for c in _CHOICE_RE.findall(match.group(2))]
        questions.append(Question(question=match.group(1).strip(), choices=choices))
    return questions


def extract_json_text(text: str) -> str:
    """Isolate the JSON object in a free-text reply (tags, code fences, prose)."""
    body = extract_tagged(text, "json")
    body = re.sub(r"^```(?:json)?\s*", "", body, flags=re.IGNORECASE)
    body = re.sub(r"\s*```$", "", body)
    start = body.find("{")
    end = body.rfind("}")
    if start != -1 and end > start:
        body = body[start:end + 1]
    return body


def _unwrap_tree_payload(data):
    """The tool payload nests the tree under ``root``; bare trees are accepted too."""
    if isinstance(data, dict) and "root" in data and "name" not in data:
        return data["root"]
    return data


class LLMGenerationGateway:
    """``GenerationGateway`` backed by an ``LLMClient``."""

    def __init__(self, client: LLMClient, model: str, max_tokens: int):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def for_session_config(cls, client: LLMClient, provider: str,
                           model_name: str | None = None) -> "LLMGenerationGateway":
        cfg = resolve_model(provider, model_name)
        return cls(client, model=cfg["id"], max_tokens=cfg["max_tokens"])

    async def _text(self, prompt: str) -> str:
        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
            system=SYSTEM_PROMPT,
        )
        if not response.text.strip():
            raise GenerationError("Model returned an empty response.")
        return response.text

    async def _tool(self, prompt: str, tool: dict) -> LLMToolResponse:
        return await self.client.create_message_with_tool(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
            tool_schema=tool,
            tool_name=tool["name"],
            system=SYSTEM_PROMPT,
        )

    async def generate_questions(self, idea: str, round_number: int,
                                 prior_qa: list[dict[str, str]], *,
                                 questions_count: int,
                                 answers_per_question: int) -> list[Question]:
        prompt = get_questions_prompt(
            idea, round_number, prior_qa, questions_count, answers_per_question,
        )
        response = await self._tool(prompt, QUESTIONS_TOOL)

        if response.tool_input:
            try:
                payload = GeneratedQuestionsContract.model_validate(response.tool_input)
            except PydanticValidationError as e:
                raise GenerationError(
                    f"Question payload did not match the expected shape: {e.error_count()} error(s).",
                    raw_output=json.dumps(response.tool_input)[:2000],
                ) from e
            questions = [Question(question=q.question, choices=list(q.choices)) for q in payload.questions]
        else:
            logger.info("No submit_questions tool call; parsing text reply for round %d", round_number)
            questions = parse_questions_text(response.raw_text)

        if not questions:
            raise GenerationError(
                f"No questions could be parsed for round {round_number}.",
                raw_output=response.raw_text[:2000],
            )
        logger.debug("Round %d: %d question(s) generated", round_number, len(questions))
        return questions

    async def generate_writeup(self, idea: str, all_questions: list[str],
                               all_answers: list[str]) -> str:
        text = await self._text(get_writeup_prompt(idea, all_questions, all_answers))
        return extract_tagged(text, "writeup")

    async def generate_file_structure(self, writeup: str) -> str:
        text = await self._text(get_file_structure_prompt(writeup))
        return extract_tagged(text, "filestructure")

    async def convert_to_json(self, file_structure: str) -> FileStructureItem:
        response = await self._tool(get_json_conversion_prompt(file_structure), FILE_TREE_TOOL)

        if response.tool_input:
            data = _unwrap_tree_payload(response.tool_input)
            raw = json.dumps(response.tool_input)
        else:
            raw = extract_json_text(response.raw_text)
            try:
                data = _unwrap_tree_payload(json.loads(raw))
            except json.JSONDecodeError as e:
                raise GenerationError(
                    f"File structure conversion returned invalid JSON: {e}",
                    raw_output=raw[:2000],
                ) from e

        try:
            return parse_file_tree(data)
        except PydanticValidationError as e:
            raise GenerationError(
                f"File structure JSON did not match the expected tree shape: {e.error_count()} error(s).",
                raw_output=raw[:2000],
            ) from e
