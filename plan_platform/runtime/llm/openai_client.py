"""
OpenAI chat completions client.

The system prompt travels as a leading ``system`` message, and tool
definitions are rewrapped as ``function`` tools.
"""

import json
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from plan_platform.errors import GenerationError

from .base import LLMClient, LLMResponse, LLMToolResponse

logger = logging.getLogger(__name__)


def anthropic_tool_to_openai(tool_schema: dict) -> dict:
    """Rewrap a ``name``/``description``/``input_schema`` tool as an OpenAI function tool."""
    return {
        "type": "function",
        "function": {
            "name": tool_schema["name"],
            "description": tool_schema.get("description", ""),
            "parameters": tool_schema.get("input_schema", {}),
        },
    }


def build_openai_messages(messages: list[dict], system: Optional[str] = None) -> list[dict]:
    if not system:
        return list(messages)
    return [{"role": "system", "content": system}, *messages]


class OpenAIClient(LLMClient):
    """GPT and o-series models."""

    provider = "openai"

    def __init__(self, api_key: str):
        self._client = AsyncOpenAI(api_key=api_key)

    def _base_request(self, model: str, max_tokens: int, messages: list[dict],
                      system: Optional[str]) -> dict:
        # o-series models reject max_tokens; max_completion_tokens works for all
        return {
            "model": model,
            "max_completion_tokens": max_tokens,
            "messages": build_openai_messages(messages, system),
        }

    def _tool_options(self, tool_schema: dict, tool_name: str) -> dict:
        return {
            "tools": [anthropic_tool_to_openai(tool_schema)],
            "tool_choice": {"type": "function", "function": {"name": tool_name}},
        }

    async def _send(self, request: dict):
        try:
            return await self._client.chat.completions.create(**request)
        except openai.OpenAIError as e:
            logger.debug("OpenAI request for %s failed", request.get("model"), exc_info=True)
            raise GenerationError(f"OpenAI API error: {e}") from e

    def _read_text(self, completion) -> LLMResponse:
        choice = completion.choices[0]
        return LLMResponse(
            text=choice.message.content or "",
            truncated=choice.finish_reason == "length",
        )

    def _read_tool_call(self, completion, tool_name: str) -> LLMToolResponse:
        choice = completion.choices[0]
        result = LLMToolResponse(
            truncated=choice.finish_reason == "length",
            raw_text=choice.message.content or "",
        )
        for call in choice.message.tool_calls or []:
            name = getattr(call.function, "name", tool_name)
            if name != tool_name:
                continue
            try:
                result.tool_input = json.loads(call.function.arguments)
            except (json.JSONDecodeError, TypeError) as e:
                # Leave tool_input empty so the caller falls back to the prose
                logger.warning("Could not parse %s arguments: %s", tool_name, e)
                result.raw_text += f"\n[Parse error: {e}]"
            break
        return result
