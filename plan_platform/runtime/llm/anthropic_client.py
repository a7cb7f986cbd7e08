"""
Anthropic messages API client.
"""

import logging
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from plan_platform.errors import GenerationError

from .base import LLMClient, LLMResponse, LLMToolResponse

logger = logging.getLogger(__name__)


def _stopped_at_limit(message) -> bool:
    return getattr(message, "stop_reason", None) == "max_tokens"


def _text_blocks(message) -> list[str]:
    return [block.text for block in message.content if getattr(block, "type", None) == "text"]


class AnthropicClient(LLMClient):
    """Claude models. Tool definitions are already in the native shape."""

    provider = "anthropic"

    def __init__(self, api_key: str):
        self._client = AsyncAnthropic(api_key=api_key)

    def _base_request(self, model: str, max_tokens: int, messages: list[dict],
                      system: Optional[str]) -> dict:
        request = {"model": model, "max_tokens": max_tokens, "messages": messages}
        if system is not None:
            request["system"] = system
        return request

    def _tool_options(self, tool_schema: dict, tool_name: str) -> dict:
        return {"tools": [tool_schema], "tool_choice": {"type": "tool", "name": tool_name}}

    async def _send(self, request: dict):
        try:
            return await self._client.messages.create(**request)
        except anthropic.APIError as e:
            logger.debug("Anthropic request for %s failed", request.get("model"), exc_info=True)
            raise GenerationError(f"Anthropic API error: {e}") from e

    def _read_text(self, message) -> LLMResponse:
        return LLMResponse(text="".join(_text_blocks(message)), truncated=_stopped_at_limit(message))

    def _read_tool_call(self, message, tool_name: str) -> LLMToolResponse:
        calls = [
            block.input for block in message.content
            if block.type == "tool_use" and block.name == tool_name
        ]
        return LLMToolResponse(
            tool_input=calls[0] if calls else {},
            truncated=_stopped_at_limit(message),
            raw_text="\n".join(_text_blocks(message)),
        )
