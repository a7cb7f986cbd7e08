"""
Provider-neutral client interface for the generation steps.

A makeaplan run talks to a model in exactly two ways: a plain prompt that
returns prose (writeup, file structure) and a prompt that forces one tool
call (questions, JSON tree). ``LLMClient`` implements both flows once;
provider subclasses only build the SDK request and read the SDK response.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Text reply from a plain prompt."""

    text: str
    truncated: bool = False


@dataclass
class LLMToolResponse:
    """Reply from a prompt that forces a tool call.

    Attributes:
        tool_input: Arguments of the forced tool call, or ``{}`` when the
                    model answered in prose instead.
        truncated:  True if the reply stopped at the token limit.
        raw_text:   Prose that came with (or instead of) the call; the
                    generation service parses it when ``tool_input`` is empty.
    """

    tool_input: dict = field(default_factory=dict)
    truncated: bool = False
    raw_text: str = ""


class LLMClient(ABC):
    """Async client for one provider.

    Tool definitions are written once, in the ``name`` /
    ``description`` / ``input_schema`` shape used in ``runtime.prompts``;
    subclasses translate them in ``_tool_options``.

    SDK failures are raised as ``GenerationError`` by ``_send``.
    """

    provider: str = ""

    async def create_message(
        self,
        model: str,
        max_tokens: int,
        messages: list[dict],
        system: Optional[str] = None,
    ) -> LLMResponse:
        request = self._base_request(model, max_tokens, messages, system)
        result = self._read_text(await self._send(request))
        self._warn_if_truncated(result.truncated, model, max_tokens)
        return result

    async def create_message_with_tool(
        self,
        model: str,
        max_tokens: int,
        messages: list[dict],
        tool_schema: dict,
        tool_name: str,
        system: Optional[str] = None,
    ) -> LLMToolResponse:
        """Send ``messages`` and require a call to ``tool_name``."""
        request = self._base_request(model, max_tokens, messages, system)
        request.update(self._tool_options(tool_schema, tool_name))
        result = self._read_tool_call(await self._send(request), tool_name)
        self._warn_if_truncated(result.truncated, model, max_tokens)
        return result

    def _warn_if_truncated(self, truncated: bool, model: str, max_tokens: int):
        if truncated:
            logger.warning("%s reply from %s hit the %d token limit", self.provider, model, max_tokens)

    # --- provider hooks ---

    @abstractmethod
    def _base_request(self, model: str, max_tokens: int, messages: list[dict],
                      system: Optional[str]) -> dict:
        """Keyword arguments for the SDK call, without any tool options."""

    @abstractmethod
    def _tool_options(self, tool_schema: dict, tool_name: str) -> dict:
        """Extra keyword arguments that force ``tool_name``."""

    @abstractmethod
    async def _send(self, request: dict) -> Any:
        """Perform the SDK call."""

    @abstractmethod
    def _read_text(self, response: Any) -> LLMResponse:
        ...

    @abstractmethod
    def _read_tool_call(self, response: Any, tool_name: str) -> LLMToolResponse:
        ...
