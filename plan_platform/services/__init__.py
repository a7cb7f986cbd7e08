"""Platform services built over the runtime LLM layer."""

from .generation_service import LLMGenerationGateway

__all__ = ["LLMGenerationGateway"]
