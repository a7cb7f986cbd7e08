"""
Provider name to ``LLMClient`` lookup.
"""

import importlib

from plan_platform.runtime.config import SUPPORTED_PROVIDERS

from .base import LLMClient

# provider -> (module inside this package, class name, pip distribution)
CLIENT_CLASSES = {
    "anthropic": ("anthropic_client", "AnthropicClient", "anthropic"),
    "openai": ("openai_client", "OpenAIClient", "openai"),
}


def create_client(provider: str, api_key: str) -> LLMClient:
    """Instantiate the client for ``provider`` (case-insensitive).

    The provider module is imported on first use, so a missing SDK only
    matters for the provider actually chosen.

    Raises:
        ValueError: unknown provider.
        ImportError: the provider's SDK is not installed.
    """
    provider = provider.lower().strip()
    if provider not in CLIENT_CLASSES:
        valid = ", ".join(SUPPORTED_PROVIDERS)
        raise ValueError(f"Unknown LLM provider '{provider}'. Supported providers: {valid}")

    module_name, class_name, distribution = CLIENT_CLASSES[provider]
    try:
        module = importlib.import_module(f"{__package__}.{module_name}")
    except ImportError as e:
        raise ImportError(
            f"The '{distribution}' package is required for {provider} models. "
            f"Install it with: pip install {distribution}"
        ) from e
    return getattr(module, class_name)(api_key=api_key)
