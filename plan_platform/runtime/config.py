"""
Configuration constants for the makeaplan system.
"""

import os
from pathlib import Path


# Available models with their API identifiers, provider, and token limits
AVAILABLE_MODELS = {
    # --- Anthropic / Claude ---
    "opus":        {"id": "claude-opus-4-1-20250805",   "provider": "anthropic", "max_tokens": 8192, "label": "Opus 4.1 (deepest specs)"},
    "sonnet":      {"id": "claude-sonnet-4-20250514",   "provider": "anthropic", "max_tokens": 8192, "label": "Sonnet 4 (balanced)"},
    "haiku":       {"id": "claude-3-5-haiku-20241022",  "provider": "anthropic", "max_tokens": 4096, "label": "Haiku 3.5 (fast & cheap)"},
    # --- OpenAI ---
    "gpt-4o":      {"id": "gpt-4o",      "provider": "openai", "max_tokens": 8192, "label": "GPT-4o (balanced)"},
    "gpt-4o-mini": {"id": "gpt-4o-mini", "provider": "openai", "max_tokens": 4096, "label": "GPT-4o Mini (fast & cheap)"},
    "o3":          {"id": "o3",          "provider": "openai", "max_tokens": 8192, "label": "o3 (reasoning)"},
}

SUPPORTED_PROVIDERS = ("anthropic", "openai")

DEFAULT_PROVIDER = "anthropic"

# Model used when a session does not name one explicitly
DEFAULT_MODEL_BY_PROVIDER = {
    "anthropic": "sonnet",
    "openai":    "gpt-4o",
}

# Environment variable names for API keys, keyed by provider
API_KEY_ENV_VARS = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai":    "OPENAI_API_KEY",
}

# A raw provider model id set here replaces the provider's default model
MODEL_ENV_VARS = {
    "anthropic": "ANTHROPIC_MODEL",
    "openai":    "OPENAI_MODEL",
}

DEFAULT_MAX_TOKENS = 4096

# Session configuration defaults and the ranges offered interactively
DEFAULT_FIRST_ROUND_QUESTIONS = 5
DEFAULT_SUBSEQUENT_ROUND_QUESTIONS = 5
DEFAULT_ANSWERS_PER_QUESTION = 4

FIRST_ROUND_QUESTIONS_RANGE = (2, 8)
SUBSEQUENT_ROUND_QUESTIONS_RANGE = (2, 6)
ANSWERS_PER_QUESTION_RANGE = (2, 6)

DEFAULT_CLEAN_DAYS = 30

SESSIONS_DIR_ENV = "MAKEAPLAN_SESSIONS_DIR"
DEFAULT_SESSIONS_DIR = Path.home() / ".makeaplan" / "sessions"


def resolve_model(provider: str, name: str | None = None) -> dict:
    """Resolve a provider/model short name pair to a model config dict.

    Returns dict with keys: id, provider, max_tokens, label.
    When ``name`` is None the provider default is used, and the provider's
    ``*_MODEL`` environment variable (if set) overrides its API id.
    Raises ValueError for an unknown provider, an unknown model name, or a
    model that belongs to a different provider.
    """
    if provider not in SUPPORTED_PROVIDERS:
        valid = ", ".join(SUPPORTED_PROVIDERS)
        raise ValueError(f"Unknown provider '{provider}'. Supported providers: {valid}")

    if name is None:
        cfg = dict(AVAILABLE_MODELS[DEFAULT_MODEL_BY_PROVIDER[provider]])
        override = os.environ.get(MODEL_ENV_VARS[provider], "").strip()
        if override:
            cfg["id"] = override
            cfg["label"] = f"{override} (from {MODEL_ENV_VARS[provider]})"
        return cfg

    if name not in AVAILABLE_MODELS:
        valid = ", ".join(k for k, v in AVAILABLE_MODELS.items() if v["provider"] == provider)
        raise ValueError(f"Unknown model '{name}'. Available {provider} models: {valid}")

    cfg = AVAILABLE_MODELS[name]
    if cfg["provider"] != provider:
        raise ValueError(f"Model '{name}' is served by '{cfg['provider']}', not '{provider}'")
    return dict(cfg)


def resolve_api_key(provider: str, explicit_key: str | None = None,
                    stored_key: str | None = None) -> str:
    """Get the API key for a provider.

    Priority:
        1. ``explicit_key`` if provided (e.g. from CLI ``--api-key``).
        2. The provider's environment variable (``ANTHROPIC_API_KEY`` or ``OPENAI_API_KEY``).
        3. ``stored_key`` from the user config file.

    Raises ValueError if no key is found.
    """
    if explicit_key:
        return explicit_key

    env_var = API_KEY_ENV_VARS.get(provider)
    if env_var:
        key = os.environ.get(env_var)
        if key:
            return key

    if stored_key:
        return stored_key

    raise ValueError(
        f"No API key for provider '{provider}'. "
        f"Pass --api-key or set the {API_KEY_ENV_VARS.get(provider, '???')} environment variable."
    )
