"""User-level configuration persistence for makeaplan."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from plan_platform.runtime.config import (
    DEFAULT_PROVIDER,
    DEFAULT_SESSIONS_DIR,
    SESSIONS_DIR_ENV,
    SUPPORTED_PROVIDERS,
)

logger = logging.getLogger(__name__)


@dataclass
class UserConfig:
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    default_provider: str = DEFAULT_PROVIDER
    default_model: str | None = None
    sessions_dir: str | None = None

    def api_key_for(self, provider: str) -> str | None:
        return getattr(self, f"{provider}_api_key", None)

    def resolved_sessions_dir(self) -> Path:
        """Sessions directory: env override, then stored value, then the default."""
        override = os.environ.get(SESSIONS_DIR_ENV, "").strip()
        if override:
            return Path(override).expanduser()
        if self.sessions_dir:
            return Path(self.sessions_dir).expanduser()
        return DEFAULT_SESSIONS_DIR


def get_user_config_path() -> Path:
    """Return the user-level config file path.

    Uses a platform-appropriate location and supports an override via
    ``MAKEAPLAN_USER_CONFIG_PATH`` for tests.
    """
    override = os.environ.get("MAKEAPLAN_USER_CONFIG_PATH", "").strip()
    if override:
        return Path(override)

    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))
        return base / "makeaplan" / "config.json"

    return Path.home() / ".config" / "makeaplan" / "config.json"


def _clean_str(value) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    return None


def load_user_config() -> UserConfig:
    path = get_user_config_path()
    if not path.exists():
        return UserConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable user config %s: %s", path, e)
        return UserConfig()

    if not isinstance(data, dict):
        return UserConfig()

    provider = _clean_str(data.get("default_provider"))
    if provider not in SUPPORTED_PROVIDERS:
        provider = DEFAULT_PROVIDER

    return UserConfig(
        anthropic_api_key=_clean_str(data.get("anthropic_api_key")),
        openai_api_key=_clean_str(data.get("openai_api_key")),
        default_provider=provider,
        default_model=_clean_str(data.get("default_model")),
        sessions_dir=_clean_str(data.get("sessions_dir")),
    )


def save_user_config(config: UserConfig) -> None:
    path = get_user_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(config), indent=2), encoding="utf-8")


def reset_user_config() -> None:
    """Delete the stored config so every setting falls back to its default."""
    path = get_user_config_path()
    if path.exists():
        path.unlink()


def set_api_key(provider: str, api_key: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unknown provider '{provider}'")
    config = load_user_config()
    setattr(config, f"{provider}_api_key", api_key.strip() or None)
    save_user_config(config)


def clear_api_keys() -> None:
    config = load_user_config()
    config.anthropic_api_key = None
    config.openai_api_key = None
    save_user_config(config)


def mask_key(key: str | None) -> str:
    """Render a stored key for display without revealing it."""
    if not key:
        return "Not set"
    return "***" + key[-4:]
