"""Platform-owned persistence layer (one JSON file per session)."""

from .session_store import SessionStore
