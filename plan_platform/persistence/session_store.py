"""Platform-owned session store.

Each session lives in ``<sessions_dir>/<id>.json`` as the latest full
snapshot, serialised through the v1 ``SessionRecord`` contract.
"""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from contracts.v1.adapters import record_to_session, session_to_record
from contracts.v1.schemas import SessionRecord
from plan_platform.errors import StorageError, ValidationError
from plan_platform.models import Session, SessionConfig, SessionSummary, utcnow

logger = logging.getLogger(__name__)

SESSION_ID_LENGTH = 8


class SessionStore:
    """CRUD operations for planning sessions."""

    def __init__(self, sessions_dir: Path):
        self.sessions_dir = Path(sessions_dir)

    def get_session_file_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    def _ensure_dir(self) -> None:
        try:
            self.sessions_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create sessions directory {self.sessions_dir}: {e}") from e

    def create(self, idea: str, config: SessionConfig) -> Session:
        """Create and persist a new session at the first step."""
        now = utcnow()
        session = Session(
            id=uuid.uuid4().hex[:SESSION_ID_LENGTH],
            idea=idea,
            config=config,
            created_at=now,
            updated_at=now,
        )
        self._write(session)
        logger.info("Created session %s", session.id)
        return session

    def save(self, session: Session) -> None:
        """Stamp ``updated_at`` and write the full snapshot atomically."""
        session.updated_at = utcnow()
        self._write(session)
        logger.debug("Saved session %s at %s", session.id, session.current_step.value)

    def _write(self, session: Session) -> None:
        self._ensure_dir()
        payload = session_to_record(session).model_dump_json(by_alias=True, indent=2)
        target = self.get_session_file_path(session.id)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.sessions_dir, prefix=f".{session.id}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise StorageError(f"Failed to save session {session.id}: {e}") from e

    def load(self, session_id: str) -> Optional[Session]:
        """Load a session by id, or None if it is missing or unreadable."""
        path = self.get_session_file_path(session_id)
        if not path.exists():
            return None
        return self._read(path)

    def _read(self, path: Path) -> Optional[Session]:
        try:
            record = SessionRecord.model_validate_json(path.read_bytes())
        except OSError as e:
            logger.warning("Could not read session file %s: %s", path, e)
            return None
        except PydanticValidationError as e:
            logger.warning("Ignoring corrupt session file %s (%d error(s))", path, e.error_count())
            return None
        return record_to_session(record)

    def _load_all(self) -> list[Session]:
        if not self.sessions_dir.exists():
            return []
        try:
            paths = sorted(self.sessions_dir.glob("*.json"))
        except OSError as e:
            logger.warning("Could not scan sessions directory %s: %s", self.sessions_dir, e)
            return []

        sessions = []
        for path in paths:
            session = self._read(path)
            if session is not None:
                sessions.append(session)
        return sessions

    def list(self) -> list[SessionSummary]:
        """List all readable sessions, most recently updated first."""
        sessions = sorted(self._load_all(), key=lambda s: s.updated_at, reverse=True)
        return [SessionSummary.from_session(s) for s in sessions]

    def delete(self, session_id: str) -> bool:
        """Delete a session file. Returns False when there was nothing to delete."""
        path = self.get_session_file_path(session_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not delete session file %s: %s", path, e)
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def _stale(self, days: int) -> list[Session]:
        if days < 0:
            raise ValidationError(f"days must be zero or positive, got {days}")
        cutoff = utcnow() - timedelta(days=days)
        return [s for s in self._load_all() if s.updated_at < cutoff]

    def older_than(self, days: int) -> list[SessionSummary]:
        """Sessions not updated in the last ``days`` days, oldest first."""
        stale = sorted(self._stale(days), key=lambda s: s.updated_at)
        return [SessionSummary.from_session(s) for s in stale]

    def clean_older_than(self, days: int) -> int:
        """Delete sessions not updated in the last ``days`` days. Returns the count."""
        deleted = 0
        for session in self._stale(days):
            if self.delete(session.id):
                deleted += 1
        return deleted
