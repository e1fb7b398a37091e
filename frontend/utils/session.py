"""
Local, non-verified login marker.

The session is a single ``{"email": ..., "isAuthenticated": true}`` object
kept under one key in a store. Stores are injected at the composition root
(``app.py``) so the pages never touch the storage medium directly.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError

logger = logging.getLogger(__name__)

SESSION_KEY = "psychlab_user"


class Session(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    is_authenticated: bool = Field(default=True, alias="isAuthenticated")

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SessionStore:
    """Key/value medium holding at most one serialized Session."""

    def read(self) -> str | None:
        raise NotImplementedError

    def write(self, value: str) -> None:
        raise NotImplementedError

    def delete(self) -> None:
        raise NotImplementedError

    def load(self) -> Session | None:
        raw = self.read()
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable session under key %s", SESSION_KEY)
            return None

    def save(self, session: Session) -> None:
        self.write(json.dumps(session.to_storage()))


class InMemorySessionStore(SessionStore):
    def __init__(self, initial: str | None = None):
        self._value = initial

    def read(self) -> str | None:
        return self._value

    def write(self, value: str) -> None:
        self._value = value

    def delete(self) -> None:
        self._value = None


class JsonFileSessionStore(SessionStore):
    """Keeps the session under ``SESSION_KEY`` inside a small JSON document on disk."""

    def __init__(self, path: str | Path, key: str = SESSION_KEY):
        self.path = Path(path)
        self.key = key

    def _document(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Session file %s is not valid JSON, ignoring it", self.path)
            return {}
        return document if isinstance(document, dict) else {}

    def read(self) -> str | None:
        return self._document().get(self.key)

    def write(self, value: str) -> None:
        document = self._document()
        document[self.key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document), encoding="utf-8")

    def delete(self) -> None:
        document = self._document()
        if self.key not in document:
            return
        del document[self.key]
        self.path.write_text(json.dumps(document), encoding="utf-8")


def login(store: SessionStore, email: str) -> Session:
    """Create and persist a session. Raises ValidationError for a malformed email."""
    session = Session(email=email.strip(), is_authenticated=True)
    store.save(session)
    return session


def logout(store: SessionStore) -> None:
    store.delete()
