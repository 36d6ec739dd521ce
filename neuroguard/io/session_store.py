"""Session persistence.

A completed scanning session is summarized into a :class:`SessionRecord`
and handed to a :class:`SessionStore`. Two stores are provided: an
in-memory one and a small JSON-file key-value store keyed by session id.
"""
from __future__ import annotations
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class SessionRecord(BaseModel):
    # Completed session summary
    model_config = ConfigDict(frozen=True)

    id: str
    started_at: datetime
    duration_s: float = Field(ge=0)
    avg_hr: int = Field(default=0, ge=0)
    avg_hrv: int = Field(default=0, ge=0)
    burnout_score: int = Field(default=0, ge=0, le=100)
    classification: str = "normal"
    ecg_samples: Optional[List[float]] = None


class SessionStore(Protocol):
    def save(self, record: SessionRecord) -> None: ...
    def get(self, session_id: str) -> Optional[SessionRecord]: ...
    def list_sessions(self) -> List[SessionRecord]: ...
    def delete(self, session_id: str) -> bool: ...


class InMemorySessionStore:
    def __init__(self):
        self._items: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: SessionRecord) -> None:
        with self._lock:
            self._items[record.id] = record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._items.get(session_id)

    def list_sessions(self) -> List[SessionRecord]:
        """Sessions, newest first."""
        with self._lock:
            items = list(self._items.values())
        return sorted(items, key=lambda r: r.started_at, reverse=True)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._items.pop(session_id, None) is not None


class JSONFileSessionStore:
    """Key-value store persisted as one JSON object ``{id: record}``.

    A missing or unreadable file is treated as an empty store; the file is
    rewritten atomically on every change.
    """
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, SessionRecord]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("expected a JSON object")
            return {k: SessionRecord.model_validate(v) for k, v in raw.items()}
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return {}

    def _dump(self, items: Dict[str, SessionRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = {k: v.model_dump(mode="json") for k, v in items.items()}
        tmp.write_text(json.dumps(payload), encoding="utf-8")
        tmp.replace(self.path)

    def save(self, record: SessionRecord) -> None:
        with self._lock:
            items = self._load()
            items[record.id] = record
            self._dump(items)
        log.info("Saved session %s", record.id)

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._load().get(session_id)

    def list_sessions(self) -> List[SessionRecord]:
        """Sessions, newest first."""
        with self._lock:
            items = list(self._load().values())
        return sorted(items, key=lambda r: r.started_at, reverse=True)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            items = self._load()
            if items.pop(session_id, None) is None:
                return False
            self._dump(items)
            return True
