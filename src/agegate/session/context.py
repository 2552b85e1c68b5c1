from __future__ import annotations

from typing import Any, Dict, Optional, Set

from agegate.session.store import SessionStore

# Field names stored on a session record
KEY_STATE = "state"
KEY_SESSION_PASSED = "session_passed"
KEY_LAST_PASS = "last_pass_marker"

STATE_PASSED = "passed"
STATE_DENIED = "denied"


class SessionContext:
    """
    One visitor's gate session for the duration of a request.

    Reads are served from a lazily loaded copy of the record; `set`/`remove`
    are buffered until `save()`. Tokens bypass the buffer and go straight to
    the store (see TokenStore).
    """

    def __init__(self, sid: str, store: SessionStore) -> None:
        if not sid:
            raise ValueError("session id is required")
        self.sid = sid
        self.store = store
        self._data: Optional[Dict[str, Any]] = None
        self._pending: Dict[str, Any] = {}
        self._removed: Set[str] = set()

    def _loaded(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = self.store.load(self.sid)
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._pending:
            return self._pending[key]
        if key in self._removed:
            return default
        return self._loaded().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._removed.discard(key)
        self._pending[key] = value

    def remove(self, key: str) -> None:
        self._pending.pop(key, None)
        self._removed.add(key)

    @property
    def dirty(self) -> bool:
        return bool(self._pending or self._removed)

    def save(self) -> None:
        if not self.dirty:
            return
        self.store.save(self.sid, dict(self._pending), set(self._removed))
        data = self._loaded()
        for key in self._removed:
            data.pop(key, None)
        data.update(self._pending)
        self._pending.clear()
        self._removed.clear()

    def clear(self) -> None:
        """Drop the whole record, tokens included."""
        self.store.delete(self.sid)
        self._data = {}
        self._pending.clear()
        self._removed.clear()

    # --- gate state helpers ---

    @property
    def state(self) -> Optional[str]:
        return self.get(KEY_STATE)

    def is_passed(self) -> bool:
        return self.state == STATE_PASSED
