"""Session store interface and the process-local backend."""

from __future__ import annotations

import copy
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Protocol

from agegate import config

# Outstanding tokens kept per session; each gate load asks for one
MAX_TOKENS_PER_SESSION = 32
SWEEP_INTERVAL = timedelta(minutes=1)


class SessionStore(Protocol):
    """
    Persistence for per-visitor gate sessions, keyed by an opaque `sid`.

    Plain fields go through `load`/`save`. The token set has its own
    operations because consuming a token must be a single atomic
    check-and-remove on the stored record.
    """

    def load(self, sid: str) -> Dict[str, Any]:
        ...

    def save(self, sid: str, values: Dict[str, Any], removed: Iterable[str] = ()) -> None:
        ...

    def add_token(self, sid: str, token: str) -> None:
        ...

    def discard_token(self, sid: str, token: str) -> bool:
        ...

    def delete(self, sid: str) -> None:
        ...


class MemorySessionStore:
    """
    Sessions held in a dict guarded by one lock.
    Good for a single process (dev server, tests); nothing survives a restart.

    Records idle for longer than `ttl_seconds` are dropped, tokens included,
    and each session keeps at most `max_tokens` outstanding tokens (oldest
    go first).
    """

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        max_tokens: int = MAX_TOKENS_PER_SESSION,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, Dict[str, Any]] = {}
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else config.SESSION_TTL_SECONDS)
        self.max_tokens = max_tokens
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._next_sweep: Optional[datetime] = None

    def _expired(self, rec: Dict[str, Any], now: datetime) -> bool:
        return now - rec["updated_at"] > self.ttl

    def _live(self, sid: str, now: datetime) -> Optional[Dict[str, Any]]:
        rec = self._records.get(sid)
        if rec is not None and self._expired(rec, now):
            del self._records[sid]
            return None
        return rec

    def _sweep(self, now: datetime) -> None:
        if self._next_sweep is not None and now < self._next_sweep:
            return
        self._next_sweep = now + min(self.ttl, SWEEP_INTERVAL)
        for sid in [s for s, rec in self._records.items() if self._expired(rec, now)]:
            del self._records[sid]

    def _record(self, sid: str) -> Dict[str, Any]:
        now = self._clock()
        rec = self._live(sid, now)
        if rec is None:
            # new sessions are the only way the map grows, so sweep here
            self._sweep(now)
            rec = {"tokens": {}}
            self._records[sid] = rec
        rec["updated_at"] = now
        return rec

    def load(self, sid: str) -> Dict[str, Any]:
        with self._lock:
            rec = self._live(sid, self._clock())
            if rec is None:
                return {}
            data = {k: copy.deepcopy(v) for k, v in rec.items() if k != "tokens"}
            data["tokens"] = list(rec["tokens"])
            return data

    def save(self, sid: str, values: Dict[str, Any], removed: Iterable[str] = ()) -> None:
        with self._lock:
            rec = self._record(sid)
            for key in removed:
                if key not in ("tokens", "updated_at"):
                    rec.pop(key, None)
            for key, value in values.items():
                if key not in ("tokens", "updated_at"):
                    rec[key] = copy.deepcopy(value)

    def add_token(self, sid: str, token: str) -> None:
        with self._lock:
            tokens = self._record(sid)["tokens"]
            tokens[token] = True
            while len(tokens) > self.max_tokens:
                del tokens[next(iter(tokens))]

    def discard_token(self, sid: str, token: str) -> bool:
        with self._lock:
            now = self._clock()
            rec = self._live(sid, now)
            if rec is None or token not in rec["tokens"]:
                return False
            del rec["tokens"][token]
            rec["updated_at"] = now
            return True

    def delete(self, sid: str) -> None:
        with self._lock:
            self._records.pop(sid, None)

    def __len__(self) -> int:
        return len(self._records)


def build_store(backend: Optional[str]) -> SessionStore:
    """Pick the backend named by SESSION_BACKEND ("mongo" or "memory")."""
    name = (backend or "memory").strip().lower()
    if name == "mongo":
        from agegate.session.mongo_store import MongoSessionStore
        return MongoSessionStore()
    if name == "memory":
        return MemorySessionStore()
    raise ValueError(f"unknown session backend: {backend!r}")
