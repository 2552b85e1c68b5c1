from __future__ import annotations

import secrets
from datetime import datetime, timezone

from flask import current_app, session

from agegate.session.context import SessionContext

SID_KEY = "avs_sid"
EXTENSION = "agegate"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def now() -> datetime:
    """Current time from the app's clock (tests inject a fixed one)."""
    return current_app.extensions[EXTENSION]["clock"]()


def current_session() -> SessionContext:
    """
    The gate session for this request. The sid lives in Flask's signed
    cookie; everything else lives in the configured store.
    """
    sid = session.get(SID_KEY)
    if not sid:
        sid = secrets.token_urlsafe(24)
        session[SID_KEY] = sid
        session.permanent = True
    return SessionContext(sid, current_app.extensions[EXTENSION]["store"])
