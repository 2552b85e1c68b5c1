from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from agegate.config import GateSettings
from agegate.gate.dob import InvalidDob, age_from_iso, normalize_dob
from agegate.gate.errors import (
    InvalidDobFormat,
    InvalidToken,
    MissingDob,
    MissingToken,
    UnsupportedAction,
)
from agegate.gate.frequency import pass_marker, should_prompt
from agegate.gate.paths import gate_applies
from agegate.gate.tokens import TokenStore
from agegate.session.context import (
    KEY_LAST_PASS,
    KEY_SESSION_PASSED,
    KEY_STATE,
    STATE_DENIED,
    STATE_PASSED,
    SessionContext,
)

ACTIONS = ("yes", "no", "dob")


def mark_passed(session: SessionContext, frequency: str, now: datetime) -> None:
    session.set(KEY_STATE, STATE_PASSED)
    session.set(KEY_SESSION_PASSED, True)
    marker = pass_marker(frequency, now)
    if marker is None:
        session.remove(KEY_LAST_PASS)
    else:
        session.set(KEY_LAST_PASS, marker)


def mark_denied(session: SessionContext) -> None:
    session.set(KEY_STATE, STATE_DENIED)
    session.remove(KEY_SESSION_PASSED)
    session.remove(KEY_LAST_PASS)


def reset(session: SessionContext) -> None:
    session.clear()


def verify(
    session: SessionContext,
    settings: GateSettings,
    action: Optional[str],
    token: Optional[str],
    dob: Optional[str],
    now: datetime,
) -> Dict:
    """
    Handle one verification request.

    The token is consumed before anything else is looked at; the session is
    saved before returning. Client errors are raised as VerificationError
    subclasses, which leave the session state untouched.
    """
    if not token:
        raise MissingToken()
    if not TokenStore(session).consume(token):
        raise InvalidToken()

    payload: Dict = {"ok": True}

    if action == "yes":
        passed = True
    elif action == "no":
        passed = False
    elif action == "dob":
        if settings.method != "dob":
            raise UnsupportedAction()
        if not dob:
            raise MissingDob()
        try:
            iso = normalize_dob(dob, settings.date_format)
        except InvalidDob:
            raise InvalidDobFormat()
        age = age_from_iso(iso, now.date())
        payload["age"] = age
        passed = age >= settings.min_age
    else:
        raise UnsupportedAction()

    if passed:
        mark_passed(session, settings.frequency, now)
        payload["result"] = "passed"
        redirect = settings.redirect_success
    else:
        mark_denied(session)
        payload["result"] = "denied"
        redirect = settings.redirect_failure
    session.save()

    if redirect:
        payload["redirect"] = redirect
    return payload


def gate_status(
    session: SessionContext,
    settings: GateSettings,
    path: Optional[str],
    now: datetime,
) -> Dict:
    """Whether this visitor should see the gate on `path` right now."""
    applies = gate_applies(path or "/", settings.path_mode, settings.path_patterns)
    state = session.state
    if not settings.enabled or not applies:
        prompt = False
    else:
        prompt = should_prompt(
            settings.frequency,
            session.get(KEY_LAST_PASS),
            now,
            session_passed=bool(session.get(KEY_SESSION_PASSED)),
        )
    return {
        "enabled": settings.enabled,
        "applies": applies,
        "prompt": prompt,
        "state": state,
    }
