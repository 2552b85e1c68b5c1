from __future__ import annotations

import traceback

from flask import Blueprint, current_app, jsonify, request, url_for

from agegate import config
from agegate.gate.errors import ServerError, VerificationError
from agegate.gate.tokens import TokenStore
from agegate.gate.verification import gate_status, reset, verify
from agegate.session.web import current_session, now

bp = Blueprint("api_gate", __name__)


@bp.after_request
def _no_store(resp):
    resp.headers["Cache-Control"] = "must-revalidate, no-cache, no-store, private"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


def _error(err: VerificationError):
    return jsonify(err.to_dict()), err.status


def _log_failure(where: str, exc: Exception) -> None:
    """
    Log an unexpected failure by type and location only. Exception messages
    can carry request values (tokens, DOBs), so they stay out of the log.
    """
    frames = traceback.extract_tb(exc.__traceback__)
    origin = f"{frames[-1].filename}:{frames[-1].lineno} in {frames[-1].name}" if frames else "?"
    current_app.logger.error("%s failed: %s at %s", where, type(exc).__name__, origin)


def _request_fields():
    """action/token/dob from a JSON body or a form post."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
    else:
        data = request.form

    def field(name):
        value = data.get(name)
        return None if value is None else str(value)

    return field("action"), field("token"), field("dob")


@bp.get("/token")
def token():
    """
    GET /api/token
    Issues a one-time token for this session: {"token": "<hex>"}.
    """
    try:
        tok = TokenStore(current_session()).issue()
    except Exception as e:
        _log_failure("token()", e)
        return _error(ServerError())
    return jsonify({"token": tok})


@bp.post("/verify")
def verify_route():
    """
    POST /api/verify  (form or JSON)  action=yes|no|dob, token=..., dob=...
    """
    try:
        action, tok, dob = _request_fields()
        payload = verify(
            current_session(),
            config.gate_settings(),
            action=action,
            token=tok,
            dob=dob,
            now=now(),
        )
    except VerificationError as e:
        current_app.logger.info("verify rejected: %s", e.message)
        return _error(e)
    except Exception as e:
        _log_failure("verify()", e)
        return _error(ServerError())
    return jsonify(payload)


@bp.get("/status")
def status():
    """
    GET /api/status?path=/some/page
    Tells the page whether to show the gate, plus what the modal needs.
    """
    try:
        settings = config.gate_settings()
        result = gate_status(current_session(), settings, request.args.get("path"), now())
    except Exception as e:
        _log_failure("status()", e)
        return _error(ServerError())

    return jsonify(
        {
            "ok": True,
            **result,
            "settings": {
                "method": settings.method,
                "min_age": settings.min_age,
                "date_format": settings.date_format,
                "frequency": settings.frequency,
                "redirects": {
                    "success": settings.redirect_success,
                    "failure": settings.redirect_failure,
                },
                "endpoints": {
                    "token": url_for("api.api_gate.token"),
                    "verify": url_for("api.api_gate.verify_route"),
                },
            },
        }
    )


@bp.post("/reset")
def reset_route():
    """POST /api/reset drops this visitor's gate state and tokens."""
    try:
        reset(current_session())
    except Exception as e:
        _log_failure("reset()", e)
        return _error(ServerError())
    return jsonify({"ok": True})
