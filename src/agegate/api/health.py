from __future__ import annotations
from datetime import datetime, timezone
from flask import Blueprint, current_app, jsonify

from agegate import config
from agegate.db import mongo
from agegate.session.mongo_store import MongoSessionStore
from agegate.session.web import EXTENSION

bp = Blueprint("api_health", __name__)


@bp.get("/health")
def health():
    now = datetime.now(timezone.utc).isoformat()
    store = current_app.extensions[EXTENSION]["store"]
    uses_mongo = isinstance(store, MongoSessionStore)
    settings = config.gate_settings()

    return jsonify({
        "ok": True,
        "time_utc": now,
        "env": {
            "flask_env": config.FLASK_ENV,
            "cors_origins": config.CORS_ORIGINS,
        },
        "config": {
            "session_store": type(store).__name__,
            "mongo_db": config.MONGO_DB,
            "enabled": settings.enabled,
            "method": settings.method,
            "min_age": settings.min_age,
            "frequency": settings.frequency,
        },
        "db": {
            # memory sessions never touch Mongo
            "ping": mongo.ping() if uses_mongo else None,
        },
    })
