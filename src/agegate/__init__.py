import logging
from datetime import timedelta
from typing import Callable, Optional

from flask import Flask
from flask_cors import CORS


def create_app(testing: bool = False, store=None, clock: Optional[Callable] = None) -> Flask:
    from agegate import config
    from agegate.errors import register_error_handlers
    from agegate.session.store import build_store
    from agegate.session.web import EXTENSION, utcnow

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.SECRET_KEY
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(seconds=config.SESSION_TTL_SECONDS)
    if testing:
        app.config["TESTING"] = True
    app.logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
    CORS(app, origins=config.CORS_ORIGINS)

    if store is None:
        store = build_store(config.SESSION_BACKEND)
    app.extensions[EXTENSION] = {"store": store, "clock": clock or utcnow}

    # Session indexes only matter for the Mongo backend (safe to run multiple times)
    from agegate.session.mongo_store import MongoSessionStore
    if isinstance(store, MongoSessionStore):
        from agegate.db.mongo import ensure_indexes
        ensure_indexes(app.logger)

    register_error_handlers(app)

    from agegate.api import register_api
    register_api(app, url_prefix=config.API_PREFIX)

    return app
