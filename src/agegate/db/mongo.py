from __future__ import annotations

import os
import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.server_api import ServerApi

# Always go through agegate.config so python-dotenv is applied
from agegate import config

SESSIONS_COLLECTION = "avs_sessions"

_CLIENT: Optional[MongoClient] = None


def _mongo_uri() -> str:
    # Prefer config (loads .env), fallback to raw env
    uri = getattr(config, "MONGODB_URI", None) or os.getenv("MONGODB_URI")
    if not uri:
        raise RuntimeError("MONGODB_URI is not set")
    return uri


def _db_name() -> str:
    return getattr(config, "MONGO_DB", None) or os.getenv("MONGO_DB") or "agegate"


def get_client() -> MongoClient:
    global _CLIENT
    if _CLIENT is not None:
        return _CLIENT
    _CLIENT = MongoClient(
        _mongo_uri(),
        serverSelectionTimeoutMS=5000,
        server_api=ServerApi("1"),
    )
    return _CLIENT


def get_db():
    return get_client()[_db_name()]


def get_collection(name: str):
    return get_db()[name]


def ping() -> bool:
    try:
        get_client().admin.command("ping")
        return True
    except Exception as e:
        logging.error("Mongo ping failed: %s", e)
        return False


def ensure_indexes(logger: Optional[logging.Logger] = None) -> None:
    """
    Safe to call on startup; creates the session indexes if they don't exist.

    `sid` is unique so upserts never fork a session, and `updated_at` carries
    a TTL so idle sessions (and their unconsumed tokens) expire.
    """
    try:
        coll = get_collection(SESSIONS_COLLECTION)
    except Exception as e:
        (logger or logging).warning("[ensure_indexes] skipped: %s", e)
        return

    try:
        coll.create_index([("sid", ASCENDING)], unique=True)
        coll.create_index(
            [("updated_at", ASCENDING)],
            expireAfterSeconds=int(config.SESSION_TTL_SECONDS),
        )
    except Exception as e:
        (logger or logging).warning("index create failed for %s: %s", SESSIONS_COLLECTION, e)
