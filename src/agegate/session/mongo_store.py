from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable

from agegate.db import mongo

log = logging.getLogger(__name__)


class MongoSessionStore:
    """
    One document per session in `avs_sessions`:
      {sid, state, session_passed, last_pass_marker, tokens: [...], updated_at}
    Token consumption is a filtered $pull, so two requests racing on the same
    token cannot both match the document.
    """

    def __init__(self, collection_name: str = mongo.SESSIONS_COLLECTION) -> None:
        self.collection_name = collection_name

    @property
    def coll(self):
        # Looked up per call so tests can swap mongo.get_collection
        return mongo.get_collection(self.collection_name)

    def load(self, sid: str) -> Dict[str, Any]:
        doc = self.coll.find_one({"sid": sid}, {"_id": 0})
        if not doc:
            return {}
        doc.pop("sid", None)
        doc["tokens"] = list(doc.get("tokens") or [])
        return doc

    def save(self, sid: str, values: Dict[str, Any], removed: Iterable[str] = ()) -> None:
        to_set = {k: v for k, v in values.items() if k not in ("sid", "tokens", "_id")}
        to_set["updated_at"] = datetime.now(timezone.utc)
        update: Dict[str, Dict[str, Any]] = {"$set": to_set}
        to_unset = {k: "" for k in removed if k not in ("sid", "tokens", "_id") and k not in to_set}
        if to_unset:
            update["$unset"] = to_unset
        self.coll.update_one({"sid": sid}, update, upsert=True)

    def add_token(self, sid: str, token: str) -> None:
        self.coll.update_one(
            {"sid": sid},
            {
                "$addToSet": {"tokens": token},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            upsert=True,
        )

    def discard_token(self, sid: str, token: str) -> bool:
        res = self.coll.update_one(
            {"sid": sid, "tokens": token},
            {
                "$pull": {"tokens": token},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
        )
        return res.modified_count == 1

    def delete(self, sid: str) -> None:
        res = self.coll.delete_one({"sid": sid})
        log.debug("deleted session %s… (%d)", sid[:8], res.deleted_count)
