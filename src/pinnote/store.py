"""MongoDB record store for users and posts.

One explicitly constructed value per process, opened by the application
lifespan and closed on shutdown. Mutations are single conditional
operations (find-and-update, find-and-delete): the filter carries the
owner and the required prior state, so a precondition that no longer
holds simply matches nothing.
"""

from __future__ import annotations

import functools
import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from pinnote.errors import ConflictError, InternalError

logger = logging.getLogger("pinnote.store")

USERS = "users"
POSTS = "posts"


def object_id(value: Any) -> ObjectId | None:
    """Parse an external id. Malformed ids become None and can never match."""
    if isinstance(value, ObjectId):
        return value
    if not value:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _guarded(method):
    """Turn driver failures into InternalError, logging the detail."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except PyMongoError as exc:
            logger.exception("Store operation %s failed", method.__name__)
            raise InternalError() from exc

    return wrapper


class RecordStore:
    """Users and posts in one MongoDB database."""

    def __init__(self, client: MongoClient, db_name: str):
        self._client = client
        self._db = client[db_name]
        self.users = self._db[USERS]
        self.posts = self._db[POSTS]

    @classmethod
    def connect(cls, uri: str, db_name: str, timeout_ms: int = 5000) -> RecordStore:
        client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
        store = cls(client, db_name)
        store.ensure_indexes()
        return store

    @_guarded
    def ensure_indexes(self) -> None:
        self.users.create_index([("username", ASCENDING)], unique=True)
        self.posts.create_index([("user", ASCENDING), ("deleted", ASCENDING)])

    def close(self) -> None:
        self._client.close()

    # ── Users ─────────────────────────────────────────────────

    @_guarded
    def find_user(self, condition: dict) -> dict | None:
        return self.users.find_one(condition)

    @_guarded
    def insert_user(self, document: dict) -> ObjectId:
        now = utcnow()
        document = {**document, "createdAt": now, "updatedAt": now}
        try:
            return self.users.insert_one(document).inserted_id
        except DuplicateKeyError as exc:
            raise ConflictError("Username already taken") from exc

    @_guarded
    def usernames(self, user_ids: Iterable[ObjectId]) -> dict[ObjectId, str]:
        cursor = self.users.find({"_id": {"$in": list(user_ids)}}, {"username": 1})
        return {doc["_id"]: doc["username"] for doc in cursor}

    # ── Posts ─────────────────────────────────────────────────

    @_guarded
    def find_posts(self, condition: dict) -> list[dict]:
        return list(self.posts.find(condition))

    @_guarded
    def find_post(self, condition: dict) -> dict | None:
        return self.posts.find_one(condition)

    @_guarded
    def insert_post(self, document: dict) -> dict:
        now = utcnow()
        document = {**document, "createdAt": now, "updatedAt": now}
        document["_id"] = self.posts.insert_one(document).inserted_id
        return document

    @_guarded
    def update_post(self, condition: dict, changes: dict) -> dict | None:
        """Atomically apply ``changes`` to the post matching ``condition``.

        Returns the post as it is after the update, or None when nothing
        matched.
        """
        return self.posts.find_one_and_update(
            condition,
            {"$set": {**changes, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )

    @_guarded
    def delete_post(self, condition: dict) -> dict | None:
        """Atomically remove the post matching ``condition`` and return it."""
        return self.posts.find_one_and_delete(condition)
