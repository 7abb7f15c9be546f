"""Post lifecycle: active / trashed / gone, crossed with unlocked / locked.

Every transition is a single conditional update against the store. The
filter names the post, its owner and the state the transition starts
from, so a post that is not the caller's, is missing, or has already
moved on matches nothing and the caller gets the same AuthError. Two
racing identical requests cannot both win.

Not gated:

* ``get_one`` is not owner-scoped; any authenticated user may read any
  post by id.
* ``update``, ``trash`` and ``recover`` ignore the lock.
"""

from __future__ import annotations

import logging

from pinnote.errors import AuthError, NotFoundError, ValidationError
from pinnote.models import Post
from pinnote.security import CredentialHasher
from pinnote.store import RecordStore, object_id

logger = logging.getLogger("pinnote.posts")

NOT_AUTHORIZED = "User not authorized or post not found"
DEFAULT_TITLE = "Untitled"
PIN_LENGTH = 4


def _title(title: str | None) -> str:
    title = title.strip() if title else ""
    return title or DEFAULT_TITLE


def _content(content: str | None) -> str:
    content = content.strip() if content else ""
    if not content:
        raise ValidationError("Content is required")
    return content


def _check_pin(pin: str | None) -> str:
    if not pin:
        raise ValidationError("PIN code required")
    if len(pin) != PIN_LENGTH:
        raise ValidationError(f"PIN code has {PIN_LENGTH} digits")
    return pin


class PostService:
    def __init__(self, store: RecordStore, hasher: CredentialHasher):
        self.store = store
        self.hasher = hasher

    # ── Reads ─────────────────────────────────────────────────

    def _present(self, docs: list[dict]) -> list[Post]:
        names = self.store.usernames({doc["user"] for doc in docs}) if docs else {}
        return [Post.from_document(doc, names.get(doc["user"])) for doc in docs]

    def _list(self, user_id: str, deleted: bool) -> list[Post]:
        owner = object_id(user_id)
        if owner is None:
            return []
        return self._present(self.store.find_posts({"user": owner, "deleted": deleted}))

    def list_active(self, user_id: str) -> list[Post]:
        return self._list(user_id, deleted=False)

    def list_trashed(self, user_id: str) -> list[Post]:
        return self._list(user_id, deleted=True)

    def get_one(self, post_id: str) -> Post | None:
        """Fetch any post by id, regardless of owner."""
        oid = object_id(post_id)
        doc = self.store.find_post({"_id": oid}) if oid is not None else None
        if doc is None:
            return None
        return self._present([doc])[0]

    # ── Transitions ───────────────────────────────────────────

    @staticmethod
    def _owned(post_id: str, user_id: str, **state) -> dict | None:
        """Owner-scoped filter for one post in a given prior state."""
        oid, owner = object_id(post_id), object_id(user_id)
        if oid is None or owner is None:
            return None
        return {"_id": oid, "user": owner, **state}

    def _transition(self, condition: dict | None, changes: dict) -> Post:
        post = self.store.update_post(condition, changes) if condition else None
        if post is None:
            raise AuthError(NOT_AUTHORIZED)
        return self._present([post])[0]

    def create(self, user_id: str, title: str | None, content: str | None) -> Post:
        content = _content(content)
        owner = object_id(user_id)
        if owner is None:
            raise AuthError("Invalid token")
        doc = self.store.insert_post(
            {
                "title": _title(title),
                "content": content,
                "user": owner,
                "deleted": False,
                "locked": False,
                "pin": None,
            }
        )
        logger.info("User %s created post %s", user_id, doc["_id"])
        return self._present([doc])[0]

    def update(self, user_id: str, post_id: str, title: str | None, content: str | None) -> Post:
        content = _content(content)
        post = self._transition(
            self._owned(post_id, user_id),
            {"title": _title(title), "content": content},
        )
        logger.info("User %s updated post %s", user_id, post_id)
        return post

    def trash(self, user_id: str, post_id: str) -> Post:
        post = self._transition(self._owned(post_id, user_id, deleted=False), {"deleted": True})
        logger.info("User %s trashed post %s", user_id, post_id)
        return post

    def recover(self, user_id: str, post_id: str) -> Post:
        post = self._transition(self._owned(post_id, user_id, deleted=True), {"deleted": False})
        logger.info("User %s recovered post %s", user_id, post_id)
        return post

    def lock(self, user_id: str, post_id: str, pin: str | None) -> Post:
        pin = _check_pin(pin)
        condition = self._owned(post_id, user_id, locked=False)
        post = self._transition(condition, {"locked": True, "pin": self.hasher.hash(pin)})
        logger.info("User %s locked post %s", user_id, post_id)
        return post

    def unlock(self, user_id: str, post_id: str, pin: str | None) -> Post:
        """Verify the PIN against the stored hash, then clear the lock.

        The lookup and the update are two round trips; the update still
        requires ``locked=True`` so a concurrent unlock cannot apply twice.
        """
        pin = _check_pin(pin)
        oid = object_id(post_id)
        current = self.store.find_post({"_id": oid}) if oid is not None else None
        if current is None:
            raise NotFoundError("Post not found")
        if not self.hasher.verify(pin, current.get("pin")):
            logger.info("Incorrect PIN for post %s from user %s", post_id, user_id)
            raise AuthError("Incorrect PIN code")

        condition = self._owned(post_id, user_id, locked=True)
        post = self._transition(condition, {"locked": False, "pin": None})
        logger.info("User %s unlocked post %s", user_id, post_id)
        return post

    def purge(self, user_id: str, post_id: str) -> Post:
        """Remove the post permanently, whatever its state."""
        condition = self._owned(post_id, user_id)
        doc = self.store.delete_post(condition) if condition else None
        if doc is None:
            raise AuthError(NOT_AUTHORIZED)
        logger.info("User %s purged post %s", user_id, post_id)
        return self._present([doc])[0]
