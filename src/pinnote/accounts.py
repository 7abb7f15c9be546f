"""Registration, login and the caller's own profile."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from pathlib import Path

from bson import Binary

from pinnote.errors import AuthError, ConflictError, NotFoundError, ValidationError
from pinnote.models import Gender, Profile
from pinnote.security import CredentialHasher, TokenService
from pinnote.store import RecordStore, object_id

logger = logging.getLogger("pinnote.accounts")

DEFAULT_AVATAR = Path(__file__).resolve().parent / "static" / "avatar.png"

BAD_CREDENTIALS = "Incorrect username or password"


@dataclass(frozen=True)
class Avatar:
    data: bytes
    content_type: str = "image/png"


def load_avatar(path: str | Path | None = None) -> Avatar:
    """Read the default avatar assigned to new users."""
    path = Path(path) if path else DEFAULT_AVATAR
    content_type = mimetypes.guess_type(path.name)[0] or "image/png"
    return Avatar(data=path.read_bytes(), content_type=content_type)


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


class AccountService:
    def __init__(
        self,
        store: RecordStore,
        hasher: CredentialHasher,
        tokens: TokenService,
        avatar: Avatar,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.avatar = avatar

    def register(
        self,
        username: str | None,
        password: str | None,
        full_name: str | None,
        gender: str | None,
        birthday: date | None,
    ) -> str:
        """Create a user and return a token for it.

        Usernames are compared exactly (case-sensitive) after trimming.
        """
        username = _clean(username)
        full_name = _clean(full_name)
        if not username or not password or not full_name or not gender or not birthday:
            raise ValidationError("Missing information")
        try:
            gender = Gender(gender.strip())
        except ValueError:
            raise ValidationError("Gender must be one of Male, Female, Other") from None

        if self.store.find_user({"username": username}) is not None:
            raise ConflictError("Username already taken")

        user_id = self.store.insert_user(
            {
                "username": username,
                "password": self.hasher.hash(password),
                "fullname": full_name,
                "gender": gender.value,
                "birthday": datetime.combine(birthday, time.min, tzinfo=timezone.utc),
                "avatar": {
                    "data": Binary(self.avatar.data),
                    "contentType": self.avatar.content_type,
                },
            }
        )
        logger.info("Registered user %s", user_id)
        return self.tokens.issue(str(user_id))

    def login(self, username: str | None, password: str | None) -> str:
        username = _clean(username)
        if not username or not password:
            raise ValidationError("Missing username and/or password")

        user = self.store.find_user({"username": username})
        if user is None or not self.hasher.verify(password, user.get("password")):
            logger.info("Failed login attempt")
            raise AuthError(BAD_CREDENTIALS)

        logger.info("User %s logged in", user["_id"])
        return self.tokens.issue(str(user["_id"]))

    def _user(self, user_id: str) -> dict:
        oid = object_id(user_id)
        user = self.store.find_user({"_id": oid}) if oid is not None else None
        if user is None:
            raise NotFoundError("User not found")
        return user

    def profile(self, user_id: str) -> Profile:
        return Profile.from_document(self._user(user_id))

    def avatar_of(self, user_id: str) -> Avatar:
        avatar = self._user(user_id).get("avatar") or {}
        if not avatar.get("data"):
            return self.avatar
        return Avatar(data=bytes(avatar["data"]), content_type=avatar.get("contentType", "image/png"))
