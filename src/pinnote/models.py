"""Request bodies and response shapes.

Request fields are optional at the schema level: presence and content
checks belong to the services, which report them as ValidationError.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


# ── Requests ──────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    username: str | None = None
    password: str | None = None
    full_name: str | None = Field(
        None, validation_alias=AliasChoices("fullName", "fullname", "full_name")
    )
    gender: str | None = None
    birthday: date | None = None


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class PostRequest(BaseModel):
    title: str | None = None
    content: str | None = None


class PinRequest(BaseModel):
    pin: str | None = None


# ── Responses ─────────────────────────────────────────────────


class PostOwner(BaseModel):
    id: str
    username: str | None = None


class Post(BaseModel):
    id: str
    title: str
    content: str
    owner: PostOwner
    deleted: bool = False
    locked: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict, username: str | None = None) -> Post:
        """Build from a stored post. The PIN hash is never included."""
        return cls(
            id=str(doc["_id"]),
            title=doc.get("title", "Untitled"),
            content=doc.get("content", ""),
            owner=PostOwner(id=str(doc["user"]), username=username),
            deleted=doc.get("deleted", False),
            locked=doc.get("locked", False),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )


class Profile(BaseModel):
    id: str
    username: str
    fullname: str
    gender: Gender
    birthday: date | None = None
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict) -> Profile:
        birthday = doc.get("birthday")
        if isinstance(birthday, datetime):
            birthday = birthday.date()
        return cls(
            id=str(doc["_id"]),
            username=doc["username"],
            fullname=doc["fullname"],
            gender=doc["gender"],
            birthday=birthday,
            created_at=doc.get("createdAt"),
        )
