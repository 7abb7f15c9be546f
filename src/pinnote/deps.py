"""FastAPI dependencies for pinnote routes."""

from __future__ import annotations

from fastapi import Request

from pinnote.accounts import AccountService
from pinnote.posts import PostService
from pinnote.store import RecordStore


def get_store(request: Request) -> RecordStore:
    """Get the record store from app state."""
    return request.app.state.store


def get_accounts(request: Request) -> AccountService:
    state = request.app.state
    return AccountService(get_store(request), state.hasher, state.tokens, state.avatar)


def get_posts(request: Request) -> PostService:
    return PostService(get_store(request), request.app.state.hasher)
