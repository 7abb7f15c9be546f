"""Shared fixtures: a mongomock-backed store, services, and an HTTP client.

No MongoDB server is needed.
"""

from __future__ import annotations

from datetime import date

import mongomock
import pytest
from fastapi.testclient import TestClient

from pinnote.accounts import AccountService, load_avatar
from pinnote.app import create_app
from pinnote.config import PinnoteConfig
from pinnote.posts import PostService
from pinnote.security import CredentialHasher, TokenService
from pinnote.store import RecordStore

TEST_SECRET = "pinnote-test-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def store():
    s = RecordStore(mongomock.MongoClient(), "pinnote_test")
    s.ensure_indexes()
    yield s
    s.close()


@pytest.fixture(scope="session")
def hasher():
    return CredentialHasher()


@pytest.fixture
def token_secret() -> str:
    return TEST_SECRET


@pytest.fixture
def tokens(token_secret):
    return TokenService(token_secret)


@pytest.fixture
def accounts(store, hasher, tokens):
    return AccountService(store, hasher, tokens, load_avatar())


@pytest.fixture
def posts(store, hasher):
    return PostService(store, hasher)


def _register(accounts: AccountService, tokens: TokenService, username: str) -> str:
    token = accounts.register(username, "s3cret-pass", f"{username.title()} Doe", "Other", date(1990, 5, 17))
    return tokens.verify(token)


@pytest.fixture
def alice(accounts, tokens) -> str:
    """User id of a registered user."""
    return _register(accounts, tokens, "alice")


@pytest.fixture
def bob(accounts, tokens) -> str:
    return _register(accounts, tokens, "bob")


@pytest.fixture
def app(store, token_secret):
    """Fresh app per test, sharing the mongomock store."""
    return create_app(PinnoteConfig(token_secret=token_secret), store=store)


@pytest.fixture
def client(app):
    return TestClient(app)
