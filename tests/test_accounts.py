"""AccountService, the token service and the access guard."""

from __future__ import annotations

from datetime import date, timedelta

import jwt
import pytest
from bson import ObjectId

from pinnote.accounts import BAD_CREDENTIALS, load_avatar
from pinnote.auth import authenticate
from pinnote.errors import AuthError, ConflictError, NotFoundError, ValidationError
from pinnote.security import TokenService

BIRTHDAY = date(1988, 2, 29)


def _register(accounts, username="carol", **overrides):
    fields = {
        "username": username,
        "password": "correct horse",
        "full_name": "Carol Smith",
        "gender": "Female",
        "birthday": BIRTHDAY,
    }
    fields.update(overrides)
    return accounts.register(**fields)


class TestRegister:
    def test_returns_token_for_new_user(self, accounts, tokens, store):
        user_id = tokens.verify(_register(accounts))
        user = store.find_user({"_id": ObjectId(user_id)})
        assert user["username"] == "carol"
        assert user["fullname"] == "Carol Smith"
        assert user["gender"] == "Female"
        assert user["birthday"].date() == BIRTHDAY

    def test_password_is_hashed(self, accounts, store):
        _register(accounts)
        user = store.find_user({"username": "carol"})
        assert user["password"] != "correct horse"
        assert user["password"].startswith("$argon2")

    def test_default_avatar_attached(self, accounts, store):
        _register(accounts)
        avatar = store.find_user({"username": "carol"})["avatar"]
        assert avatar["contentType"] == "image/png"
        assert bytes(avatar["data"]) == load_avatar().data

    def test_username_and_full_name_trimmed(self, accounts, store):
        _register(accounts, username="  carol  ", full_name="  Carol Smith ")
        user = store.find_user({"username": "carol"})
        assert user is not None
        assert user["fullname"] == "Carol Smith"

    @pytest.mark.parametrize("field", ["username", "password", "full_name", "gender", "birthday"])
    def test_missing_field(self, accounts, field):
        with pytest.raises(ValidationError, match="Missing information"):
            _register(accounts, **{field: None})

    def test_blank_username(self, accounts):
        with pytest.raises(ValidationError):
            _register(accounts, username="   ")

    def test_gender_is_enforced(self, accounts):
        with pytest.raises(ValidationError, match="Gender"):
            _register(accounts, gender="Robot")

    @pytest.mark.parametrize(
        "overrides",
        [{}, {"password": "other"}, {"full_name": "Someone Else", "gender": "Male"}],
    )
    def test_duplicate_username_conflicts(self, accounts, overrides):
        _register(accounts)
        with pytest.raises(ConflictError, match="Username already taken"):
            _register(accounts, **overrides)

    def test_usernames_are_case_sensitive(self, accounts):
        _register(accounts, username="carol")
        _register(accounts, username="Carol")

    def test_unique_index_catches_racing_insert(self, store):
        store.insert_user({"username": "dave"})
        with pytest.raises(ConflictError):
            store.insert_user({"username": "dave"})


class TestLogin:
    def test_correct_credentials(self, accounts, tokens):
        registered = tokens.verify(_register(accounts))
        assert tokens.verify(accounts.login("carol", "correct horse")) == registered

    def test_wrong_password_and_unknown_user_are_indistinguishable(self, accounts):
        _register(accounts)
        with pytest.raises(AuthError) as wrong_password:
            accounts.login("carol", "wrong")
        with pytest.raises(AuthError) as unknown_user:
            accounts.login("nobody", "correct horse")
        assert wrong_password.value.message == unknown_user.value.message == BAD_CREDENTIALS
        assert str(wrong_password.value) == str(unknown_user.value)

    @pytest.mark.parametrize("username, password", [(None, "x"), ("carol", None), ("", ""), ("  ", "x")])
    def test_missing_fields(self, accounts, username, password):
        with pytest.raises(ValidationError, match="Missing username and/or password"):
            accounts.login(username, password)


class TestProfile:
    def test_profile(self, accounts, tokens):
        user_id = tokens.verify(_register(accounts))
        profile = accounts.profile(user_id)
        assert profile.username == "carol"
        assert profile.gender.value == "Female"
        assert profile.birthday == BIRTHDAY
        assert "password" not in profile.model_dump()

    def test_profile_of_missing_user(self, accounts):
        with pytest.raises(NotFoundError):
            accounts.profile(str(ObjectId()))

    @pytest.mark.parametrize(
        "name, content_type",
        [("face.gif", "image/gif"), ("face.jpg", "image/jpeg"), ("face.png", "image/png"), ("face", "image/png")],
    )
    def test_load_avatar_content_type(self, tmp_path, name, content_type):
        path = tmp_path / name
        path.write_bytes(b"img")
        avatar = load_avatar(path)
        assert avatar.content_type == content_type
        assert avatar.data == b"img"

    def test_avatar(self, accounts, tokens):
        user_id = tokens.verify(_register(accounts))
        avatar = accounts.avatar_of(user_id)
        assert avatar.content_type == "image/png"
        assert avatar.data.startswith(b"\x89PNG")


class TestTokens:
    def test_roundtrip(self, tokens):
        assert tokens.verify(tokens.issue("abc123")) == "abc123"

    def test_wrong_secret(self, tokens):
        other = TokenService("another-secret-that-is-also-long-enough-for-hs256")
        with pytest.raises(AuthError, match="Invalid token"):
            tokens.verify(other.issue("abc123"))

    def test_expired(self, token_secret):
        expired = TokenService(token_secret, ttl=timedelta(seconds=-1))
        with pytest.raises(AuthError):
            expired.verify(expired.issue("abc123"))

    def test_missing_user_claim(self, tokens, token_secret):
        token = jwt.encode({"sub": "abc123"}, token_secret, algorithm="HS256")
        with pytest.raises(AuthError):
            tokens.verify(token)

    def test_no_expiry(self, token_secret):
        forever = TokenService(token_secret, ttl=None)
        token = forever.issue("abc123")
        assert "exp" not in jwt.decode(token, token_secret, algorithms=["HS256"])
        assert forever.verify(token) == "abc123"


class TestAccessGuard:
    def test_valid_token(self, tokens):
        assert authenticate(tokens.issue("abc123"), tokens) == "abc123"

    @pytest.mark.parametrize("token", [None, ""])
    def test_absent_token(self, tokens, token):
        with pytest.raises(AuthError, match="Access token not found"):
            authenticate(token, tokens)

    def test_malformed_token(self, tokens):
        with pytest.raises(AuthError, match="Invalid token"):
            authenticate("not.a.jwt", tokens)


class TestHasher:
    def test_verify(self, hasher):
        hashed = hasher.hash("1234")
        assert hasher.verify("1234", hashed)
        assert not hasher.verify("9999", hashed)

    @pytest.mark.parametrize("stored", [None, "", "plaintext"])
    def test_unusable_hash_never_verifies(self, hasher, stored):
        assert not hasher.verify("1234", stored)
