"""Account endpoints: register, login, and the caller's profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from pinnote.accounts import AccountService
from pinnote.auth import require_user
from pinnote.deps import get_accounts
from pinnote.models import LoginRequest, RegisterRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register")
def register(body: RegisterRequest | None = None, accounts: AccountService = Depends(get_accounts)):
    body = body or RegisterRequest()
    token = accounts.register(
        body.username, body.password, body.full_name, body.gender, body.birthday
    )
    return {"success": True, "message": "User created successfully", "token": token}


@router.post("/login")
def login(body: LoginRequest | None = None, accounts: AccountService = Depends(get_accounts)):
    body = body or LoginRequest()
    token = accounts.login(body.username, body.password)
    return {"success": True, "message": "User logged in successfully", "token": token}


@router.get("/me")
def me(
    user_id: str = Depends(require_user),
    accounts: AccountService = Depends(get_accounts),
):
    profile = accounts.profile(user_id)
    return {"success": True, "user": profile.model_dump(mode="json")}


@router.get("/me/avatar")
def my_avatar(
    user_id: str = Depends(require_user),
    accounts: AccountService = Depends(get_accounts),
):
    avatar = accounts.avatar_of(user_id)
    return Response(content=avatar.data, media_type=avatar.content_type)
