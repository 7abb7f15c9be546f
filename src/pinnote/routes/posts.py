"""Post endpoints. Every route requires a bearer token.

A missing body is treated as an empty one.

``/trashed`` is declared before ``/{post_id}`` so it is not captured as an id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from pinnote.auth import require_user
from pinnote.deps import get_posts
from pinnote.errors import NotFoundError
from pinnote.models import PinRequest, Post, PostRequest
from pinnote.posts import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])


def _one(post: Post, message: str) -> dict:
    return {"success": True, "message": message, "post": post.model_dump(mode="json")}


def _many(posts: list[Post]) -> dict:
    return {"success": True, "posts": [p.model_dump(mode="json") for p in posts]}


@router.get("")
def list_active(
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    return _many(posts.list_active(user_id))


@router.get("/trashed")
def list_trashed(
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    return _many(posts.list_trashed(user_id))


@router.get("/{post_id}", dependencies=[Depends(require_user)])
def get_one(post_id: str, posts: PostService = Depends(get_posts)):
    post = posts.get_one(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return {"success": True, "post": post.model_dump(mode="json")}


@router.post("")
def create(
    body: PostRequest | None = None,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    body = body or PostRequest()
    post = posts.create(user_id, body.title, body.content)
    return _one(post, "Post created successfully")


@router.put("/{post_id}")
def update(
    post_id: str,
    body: PostRequest | None = None,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    body = body or PostRequest()
    post = posts.update(user_id, post_id, body.title, body.content)
    return _one(post, "Post updated successfully")


@router.put("/{post_id}/trash")
def trash(
    post_id: str,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    return _one(posts.trash(user_id, post_id), "Post deleted successfully")


@router.put("/{post_id}/recover")
def recover(
    post_id: str,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    return _one(posts.recover(user_id, post_id), "Post recovered successfully")


@router.put("/{post_id}/lock")
def lock(
    post_id: str,
    body: PinRequest | None = None,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    body = body or PinRequest()
    return _one(posts.lock(user_id, post_id, body.pin), "Post locked successfully")


@router.put("/{post_id}/unlock")
def unlock(
    post_id: str,
    body: PinRequest | None = None,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    body = body or PinRequest()
    return _one(posts.unlock(user_id, post_id, body.pin), "Post unlocked successfully")


@router.delete("/{post_id}")
def purge(
    post_id: str,
    user_id: str = Depends(require_user),
    posts: PostService = Depends(get_posts),
):
    return _one(posts.purge(user_id, post_id), "Post permanently deleted")
