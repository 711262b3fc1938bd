"""
Post routes for the Newsroom backend.
Listing is public; writing requires an admin identity token.
"""

from json import JSONDecodeError
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from pydantic import ValidationError

from ..database import RecordNotFoundError
from ..dependencies import get_post_service
from ..middleware.auth_middleware import AdminPrincipal, require_admin
from ..models.post import Post, PostPage, PostUpsert
from ..services.post_service import PostService

router = APIRouter()


@router.api_route("/posts", methods=["GET", "POST"], response_model=List[Post])
async def list_posts(
    request: Request,
    offset: int = 0,
    limit: int = 3,
    posts: PostService = Depends(get_post_service),
):
    """
    Get a page of posts, newest first.

    Parameters come from the query string; POST requests may send them as a
    JSON body instead. The page size is capped server side.
    """
    page = PostPage(offset=offset, limit=limit)

    content_type = request.headers.get("content-type", "")
    if request.method == "POST" and "application/json" in content_type.lower():
        try:
            body = await request.json()
            if isinstance(body, dict):
                page = PostPage(**{**page.model_dump(), **body})
        except (JSONDecodeError, ValueError, ValidationError) as exc:
            logger.warning(f"Rejected malformed post listing body: {exc}")
            raise HTTPException(status_code=400, detail="Invalid pagination body") from exc

    return await posts.list_posts(page.offset, page.limit)


@router.post("/upload/post", status_code=202)
async def upload_post(
    post: PostUpsert,
    admin: AdminPrincipal = Depends(require_admin),
    posts: PostService = Depends(get_post_service),
):
    """Create a post (negative id) or update an existing one."""
    try:
        post_id = await posts.upsert_post(post)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Post not found") from exc
    logger.info(f"Post {post_id} saved by {admin.subject}")
    return {"id": post_id}
