"""
Post service layer for the Newsroom backend.
Contains the paginated listing and the create-or-update write path.
"""

from typing import List

from loguru import logger

from ..database import Database, QueryFailedError, RecordNotFoundError
from ..models.post import Post, PostUpsert

DEFAULT_PAGE_LIMIT = 3


class PostService:
    """Service class for post-related operations."""

    def __init__(self, db: Database, page_limit: int = DEFAULT_PAGE_LIMIT):
        self._db = db
        self._page_limit = page_limit

    def clamp_limit(self, limit: int) -> int:
        """Bound a client supplied page size to ``[0, page_limit]``."""
        return max(0, min(limit, self._page_limit))

    async def list_posts(self, offset: int = 0, limit: int = DEFAULT_PAGE_LIMIT) -> List[Post]:
        """
        Get a page of posts, newest first.

        Args:
            offset: Number of posts to skip (negative values count as 0)
            limit: Requested page size, clamped to the server maximum

        Returns:
            List of posts
        """
        offset = max(0, offset)
        limit = self.clamp_limit(limit)
        if limit == 0:
            return []

        try:
            rows = await self._db.fetch(
                """
                SELECT id, title, images, content, posttime
                FROM posts
                ORDER BY posttime DESC, id DESC
                OFFSET $1 LIMIT $2
                """,
                offset,
                limit,
            )
        except Exception as exc:
            logger.exception(f"Error listing posts (offset={offset}, limit={limit}): {exc}")
            raise QueryFailedError("Listing posts failed.") from exc

        return [
            Post(
                id=row["id"],
                title=row["title"],
                images=list(row["images"] or []),
                content=row["content"],
                posttime=row["posttime"],
            )
            for row in rows
        ]

    async def upsert_post(self, post: PostUpsert) -> int:
        """
        Create a post when its id is negative, otherwise update it in place.

        Returns:
            Id of the created or updated post

        Raises:
            RecordNotFoundError: If an update targets an id that does not exist
            QueryFailedError: If the database rejects the write
        """
        try:
            if post.id < 0:
                row = await self._db.fetchrow(
                    """
                    INSERT INTO posts (title, images, content, posttime)
                    VALUES ($1, $2, $3, $4)
                    RETURNING id
                    """,
                    post.title,
                    post.images,
                    post.content,
                    post.resolved_posttime(),
                )
            else:
                row = await self._db.fetchrow(
                    """
                    UPDATE posts
                    SET title = $2, images = $3, content = $4,
                        posttime = COALESCE($5, posttime)
                    WHERE id = $1
                    RETURNING id
                    """,
                    post.id,
                    post.title,
                    post.images,
                    post.content,
                    post.resolved_posttime() if post.posttime else None,
                )
        except Exception as exc:
            logger.exception(f"Error writing post {post.id}: {exc}")
            raise QueryFailedError("Saving post failed.") from exc

        if row is None:
            logger.warning(f"Post update for unknown id {post.id}")
            raise RecordNotFoundError(f"Post {post.id} not found")

        post_id = row["id"]
        action = "created" if post.id < 0 else "updated"
        logger.info(f"Post {action}: {post_id} ({post.title})")
        return post_id
