"""
In-memory stand-ins for the database and the identity provider.
"""

import io
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from PIL import Image

from newsroom.services.token_verifier import Identity, TokenVerifier, VerificationError

ADMIN_TOKEN = "admin-token"
READER_TOKEN = "reader-token"
ADMIN_HEADERS = {"idToken": ADMIN_TOKEN}


def make_image_bytes(size=(300, 150), fmt="PNG", mode="RGB", color=(200, 30, 30)) -> bytes:
    """Return an encoded solid color image."""
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 128)
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def open_image(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class FakeVerifier(TokenVerifier):
    """Accept a fixed set of tokens and count verification calls."""

    def __init__(self, identities: Dict[str, Identity]):
        self.identities = identities
        self.calls: List[str] = []

    def verify(self, token: str) -> Identity:
        self.calls.append(token)
        if token not in self.identities:
            raise VerificationError("unknown token")
        return self.identities[token]


class FakeDatabase:
    """
    Mimic the Database query helpers for the statements the stores issue.

    Rows are plain dicts, which support the same ``row["column"]`` access as
    asyncpg records.
    """

    def __init__(self):
        self.posts: Dict[int, dict] = {}
        self.images: Dict[str, dict] = {}
        self.queries: List[tuple] = []
        self.fail = False
        self._next_post_id = 1
        self._clock = 0

    def _record(self, query: str, args: tuple) -> None:
        if self.fail:
            raise ConnectionError("database unavailable")
        self.queries.append((" ".join(query.split()), args))

    def add_post(self, title: str, minutes_ago: int, content: str = "", images=None) -> int:
        post_id = self._next_post_id
        self._next_post_id += 1
        self.posts[post_id] = {
            "id": post_id,
            "title": title,
            "images": list(images or []),
            "content": content,
            "posttime": datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        }
        return post_id

    def add_image(self, imagename: str, main: bytes, thumbnail: bytes, caption=None, showthumbnail=True) -> None:
        self._clock += 1
        self.images[imagename] = {
            "imagename": imagename,
            "caption": caption,
            "main": main,
            "thumbnail": thumbnail,
            "showthumbnail": showthumbnail,
            "updated_at": self._clock,
        }

    @property
    def image_writes(self) -> int:
        return sum(1 for query, _ in self.queries if query.startswith("INSERT INTO images"))

    async def execute(self, query: str, *args):
        self._record(query, args)
        if "INSERT INTO images" in query:
            imagename, caption, main, thumbnail, showthumbnail = args
            self.add_image(imagename, main, thumbnail, caption, showthumbnail)
            return "INSERT 0 1"
        raise AssertionError(f"Unexpected statement: {query}")

    async def fetch(self, query: str, *args):
        self._record(query, args)
        if "FROM images" in query:
            ordered = sorted(self.images.values(), key=lambda row: row["updated_at"], reverse=True)
            return [{"imagename": row["imagename"]} for row in ordered]
        if "FROM posts" in query:
            offset, limit = args
            ordered = sorted(
                self.posts.values(), key=lambda row: (row["posttime"], row["id"]), reverse=True
            )
            return [dict(row) for row in ordered[offset:offset + limit]]
        raise AssertionError(f"Unexpected query: {query}")

    async def fetchrow(self, query: str, *args) -> Optional[dict]:
        self._record(query, args)
        if "INSERT INTO posts" in query:
            title, images, content, posttime = args
            post_id = self._next_post_id
            self._next_post_id += 1
            self.posts[post_id] = {
                "id": post_id,
                "title": title,
                "images": list(images),
                "content": content,
                "posttime": posttime,
            }
            return {"id": post_id}
        if "UPDATE posts" in query:
            post_id, title, images, content, posttime = args
            row = self.posts.get(post_id)
            if row is None:
                return None
            row.update(title=title, images=list(images), content=content)
            if posttime is not None:
                row["posttime"] = posttime
            return {"id": post_id}
        if "FROM images WHERE imagename" in query:
            row = self.images.get(args[0])
            return dict(row) if row else None
        raise AssertionError(f"Unexpected query: {query}")
