"""
Postgres-backed database layer for the Newsroom backend.

Wraps an asyncpg pool with reconnect handling and makes sure the posts and
images tables exist. Query helpers raise plain driver errors; the stores
translate them into StoreError subclasses.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg
from loguru import logger

TABLE_DEFINITIONS: Dict[str, str] = {
    "posts": """
        CREATE TABLE IF NOT EXISTS posts (
            id SERIAL PRIMARY KEY,
            title TEXT NOT NULL,
            images TEXT[] NOT NULL DEFAULT '{}',
            content TEXT NOT NULL,
            posttime TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """,
    "images": """
        CREATE TABLE IF NOT EXISTS images (
            imagename TEXT PRIMARY KEY,
            caption TEXT,
            main BYTEA NOT NULL,
            thumbnail BYTEA NOT NULL,
            showthumbnail BOOLEAN NOT NULL DEFAULT TRUE,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """,
}
INDEX_SPECS = {
    "posts": [
        ("posttime", "(posttime DESC)"),
    ],
    "images": [
        ("updated_at", "(updated_at DESC)"),
    ],
}


class StoreError(Exception):
    """Raised when a persistence operation fails."""


class QueryFailedError(StoreError):
    """The database rejected a query or could not be reached."""


class RecordNotFoundError(StoreError):
    """The record addressed by a write does not exist."""


class Database:
    """Owns the asyncpg pool and keeps it alive for the lifetime of the app."""

    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 10, monitor_interval: float = 5.0):
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._monitor_interval = monitor_interval
        self._lock = asyncio.Lock()
        self._ready: set[str] = set()
        self._monitor: Optional[asyncio.Task] = None
        self.pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        return self.pool is not None

    async def _close_pool(self) -> None:
        pool, self.pool = self.pool, None
        self._ready.clear()
        if pool is None:
            return
        try:
            await pool.close()
        except Exception:
            logger.debug("Ignoring error while closing Postgres pool", exc_info=True)

    async def connect(self, retries: int = 3, initial_delay: float = 1.0) -> None:
        """Open the pool and bootstrap tables, backing off between attempts."""
        async with self._lock:
            if self.pool is not None:
                return

            delay = initial_delay
            for attempt in range(1, retries + 2):
                try:
                    logger.info("Connecting to Postgres (attempt {})", attempt)
                    self.pool = await asyncpg.create_pool(
                        self._dsn, min_size=self._min_size, max_size=self._max_size
                    )
                    for table in TABLE_DEFINITIONS:
                        await self.ensure_table(table)
                except Exception:
                    logger.exception("Postgres connection attempt {} failed", attempt)
                    await self._close_pool()
                    if attempt > retries:
                        break
                    await asyncio.sleep(delay)
                    delay = min(delay * 2, 30)
                    continue

                logger.info("Postgres ready; tables: {}", ", ".join(sorted(self._ready)))
                break

            if self._monitor is None or self._monitor.done():
                self._monitor = asyncio.create_task(self._watch())

    async def _watch(self) -> None:
        """Ping the pool periodically and rebuild it after a failure."""
        try:
            while True:
                await asyncio.sleep(self._monitor_interval)
                if self.pool is not None:
                    try:
                        await self.execute("SELECT 1")
                        continue
                    except Exception:
                        logger.warning("Postgres ping failed, rebuilding the pool")
                        await self._close_pool()
                await self.connect()
        except asyncio.CancelledError:
            return

    async def ensure_table(self, table_name: str) -> None:
        if self.pool is None or table_name in self._ready:
            return
        await self.execute(TABLE_DEFINITIONS[table_name])
        for column, expression in INDEX_SPECS.get(table_name, []):
            await self.execute(
                f"CREATE INDEX IF NOT EXISTS {table_name}_{column}_idx ON {table_name} {expression};"
            )
        self._ready.add(table_name)

    async def disconnect(self) -> None:
        if self._monitor is not None:
            self._monitor.cancel()
            self._monitor = None
        async with self._lock:
            await self._close_pool()

    @asynccontextmanager
    async def _connection(self, conn: Optional[asyncpg.Connection]) -> AsyncIterator[asyncpg.Connection]:
        if conn is not None:
            yield conn
            return
        if self.pool is None:
            raise RuntimeError("Database not connected")
        async with self.pool.acquire() as pooled:
            yield pooled

    async def execute(self, query: str, *args: Any, conn: Optional[asyncpg.Connection] = None) -> str:
        async with self._connection(conn) as c:
            return await c.execute(query, *args)

    async def fetch(
        self, query: str, *args: Any, conn: Optional[asyncpg.Connection] = None
    ) -> List[asyncpg.Record]:
        async with self._connection(conn) as c:
            return await c.fetch(query, *args)

    async def fetchrow(
        self, query: str, *args: Any, conn: Optional[asyncpg.Connection] = None
    ) -> Optional[asyncpg.Record]:
        async with self._connection(conn) as c:
            return await c.fetchrow(query, *args)

    def get_pool_stats(self) -> Dict[str, Any]:
        if self.pool is None:
            return {"status": "not_connected"}
        return {
            "status": "connected",
            "size": self.pool.get_size(),
            "max_size": self.pool.get_max_size(),
            "idle": self.pool.get_idle_size(),
        }


async def init_database(db: Database) -> None:
    """Connect at startup; the app keeps serving static files if Postgres is down."""
    await db.connect()
    if db.is_connected:
        logger.info("Database pool stats: {}", db.get_pool_stats())
    else:
        logger.error("Postgres unavailable at startup; the monitor will keep retrying")
