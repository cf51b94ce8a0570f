from __future__ import annotations

from pathlib import Path

import aiosqlite

from aocbot.models import CachedDocument


class CacheRepository:
    """Keeps the last fetched leaderboard document, and nothing older."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    async def init(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self._db_path) as db:
            await db.executescript(
                """
                CREATE TABLE IF NOT EXISTS leaderboard_cache (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    last_read INTEGER NOT NULL,
                    last_body BLOB NOT NULL
                );
                """
            )
            await db.commit()

    async def load_previous(self) -> CachedDocument | None:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT last_read, last_body FROM leaderboard_cache WHERE id = 1"
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        last_read, body = row
        if isinstance(body, str):
            body = body.encode("utf-8")
        return CachedDocument(last_read=int(last_read), body=bytes(body))

    async def save_current(self, body: bytes, fetched_at: int) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                INSERT INTO leaderboard_cache (id, last_read, last_body)
                VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    last_read = excluded.last_read,
                    last_body = excluded.last_body
                """,
                (int(fetched_at), body),
            )
            await db.commit()
