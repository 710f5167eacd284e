"""SQLite-backed profile store.

Member profiles and user records are stored as JSON documents, one row per
user, using aiosqlite for async access. Low-level database failures surface
as ``StoreUnavailableError``.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
from pydantic import BaseModel, ValidationError

from community_match.errors import StoreUnavailableError
from community_match.profiles.models import MemberProfile, UserRecord
from community_match.profiles.store import ProfileCriteria

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS members (
    user_id TEXT PRIMARY KEY,
    is_available_for_matching INTEGER NOT NULL DEFAULT 1,
    last_active TEXT NOT NULL,
    document TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    document TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_members_available ON members(is_available_for_matching);
CREATE INDEX IF NOT EXISTS idx_members_last_active ON members(last_active);
"""


def _parse_document(model: type[BaseModel], document: str):
    try:
        return model.model_validate_json(document)
    except ValidationError as e:
        raise StoreUnavailableError(
            f"Corrupt {model.__name__} document in profile database", e
        ) from e


class SQLiteProfileStore:
    """Async SQLite repository for member profiles and user records."""

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Yield the shared connection, translating sqlite errors."""
        try:
            if self._connection is None:
                self._connection = await aiosqlite.connect(self.db_path)
                self._connection.row_factory = aiosqlite.Row
            yield self._connection
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Profile database error: {e}", e) from e

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def save_profile(self, profile: MemberProfile) -> None:
        """Insert or replace a member profile."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO members (
                    user_id, is_available_for_matching, last_active, document
                ) VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    is_available_for_matching = excluded.is_available_for_matching,
                    last_active = excluded.last_active,
                    document = excluded.document
                """,
                (
                    profile.user_id,
                    1 if profile.is_available_for_matching else 0,
                    profile.last_active.isoformat(),
                    json.dumps(profile.to_dict()),
                ),
            )
            await conn.commit()

    async def get_profile(self, user_id: str) -> MemberProfile | None:
        """Get a member profile by user id."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT document FROM members WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return _parse_document(MemberProfile, row["document"])

    async def list_eligible_profiles(
        self, criteria: ProfileCriteria
    ) -> list[MemberProfile]:
        """List profiles open to matching, ordered by user id."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT document FROM members
                WHERE is_available_for_matching = 1
                ORDER BY user_id
                """
            )
            rows = await cursor.fetchall()

        profiles = [_parse_document(MemberProfile, row["document"]) for row in rows]
        return [profile for profile in profiles if criteria.admits(profile)]

    async def list_profiles(self) -> list[MemberProfile]:
        """List every stored profile, ordered by user id."""
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT document FROM members ORDER BY user_id")
            rows = await cursor.fetchall()
        return [_parse_document(MemberProfile, row["document"]) for row in rows]

    async def save_user(self, user: UserRecord) -> None:
        """Insert or replace a user record."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO users (user_id, document) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET document = excluded.document
                """,
                (user.user_id, json.dumps(user.to_dict())),
            )
            await conn.commit()

    async def get_user(self, user_id: str) -> UserRecord | None:
        """Get a user record by id."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT document FROM users WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return _parse_document(UserRecord, row["document"])

    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserRecord]:
        """Get several user records at once, keyed by user id."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}

        placeholders = ", ".join("?" for _ in ids)
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT user_id, document FROM users WHERE user_id IN ({placeholders})",
                ids,
            )
            rows = await cursor.fetchall()

        return {
            row["user_id"]: _parse_document(UserRecord, row["document"])
            for row in rows
        }
