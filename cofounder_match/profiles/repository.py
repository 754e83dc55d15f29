"""Database repository for co-founder profiles.

This module provides async SQLite storage for users, their profiles and
attached records (traits, trust, Startup-MBTI), block relations and the
cached match scores written by the matching service.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from cofounder_match.matching.mbti import validate_external_id
from cofounder_match.matching.models import (
    MatchScore,
    StartupMBTI,
    TraitResult,
    TrustScore,
    UserProfile,
    parse_tag_list,
)

logger = logging.getLogger(__name__)

TAG_FIELDS = ("role_can", "role_want", "role_need", "skills", "domains")
DECISION_FIELDS = (
    "decision_consensus",
    "decision_data",
    "decision_speed",
    "decision_flexibility",
    "decision_risk",
)
TRAIT_FIELDS = (
    "leadership",
    "execution",
    "communication",
    "risk",
    "conflict",
    "flexibility",
)
TRUST_FIELDS = ("completeness", "evidence_strength", "activity", "reputation", "total")
MBTI_FACTOR_FIELDS = (
    "innovation_learning",
    "sensitivity_nervous",
    "social_activity",
    "cooperation_care",
    "plan_execution",
    "ap_perfectionism",
    "eop_perfectionism",
    "iop_perfectionism",
    "motivation_growth",
    "motivation_achieve",
    "motivation_recognition",
    "reward_compensation",
    "reward_autonomy",
    "reward_stability",
    "partner_selfishness",
    "partner_cooperation",
    "partner_entrepreneurship",
    "stress_index",
)

PROFILE_COLUMNS = (
    "is_public",
    "bio",
    "location",
    "location_pref",
    "availability_hours",
    "start_date",
    "goal",
    *TAG_FIELDS,
    "comm_channel",
    "response_sla",
    "meeting_freq",
    *DECISION_FIELDS,
    "conflict_style",
)

# SQL schema for the profile store
CREATE_TABLES_SQL = f"""
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    nickname TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'active',
    last_active_at TEXT
);

CREATE TABLE IF NOT EXISTS profiles (
    user_id TEXT PRIMARY KEY REFERENCES users(user_id) ON DELETE CASCADE,
    is_public INTEGER NOT NULL DEFAULT 1,
    bio TEXT,
    location TEXT,
    location_pref TEXT NOT NULL DEFAULT 'flexible',
    availability_hours INTEGER NOT NULL,
    start_date TEXT NOT NULL,
    goal TEXT NOT NULL,
    role_can TEXT NOT NULL DEFAULT '[]',
    role_want TEXT NOT NULL DEFAULT '[]',
    role_need TEXT NOT NULL DEFAULT '[]',
    skills TEXT NOT NULL DEFAULT '[]',
    domains TEXT NOT NULL DEFAULT '[]',
    comm_channel TEXT,
    response_sla INTEGER,
    meeting_freq TEXT,
    decision_consensus INTEGER,
    decision_data INTEGER,
    decision_speed INTEGER,
    decision_flexibility INTEGER,
    decision_risk INTEGER,
    conflict_style TEXT
);

CREATE TABLE IF NOT EXISTS trait_results (
    user_id TEXT PRIMARY KEY REFERENCES users(user_id) ON DELETE CASCADE,
    {', '.join(f'{name} INTEGER NOT NULL' for name in TRAIT_FIELDS)}
);

CREATE TABLE IF NOT EXISTS trust_scores (
    user_id TEXT PRIMARY KEY REFERENCES users(user_id) ON DELETE CASCADE,
    {', '.join(f'{name} INTEGER NOT NULL' for name in TRUST_FIELDS)}
);

CREATE TABLE IF NOT EXISTS startup_mbti (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    external_id TEXT NOT NULL UNIQUE,
    user_id TEXT UNIQUE REFERENCES users(user_id) ON DELETE SET NULL,
    mbti_type TEXT NOT NULL DEFAULT '',
    mbti_title TEXT,
    {', '.join(f'{name} REAL NOT NULL' for name in MBTI_FACTOR_FIELDS)}
);

CREATE TABLE IF NOT EXISTS blocks (
    blocker_id TEXT NOT NULL,
    blocked_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (blocker_id, blocked_id)
);

CREATE TABLE IF NOT EXISTS match_scores (
    viewer_id TEXT NOT NULL,
    candidate_id TEXT NOT NULL,
    stability INTEGER NOT NULL,
    synergy INTEGER NOT NULL,
    trust INTEGER NOT NULL,
    penalties INTEGER NOT NULL,
    total INTEGER NOT NULL,
    reasons_top3 TEXT NOT NULL DEFAULT '[]',
    caution TEXT,
    calculated_at TEXT NOT NULL,
    PRIMARY KEY (viewer_id, candidate_id)
);
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_users_status ON users(status);
CREATE INDEX IF NOT EXISTS idx_profiles_goal ON profiles(goal);
CREATE INDEX IF NOT EXISTS idx_blocks_blocked ON blocks(blocked_id);
CREATE INDEX IF NOT EXISTS idx_match_scores_total ON match_scores(viewer_id, total);
"""


class StartupMbtiLinkError(ValueError):
    """Raised when a Startup-MBTI record cannot be linked to a user."""


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class ProfileRepository:
    """Async SQLite repository for profiles, blocks and cached scores.

    List-valued profile fields are stored as JSON text and decoded leniently
    on the way out, so a malformed column reads back as an empty list.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")
        yield self._connection

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Yield a connection, committing on success and rolling back on error."""
        async with self._get_connection() as conn:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # ------------------------------------------------------------------
    # Users and profiles
    # ------------------------------------------------------------------

    async def upsert_user(self, user: UserProfile) -> None:
        """Insert or update a user with their profile and attached records.

        All rows are written in one transaction, so a failed Startup-MBTI link
        leaves the previously stored user unchanged.

        Raises:
            StartupMbtiLinkError: If the user's Startup-MBTI external id is
                malformed or already linked to another user.
        """
        last_active = user.last_active_at.isoformat() if user.last_active_at else None
        profile_values = self._profile_values(user)
        if user.startup_mbti is not None:
            self._check_external_id(user.startup_mbti)

        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO users (user_id, email, nickname, status, last_active_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    email = excluded.email,
                    nickname = excluded.nickname,
                    status = excluded.status,
                    last_active_at = excluded.last_active_at
                """,
                (user.user_id, user.email, user.nickname, user.status, last_active),
            )

            updates = ", ".join(f"{col} = excluded.{col}" for col in PROFILE_COLUMNS)
            await conn.execute(
                f"""
                INSERT INTO profiles (user_id, {', '.join(PROFILE_COLUMNS)})
                VALUES ({_placeholders(len(PROFILE_COLUMNS) + 1)})
                ON CONFLICT(user_id) DO UPDATE SET {updates}
                """,
                (user.user_id, *profile_values),
            )

            await self._replace_child(
                conn, "trait_results", TRAIT_FIELDS, user.user_id, user.traits
            )
            await self._replace_child(
                conn, "trust_scores", TRUST_FIELDS, user.user_id, user.trust_score
            )
            if user.startup_mbti is None:
                await conn.execute(
                    "UPDATE startup_mbti SET user_id = NULL WHERE user_id = ?",
                    (user.user_id,),
                )
            else:
                await self._write_startup_mbti(conn, user.user_id, user.startup_mbti)

    async def get_user(self, user_id: str) -> UserProfile | None:
        """Get a user by id.

        Returns:
            The user with their profile, or None if the user does not exist or
            has no profile.
        """
        users = await self._load_users("u.user_id = ?", [user_id])
        return users[0] if users else None

    async def list_candidates(self, exclude_ids: Iterable[str] = ()) -> list[UserProfile]:
        """List active users with a profile, skipping ``exclude_ids``."""
        clauses = ["u.status = 'active'"]
        params: list[Any] = []
        self._add_exclusion(clauses, params, exclude_ids)
        return await self._load_users(" AND ".join(clauses), params)

    async def query_explore(
        self,
        exclude_ids: Iterable[str] = (),
        min_hours: int | None = None,
        max_hours: int | None = None,
        goals: Sequence[str] = (),
        location_prefs: Sequence[str] = (),
    ) -> list[UserProfile]:
        """List active public profiles matching the explore pre-filter.

        Args:
            exclude_ids: User ids to skip (the viewer and blocked users).
            min_hours: Minimum weekly hours, inclusive.
            max_hours: Maximum weekly hours, inclusive.
            goals: Accepted goals; empty means any.
            location_prefs: Accepted location preferences; empty means any.
        """
        clauses = ["u.status = 'active'", "p.is_public = 1"]
        params: list[Any] = []
        self._add_exclusion(clauses, params, exclude_ids)

        if min_hours is not None:
            clauses.append("p.availability_hours >= ?")
            params.append(min_hours)
        if max_hours is not None:
            clauses.append("p.availability_hours <= ?")
            params.append(max_hours)
        if goals:
            clauses.append(f"p.goal IN ({_placeholders(len(goals))})")
            params.extend(goals)
        if location_prefs:
            clauses.append(
                f"p.location_pref IN ({_placeholders(len(location_prefs))})"
            )
            params.extend(location_prefs)

        return await self._load_users(" AND ".join(clauses), params)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def add_block(self, blocker_id: str, blocked_id: str) -> None:
        """Record that ``blocker_id`` blocked ``blocked_id`` (idempotent)."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT OR IGNORE INTO blocks (blocker_id, blocked_id, created_at)
                VALUES (?, ?, ?)
                """,
                (blocker_id, blocked_id, datetime.now(UTC).isoformat()),
            )
            await conn.commit()

    async def get_blocked_user_ids(self, user_id: str) -> set[str]:
        """Return users blocked by, or blocking, ``user_id``."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT blocked_id AS other_id FROM blocks WHERE blocker_id = ?
                UNION
                SELECT blocker_id AS other_id FROM blocks WHERE blocked_id = ?
                """,
                (user_id, user_id),
            )
            rows = await cursor.fetchall()

        return {row["other_id"] for row in rows}

    async def is_blocked(self, user_a: str, user_b: str) -> bool:
        """Return True if either user blocked the other."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT 1 FROM blocks
                WHERE (blocker_id = ? AND blocked_id = ?)
                   OR (blocker_id = ? AND blocked_id = ?)
                LIMIT 1
                """,
                (user_a, user_b, user_b, user_a),
            )
            row = await cursor.fetchone()

        return row is not None

    # ------------------------------------------------------------------
    # Startup-MBTI
    # ------------------------------------------------------------------

    async def link_startup_mbti(self, user_id: str, mbti: StartupMBTI) -> None:
        """Store a Startup-MBTI record and link it to ``user_id``.

        A user holds at most one record; linking a new one releases the old.

        Raises:
            StartupMbtiLinkError: If the external id is malformed or already
                linked to another user.
        """
        self._check_external_id(mbti)

        async with self._transaction() as conn:
            await self._write_startup_mbti(conn, user_id, mbti)

        logger.debug("Linked Startup-MBTI %s to user %s", mbti.external_id, user_id)

    @staticmethod
    def _check_external_id(mbti: StartupMBTI) -> None:
        if not validate_external_id(mbti.external_id):
            raise StartupMbtiLinkError(
                f"Invalid Startup-MBTI external id: {mbti.external_id!r}"
            )

    @staticmethod
    async def _write_startup_mbti(
        conn: aiosqlite.Connection, user_id: str, mbti: StartupMBTI
    ) -> None:
        cursor = await conn.execute(
            "SELECT user_id FROM startup_mbti WHERE external_id = ?",
            (mbti.external_id,),
        )
        row = await cursor.fetchone()
        if row is not None and row["user_id"] not in (None, user_id):
            raise StartupMbtiLinkError(
                f"Startup-MBTI {mbti.external_id} is already linked to another user"
            )

        await conn.execute(
            """
            UPDATE startup_mbti SET user_id = NULL
            WHERE user_id = ? AND external_id != ?
            """,
            (user_id, mbti.external_id),
        )

        columns = ("mbti_type", "mbti_title", *MBTI_FACTOR_FIELDS)
        updates = ", ".join(f"{col} = excluded.{col}" for col in columns)
        await conn.execute(
            f"""
            INSERT INTO startup_mbti (external_id, user_id, {', '.join(columns)})
            VALUES ({_placeholders(len(columns) + 2)})
            ON CONFLICT(external_id) DO UPDATE SET
                user_id = excluded.user_id, {updates}
            """,
            (
                mbti.external_id,
                user_id,
                *(getattr(mbti, col) for col in columns),
            ),
        )

    # ------------------------------------------------------------------
    # Match score cache
    # ------------------------------------------------------------------

    async def cache_match_scores(
        self, viewer_id: str, scores: Sequence[MatchScore]
    ) -> None:
        """Upsert computed scores for ``viewer_id``."""
        if not scores:
            return

        now = datetime.now(UTC).isoformat()
        rows = [
            (
                viewer_id,
                score.candidate_id,
                score.stability,
                score.synergy,
                score.trust,
                score.penalties,
                score.total,
                json.dumps(score.reasons_top3, ensure_ascii=False),
                score.caution,
                now,
            )
            for score in scores
        ]

        async with self._get_connection() as conn:
            await conn.executemany(
                """
                INSERT INTO match_scores (
                    viewer_id, candidate_id, stability, synergy, trust,
                    penalties, total, reasons_top3, caution, calculated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(viewer_id, candidate_id) DO UPDATE SET
                    stability = excluded.stability,
                    synergy = excluded.synergy,
                    trust = excluded.trust,
                    penalties = excluded.penalties,
                    total = excluded.total,
                    reasons_top3 = excluded.reasons_top3,
                    caution = excluded.caution,
                    calculated_at = excluded.calculated_at
                """,
                rows,
            )
            await conn.commit()

    async def get_cached_match_score(
        self, viewer_id: str, candidate_id: str
    ) -> MatchScore | None:
        """Get the cached score of a pair, if any."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM match_scores
                WHERE viewer_id = ? AND candidate_id = ?
                """,
                (viewer_id, candidate_id),
            )
            row = await cursor.fetchone()

        if row is None:
            return None

        return MatchScore(
            candidate_id=row["candidate_id"],
            stability=row["stability"],
            synergy=row["synergy"],
            trust=row["trust"],
            penalties=row["penalties"],
            total=row["total"],
            reasons_top3=parse_tag_list(row["reasons_top3"]),
            caution=row["caution"],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _add_exclusion(
        clauses: list[str], params: list[Any], exclude_ids: Iterable[str]
    ) -> None:
        excluded = list(dict.fromkeys(exclude_ids))
        if excluded:
            clauses.append(f"u.user_id NOT IN ({_placeholders(len(excluded))})")
            params.extend(excluded)

    @staticmethod
    def _profile_values(user: UserProfile) -> tuple[Any, ...]:
        values: dict[str, Any] = {
            "is_public": 1 if user.is_public else 0,
            "start_date": user.start_date.isoformat(),
        }
        for name in TAG_FIELDS:
            values[name] = json.dumps(getattr(user, name), ensure_ascii=False)
        return tuple(
            values[col] if col in values else getattr(user, col)
            for col in PROFILE_COLUMNS
        )

    @staticmethod
    async def _replace_child(
        conn: aiosqlite.Connection,
        table: str,
        fields: Sequence[str],
        user_id: str,
        record: TraitResult | TrustScore | None,
    ) -> None:
        await conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
        if record is None:
            return
        await conn.execute(
            f"""
            INSERT INTO {table} (user_id, {', '.join(fields)})
            VALUES ({_placeholders(len(fields) + 1)})
            """,
            (user_id, *(getattr(record, name) for name in fields)),
        )

    async def _load_users(self, where: str, params: Sequence[Any]) -> list[UserProfile]:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT u.user_id, u.email, u.nickname, u.status, u.last_active_at,
                       {', '.join(f'p.{col}' for col in PROFILE_COLUMNS)}
                FROM users u
                JOIN profiles p ON p.user_id = u.user_id
                WHERE {where}
                ORDER BY u.rowid
                """,
                tuple(params),
            )
            rows = await cursor.fetchall()
            if not rows:
                return []

            user_ids = [row["user_id"] for row in rows]
            traits = await self._fetch_children(conn, "trait_results", user_ids)
            trust = await self._fetch_children(conn, "trust_scores", user_ids)
            mbti = await self._fetch_children(conn, "startup_mbti", user_ids)

        return [
            self._row_to_user(
                row,
                traits.get(row["user_id"]),
                trust.get(row["user_id"]),
                mbti.get(row["user_id"]),
            )
            for row in rows
        ]

    @staticmethod
    async def _fetch_children(
        conn: aiosqlite.Connection, table: str, user_ids: Sequence[str]
    ) -> dict[str, aiosqlite.Row]:
        cursor = await conn.execute(
            f"SELECT * FROM {table} WHERE user_id IN ({_placeholders(len(user_ids))})",
            tuple(user_ids),
        )
        return {row["user_id"]: row for row in await cursor.fetchall()}

    def _row_to_user(
        self,
        row: aiosqlite.Row,
        traits_row: aiosqlite.Row | None,
        trust_row: aiosqlite.Row | None,
        mbti_row: aiosqlite.Row | None,
    ) -> UserProfile:
        """Convert joined rows to a UserProfile.

        Args:
            row: users JOIN profiles row.
            traits_row: trait_results row, if any.
            trust_row: trust_scores row, if any.
            mbti_row: startup_mbti row linked to the user, if any.

        Returns:
            A UserProfile instance.
        """
        data: dict[str, Any] = {
            "user_id": row["user_id"],
            "email": row["email"],
            "nickname": row["nickname"],
            "status": row["status"],
            "last_active_at": row["last_active_at"],
        }
        for col in PROFILE_COLUMNS:
            data[col] = row[col]
        data["is_public"] = bool(row["is_public"])

        if traits_row is not None:
            data["traits"] = {name: traits_row[name] for name in TRAIT_FIELDS}
        if trust_row is not None:
            data["trust_score"] = {name: trust_row[name] for name in TRUST_FIELDS}
        if mbti_row is not None:
            data["startup_mbti"] = {
                "external_id": mbti_row["external_id"],
                "mbti_type": mbti_row["mbti_type"],
                "mbti_title": mbti_row["mbti_title"],
                **{name: mbti_row[name] for name in MBTI_FACTOR_FIELDS},
            }

        return UserProfile.model_validate(data)
