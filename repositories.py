"""
Repository layer for database operations
Owner-scoped CRUD, filtered pagination and aggregate reads for moods,
plus the account operations moods depend on
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from config import EmotionPalette
from database import DatabaseConnection
from models import (
    Mood,
    EmotionDetail, EmotionCount, MonthlyCount,
    FilterCriteria, Metadata,
    User, UserCreate, hash_password,
)
from query.builder import QueryBuilder, MOOD_COLUMNS
from query.pagination import calculate_metadata, is_out_of_range
from query.validators import validate_mood, validate_user
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Rows with a missing or blank name, emoji or color never form an emotion group
_COMPLETE_EMOTION = """
    emotion IS NOT NULL AND emoji IS NOT NULL AND color IS NOT NULL
    AND btrim(emotion) <> '' AND btrim(emoji) <> '' AND btrim(color) <> ''
"""


class BaseRepository:
    """Base repository with common operations"""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    @property
    def query_timeout(self) -> float:
        return self.db.config.query_timeout

    @property
    def aggregate_timeout(self) -> float:
        return self.db.config.aggregate_timeout

    def _to_model(self, row, model_class):
        """Convert database record to Pydantic model"""
        if row is None:
            return None
        return model_class(**dict(row))

    def _to_models(self, rows, model_class) -> list:
        """Convert list of database records to Pydantic models"""
        return [model_class(**dict(row)) for row in rows]

    @staticmethod
    def _require_owner(owner_id: int):
        """Reject a missing owner before any query is issued"""
        if not isinstance(owner_id, int) or owner_id < 1:
            raise ValidationError({"owner_id": "must be a positive identifier"})


class MoodsRepository(BaseRepository):
    """
    Repository for mood entries.

    Every statement carries the owner in its WHERE clause (or VALUES for
    inserts); a record owned by someone else behaves exactly like a
    missing one.
    """

    def __init__(self, db: DatabaseConnection, builder: Optional[QueryBuilder] = None):
        super().__init__(db)
        self.builder = builder or QueryBuilder()

    # ------------------------------------------------------------------
    # Filtered pagination
    # ------------------------------------------------------------------

    async def fetch_page(
        self,
        criteria: FilterCriteria,
        snapshot: bool = False,
    ) -> Tuple[List[Mood], Metadata]:
        """
        Fetch one page of moods matching criteria, plus pagination metadata.

        Count and page fetch are separate round trips. Under concurrent
        writes the total may be slightly stale relative to the rows; pass
        snapshot=True to run both inside one read-only REPEATABLE READ
        transaction instead.

        A page beyond last_page returns no rows and the normal metadata.
        """
        if snapshot:
            async with self.db.transaction(readonly=True, isolation='repeatable_read') as conn:
                return await self._fetch_page(conn, criteria)
        return await self._fetch_page(self.db, criteria)

    async def _fetch_page(self, executor, criteria: FilterCriteria) -> Tuple[List[Mood], Metadata]:
        """executor is the DatabaseConnection or a single asyncpg connection"""
        total = await self._count(executor, criteria)
        metadata = calculate_metadata(total, criteria.page, criteria.page_size)

        if metadata.is_empty:
            return [], metadata

        if is_out_of_range(metadata, criteria.page):
            logger.warning(
                f"Requested page {criteria.page} is past last page {metadata.last_page}; returning empty page"
            )
            return [], metadata

        sql, params = self.builder.build_page(criteria)
        rows = await executor.fetch(sql, *params, timeout=self.aggregate_timeout)
        return self._to_models(rows, Mood), metadata

    async def _count(self, executor, criteria: FilterCriteria) -> int:
        sql, params = self.builder.build_count(criteria)
        total = await executor.fetchval(sql, *params, timeout=self.query_timeout)
        return int(total or 0)

    async def count(self, criteria: FilterCriteria) -> int:
        """Total moods matching criteria (pagination ignored)"""
        return await self._count(self.db, criteria)

    async def last_page_for(self, criteria: FilterCriteria) -> int:
        """
        Last page for criteria's filters, never less than 1.

        Used after a delete to move a caller back when its page emptied.
        """
        total = await self.count(criteria)
        return max(calculate_metadata(total, 1, criteria.page_size).last_page, 1)

    # ------------------------------------------------------------------
    # Single-record operations
    # ------------------------------------------------------------------

    async def get(self, mood_id: int, owner_id: int) -> Mood:
        """Get one owned mood; NotFoundError if absent or owned by someone else"""
        if mood_id < 1 or owner_id < 1:
            raise NotFoundError()

        query = f"SELECT {MOOD_COLUMNS} FROM moods WHERE id = $1 AND user_id = $2"
        row = await self.db.fetchrow(query, mood_id, owner_id)
        if row is None:
            raise NotFoundError()
        return self._to_model(row, Mood)

    async def insert(self, mood: Mood) -> Mood:
        """
        Persist a new mood for mood.user_id.
        Returns the stored record with id and timestamps assigned.
        """
        self._require_owner(mood.user_id)
        validate_mood(mood)

        query = f"""
            INSERT INTO moods (title, content, emotion, emoji, color, user_id)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {MOOD_COLUMNS}
        """
        row = await self.db.fetchrow(
            query,
            mood.title,
            mood.content,
            mood.emotion,
            mood.emoji,
            mood.color,
            mood.user_id,
        )
        return self._to_model(row, Mood)

    async def update(self, mood: Mood) -> Mood:
        """
        Overwrite title, content and emotion fields of an owned mood.
        Refreshes updated_at. NotFoundError if absent or not owned.
        """
        if mood.id < 1 or mood.user_id < 1:
            raise NotFoundError()
        validate_mood(mood)

        query = f"""
            UPDATE moods
            SET title = $1, content = $2, emotion = $3, emoji = $4, color = $5, updated_at = NOW()
            WHERE id = $6 AND user_id = $7
            RETURNING {MOOD_COLUMNS}
        """
        row = await self.db.fetchrow(
            query,
            mood.title,
            mood.content,
            mood.emotion,
            mood.emoji,
            mood.color,
            mood.id,
            mood.user_id,
        )
        if row is None:
            raise NotFoundError()
        return self._to_model(row, Mood)

    async def delete(self, mood_id: int, owner_id: int) -> None:
        """Delete an owned mood; NotFoundError if absent or not owned"""
        if mood_id < 1 or owner_id < 1:
            raise NotFoundError()

        query = "DELETE FROM moods WHERE id = $1 AND user_id = $2 RETURNING id"
        deleted = await self.db.fetchval(query, mood_id, owner_id)
        if deleted is None:
            raise NotFoundError()

    # ------------------------------------------------------------------
    # Emotion listings
    # ------------------------------------------------------------------

    async def list_distinct_emotions(self, owner_id: int) -> List[EmotionDetail]:
        """Distinct (name, emoji, color) triples the owner has used, by name"""
        self._require_owner(owner_id)

        query = f"""
            SELECT DISTINCT emotion AS name, emoji, color
            FROM moods
            WHERE user_id = $1 AND {_COMPLETE_EMOTION}
            ORDER BY name ASC, emoji ASC, color ASC
        """
        rows = await self.db.fetch(query, owner_id)
        return self._to_models(rows, EmotionDetail)

    async def list_emotion_choices(self, owner_id: int, palette: EmotionPalette) -> List[EmotionDetail]:
        """
        Emotions to offer for a new entry: the palette defaults, then any
        (name, emoji) pair the owner has used that the palette lacks.
        """
        used = await self.list_distinct_emotions(owner_id)
        choices = list(palette.emotions)
        seen = {e.key for e in choices}
        for detail in used:
            if detail.key not in seen:
                seen.add(detail.key)
                choices.append(detail)
        return choices

    # ------------------------------------------------------------------
    # Aggregate reads (owner-wide, unpaginated)
    # ------------------------------------------------------------------

    async def count_for_owner(self, owner_id: int) -> int:
        self._require_owner(owner_id)
        total = await self.db.fetchval("SELECT COUNT(*) FROM moods WHERE user_id = $1", owner_id)
        return int(total or 0)

    async def emotion_counts(self, owner_id: int) -> List[EmotionCount]:
        """Entries per (name, emoji, color), most frequent first, ties by name"""
        self._require_owner(owner_id)

        query = f"""
            SELECT emotion AS name, emoji, color, COUNT(*) AS count
            FROM moods
            WHERE user_id = $1 AND {_COMPLETE_EMOTION}
            GROUP BY emotion, emoji, color
            ORDER BY COUNT(*) DESC, emotion ASC, emoji ASC
        """
        rows = await self.db.fetch(query, owner_id, timeout=self.aggregate_timeout)
        return self._to_models(rows, EmotionCount)

    async def monthly_counts(self, owner_id: int) -> List[MonthlyCount]:
        """Entries per calendar month, oldest month first"""
        self._require_owner(owner_id)

        # Order by the truncated date, never by the "Mon YYYY" label
        query = """
            SELECT TO_CHAR(date_trunc('month', created_at), 'Mon YYYY') AS month,
                   date_trunc('month', created_at)::date AS month_start,
                   COUNT(*) AS count
            FROM moods
            WHERE user_id = $1
            GROUP BY date_trunc('month', created_at)
            ORDER BY date_trunc('month', created_at) ASC
        """
        rows = await self.db.fetch(query, owner_id, timeout=self.aggregate_timeout)
        return self._to_models(rows, MonthlyCount)

    async def latest(self, owner_id: int) -> Optional[Mood]:
        """Newest mood for the owner, or None when there are none"""
        self._require_owner(owner_id)

        query = f"""
            SELECT {MOOD_COLUMNS} FROM moods
            WHERE user_id = $1
            ORDER BY created_at DESC, id DESC
            LIMIT 1
        """
        row = await self.db.fetchrow(query, owner_id)
        return self._to_model(row, Mood)

    async def get_first_entry_date(self, owner_id: int) -> Optional[datetime]:
        """Creation time of the owner's oldest mood, or None"""
        self._require_owner(owner_id)
        return await self.db.fetchval("SELECT MIN(created_at) FROM moods WHERE user_id = $1", owner_id)


class UsersRepository(BaseRepository):
    """Repository for the accounts that own moods"""

    _COLUMNS = "id, created_at, name, email, password_hash, activated"

    async def insert(self, user: UserCreate) -> User:
        """
        Create an account.
        DuplicateConstraintError if the email is already registered.
        """
        validate_user(user)

        query = f"""
            INSERT INTO users (name, email, password_hash, activated)
            VALUES ($1, $2, $3, $4)
            RETURNING {self._COLUMNS}
        """
        row = await self.db.fetchrow(
            query,
            user.name,
            user.email,
            hash_password(user.password),
            user.activated,
        )
        return self._to_model(row, User)

    async def get(self, user_id: int) -> User:
        if user_id < 1:
            raise NotFoundError()
        row = await self.db.fetchrow(f"SELECT {self._COLUMNS} FROM users WHERE id = $1", user_id)
        if row is None:
            raise NotFoundError()
        return self._to_model(row, User)

    async def get_by_email(self, email: str) -> User:
        row = await self.db.fetchrow(f"SELECT {self._COLUMNS} FROM users WHERE email = $1", email)
        if row is None:
            raise NotFoundError()
        return self._to_model(row, User)

    async def update(self, user: User) -> User:
        """
        Change name, email, password hash and activation status.
        DuplicateConstraintError on an email clash, NotFoundError if absent.
        """
        if user.id < 1:
            raise NotFoundError()

        query = f"""
            UPDATE users
            SET name = $1, email = $2, password_hash = $3, activated = $4
            WHERE id = $5
            RETURNING {self._COLUMNS}
        """
        row = await self.db.fetchrow(
            query,
            user.name,
            user.email,
            user.password_hash,
            user.activated,
            user.id,
        )
        if row is None:
            raise NotFoundError()
        return self._to_model(row, User)
