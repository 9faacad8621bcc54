"""
Query Builder

Translates FilterCriteria into parameterized SQL for the moods table.
All values are passed as asyncpg positional parameters ($1, $2, ...); values are never interpolated.

Supports:
- Owner scope (always present, always first)
- Case-insensitive substring search over title, content and emotion name
- Composite emotion selector ("name::emoji"), with a name-only fallback
- Inclusive date range on created_at
- Count and page queries sharing one predicate
"""

import logging
from typing import Any, List, Tuple

from models import FilterCriteria, parse_emotion_selector

logger = logging.getLogger(__name__)

MOOD_COLUMNS = "id, created_at, updated_at, title, content, emotion, emoji, color, user_id"

# Deterministic newest-first order; id breaks created_at ties
PAGE_ORDER = "ORDER BY created_at DESC, id DESC"


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so the value matches literally"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Predicate:
    """
    WHERE-clause fragments and their bound values, appended in lock-step.

    bind() returns the placeholder for the value it just stored, so
    placeholder numbers always equal positions in params.
    """

    def __init__(self):
        self.conditions: List[str] = []
        self.params: List[Any] = []

    def bind(self, value: Any) -> str:
        self.params.append(value)
        return f"${len(self.params)}"

    def add(self, condition: str):
        self.conditions.append(condition)

    @property
    def sql(self) -> str:
        return " AND ".join(self.conditions)


class QueryBuilder:
    """Builds parameterized SQL for filtered mood reads."""

    table = "moods"

    def compose(self, criteria: FilterCriteria) -> Predicate:
        """
        Build the filter predicate for criteria.

        Only fields that are present contribute a condition; the owner
        condition is unconditional.
        """
        predicate = Predicate()

        predicate.add(f"user_id = {predicate.bind(criteria.owner_id)}")

        text = criteria.text_query.strip()
        if text:
            p = predicate.bind(f"%{escape_like(text)}%")
            predicate.add(f"(title ILIKE {p} OR content ILIKE {p} OR emotion ILIKE {p})")

        if criteria.emotion:
            name, emoji = parse_emotion_selector(criteria.emotion)
            if emoji is not None:
                predicate.add(f"emotion = {predicate.bind(name)}")
                predicate.add(f"emoji = {predicate.bind(emoji)}")
            else:
                predicate.add(f"emotion = {predicate.bind(name)}")

        start = criteria.start_bound
        if start is not None:
            predicate.add(f"created_at >= {predicate.bind(start)}")

        end = criteria.end_bound
        if end is not None:
            predicate.add(f"created_at <= {predicate.bind(end)}")

        return predicate

    def build_count(self, criteria: FilterCriteria) -> Tuple[str, List[Any]]:
        """
        Build a COUNT query for criteria (same filters, no pagination).
        Returns (sql, params).
        """
        predicate = self.compose(criteria)
        sql = f"SELECT COUNT(*) FROM {self.table} WHERE {predicate.sql}"
        return sql, predicate.params

    def build_page(self, criteria: FilterCriteria) -> Tuple[str, List[Any]]:
        """
        Build the SELECT for one page of criteria.
        LIMIT/OFFSET placeholders continue the predicate's numbering.
        Returns (sql, params).
        """
        predicate = self.compose(criteria)
        limit = predicate.bind(criteria.page_size)
        offset = predicate.bind(criteria.offset)
        sql = (
            f"SELECT {MOOD_COLUMNS} FROM {self.table} "
            f"WHERE {predicate.sql} {PAGE_ORDER} LIMIT {limit} OFFSET {offset}"
        )
        logger.debug(f"Page query with {len(predicate.params)} params: {sql}")
        return sql, predicate.params
