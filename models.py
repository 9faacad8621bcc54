"""
Data models for the mood journal
Using Pydantic for records and aggregates, frozen dataclasses for query descriptors

ARCHITECTURE:
- Every Mood belongs to exactly one user (user_id is the owner scope)
- FilterCriteria describes one filtered, paginated read and is discarded after use
- Metadata, EmotionCount, MonthlyCount and MoodStats are read-only results
"""

import logging
from dataclasses import dataclass
from datetime import datetime, date, time, timezone
from typing import Optional, List, Tuple

import bcrypt
from pydantic import BaseModel, ConfigDict, Field

from utils.errors import FieldErrors

logger = logging.getLogger(__name__)

MAX_PAGE = 10_000_000
DEFAULT_PAGE_SIZE = 4
EMOTION_SEPARATOR = "::"


# ============================================================================
# Mood records
# ============================================================================

class Mood(BaseModel):
    """One journal entry tagged with an emotion, emoji and color"""
    model_config = ConfigDict(from_attributes=True)

    id: int = 0
    user_id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    title: str = ""
    content: str = ""
    emotion: str = ""
    emoji: str = ""
    color: str = ""

    @property
    def emotion_key(self) -> str:
        """Composite selector value for this entry's emotion (name::emoji)"""
        return f"{self.emotion}{EMOTION_SEPARATOR}{self.emoji}"


class EmotionDetail(BaseModel):
    """Distinct (name, emoji, color) triple"""
    model_config = ConfigDict(frozen=True)

    name: str
    emoji: str
    color: str

    @property
    def key(self) -> str:
        return f"{self.name}{EMOTION_SEPARATOR}{self.emoji}"


# ============================================================================
# Aggregates
# ============================================================================

class EmotionCount(BaseModel):
    name: str
    emoji: str
    color: str
    count: int = Field(..., ge=1)


class MonthlyCount(BaseModel):
    """Entries per calendar month; month_start drives ordering, month is the label"""
    month: str
    month_start: date
    count: int = Field(..., ge=1)


class MoodStats(BaseModel):
    """Everything the stats page shows for one owner"""
    total_entries: int = 0
    most_common_emotion: Optional[EmotionCount] = None
    emotion_counts: List[EmotionCount] = Field(default_factory=list)
    monthly_counts: List[MonthlyCount] = Field(default_factory=list)
    latest_mood: Optional[Mood] = None
    avg_entries_per_week: float = 0.0


# ============================================================================
# Pagination
# ============================================================================

class Metadata(BaseModel):
    """
    Pagination descriptor for one page of results.

    The all-zero value means "no matching records"; see calculate_metadata().
    """
    model_config = ConfigDict(frozen=True)

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    @classmethod
    def empty(cls) -> "Metadata":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.total_records == 0


# ============================================================================
# Filter criteria
# ============================================================================

def parse_emotion_selector(selector: str) -> Tuple[str, Optional[str]]:
    """
    Split a "name::emoji" selector.

    Returns (name, emoji) when both halves are non-empty. Anything else is
    treated as a bare emotion name, using the whole selector string.
    """
    parts = selector.split(EMOTION_SEPARATOR, 1)
    if len(parts) == 2 and parts[0] and parts[1]:
        return parts[0], parts[1]
    return selector, None


def _parse_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        logger.warning(f"Ignoring invalid {field_name} '{value}' (expected YYYY-MM-DD)")
        return None


@dataclass(frozen=True)
class FilterCriteria:
    """
    Immutable description of one filtered, paginated read.

    All filters are optional except owner_id. Dates are inclusive and
    date-only: start_date matches from 00:00 of that day, end_date through
    the last instant of its day. An end_date earlier than start_date is
    dropped at construction time, leaving a start-only range.
    """
    owner_id: int
    text_query: str = ""
    emotion: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        v = FieldErrors()
        v.check(isinstance(self.owner_id, int) and self.owner_id > 0, "owner_id", "must be a positive identifier")
        v.check(self.page >= 1, "page", "must be a positive integer")
        v.check(self.page <= MAX_PAGE, "page", "must be less than 10 million")
        v.check(self.page_size > 0, "page_size", "must be greater than zero")
        v.raise_if_any()

        if self.start_date and self.end_date and self.end_date < self.start_date:
            logger.warning(
                f"End date {self.end_date} is before start date {self.start_date}; ignoring end date"
            )
            object.__setattr__(self, "end_date", None)

    @classmethod
    def from_params(
        cls,
        owner_id: int,
        query: Optional[str] = None,
        emotion: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: Optional[int] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_page: int = MAX_PAGE,
    ) -> "FilterCriteria":
        """
        Build criteria from raw request values.

        Unparseable dates are ignored and the page is clamped into 1..max_page.
        """
        requested_page = page if page is not None else 1
        clamped_page = min(max(requested_page, 1), max_page, MAX_PAGE)
        return cls(
            owner_id=owner_id,
            text_query=(query or "").strip(),
            emotion=emotion or "",
            start_date=_parse_date(start_date, "start_date"),
            end_date=_parse_date(end_date, "end_date"),
            page=clamped_page,
            page_size=page_size,
        )

    @property
    def start_bound(self) -> Optional[datetime]:
        """Inclusive lower bound on created_at"""
        if self.start_date is None:
            return None
        return datetime.combine(self.start_date, time.min, tzinfo=timezone.utc)

    @property
    def end_bound(self) -> Optional[datetime]:
        """Inclusive upper bound on created_at (last instant of end_date)"""
        if self.end_date is None:
            return None
        return datetime.combine(self.end_date, time.max, tzinfo=timezone.utc)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ============================================================================
# Users (adjacent account component)
# ============================================================================

def hash_password(plaintext: str) -> bytes:
    """bcrypt hash with cost 12"""
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=12))


class User(BaseModel):
    """Account owning mood entries"""
    model_config = ConfigDict(from_attributes=True)

    id: int = 0
    created_at: Optional[datetime] = None
    name: str
    email: str
    password_hash: bytes = Field(default=b"", repr=False, exclude=True)
    activated: bool = False

    def set_password(self, plaintext: str):
        self.password_hash = hash_password(plaintext)

    def password_matches(self, plaintext: str) -> bool:
        if not self.password_hash:
            return False
        return bcrypt.checkpw(plaintext.encode("utf-8"), self.password_hash)


class UserCreate(BaseModel):
    """Create user request"""
    name: str
    email: str
    password: str = Field(..., repr=False)
    activated: bool = False
