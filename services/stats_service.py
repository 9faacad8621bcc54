import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from models import MoodStats
from repositories import MoodsRepository

logger = logging.getLogger(__name__)

SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def average_entries_per_week(total: int, first_entry: Optional[datetime], now: datetime) -> float:
    """
    Entries per week since the first entry.

    Less than a week of history counts as one week, so a handful of
    fresh entries do not inflate the rate.
    """
    if first_entry is None or total == 0:
        return 0.0
    weeks = (now - first_entry).total_seconds() / SECONDS_PER_WEEK
    if 0 <= weeks < 1.0:
        weeks = 1.0
    if weeks > 0:
        return total / weeks
    return float(total)


class StatsService:
    """
    Emotion and monthly statistics for one owner.

    Each read is its own short round trip; nothing is cached, every call
    recomputes from the store.
    """

    def __init__(self, moods: MoodsRepository, clock: Callable[[], datetime] = _utcnow):
        self.moods = moods
        self.clock = clock

    async def compute_stats(self, owner_id: int) -> MoodStats:
        """
        Total, per-emotion and per-month counts, most common emotion,
        latest entry and weekly average.

        Zero entries short-circuits after the count query.
        """
        total = await self.moods.count_for_owner(owner_id)
        if total == 0:
            return MoodStats(total_entries=0)

        emotion_counts, monthly_counts, latest, first_entry = await asyncio.gather(
            self.moods.emotion_counts(owner_id),
            self.moods.monthly_counts(owner_id),
            self.moods.latest(owner_id),
            self.moods.get_first_entry_date(owner_id),
        )

        stats = MoodStats(
            total_entries=total,
            emotion_counts=emotion_counts,
            monthly_counts=monthly_counts,
            latest_mood=latest,
            avg_entries_per_week=average_entries_per_week(total, first_entry, self.clock()),
        )
        if emotion_counts:
            stats.most_common_emotion = emotion_counts[0]

        logger.debug(
            f"Stats for owner {owner_id}: {total} entries, "
            f"{len(emotion_counts)} emotions, {len(monthly_counts)} months"
        )
        return stats
