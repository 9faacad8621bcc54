import pytest
from unittest.mock import AsyncMock
from datetime import datetime, timedelta, timezone

from models import EmotionCount, MonthlyCount, Mood, MoodStats
from services.stats_service import StatsService, average_entries_per_week

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_moods():
    return AsyncMock()


@pytest.fixture
def service(mock_moods):
    return StatsService(mock_moods, clock=lambda: NOW)


async def test_zero_entries_short_circuits(service, mock_moods):
    mock_moods.count_for_owner.return_value = 0

    stats = await service.compute_stats(1)

    assert stats == MoodStats(total_entries=0)
    assert stats.most_common_emotion is None
    assert stats.emotion_counts == []
    assert stats.monthly_counts == []
    mock_moods.emotion_counts.assert_not_awaited()
    mock_moods.monthly_counts.assert_not_awaited()
    mock_moods.latest.assert_not_awaited()


async def test_most_common_is_first_histogram_entry(service, mock_moods):
    happy = EmotionCount(name="Happy", emoji="😊", color="#FFCA28", count=3)
    calm = EmotionCount(name="Calm", emoji="😌", color="#69B36C", count=1)
    sad = EmotionCount(name="Sad", emoji="😢", color="#5C8DDE", count=1)
    latest = Mood(id=5, user_id=1, title="t", content="c", emotion="Happy", emoji="😊", color="#FFCA28")

    mock_moods.count_for_owner.return_value = 5
    mock_moods.emotion_counts.return_value = [happy, calm, sad]
    mock_moods.monthly_counts.return_value = [
        MonthlyCount(month="Feb 2024", month_start="2024-02-01", count=5),
    ]
    mock_moods.latest.return_value = latest
    mock_moods.get_first_entry_date.return_value = NOW - timedelta(days=2)

    stats = await service.compute_stats(1)

    assert stats.total_entries == 5
    assert stats.most_common_emotion == happy
    assert [c.name for c in stats.emotion_counts] == ["Happy", "Calm", "Sad"]
    assert stats.monthly_counts[0].month == "Feb 2024"
    assert stats.latest_mood.id == 5
    assert stats.avg_entries_per_week == pytest.approx(5.0)
    mock_moods.emotion_counts.assert_awaited_once_with(1)


async def test_errors_propagate_unwrapped(service, mock_moods):
    mock_moods.count_for_owner.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await service.compute_stats(1)


class TestAverageEntriesPerWeek:
    def test_no_history(self):
        assert average_entries_per_week(0, None, NOW) == 0.0

    def test_under_one_week_counts_as_one(self):
        assert average_entries_per_week(3, NOW - timedelta(days=3), NOW) == pytest.approx(3.0)

    def test_several_weeks(self):
        assert average_entries_per_week(8, NOW - timedelta(weeks=4), NOW) == pytest.approx(2.0)
