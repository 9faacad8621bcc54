"""
Repository Container - Centralized dependency injection container

Single place where repositories and services are wired to a
DatabaseConnection, so every caller gets the same object graph.
"""

from typing import Optional

from config import EmotionPalette
from repositories import MoodsRepository, UsersRepository
from services.stats_service import StatsService


class RepositoryContainer:
    """
    Container for repository instances with attribute access.
    """
    def __init__(self, db, palette: Optional[EmotionPalette] = None):
        self.palette = palette or EmotionPalette()
        self.moods = MoodsRepository(db)
        self.users = UsersRepository(db)
        self.stats = StatsService(self.moods)

    async def emotion_choices(self, owner_id: int):
        """Palette defaults plus the owner's own emotions"""
        return await self.moods.list_emotion_choices(owner_id, self.palette)
