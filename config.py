"""
Configuration for the mood journal data layer
Supports local development, testing, and production deployment
Environment-aware configuration based on APP_ENV
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Literal, Tuple
from pathlib import Path
from dotenv import load_dotenv

from models import EmotionDetail

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists, falling back to .env
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    base_path = Path(__file__).parent
    env_file = base_path / f'.env.{mode}'

    if env_file.exists():
        # override=False lets variables already set by the host win
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(base_path / '.env', override=False)

    return mode


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration"""

    host: str
    port: int
    database: str
    user: str
    password: str

    # Connection pool settings
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: int = 60  # seconds, pool-wide ceiling

    # Per round-trip timeouts (seconds)
    query_timeout: float = 3.0
    aggregate_timeout: float = 5.0

    ssl_mode: str = "prefer"

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'DatabaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - DB_HOST: Database host (default: localhost)
        - DB_PORT: Database port (default: 5432)
        - DB_NAME: Database name (default: moodnotes)
        - DB_USER: Database user
        - DB_PASSWORD: Database password
        - DB_SSL_MODE: SSL mode (default: prefer in development, require otherwise)
        - DB_QUERY_TIMEOUT / DB_AGGREGATE_TIMEOUT: round-trip timeouts in seconds

        Args:
            mode: Override environment mode (default: reads from APP_ENV)
        """
        mode = load_app_environment(mode)

        config = cls(
            host=os.getenv('DB_HOST', 'localhost'),
            port=int(os.getenv('DB_PORT', '5432')),
            database=os.getenv('DB_NAME', 'moodnotes'),
            user=os.getenv('DB_USER', 'postgres'),
            password=os.getenv('DB_PASSWORD', ''),
            ssl_mode=os.getenv('DB_SSL_MODE', 'require' if mode == 'production' else 'prefer'),
            min_pool_size=int(os.getenv('DB_MIN_POOL_SIZE', '2')),
            max_pool_size=int(os.getenv('DB_MAX_POOL_SIZE', '10')),
            query_timeout=float(os.getenv('DB_QUERY_TIMEOUT', '3')),
            aggregate_timeout=float(os.getenv('DB_AGGREGATE_TIMEOUT', '5')),
        )

        config.validate_safety(mode)

        return config

    def validate_safety(self, mode: str):
        """Ensure configuration is safe for the requested mode"""
        if mode == 'test':
            if 'test' not in self.database:
                raise ValueError(f"SAFETY ERROR: Test mode requested but database is '{self.database}'. Test database must contain 'test'.")
            if 'prod' in self.database:
                raise ValueError(f"SAFETY ERROR: Test mode requested but database '{self.database}' appears to be production.")

    @classmethod
    def for_testing(cls) -> 'DatabaseConfig':
        """Configuration for test PostgreSQL database"""
        return cls(
            host='localhost',
            port=5432,
            database='moodnotes_test',
            user='postgres',
            password='postgres',
            ssl_mode='prefer',
            min_pool_size=2,
            max_pool_size=10,
        )


FALLBACK_EMOJI = "❓"
FALLBACK_COLOR = "#cccccc"


def _default_emotions() -> Tuple[EmotionDetail, ...]:
    return (
        EmotionDetail(name="Happy", emoji="😊", color="#FFCA28"),
        EmotionDetail(name="Sad", emoji="😢", color="#5C8DDE"),
        EmotionDetail(name="Angry", emoji="😠", color="#E53935"),
        EmotionDetail(name="Anxious", emoji="😟", color="#FFA000"),
        EmotionDetail(name="Calm", emoji="😌", color="#69B36C"),
        EmotionDetail(name="Excited", emoji="🤩", color="#F06292"),
        EmotionDetail(name="Neutral", emoji="😐", color="#A4B8D0"),
    )


@dataclass(frozen=True)
class EmotionPalette:
    """
    Default emotion metadata (name → emoji, color).

    Built explicitly and handed to whichever component needs it;
    nothing here is process-wide or mutable.
    """
    emotions: Tuple[EmotionDetail, ...] = field(default_factory=_default_emotions)

    def detail_for(self, name: str) -> EmotionDetail:
        """Palette entry for a name, or a neutral fallback for unknown names"""
        for emotion in self.emotions:
            if emotion.name == name:
                return emotion
        return EmotionDetail(name=name, emoji=FALLBACK_EMOJI, color=FALLBACK_COLOR)
