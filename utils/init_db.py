"""
Database initialization script
Run this to set up the mood journal schema

Usage: python -m utils.init_db [init|seed|reset] [--force]
"""

import asyncio
import logging
import sys
from pathlib import Path

from config import DatabaseConfig, EmotionPalette
from database import DatabaseConnection, DatabaseMigration
from models import Mood, UserCreate
from repositories import MoodsRepository, UsersRepository
from utils.errors import DuplicateConstraintError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).parent.parent / "schema.sql"

SAMPLE_EMAIL = "demo@example.com"

# (emotion, title); names missing from the palette get the fallback emoji and color
SAMPLE_ENTRIES = [
    ("Happy", "Coffee with an old friend"),
    ("Calm", "Long walk by the river"),
    ("Anxious", "Deadline tomorrow"),
    ("Grateful", "Neighbours helped with the move"),
    ("Sad", "Rainy Sunday"),
]


async def initialize_database(config: DatabaseConfig, force: bool = False):
    """Initialize database with schema"""
    logger.info("Starting database initialization...")

    db = DatabaseConnection(config)
    await db.connect()

    try:
        migration = DatabaseMigration(db)

        if await migration.check_schema_exists():
            logger.warning("Database schema already exists!")

            if not force:
                response = input("Do you want to recreate the schema? This will DELETE ALL DATA! (yes/no): ")
                if response.lower() != 'yes':
                    logger.info("Aborted.")
                    return

            await migration.drop_schema()
            logger.info("Schema dropped.")

        await migration.apply_schema(str(SCHEMA_FILE))

        tables = await db.get_all_tables()
        logger.info(f"Database ready with {len(tables)} tables: {', '.join(tables)}")
    finally:
        await db.disconnect()


async def seed_sample_data(config: DatabaseConfig):
    """Create (or reuse) a demo account and add the sample entries to it"""
    logger.info("Seeding sample data...")

    db = DatabaseConnection(config)
    await db.connect()

    try:
        users = UsersRepository(db)
        try:
            user = await users.insert(UserCreate(
                name="Demo User", email=SAMPLE_EMAIL, password="demo-password", activated=True,
            ))
        except DuplicateConstraintError:
            user = await users.get_by_email(SAMPLE_EMAIL)
            logger.info(f"Reusing existing demo account {user.id}")

        palette = EmotionPalette()
        moods = MoodsRepository(db)
        for name, title in SAMPLE_ENTRIES:
            detail = palette.detail_for(name)
            await moods.insert(Mood(
                user_id=user.id,
                title=title,
                content=f"<p>A sample <b>{name}</b> entry.</p>",
                emotion=detail.name,
                emoji=detail.emoji,
                color=detail.color,
            ))
        logger.info(f"Created {len(SAMPLE_ENTRIES)} sample moods for {SAMPLE_EMAIL}")
    finally:
        await db.disconnect()


async def main():
    """Main entry point"""
    try:
        config = DatabaseConfig.from_environment()
        logger.info(f"Connecting to: {config.host}:{config.port}/{config.database}")
    except ValueError as e:
        logger.error(f"Failed to load configuration: {e}")
        logger.info("Make sure you have a .env file or environment variables set.")
        sys.exit(1)

    if len(sys.argv) < 2:
        print("Usage: python -m utils.init_db [command] [--force]")
        print("\nCommands:")
        print("  init   - Initialize database schema")
        print("  seed   - Seed a demo account with sample moods")
        print("  reset  - Drop and recreate schema with sample data")
        sys.exit(1)

    command = sys.argv[1]
    force = "--force" in sys.argv or "-f" in sys.argv

    if command == "init":
        await initialize_database(config, force=force)
    elif command == "seed":
        await seed_sample_data(config)
    elif command == "reset":
        await initialize_database(config, force=True)
        await seed_sample_data(config)
    else:
        logger.error(f"Unknown command: {command}")
        sys.exit(1)


def cli_entry():
    asyncio.run(main())


if __name__ == "__main__":
    cli_entry()
