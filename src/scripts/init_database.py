"""Initialize the movie database schema.

Creates the tables defined in the SQLAlchemy models and optionally
seeds the canonical genres.

Usage:
    python -m src.scripts.init_database
    python -m src.scripts.init_database --drop  # Drop and recreate
    python -m src.scripts.init_database --seed  # Include canonical genres
"""

import argparse
import sys
from collections.abc import Sequence

from sqlalchemy import inspect, select

from src.database.connection import DatabaseConnection
from src.database.models import Base, Genre
from src.etl.errors import ConfigurationError
from src.etl.quality.genres import CANONICAL_GENRES
from src.settings import settings


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description="Initialize the movie database schema",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop existing tables before creating",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Seed canonical genres after creation",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check connection, don't modify schema",
    )
    return parser.parse_args(argv)


def drop_tables(db: DatabaseConnection) -> None:
    """Drop all tables of the schema.

    Args:
        db: DatabaseConnection instance.
    """
    print("🗑️  Dropping existing tables...")
    Base.metadata.drop_all(bind=db.sync_engine)
    print("✅ Tables dropped")


def create_tables(db: DatabaseConnection) -> None:
    """Create all tables from SQLAlchemy models.

    Args:
        db: DatabaseConnection instance.
    """
    print("📋 Creating tables...")
    Base.metadata.create_all(bind=db.sync_engine)
    print("✅ Tables created")


def seed_genres(db: DatabaseConnection) -> int:
    """Insert the canonical genres that are not present yet.

    Args:
        db: DatabaseConnection instance.

    Returns:
        Number of genres inserted.
    """
    with db.session() as session:
        existing = set(session.execute(select(Genre.name)).scalars())
        missing = [name for name in CANONICAL_GENRES if name not in existing]
        session.add_all(Genre(name=name) for name in missing)

    print(f"✅ Seeded {len(missing)} genres ({len(CANONICAL_GENRES) - len(missing)} present)")
    return len(missing)


def print_table_summary(db: DatabaseConnection) -> None:
    """Print summary of existing tables.

    Args:
        db: DatabaseConnection instance.
    """
    tables = sorted(inspect(db.sync_engine).get_table_names())

    print("\n📊 Database Tables:")
    print("-" * 40)
    for table in tables:
        print(f"   • {table}")
    print("-" * 40)
    print(f"   Total: {len(tables)} tables")


def _print_banner(db: DatabaseConnection) -> None:
    """Print the banner with the target database."""
    print("=" * 50)
    print("🎬 Movie Database Initialization")
    print("=" * 50)
    print(f"   Dialect: {db.dialect_name}")
    print(f"   Database: {db.sync_engine.url.database}")
    print("=" * 50)


def _perform_database_operations(db: DatabaseConnection, args: argparse.Namespace) -> int:
    """Perform the main database operations based on arguments.

    Args:
        db: DatabaseConnection instance.
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    if args.check:
        print_table_summary(db)
        return 0

    if args.drop:
        drop_tables(db)

    create_tables(db)

    if args.seed:
        print("\n🌱 Seeding reference data...")
        seed_genres(db)

    print_table_summary(db)
    print("\n✅ Database initialization complete!")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    args = parse_args(argv)

    try:
        db = DatabaseConnection(db_settings=settings.database)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    try:
        _print_banner(db)
        if not db.check_connection():
            print("❌ Cannot connect to database")
            return 1
        print("✅ Database connection successful")
        return _perform_database_operations(db, args)
    finally:
        db.dispose()


if __name__ == "__main__":
    sys.exit(main())
