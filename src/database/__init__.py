"""Database package for the movie ETL.

Provides connection management and the ORM models of the target schema.

Usage:
    from src.database import DatabaseConnection, Movie

    db = DatabaseConnection()
    with db.session() as session:
        session.get(Movie, "tt0000001")
"""

from src.database.connection import SUPPORTED_DIALECTS, DatabaseConnection
from src.database.models import (
    Base,
    Genre,
    GenreInMovie,
    Movie,
    Star,
    StarInMovie,
)

__all__ = [
    # Connection
    "DatabaseConnection",
    "SUPPORTED_DIALECTS",
    # Models
    "Base",
    "Genre",
    "GenreInMovie",
    "Movie",
    "Star",
    "StarInMovie",
]
