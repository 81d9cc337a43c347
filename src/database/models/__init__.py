"""SQLAlchemy ORM models for the movie database.

Usage:
    from src.database.models import Base, Movie, Genre

Tables:
    - movies: Films from the mains dumps
    - stars: Performers from the actors and casts dumps
    - genres: Canonical genre names
    - stars_in_movies: Star-Movie association
    - genres_in_movies: Genre-Movie association
"""

from src.database.models.associations import GenreInMovie, StarInMovie
from src.database.models.base import Base
from src.database.models.genre import Genre
from src.database.models.movie import Movie
from src.database.models.star import Star

__all__ = [
    "Base",
    "Genre",
    "GenreInMovie",
    "Movie",
    "Star",
    "StarInMovie",
]
