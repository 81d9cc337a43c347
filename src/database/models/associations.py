"""Association tables between movies and stars or genres."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base


class StarInMovie(Base):
    """Association table for Star-Movie relationship.

    Attributes:
        star_id: Foreign key to stars.
        movie_id: Foreign key to movies.
    """

    __tablename__ = "stars_in_movies"

    star_id: Mapped[str] = mapped_column(
        String(10),
        ForeignKey("stars.id", ondelete="CASCADE"),
        primary_key=True,
    )
    movie_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    )


class GenreInMovie(Base):
    """Association table for Genre-Movie relationship.

    Attributes:
        genre_id: Foreign key to genres.
        movie_id: Foreign key to movies.
    """

    __tablename__ = "genres_in_movies"

    genre_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("genres.id", ondelete="CASCADE"),
        primary_key=True,
    )
    movie_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    )
