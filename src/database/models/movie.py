"""Movie model.

Stores one row per film of the ``mains`` dumps, keyed by the dump's
film id.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base


class Movie(Base):
    """Movie table.

    Attributes:
        id: Film id from the dump (``fid``).
        title: Film title.
        year: Release year.
        director: Director name, if known.
    """

    __tablename__ = "movies"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    director: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Movie(id='{self.id}', title='{self.title}', year={self.year})>"
