"""Genre model.

Stores canonical genre names under a generated surrogate id.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base


class Genre(Base):
    """Genre reference table.

    Attributes:
        id: Generated primary key.
        name: Canonical genre name.
    """

    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Genre(id={self.id}, name='{self.name}')>"
