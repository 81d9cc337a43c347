"""Star model.

Ids are synthetic (``nm`` plus eight digits), derived from the stage
name.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base


class Star(Base):
    """Star table.

    Attributes:
        id: Synthetic star id.
        name: Stage name.
        birth_year: Birth year, if known.
    """

    __tablename__ = "stars"

    id: Mapped[str] = mapped_column(String(10), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    birth_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Star(id='{self.id}', name='{self.name}')>"
