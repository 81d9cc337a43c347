"""ETL package loading movie, star, and cast XML dumps into a relational store."""

from src.etl.errors import (
    ConfigurationError,
    ETLError,
    PersistenceConflict,
    StructuralParseError,
    ValidationRejection,
)

__all__ = [
    "ETLError",
    "StructuralParseError",
    "ValidationRejection",
    "PersistenceConflict",
    "ConfigurationError",
]
