"""ETL loaders package.

Provides the per-table loaders and the DatabaseWriter facade writing
aggregated batches into the target database.
"""

from src.etl.loaders.base import BaseLoader, LoaderStats
from src.etl.loaders.genre import GenreIdCache, GenreLoader
from src.etl.loaders.movie import MovieLoader
from src.etl.loaders.relations import GenreMovieLoader, StarMovieLoader
from src.etl.loaders.star import StarLoader
from src.etl.loaders.upsert import build_upsert
from src.etl.loaders.writer import WRITE_ORDER, DatabaseWriter

__all__ = [
    "BaseLoader",
    "DatabaseWriter",
    "GenreIdCache",
    "GenreLoader",
    "GenreMovieLoader",
    "LoaderStats",
    "MovieLoader",
    "StarLoader",
    "StarMovieLoader",
    "WRITE_ORDER",
    "build_upsert",
]
