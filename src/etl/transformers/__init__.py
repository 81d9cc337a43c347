"""Transformers turning parsed XML records into typed domain records.

Usage:
    from src.etl.transformers import Transformer

    batch = Transformer(quality).transform(raw_file_result)
"""

from src.etl.transformers.base import BaseMapper, TransformStats
from src.etl.transformers.casts import CastMapper
from src.etl.transformers.helpers import (
    SourceKind,
    classify_source,
    clean_text,
    parse_year,
    star_id_for,
)
from src.etl.transformers.movies import MovieMapper
from src.etl.transformers.stars import StarMapper
from src.etl.transformers.transformer import Transformer

__all__ = [
    "BaseMapper",
    "CastMapper",
    "MovieMapper",
    "SourceKind",
    "StarMapper",
    "TransformStats",
    "Transformer",
    "classify_source",
    "clean_text",
    "parse_year",
    "star_id_for",
]
