"""ETL data types package.

Exports the raw tree variant, typed domain records, and pipeline
control structures used throughout the ETL.

Usage:
    from src.etl.types import MovieRecord, RawFileResult, TransformedBatch
"""

from src.etl.types.pipeline import (
    PipelineConfig,
    PipelineRunResult,
    PipelineState,
    StructureOverride,
)
from src.etl.types.raw import (
    ATTRIBUTE_PREFIX,
    TEXT_KEY,
    Node,
    RawList,
    RawTree,
    Scalar,
    child,
    nodes_of,
    scalars_of,
    text_of,
)
from src.etl.types.records import (
    GenreMovieRelationRecord,
    MovieRecord,
    RawFileResult,
    StarMovieRelation,
    StarRecord,
    TransformedBatch,
)

__all__ = [
    # Raw trees
    "ATTRIBUTE_PREFIX",
    "TEXT_KEY",
    "Node",
    "RawList",
    "RawTree",
    "Scalar",
    "child",
    "nodes_of",
    "scalars_of",
    "text_of",
    # Records
    "GenreMovieRelationRecord",
    "MovieRecord",
    "RawFileResult",
    "StarMovieRelation",
    "StarRecord",
    "TransformedBatch",
    # Pipeline
    "PipelineConfig",
    "PipelineRunResult",
    "PipelineState",
    "StructureOverride",
]
