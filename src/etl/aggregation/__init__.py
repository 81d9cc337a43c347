"""Aggregation module for per-file batch fusion.

Merges the batches produced by the transform phase and removes
records that would break referential consistency.

Example:
    >>> from src.etl.aggregation import BatchAggregator
    >>> aggregator = BatchAggregator()
    >>> batch = aggregator.aggregate(per_file_batches)
    >>> aggregator.stats.orphan_movies_removed
"""

from src.etl.aggregation.aggregator import AggregationStats, BatchAggregator, aggregate
from src.etl.aggregation.merger import BatchMerger, MergeStats

__all__ = [
    "AggregationStats",
    "BatchAggregator",
    "BatchMerger",
    "MergeStats",
    "aggregate",
]
