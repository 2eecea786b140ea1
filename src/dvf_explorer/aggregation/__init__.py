"""Territorial aggregation module"""

from .aggregator import (
    AggregatedData,
    TerritoryIndex,
    TerritoryStats,
    TransactionAggregator,
    aggregate_median_by_key,
    build_indexes,
    compute_stats,
    compute_stats_by_dept
)

__all__ = [
    'AggregatedData',
    'TerritoryIndex',
    'TerritoryStats',
    'TransactionAggregator',
    'aggregate_median_by_key',
    'build_indexes',
    'compute_stats',
    'compute_stats_by_dept'
]
