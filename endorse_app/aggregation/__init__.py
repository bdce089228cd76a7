"""
Aggregation reader for displayed endorsement totals.
"""
from .reader import AggregationReader

__all__ = ["AggregationReader"]
