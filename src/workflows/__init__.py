"""
Workflows module - aggregation cycle orchestration.
"""
from workflows.aggregator import Aggregator

__all__ = [
    "Aggregator",
]
