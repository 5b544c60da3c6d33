from .circular_service import CircularDataService
from .clause_tree import (
    count_clauses,
    delete_clause,
    find_clause,
    insert_clause,
    update_clause,
)
from .stats import calculate_master_stats, calculate_normal_stats

__all__ = [
    "CircularDataService",
    "count_clauses",
    "delete_clause",
    "find_clause",
    "insert_clause",
    "update_clause",
    "calculate_master_stats",
    "calculate_normal_stats",
]
