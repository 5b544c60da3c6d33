# services/circulars/stats.py

from typing import Optional

from models.circular import CircularContent, CircularStats, NormalCircularContent
from .clause_tree import count_clauses


def calculate_master_stats(circular: CircularContent) -> CircularStats:
    return CircularStats(
        chapters_count=len(circular.content),
        clauses_count=sum(count_clauses(chapter.clauses) for chapter in circular.content),
        annexures_count=len(circular.annexures),
    )


def calculate_normal_stats(circular: Optional[NormalCircularContent]) -> CircularStats:
    """Normal circulars have no chapters; an unknown circular counts as empty"""
    if circular is None:
        return CircularStats()
    return CircularStats(
        chapters_count=0,
        clauses_count=count_clauses(circular.clauses),
        annexures_count=len(circular.annexures),
    )
