# services/circulars/clause_tree.py

import logging
from typing import List, Optional, Sequence

from models.circular import Clause

logger = logging.getLogger(__name__)


def _index_of(clauses: List[Clause], clause_number: str) -> int:
    for idx, clause in enumerate(clauses):
        if clause.clause_number == clause_number:
            return idx
    return -1


def find_clause(clauses: List[Clause], path: Sequence[str]) -> Optional[Clause]:
    """Walk a clause path from a root clause list.

    Args:
        clauses: Root clause list (chapter, normal circular or annexure)
        path: Clause numbers from the root down to the target

    Returns:
        The clause at the end of the path, or None if any segment is missing
    """
    if not path:
        return None

    current = clauses
    target = None
    for clause_number in path:
        idx = _index_of(current, clause_number)
        if idx == -1:
            return None
        target = current[idx]
        current = target.clauses
    return target


def _sibling_list(clauses: List[Clause], path: Sequence[str]) -> Optional[List[Clause]]:
    """Return the list holding the last element of path"""
    if not path:
        return None
    if len(path) == 1:
        return clauses
    parent = find_clause(clauses, path[:-1])
    if parent is None:
        return None
    return parent.clauses


def insert_clause(
    clauses: List[Clause],
    clause: Clause,
    parent_path: Optional[Sequence[str]] = None,
) -> bool:
    if not parent_path:
        siblings = clauses
    else:
        parent = find_clause(clauses, parent_path)
        if parent is None:
            logger.error(f"Parent clause not found: {' > '.join(parent_path)}")
            return False
        siblings = parent.clauses

    if _index_of(siblings, clause.clause_number) != -1:
        logger.error(f"Clause {clause.clause_number} already exists at this level")
        return False

    siblings.append(clause)
    return True


def update_clause(
    clauses: List[Clause], path: Sequence[str], new_clause: Clause
) -> bool:
    """Replace the clause at path with new_clause.

    The replacement is stored exactly as given. Existing subclauses survive
    only if the caller copied them onto new_clause.
    """
    siblings = _sibling_list(clauses, path)
    if siblings is None:
        logger.error(f"Clause path not found: {' > '.join(path)}")
        return False

    idx = _index_of(siblings, path[-1])
    if idx == -1:
        logger.error(f"Clause path not found: {' > '.join(path)}")
        return False

    clash = _index_of(siblings, new_clause.clause_number)
    if clash not in (-1, idx):
        logger.error(
            f"Cannot renumber clause {path[-1]}: "
            f"{new_clause.clause_number} already exists at this level"
        )
        return False

    existing = siblings[idx]
    if existing.clauses and not new_clause.clauses:
        # Known sharp edge: a caller that forgets to carry children forward
        # drops the whole subtree.
        logger.warning(
            f"Update of clause {' > '.join(path)} discards "
            f"{count_clauses(existing.clauses)} subclause(s)"
        )

    siblings[idx] = new_clause
    return True


def delete_clause(clauses: List[Clause], path: Sequence[str]) -> bool:
    siblings = _sibling_list(clauses, path)
    idx = _index_of(siblings, path[-1]) if siblings is not None else -1
    if idx == -1:
        logger.error(f"Clause path not found: {' > '.join(path)}")
        return False

    del siblings[idx]
    return True


def count_clauses(clauses: List[Clause]) -> int:
    """Count clauses plus all of their descendants"""
    return sum(1 + count_clauses(clause.clauses) for clause in clauses)
