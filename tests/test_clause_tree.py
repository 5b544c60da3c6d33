# tests/test_clause_tree.py
import logging

from conftest import clause
from services.circulars.clause_tree import (
    count_clauses,
    delete_clause,
    find_clause,
    insert_clause,
    update_clause,
)


def build_tree():
    root = []
    insert_clause(root, clause("1"))
    insert_clause(root, clause("1.a"), ["1"])
    insert_clause(root, clause("1.a.i"), ["1", "1.a"])
    insert_clause(root, clause("2"))
    return root


def test_find_returns_inserted_clause_at_every_depth():
    root = []
    paths = [["1"], ["1", "1.a"], ["1", "1.a", "1.a.i"], ["1", "1.a", "1.a.i", "x"]]
    for path in paths:
        new = clause(path[-1], title=f"title {path[-1]}")
        assert insert_clause(root, new, path[:-1] or None)
        assert find_clause(root, path) is new


def test_find_missing_segment_returns_none():
    root = build_tree()
    assert find_clause(root, ["1", "missing"]) is None
    assert find_clause(root, ["2", "1.a"]) is None
    assert find_clause(root, []) is None


def test_insert_under_missing_parent_fails():
    root = build_tree()
    assert not insert_clause(root, clause("3.a"), ["3"])
    assert count_clauses(root) == 4


def test_insert_duplicate_sibling_fails():
    root = build_tree()
    assert not insert_clause(root, clause("1"))
    assert not insert_clause(root, clause("1.a"), ["1"])
    assert count_clauses(root) == 4


def test_same_number_allowed_under_different_parents():
    root = build_tree()
    assert insert_clause(root, clause("a"), ["1"])
    assert insert_clause(root, clause("a"), ["2"])


def test_insert_keeps_insertion_order():
    root = []
    for number in ["3", "1", "2"]:
        insert_clause(root, clause(number))
    assert [c.clause_number for c in root] == ["3", "1", "2"]


def test_update_replaces_in_place():
    root = build_tree()
    original = find_clause(root, ["1", "1.a"])
    replacement = clause("1.a", title="Renamed", children=original.clauses)
    assert update_clause(root, ["1", "1.a"], replacement)
    assert find_clause(root, ["1", "1.a"]).clause_title == "Renamed"
    assert find_clause(root, ["1", "1.a", "1.a.i"]) is not None


def test_update_can_renumber():
    root = build_tree()
    assert update_clause(root, ["2"], clause("3"))
    assert find_clause(root, ["3"]) is not None
    assert find_clause(root, ["2"]) is None
    assert [c.clause_number for c in root] == ["1", "3"]


def test_update_rejects_number_of_another_sibling():
    root = build_tree()
    assert not update_clause(root, ["2"], clause("1"))
    assert find_clause(root, ["2"]) is not None


def test_update_without_children_drops_subtree_and_warns(caplog):
    root = build_tree()
    with caplog.at_level(logging.WARNING):
        assert update_clause(root, ["1"], clause("1", title="No children"))
    assert find_clause(root, ["1", "1.a"]) is None
    assert "discards 2 subclause(s)" in caplog.text


def test_update_missing_path_fails():
    root = build_tree()
    assert not update_clause(root, ["1", "zz"], clause("zz"))
    assert not update_clause(root, [], clause("zz"))


def test_delete_removes_subtree():
    root = build_tree()
    assert delete_clause(root, ["1"])
    assert find_clause(root, ["1"]) is None
    assert find_clause(root, ["1", "1.a"]) is None
    assert find_clause(root, ["1", "1.a", "1.a.i"]) is None
    assert [c.clause_number for c in root] == ["2"]


def test_delete_nested_leaf():
    root = build_tree()
    assert delete_clause(root, ["1", "1.a", "1.a.i"])
    assert find_clause(root, ["1", "1.a"]).clauses == []


def test_delete_missing_path_fails():
    root = build_tree()
    assert not delete_clause(root, ["9"])
    assert not delete_clause(root, ["9", "1"])
    assert not delete_clause(root, [])
    assert count_clauses(root) == 4


def test_count_clauses_includes_descendants():
    assert count_clauses([]) == 0
    assert count_clauses(build_tree()) == 4
