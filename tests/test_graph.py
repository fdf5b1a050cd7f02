"""Tests for the three-way merge engine and merge-base / ancestry search."""

import unittest

from gitsim.graph_utils import all_ancestors, find_merge_base, first_parent_chain, is_ancestor
from gitsim.merging import three_way_merge
from gitsim.models import CommitInfo


def make_commits(edges: dict[str, list[str]]) -> dict[str, CommitInfo]:
    return {
        commit_id: CommitInfo(id=commit_id, message=commit_id, parents=parents, timestamp=0, author="T")
        for commit_id, parents in edges.items()
    }


class TestThreeWayMerge(unittest.TestCase):
    def test_one_sided_changes_are_taken(self) -> None:
        base = {"a": "1", "b": "1", "gone": "x"}
        ours = {"a": "2", "b": "1", "gone": "x"}
        theirs = {"a": "1", "b": "3", "new": "n"}
        result = three_way_merge(base, ours, theirs, label="feature")
        self.assertFalse(result.conflicted)
        self.assertEqual(result.tree, {"a": "2", "b": "3", "new": "n"})

    def test_identical_changes_do_not_conflict(self) -> None:
        result = three_way_merge({"a": "1"}, {"a": "2"}, {"a": "2"}, label="x")
        self.assertEqual(result.tree, {"a": "2"})
        self.assertEqual(result.conflicts, [])

    def test_divergent_changes_get_markers(self) -> None:
        result = three_way_merge({"f": "base"}, {"f": "ours"}, {"f": "theirs"}, label="feature")
        self.assertTrue(result.conflicted)
        self.assertEqual(result.conflicts, ["f"])
        self.assertEqual(result.tree["f"], "<<<<<<< HEAD\nours\n=======\ntheirs\n>>>>>>> feature")

    def test_modify_delete_conflict_uses_empty_side(self) -> None:
        result = three_way_merge({"f": "base"}, {"f": "changed"}, {}, label="t")
        self.assertEqual(result.tree["f"], "<<<<<<< HEAD\nchanged\n=======\n\n>>>>>>> t")

    def test_inputs_are_not_mutated(self) -> None:
        base, ours, theirs = {"a": "1"}, {"a": "1"}, {"a": "2"}
        three_way_merge(base, ours, theirs, label="t")
        self.assertEqual((base, ours, theirs), ({"a": "1"}, {"a": "1"}, {"a": "2"}))


class TestMergeBase(unittest.TestCase):
    def setUp(self) -> None:
        #   r - a1 - a2        (a)
        #    \
        #     b1 - b2 - m      (b, m merges a1)
        self.commits = make_commits({
            "r": [],
            "a1": ["r"],
            "a2": ["a1"],
            "b1": ["r"],
            "b2": ["b1"],
            "m": ["b2", "a1"],
            "lonely": [],
        })

    def test_merge_base_of_self(self) -> None:
        self.assertEqual(find_merge_base(self.commits, "a2", "a2"), "a2")

    def test_merge_base_of_diverged_branches(self) -> None:
        self.assertEqual(find_merge_base(self.commits, "a2", "b2"), "r")
        self.assertEqual(find_merge_base(self.commits, "b2", "a2"), "r")

    def test_merge_base_follows_second_parents(self) -> None:
        self.assertEqual(find_merge_base(self.commits, "a2", "m"), "a1")

    def test_merge_base_is_ancestor_of_both_in_either_order(self) -> None:
        ids = ["r", "a1", "a2", "b1", "b2", "m"]
        for a in ids:
            for b in ids:
                base = find_merge_base(self.commits, a, b)
                self.assertIsNotNone(base)
                self.assertIn(base, all_ancestors(self.commits, a))
                self.assertIn(base, all_ancestors(self.commits, b))

    def test_unrelated_histories_have_no_base(self) -> None:
        self.assertIsNone(find_merge_base(self.commits, "a2", "lonely"))

    def test_is_ancestor_walks_first_parents(self) -> None:
        self.assertTrue(is_ancestor(self.commits, "r", "a2"))
        self.assertTrue(is_ancestor(self.commits, "a2", "a2"))
        self.assertFalse(is_ancestor(self.commits, "a2", "r"))
        self.assertFalse(is_ancestor(self.commits, "a1", "m"))

    def test_first_parent_chain(self) -> None:
        self.assertEqual(list(first_parent_chain(self.commits, "m")), ["m", "b2", "b1", "r"])
        self.assertEqual(list(first_parent_chain(self.commits, None)), [])


if __name__ == "__main__":
    unittest.main()
