"""Tests for rebase: fast-forward, replay onto upstream, conflicts."""

import unittest

from gitsim.commands import GitEngine
from gitsim.config import Settings
from gitsim.graph_utils import first_parent_chain
from gitsim.ids import SequentialIds


def new_engine() -> GitEngine:
    return GitEngine(settings=Settings(), ids=SequentialIds(), clock=lambda: 1_000)

def commit_file(engine: GitEngine, path: str, content: str, message: str):
    engine.write_file(path, content)
    engine.execute(f"git add {path}")
    return engine.execute(f'git commit -m "{message}"')


class TestRebase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = new_engine()
        commit_file(self.engine, "file1.txt", "one", "c1")
        self.engine.execute("git branch feature")

    def test_fast_forward_when_head_is_ancestor(self) -> None:
        self.engine.execute("git checkout feature")
        commit_file(self.engine, "file2.txt", "two", "c2")
        self.engine.execute("git checkout main")

        result = self.engine.execute("git rebase feature")
        self.assertTrue(result.success)
        self.assertIn("Fast-forward", result.message)
        state = self.engine.get_state()
        self.assertEqual(state.branches["main"], state.branches["feature"])
        self.assertEqual(state.workingDirectory, {"file1.txt": "one", "file2.txt": "two"})

    def test_up_to_date_when_target_is_ancestor(self) -> None:
        commit_file(self.engine, "file2.txt", "two", "c2")
        result = self.engine.execute("git rebase feature")
        self.assertTrue(result.success)
        self.assertIn("up to date", result.message)
        self.assertIsNone(result.snapshot)

    def test_replays_commits_onto_target(self) -> None:
        commit_file(self.engine, "main.txt", "m", "c2")
        self.engine.execute("git checkout feature")
        commit_file(self.engine, "feature.txt", "f1", "c3")
        commit_file(self.engine, "feature.txt", "f2", "c4")
        before = self.engine.get_state()
        originals = [before.commits[cid] for cid in ("c3", "c4")]

        result = self.engine.execute("git rebase main")
        self.assertTrue(result.success)
        self.assertEqual(result.message, "Successfully rebased and updated feature.")

        state = self.engine.get_state()
        chain = list(first_parent_chain(state.commits, state.branches["feature"]))
        self.assertEqual(chain[2:], ["c2", "c1"])
        replayed = [state.commits[cid] for cid in reversed(chain[:2])]
        for original, copy in zip(originals, replayed):
            self.assertNotEqual(original.id, copy.id)
            self.assertEqual(copy.message, original.message)
            self.assertEqual(copy.author, original.author)
            self.assertEqual(len(copy.parents), 1)
        self.assertEqual(
            replayed[-1].tree,
            {"file1.txt": "one", "main.txt": "m", "feature.txt": "f2"},
        )
        self.assertEqual(state.workingDirectory, replayed[-1].tree)
        self.assertTrue(all(entry.status == "unmodified" for entry in state.index.values()))
        # originals stay in the pool
        self.assertIn("c3", state.commits)
        self.assertIn("c4", state.commits)

    def test_merge_commits_are_flattened(self) -> None:
        self.engine.execute("git checkout feature")
        self.engine.execute("git branch side")
        commit_file(self.engine, "feature.txt", "f", "feature work")
        self.engine.execute("git checkout side")
        commit_file(self.engine, "side.txt", "s", "side work")
        self.engine.execute("git checkout feature")
        self.assertTrue(self.engine.execute("git merge side").success)
        self.engine.execute("git checkout main")
        commit_file(self.engine, "main.txt", "m", "main work")
        self.engine.execute("git checkout feature")
        before = self.engine.get_state()
        self.assertEqual(before.commits["c4"].parents, ["c2", "c3"])

        result = self.engine.execute("git rebase main")
        self.assertTrue(result.success)

        state = self.engine.get_state()
        self.assertEqual(set(state.commits) - set(before.commits), {"c6", "c7"})
        chain = list(first_parent_chain(state.commits, state.branches["feature"]))
        self.assertEqual(chain, ["c7", "c6", "c5", "c1"])
        self.assertEqual(state.commits["c6"].message, "feature work")
        self.assertEqual(state.commits["c7"].message, before.commits["c4"].message)
        self.assertEqual(state.commits["c7"].parents, ["c6"])
        self.assertEqual(
            state.commits["c7"].tree,
            {"file1.txt": "one", "feature.txt": "f", "side.txt": "s", "main.txt": "m"},
        )

    def test_conflict_aborts_whole_rebase(self) -> None:
        commit_file(self.engine, "file1.txt", "main change", "c2")
        self.engine.execute("git checkout feature")
        commit_file(self.engine, "other.txt", "ok", "c3")
        commit_file(self.engine, "file1.txt", "feature change", "c4")
        before = self.engine.get_state()

        result = self.engine.execute("git rebase main")
        self.assertFalse(result.success)
        self.assertIn("Conflict detected while replaying commit c4", result.message)
        self.assertIn("Rebase aborted", result.message)
        state = self.engine.get_state()
        self.assertEqual(state.branches, before.branches)
        self.assertEqual(set(state.commits), set(before.commits))
        self.assertEqual(
            state.workingDirectory["file1.txt"],
            "<<<<<<< HEAD\nmain change\n=======\nfeature change\n>>>>>>> c4",
        )

    def test_rebase_requires_branch(self) -> None:
        commit_file(self.engine, "file1.txt", "two", "c2")
        self.engine.execute("git checkout c1")
        result = self.engine.execute("git rebase main")
        self.assertFalse(result.success)
        self.assertIn("must be on a branch", result.message)

    def test_rebase_unknown_target(self) -> None:
        self.assertFalse(self.engine.execute("git rebase ghost").success)
        self.assertFalse(self.engine.execute("git rebase").success)


if __name__ == "__main__":
    unittest.main()
