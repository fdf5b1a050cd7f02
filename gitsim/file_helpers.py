import difflib

from .models import RepoState, StagingInfo, Tree
from .repo_utils import DiffRenderer


def render_diff(path: str, old_content: str, new_content: str) -> str:
    """Unified diff of one file, headed the way `git diff` heads it."""
    lines = difflib.unified_diff(
        old_content.splitlines(),
        new_content.splitlines(),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        lineterm="",
    )
    body = "\n".join(lines)
    header = f"diff --git a/{path} b/{path}\n"
    return header + (body + "\n" if body else "")

def staged_content(index: StagingInfo, path: str) -> str:
    entry = index.get(path)
    if entry is None or entry.status == "deleted":
        return ""
    return entry.content or ""

def diff_index_against_tree(index: StagingInfo, tree: Tree, render: DiffRenderer) -> str:
    output = []
    for path in sorted(index):
        new_content = staged_content(index, path)
        old_content = tree.get(path)
        if old_content != new_content:
            output.append(render(path, old_content or "", new_content))
    for path in sorted(tree):
        if path not in index:
            output.append(render(path, tree[path], ""))
    return "".join(output)

def diff_worktree_against_index(state: RepoState, render: DiffRenderer) -> str:
    """Only paths the index tracks are compared; untracked files never show up."""
    output = []
    for path in sorted(state.index):
        index_content = staged_content(state.index, path)
        work_content = state.workingDirectory.get(path)
        if work_content is None:
            output.append(render(path, index_content, ""))
        elif work_content != index_content:
            output.append(render(path, index_content, work_content))
    return "".join(output)
