import logging

from pydantic import BaseModel

from .errors import ConflictError, PreconditionError, ResolutionError
from .models import FileChange, RepoState, Tree
from .commit_helpers import get_tree, record_commit
from .graph_utils import find_merge_base
from .recreatedirectory import clear_index, recreate_directory
from .repo_utils import RepoContext, current_commit_id, get_current_branch, move_head, short_id
from .staging_helpers import tree_changes

logger = logging.getLogger(__name__)


class MergeResult(BaseModel):
    tree: dict[str, str]
    conflicts: list[str] = []

    @property
    def conflicted(self) -> bool:
        return bool(self.conflicts)


def conflict_markers(ours: str | None, theirs: str | None, label: str) -> str:
    return f"<<<<<<< HEAD\n{ours or ''}\n=======\n{theirs or ''}\n>>>>>>> {label}"

def three_way_merge(base: Tree, ours: Tree, theirs: Tree, label: str) -> MergeResult:
    """Merge two trees against their common base, path by path.

    A path changed on only one side takes that side (deletions included); a path
    changed differently on both sides gets conflict markers labelled with label.
    """
    merged: Tree = {}
    conflicts = []
    for path in sorted(set(base) | set(ours) | set(theirs)):
        base_content = base.get(path)
        our_content = ours.get(path)
        their_content = theirs.get(path)

        if our_content == their_content:
            resolved = our_content
        elif base_content == our_content:
            resolved = their_content
        elif base_content == their_content:
            resolved = our_content
        else:
            conflicts.append(path)
            resolved = conflict_markers(our_content, their_content, label)

        if resolved is not None:
            merged[path] = resolved
    return MergeResult(tree=merged, conflicts=conflicts)

def conflict_report(paths: list[str]) -> str:
    return "".join(f"CONFLICT (content): Merge conflict in {path}\n" for path in paths)

def resolve_merge_target(state: RepoState, name: str) -> str:
    commit_id = state.branches.get(name) or state.remoteBranches.get(name)
    if not commit_id:
        raise ResolutionError(f"'{name}' does not point to a valid commit")
    return commit_id

def merge_commits(ctx: RepoContext, branch_name: str) -> str:
    state = ctx.state
    target = resolve_merge_target(state, branch_name)
    head = current_commit_id(state)
    if head is None:
        raise PreconditionError("You are not currently on a branch.")
    if head == target:
        return "Already up to date."

    base = find_merge_base(state.commits, head, target)
    if base is None:
        raise PreconditionError("refusing to merge unrelated histories")
    if base == head:
        move_head(state, target)
        recreate_directory(state, get_tree(state, target))
        logger.debug("fast-forwarded %s to %s", head, target)
        return f"Updating {short_id(head)}..{short_id(target)}\nFast-forward"
    if base == target:
        return "Already up to date."

    result = three_way_merge(
        get_tree(state, base),
        get_tree(state, head),
        get_tree(state, target),
        label=branch_name,
    )
    state.workingDirectory = dict(result.tree)
    if result.conflicted:
        state.index = {
            path: FileChange(path=path, status="staged", content=content)
            for path, content in result.tree.items()
            if path not in result.conflicts
        }
        logger.warning("merge of %s into %s conflicted on %s", target, head, result.conflicts)
        raise ConflictError(
            conflict_report(result.conflicts)
            + "Automatic merge failed; fix conflicts and then commit the result.",
            result.conflicts,
        )

    message = f"Merge branch '{branch_name}' into {get_current_branch(state) or 'HEAD'}"
    commit = record_commit(ctx, message, [head, target], result.tree, tree_changes(get_tree(state, head), result.tree))
    move_head(state, commit.id)
    clear_index(state)
    return message
