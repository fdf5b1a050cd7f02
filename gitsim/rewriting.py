"""Rebase, cherry-pick and revert: history rewriting built on the three-way merge.

Each replayed or picked commit is merged with the base set to its parent (or, for
revert, to the commit itself), so only that commit's own change is carried over.
"""
import logging

from .errors import ConflictError, PreconditionError
from .models import CommitInfo, Tree
from .commit_helpers import build_commit, commit_onto_head, get_commit_info, get_tree, resolve_commit
from .graph_utils import find_merge_base, is_ancestor
from .merging import conflict_report, resolve_merge_target, three_way_merge
from .recreatedirectory import recreate_directory
from .repo_utils import RepoContext, get_current_branch, location_label, require_head_commit, short_id
from .staging_helpers import tree_changes

logger = logging.getLogger(__name__)


def parent_tree(ctx: RepoContext, commit_info: CommitInfo) -> Tree:
    return get_tree(ctx.state, commit_info.parents[0] if commit_info.parents else None)

def commits_to_replay(ctx: RepoContext, head: str, merge_base: str) -> list[CommitInfo]:
    """HEAD's own commits since merge_base along first parents, oldest first.

    Second parents of merge commits in the range are not followed, so merges are flattened.
    """
    collected = []
    commit_id: str | None = head
    while commit_id and commit_id != merge_base:
        commit_info = get_commit_info(ctx.state, commit_id)
        collected.append(commit_info)
        commit_id = commit_info.parents[0] if commit_info.parents else None
    collected.reverse()
    return collected

def rebase(ctx: RepoContext, target_name: str) -> str:
    state = ctx.state
    target = resolve_merge_target(state, target_name)
    head = require_head_commit(state)
    branch = get_current_branch(state)
    if branch is None:
        raise PreconditionError("You must be on a branch to rebase.")
    if head == target:
        return "Current branch is up to date."

    merge_base = find_merge_base(state.commits, head, target)
    if merge_base is None:
        raise PreconditionError("refusing to rebase unrelated histories")
    if merge_base == head or is_ancestor(state.commits, head, target):
        state.branches[branch] = target
        recreate_directory(state, get_tree(state, target), mirror_index=True)
        return f"Fast-forwarded {branch} to {target_name}"
    if merge_base == target or is_ancestor(state.commits, target, head):
        return "Current branch is already up to date with target."

    # Replayed commits are dropped again if a later step conflicts
    replayed: list[CommitInfo] = []
    rolling_base = target
    rolling_tree = get_tree(state, target)
    for original in commits_to_replay(ctx, head, merge_base):
        result = three_way_merge(
            parent_tree(ctx, original),
            rolling_tree,
            original.tree,
            label=short_id(original.id),
        )
        if result.conflicted:
            for abandoned in replayed:
                del state.commits[abandoned.id]
            state.workingDirectory = dict(result.tree)
            logger.warning("rebase of %s onto %s stopped at %s", branch, target, original.id)
            raise ConflictError(
                conflict_report(result.conflicts)
                + f"Conflict detected while replaying commit {short_id(original.id)}. Rebase aborted.",
                result.conflicts,
            )
        new_commit = build_commit(
            ctx,
            original.message,
            [rolling_base],
            result.tree,
            tree_changes(rolling_tree, result.tree),
            author=original.author,
            timestamp=original.timestamp,
        )
        state.commits[new_commit.id] = new_commit
        replayed.append(new_commit)
        logger.debug("replayed %s as %s", original.id, new_commit.id)
        rolling_base = new_commit.id
        rolling_tree = result.tree

    state.branches[branch] = rolling_base
    recreate_directory(state, rolling_tree, mirror_index=True)
    return f"Successfully rebased and updated {branch}."

def cherry_pick(ctx: RepoContext, commit_ref: str) -> str:
    state = ctx.state
    picked = get_commit_info(state, resolve_commit(state, commit_ref))
    head = require_head_commit(state)
    if not picked.parents:
        raise PreconditionError("Cannot cherry-pick a root commit")

    result = three_way_merge(
        parent_tree(ctx, picked),
        get_tree(state, head),
        picked.tree,
        label=short_id(picked.id),
    )
    if result.conflicted:
        state.workingDirectory = dict(result.tree)
        logger.warning("cherry-pick of %s conflicted on %s", picked.id, result.conflicts)
        raise ConflictError(
            conflict_report(result.conflicts)
            + f"Conflict detected while cherry-picking {short_id(picked.id)}. Fix conflicts and commit.",
            result.conflicts,
        )

    changes = tree_changes(get_tree(state, head), result.tree)
    commit_onto_head(ctx, picked.message, result.tree, changes, author=picked.author)
    recreate_directory(state, result.tree, mirror_index=True)
    return f"[{location_label(state)}] {picked.message}"

def revert(ctx: RepoContext, commit_ref: str) -> str:
    state = ctx.state
    reverted = get_commit_info(state, resolve_commit(state, commit_ref))
    head = require_head_commit(state)
    if not reverted.parents:
        raise PreconditionError("Cannot revert a root commit")

    # inverse application: the commit is the base and its parent plays "theirs"
    result = three_way_merge(
        reverted.tree,
        get_tree(state, head),
        parent_tree(ctx, reverted),
        label=f"parent of {short_id(reverted.id)}",
    )
    if result.conflicted:
        state.workingDirectory = dict(result.tree)
        logger.warning("revert of %s conflicted on %s", reverted.id, result.conflicts)
        raise ConflictError(
            conflict_report(result.conflicts)
            + f"Conflict detected while reverting {short_id(reverted.id)}. Fix conflicts and commit.",
            result.conflicts,
        )

    message = f'Revert "{reverted.message}"'
    changes = tree_changes(get_tree(state, head), result.tree)
    commit_onto_head(ctx, message, result.tree, changes)
    recreate_directory(state, result.tree, mirror_index=True)
    return f"[{location_label(state)}] {message}"
