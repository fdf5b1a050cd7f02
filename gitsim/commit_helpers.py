import logging
import re

from .errors import ResolutionError
from .models import CommitInfo, FileChange, RepoState, Tree
from .repo_utils import RepoContext, current_commit_id, move_head

logger = logging.getLogger(__name__)

HEAD_ANCESTOR_RE = re.compile(r"^HEAD~(\d*)$")


def get_commit_info(state: RepoState, commit_id: str) -> CommitInfo:
    commit = state.commits.get(commit_id)
    if commit is None:
        raise ResolutionError(f"commit {commit_id} does not exist")
    return commit

def get_tree(state: RepoState, commit_id: str | None) -> Tree:
    """Tree of a commit, or the empty tree for an unborn reference."""
    if not commit_id:
        return {}
    return get_commit_info(state, commit_id).tree

def get_new_commit_id(ctx: RepoContext) -> str:
    new_id = ctx.ids.next_id()
    while new_id in ctx.state.commits:
        new_id = ctx.ids.next_id()
    return new_id

def record_commit(
    ctx: RepoContext,
    message: str,
    parents: list[str],
    tree: Tree,
    changes: list[FileChange],
    author: str | None = None,
    timestamp: int | None = None,
) -> CommitInfo:
    for parent in parents:
        if parent not in ctx.state.commits:
            raise ResolutionError(f"parent commit {parent} does not exist")
    commit = build_commit(ctx, message, parents, tree, changes, author, timestamp)
    ctx.state.commits[commit.id] = commit
    logger.debug("recorded commit %s (parents=%s)", commit.id, parents)
    return commit

def build_commit(
    ctx: RepoContext,
    message: str,
    parents: list[str],
    tree: Tree,
    changes: list[FileChange],
    author: str | None = None,
    timestamp: int | None = None,
) -> CommitInfo:
    """A commit object that is not yet part of the repository."""
    return CommitInfo(
        id=get_new_commit_id(ctx),
        message=message,
        parents=list(parents),
        timestamp=ctx.now() if timestamp is None else timestamp,
        author=author or ctx.settings.author,
        changes=[change.model_copy() for change in changes],
        tree=dict(tree),
    )

def commit_onto_head(ctx: RepoContext, message: str, tree: Tree, changes: list[FileChange], author: str | None = None) -> CommitInfo:
    head = current_commit_id(ctx.state)
    commit = record_commit(ctx, message, [head] if head else [], tree, changes, author)
    move_head(ctx.state, commit.id)
    return commit

def resolve_commit(state: RepoState, commit_ref: str) -> str:
    """Exact commit id, or a prefix matching exactly one commit."""
    if commit_ref in state.commits:
        return commit_ref
    matches = [commit_id for commit_id in state.commits if commit_id.startswith(commit_ref)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ResolutionError(f"short commit id {commit_ref} is ambiguous")
    raise ResolutionError(f"'{commit_ref}' is not a valid commit")

def commit_from_commit_or_branch(state: RepoState, ref: str) -> str:
    if state.branches.get(ref):
        return state.branches[ref]
    if state.remoteBranches.get(ref):
        return state.remoteBranches[ref]
    return resolve_commit(state, ref)

def resolve_revision(state: RepoState, target: str) -> str:
    """Resolve HEAD, HEAD~N, a branch, a remote-tracking pointer or a commit id prefix."""
    if target == "HEAD":
        head = current_commit_id(state)
        if head is None:
            raise ResolutionError("Failed to resolve HEAD")
        return head
    match = HEAD_ANCESTOR_RE.match(target)
    if match:
        steps = int(match.group(1) or 1)
        commit_id = current_commit_id(state)
        for _ in range(steps):
            if commit_id is None:
                break
            parents = get_commit_info(state, commit_id).parents
            commit_id = parents[0] if parents else None
        if commit_id is None:
            raise ResolutionError(f"Commit {target} not found")
        return commit_id
    try:
        return commit_from_commit_or_branch(state, target)
    except ResolutionError:
        raise ResolutionError(f"Commit {target} not found") from None
