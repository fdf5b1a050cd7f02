"""In-memory remotes.

Each remote is backed by a MockServer holding its own branch pointers and commit
pool. Push and fetch copy commits along first parents only, stopping at the first
commit the receiving side already has.
"""
import logging

from .errors import PreconditionError, ResolutionError, UsageError
from .models import CommitInfo, MockServer, RepoState
from .commit_helpers import get_tree
from .graph_utils import is_ancestor
from .recreatedirectory import recreate_directory
from .repo_utils import get_current_branch, short_id

logger = logging.getLogger(__name__)


def add_remote(state: RepoState, name: str, url: str) -> None:
    if not name or not url:
        raise UsageError("usage: git remote add <name> <url>")
    state.remotes[name] = url
    state.mockServers.setdefault(name, MockServer())

def remove_remote(state: RepoState, name: str) -> None:
    if name not in state.remotes:
        raise ResolutionError(f"No such remote: '{name}'")
    del state.remotes[name]

def list_remotes(state: RepoState) -> str:
    lines = []
    for name, url in state.remotes.items():
        lines.append(f"{name}\t{url} (fetch)")
        lines.append(f"{name}\t{url} (push)")
    return "\n".join(lines)

def require_remote(state: RepoState, name: str) -> MockServer:
    if name not in state.remotes:
        raise ResolutionError(f"'{name}' does not appear to be a git repository")
    return state.mockServers.setdefault(name, MockServer())

def copy_missing_commits(source: dict[str, CommitInfo], target: dict[str, CommitInfo], tip: str) -> int:
    copied = 0
    commit_id: str | None = tip
    while commit_id and commit_id not in target:
        commit_info = source.get(commit_id)
        if commit_info is None:
            break
        target[commit_id] = commit_info.model_copy(deep=True)
        copied += 1
        commit_id = commit_info.parents[0] if commit_info.parents else None
    return copied

def push(state: RepoState, remote_name: str, branch_name: str | None = None) -> str:
    if branch_name is None:
        branch_name = get_current_branch(state)
        if branch_name is None:
            raise PreconditionError("You are not currently on a branch.")
    server = require_remote(state, remote_name)
    local_commit = state.branches.get(branch_name)
    if not local_commit:
        raise ResolutionError(f"src refspec {branch_name} does not match any")

    previous = server.branches.get(branch_name)
    copied = copy_missing_commits(state.commits, server.commits, local_commit)
    server.branches[branch_name] = local_commit
    state.remoteBranches[f"{remote_name}/{branch_name}"] = local_commit
    logger.debug("pushed %s to %s (%d commits)", branch_name, remote_name, copied)

    old_label = short_id(previous) if previous else "[new branch]"
    return f"To {state.remotes[remote_name]}\n   {old_label}..{short_id(local_commit)}  {branch_name} -> {branch_name}"

def fetch(state: RepoState, remote_name: str) -> str:
    server = require_remote(state, remote_name)
    updated = False
    for branch_name, commit_id in server.branches.items():
        copy_missing_commits(server.commits, state.commits, commit_id)
        tracking = f"{remote_name}/{branch_name}"
        if state.remoteBranches.get(tracking) != commit_id:
            state.remoteBranches[tracking] = commit_id
            updated = True
    return "Fetched updates" if updated else ""

def pull(state: RepoState, remote_name: str, branch_name: str | None = None) -> str:
    fetch(state, remote_name)
    current_branch = get_current_branch(state)
    if current_branch is None:
        raise PreconditionError("You are not currently on a branch.")
    tracking = f"{remote_name}/{branch_name or current_branch}"
    incoming = state.remoteBranches.get(tracking)
    if not incoming:
        return f"Already up to date. (No tracking info for {tracking})"

    local_commit = state.branches.get(current_branch) or None
    if local_commit == incoming or (local_commit and is_ancestor(state.commits, incoming, local_commit)):
        return "Already up to date."
    if local_commit is not None and not is_ancestor(state.commits, local_commit, incoming):
        raise PreconditionError("Not possible to fast-forward, aborting.")

    state.branches[current_branch] = incoming
    recreate_directory(state, get_tree(state, incoming))
    old_label = short_id(local_commit) if local_commit else "null"
    return f"Updating {old_label}..{short_id(incoming)}\nFast-forward"
