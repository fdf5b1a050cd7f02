import logging

from .errors import PreconditionError, ResolutionError
from .models import BranchHead, DetachedHead, RepoState
from .commit_helpers import get_tree, resolve_commit
from .recreatedirectory import recreate_directory
from .repo_utils import current_commit_id, get_current_branch, update_head

logger = logging.getLogger(__name__)


def list_branches(state: RepoState) -> str:
    current_branch = get_current_branch(state)
    lines = []
    for branch_name in sorted(state.branches):
        prefix = "*" if branch_name == current_branch else " "
        lines.append(f"{prefix} {branch_name}")
    return "\n".join(lines)

def create_branch(state: RepoState, branch_name: str, start_commit: str | None = None) -> None:
    if branch_name in state.branches:
        raise PreconditionError(f"A branch named '{branch_name}' already exists.")
    if start_commit is None:
        start_commit = current_commit_id(state)
    if start_commit is None:
        raise PreconditionError(f"Not a valid object name: '{get_current_branch(state)}'.")
    state.branches[branch_name] = start_commit
    logger.debug("created branch %s at %s", branch_name, start_commit)

def delete_branch(state: RepoState, branch_name: str, protected: str = "main") -> None:
    if branch_name not in state.branches:
        raise ResolutionError(f"branch '{branch_name}' not found.")
    if get_current_branch(state) == branch_name:
        raise PreconditionError(f"Cannot delete branch '{branch_name}' checked out")
    if branch_name == protected:
        raise PreconditionError(f"Cannot delete the default branch '{branch_name}'")
    state.branches.pop(branch_name)

def switch_branch(state: RepoState, branch_name: str) -> None:
    if branch_name not in state.branches:
        raise ResolutionError(f"branch '{branch_name}' does not exist")
    update_head(state, BranchHead(value=branch_name))
    # an unborn branch has no tree to check out; the working directory is left alone
    new_commit_id = state.branches[branch_name]
    if new_commit_id:
        recreate_directory(state, get_tree(state, new_commit_id))

def checkout_commit(state: RepoState, commit_ref: str) -> str:
    commit_id = state.remoteBranches.get(commit_ref) or resolve_commit(state, commit_ref)
    update_head(state, DetachedHead(value=commit_id))
    recreate_directory(state, get_tree(state, commit_id))
    return commit_id
