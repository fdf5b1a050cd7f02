import logging
from typing import assert_never

from .errors import PreconditionError
from .models import RepoState, StashAction, StashEntry
from .commit_helpers import get_tree
from .recreatedirectory import recreate_directory
from .repo_utils import RepoContext, current_commit_id, location_label
from .staging_helpers import get_staged_changes

logger = logging.getLogger(__name__)


def has_local_changes(state: RepoState) -> bool:
    if get_staged_changes(state):
        return True
    return state.workingDirectory != get_tree(state, current_commit_id(state))

def stash_push(ctx: RepoContext, message: str | None = None) -> str:
    state = ctx.state
    if not has_local_changes(state):
        raise PreconditionError("No local changes to save")
    stash_id = ctx.ids.next_id()
    message = message or f"WIP on {location_label(state)}: {stash_id}"
    state.stash.append(StashEntry(
        id=stash_id,
        message=message,
        index={path: entry.model_copy() for path, entry in state.index.items()},
        workingDirectory=dict(state.workingDirectory),
        timestamp=ctx.now(),
    ))
    recreate_directory(state, get_tree(state, current_commit_id(state)), mirror_index=True)
    logger.debug("stashed %s (%d entries)", stash_id, len(state.stash))
    return f"Saved working directory and index state {message}"

def restore_stash(state: RepoState, drop: bool) -> str:
    if not state.stash:
        raise PreconditionError("No stash entries found.")
    entry = state.stash.pop() if drop else state.stash[-1]
    state.index = {path: change.model_copy() for path, change in entry.index.items()}
    state.workingDirectory = dict(entry.workingDirectory)
    if drop:
        return f"Dropped {entry.message} and applied changes"
    return f"Applied {entry.message}"

def stash_list(state: RepoState) -> str:
    size = len(state.stash)
    lines = [f"stash@{{{size - 1 - i}}}: {entry.message}" for i, entry in enumerate(state.stash)]
    return "\n".join(lines) or "stash list is empty"

def stash(ctx: RepoContext, action: StashAction, message: str | None = None) -> str:
    match action:
        case StashAction.PUSH:
            return stash_push(ctx, message)
        case StashAction.POP:
            return restore_stash(ctx.state, drop=True)
        case StashAction.APPLY:
            return restore_stash(ctx.state, drop=False)
        case StashAction.LIST:
            return stash_list(ctx.state)
        case _:
            assert_never(action)
