from dataclasses import dataclass
from typing import Callable, assert_never
import time

from .config import Settings
from .errors import PreconditionError
from .ids import IdGenerator
from .models import BranchHead, DetachedHead, HeadInfo, RepoState

type DiffRenderer = Callable[[str, str, str], str]


@dataclass
class RepoContext:
    """The state a command operates on plus the collaborators it may consult."""
    state: RepoState
    settings: Settings
    ids: IdGenerator
    clock: Callable[[], int]
    render_diff: DiffRenderer

    def now(self) -> int:
        return self.clock()


def now_millis() -> int:
    return time.time_ns() // 1_000_000

def initial_state(default_branch: str = "main") -> RepoState:
    return RepoState(
        branches={default_branch: ""},
        HEAD=BranchHead(value=default_branch),
    )

def update_head(state: RepoState, new_head_info: HeadInfo) -> None:
    state.HEAD = new_head_info

def get_current_branch(state: RepoState) -> str | None:
    match state.HEAD:
        case BranchHead(value=name):
            return name
        case DetachedHead():
            return None
        case _:
            assert_never(state.HEAD)

def current_commit_id(state: RepoState) -> str | None:
    """Commit HEAD points at, or None while the current branch is unborn."""
    match state.HEAD:
        case BranchHead(value=name):
            return state.branches.get(name) or None
        case DetachedHead(value=commit_id):
            return commit_id
        case _:
            assert_never(state.HEAD)

def require_head_commit(state: RepoState) -> str:
    head = current_commit_id(state)
    if head is None:
        raise PreconditionError("You are not currently on a branch.")
    return head

def move_head(state: RepoState, commit_id: str) -> None:
    """Advance whatever HEAD is attached to: the branch, or HEAD itself when detached."""
    match state.HEAD:
        case BranchHead(value=name):
            state.branches[name] = commit_id
        case DetachedHead():
            update_head(state, DetachedHead(value=commit_id))
        case _:
            assert_never(state.HEAD)

def location_label(state: RepoState) -> str:
    return get_current_branch(state) or "detached"

def short_id(commit_id: str) -> str:
    return commit_id[:7]
