import logging
import shlex
from typing import Any, Callable, Mapping, assert_never

from .config import Settings, get_settings
from .errors import ConflictError, GitSimError, PreconditionError, ResolutionError, UsageError
from .ids import HashIds, IdGenerator
from .models import CommandResult, DetachedHead, BranchHead, RepoState, ResetMode, StashAction
from .commit_helpers import commit_onto_head, get_commit_info, get_tree, resolve_revision
from .branching import checkout_commit, create_branch, delete_branch, list_branches, switch_branch
from .file_helpers import diff_index_against_tree, diff_worktree_against_index, render_diff
from .graph_utils import format_log
from .merging import merge_commits
from .recreatedirectory import clear_index, recreate_directory
from .remotes import add_remote, fetch, list_remotes, pull, push, remove_remote
from .repo_utils import (
    DiffRenderer,
    RepoContext,
    current_commit_id,
    get_current_branch,
    initial_state,
    location_label,
    move_head,
    now_millis,
    short_id,
)
from .rewriting import cherry_pick, rebase, revert
from .stashing import stash
from .staging_helpers import apply_staged, get_staged_changes, mirror_tree, stage_file, tree_changes

logger = logging.getLogger(__name__)

type Handler = Callable[[RepoContext, list[str]], str]


def map_command(command: str) -> Handler:
    commandsMap: dict[str, Handler] = {
        "init": init,
        "add": add,
        "commit": commit,
        "status": status,
        "log": log,
        "reset": reset,
        "stash": stash_command,
        "remote": remote,
        "push": push_command,
        "fetch": fetch_command,
        "pull": pull_command,
        "merge": merge,
        "diff": diff,
        "rebase": rebase_command,
        "cherry-pick": cherry_pick_command,
        "revert": revert_command,
        "branch": branch,
        "checkout": checkout,
    }
    if command not in commandsMap:
        raise UsageError(f"git: '{command}' is not a git command.")
    return commandsMap[command]

def split_words(line: str) -> list[str]:
    """Whitespace-separated words; quotes group words, backslashes stay literal.

    A line with an unbalanced quote (an apostrophe in a message) is split on whitespace alone.
    """
    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""
    try:
        return list(lexer)
    except ValueError:
        return line.split()

def dispatch(ctx: RepoContext, words: list[str]) -> str:
    if not words:
        raise UsageError("Command must start with 'git', 'touch', or 'echo'")
    verb, args = words[0], words[1:]
    if verb == "touch":
        return touch(ctx, args)
    if verb == "echo":
        return echo(ctx, args)
    if verb != "git":
        raise UsageError("Command must start with 'git', 'touch', or 'echo'")
    if not args:
        raise UsageError("usage: git <command> [<args>]")
    return map_command(args[0])(ctx, args[1:])


# file operations outside git

def touch(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("usage: touch <filename>")
    for path in args:
        ctx.state.workingDirectory.setdefault(path, "")
    return ""

def echo(ctx: RepoContext, args: list[str]) -> str:
    if ">" not in args or args.index(">") == len(args) - 1:
        raise UsageError('usage: echo "content" > <filename>')
    redirect = args.index(">")
    ctx.state.workingDirectory[args[redirect + 1]] = " ".join(args[:redirect])
    return ""


# index and history

def init(ctx: RepoContext, args: list[str]) -> str:
    ctx.state = initial_state(ctx.settings.default_branch)
    return "Initialized empty Git repository"

def add(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("Nothing specified, nothing added.")
    state = ctx.state
    for path in args:
        if path == ".":
            for file_path in state.workingDirectory:
                stage_file(state, file_path)
        else:
            stage_file(state, path)
    return ""

def commit(ctx: RepoContext, args: list[str]) -> str:
    if "-m" not in args or args.index("-m") + 1 >= len(args):
        raise UsageError("Aborting commit due to empty commit message.")
    message = " ".join(args[args.index("-m") + 1:])
    state = ctx.state
    if not state.index:
        raise PreconditionError("nothing to commit, working tree clean")

    parent = current_commit_id(state)
    parent_tree = get_tree(state, parent)
    new_tree = apply_staged(parent_tree, state.index)
    if parent and new_tree == parent_tree:
        raise PreconditionError("nothing to commit, working tree clean")

    commit_onto_head(ctx, message, new_tree, tree_changes(parent_tree, new_tree))
    state.index = mirror_tree(new_tree)
    return f"[{location_label(state)}] {message}"

def status(ctx: RepoContext, args: list[str]) -> str:
    state = ctx.state
    match state.HEAD:
        case BranchHead(value=name):
            lines = [f"On branch {name}"]
        case DetachedHead(value=commit_id):
            lines = [f"HEAD detached at {short_id(commit_id)}"]
        case _:
            assert_never(state.HEAD)

    head_tree = get_tree(state, current_commit_id(state))
    staged = sorted(entry.path for entry in get_staged_changes(state))
    unstaged = sorted(
        path for path, entry in state.index.items()
        if entry.status != "deleted" and state.workingDirectory.get(path) != entry.content
    )
    untracked = sorted(
        path for path in state.workingDirectory
        if path not in state.index and path not in head_tree
    )

    if not (staged or unstaged or untracked):
        lines.append("nothing to commit, working tree clean")
    if staged:
        lines.append("Changes to be committed:")
        lines.extend(f"  {path}" for path in staged)
    if unstaged:
        lines.append("Changes not staged for commit:")
        lines.extend(f"  {path}" for path in unstaged)
    if untracked:
        lines.append("Untracked files:")
        lines.extend(f"  {path}" for path in untracked)
    return "\n".join(lines)

def log(ctx: RepoContext, args: list[str]) -> str:
    head = current_commit_id(ctx.state)
    if head is None:
        raise PreconditionError(
            f"your current branch '{get_current_branch(ctx.state)}' does not have any commits yet"
        )
    return format_log(ctx.state.commits, head)

def reset(ctx: RepoContext, args: list[str]) -> str:
    mode = ResetMode.MIXED
    target = "HEAD"
    if args:
        if args[0].startswith("--"):
            try:
                mode = ResetMode(args[0][2:])
            except ValueError:
                raise UsageError(f"git reset: unknown option {args[0]}") from None
            if len(args) > 1:
                target = args[1]
        else:
            target = args[0]

    state = ctx.state
    commit_id = resolve_revision(state, target)
    target_commit = get_commit_info(state, commit_id)
    move_head(state, commit_id)
    match mode:
        case ResetMode.SOFT:
            pass
        case ResetMode.MIXED:
            clear_index(state)
        case ResetMode.HARD:
            recreate_directory(state, target_commit.tree)
        case _:
            assert_never(mode)
    return f"HEAD is now at {short_id(commit_id)} {target_commit.message}"

def diff(ctx: RepoContext, args: list[str]) -> str:
    state = ctx.state
    if "--cached" in args or "--staged" in args:
        head_tree = get_tree(state, current_commit_id(state))
        return diff_index_against_tree(state.index, head_tree, ctx.render_diff)
    return diff_worktree_against_index(state, ctx.render_diff)

def stash_command(ctx: RepoContext, args: list[str]) -> str:
    subcommand = args[0] if args else "push"
    if subcommand == "save":
        subcommand = "push"
    try:
        action = StashAction(subcommand)
    except ValueError:
        raise UsageError(f"git stash: unknown subcommand {subcommand}") from None
    words = args[1:]
    if words and words[0] == "-m":
        words = words[1:]
    return stash(ctx, action, " ".join(words) or None)


# branches

def branch(ctx: RepoContext, args: list[str]) -> str:
    state = ctx.state
    if not args:
        return list_branches(state)
    if args[0] in ("-d", "-D"):
        if len(args) < 2:
            raise UsageError("branch name required")
        delete_branch(state, args[1], protected=ctx.settings.default_branch)
        return f"Deleted branch {args[1]}."
    create_branch(state, args[0])
    return ""

def checkout(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("checkout: missing argument")
    state = ctx.state
    target = args[0]
    if target == "-b":
        if len(args) < 2:
            raise UsageError("switch `b' requires a value")
        target = args[1]
        create_branch(state, target)

    if target in state.branches:
        switch_branch(state, target)
        return f"Switched to branch '{target}'"
    try:
        checkout_commit(state, target)
    except ResolutionError:
        raise ResolutionError(f"pathspec '{target}' did not match any file(s) known to git") from None
    return f"Note: switching to '{target}'.\n\nYou are in 'detached HEAD' state."


# merge and history rewriting

def merge(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("No branch specified")
    return merge_commits(ctx, args[0])

def rebase_command(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("No branch specified")
    return rebase(ctx, args[0])

def cherry_pick_command(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("No commit specified")
    return cherry_pick(ctx, args[0])

def revert_command(ctx: RepoContext, args: list[str]) -> str:
    if not args:
        raise UsageError("No commit specified")
    return revert(ctx, args[0])


# remotes

def remote(ctx: RepoContext, args: list[str]) -> str:
    subcommand = args[0] if args else None
    if subcommand == "add":
        if len(args) < 3:
            raise UsageError("usage: git remote add <name> <url>")
        add_remote(ctx.state, args[1], args[2])
        return ""
    if subcommand in ("remove", "rm"):
        if len(args) < 2:
            raise UsageError("usage: git remote remove <name>")
        remove_remote(ctx.state, args[1])
        return ""
    if subcommand is None or subcommand == "-v":
        return list_remotes(ctx.state)
    raise UsageError(f"git remote: unknown subcommand {subcommand}")

def push_command(ctx: RepoContext, args: list[str]) -> str:
    remote_name = args[0] if args else ctx.settings.default_remote
    return push(ctx.state, remote_name, args[1] if len(args) > 1 else None)

def fetch_command(ctx: RepoContext, args: list[str]) -> str:
    return fetch(ctx.state, args[0] if args else ctx.settings.default_remote)

def pull_command(ctx: RepoContext, args: list[str]) -> str:
    remote_name = args[0] if args else ctx.settings.default_remote
    return pull(ctx.state, remote_name, args[1] if len(args) > 1 else None)


class GitEngine:
    """Owns one repository state and runs command lines against it.

    Every command works on a private copy of the state. The copy replaces the
    state when the command succeeds or stops on a merge conflict; any other
    failure discards it, leaving the state exactly as it was.
    """

    def __init__(
        self,
        state: RepoState | Mapping[str, Any] | None = None,
        *,
        settings: Settings | None = None,
        ids: IdGenerator | None = None,
        clock: Callable[[], int] | None = None,
        render_diff: DiffRenderer = render_diff,
    ) -> None:
        self.settings = settings or get_settings()
        self._ids = ids or HashIds(self.settings.id_seed, self.settings.id_length)
        self._clock = clock or now_millis
        self._render_diff = render_diff
        self._state = initial_state(self.settings.default_branch)
        if state is not None:
            self.load_state(state)

    def get_state(self) -> RepoState:
        return self._state.model_copy(deep=True)

    def load_state(self, state: RepoState | Mapping[str, Any]) -> None:
        """Adopt an externally built state wholesale, e.g. a lesson's starting repository."""
        if isinstance(state, RepoState):
            self._state = state.model_copy(deep=True)
        else:
            self._state = RepoState.model_validate(state).model_copy(deep=True)

    def write_file(self, path: str, content: str = "") -> None:
        self._state.workingDirectory[path] = content

    def execute(self, line: str) -> CommandResult:
        logger.debug("executing %r", line)
        words = split_words(line)
        ctx = RepoContext(
            state=self._state.model_copy(deep=True),
            settings=self.settings,
            ids=self._ids,
            clock=self._clock,
            render_diff=self._render_diff,
        )
        try:
            message = dispatch(ctx, words)
        except ConflictError as e:
            return self._adopt(ctx.state, success=False, message=str(e))
        except GitSimError as e:
            logger.debug("command %r failed: %s", line, e)
            return CommandResult(success=False, message=str(e))
        return self._adopt(ctx.state, success=True, message=message)

    def _adopt(self, new_state: RepoState, success: bool, message: str) -> CommandResult:
        changed = new_state != self._state
        self._state = new_state
        snapshot = new_state.model_copy(deep=True) if changed else None
        return CommandResult(success=success, message=message, snapshot=snapshot)
