class GitSimError(Exception):
    """Base class for every failure a command can report."""
    pass


class UsageError(GitSimError):
    """Malformed or missing command arguments."""
    pass


class ResolutionError(GitSimError):
    """Unknown branch, commit, remote or reset target."""
    pass


class PreconditionError(GitSimError):
    """The repository is not in a state that allows the command."""
    pass


class ConflictError(GitSimError):
    """A three-way merge produced divergent paths.

    Unlike the other errors, the working directory written before raising is
    kept so the conflict markers can be resolved and committed.
    """

    def __init__(self, message: str, paths: list[str] | None = None):
        super().__init__(message)
        self.paths = paths or []
