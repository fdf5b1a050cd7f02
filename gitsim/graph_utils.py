from collections import deque
from datetime import datetime, timezone
from typing import Iterator, Mapping

from .models import CommitInfo

type CommitPool = Mapping[str, CommitInfo]


def first_parent_chain(commits: CommitPool, start: str | None) -> Iterator[str]:
    """Yield start and its first-parent ancestors, stopping at a root or an unknown id."""
    commit_id = start
    while commit_id and commit_id in commits:
        yield commit_id
        parents = commits[commit_id].parents
        commit_id = parents[0] if parents else None

def all_ancestors(commits: CommitPool, start: str) -> set[str]:
    """Every id reachable from start through any parent, start included."""
    seen = set()
    queue = deque([start])
    while queue:
        commit_id = queue.popleft()
        if commit_id in seen:
            continue
        seen.add(commit_id)
        commit_info = commits.get(commit_id)
        if commit_info is not None:
            queue.extend(commit_info.parents)
    return seen

def find_merge_base(commits: CommitPool, commit_a: str, commit_b: str) -> str | None:
    """First common ancestor met while walking breadth-first from commit_b.

    Not guaranteed to be the lowest common ancestor in criss-cross or octopus histories.
    """
    ancestors_a = all_ancestors(commits, commit_a)
    visited = set()
    queue = deque([commit_b])
    while queue:
        commit_id = queue.popleft()
        if commit_id in visited:
            continue
        visited.add(commit_id)
        if commit_id in ancestors_a:
            return commit_id
        commit_info = commits.get(commit_id)
        if commit_info is not None:
            queue.extend(commit_info.parents)
    return None

def is_ancestor(commits: CommitPool, ancestor: str, descendant: str) -> bool:
    """Whether ancestor lies on descendant's first-parent chain (a commit is its own ancestor)."""
    return any(commit_id == ancestor for commit_id in first_parent_chain(commits, descendant))

def format_timestamp(timestamp: int) -> str:
    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def format_log(commits: CommitPool, head: str) -> str:
    entries = []
    for commit_id in first_parent_chain(commits, head):
        commit_info = commits[commit_id]
        entries.append(
            f"commit {commit_id}\n"
            f"Author: {commit_info.author}\n"
            f"Date: {format_timestamp(commit_info.timestamp)}\n"
            f"\n    {commit_info.message}\n"
        )
    return "\n".join(entries).strip()
