from .errors import ResolutionError
from .models import FileChange, RepoState, StagingInfo, Tree

def mirror_tree(tree: Tree, status: str = "unmodified") -> StagingInfo:
    return {path: FileChange(path=path, status=status, content=content) for path, content in tree.items()}

def stage_file(state: RepoState, path: str) -> None:
    if path not in state.workingDirectory:
        raise ResolutionError(f"pathspec '{path}' did not match any files")
    state.index[path] = FileChange(path=path, status="staged", content=state.workingDirectory[path])

def get_staged_changes(state: RepoState) -> list[FileChange]:
    return [entry for entry in state.index.values() if entry.status != "unmodified"]

def apply_staged(tree: Tree, index: StagingInfo) -> Tree:
    """Parent tree overlaid with the index: deletions drop the path, everything else writes its content."""
    new_tree = dict(tree)
    for path, entry in index.items():
        if entry.status == "deleted":
            new_tree.pop(path, None)
        elif entry.content is not None:
            new_tree[path] = entry.content
    return new_tree

def tree_changes(old: Tree, new: Tree) -> list[FileChange]:
    """Entries that turn old into new when applied with apply_staged."""
    changes = [
        FileChange(path=path, status="staged", content=content)
        for path, content in new.items()
        if old.get(path) != content
    ]
    changes.extend(FileChange(path=path, status="deleted") for path in old if path not in new)
    return changes
