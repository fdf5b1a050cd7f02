from .models import RepoState, Tree
from .staging_helpers import mirror_tree


def clear_index(state: RepoState) -> None:
    state.index = {}

def recreate_directory(state: RepoState, tree: Tree, mirror_index: bool = False) -> None:
    """Replace the working directory with a copy of tree.

    The index is either cleared or rebuilt to mirror the tree with every entry unmodified.
    """
    state.workingDirectory = dict(tree)
    if mirror_index:
        state.index = mirror_tree(tree)
    else:
        clear_index(state)
