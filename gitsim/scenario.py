import logging
from pathlib import Path

from .errors import GitSimError
from .models import RepoState

logger = logging.getLogger(__name__)


def load_scenario(path: Path | str) -> RepoState:
    """Read a full repository state saved as JSON (the shape get_state() produces)."""
    scenario_path = Path(path)
    if not scenario_path.exists():
        raise GitSimError(f"scenario file {scenario_path} does not exist")
    state = RepoState.model_validate_json(scenario_path.read_text())
    logger.debug("loaded scenario %s (%d commits)", scenario_path, len(state.commits))
    return state

def save_scenario(state: RepoState, path: Path | str) -> None:
    Path(path).write_text(state.model_dump_json(indent=4))
