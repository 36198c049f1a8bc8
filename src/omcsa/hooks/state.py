"""Persistent mode state files (``{mode}-state.json`` in the state directory)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..utils import read_json_object, write_json

PersistentModeName = Literal["ralph", "ultrawork"]
PERSISTENT_MODES: tuple[PersistentModeName, ...] = ("ralph", "ultrawork")

DEFAULT_STATE_DIR = ".omcsa/state"


class PersistentState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    active: bool = True
    mode: PersistentModeName
    iteration: int = 1
    max_iterations: int = Field(default=10, alias="maxIterations")
    prompt: str = ""
    session_id: str = Field(default="unknown", alias="sessionId")
    started_at: str = Field(default="", alias="startedAt")


def get_state_dir(project_root: Path, state_dir: Optional[str] = None) -> Path:
    return project_root / (state_dir or DEFAULT_STATE_DIR)


def get_state_path(state_dir: Path, mode: str) -> Path:
    return state_dir / f"{mode}-state.json"


def read_state(state_dir: Path, mode: str) -> Optional[PersistentState]:
    data = read_json_object(get_state_path(state_dir, mode))
    if data is None:
        return None
    try:
        return PersistentState.model_validate(data)
    except ValidationError:
        return None


def write_state(state_dir: Path, state: PersistentState) -> None:
    write_json(get_state_path(state_dir, state.mode), state.model_dump(by_alias=True))


def clear_state(state_dir: Path, mode: str) -> bool:
    """Delete the state file for ``mode``. Returns True if one existed."""
    path = get_state_path(state_dir, mode)
    if not path.exists():
        return False
    path.unlink()
    return True


def clear_all_states(state_dir: Path) -> list[str]:
    """Delete every ``*-state.json`` file, workflow run included. Returns what was cleared."""
    if not state_dir.is_dir():
        return []
    cleared = []
    for path in sorted(state_dir.glob("*-state.json")):
        path.unlink()
        cleared.append(path.name[: -len("-state.json")])
    return cleared


def create_state(mode: PersistentModeName, prompt: str, session_id: str, max_iterations: int = 10) -> PersistentState:
    return PersistentState(
        mode=mode,
        iteration=1,
        max_iterations=max_iterations,
        prompt=prompt,
        session_id=session_id,
        started_at=datetime.now(timezone.utc).isoformat(),
    )


def increment_iteration(state_dir: Path, mode: str) -> Optional[PersistentState]:
    """Bump the iteration counter of an active state and persist it."""
    state = read_state(state_dir, mode)
    if state is None or not state.active:
        return None
    state.iteration += 1
    write_state(state_dir, state)
    return state
