"""Switch install mode and cancel persistent modes."""

from pathlib import Path

from ..config import load_config
from ..detector import detect_omc, load_mode, save_mode, validate_mode
from ..errors import InvalidChoiceError
from ..hooks.state import clear_all_states, get_state_dir
from .orchestration import ProjectRootError, regenerate_document, resolve_project_root, tool_error

MODE_WARNINGS = {
    "standalone": "OMC is installed; running standalone alongside it may cause hook conflicts.",
    "omc-only": "OMC was not detected; omcsa runtime hooks will stay idle in omc-only mode.",
    "integrated": "OMC was not detected; integrated mode will list bundled OMC agents only.",
}


def switch_mode(project_root: str, mode: str) -> dict:
    """Persist a new install mode and regenerate the orchestrator prompt."""
    try:
        root = resolve_project_root(project_root)
        validate_mode(mode)
    except (ProjectRootError, InvalidChoiceError) as e:
        return {"success": False, "error": str(e)}

    try:
        return _switch(root, mode)
    except OSError as e:
        return tool_error("switch_mode", e)


def _switch(root: Path, mode: str) -> dict:
    current = load_mode(root)
    if current is not None and current.mode == mode:
        return {"success": True, "changed": False, "mode": mode, "output": f"Already in {mode} mode."}

    detection = detect_omc()
    save_mode(root, mode, detection)
    steps = [f"✓ Mode switched to {mode}"]

    warning = None
    if detection.found and mode == "standalone":
        warning = MODE_WARNINGS["standalone"]
    elif not detection.found and mode != "standalone":
        warning = MODE_WARNINGS[mode]
    if warning:
        steps.append(f"Warning: {warning}")

    result = regenerate_document(root, mode=mode, detection=detection)
    if result is not None:
        steps.append(f"✓ Orchestrator prompt regenerated ({result.level})")

    return {
        "success": True,
        "changed": True,
        "mode": mode,
        "previous": current.mode if current is not None else None,
        "warning": warning,
        "output": "\n".join(steps),
    }


def cancel_modes(project_root: str) -> dict:
    """Deactivate ralph, ultrawork and any workflow run by deleting their state files."""
    try:
        root = resolve_project_root(project_root)
    except ProjectRootError as e:
        return {"success": False, "error": str(e)}

    config = load_config(root)
    try:
        cleared = clear_all_states(get_state_dir(root, config.persistence.state_dir))
    except OSError as e:
        return tool_error("cancel_modes", e)
    if not cleared:
        return {"success": True, "cleared": [], "output": "No active modes."}
    return {
        "success": True,
        "cleared": cleared,
        "output": "Cancelled: " + ", ".join(cleared),
    }
