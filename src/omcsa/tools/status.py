"""Status report for a project's orchestration setup."""

from ..config import get_config_path, load_config
from ..detector import detect_omc, load_mode
from ..document import has_section, remove_section
from ..hooks.state import PERSISTENT_MODES, get_state_dir, read_state
from ..installer import HOOKS, get_project_hooks_dir
from ..logs import get_last_session, get_today_logs
from ..maturity import analyze_maturity
from ..utils import read_text_or_default
from ..workflow import load_workflow_state
from .orchestration import ProjectRootError, agent_summary, discover_agents, get_claude_md_path, resolve_project_root


def get_status(project_root: str) -> dict:
    """Check the orchestration state of a project.

    Returns information about:
    - Discovered agents
    - Persisted install mode and OMC detection
    - Whether CLAUDE.md carries the orchestrator section
    - Installed hook scripts and enabled features
    - Active persistent modes and workflow run
    - Maturity analysis of CLAUDE.md
    - The most recent delegation session
    """
    try:
        root = resolve_project_root(project_root)
    except ProjectRootError as e:
        return {"success": False, "error": str(e)}

    config = load_config(root)
    agents = discover_agents(root, config)
    detection = detect_omc()
    record = load_mode(root)

    claude_md = read_text_or_default(get_claude_md_path(root), "") or ""
    maturity = analyze_maturity(remove_section(claude_md), agents)

    hooks_dir = get_project_hooks_dir(root)
    hooks = {hook.name: (hooks_dir / hook.filename).is_file() for hook in HOOKS}

    state_dir = get_state_dir(root, config.persistence.state_dir)
    active_modes = []
    for mode in PERSISTENT_MODES:
        state = read_state(state_dir, mode)
        if state is not None and state.active:
            active_modes.append({
                "mode": mode,
                "iteration": state.iteration,
                "max_iterations": state.max_iterations,
                "session_id": state.session_id,
            })

    run = load_workflow_state(state_dir)
    workflow_run = None
    if run is not None and run.is_running:
        workflow_run = {
            "workflow": run.workflow_name,
            "step": run.current_step_index,
            "total": len(run.steps),
            "completed": run.completed_steps,
            "next": run.expected_step,
        }

    last = get_last_session(root)
    last_session = None
    if last is not None:
        last_session = {
            "session_id": last.session_id,
            "delegations": last.agent_count,
            "agents": [e.agent for e in last.entries],
            "first": last.first_timestamp,
            "last": last.last_timestamp,
        }

    return {
        "success": True,
        "agents": agent_summary(agents),
        "mode": record.mode if record is not None else None,
        "mode_inferred": record is None,
        "omc": detection.model_dump(),
        "claude_md_section": has_section(claude_md),
        "config_file": get_config_path(root).is_file(),
        "hooks": hooks,
        "features": config.features.model_dump(),
        "active_modes": active_modes,
        "workflow_run": workflow_run,
        "workflows": sorted(config.workflows or {}),
        "maturity": {
            "level": maturity.level,
            "score": round(maturity.composite_score, 2),
            "details": maturity.details,
        },
        "today_delegations": len(get_today_logs(root)),
        "last_session": last_session,
    }
