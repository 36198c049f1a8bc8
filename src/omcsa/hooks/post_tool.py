"""PostToolUse handler: logs Task delegations and drives workflow pipelines."""

from pathlib import Path

from ..config import OmcsaConfig
from ..logging import get_logger
from ..logs import DelegationLogEntry, append_log_entry
from ..workflow import advance_workflow
from .models import HookInput, HookOutput

DELEGATION_TOOL = "Task"


def handle_post_tool(hook_input: HookInput, project_root: Path, config: OmcsaConfig, state_dir: Path) -> HookOutput:
    """Record a Task delegation and advance the active workflow run, if any."""
    if hook_input.tool_name != DELEGATION_TOOL:
        return HookOutput()

    tool_input = hook_input.tool_input
    agent = str(tool_input.get("subagent_type") or tool_input.get("subagentType") or "")
    session_id = hook_input.session_id or "unknown"

    entry = DelegationLogEntry(
        agent=agent or "unknown",
        model=str(tool_input.get("model") or "default"),
        description=str(tool_input.get("description") or ""),
        session_id=session_id,
    )
    try:
        append_log_entry(project_root, entry)
    except OSError as e:
        get_logger().warning(f"Could not write delegation log: {e}")

    if not config.workflows:
        return HookOutput()

    result = advance_workflow(state_dir, agent, config.workflows, session_id)
    return HookOutput(message=result.message)
