"""Dispatch of hook events to their handlers.

Each handler loads the project config and mode record once and receives
them as arguments. Keyword detection, persistent mode and delegation
enforcement only run in ``standalone`` mode; in the other modes OMC owns
those concerns. The delegation logger runs in every mode.
"""

from pathlib import Path
from typing import Any

from ..config import apply_config_overrides, load_config
from ..detector import runtime_mode
from ..logging import get_logger
from ..scanner import scan_agents
from .delegation import check_delegation
from .keywords import handle_keywords
from .models import HookInput, HookOutput
from .persistent import check_persistent_mode
from .post_tool import handle_post_tool
from .state import get_state_dir

# Hook name -> host event it is registered under.
HOOK_EVENTS: dict[str, str] = {
    "keyword-detector": "UserPromptSubmit",
    "persistent-mode": "Stop",
    "pre-tool-use": "PreToolUse",
    "post-tool-logger": "PostToolUse",
}

STANDALONE_ONLY = frozenset({"keyword-detector", "persistent-mode", "pre-tool-use"})


def run_hook(hook: str, payload: dict[str, Any]) -> HookOutput:
    """Run the handler for ``hook`` on a decoded event payload.

    Raises:
        ValueError: If ``hook`` is not a known hook name.
    """
    if hook not in HOOK_EVENTS:
        raise ValueError(f"Unknown hook: {hook}")

    hook_input = HookInput.model_validate(payload)
    project_root = Path(hook_input.directory) if hook_input.directory else Path.cwd()

    mode = runtime_mode(project_root)
    if hook in STANDALONE_ONLY and mode != "standalone":
        get_logger().debug(f"[{hook}] yielding in {mode} mode")
        return HookOutput()

    config = load_config(project_root)
    state_dir = get_state_dir(project_root, config.persistence.state_dir)
    cancel_keyword = config.keywords.cancel[0] if config.keywords.cancel else "cancelomcsa"

    if hook == "keyword-detector":
        agent_names = [a.name for a in scan_agents(project_root)]
        return handle_keywords(hook_input, config, state_dir, agent_names)

    if hook == "persistent-mode":
        return check_persistent_mode(hook_input, state_dir, cancel_keyword)

    if hook == "pre-tool-use":
        level = config.features.delegation_enforcement
        if level == "off":
            return HookOutput()
        agents = apply_config_overrides(scan_agents(project_root), config)
        return check_delegation(hook_input, level, agents)

    return handle_post_tool(hook_input, project_root, config, state_dir)
