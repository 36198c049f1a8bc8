"""Re-apply configuration and refresh the agent list."""

from pathlib import Path
from typing import Optional

from ..config import load_config
from ..document import has_section, remove_section
from ..errors import InvalidChoiceError
from ..installer import add_hooks_to_settings, get_hook_commands, install_hooks
from ..logs import clean_old_logs
from ..maturity import validate_maturity_mode
from ..utils import read_text_or_default
from .orchestration import (
    NO_AGENTS_MESSAGE,
    ProjectRootError,
    agent_summary,
    describe_regeneration,
    get_claude_md_path,
    regenerate_document,
    resolve_project_root,
    tool_error,
)

LOG_RETENTION_DAYS = 30


def _validated(project_root: str, maturity: Optional[str]):
    root = resolve_project_root(project_root)
    if maturity is not None:
        validate_maturity_mode(maturity)
    return root


def apply_configuration(project_root: str, maturity: Optional[str] = None) -> dict:
    """Regenerate the orchestrator prompt from the current config and reinstall hooks."""
    try:
        root = _validated(project_root, maturity)
    except (ProjectRootError, InvalidChoiceError) as e:
        return {"success": False, "error": str(e)}

    try:
        return _apply(root, maturity)
    except OSError as e:
        return tool_error("apply_configuration", e)


def _apply(root: Path, maturity: Optional[str]) -> dict:
    config = load_config(root)
    result = regenerate_document(root, maturity=maturity, config=config)
    if result is None:
        return {"success": False, "error": NO_AGENTS_MESSAGE}

    steps = describe_regeneration(result)
    steps.append(f"✓ Orchestrator prompt written to {result.path}")

    installed = install_hooks(root)
    add_hooks_to_settings(root, get_hook_commands(root))
    steps.append(f"✓ Reinstalled {len(installed)} hook scripts")

    cleaned = clean_old_logs(root, LOG_RETENTION_DAYS)
    if cleaned:
        steps.append(f"✓ Removed {cleaned} delegation log file(s) older than {LOG_RETENTION_DAYS} days")

    features = config.features
    steps.append(
        f"Features: ultrawork={features.ultrawork}, ralph={features.ralph}, "
        f"delegation={features.delegation_enforcement}, tiering={features.model_tiering}"
    )

    return {
        "success": True,
        "output": "\n".join(steps),
        "agents": agent_summary(result.agents),
        "maturity": result.level,
        "mode": result.mode,
    }


def refresh_agents(project_root: str, maturity: Optional[str] = None) -> dict:
    """Rescan agent files and rewrite the orchestrator section.

    When no agents remain, the section is removed instead.
    """
    try:
        root = _validated(project_root, maturity)
    except (ProjectRootError, InvalidChoiceError) as e:
        return {"success": False, "error": str(e)}

    try:
        return _refresh(root, maturity)
    except OSError as e:
        return tool_error("refresh_agents", e)


def _refresh(root: Path, maturity: Optional[str]) -> dict:
    result = regenerate_document(root, maturity=maturity)
    if result is None:
        claude_md = get_claude_md_path(root)
        content = read_text_or_default(claude_md)
        if content is not None and has_section(content):
            claude_md.write_text(remove_section(content), encoding="utf-8")
            return {
                "success": True,
                "output": "No agents found. Removed orchestrator section from CLAUDE.md.",
                "agents": [],
            }
        return {"success": True, "output": NO_AGENTS_MESSAGE, "agents": []}

    steps = describe_regeneration(result)
    steps.append(f"✓ Orchestrator prompt updated in {result.path}")
    return {
        "success": True,
        "output": "\n".join(steps),
        "agents": agent_summary(result.agents),
        "maturity": result.level,
    }
