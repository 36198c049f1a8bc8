"""Install and uninstall orchestration in a project."""

import shutil
from pathlib import Path
from typing import Optional

from ..config import generate_config as build_config
from ..config import get_config_path, load_config, write_config
from ..detector import OMCSA_DIRNAME, detect_omc, resolve_install_mode, save_mode, validate_mode
from ..document import has_section, remove_section
from ..errors import InvalidChoiceError
from ..installer import add_hooks_to_settings, get_hook_commands, install_hooks, remove_hooks_from_settings, uninstall_hooks
from ..logging import get_logger
from ..maturity import validate_maturity_mode
from ..utils import read_text_or_default
from .orchestration import (
    NO_AGENTS_MESSAGE,
    ProjectRootError,
    agent_summary,
    describe_regeneration,
    discover_agents,
    get_claude_md_path,
    regenerate_document,
    resolve_project_root,
    tool_error,
)


def init_orchestration(
    project_root: str,
    mode: Optional[str] = None,
    maturity: Optional[str] = None,
    generate_config: bool = False,
) -> dict:
    """Set up orchestration for a project.

    Scans agents, resolves the install mode, writes the orchestrator section
    of ``.claude/CLAUDE.md``, installs hook launchers, registers them in the
    project settings and persists the mode.

    Returns:
        A dictionary with:
        - success: Whether setup completed
        - output: Step-by-step log
        - error: Error message if failed
        - mode: Resolved install mode
        - advisory: Mode advisory text, if any
        - agents: Discovered agents
        - maturity: Effective prompt level
    """
    try:
        root = resolve_project_root(project_root)
        if mode is not None:
            validate_mode(mode)
        if maturity is not None:
            validate_maturity_mode(maturity)
    except (ProjectRootError, InvalidChoiceError) as e:
        return {"success": False, "error": str(e)}

    try:
        return _init(root, mode, maturity, generate_config)
    except OSError as e:
        return tool_error("init_orchestration", e)


def _init(root: Path, mode: Optional[str], maturity: Optional[str], generate_config: bool) -> dict:
    config = load_config(root)
    agents = discover_agents(root, config)
    if not agents:
        return {
            "success": False,
            "error": NO_AGENTS_MESSAGE,
            "output": "Create agent files (.md) in .claude/agents/ first.",
        }

    steps = []
    detection = detect_omc()
    resolution = resolve_install_mode(mode, detection)
    steps.append(f"OMC: {detection.details}")
    steps.append(f"Mode: {resolution.mode}")

    if generate_config:
        config = build_config(agents)
        config_path = write_config(root, config)
        steps.append(f"✓ Config written to {config_path}")

    result = regenerate_document(root, maturity=maturity, config=config, mode=resolution.mode, detection=detection)
    steps.extend(describe_regeneration(result))
    steps.append(f"✓ Orchestrator prompt written to {result.path}")

    installed = install_hooks(root)
    steps.append(f"✓ Installed {len(installed)} hook scripts")
    settings_path = add_hooks_to_settings(root, get_hook_commands(root))
    steps.append(f"✓ Hooks registered in {settings_path}")

    save_mode(root, resolution.mode, detection)
    steps.append(f"✓ Mode saved: {resolution.mode}")
    get_logger().info(f"Initialized orchestration in {root} ({resolution.mode})")

    return {
        "success": True,
        "output": "\n".join(steps),
        "mode": resolution.mode,
        "advisory": resolution.advisory,
        "agents": agent_summary(result.agents),
        "maturity": result.level,
    }


def uninstall(project_root: str) -> dict:
    """Remove everything omcsa installed in a project.

    Deletes the hook launchers and their settings entries, the orchestrator
    section of ``.claude/CLAUDE.md``, the ``.omcsa/`` directory and the
    config file. Other content is left alone.
    """
    try:
        root = resolve_project_root(project_root)
    except ProjectRootError as e:
        return {"success": False, "error": str(e)}

    steps: list[str] = []
    try:
        _uninstall(root, steps)
    except OSError as e:
        result = tool_error("uninstall", e)
        result["output"] = "\n".join(steps)
        return result

    if not steps:
        steps.append("Nothing to uninstall.")
    return {"success": True, "output": "\n".join(steps)}


def _uninstall(root: Path, steps: list[str]) -> None:
    removed = uninstall_hooks(root)
    if removed:
        steps.append(f"✓ Removed hook scripts: {', '.join(removed)}")
    if remove_hooks_from_settings(root):
        steps.append("✓ Removed hook entries from .claude/settings.json")

    claude_md = get_claude_md_path(root)
    content = read_text_or_default(claude_md)
    if content is not None and has_section(content):
        claude_md.write_text(remove_section(content), encoding="utf-8")
        steps.append(f"✓ Removed orchestrator section from {claude_md}")

    omcsa_dir = root / OMCSA_DIRNAME
    if omcsa_dir.is_dir():
        shutil.rmtree(omcsa_dir)
        steps.append(f"✓ Removed {OMCSA_DIRNAME}/")

    config_path = get_config_path(root)
    if config_path.exists():
        config_path.unlink()
        steps.append(f"✓ Removed {config_path.name}")
