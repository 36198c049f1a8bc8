"""Workflow pipeline management tools."""

from pathlib import Path
from typing import Optional

from ..config import OmcsaConfig, WorkflowDefinition, load_config, load_config_for_update, write_config
from ..errors import ConfigError
from ..workflow import generate_suggested_workflows
from .orchestration import ProjectRootError, discover_agents, regenerate_document, resolve_project_root, tool_error


def _format(name: str, definition: WorkflowDefinition) -> str:
    return f"{name}: {' -> '.join(definition.steps)}"


def _save_and_regenerate(root: Path, config: OmcsaConfig, steps: list[str]) -> None:
    path = write_config(root, config)
    steps.append(f"✓ Config saved to {path}")
    if regenerate_document(root, config=config) is not None:
        steps.append("✓ Orchestrator prompt regenerated")


def list_workflows(project_root: str) -> dict:
    """List configured workflows and the ones suggested for the current agents."""
    try:
        root = resolve_project_root(project_root)
    except ProjectRootError as e:
        return {"success": False, "error": str(e)}

    config = load_config(root)
    configured = config.workflows or {}
    suggested = generate_suggested_workflows(discover_agents(root, config))

    lines = [_format(name, wf) for name, wf in sorted(configured.items())] or ["No workflows configured."]
    return {
        "success": True,
        "workflows": {name: wf.steps for name, wf in configured.items()},
        "suggested": {name: wf.steps for name, wf in suggested.items()},
        "output": "\n".join(lines),
    }


def add_workflow(project_root: str, agents: list[str], name: Optional[str] = None) -> dict:
    """Add a workflow to the config.

    Args:
        project_root: Project directory.
        agents: Ordered agent names, or ``["all"]`` to add every suggested
            workflow for the discovered agents.
        name: Workflow name; defaults to ``<first agent>-flow``.

    The config file is left untouched when it currently has invalid content.
    """
    try:
        root = resolve_project_root(project_root)
        config = load_config_for_update(root)
    except (ProjectRootError, ConfigError) as e:
        return {"success": False, "error": str(e)}

    discovered = discover_agents(root, config)
    workflows = dict(config.workflows or {})
    steps = []

    if agents == ["all"]:
        suggested = generate_suggested_workflows(discovered)
        if not suggested:
            return {"success": False, "error": "No workflows can be suggested for the current agents."}
        workflows.update(suggested)
        steps.extend(f"✓ Added {_format(n, wf)}" for n, wf in sorted(suggested.items()))
    else:
        if len(agents) < 2:
            return {"success": False, "error": "A workflow needs at least 2 agents."}
        known = {a.name for a in discovered}
        unknown = [a for a in agents if a not in known]
        if unknown:
            return {"success": False, "error": f"Unknown agents: {', '.join(unknown)}"}
        name = name or f"{agents[0]}-flow"
        workflows[name] = WorkflowDefinition(steps=list(agents))
        steps.append(f"✓ Added {_format(name, workflows[name])}")

    config = config.model_copy(update={"workflows": workflows})
    try:
        _save_and_regenerate(root, config, steps)
    except OSError as e:
        return tool_error("add_workflow", e)
    return {
        "success": True,
        "workflows": {n: wf.steps for n, wf in workflows.items()},
        "output": "\n".join(steps),
    }


def remove_workflow(project_root: str, name: str) -> dict:
    """Remove a workflow by name. The ``workflows`` key is dropped when none remain."""
    try:
        root = resolve_project_root(project_root)
        config = load_config_for_update(root)
    except (ProjectRootError, ConfigError) as e:
        return {"success": False, "error": str(e)}

    workflows = dict(config.workflows or {})
    if name not in workflows:
        return {"success": False, "error": f'Workflow "{name}" not found.'}

    del workflows[name]
    steps = [f"✓ Removed workflow {name}"]
    config = config.model_copy(update={"workflows": workflows or None})
    try:
        _save_and_regenerate(root, config, steps)
    except OSError as e:
        return tool_error("remove_workflow", e)
    return {
        "success": True,
        "workflows": {n: wf.steps for n, wf in workflows.items()},
        "output": "\n".join(steps),
    }
