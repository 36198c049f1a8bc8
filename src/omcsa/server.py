"""MCP server for configuring agent orchestration in Claude Code projects.

This server scans the custom agents of a project, writes a maturity-adapted
orchestrator section into ``.claude/CLAUDE.md`` and installs the runtime
hooks (keyword detection, persistent modes, delegation enforcement and the
delegation logger).
"""

import os
from typing import Annotated, Optional

from mcp.server.fastmcp import FastMCP

from .logging import SERVER_ROLE, configure_logging
from .tools import (
    add_workflow as add_workflow_impl,
    apply_configuration as apply_configuration_impl,
    cancel_modes as cancel_modes_impl,
    diagnose as diagnose_impl,
    disable_omc as disable_omc_impl,
    enable_omc as enable_omc_impl,
    get_status as get_status_impl,
    init_orchestration as init_orchestration_impl,
    list_workflows as list_workflows_impl,
    refresh_agents as refresh_agents_impl,
    remove_workflow as remove_workflow_impl,
    switch_mode as switch_mode_impl,
    uninstall as uninstall_impl,
)

# Initialize the MCP server
mcp = FastMCP("OMCSA Orchestrator")

ProjectRoot = Annotated[
    str,
    "Project directory containing .claude/ (defaults to the server's working directory)",
]


def _root(project_root: str) -> str:
    return project_root or os.getcwd()


@mcp.tool()
def init_orchestration(
    project_root: ProjectRoot = "",
    mode: Annotated[
        Optional[str],
        "Install mode: standalone | omc-only | integrated. Auto-resolved from OMC detection when omitted.",
    ] = None,
    maturity: Annotated[
        Optional[str],
        "Prompt maturity: auto | full | LOW | MEDIUM | HIGH. Defaults to the config value or auto.",
    ] = None,
    generate_config: Annotated[
        bool,
        "Write .claude/omcsa.config.json generated from the discovered agents",
    ] = False,
) -> dict:
    """Set up orchestration for a project.

    CALL THIS FIRST in a project with custom agents in .claude/agents/.

    Scans agents, resolves the install mode, writes the orchestrator
    section into .claude/CLAUDE.md, installs hook scripts and registers
    them in .claude/settings.json.

    Returns:
        A dictionary with:
        - success: Whether setup succeeded
        - output: Step-by-step log
        - error: Error message if failed
        - mode: Resolved install mode
        - advisory: Advice when OMC was detected and no mode was given
        - agents: Discovered agents
        - maturity: Prompt level that was generated
    """
    return init_orchestration_impl(
        project_root=_root(project_root),
        mode=mode,
        maturity=maturity,
        generate_config=generate_config,
    )


@mcp.tool()
def apply_configuration(
    project_root: ProjectRoot = "",
    maturity: Annotated[Optional[str], "Prompt maturity override (auto | full | LOW | MEDIUM | HIGH)"] = None,
) -> dict:
    """Apply .claude/omcsa.config.json: regenerate the prompt and reinstall hooks."""
    return apply_configuration_impl(project_root=_root(project_root), maturity=maturity)


@mcp.tool()
def refresh_agents(
    project_root: ProjectRoot = "",
    maturity: Annotated[Optional[str], "Prompt maturity override (auto | full | LOW | MEDIUM | HIGH)"] = None,
) -> dict:
    """Rescan agent files and update the orchestrator section of CLAUDE.md.

    Removes the section when no agents are left.
    """
    return refresh_agents_impl(project_root=_root(project_root), maturity=maturity)


@mcp.tool()
def get_status(project_root: ProjectRoot = "") -> dict:
    """Report agents, install mode, OMC detection, hooks, active modes and recent delegations."""
    return get_status_impl(project_root=_root(project_root))


@mcp.tool()
def diagnose(
    project_root: ProjectRoot = "",
    fix: Annotated[
        bool, "Repair hook scripts, hook registration and the orchestrator section when they are broken"
    ] = False,
) -> dict:
    """Check the omcsa installation and report one result per check.

    The global ~/.claude/settings.json is never modified, even with fix enabled.
    """
    return diagnose_impl(project_root=_root(project_root), fix=fix)


@mcp.tool()
def switch_mode(
    mode: Annotated[str, "Install mode: standalone | omc-only | integrated"],
    project_root: ProjectRoot = "",
) -> dict:
    """Switch the install mode and regenerate the orchestrator prompt."""
    return switch_mode_impl(project_root=_root(project_root), mode=mode)


@mcp.tool()
def cancel_modes(project_root: ProjectRoot = "") -> dict:
    """Cancel active ralph/ultrawork modes and any running workflow."""
    return cancel_modes_impl(project_root=_root(project_root))


@mcp.tool()
def uninstall(project_root: ProjectRoot = "") -> dict:
    """Remove hooks, settings entries, the CLAUDE.md section, .omcsa/ and the config file."""
    return uninstall_impl(project_root=_root(project_root))


@mcp.tool()
def list_workflows(project_root: ProjectRoot = "") -> dict:
    """List configured workflows and the ones suggested for the current agents."""
    return list_workflows_impl(project_root=_root(project_root))


@mcp.tool()
def add_workflow(
    agents: Annotated[
        list[str],
        "Ordered agent names (at least 2), or [\"all\"] to add every suggested workflow",
    ],
    name: Annotated[Optional[str], "Workflow name (defaults to '<first agent>-flow')"] = None,
    project_root: ProjectRoot = "",
) -> dict:
    """Add a workflow pipeline to the config and regenerate the prompt."""
    return add_workflow_impl(project_root=_root(project_root), agents=agents, name=name)


@mcp.tool()
def remove_workflow(
    name: Annotated[str, "Name of the workflow to remove"],
    project_root: ProjectRoot = "",
) -> dict:
    """Remove a workflow pipeline from the config and regenerate the prompt."""
    return remove_workflow_impl(project_root=_root(project_root), name=name)


@mcp.tool()
def disable_omc(project_root: ProjectRoot = "") -> dict:
    """Disable the OMC plugin in ~/.claude/settings.json.

    The removed entries are backed up to .omcsa/omc-backup.json in the
    project; enable_omc restores them.
    """
    return disable_omc_impl(project_root=_root(project_root))


@mcp.tool()
def enable_omc(project_root: ProjectRoot = "") -> dict:
    """Re-enable the OMC plugin from the project backup."""
    return enable_omc_impl(project_root=_root(project_root))


def main():
    """Entry point for the MCP server."""
    configure_logging(SERVER_ROLE)
    mcp.run()


if __name__ == "__main__":
    main()
