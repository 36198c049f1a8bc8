"""Diagnose an omcsa installation and optionally repair it."""

from pathlib import Path
from typing import Callable

from ..diagnostics import CLAUDE_MD_SECTION, HOOK_FILES, HOOK_REGISTRATION, DoctorReport, run_diagnostics
from ..installer import add_hooks_to_settings, get_hook_commands, install_hooks
from ..logging import get_logger
from .orchestration import NO_AGENTS_MESSAGE, ProjectRootError, regenerate_document, resolve_project_root, tool_error

SEVERITY_ICONS = {"ok": "✓", "info": "i", "warn": "!", "error": "✗"}


def _reinstall_hooks(root: Path) -> str:
    installed = install_hooks(root)
    return f"✓ Reinstalled {len(installed)} hook scripts"


def _register_hooks(root: Path) -> str:
    path = add_hooks_to_settings(root, get_hook_commands(root))
    return f"✓ Hooks registered in {path}"


def _regenerate_section(root: Path) -> str:
    result = regenerate_document(root)
    if result is None:
        return f"✗ Could not regenerate the orchestrator section: {NO_AGENTS_MESSAGE}"
    return f"✓ Orchestrator prompt written to {result.path}"


# Only project files are repaired here. Mode, agents and global settings are reported only.
FIXES: dict[str, Callable[[Path], str]] = {
    HOOK_FILES: _reinstall_hooks,
    HOOK_REGISTRATION: _register_hooks,
    CLAUDE_MD_SECTION: _regenerate_section,
}


def _render(report: DoctorReport) -> list[str]:
    lines = [f"{SEVERITY_ICONS[r.severity]} {r.name}: {r.message}" for r in report.results]
    for result in report.results:
        if result.fix and result.is_problem:
            lines.append(f"  {result.name}: {result.fix}")
    if report.maturity_level is not None:
        lines.append(f"Maturity: {report.maturity_level} (score {report.maturity_score})")
    lines.extend(f"- {s}" for s in report.suggestions)
    return lines


def diagnose(project_root: str, fix: bool = False) -> dict:
    """Check the health of an omcsa installation.

    Args:
        project_root: Project directory.
        fix: Repair fixable problems (hook scripts, hook registration and
            the orchestrator section), then check again.

    Returns:
        A dictionary with:
        - success: Whether the checks ran
        - healthy: True when no check reports an error
        - checks: One ``{name, severity, message, fix}`` entry per check
        - fixed: Repair steps taken, when ``fix`` is set
        - suggestions: Setup improvements worth considering
        - output: Human-readable report
    """
    try:
        root = resolve_project_root(project_root)
    except ProjectRootError as e:
        return {"success": False, "error": str(e)}

    report = run_diagnostics(root)
    fixed: list[str] = []
    if fix:
        try:
            for result in report.results:
                if result.fixable and result.is_problem:
                    fixed.append(FIXES[result.name](root))
        except OSError as e:
            error = tool_error("diagnose", e)
            error["fixed"] = fixed
            return error
        if fixed:
            get_logger().info(f"diagnose repaired {len(fixed)} problem(s) in {root}")
            report = run_diagnostics(root)

    lines = _render(report)
    if fixed:
        lines = ["Repairs:", *fixed, "", *lines]

    result = {
        "success": True,
        "healthy": all(r.severity != "error" for r in report.results),
        "checks": [r.model_dump(include={"name", "severity", "message", "fix"}) for r in report.results],
        "suggestions": report.suggestions,
        "maturity": report.maturity_level,
        "output": "\n".join(lines),
    }
    if fix:
        result["fixed"] = fixed
    return result
