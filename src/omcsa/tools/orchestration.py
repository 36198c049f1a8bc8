"""Prompt regeneration driver shared by the tools.

Loads config, mode and detection once per call and hands them to the pure
core functions as arguments.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import OmcsaConfig, apply_config_overrides, load_config
from ..detector import OmcDetectionResult, detect_omc, runtime_mode
from ..document import remove_section, update_document
from ..logging import get_logger
from ..maturity import MaturityResult, analyze_maturity, resolve_maturity_level
from ..models import AgentDescriptor
from ..omc_agents import scan_omc_agents
from ..prompt import PromptOptions, generate_orchestrator_prompt
from ..scanner import scan_agents
from ..utils import read_text_or_default

NO_AGENTS_MESSAGE = "No agents found in .claude/agents/ or ~/.claude/agents/"


class ProjectRootError(ValueError):
    """The project root passed to a tool is not a usable directory."""


def resolve_project_root(project_root: str) -> Path:
    root = Path(project_root).expanduser()
    if not root.is_dir():
        raise ProjectRootError(f"Project root is not a directory: {project_root}")
    return root.resolve()


def get_claude_md_path(project_root: Path) -> Path:
    return project_root / ".claude" / "CLAUDE.md"


def tool_error(tool: str, error: Exception) -> dict:
    """Log a failed tool call and build its error result."""
    get_logger().error(f"{tool} failed: {error}")
    return {"success": False, "error": str(error)}


def discover_agents(project_root: Path, config: OmcsaConfig) -> list[AgentDescriptor]:
    """Scan both agent roots and apply config overrides, logging skipped files."""
    skipped: list[Path] = []
    agents = scan_agents(project_root, skipped=skipped)
    for path in skipped:
        get_logger().warning(f"Skipped unparseable agent file: {path}")
    return apply_config_overrides(agents, config)


@dataclass
class Regeneration:
    """What a prompt regeneration produced."""

    agents: list[AgentDescriptor]
    maturity: MaturityResult
    level: str
    mode: str
    detection: OmcDetectionResult
    path: Path
    content: str
    omc_agent_source: Optional[str] = None


def regenerate_document(
    project_root: Path,
    maturity: Optional[str] = None,
    config: Optional[OmcsaConfig] = None,
    mode: Optional[str] = None,
    detection: Optional[OmcDetectionResult] = None,
    write: bool = True,
) -> Optional[Regeneration]:
    """Regenerate the omcsa section of ``.claude/CLAUDE.md``.

    Args:
        project_root: Resolved project directory.
        maturity: Explicit maturity mode, already validated.
        config: Config to use; loaded from disk when omitted.
        mode: Install mode; the persisted mode (or standalone) when omitted.
        detection: OMC detection result; detected when omitted.
        write: Whether to write the updated document.

    Returns:
        The regeneration details, or None when no agents were found (the
        document is left untouched).
    """
    config = config or load_config(project_root)
    agents = discover_agents(project_root, config)
    if not agents:
        return None

    detection = detection or detect_omc()
    mode = mode or runtime_mode(project_root)

    path = get_claude_md_path(project_root)
    existing = read_text_or_default(path, "") or ""

    analyzed = analyze_maturity(remove_section(existing), agents)
    config_mode = config.maturity.mode if config.maturity else None
    level = resolve_maturity_level(maturity, config_mode, analyzed)

    omc_agents = None
    omc_source = None
    if mode == "integrated":
        scan = scan_omc_agents(config)
        omc_agents = scan.agents
        omc_source = scan.source

    section = generate_orchestrator_prompt(agents, PromptOptions(
        config=config,
        omc_detected=detection.found and mode == "standalone",
        maturity_level=level,
        mode=mode,
        omc_agents=omc_agents,
    ))
    content = update_document(existing, section)

    if write:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        get_logger().info(f"Regenerated {path} ({len(agents)} agents, {level}, {mode})")

    return Regeneration(
        agents=agents,
        maturity=analyzed,
        level=level,
        mode=mode,
        detection=detection,
        path=path,
        content=content,
        omc_agent_source=omc_source,
    )


def describe_regeneration(result: Regeneration) -> list[str]:
    """Human-readable summary lines for a regeneration."""
    lines = [f"Found {len(result.agents)} agent(s):"]
    for agent in result.agents:
        lines.append(f"  - {agent.name} ({agent.model or 'default'}, {agent.category}, {agent.scope})")
    lines.append(
        f"Maturity: {result.maturity.level} ({result.maturity.composite_score:.2f}), prompt level {result.level}"
    )
    if result.omc_agent_source:
        lines.append(f"OMC agents from {result.omc_agent_source}")
    return lines


def agent_summary(agents: list[AgentDescriptor]) -> list[dict]:
    return [
        {
            "name": a.name,
            "model": a.model,
            "tier": a.tier,
            "category": a.category,
            "scope": a.scope,
            "description": a.description,
        }
        for a in agents
    ]
