"""Health checks for an omcsa installation.

Each check inspects one piece of project state and reports a severity. Checks
never write anything; repairs are applied by the ``diagnose`` tool, and only
for results marked ``fixable``. The global ``~/.claude/settings.json`` is never
a repair target.
"""

from pathlib import Path
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from .config import CONFIG_FILENAME, get_config_path, read_config
from .detector import OMCSA_DIRNAME, detect_omc, get_mode_path, load_mode
from .document import remove_section
from .installer import HOOKS, get_project_hooks_dir, get_project_settings_path
from .maturity import MaturityResult, analyze_maturity
from .models import MARKER_END, MARKER_START, AgentDescriptor
from .scanner import DEFAULT_DESCRIPTION, scan_agents
from .utils import parse_or_default, read_text_or_default

Severity = Literal["ok", "info", "warn", "error"]

CLAUDE_MD_SIZE_WARNING_BYTES = 40 * 1024

KNOWN_CONFIG_KEYS = ("agents", "features", "keywords", "persistence", "maturity", "workflows", "omcAgents")

HOOK_FILES = "Hook Files"
HOOK_REGISTRATION = "Hook Registration"
MODE_RECORD = "Mode Record"
AGENT_FILES = "Agent Files"
CLAUDE_MD_SECTION = "CLAUDE.md Section"
CONFIG_FILE = "Config File"
OMC_CONSISTENCY = "OMC Consistency"
CLAUDE_MD_SIZE = "CLAUDE.md Size"


class DiagnosticResult(BaseModel):
    """Outcome of a single check."""

    name: str
    severity: Severity
    message: str
    fix: Optional[str] = None
    fixable: bool = False

    @property
    def is_problem(self) -> bool:
        return self.severity in ("warn", "error")


class DoctorReport(BaseModel):
    results: list[DiagnosticResult]
    suggestions: list[str]
    maturity_level: Optional[str] = None
    maturity_score: Optional[float] = None


def _claude_md_path(project_root: Path) -> Path:
    return project_root / ".claude" / "CLAUDE.md"


def check_hook_files(project_root: Path) -> DiagnosticResult:
    hooks_dir = get_project_hooks_dir(project_root)
    if not hooks_dir.is_dir():
        return DiagnosticResult(
            name=HOOK_FILES,
            severity="error",
            message="Hooks directory not found (.claude/hooks/)",
            fix="Run init_orchestration, or diagnose with fix enabled",
            fixable=True,
        )

    missing = [hook.filename for hook in HOOKS if not (hooks_dir / hook.filename).is_file()]
    if missing:
        return DiagnosticResult(
            name=HOOK_FILES,
            severity="error",
            message=f"Missing hook files: {', '.join(missing)}",
            fix="Run diagnose with fix enabled to reinstall hooks",
            fixable=True,
        )
    return DiagnosticResult(name=HOOK_FILES, severity="ok", message=f"All {len(HOOKS)} hooks installed")


def check_hook_registration(project_root: Path) -> DiagnosticResult:
    settings_path = get_project_settings_path(project_root)
    raw = read_text_or_default(settings_path)
    if raw is None:
        return DiagnosticResult(
            name=HOOK_REGISTRATION,
            severity="error",
            message="settings.json not found",
            fix="Run init_orchestration to register hooks",
            fixable=True,
        )

    settings = parse_or_default(raw, None)
    if not isinstance(settings, dict):
        return DiagnosticResult(
            name=HOOK_REGISTRATION,
            severity="error",
            message="Could not parse settings.json",
            fix="Check .claude/settings.json for syntax errors",
        )

    registered = [hook for hook in HOOKS if hook.filename in raw]
    if not registered:
        return DiagnosticResult(
            name=HOOK_REGISTRATION,
            severity="error",
            message="No omcsa hooks registered in settings.json",
            fix="Run diagnose with fix enabled to register hooks",
            fixable=True,
        )
    if len(registered) < len(HOOKS):
        return DiagnosticResult(
            name=HOOK_REGISTRATION,
            severity="warn",
            message=f"Only {len(registered)}/{len(HOOKS)} hooks registered in settings.json",
            fix="Run diagnose with fix enabled to re-register all hooks",
            fixable=True,
        )
    return DiagnosticResult(name=HOOK_REGISTRATION, severity="ok", message="All hooks registered in settings.json")


def check_mode_record(project_root: Path) -> DiagnosticResult:
    """The mode record is reported only; mode changes go through switch_mode."""
    if not get_mode_path(project_root).exists():
        return DiagnosticResult(
            name=MODE_RECORD,
            severity="warn",
            message=f"mode.json not found ({OMCSA_DIRNAME}/mode.json)",
            fix="Run init_orchestration or switch_mode",
        )

    record = load_mode(project_root)
    if record is None:
        return DiagnosticResult(
            name=MODE_RECORD,
            severity="warn",
            message="mode.json is unreadable or holds an invalid mode",
            fix="Run switch_mode to rewrite it",
        )
    return DiagnosticResult(name=MODE_RECORD, severity="ok", message=f"Mode: {record.mode} (valid)")


def check_agent_files(agents: Sequence[AgentDescriptor]) -> DiagnosticResult:
    if not agents:
        return DiagnosticResult(
            name=AGENT_FILES,
            severity="warn",
            message="No agents found in .claude/agents/",
            fix="Create agent .md files in .claude/agents/",
        )

    undescribed = [a.name for a in agents if a.description == DEFAULT_DESCRIPTION]
    if undescribed:
        return DiagnosticResult(
            name=AGENT_FILES,
            severity="warn",
            message="; ".join(f"'{name}' missing description" for name in undescribed),
            fix="Add a description field to the agent frontmatter",
        )
    return DiagnosticResult(name=AGENT_FILES, severity="ok", message=f"{len(agents)} agent(s) valid")


def check_claude_md_section(content: Optional[str]) -> DiagnosticResult:
    if content is None:
        return DiagnosticResult(
            name=CLAUDE_MD_SECTION,
            severity="error",
            message="CLAUDE.md not found",
            fix="Run diagnose with fix enabled to generate the orchestrator section",
            fixable=True,
        )

    has_start = MARKER_START in content
    has_end = MARKER_END in content
    if not has_start and not has_end:
        return DiagnosticResult(
            name=CLAUDE_MD_SECTION,
            severity="error",
            message="No omcsa section in CLAUDE.md",
            fix="Run diagnose with fix enabled to add the orchestrator section",
            fixable=True,
        )
    if has_start != has_end:
        return DiagnosticResult(
            name=CLAUDE_MD_SECTION,
            severity="error",
            message="omcsa markers are incomplete (missing start or end)",
            fix="Remove the stray marker from CLAUDE.md, then run refresh_agents",
        )
    return DiagnosticResult(name=CLAUDE_MD_SECTION, severity="ok", message="omcsa section present")


def check_config_file(project_root: Path) -> DiagnosticResult:
    path = get_config_path(project_root)
    if not path.exists():
        return DiagnosticResult(
            name=CONFIG_FILE,
            severity="info",
            message=f"No {CONFIG_FILENAME} (using defaults)",
        )

    _, problems = read_config(project_root)
    if problems:
        return DiagnosticResult(
            name=CONFIG_FILE,
            severity="warn",
            message=f"Defaults used for: {'; '.join(problems)}",
            fix=f"Correct the listed values in {CONFIG_FILENAME}",
        )

    data = parse_or_default(read_text_or_default(path), {})
    unknown = sorted(k for k in data if k not in KNOWN_CONFIG_KEYS)
    if unknown:
        return DiagnosticResult(
            name=CONFIG_FILE,
            severity="warn",
            message=f"Unknown config keys: {', '.join(unknown)}",
        )
    return DiagnosticResult(name=CONFIG_FILE, severity="ok", message="Valid")


def check_omc_consistency(project_root: Path, home: Optional[Path] = None) -> DiagnosticResult:
    detection = detect_omc(home)
    record = load_mode(project_root)

    if record is None:
        status = "detected" if detection.found else "not detected"
        return DiagnosticResult(
            name=OMC_CONSISTENCY,
            severity="info",
            message=f"OMC: {status} (no mode record to compare)",
        )

    if detection.found and record.mode == "standalone" and not record.detected_omc:
        return DiagnosticResult(
            name=OMC_CONSISTENCY,
            severity="warn",
            message="OMC detected but was not present at init time. OMC may have been installed after omcsa.",
            fix="Run switch_mode with integrated or standalone to record the choice",
        )

    if not detection.found and record.mode in ("integrated", "omc-only"):
        return DiagnosticResult(
            name=OMC_CONSISTENCY,
            severity="warn",
            message=f'Mode is "{record.mode}" but OMC is not detected. omcsa hooks yield to an OMC that is not there.',
            fix="Run switch_mode with standalone to use the full omcsa runtime",
        )

    status = f"detected ({detection.method})" if detection.found else "not detected"
    return DiagnosticResult(
        name=OMC_CONSISTENCY,
        severity="ok",
        message=f'Mode "{record.mode}" consistent with OMC status ({status})',
    )


def check_claude_md_size(content: Optional[str]) -> DiagnosticResult:
    if content is None:
        return DiagnosticResult(name=CLAUDE_MD_SIZE, severity="ok", message="Not applicable (no CLAUDE.md)")

    size = len(content.encode("utf-8"))
    size_kb = f"{size / 1024:.1f}"
    if size > CLAUDE_MD_SIZE_WARNING_BYTES:
        return DiagnosticResult(
            name=CLAUDE_MD_SIZE,
            severity="warn",
            message=f'CLAUDE.md is {size_kb}KB. Large files may trigger "file too long" warnings.',
            fix="Use a higher maturity level (MEDIUM or HIGH) for a shorter section",
        )
    return DiagnosticResult(name=CLAUDE_MD_SIZE, severity="ok", message=f"CLAUDE.md size: {size_kb}KB")


def build_suggestions(
    project_root: Path,
    agents: Sequence[AgentDescriptor],
    maturity: Optional[MaturityResult],
) -> list[str]:
    suggestions = []
    if not (project_root / OMCSA_DIRNAME).is_dir():
        suggestions.append("omcsa is not initialized. Run init_orchestration to set up.")

    if maturity is not None:
        if maturity.level == "LOW":
            suggestions.append("Consider adding workflow rules to CLAUDE.md for better orchestration")
        if 0.25 < maturity.composite_score < 0.6:
            suggestions.append("Use maturity 'auto' with init/refresh for prompts matching your setup")

    categories = {a.category for a in agents}
    if agents and "testing" not in categories:
        suggestions.append("Consider adding a testing agent for automated quality checks")
    if agents and "review" not in categories:
        suggestions.append("Consider adding a review agent for code review workflows")
    return suggestions


def run_diagnostics(project_root: Path, home: Optional[Path] = None) -> DoctorReport:
    """Run every check against a project and collect suggestions."""
    agents = scan_agents(project_root, home)
    content = read_text_or_default(_claude_md_path(project_root))

    results = [
        check_hook_files(project_root),
        check_hook_registration(project_root),
        check_mode_record(project_root),
        check_agent_files(agents),
        check_claude_md_section(content),
        check_config_file(project_root),
        check_omc_consistency(project_root, home),
        check_claude_md_size(content),
    ]

    maturity = analyze_maturity(remove_section(content), agents) if content is not None else None
    return DoctorReport(
        results=results,
        suggestions=build_suggestions(project_root, agents, maturity),
        maturity_level=maturity.level if maturity is not None else None,
        maturity_score=round(maturity.composite_score, 2) if maturity is not None else None,
    )
