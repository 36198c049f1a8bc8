"""Maturity analyzer.

Scores the user's CLAUDE.md against weighted orchestration signals and
classifies it as LOW, MEDIUM or HIGH. The analyzed text must have the
generated OMCSA section removed first (``document.remove_section``),
otherwise the tool's own output inflates the score on every run.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .errors import InvalidChoiceError
from .models import MATURITY_MODES, AgentDescriptor

# Agent names matching this pattern are safe to embed in a regex.
SAFE_AGENT_NAME = re.compile(r"^[A-Za-z0-9_-]+$")

AGENT_REFERENCE_WEIGHT = 0.20

IMPORT_DIRECTIVE = re.compile(r"@[\w./-]*\w\.md\b")
IMPORT_BONUS = 0.10

# (minimum score, level), checked from the top.
LEVEL_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (0.60, "HIGH"),
    (0.25, "MEDIUM"),
    (0.0, "LOW"),
)


@dataclass(frozen=True)
class PatternSignal:
    """A text signal scored as min(matching patterns / cap, 1)."""

    key: str
    label: str
    weight: float
    cap: int
    patterns: tuple[re.Pattern, ...]


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


PATTERN_SIGNALS: tuple[PatternSignal, ...] = (
    PatternSignal(
        key="workflow_keywords",
        label="Workflow pattern",
        weight=0.35,
        cap=3,
        patterns=_compile(
            r"delegate\s+(to|via)\s+(agent|task|sub-?agent)",
            r"agent\s+(chain|pipeline|workflow|orchestrat)",
            r"sub-?agent\s+(type|routing|dispatch|selection)",
            r"orchestrat(e|or|ion)\s+(agent|task|workflow|rule)",
            r"route\s+(to|task|request)\s+(agent|sub-?agent)",
            r"agent\s+combination",
            r"parallel\s+(agent|task|dispatch|execution\s+.*agent)",
            r"sequential\s+(agent|task|dispatch)",
            r"agent\s+selector",
            r"task\s+tool\s+(delegation|dispatch|routing)",
        ),
    ),
    PatternSignal(
        key="task_tool_usage",
        label="Task tool usage",
        weight=0.25,
        cap=3,
        patterns=_compile(
            r"Task\s+tool",
            r"subagent_type",
            r"delegate\s+via\s+Task",
            r"launch\s+.*\s+agent",
            r"spawn\s+.*\s+agent",
            r"run_in_background",
            r"Task\s+tool.*agent",
            r"agent.*Task\s+tool",
        ),
    ),
    PatternSignal(
        key="delegation_patterns",
        label="Delegation pattern",
        weight=0.20,
        cap=2,
        patterns=_compile(
            r"always\s+delegate",
            r"orchestrator\s+role",
            r"route\s+to\s+agent",
            r"never\s+(directly|modify|edit|write).*(?:source|code)",
            r"must\s+delegate",
            r"delegation\s+(enforce|require|rule|policy)",
            r"do\s+not\s+(directly|implement|code)",
            r"agent-?first",
        ),
    ),
)


@dataclass
class MaturitySignals:
    agent_name_references: float = 0.0
    workflow_keywords: float = 0.0
    task_tool_usage: float = 0.0
    delegation_patterns: float = 0.0


@dataclass
class MaturityResult:
    """Outcome of a maturity analysis."""
    level: str
    signals: MaturitySignals
    composite_score: float
    details: list[str] = field(default_factory=list)


def agent_is_referenced(content: str, name: str) -> bool:
    """Check whether ``name`` appears in ``content``.

    Safe names are matched as whole words; anything else falls back to a
    case-insensitive substring search so no regex is built from raw input.
    """
    if not name:
        return False
    if SAFE_AGENT_NAME.match(name):
        return re.search(rf"\b{re.escape(name)}\b", content, re.IGNORECASE) is not None
    return name.lower() in content.lower()


def score_agent_references(content: str, agents: Sequence[AgentDescriptor]) -> tuple[float, list[str]]:
    if not agents:
        return 0.0, []

    details = [f'Agent "{a.name}" referenced' for a in agents if agent_is_referenced(content, a.name)]
    return min(len(details) / len(agents), 1.0), details


def score_pattern_signal(content: str, signal: PatternSignal) -> tuple[float, list[str]]:
    details = []
    for pattern in signal.patterns:
        match = pattern.search(content)
        if match:
            details.append(f'{signal.label}: "{match.group(0)}"')
    return min(len(details) / signal.cap, 1.0), details


def has_import_directives(content: str) -> bool:
    return IMPORT_DIRECTIVE.search(content) is not None


def level_for_score(score: float) -> str:
    for minimum, level in LEVEL_THRESHOLDS:
        if score >= minimum:
            return level
    return "LOW"


def analyze_maturity(cleaned_content: str, agents: Sequence[AgentDescriptor]) -> MaturityResult:
    """Analyze the orchestration maturity of CLAUDE.md content.

    Args:
        cleaned_content: CLAUDE.md content with the OMCSA section removed.
        agents: Discovered agents, checked for name references.

    Returns:
        MaturityResult with the level, per-signal scores, composite score
        and human-readable details.
    """
    signals = MaturitySignals()

    agent_score, details = score_agent_references(cleaned_content, agents)
    signals.agent_name_references = agent_score
    composite = agent_score * AGENT_REFERENCE_WEIGHT

    for signal in PATTERN_SIGNALS:
        score, signal_details = score_pattern_signal(cleaned_content, signal)
        setattr(signals, signal.key, score)
        composite += score * signal.weight
        details.extend(signal_details)

    if has_import_directives(cleaned_content):
        composite = min(composite + IMPORT_BONUS, 1.0)
        details.append("@import directives detected (+0.1 bonus)")

    return MaturityResult(
        level=level_for_score(composite),
        signals=signals,
        composite_score=composite,
        details=details,
    )


def validate_maturity_mode(value: str) -> str:
    """Reject maturity modes outside auto | full | LOW | MEDIUM | HIGH."""
    if value not in MATURITY_MODES:
        raise InvalidChoiceError("maturity mode", value, MATURITY_MODES)
    return value


def resolve_maturity_level(
    explicit: Optional[str],
    config_mode: Optional[str],
    analyzed: MaturityResult,
) -> str:
    """Resolve the maturity level to generate for.

    Priority: explicit flag > config ``maturity.mode`` > "auto". "auto" uses
    the analyzed level, LOW/MEDIUM/HIGH pass through, and "full" always
    means the complete prompt, i.e. LOW.
    """
    effective = explicit or config_mode or "auto"

    if effective == "auto":
        return analyzed.level
    if effective in ("LOW", "MEDIUM", "HIGH"):
        return effective
    return "LOW"
