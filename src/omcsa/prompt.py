"""Orchestrator prompt generator.

Renders the section injected into CLAUDE.md between the omcsa markers. The
document is composed from independent section builders; ``LAYOUTS`` picks and
orders them per maturity level:

- LOW: the full document, tutorial included.
- MEDIUM: table, condensed rules and mode notes, plus a coverage gap report.
- HIGH: a compact registry and a one-line modes summary.

The integrated and exclusivity overlays are builders too and decide for
themselves whether they apply, so every level carries them.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from .config import OmcsaConfig
from .models import MARKER_END, MARKER_START, AgentDescriptor, OmcAgent
from .omc_agents import build_coverage_matrix, get_supplementary_omc_agents

COVERAGE_CATEGORIES = ("implementation", "review", "testing", "exploration")

TIER_LABELS = (
    ("LOW", "LOW (Haiku)"),
    ("MEDIUM", "MEDIUM (Sonnet)"),
    ("HIGH", "HIGH (Opus)"),
    ("DEFAULT", "DEFAULT (inherit model)"),
)

GAP_MESSAGES = (
    ("testing", "- **Testing**: No testing agent found. Consider adding one for automated quality checks."),
    ("review", "- **Review**: No review agent found. Consider adding one for code review workflows."),
    ("exploration", "- **Exploration**: No exploration agent found. Consider adding one for codebase analysis."),
)


@dataclass
class PromptOptions:
    """Inputs besides the agent list that shape the generated prompt."""

    config: OmcsaConfig = field(default_factory=OmcsaConfig)
    omc_detected: bool = False
    maturity_level: str = "LOW"
    mode: Optional[str] = None
    omc_agents: Optional[list[OmcAgent]] = None

    @property
    def is_integrated(self) -> bool:
        return self.mode == "integrated" and bool(self.omc_agents)

    @property
    def needs_exclusivity(self) -> bool:
        return self.omc_detected and self.mode != "integrated"


SectionBuilder = Callable[[Sequence[AgentDescriptor], PromptOptions], Optional[str]]


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join("-" * (len(h) + 2) for h in header) + "|",
    ]
    lines.extend("| " + " | ".join(_cell(c) for c in row) + " |" for row in rows)
    return "\n".join(lines)


def group_by_category(agents: Sequence[AgentDescriptor]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for agent in agents:
        groups.setdefault(agent.category, []).append(agent.name)
    return groups


def _quoted_prefixes(keywords: Sequence[str]) -> str:
    return " or ".join(f'"{k}:"' for k in keywords[:2])


# Section builders


def build_heading(agents, options):
    return "## Agent Orchestration"


def build_intro(agents, options):
    return "You are an orchestrator. Delegate tasks to specialized sub-agents instead of doing work directly."


def build_agent_table(agents, options):
    rows = [(a.name, a.model or "default", a.category, a.scope, a.description) for a in agents]
    return "### Available Agents\n\n" + _table(("Agent", "Model", "Category", "Scope", "Description"), rows)


def build_minimal_registry(agents, options):
    rows = [(a.name, a.model or "-", a.category[:4], a.description) for a in agents]
    return _table(("Agent", "Model", "Cat", "Description"), rows)


def build_numbered_rules(agents, options):
    return "\n".join([
        "### Orchestration Rules",
        "1. **Delegate**: Use Task tool to delegate to the appropriate agent",
        "2. **Parallelize**: Launch independent tasks simultaneously",
        "3. **Verify**: Always verify completion with build/test evidence",
        "4. **Continue**: Do not stop until ALL tasks are completed",
    ])


def build_condensed_rules(agents, options):
    return "\n".join([
        "### Rules",
        "- Delegate via Task tool, parallelize independent tasks, verify with evidence",
        "- Follow all project conventions and workflow rules defined in this document",
    ])


def build_convention_block(agents, options):
    return """### Workflow & Convention Integration
**IMPORTANT**: This project has custom rules, workflows, and conventions defined in this document
(and any files referenced via @imports). You MUST follow ALL of them, including:
- **Code conventions**: Naming, style, patterns, and architecture rules
- **Agent workflows**: Chaining sequences (e.g., implementation -> review)
- **Post-completion actions**: Artifact creation, documentation updates
- **Agent dependencies**: Handoff protocols between agents
- **Team processes**: Any team-specific conventions

When delegating to sub-agents, include relevant convention context in the Task prompt.
When an agent completes work, check if workflow rules specify follow-up actions
and execute them before considering the task complete."""


def build_combinations(agents, options):
    """Chains of categories that all have at least one agent."""
    groups = group_by_category(agents)
    impl = "/".join(groups.get("implementation", []))
    test = "/".join(groups.get("testing", []))
    review = "/".join(groups.get("review", []))
    explore = "/".join(groups.get("exploration", []))

    lines = []
    if impl and test:
        lines.append(f"- **Implementation + Testing**: {impl} -> {test}")
    if impl and review:
        lines.append(f"- **Implementation + Review**: {impl} -> {review}")
    if impl and test and review:
        lines.append(f"- **Full Pipeline**: {impl} -> {test} -> {review}")
    if explore and impl:
        lines.append(f"- **Explore + Implement**: {explore} -> {impl}")

    if not lines:
        return None
    return "### Agent Combinations\n" + "\n".join(lines)


def build_model_tiers(agents, options):
    if not options.config.features.model_tiering:
        return None

    lines = ["### Model Tiers"]
    for tier, label in TIER_LABELS:
        names = [a.name for a in agents if a.tier == tier]
        if names:
            lines.append(f"- **{label}**: {', '.join(names)}")
    lines.extend([
        "",
        "When delegating via Task tool, set the `model` parameter to match the agent's tier.",
        "If a model is unavailable (e.g., Opus on Pro plan), fall back to the next available tier.",
    ])
    return "\n".join(lines)


def build_ultrawork_section(agents, options):
    if not options.config.features.ultrawork:
        return None

    agent_list = "\n".join(f"- {a.name} ({a.model or 'default'}): {a.description}" for a in agents)
    prefixes = _quoted_prefixes(options.config.keywords.ultrawork) or '"ultrawork:"'
    return f"""### Ultrawork Mode (Parallel Execution)

When activated with {prefixes} prefix:
1. Identify independent tasks from the user's request
2. Launch each task via Task tool simultaneously (use run_in_background=true)
3. Set the model parameter based on each agent's tier
4. Verify all tasks completed with build/test evidence
5. Report comprehensive results

Available agents for parallel dispatch:
{agent_list}"""


def build_ralph_section(agents, options):
    if not options.config.features.ralph:
        return None

    keywords = options.config.keywords
    prefixes = _quoted_prefixes(keywords.ralph) or '"ralph:"'
    cancel = f'Say "{keywords.cancel[0]}"' if keywords.cancel else "Cancel the mode"
    return f"""### Ralph Mode (Persistent Loop)

When activated with {prefixes} prefix:
1. Work continuously until ALL requirements are met
2. After each iteration, review progress against original request
3. Do not stop until explicitly cancelled or max iterations reached
4. Use verification agents (review/testing) before declaring completion
5. {cancel} when truly done"""


def build_condensed_modes(agents, options):
    features = options.config.features
    keywords = options.config.keywords
    blocks = []
    if features.ultrawork:
        prefixes = _quoted_prefixes(keywords.ultrawork) or '"ultrawork:"'
        blocks.append(f"### Ultrawork Mode\nPrefix with {prefixes} for parallel agent dispatch.")
    if features.ralph:
        prefixes = _quoted_prefixes(keywords.ralph) or '"ralph:"'
        blocks.append(f"### Ralph Mode\nPrefix with {prefixes} for persistent loop until completion.")
    return "\n\n".join(blocks) or None


def build_modes_summary(agents, options):
    features = options.config.features
    keywords = []
    if features.ultrawork:
        keywords.append("ultrawork/ulw")
    if features.ralph:
        keywords.append("ralph/must-complete")
    return f"Modes: {', '.join(keywords)}" if keywords else None


def build_delegation_section(agents, options):
    level = options.config.features.delegation_enforcement
    if level == "off":
        return None

    if level == "strict":
        policy = "Delegation is STRICTLY enforced. You MUST NOT directly modify source code files."
    else:
        policy = "Delegation is recommended. You SHOULD delegate source code modifications to specialized agents."

    return f"""### Delegation Enforcement ({level})

{policy}

As an orchestrator, your role is to:
- Analyze requirements and break them into tasks
- Delegate implementation to appropriate sub-agents via Task tool
- Verify results and coordinate between agents
- You MAY directly modify config files, documentation, and .omcsa/ files"""


def build_condensed_delegation(agents, options):
    level = options.config.features.delegation_enforcement
    if level == "off":
        return None
    verb = "MUST" if level == "strict" else "SHOULD"
    return (
        f"### Delegation Enforcement ({level})\n"
        f"You {verb} delegate source code changes to sub-agents; config, docs and .omcsa/ files may be edited directly."
    )


def build_exclusivity_section(agents, options):
    if not options.needs_exclusivity:
        return None
    return """### Agent Exclusivity (Standalone Mode)

CRITICAL: You MUST ONLY delegate tasks to the agents listed in the "Available Agents" table above.
Do NOT use oh-my-claudecode (OMC) agents such as oh-my-claudecode:architect,
oh-my-claudecode:explore, oh-my-claudecode:executor, or any other oh-my-claudecode:* agent.
OMCSA manages your agent orchestration exclusively in this project.
If a task requires capabilities not covered by the available agents listed above,
handle it directly rather than delegating to OMC agents."""


def build_exclusivity_line(agents, options):
    return "Agents: custom only (no OMC)" if options.needs_exclusivity else None


def build_gap_analysis(agents, options):
    present = {a.category for a in agents}
    gaps = [message for category, message in GAP_MESSAGES if category not in present]
    if not gaps:
        return None
    return "### Coverage Gaps\n\nYour agent setup could be improved in these areas:\n" + "\n".join(gaps)


def build_getting_started(agents, options):
    lines = [
        "### Getting Started with Agent Orchestration",
        "",
        "As an orchestrator, you coordinate specialized agents rather than doing work directly.",
        "Here's how to effectively delegate:",
        "",
        "**Basic delegation example:**",
        "```",
        'User: "Add a login form with validation"',
        "",
        "Orchestrator approach:",
        "1. Identify the right agent (e.g., an implementation agent)",
        "2. Use the Task tool to delegate:",
        '   Task({ subagent_type: "<agent-name>", prompt: "Build a login form with..." })',
        "3. Review the result and run tests if available",
        "```",
        "",
        "**Key principles:**",
        "- Always use the Task tool to delegate work to agents",
        "- Set the `model` parameter to match the agent's tier (haiku/sonnet/opus)",
        "- For independent tasks, launch agents in parallel with `run_in_background: true`",
        "- Verify each agent's output before considering the task complete",
    ]
    if len(agents) > 1:
        lines.extend([
            "",
            "**Multi-agent workflow:**",
            "- Break complex requests into sub-tasks",
            "- Assign each sub-task to the most appropriate agent",
            "- Coordinate results and handle any conflicts",
        ])
    return "\n".join(lines)


def build_integrated_section(agents, options):
    """Custom agents as primary delegates, OMC agents only for uncovered categories."""
    if not options.is_integrated:
        return None

    omc_agents = options.omc_agents or []
    custom_categories = {a.category for a in agents}
    omc_categories = {a.category for a in omc_agents}

    lines = [
        "### Custom Agents (PRIMARY - always preferred)",
        "",
        _table(
            ("Agent", "Model", "Category", "Description"),
            [(a.name, a.model or "default", a.category, a.description) for a in agents],
        ),
    ]

    supplementary = get_supplementary_omc_agents(omc_agents, custom_categories)
    if supplementary:
        lines.extend([
            "",
            "### OMC Agents (SUPPLEMENTARY - uncovered areas only)",
            "",
            _table(
                ("Agent", "Category", "Description"),
                [(a.full_name, a.category, a.description) for a in supplementary],
            ),
        ])

    if options.maturity_level == "LOW":
        lines.extend([
            "",
            "### Routing Rules",
            "1. **Custom agents always take priority**: if a custom agent covers the task category, use it",
            "2. **OMC agents fill gaps**: only use OMC agents for categories not covered by custom agents",
            "3. **User CLAUDE.md rules are supreme**: any workflow rules in this document override these defaults",
            "",
            "**Example:** If you have a custom implementation agent AND OMC has oh-my-claudecode:executor,",
            "always use your custom implementation agent. Only use OMC agents for categories like testing",
            "or review if you don't have custom agents for those.",
        ])
    else:
        lines.extend(["", "### Routing: Custom > OMC > Direct. User workflow rules override all."])

    matrix = build_coverage_matrix(custom_categories, omc_categories, COVERAGE_CATEGORIES)
    if matrix:
        lines.extend([
            "",
            "### Coverage Matrix",
            _table(
                ("Category", "Custom", "OMC"),
                [(c, "✓" if custom else "-", "✓" if omc else "-") for c, custom, omc in matrix],
            ),
        ])

    return "\n".join(lines)


LAYOUTS: dict[str, tuple[SectionBuilder, ...]] = {
    "HIGH": (
        build_heading,
        build_minimal_registry,
        build_integrated_section,
        build_modes_summary,
        build_exclusivity_line,
    ),
    "MEDIUM": (
        build_heading,
        build_agent_table,
        build_condensed_rules,
        build_integrated_section,
        build_combinations,
        build_model_tiers,
        build_condensed_modes,
        build_condensed_delegation,
        build_exclusivity_section,
        build_gap_analysis,
    ),
    "LOW": (
        build_heading,
        build_intro,
        build_agent_table,
        build_numbered_rules,
        build_convention_block,
        build_integrated_section,
        build_combinations,
        build_model_tiers,
        build_ultrawork_section,
        build_ralph_section,
        build_delegation_section,
        build_exclusivity_section,
        build_getting_started,
    ),
}


def generate_orchestrator_prompt(
    agents: Sequence[AgentDescriptor],
    options: Optional[PromptOptions] = None,
) -> str:
    """Render the marker-delimited orchestrator section.

    Args:
        agents: Discovered agents, config overrides already applied.
        options: Config, maturity level, install mode and OMC state.

    Returns:
        The section text, starting with ``MARKER_START`` and ending with
        ``MARKER_END`` (no trailing newline).
    """
    options = options or PromptOptions()
    layout = LAYOUTS.get(options.maturity_level, LAYOUTS["LOW"])

    blocks = [block for block in (builder(agents, options) for builder in layout) if block]
    return "\n".join([MARKER_START, "\n\n".join(blocks), MARKER_END])
