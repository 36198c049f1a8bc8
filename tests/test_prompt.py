"""Tests for prompt module."""

import pytest

from conftest import make_agent
from omcsa.config import FeaturesConfig, KeywordsConfig, OmcsaConfig
from omcsa.models import MARKER_END, MARKER_START, OmcAgent
from omcsa.prompt import PromptOptions, build_combinations, generate_orchestrator_prompt

AGENTS = [
    make_agent("backend-dev", "implementation", "sonnet", "Builds backend APIs"),
    make_agent("code-reviewer", "review", "opus", "Reviews code changes"),
]

OMC_AGENTS = [
    OmcAgent(name="executor", description="Implements tasks", category="implementation"),
    OmcAgent(name="qa-tester", description="Runs tests", category="testing"),
]


def table_after(text: str, heading: str) -> list[str]:
    """Table lines following a heading, up to the next blank line."""
    lines = text.split(heading, 1)[1].splitlines()
    table = []
    for line in lines[1:]:
        if not line.strip():
            if table:
                break
            continue
        table.append(line)
    return table


class TestLowLevel:
    """Tests for the full (LOW) document."""

    def test_available_agents_and_combination(self):
        """Two agents yield a two-row table and an implementation + review chain."""
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(maturity_level="LOW", mode="standalone"))

        table = table_after(prompt, "### Available Agents")
        assert len(table) == 4
        assert table[0] == "| Agent | Model | Category | Scope | Description |"
        assert table[2].startswith("| backend-dev | sonnet | implementation |")
        assert table[3].startswith("| code-reviewer | opus | review |")
        assert "- **Implementation + Review**: backend-dev -> code-reviewer" in prompt

    def test_markers_wrap_document(self):
        """The section starts and ends with the markers."""
        prompt = generate_orchestrator_prompt(AGENTS)
        assert prompt.startswith(MARKER_START + "\n")
        assert prompt.endswith("\n" + MARKER_END)

    def test_full_content(self):
        """The LOW document carries rules, tiers, modes, delegation and the tutorial."""
        prompt = generate_orchestrator_prompt(AGENTS)
        for heading in (
            "### Orchestration Rules",
            "### Workflow & Convention Integration",
            "### Model Tiers",
            "### Ultrawork Mode (Parallel Execution)",
            "### Ralph Mode (Persistent Loop)",
            "### Delegation Enforcement (warn)",
            "### Getting Started with Agent Orchestration",
        ):
            assert heading in prompt
        assert "- **MEDIUM (Sonnet)**: backend-dev" in prompt
        assert "- **HIGH (Opus)**: code-reviewer" in prompt
        assert "Agent Exclusivity" not in prompt

    def test_disabled_features_are_omitted(self):
        """Disabled features drop their sections."""
        config = OmcsaConfig(features=FeaturesConfig(
            ultrawork=False, ralph=False, delegation_enforcement="off", model_tiering=False,
        ))
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(config=config))

        assert "Ultrawork Mode" not in prompt
        assert "Ralph Mode" not in prompt
        assert "Delegation Enforcement" not in prompt
        assert "### Model Tiers" not in prompt

    def test_strict_delegation(self):
        """Strict enforcement uses MUST NOT wording."""
        config = OmcsaConfig(features=FeaturesConfig(delegation_enforcement="strict"))
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(config=config))
        assert "### Delegation Enforcement (strict)" in prompt
        assert "You MUST NOT directly modify source code files." in prompt

    def test_configured_keywords_in_mode_sections(self):
        """Mode sections name the configured activation prefixes."""
        config = OmcsaConfig(keywords=KeywordsConfig(ultrawork=["turbo"], ralph=["grind"], cancel=["halt"]))
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(config=config))
        assert 'When activated with "turbo:" prefix' in prompt
        assert 'When activated with "grind:" prefix' in prompt
        assert 'Say "halt" when truly done' in prompt

    def test_pipe_in_description_escaped(self):
        """Table cells escape pipes."""
        agents = [make_agent("a", "other", description="read | write")]
        assert "read \\| write" in generate_orchestrator_prompt(agents)

    def test_deterministic(self):
        """Same inputs render the same text."""
        options = PromptOptions(maturity_level="MEDIUM", omc_detected=True, mode="standalone")
        assert generate_orchestrator_prompt(AGENTS, options) == generate_orchestrator_prompt(AGENTS, options)


class TestCombinations:
    """Tests for build_combinations function."""

    def test_no_pairs_without_categories(self):
        """A lone implementation agent gets no combination section."""
        assert build_combinations([make_agent("dev", "implementation")], PromptOptions()) is None

    def test_full_pipeline(self):
        """Implementation, testing and review together form a full pipeline."""
        agents = [
            make_agent("dev", "implementation"),
            make_agent("tester", "testing"),
            make_agent("rev", "review"),
            make_agent("scout", "exploration"),
        ]
        text = build_combinations(agents, PromptOptions())
        assert "- **Implementation + Testing**: dev -> tester" in text
        assert "- **Full Pipeline**: dev -> tester -> rev" in text
        assert "- **Explore + Implement**: scout -> dev" in text


class TestMediumLevel:
    """Tests for the MEDIUM document."""

    def test_condensed_content_and_gaps(self):
        """MEDIUM keeps the table, condenses rules and reports coverage gaps."""
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(maturity_level="MEDIUM"))

        assert "### Available Agents" in prompt
        assert "### Rules" in prompt
        assert "### Orchestration Rules" not in prompt
        assert "Getting Started" not in prompt
        assert "### Coverage Gaps" in prompt
        assert "- **Testing**: No testing agent found." in prompt
        assert "- **Exploration**: No exploration agent found." in prompt
        assert "- **Review**" not in prompt
        assert "You SHOULD delegate source code changes to sub-agents" in prompt

    def test_no_gaps_section_when_covered(self):
        """Full coverage omits the gap report."""
        agents = AGENTS + [make_agent("tester", "testing"), make_agent("scout", "exploration")]
        prompt = generate_orchestrator_prompt(agents, PromptOptions(maturity_level="MEDIUM"))
        assert "Coverage Gaps" not in prompt

    def test_condensed_modes_use_configured_keywords(self):
        """Mode prefixes come from the keywords config."""
        config = OmcsaConfig(keywords=KeywordsConfig(ultrawork=["turbo", "tb"], ralph=["grind"]))
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(config=config, maturity_level="MEDIUM"))

        assert 'Prefix with "turbo:" or "tb:" for parallel agent dispatch.' in prompt
        assert 'Prefix with "grind:" for persistent loop until completion.' in prompt
        assert '"ultrawork:"' not in prompt


class TestHighLevel:
    """Tests for the HIGH document."""

    def test_compact_registry_only(self):
        """HIGH has a compact registry and a modes line, nothing else."""
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(maturity_level="HIGH"))

        assert "| Agent | Model | Cat | Description |" in prompt
        assert "| backend-dev | sonnet | impl | Builds backend APIs |" in prompt
        assert "Modes: ultrawork/ulw, ralph/must-complete" in prompt
        assert "### Available Agents" not in prompt
        assert "Rules" not in prompt
        assert "Getting Started" not in prompt


class TestExclusivityOverlay:
    """Tests for the standalone exclusivity overlay."""

    @pytest.mark.parametrize("level", ["LOW", "MEDIUM"])
    def test_section_when_omc_detected(self, level):
        """Detected OMC in standalone mode adds the exclusivity directive."""
        options = PromptOptions(maturity_level=level, omc_detected=True, mode="standalone")
        assert "### Agent Exclusivity (Standalone Mode)" in generate_orchestrator_prompt(AGENTS, options)

    def test_line_at_high(self):
        """HIGH carries a one-line exclusivity note."""
        options = PromptOptions(maturity_level="HIGH", omc_detected=True, mode="standalone")
        assert "Agents: custom only (no OMC)" in generate_orchestrator_prompt(AGENTS, options)

    def test_absent_without_detection(self):
        """No detection, no overlay."""
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(mode="standalone"))
        assert "Exclusivity" not in prompt


class TestIntegratedOverlay:
    """Tests for the integrated-mode overlay."""

    def test_supplementary_agents_fill_gaps(self):
        """OMC agents are listed only for categories custom agents lack."""
        options = PromptOptions(mode="integrated", omc_agents=OMC_AGENTS, omc_detected=True)
        prompt = generate_orchestrator_prompt(AGENTS, options)

        assert "### Custom Agents (PRIMARY - always preferred)" in prompt
        assert "| oh-my-claudecode:qa-tester | testing | Runs tests |" in prompt
        assert "oh-my-claudecode:executor |" not in prompt
        assert "### Routing Rules" in prompt
        assert "Exclusivity" not in prompt

    def test_coverage_matrix(self):
        """The matrix lists only categories covered by either side."""
        options = PromptOptions(mode="integrated", omc_agents=OMC_AGENTS)
        matrix = table_after(generate_orchestrator_prompt(AGENTS, options), "### Coverage Matrix")

        assert matrix[0] == "| Category | Custom | OMC |"
        assert matrix[2:] == [
            "| implementation | ✓ | ✓ |",
            "| review | ✓ | - |",
            "| testing | - | ✓ |",
        ]

    def test_condensed_routing_above_low(self):
        """Routing prose shrinks to one line at MEDIUM and HIGH."""
        options = PromptOptions(mode="integrated", omc_agents=OMC_AGENTS, maturity_level="HIGH")
        prompt = generate_orchestrator_prompt(AGENTS, options)
        assert "### Routing: Custom > OMC > Direct." in prompt
        assert "### Routing Rules" not in prompt

    def test_no_overlay_without_omc_agents(self):
        """Integrated mode with no supplementary agents renders no overlay."""
        prompt = generate_orchestrator_prompt(AGENTS, PromptOptions(mode="integrated", omc_agents=[]))
        assert "Custom Agents (PRIMARY" not in prompt
