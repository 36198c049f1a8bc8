"""Tests for hooks.delegation module."""

import pytest

from conftest import make_agent
from omcsa.hooks.delegation import check_delegation, is_allowed_path, relative_to_project, suggest_agent
from omcsa.hooks.models import HookInput

AGENTS = [
    make_agent("frontend-dev", "implementation", description="Builds React UI"),
    make_agent("backend-dev", "implementation", description="Builds backend APIs"),
    make_agent("tester", "testing"),
]


def edit(path, tool="Edit", directory="/repo"):
    return HookInput(tool_name=tool, tool_input={"file_path": path}, directory=directory)


class TestPaths:
    """Tests for path helpers."""

    def test_relative_to_project(self):
        """Absolute paths under the project become relative."""
        assert relative_to_project("/repo/src/app.py", "/repo") == "src/app.py"
        assert relative_to_project("/elsewhere/app.py", "/repo") == "/elsewhere/app.py"

    @pytest.mark.parametrize("path, allowed", [
        (".claude/CLAUDE.md", True),
        (".omcsa/state/ralph-state.json", True),
        ("README.md", True),
        ("package.json", True),
        ("config/settings.yaml", True),
        ("src/app.py", False),
    ])
    def test_allowed_paths(self, path, allowed):
        """Docs, config and omcsa files are always editable."""
        assert is_allowed_path(path) is allowed


class TestSuggestAgent:
    """Tests for suggest_agent function."""

    def test_frontend(self):
        """Component files go to the frontend agent."""
        assert suggest_agent("src/components/Button.tsx", AGENTS) == "frontend-dev"

    def test_backend(self):
        """API files go to the backend agent."""
        assert suggest_agent("src/api/users.py", AGENTS) == "backend-dev"

    def test_tests(self):
        """Test files go to the testing agent."""
        assert suggest_agent("src/utils.test.js", AGENTS) == "tester"

    def test_fallback(self):
        """Other sources go to the first implementation agent."""
        assert suggest_agent("lib/core.rs", AGENTS) == "frontend-dev"
        assert suggest_agent("lib/core.rs", []) is None


class TestCheckDelegation:
    """Tests for check_delegation function."""

    def test_warn(self):
        """Warn mode lets the edit through with a reminder."""
        output = check_delegation(edit("/repo/src/api/users.py"), "warn", AGENTS)

        assert output.continue_ is True
        assert output.message.startswith("[OMCSA] Delegation reminder:")
        assert '"backend-dev"' in output.message

    def test_strict_blocks(self):
        """Strict mode blocks the edit with a reason."""
        output = check_delegation(edit("/repo/src/api/users.py", "Write"), "strict", AGENTS)

        assert output.continue_ is False
        assert output.reason.startswith("[OMCSA] Delegation enforced:")
        assert output.to_dict()["continue"] is False

    @pytest.mark.parametrize("hook_input", [
        edit("/repo/README.md"),
        edit("/repo/.claude/agents/dev.md"),
        edit("/repo/assets/logo.png"),
        edit("/repo/src/app.py", tool="Read"),
        HookInput(tool_name="Edit", tool_input={}),
    ])
    def test_passes_through(self, hook_input):
        """Allowed paths, non-source files, other tools and missing paths pass."""
        output = check_delegation(hook_input, "strict", AGENTS)
        assert output.to_dict() == {"continue": True}

    def test_off(self):
        """Off never intervenes."""
        assert check_delegation(edit("/repo/src/app.py"), "off", AGENTS).message is None

    def test_notebook_path(self):
        """NotebookEdit uses notebook_path and .ipynb is not source."""
        hook_input = HookInput(tool_name="NotebookEdit", tool_input={"notebook_path": "/repo/nb.ipynb"}, directory="/repo")
        assert check_delegation(hook_input, "strict", AGENTS).continue_ is True
