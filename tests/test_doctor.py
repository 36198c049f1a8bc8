"""Tests for installation health checks and the diagnose tool."""

import json
from unittest.mock import patch

from conftest import write_agent, write_global_settings
from omcsa.config import get_config_path
from omcsa.detector import OmcDetectionResult, get_mode_path, save_mode
from omcsa.diagnostics import (
    CLAUDE_MD_SIZE_WARNING_BYTES,
    check_agent_files,
    check_claude_md_section,
    check_claude_md_size,
    run_diagnostics,
)
from omcsa.installer import HOOKS, get_project_hooks_dir, get_project_settings_path
from omcsa.models import MARKER_END, MARKER_START
from omcsa.tools import diagnose, init_orchestration


def severities(result):
    return {check["name"]: check["severity"] for check in result["checks"]}


def claude_md_path(project):
    return project / ".claude" / "CLAUDE.md"


class TestChecks:
    """Tests for individual checks."""

    def test_incomplete_markers(self):
        """A start marker without an end marker is an error that is not auto-repaired."""
        result = check_claude_md_section(f"# Notes\n{MARKER_START}\nstale\n")
        assert result.severity == "error"
        assert "incomplete" in result.message
        assert result.fixable is False

    def test_complete_section(self):
        result = check_claude_md_section(f"{MARKER_START}\nbody\n{MARKER_END}\n")
        assert result.severity == "ok"

    def test_large_claude_md(self):
        """Documents over the size threshold produce a warning."""
        result = check_claude_md_size("x" * (CLAUDE_MD_SIZE_WARNING_BYTES + 1))
        assert result.severity == "warn"
        assert check_claude_md_size("small").severity == "ok"

    def test_no_agents(self):
        assert check_agent_files([]).severity == "warn"

    def test_agent_without_description(self, project):
        """Agents falling back to the default description are named."""
        write_agent(project / ".claude" / "agents", "helper", body="# Helper")
        report = run_diagnostics(project)

        agent_check = next(r for r in report.results if r.name == "Agent Files")
        assert agent_check.severity == "warn"
        assert "'helper' missing description" in agent_check.message


class TestDiagnose:
    """Tests for the diagnose tool."""

    def test_missing_project_root(self, tmp_path):
        result = diagnose(str(tmp_path / "missing"))
        assert result["success"] is False

    def test_fresh_project(self, two_agent_project):
        """An uninitialized project reports missing hooks, settings and section."""
        result = diagnose(str(two_agent_project))

        assert result["success"] is True
        assert result["healthy"] is False
        assert severities(result) == {
            "Hook Files": "error",
            "Hook Registration": "error",
            "Mode Record": "warn",
            "Agent Files": "ok",
            "CLAUDE.md Section": "error",
            "Config File": "info",
            "OMC Consistency": "info",
            "CLAUDE.md Size": "ok",
        }
        assert any("not initialized" in s for s in result["suggestions"])
        assert "fixed" not in result

    def test_check_entries_shape(self, two_agent_project):
        """Each check carries a name, severity, message and fix hint."""
        result = diagnose(str(two_agent_project))
        for check in result["checks"]:
            assert set(check) == {"name", "severity", "message", "fix"}

    def test_read_only_without_fix(self, two_agent_project):
        """Nothing is written unless fix is requested."""
        diagnose(str(two_agent_project))

        assert not get_project_hooks_dir(two_agent_project).exists()
        assert not get_project_settings_path(two_agent_project).exists()
        assert not claude_md_path(two_agent_project).exists()

    def test_initialized_project_is_healthy(self, two_agent_project):
        init_orchestration(str(two_agent_project))
        result = diagnose(str(two_agent_project))

        assert result["healthy"] is True
        assert set(severities(result).values()) <= {"ok", "info"}
        assert any("testing agent" in s for s in result["suggestions"])

    def test_fix_repairs_project_files(self, two_agent_project):
        """Deleted hooks, dropped registrations and a removed section are restored."""
        init_orchestration(str(two_agent_project))
        hooks_dir = get_project_hooks_dir(two_agent_project)
        for hook in HOOKS:
            (hooks_dir / hook.filename).unlink()
        get_project_settings_path(two_agent_project).write_text(
            json.dumps({"permissions": {"allow": ["Bash"]}}), encoding="utf-8"
        )
        claude_md_path(two_agent_project).write_text("# Project notes\n", encoding="utf-8")

        result = diagnose(str(two_agent_project), fix=True)

        assert result["success"] is True
        assert result["healthy"] is True
        assert len(result["fixed"]) == 3
        assert all((hooks_dir / hook.filename).is_file() for hook in HOOKS)
        settings = json.loads(get_project_settings_path(two_agent_project).read_text(encoding="utf-8"))
        assert settings["permissions"] == {"allow": ["Bash"]}
        assert set(settings["hooks"]) == {hook.event for hook in HOOKS}
        content = claude_md_path(two_agent_project).read_text(encoding="utf-8")
        assert content.startswith("# Project notes")
        assert MARKER_START in content

    def test_fix_leaves_mode_record_alone(self, two_agent_project):
        """Fixing never creates the mode record; mode changes go through switch_mode."""
        result = diagnose(str(two_agent_project), fix=True)

        assert not get_mode_path(two_agent_project).exists()
        assert severities(result)["Mode Record"] == "warn"

    def test_fix_leaves_global_settings_untouched(self, two_agent_project, home):
        settings_path = write_global_settings(home, {"enabledPlugins": {"other-plugin@x": True}})
        before = settings_path.read_bytes()

        diagnose(str(two_agent_project), fix=True)

        assert settings_path.read_bytes() == before

    def test_fix_keeps_unparseable_settings(self, two_agent_project):
        """A settings file with syntax errors is reported but not overwritten."""
        settings_path = get_project_settings_path(two_agent_project)
        settings_path.write_text("{not json", encoding="utf-8")

        result = diagnose(str(two_agent_project), fix=True)

        assert settings_path.read_text(encoding="utf-8") == "{not json"
        assert severities(result)["Hook Registration"] == "error"

    def test_fix_without_agents(self, project):
        """The section cannot be regenerated without agents; the failure is reported."""
        result = diagnose(str(project), fix=True)

        assert result["success"] is True
        assert any(step.startswith("✗") for step in result["fixed"])
        assert not claude_md_path(project).exists()

    def test_fix_write_failure(self, two_agent_project):
        with patch("omcsa.tools.doctor.install_hooks", side_effect=PermissionError("denied")):
            result = diagnose(str(two_agent_project), fix=True)

        assert result["success"] is False
        assert result["error"] == "denied"
        assert result["fixed"] == []

    def test_omc_installed_after_init(self, two_agent_project, home):
        """A standalone record taken without OMC is flagged once OMC appears."""
        init_orchestration(str(two_agent_project))
        write_global_settings(home, {"enabledPlugins": {"oh-my-claudecode@omc": True}})

        result = diagnose(str(two_agent_project))
        assert severities(result)["OMC Consistency"] == "warn"

    def test_integrated_without_omc(self, two_agent_project):
        save_mode(two_agent_project, "integrated", OmcDetectionResult(found=False))

        result = diagnose(str(two_agent_project))
        consistency = next(c for c in result["checks"] if c["name"] == "OMC Consistency")
        assert consistency["severity"] == "warn"
        assert "standalone" in consistency["fix"]

    def test_invalid_config_values(self, two_agent_project):
        """Config values that fall back to defaults are listed."""
        get_config_path(two_agent_project).write_text(
            json.dumps({"features": {"ultrawork": "often"}}), encoding="utf-8"
        )
        result = diagnose(str(two_agent_project))

        config_check = next(c for c in result["checks"] if c["name"] == "Config File")
        assert config_check["severity"] == "warn"
        assert "features" in config_check["message"]

    def test_unknown_config_keys(self, two_agent_project):
        get_config_path(two_agent_project).write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
        result = diagnose(str(two_agent_project))

        config_check = next(c for c in result["checks"] if c["name"] == "Config File")
        assert config_check["severity"] == "warn"
        assert "colour" in config_check["message"]
