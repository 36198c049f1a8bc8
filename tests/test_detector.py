"""Tests for detector module."""

import pytest

from conftest import write_global_settings
from omcsa.detector import (
    OmcDetectionResult,
    detect_omc,
    get_mode_path,
    load_mode,
    resolve_install_mode,
    runtime_mode,
    save_mode,
    validate_mode,
)
from omcsa.errors import InvalidChoiceError

FOUND = OmcDetectionResult(found=True, method="plugin", details="Found oh-my-claudecode in enabledPlugins")
NOT_FOUND = OmcDetectionResult(found=False)


class TestDetectOmc:
    """Tests for detect_omc function."""

    def test_nothing_installed(self, tmp_path):
        """An empty home reports OMC as not found."""
        result = detect_omc(tmp_path)
        assert result.found is False
        assert result.method is None

    def test_plugin_list(self, tmp_path):
        """An enabledPlugins list entry is detected first."""
        write_global_settings(tmp_path, {"enabledPlugins": ["oh-my-claudecode@marketplace"]})
        result = detect_omc(tmp_path)
        assert result.found is True
        assert result.method == "plugin"

    def test_plugin_map(self, tmp_path):
        """An enabledPlugins map with OMC enabled is detected."""
        write_global_settings(tmp_path, {"enabledPlugins": {"oh-my-claudecode@omc": True}})
        assert detect_omc(tmp_path).method == "plugin"

    def test_hook_files(self, tmp_path):
        """OMC hook scripts are detected, omcsa's own are not."""
        hooks_dir = tmp_path / ".claude" / "hooks"
        hooks_dir.mkdir(parents=True)
        (hooks_dir / "omcsa-keyword-detector.py").write_text("", encoding="utf-8")
        assert detect_omc(tmp_path).found is False

        (hooks_dir / "omc-keyword.mjs").write_text("", encoding="utf-8")
        result = detect_omc(tmp_path)
        assert result.method == "hooks"
        assert "omc-keyword.mjs" in result.details

    def test_settings_reference(self, tmp_path):
        """A textual OMC reference in settings is detected last."""
        write_global_settings(tmp_path, {"hooks": {"Stop": [{"command": "node ~/omc/stop.mjs"}]}})
        assert detect_omc(tmp_path).method == "settings"

    def test_omcsa_reference_is_not_omc(self, tmp_path):
        """References to omcsa itself do not count."""
        write_global_settings(tmp_path, {"hooks": {"Stop": [{"command": "omcsa-persistent-mode.py"}]}})
        assert detect_omc(tmp_path).found is False

    def test_corrupt_settings(self, tmp_path):
        """Unreadable settings are treated as absent."""
        path = tmp_path / ".claude" / "settings.json"
        path.parent.mkdir(parents=True)
        path.write_text("not json", encoding="utf-8")
        assert detect_omc(tmp_path).found is False


class TestResolveInstallMode:
    """Tests for resolve_install_mode function."""

    def test_default_standalone(self):
        """No explicit mode and no OMC is plain standalone."""
        resolution = resolve_install_mode(None, NOT_FOUND)
        assert resolution.mode == "standalone"
        assert resolution.advisory is None

    def test_detected_suggests_integrated(self):
        """Detected OMC keeps standalone but suggests integrated."""
        resolution = resolve_install_mode(None, FOUND)
        assert resolution.mode == "standalone"
        assert "integrated" in resolution.advisory

    def test_explicit_standalone_with_omc_warns(self):
        """Explicit standalone next to OMC warns about both hook sets."""
        resolution = resolve_install_mode("standalone", FOUND)
        assert resolution.mode == "standalone"
        assert "alongside OMC" in resolution.advisory

    @pytest.mark.parametrize("mode", ["omc-only", "integrated"])
    def test_explicit_used_verbatim(self, mode):
        """Explicit modes are used as given."""
        resolution = resolve_install_mode(mode, FOUND)
        assert resolution.mode == mode
        assert resolution.advisory is None

    def test_validate_mode(self):
        """Unknown modes are rejected naming the valid ones."""
        assert validate_mode("integrated") == "integrated"
        with pytest.raises(InvalidChoiceError, match="Invalid mode"):
            validate_mode("hybrid")


class TestModeRecord:
    """Tests for the persisted mode record."""

    def test_missing_record_is_standalone(self, tmp_path):
        """Without a record, runtime logic runs as standalone."""
        assert load_mode(tmp_path) is None
        assert runtime_mode(tmp_path) == "standalone"

    def test_save_and_load(self, tmp_path):
        """A saved record loads back with its detection snapshot."""
        save_mode(tmp_path, "integrated", FOUND)
        record = load_mode(tmp_path)

        assert record.mode == "integrated"
        assert record.detected_omc is True
        assert record.omc_method == "plugin"
        assert runtime_mode(tmp_path) == "integrated"
        assert '"detectedOmc": true' in get_mode_path(tmp_path).read_text(encoding="utf-8")

    def test_last_write_wins(self, tmp_path):
        """Sequential saves leave the latest mode."""
        save_mode(tmp_path, "integrated", FOUND)
        save_mode(tmp_path, "omc-only", FOUND)
        assert runtime_mode(tmp_path) == "omc-only"

    def test_corrupt_record_is_standalone(self, tmp_path):
        """A corrupt record falls back to standalone."""
        path = get_mode_path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text('{"mode": "turbo"}', encoding="utf-8")
        assert runtime_mode(tmp_path) == "standalone"
