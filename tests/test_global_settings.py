"""Tests for global_settings module."""

import json
from unittest.mock import patch

import pytest

from conftest import write_global_settings
from omcsa.errors import GlobalSettingsError
from omcsa.global_settings import disable_omc_plugin, enable_omc_plugin, get_backup_path, split_omc_plugins

OMC = "oh-my-claudecode@omc"


def read(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestSplit:
    """Tests for split_omc_plugins function."""

    def test_list_and_dict(self):
        """Both enabledPlugins shapes keep their shape."""
        assert split_omc_plugins([OMC, "other"]) == ([OMC], ["other"])
        assert split_omc_plugins({OMC: True, "other": True}) == ({OMC: True}, {"other": True})


class TestDisable:
    """Tests for disable_omc_plugin function."""

    def test_disable_list(self, tmp_path):
        """OMC entries are removed and backed up, others kept."""
        settings_path = write_global_settings(tmp_path / "home", {"enabledPlugins": [OMC, "other"], "theme": "dark"})
        project = tmp_path / "project"

        removed = disable_omc_plugin(project, home=tmp_path / "home")

        assert removed == [OMC]
        assert read(settings_path) == {"enabledPlugins": ["other"], "theme": "dark"}
        backup = read(get_backup_path(project))
        assert backup["removedPlugins"] == [OMC]
        assert backup["settingsPath"] == str(settings_path)

    def test_disable_dict(self, tmp_path):
        """Object-shaped enabledPlugins is handled too."""
        settings_path = write_global_settings(tmp_path / "home", {"enabledPlugins": {OMC: True, "other": True}})
        removed = disable_omc_plugin(tmp_path / "project", home=tmp_path / "home")

        assert removed == {OMC: True}
        assert read(settings_path)["enabledPlugins"] == {"other": True}

    def test_nothing_to_disable(self, tmp_path):
        """Without OMC nothing is written."""
        write_global_settings(tmp_path / "home", {"enabledPlugins": ["other"]})
        assert disable_omc_plugin(tmp_path / "project", home=tmp_path / "home") == []
        assert not get_backup_path(tmp_path / "project").exists()

    def test_backup_failure_leaves_settings(self, tmp_path):
        """Settings are untouched when the backup cannot be written."""
        settings_path = write_global_settings(tmp_path / "home", {"enabledPlugins": [OMC]})
        before = settings_path.read_text(encoding="utf-8")

        with patch("omcsa.global_settings.atomic_write_text", side_effect=OSError("read-only")):
            with pytest.raises(GlobalSettingsError, match="Could not write"):
                disable_omc_plugin(tmp_path / "project", home=tmp_path / "home")

        assert settings_path.read_text(encoding="utf-8") == before

    @pytest.mark.parametrize("content", [None, "not json", "[1]"])
    def test_unreadable_settings(self, tmp_path, content):
        """Missing or malformed settings raise GlobalSettingsError."""
        path = tmp_path / "home" / ".claude" / "settings.json"
        if content is not None:
            path.parent.mkdir(parents=True)
            path.write_text(content, encoding="utf-8")

        with pytest.raises(GlobalSettingsError):
            disable_omc_plugin(tmp_path / "project", home=tmp_path / "home")


class TestEnable:
    """Tests for enable_omc_plugin function."""

    def test_round_trip(self, tmp_path):
        """Re-enabling restores the entries and deletes the backup."""
        home, project = tmp_path / "home", tmp_path / "project"
        settings_path = write_global_settings(home, {"enabledPlugins": [OMC, "other"]})
        disable_omc_plugin(project, home=home)

        assert enable_omc_plugin(project, home=home) == 1
        assert read(settings_path)["enabledPlugins"] == ["other", OMC]
        assert not get_backup_path(project).exists()

    def test_no_duplicates(self, tmp_path):
        """Entries already present are not added twice."""
        home, project = tmp_path / "home", tmp_path / "project"
        settings_path = write_global_settings(home, {"enabledPlugins": {OMC: True}})
        get_backup_path(project).parent.mkdir(parents=True)
        get_backup_path(project).write_text(json.dumps({"removedPlugins": {OMC: False}}), encoding="utf-8")

        assert enable_omc_plugin(project, home=home) == 0
        assert read(settings_path)["enabledPlugins"] == {OMC: False}

    def test_no_backup(self, tmp_path):
        """Without a backup there is nothing to restore."""
        assert enable_omc_plugin(tmp_path / "project", home=tmp_path / "home") is None
