"""Disable / re-enable the OMC plugin in the global ``~/.claude/settings.json``.

The global settings file is shared by every project and session, so it is
only changed on explicit request. Removed plugin entries are backed up to
``.omcsa/omc-backup.json`` first; the settings file is not touched unless
the backup was written.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from .detector import OMC_PLUGIN_NAME, OMCSA_DIRNAME, get_global_settings_path
from .errors import GlobalSettingsError
from .utils import atomic_write_text, dump_json, read_json_object

BACKUP_FILENAME = "omc-backup.json"

PluginEntries = Union[list[Any], dict[str, Any]]


def get_backup_path(project_root: Path) -> Path:
    return project_root / OMCSA_DIRNAME / BACKUP_FILENAME


def _is_omc_entry(name: Any) -> bool:
    return isinstance(name, str) and OMC_PLUGIN_NAME in name.lower()


def _read_settings(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise GlobalSettingsError(f"Could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise GlobalSettingsError(f"{path} does not contain a JSON object")
    return data


def _write(path: Path, data: Any) -> None:
    try:
        atomic_write_text(path, dump_json(data))
    except OSError as e:
        raise GlobalSettingsError(f"Could not write {path}: {e}") from e


def split_omc_plugins(plugins: PluginEntries) -> tuple[PluginEntries, PluginEntries]:
    """Split ``enabledPlugins`` into (OMC entries, remaining entries), keeping its shape."""
    if isinstance(plugins, dict):
        omc = {k: v for k, v in plugins.items() if _is_omc_entry(k)}
        rest = {k: v for k, v in plugins.items() if not _is_omc_entry(k)}
        return omc, rest
    return [p for p in plugins if _is_omc_entry(p)], [p for p in plugins if not _is_omc_entry(p)]


def disable_omc_plugin(project_root: Path, home: Optional[Path] = None) -> PluginEntries:
    """Remove OMC from ``enabledPlugins`` after backing the entries up.

    Returns:
        The removed entries; empty when there was nothing to disable.

    Raises:
        GlobalSettingsError: If the settings file cannot be read, or the
            backup or the settings file cannot be written.
    """
    settings_path = get_global_settings_path(home)
    settings = _read_settings(settings_path)

    plugins = settings.get("enabledPlugins")
    if not isinstance(plugins, (list, dict)):
        return []

    removed, remaining = split_omc_plugins(plugins)
    if not removed:
        return removed

    _write(get_backup_path(project_root), {
        "removedPlugins": removed,
        "removedAt": datetime.now(timezone.utc).isoformat(),
        "settingsPath": str(settings_path),
    })

    settings["enabledPlugins"] = remaining
    _write(settings_path, settings)
    return removed


def enable_omc_plugin(project_root: Path, home: Optional[Path] = None) -> Optional[int]:
    """Restore OMC entries from the backup and delete it.

    Returns:
        Number of entries restored, or None when there is no usable backup.

    Raises:
        GlobalSettingsError: If the settings file cannot be read or written.
    """
    backup_path = get_backup_path(project_root)
    backup = read_json_object(backup_path)
    if backup is None:
        return None

    removed = backup.get("removedPlugins")
    if not isinstance(removed, (list, dict)) or not removed:
        return None

    settings_path = get_global_settings_path(home)
    settings = _read_settings(settings_path)
    plugins = settings.get("enabledPlugins")

    restored = 0
    if isinstance(removed, dict):
        merged = dict(plugins) if isinstance(plugins, dict) else {}
        for name, value in removed.items():
            if name not in merged:
                restored += 1
            merged[name] = value
        settings["enabledPlugins"] = merged
    else:
        merged_list = list(plugins) if isinstance(plugins, list) else []
        for entry in removed:
            if entry not in merged_list:
                merged_list.append(entry)
                restored += 1
        settings["enabledPlugins"] = merged_list

    _write(settings_path, settings)
    backup_path.unlink()
    return restored
