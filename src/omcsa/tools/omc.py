"""Disable or re-enable the OMC plugin globally."""

from ..errors import GlobalSettingsError
from ..global_settings import disable_omc_plugin, enable_omc_plugin, get_backup_path
from .orchestration import ProjectRootError, resolve_project_root, tool_error


def disable_omc(project_root: str) -> dict:
    """Remove OMC from the global enabledPlugins, backing the entries up in the project."""
    try:
        root = resolve_project_root(project_root)
        removed = disable_omc_plugin(root)
    except (ProjectRootError, GlobalSettingsError, OSError) as e:
        return tool_error("disable_omc", e)

    if not removed:
        return {"success": True, "changed": False, "output": "OMC plugin is not enabled."}
    return {
        "success": True,
        "changed": True,
        "removed": removed,
        "output": f"✓ OMC plugin disabled. Backup saved to {get_backup_path(root)}",
    }


def enable_omc(project_root: str) -> dict:
    """Restore OMC plugin entries from the project backup."""
    try:
        root = resolve_project_root(project_root)
        restored = enable_omc_plugin(root)
    except (ProjectRootError, GlobalSettingsError, OSError) as e:
        return tool_error("enable_omc", e)

    if restored is None:
        return {"success": False, "error": "No OMC backup found. Was OMC disabled with omcsa?"}
    return {
        "success": True,
        "restored": restored,
        "output": f"✓ OMC plugin re-enabled ({restored} entries restored)",
    }
