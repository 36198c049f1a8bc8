"""Hook installation.

Writes one small launcher script per hook into ``.claude/hooks/`` and
registers the launchers in the project ``.claude/settings.json``. Only
settings entries whose command mentions ``omcsa-`` are ever touched.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .hooks.runner import HOOK_EVENTS
from .utils import atomic_write_text, read_json_object, write_json

HOOK_PREFIX = "omcsa-"

HOOK_DESCRIPTIONS: dict[str, str] = {
    "keyword-detector": "OMCSA keyword detector (ultrawork, ralph, cancel)",
    "persistent-mode": "OMCSA persistent mode (ralph/ultrawork continuation)",
    "pre-tool-use": "OMCSA delegation enforcement",
    "post-tool-logger": "OMCSA agent delegation logger",
}

LAUNCHER_TEMPLATE = '''#!{python}
"""{description}. Generated by omcsa; reinstalled on every apply."""

import sys

from omcsa.hooks.__main__ import main

sys.exit(main(["{hook}"]))
'''


@dataclass(frozen=True)
class HookDefinition:
    name: str
    event: str
    description: str

    @property
    def filename(self) -> str:
        return f"{HOOK_PREFIX}{self.name}.py"


HOOKS: tuple[HookDefinition, ...] = tuple(
    HookDefinition(name=name, event=event, description=HOOK_DESCRIPTIONS[name])
    for name, event in HOOK_EVENTS.items()
)


def get_project_hooks_dir(project_root: Path) -> Path:
    return project_root / ".claude" / "hooks"


def get_project_settings_path(project_root: Path) -> Path:
    return project_root / ".claude" / "settings.json"


def render_launcher(hook: HookDefinition, python: Optional[str] = None) -> str:
    return LAUNCHER_TEMPLATE.format(
        python=python or sys.executable,
        description=hook.description,
        hook=hook.name,
    )


def install_hooks(project_root: Path) -> list[str]:
    """Write every launcher script. Returns the installed file names.

    The host may be executing a launcher while it is reinstalled, so each
    one is written to a temp file and renamed into place.
    """
    hooks_dir = get_project_hooks_dir(project_root)
    installed = []
    for hook in HOOKS:
        atomic_write_text(hooks_dir / hook.filename, render_launcher(hook), mode=0o755)
        installed.append(hook.filename)
    return installed


def uninstall_hooks(project_root: Path) -> list[str]:
    """Delete omcsa launcher scripts. Returns the removed file names."""
    hooks_dir = get_project_hooks_dir(project_root)
    if not hooks_dir.is_dir():
        return []

    removed = []
    for path in sorted(hooks_dir.iterdir()):
        if path.name.startswith(HOOK_PREFIX) and path.suffix in (".py", ".mjs") and path.is_file():
            path.unlink()
            removed.append(path.name)
    return removed


def get_hook_commands(project_root: Path, python: Optional[str] = None) -> dict[str, list[str]]:
    """Map each host event to the commands that run its launchers."""
    hooks_dir = get_project_hooks_dir(project_root)
    python = python or sys.executable

    commands: dict[str, list[str]] = {}
    for hook in HOOKS:
        commands.setdefault(hook.event, []).append(f'"{python}" "{hooks_dir / hook.filename}"')
    return commands


def is_omcsa_entry(entry: Any) -> bool:
    """True for hook groups (``{"hooks": [{"command": ...}]}``) or legacy flat entries running omcsa."""
    if not isinstance(entry, dict):
        return False
    nested = entry.get("hooks")
    if isinstance(nested, list):
        for hook in nested:
            if isinstance(hook, dict) and HOOK_PREFIX in str(hook.get("command", "")):
                return True
    return HOOK_PREFIX in str(entry.get("command", ""))


def add_hooks_to_settings(project_root: Path, hook_commands: dict[str, list[str]]) -> Path:
    """Register hook commands in the project settings, replacing earlier omcsa entries."""
    settings_path = get_project_settings_path(project_root)
    settings = read_json_object(settings_path) or {}

    hooks = settings.get("hooks")
    if not isinstance(hooks, dict):
        hooks = {}
    settings["hooks"] = hooks

    for event, commands in hook_commands.items():
        groups = hooks.get(event)
        groups = [g for g in groups if not is_omcsa_entry(g)] if isinstance(groups, list) else []
        for command in commands:
            groups.append({"hooks": [{"type": "command", "command": command}]})
        hooks[event] = groups

    write_json(settings_path, settings)
    return settings_path


def remove_hooks_from_settings(project_root: Path) -> bool:
    """Drop omcsa entries from the project settings. Returns True if the file changed."""
    settings_path = get_project_settings_path(project_root)
    settings = read_json_object(settings_path)
    if settings is None or not isinstance(settings.get("hooks"), dict):
        return False

    hooks = settings["hooks"]
    changed = False
    for event in list(hooks):
        groups = hooks[event]
        if not isinstance(groups, list):
            continue
        kept = [g for g in groups if not is_omcsa_entry(g)]
        if len(kept) != len(groups):
            changed = True
        if kept:
            hooks[event] = kept
        else:
            del hooks[event]
            changed = True

    if not hooks:
        del settings["hooks"]
        changed = True

    if changed:
        write_json(settings_path, settings)
    return changed
