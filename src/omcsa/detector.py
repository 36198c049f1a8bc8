"""oh-my-claudecode (OMC) detection and install mode management.

The install mode decides which hook set owns the session:

- ``standalone``: omcsa hooks and prompt only.
- ``omc-only``: omcsa yields its runtime hooks to OMC.
- ``integrated``: omcsa owns the prompt and offers OMC agents as fallbacks.

The persisted mode record (``.omcsa/mode.json``) is the only thing runtime
hooks consult. Without it they behave as ``standalone``.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidChoiceError
from .models import INSTALL_MODES, InstallMode
from .utils import read_json_object, write_json

OMC_PLUGIN_NAME = "oh-my-claudecode"
OMCSA_DIRNAME = ".omcsa"
MODE_FILENAME = "mode.json"

DetectionMethod = Literal["plugin", "hooks", "settings"]


class OmcDetectionResult(BaseModel):
    """Outcome of probing the host for an OMC installation."""

    found: bool
    method: Optional[DetectionMethod] = None
    details: str = "OMC not detected"


class ModeResolution(BaseModel):
    mode: InstallMode
    advisory: Optional[str] = None


class ModeRecord(BaseModel):
    """Persisted install mode, read by runtime hooks."""

    model_config = ConfigDict(populate_by_name=True)

    mode: InstallMode
    detected_omc: bool = Field(default=False, alias="detectedOmc")
    omc_method: Optional[str] = Field(default=None, alias="omcMethod")
    updated_at: str = Field(default="", alias="updatedAt")


def get_global_settings_path(home: Optional[Path] = None) -> Path:
    home = home if home is not None else Path.home()
    return home / ".claude" / "settings.json"


def _enabled_plugin_names(settings: dict[str, Any]) -> list[str]:
    """Plugin identifiers from ``enabledPlugins``, which may be a list or a name -> bool map."""
    plugins = settings.get("enabledPlugins")
    if isinstance(plugins, list):
        return [p for p in plugins if isinstance(p, str)]
    if isinstance(plugins, dict):
        return [name for name, enabled in plugins.items() if enabled]
    return []


def find_omc_plugin(settings: dict[str, Any]) -> Optional[str]:
    """Return the first enabled plugin entry naming OMC, if any."""
    for plugin in _enabled_plugin_names(settings):
        if OMC_PLUGIN_NAME in plugin.lower():
            return plugin
    return None


def _mentions_omc(text: str) -> bool:
    lowered = text.lower()
    if OMC_PLUGIN_NAME in lowered:
        return True
    return "omc" in lowered.replace("omcsa", "")


def detect_omc(home: Optional[Path] = None) -> OmcDetectionResult:
    """Detect whether OMC is installed globally.

    Checks, in order:

    1. ``~/.claude/settings.json`` ``enabledPlugins`` names oh-my-claudecode.
    2. ``~/.claude/hooks/`` holds OMC hook files (omcsa's own files excluded).
    3. ``~/.claude/settings.json`` mentions OMC anywhere (omcsa excluded).
    """
    settings_path = get_global_settings_path(home)
    settings = read_json_object(settings_path)

    if settings is not None and find_omc_plugin(settings):
        return OmcDetectionResult(
            found=True, method="plugin", details="Found oh-my-claudecode in enabledPlugins"
        )

    hooks_dir = settings_path.parent / "hooks"
    if hooks_dir.is_dir():
        try:
            names = sorted(p.name for p in hooks_dir.iterdir())
        except OSError:
            names = []
        omc_hooks = [n for n in names if "omc" in n.lower() and "omcsa" not in n.lower()]
        if omc_hooks:
            return OmcDetectionResult(
                found=True, method="hooks", details=f"Found OMC hooks: {', '.join(omc_hooks)}"
            )

    if settings is not None and _mentions_omc(json.dumps(settings)):
        return OmcDetectionResult(
            found=True, method="settings", details="Found OMC references in settings.json"
        )

    return OmcDetectionResult(found=False)


def validate_mode(value: str) -> InstallMode:
    """Reject install modes outside standalone | omc-only | integrated."""
    if value not in INSTALL_MODES:
        raise InvalidChoiceError("mode", value, INSTALL_MODES)
    return value  # type: ignore[return-value]


def resolve_install_mode(explicit: Optional[str], detection: OmcDetectionResult) -> ModeResolution:
    """Resolve the install mode from an explicit choice and the detection result.

    An explicit mode is always used as given. Without one the mode is
    ``standalone``; detection only ever produces an advisory, never a switch.
    """
    if explicit:
        if detection.found and explicit == "standalone":
            return ModeResolution(
                mode="standalone",
                advisory="OMC detected but standalone mode requested. "
                         "OMCSA hooks will be active alongside OMC.",
            )
        return ModeResolution(mode=explicit)

    if detection.found:
        return ModeResolution(
            mode="standalone",
            advisory=f"OMC detected ({detection.method}). Tip: use mode 'integrated' for coexistence.",
        )
    return ModeResolution(mode="standalone")


def get_mode_path(project_root: Path) -> Path:
    return project_root / OMCSA_DIRNAME / MODE_FILENAME


def save_mode(project_root: Path, mode: str, detection: OmcDetectionResult) -> ModeRecord:
    """Persist the install mode together with a snapshot of the detection result."""
    record = ModeRecord(
        mode=mode,
        detected_omc=detection.found,
        omc_method=detection.method,
        updated_at=datetime.now(timezone.utc).isoformat(),
    )
    write_json(get_mode_path(project_root), record.model_dump(by_alias=True))
    return record


def load_mode(project_root: Path) -> Optional[ModeRecord]:
    """Load the persisted mode record, or None when absent or corrupt."""
    data = read_json_object(get_mode_path(project_root))
    if data is None:
        return None
    try:
        return ModeRecord.model_validate(data)
    except ValidationError:
        return None


def runtime_mode(project_root: Path) -> InstallMode:
    """Mode used by runtime hooks; ``standalone`` when no record exists."""
    record = load_mode(project_root)
    return record.mode if record is not None else "standalone"

