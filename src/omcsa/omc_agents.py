"""Discovery of oh-my-claudecode agents for integrated mode.

Sources, highest priority first:

1. ``omcAgents`` in the project config.
2. Agent files in the OMC plugin directory named in ``enabledPlugins``.
3. The registry bundled with omcsa (``data/omc-known-agents.json``).
"""

import re
from pathlib import Path
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, ValidationError

from .config import OmcsaConfig
from .detector import find_omc_plugin, get_global_settings_path
from .models import CATEGORIES, OmcAgent
from .utils import read_json_object, read_text_or_default

REGISTRY_PATH = Path(__file__).resolve().parent / "data" / "omc-known-agents.json"

PLUGIN_AGENT_SUBDIRS = ("agents", "src/agents", "dist/agents")

_DESCRIPTION_RE = re.compile(r"description:\s*(.+)", re.IGNORECASE)

# Evaluated in order, first match wins. OMC names lean on roles ("critic",
# "architect") more than on verbs, so review is checked before testing.
OMC_CATEGORY_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"review|critic|audit"), "review"),
    (re.compile(r"test|qa|tdd|quality"), "testing"),
    (re.compile(r"explor|search|research|architect|analy|vision|plan"), "exploration"),
    (re.compile(r"implement|execut|build|fix|design|writ"), "implementation"),
)


class OmcScanResult(BaseModel):
    agents: list[OmcAgent]
    source: Literal["config", "dynamic", "fallback"]
    registry_version: Optional[str] = None


def infer_omc_category(name: str, description: str) -> str:
    text = f"{name} {description}".lower()
    for pattern, category in OMC_CATEGORY_RULES:
        if pattern.search(text):
            return category
    return "other"


def scan_omc_agent_dir(dir_path: Path) -> list[OmcAgent]:
    """Read ``*.md`` / ``*.json`` agent definitions from an OMC plugin directory."""
    agents = []
    for file_path in sorted(dir_path.iterdir()):
        if file_path.suffix not in (".md", ".json") or not file_path.is_file():
            continue
        content = read_text_or_default(file_path)
        if content is None:
            continue
        name = file_path.stem
        match = _DESCRIPTION_RE.search(content)
        description = match.group(1).strip().strip('",') if match else f"OMC agent: {name}"
        agents.append(OmcAgent(
            name=name,
            description=description,
            category=infer_omc_category(name, description),
        ))
    return agents


def discover_from_plugin(home: Optional[Path] = None) -> list[OmcAgent]:
    """Scan the agent directories of the enabled OMC plugin, if its entry is a path."""
    settings = read_json_object(get_global_settings_path(home))
    if settings is None:
        return []

    plugin = find_omc_plugin(settings)
    if plugin is None:
        return []

    home = home if home is not None else Path.home()
    plugin_dir = home / plugin[2:] if plugin.startswith("~/") else Path(plugin)

    for subdir in PLUGIN_AGENT_SUBDIRS:
        agent_dir = plugin_dir / subdir
        try:
            if not agent_dir.is_dir():
                continue
            agents = scan_omc_agent_dir(agent_dir)
        except OSError:
            continue
        if agents:
            return agents
    return []


def load_fallback_registry(path: Path = REGISTRY_PATH) -> tuple[list[OmcAgent], str]:
    """Load the bundled registry as (agents, OMC version it describes)."""
    registry = read_json_object(path)
    if registry is None:
        return [], "unknown"
    try:
        agents = [OmcAgent.model_validate(a) for a in registry.get("agents", [])]
    except ValidationError:
        return [], "unknown"
    return agents, str(registry.get("omcVersion", "unknown"))


def scan_omc_agents(config: OmcsaConfig, home: Optional[Path] = None) -> OmcScanResult:
    """Collect OMC agents from the highest-priority source that yields any."""
    if config.omc_agents:
        return OmcScanResult(agents=list(config.omc_agents), source="config")

    discovered = discover_from_plugin(home)
    if discovered:
        return OmcScanResult(agents=discovered, source="dynamic")

    agents, version = load_fallback_registry()
    return OmcScanResult(agents=agents, source="fallback", registry_version=version)


def get_supplementary_omc_agents(omc_agents: Iterable[OmcAgent], custom_categories: set[str]) -> list[OmcAgent]:
    """OMC agents whose category no custom agent covers."""
    return [a for a in omc_agents if a.category not in custom_categories]


def build_coverage_matrix(
    custom_categories: set[str],
    omc_categories: set[str],
    categories: Iterable[str] = CATEGORIES,
) -> list[tuple[str, bool, bool]]:
    """Rows of (category, custom covers it, OMC covers it) for categories either side covers."""
    return [
        (category, category in custom_categories, category in omc_categories)
        for category in categories
        if category in custom_categories or category in omc_categories
    ]
