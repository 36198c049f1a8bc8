"""Configuration models and loader for omcsa.

The project config lives in ``.claude/omcsa.config.json``. Every top-level key
is optional; missing or invalid keys fall back to defaults. ``features``, ``keywords``
and ``persistence`` merge key-by-key with the defaults, while ``agents``,
``maturity``, ``workflows`` and ``omcAgents`` replace the default wholesale.
"""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .models import AgentCategory, AgentDescriptor, DelegationLevel, MaturityMode, ModelTier, OmcAgent
from .utils import parse_or_default, read_text_or_default, write_json

CONFIG_FILENAME = "omcsa.config.json"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())


class AgentOverride(_CamelModel):
    """Per-agent overrides applied on top of scanned descriptors."""

    tier: Optional[ModelTier] = None
    category: Optional[AgentCategory] = None


class FeaturesConfig(_CamelModel):
    """Feature toggles."""

    ultrawork: bool = True
    ralph: bool = True
    delegation_enforcement: DelegationLevel = Field(default="warn", alias="delegationEnforcement")
    model_tiering: bool = Field(default=True, alias="modelTiering")


class KeywordsConfig(_CamelModel):
    """Activation keywords detected in user prompts."""

    ultrawork: list[str] = Field(default_factory=lambda: ["ultrawork", "ulw"])
    ralph: list[str] = Field(default_factory=lambda: ["ralph", "must complete", "until done"])
    cancel: list[str] = Field(default_factory=lambda: ["cancelomcsa", "stopomcsa"])


class PersistenceConfig(_CamelModel):
    """Where persistent-mode and workflow state lives, and how long loops may run."""

    max_iterations: int = Field(default=10, alias="maxIterations")
    state_dir: str = Field(default=".omcsa/state", alias="stateDir")


class MaturityConfig(_CamelModel):
    mode: Optional[MaturityMode] = None


class WorkflowDefinition(_CamelModel):
    """A named, ordered pipeline of agents."""

    steps: list[str]
    mode: Literal["sequential"] = "sequential"


class OmcsaConfig(_CamelModel):
    """Root configuration model."""

    agents: Optional[dict[str, AgentOverride]] = Field(
        default=None, description="Per-agent tier/category overrides"
    )
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    keywords: KeywordsConfig = Field(default_factory=KeywordsConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    maturity: Optional[MaturityConfig] = None
    workflows: Optional[dict[str, WorkflowDefinition]] = None
    omc_agents: Optional[list[OmcAgent]] = Field(
        default=None,
        alias="omcAgents",
        description="Explicit list of supplementary OMC agents for integrated mode",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the on-disk (camelCase) key names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


DEFAULT_CONFIG = OmcsaConfig()

_OBJECT_MERGED_KEYS = ("features", "keywords", "persistence")
_REPLACED_KEYS = ("agents", "maturity", "workflows", "omcAgents")


def get_config_path(project_root: Path) -> Path:
    return project_root / ".claude" / CONFIG_FILENAME


def merge_config(defaults: dict[str, Any], user: dict[str, Any]) -> dict[str, Any]:
    """Merge a user config document over the defaults.

    Args:
        defaults: Default config in on-disk (camelCase) form.
        user: Parsed user config document.

    Returns:
        Merged config document.
    """
    merged: dict[str, Any] = {}
    for key in _OBJECT_MERGED_KEYS:
        section = dict(defaults.get(key) or {})
        user_section = user.get(key)
        if isinstance(user_section, dict):
            section.update(user_section)
        merged[key] = section
    for key in _REPLACED_KEYS:
        value = user.get(key, defaults.get(key))
        if value is not None:
            merged[key] = value
    return merged


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    return f"{'.'.join(str(part) for part in first['loc'])}: {first['msg']}"


def read_config(project_root: Path) -> tuple[OmcsaConfig, list[str]]:
    """Load the project config and report what had to be discarded.

    Each top-level section is validated on its own, so an invalid section
    falls back to its default while the other sections are kept.

    Returns:
        The effective config and a list of problems. The list is empty when
        the file is missing or fully valid.
    """
    path = get_config_path(project_root)
    if not path.exists():
        return OmcsaConfig(), []

    raw = read_text_or_default(path)
    if raw is None:
        return OmcsaConfig(), [f"{path.name} could not be read"]
    user = parse_or_default(raw, None)
    if not isinstance(user, dict):
        return OmcsaConfig(), [f"{path.name} does not contain a JSON object"]

    problems = [
        f"{key}: expected an object"
        for key in _OBJECT_MERGED_KEYS
        if key in user and not isinstance(user[key], dict)
    ]
    merged = merge_config(DEFAULT_CONFIG.to_json_dict(), user)
    for key in list(merged):
        try:
            OmcsaConfig.model_validate({key: merged[key]})
        except ValidationError as e:
            problems.append(_describe(e))
            del merged[key]
    return OmcsaConfig.model_validate(merged), problems


def load_config(project_root: Path) -> OmcsaConfig:
    """Load the project config, falling back to defaults section by section."""
    return read_config(project_root)[0]


def load_config_for_update(project_root: Path) -> OmcsaConfig:
    """Load the config for a read-modify-write of the file.

    Raises:
        ConfigError: If the existing file is unreadable or has invalid
            sections. Writing it back would replace the user's values with
            defaults.
    """
    config, problems = read_config(project_root)
    if problems:
        raise ConfigError(
            f"{CONFIG_FILENAME} has invalid content ({'; '.join(problems)}). "
            "Fix the file before changing it with omcsa."
        )
    return config


def write_config(project_root: Path, config: OmcsaConfig) -> Path:
    """Write the config file and return its path."""
    path = get_config_path(project_root)
    write_json(path, config.to_json_dict())
    return path


def generate_config(agents: list[AgentDescriptor]) -> OmcsaConfig:
    """Generate a config document from discovered agents.

    Each agent gets an explicit tier/category entry; suggested workflows are
    included when the agent set supports any.
    """
    from .workflow import generate_suggested_workflows

    workflows = generate_suggested_workflows(agents)
    return OmcsaConfig(
        agents={a.name: AgentOverride(tier=a.tier, category=a.category) for a in agents},
        workflows=workflows or None,
    )


def apply_config_overrides(agents: list[AgentDescriptor], config: OmcsaConfig) -> list[AgentDescriptor]:
    """Apply per-agent tier/category overrides from the config."""
    if not config.agents:
        return agents

    result = []
    for agent in agents:
        override = config.agents.get(agent.name)
        if override is None:
            result.append(agent)
            continue
        result.append(agent.model_copy(update={
            "tier": override.tier or agent.tier,
            "category": override.category or agent.category,
        }))
    return result
