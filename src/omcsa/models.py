"""Data models shared across omcsa."""

from pathlib import Path
from typing import Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

InstallMode = Literal["standalone", "omc-only", "integrated"]
ModelName = Literal["haiku", "sonnet", "opus"]
ModelTier = Literal["LOW", "MEDIUM", "HIGH", "DEFAULT"]
AgentCategory = Literal["implementation", "review", "testing", "exploration", "other"]
AgentScope = Literal["global", "project"]
MaturityLevel = Literal["LOW", "MEDIUM", "HIGH"]
MaturityMode = Literal["auto", "full", "LOW", "MEDIUM", "HIGH"]
DelegationLevel = Literal["off", "warn", "strict"]

INSTALL_MODES: tuple[str, ...] = get_args(InstallMode)
MODEL_NAMES: tuple[str, ...] = get_args(ModelName)
CATEGORIES: tuple[str, ...] = get_args(AgentCategory)
MATURITY_MODES: tuple[str, ...] = get_args(MaturityMode)

MODEL_TIER_MAP: dict[str, str] = {
    "haiku": "LOW",
    "sonnet": "MEDIUM",
    "opus": "HIGH",
}

MARKER_START = "<!-- [OMCSA:START] - Auto-generated by oh-my-claude-sub-agents. Do not edit manually. -->"
MARKER_END = "<!-- [OMCSA:END] -->"


class AgentDescriptor(BaseModel):
    """A discovered sub-agent definition."""

    name: str = Field(description="Unique agent name (file stem unless overridden in frontmatter)")
    description: str = Field(description="Short description of the agent's role")
    model: Optional[ModelName] = Field(default=None, description="Model the agent runs on, None inherits")
    tier: ModelTier = Field(default="DEFAULT", description="Capability tier derived from the model")
    category: AgentCategory = Field(default="other", description="Functional category of the agent")
    scope: AgentScope = Field(default="project", description="Directory root the agent was found in")
    file_path: Optional[Path] = Field(default=None, description="Path to the agent definition file")
    disallowed_tools: Optional[list[str]] = Field(
        default=None, description="Tools this agent may not invoke"
    )


class OmcAgent(BaseModel):
    """An agent provided by oh-my-claudecode, offered as a supplementary delegate."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    full_name: str = Field(default="", alias="fullName")
    description: str = ""
    category: AgentCategory = "other"

    @model_validator(mode="after")
    def _default_full_name(self) -> "OmcAgent":
        if not self.full_name:
            self.full_name = f"oh-my-claudecode:{self.name}"
        return self
