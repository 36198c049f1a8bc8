"""Hook event payloads.

The host sends snake_case keys while older clients send camelCase; both are
accepted for every field.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class HookInput(BaseModel):
    """JSON event read from the hook's stdin."""

    model_config = ConfigDict(extra="ignore")

    session_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("session_id", "sessionId"))
    prompt: Optional[str] = None
    message: Optional[dict[str, Any]] = None
    tool_name: str = Field(default="", validation_alias=AliasChoices("tool_name", "toolName"))
    tool_input: dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("tool_input", "toolInput"))
    directory: Optional[str] = Field(default=None, validation_alias=AliasChoices("directory", "cwd"))
    stop_reason: str = Field(default="", validation_alias=AliasChoices("stop_reason", "stopReason"))
    user_requested: bool = Field(default=False, validation_alias=AliasChoices("user_requested", "userRequested"))

    @property
    def prompt_text(self) -> str:
        if self.prompt:
            return self.prompt
        if self.message and isinstance(self.message.get("content"), str):
            return self.message["content"]
        return ""


class HookOutput(BaseModel):
    """JSON reply printed to stdout. ``continue`` is a keyword, hence the alias."""

    model_config = ConfigDict(populate_by_name=True)

    continue_: bool = Field(default=True, alias="continue")
    message: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
