"""Workflow pipelines.

Suggests pipelines from agent categories and tracks the progress of the one
active pipeline run per project. A run advances each time the agent the run
expects next is delegated to; it is deleted once every step has run.
Delegations to any other agent leave the run untouched.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import WorkflowDefinition
from .models import AgentDescriptor
from .utils import read_json_object, write_json

WORKFLOW_STATE_FILENAME = "workflow-state.json"

# Step order for pipelines built without an implementation agent.
CATEGORY_ORDER = ("exploration", "implementation", "other", "review", "testing")


def generate_suggested_workflows(agents: Sequence[AgentDescriptor]) -> dict[str, WorkflowDefinition]:
    """Suggest pipelines from agent categories.

    With implementation agents, one pipeline per implementation agent:
    the first exploration agent, the implementation agent, then every other,
    review and testing agent. Named "default" when there is a single
    implementation agent, ``<name>-flow`` otherwise.

    Without implementation agents but with two or more categories, a single
    "default" pipeline in ``CATEGORY_ORDER``. Anything else yields no
    suggestion.
    """
    if len(agents) < 2:
        return {}

    by_category: dict[str, list[str]] = {}
    for agent in agents:
        by_category.setdefault(agent.category, []).append(agent.name)

    impl = by_category.get("implementation", [])
    explore = by_category.get("exploration", [])
    trailing = by_category.get("other", []) + by_category.get("review", []) + by_category.get("testing", [])

    if impl:
        if not explore and not trailing:
            return {}
        workflows = {}
        for name in impl:
            steps = explore[:1] + [name] + trailing
            key = "default" if len(impl) == 1 else f"{name}-flow"
            workflows[key] = WorkflowDefinition(steps=steps)
        return workflows

    if len(by_category) < 2:
        return {}

    steps = [name for category in CATEGORY_ORDER for name in by_category.get(category, [])]
    return {"default": WorkflowDefinition(steps=steps)}


class WorkflowRunState(BaseModel):
    """Progress of the active pipeline run."""

    model_config = ConfigDict(populate_by_name=True)

    active: bool = True
    workflow_name: str = Field(alias="workflowName")
    steps: list[str]
    current_step_index: int = Field(alias="currentStepIndex")
    completed_steps: list[str] = Field(default_factory=list, alias="completedSteps")
    session_id: str = Field(default="unknown", alias="sessionId")
    started_at: str = Field(default="", alias="startedAt")
    last_updated_at: str = Field(default="", alias="lastUpdatedAt")

    @property
    def is_running(self) -> bool:
        return self.active and self.current_step_index < len(self.steps)

    @property
    def expected_step(self) -> Optional[str]:
        return self.steps[self.current_step_index] if self.is_running else None


@dataclass
class WorkflowTransition:
    """Result of feeding one delegation into the state machine.

    ``action`` tells the caller what to do with the state file.
    """

    state: Optional[WorkflowRunState]
    action: Literal["none", "save", "delete"] = "none"
    message: Optional[str] = None


def find_starting_workflow(
    agent_name: str,
    workflows: Mapping[str, WorkflowDefinition],
) -> Optional[tuple[str, WorkflowDefinition]]:
    """The workflow whose first step is ``agent_name``.

    When several workflows start with the same agent, the name that sorts
    first wins.
    """
    for name in sorted(workflows):
        definition = workflows[name]
        if definition.steps and definition.steps[0] == agent_name:
            return name, definition
    return None


def transition(
    state: Optional[WorkflowRunState],
    agent_name: str,
    workflows: Mapping[str, WorkflowDefinition],
    session_id: str,
    now: str,
) -> WorkflowTransition:
    """Pure state machine step for one observed delegation."""
    if not agent_name:
        return WorkflowTransition(state)

    if state is not None and state.is_running:
        if agent_name != state.expected_step:
            return WorkflowTransition(state)

        advanced = state.model_copy(update={
            "completed_steps": [*state.completed_steps, agent_name],
            "current_step_index": state.current_step_index + 1,
            "last_updated_at": now,
        })
        total = len(advanced.steps)
        prefix = f"[WORKFLOW: {advanced.workflow_name}]"

        if not advanced.is_running:
            pipeline = " -> ".join(advanced.completed_steps)
            return WorkflowTransition(
                None, "delete", f"{prefix} All {total} steps complete! Pipeline: {pipeline}"
            )
        return WorkflowTransition(
            advanced,
            "save",
            f"{prefix} Step {advanced.current_step_index}/{total} complete ({agent_name}). "
            f"Next: delegate to {advanced.expected_step}",
        )

    match = find_starting_workflow(agent_name, workflows)
    if match is None:
        return WorkflowTransition(state)

    name, definition = match
    started = WorkflowRunState(
        workflow_name=name,
        steps=list(definition.steps),
        current_step_index=1,
        completed_steps=[agent_name],
        session_id=session_id,
        started_at=now,
        last_updated_at=now,
    )
    message = None
    if len(started.steps) > 1:
        message = (
            f"[WORKFLOW: {name}] Pipeline started! Step 1/{len(started.steps)} complete ({agent_name}). "
            f"Next: delegate to {started.steps[1]}"
        )
    return WorkflowTransition(started, "save", message)


def get_workflow_state_path(state_dir: Path) -> Path:
    return state_dir / WORKFLOW_STATE_FILENAME


def load_workflow_state(state_dir: Path) -> Optional[WorkflowRunState]:
    data = read_json_object(get_workflow_state_path(state_dir))
    if data is None:
        return None
    try:
        return WorkflowRunState.model_validate(data)
    except ValidationError:
        return None


def save_workflow_state(state_dir: Path, state: WorkflowRunState) -> None:
    write_json(get_workflow_state_path(state_dir), state.model_dump(by_alias=True))


def clear_workflow_state(state_dir: Path) -> bool:
    """Delete the run state file. Returns True if one existed."""
    path = get_workflow_state_path(state_dir)
    if not path.exists():
        return False
    path.unlink()
    return True


def advance_workflow(
    state_dir: Path,
    agent_name: str,
    workflows: Mapping[str, WorkflowDefinition],
    session_id: str = "unknown",
) -> WorkflowTransition:
    """Load the run state, apply one delegation and persist the outcome.

    Args:
        state_dir: Directory holding ``workflow-state.json``.
        agent_name: Agent the Task tool delegated to.
        workflows: Configured workflow definitions.
        session_id: Host session that made the delegation.

    Returns:
        The transition, whose ``message`` is the advisory to show (if any).
    """
    now = datetime.now(timezone.utc).isoformat()
    result = transition(load_workflow_state(state_dir), agent_name, workflows, session_id, now)

    if result.action == "save" and result.state is not None:
        save_workflow_state(state_dir, result.state)
    elif result.action == "delete":
        clear_workflow_state(state_dir)
    return result
