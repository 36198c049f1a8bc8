"""Stop handler: keeps ralph and ultrawork sessions going until done."""

from pathlib import Path

from .models import HookInput, HookOutput
from .state import PersistentState, clear_state, increment_iteration, read_state

STOP_LABELS = {
    "ralph": "RALPH LOOP STOPPED",
    "ultrawork": "ULTRAWORK STOPPED",
}


def ralph_continuation(state: PersistentState, cancel_keyword: str = "cancelomcsa") -> str:
    return f"""[RALPH LOOP - ITERATION {state.iteration}/{state.max_iterations}]

The task is NOT complete yet. Continue working.

IMPORTANT:
- Review your progress so far
- Continue from where you left off
- When FULLY complete, say "{cancel_keyword}" to exit
- Do not stop until the task is truly done

Original task:
{state.prompt}"""


def ultrawork_continuation(state: PersistentState) -> str:
    return f"""[ULTRAWORK CONTINUATION - ITERATION {state.iteration}/{state.max_iterations}]

Work is NOT complete. Continue executing remaining tasks in parallel.

IMPORTANT:
- Check which tasks are still pending
- Launch remaining tasks via Task tool (run_in_background=true)
- Verify all completed tasks
- Do not stop until ALL tasks are done

Original request:
{state.prompt}"""


def check_persistent_mode(hook_input: HookInput, state_dir: Path, cancel_keyword: str = "cancelomcsa") -> HookOutput:
    """Decide whether the session should keep going after a stop event.

    User-requested stops and context-limit stops are always honoured. Ralph
    is checked before ultrawork; state owned by another session is ignored.
    """
    if hook_input.user_requested or hook_input.stop_reason == "context_limit":
        return HookOutput()

    for mode in ("ralph", "ultrawork"):
        state = read_state(state_dir, mode)
        if state is None or not state.active:
            continue

        if hook_input.session_id and state.session_id != hook_input.session_id:
            return HookOutput()

        if state.iteration >= state.max_iterations:
            clear_state(state_dir, mode)
            return HookOutput(
                message=f"[{STOP_LABELS[mode]}] Max iterations ({state.max_iterations}) reached."
            )

        updated = increment_iteration(state_dir, mode)
        if updated is None:
            return HookOutput()
        if mode == "ralph":
            return HookOutput(message=ralph_continuation(updated, cancel_keyword))
        return HookOutput(message=ultrawork_continuation(updated))

    return HookOutput()
