"""UserPromptSubmit handler: activation keywords for ultrawork, ralph and cancel."""

import re
from pathlib import Path
from typing import Optional, Sequence

from ..config import KeywordsConfig, OmcsaConfig
from .models import HookInput, HookOutput
from .state import PERSISTENT_MODES, clear_state, create_state, write_state

_FENCED_BACKTICK = re.compile(r"```.*?```", re.DOTALL)
_FENCED_TILDE = re.compile(r"~~~.*?~~~", re.DOTALL)
_INLINE_CODE = re.compile(r"`[^`]+`")

_PREFIX_RE = re.compile(r"^(ultrawork|ulw|ralph)\s*:\s*(.+)$", re.IGNORECASE | re.DOTALL)

CANCEL_MESSAGE = "[OMCSA] All active modes cancelled."


def remove_code_blocks(text: str) -> str:
    """Drop fenced and inline code so keywords inside code never trigger a mode."""
    text = _FENCED_BACKTICK.sub("", text)
    text = _FENCED_TILDE.sub("", text)
    return _INLINE_CODE.sub("", text)


def matches_any(text: str, keywords: Sequence[str]) -> bool:
    for keyword in keywords:
        if keyword and re.search(rf"\b{re.escape(keyword)}\b", text, re.IGNORECASE):
            return True
    return False


def detect_keyword(prompt: str, keywords: Optional[KeywordsConfig] = None) -> Optional[str]:
    """Detect the mode keyword in a prompt.

    Priority: cancel > ralph > ultrawork. Returns None when no keyword is present.
    """
    keywords = keywords or KeywordsConfig()
    cleaned = remove_code_blocks(prompt)

    for mode, words in (("cancel", keywords.cancel), ("ralph", keywords.ralph), ("ultrawork", keywords.ultrawork)):
        if matches_any(cleaned, words):
            return mode
    return None


def extract_prefixed_prompt(prompt: str) -> tuple[Optional[str], str]:
    """Split ``"ulw: do things"`` into ("ultrawork", "do things")."""
    trimmed = prompt.strip()
    match = _PREFIX_RE.match(trimmed)
    if not match:
        return None, trimmed

    keyword = match.group(1).lower()
    mode = "ralph" if keyword == "ralph" else "ultrawork"
    return mode, match.group(2).strip()


def _agents_block(agent_names: Sequence[str]) -> str:
    if not agent_names:
        return ""
    return "Available agents:\n" + "\n".join(f"- {name}" for name in agent_names) + "\n\n"


def ralph_activation_message(prompt: str, agent_names: Sequence[str], cancel_keyword: str) -> str:
    return f"""[RALPH MODE ACTIVATED]

Work continuously until ALL requirements are fully met.

Rules:
1. Break the task into subtasks
2. Delegate each subtask to the appropriate agent via Task tool
3. Use run_in_background=true for independent tasks
4. After each agent completes, verify the result
5. Do NOT stop until everything is done and verified
6. Say "{cancel_keyword}" when truly complete

{_agents_block(agent_names)}Original request:
{prompt}"""


def ultrawork_activation_message(prompt: str, agent_names: Sequence[str]) -> str:
    return f"""[ULTRAWORK MODE ACTIVATED] Parallel execution mode enabled.

Rules:
1. Identify independent tasks from the request
2. Delegate each task to the appropriate agent via Task tool
3. Launch independent tasks simultaneously (run_in_background=true)
4. Set the model parameter based on each agent's tier
5. Verify ALL tasks completed with build/test evidence
6. Do NOT declare done until everything is verified

{_agents_block(agent_names)}Original request:
{prompt}"""


def handle_keywords(
    hook_input: HookInput,
    config: OmcsaConfig,
    state_dir: Path,
    agent_names: Sequence[str] = (),
) -> HookOutput:
    """Detect a keyword in the submitted prompt and create or clear mode state.

    Ralph also activates ultrawork. Modes disabled in ``features`` are ignored.
    """
    prompt = hook_input.prompt_text
    if not prompt:
        return HookOutput()

    mode = detect_keyword(prompt, config.keywords)
    if mode is None:
        prefixed, _ = extract_prefixed_prompt(prompt)
        mode = prefixed

    if mode == "cancel":
        for name in PERSISTENT_MODES:
            clear_state(state_dir, name)
        return HookOutput(message=CANCEL_MESSAGE)

    features = config.features
    session_id = hook_input.session_id or "cli-session"
    max_iterations = config.persistence.max_iterations

    if mode == "ralph" and features.ralph:
        write_state(state_dir, create_state("ralph", prompt, session_id, max_iterations))
        write_state(state_dir, create_state("ultrawork", prompt, session_id, max_iterations))
        cancel_keyword = config.keywords.cancel[0] if config.keywords.cancel else "cancelomcsa"
        return HookOutput(message=ralph_activation_message(prompt, agent_names, cancel_keyword))

    if mode == "ultrawork" and features.ultrawork:
        write_state(state_dir, create_state("ultrawork", prompt, session_id, max_iterations))
        return HookOutput(message=ultrawork_activation_message(prompt, agent_names))

    return HookOutput()
