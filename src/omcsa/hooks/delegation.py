"""PreToolUse handler: nudges the orchestrator to delegate source code edits."""

import re
from pathlib import PurePosixPath
from typing import Optional, Sequence

from ..models import AgentDescriptor
from .models import HookInput, HookOutput

WRITE_EDIT_TOOLS = frozenset({"Write", "Edit", "MultiEdit", "NotebookEdit"})

SOURCE_EXTENSIONS = frozenset({
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
    ".py", ".rb", ".go", ".rs", ".java", ".kt",
    ".c", ".cpp", ".h", ".hpp", ".cs", ".swift",
    ".vue", ".svelte", ".astro",
})

# Paths the orchestrator may always edit directly.
ALLOWED_PATH_PATTERNS = tuple(re.compile(p) for p in (
    r"^\.omcsa/",
    r"^\.claude/",
    r"^\.omc/",
    r"^claudedocs/",
    r"\.md$",
    r"\.json$",
    r"\.ya?ml$",
    r"\.toml$",
    r"\.lock$",
))

FRONTEND_EXTENSIONS = frozenset({".tsx", ".jsx", ".vue", ".svelte", ".astro", ".css", ".scss"})
_FRONTEND_AGENT = re.compile(r"frontend|ui|react|vue|next|svelte", re.IGNORECASE)
_BACKEND_AGENT = re.compile(r"backend|api|server|express|nest|django|flask|fastapi", re.IGNORECASE)
_TEST_FILE = re.compile(r"(\.(test|spec)\.[jt]sx?$)|(^|/)test_[^/]*\.py$|_test\.(py|go)$")


def relative_to_project(file_path: str, project_root: Optional[str]) -> str:
    path = file_path.replace("\\", "/")
    if project_root:
        root = project_root.replace("\\", "/").rstrip("/") + "/"
        if path.startswith(root):
            return path[len(root):]
    return path


def is_allowed_path(path: str) -> bool:
    return any(p.search(path) for p in ALLOWED_PATH_PATTERNS)


def is_source_file(path: str) -> bool:
    return PurePosixPath(path).suffix.lower() in SOURCE_EXTENSIONS


def _first(agents: Sequence[AgentDescriptor], category: str, pattern: Optional[re.Pattern] = None) -> Optional[str]:
    for agent in agents:
        if agent.category != category:
            continue
        if pattern is None or pattern.search(f"{agent.name} {agent.description}"):
            return agent.name
    return None


def suggest_agent(path: str, agents: Sequence[AgentDescriptor]) -> Optional[str]:
    """Pick the agent that best fits a file path, falling back to any implementation agent."""
    lowered = path.lower()
    suffix = PurePosixPath(lowered).suffix

    if suffix in FRONTEND_EXTENSIONS or any(k in lowered for k in ("frontend", "components", "pages")):
        name = _first(agents, "implementation", _FRONTEND_AGENT)
        if name:
            return name

    if any(k in lowered for k in ("api", "server", "backend", "routes", "middleware")):
        name = _first(agents, "implementation", _BACKEND_AGENT)
        if name:
            return name

    if _TEST_FILE.search(lowered) or "__tests__" in lowered or "test/" in lowered or "tests/" in lowered:
        name = _first(agents, "testing")
        if name:
            return name

    name = _first(agents, "implementation")
    if name:
        return name
    return agents[0].name if agents else None


def check_delegation(hook_input: HookInput, level: str, agents: Sequence[AgentDescriptor]) -> HookOutput:
    """Warn about (``warn``) or block (``strict``) direct source code edits."""
    if level == "off" or hook_input.tool_name not in WRITE_EDIT_TOOLS:
        return HookOutput()

    file_path = hook_input.tool_input.get("file_path") or hook_input.tool_input.get("notebook_path") or ""
    if not isinstance(file_path, str) or not file_path:
        return HookOutput()

    path = relative_to_project(file_path, hook_input.directory)
    if is_allowed_path(path) or not is_source_file(path):
        return HookOutput()

    suggested = suggest_agent(path, agents)
    if suggested:
        suggestion = f'Consider delegating this to the "{suggested}" agent via Task tool.'
    else:
        suggestion = "Consider delegating this to an appropriate sub-agent via Task tool."

    if level == "strict":
        return HookOutput(
            continue_=False,
            reason=f"[OMCSA] Delegation enforced: Direct source code modification blocked for {path}.\n{suggestion}",
        )

    return HookOutput(
        message=f"[OMCSA] Delegation reminder: You are directly modifying source code ({path}).\n"
                f"{suggestion}\n"
                "As an orchestrator, prefer delegating implementation work to specialized agents."
    )
