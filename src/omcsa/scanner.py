"""Agent scanner.

Discovers agent definition files in ``~/.claude/agents`` (global scope) and
``<project>/.claude/agents`` (project scope). Each file is markdown with an
optional YAML frontmatter block:

    ---
    description: Builds REST endpoints
    model: sonnet
    category: dev
    ---
    Agent instructions...
"""

import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import CATEGORIES, MODEL_NAMES, MODEL_TIER_MAP, AgentDescriptor

DEFAULT_DESCRIPTION = "Custom agent"
MAX_DESCRIPTION_LENGTH = 120

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---[ \t]*(?:\n|$)", re.DOTALL)

CATEGORY_SYNONYMS: dict[str, str] = {
    # implementation
    "engineering": "implementation",
    "development": "implementation",
    "dev": "implementation",
    "coding": "implementation",
    "builder": "implementation",
    # review
    "quality": "review",
    "audit": "review",
    "verification": "review",
    # testing
    "qa": "testing",
    "test": "testing",
    "spec": "testing",
    # exploration
    "analysis": "exploration",
    "research": "exploration",
    "investigation": "exploration",
}

# Evaluated in order, first match wins.
CATEGORY_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\b(tests?|testing|tester|specs?|jest|vitest|pytest|qa)\b"), "testing"),
    (re.compile(r"\b(review\w*|lint\w*|audit\w*|quality|check|checks|checker)\b"), "review"),
    (re.compile(r"\b(explor\w*|research\w*|search\w*|analy[sz]\w*|investigat\w*|debug\w*)"), "exploration"),
    (re.compile(r"\b(implement\w*|build\w*|develop\w*|creat\w*|code|coder|coding|dev|frontend|backend|api|ui|ux)\b"), "implementation"),
)


class MalformedAgentFile(ValueError):
    """An agent file could not be parsed into a descriptor."""


def split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split a markdown document into (frontmatter mapping, body).

    Raises:
        MalformedAgentFile: If a frontmatter block exists but is not a YAML mapping.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise MalformedAgentFile(f"invalid frontmatter YAML: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MalformedAgentFile("frontmatter is not a mapping")

    return metadata, content[match.end():]


def extract_description(body: str, metadata: dict[str, Any]) -> str:
    """Description from frontmatter, else the first plain body line, else a fixed literal."""
    if metadata.get("description"):
        return str(metadata["description"]).strip()

    for line in body.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#") and not stripped.startswith("---"):
            if len(stripped) > MAX_DESCRIPTION_LENGTH:
                return stripped[:MAX_DESCRIPTION_LENGTH - 3] + "..."
            return stripped

    return DEFAULT_DESCRIPTION


def infer_category(name: str, description: str) -> str:
    """Infer a category from keywords in the agent name and description."""
    text = f"{name} {description}".lower()
    for pattern, category in CATEGORY_RULES:
        if pattern.search(text):
            return category
    return "other"


def normalize_category(value: Any) -> Optional[str]:
    """Map an explicit category value onto a known category, or None if unrecognized."""
    if not isinstance(value, str):
        return None
    lower = value.strip().lower()
    if lower in CATEGORIES:
        return lower
    return CATEGORY_SYNONYMS.get(lower)


def validate_model(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    lower = value.strip().lower()
    return lower if lower in MODEL_NAMES else None


def derive_tier(model: Optional[str]) -> str:
    if model is None:
        return "DEFAULT"
    return MODEL_TIER_MAP.get(model, "DEFAULT")


def parse_agent_file(content: str, file_path: Path, scope: str) -> AgentDescriptor:
    """Parse an agent markdown file into an AgentDescriptor.

    Raises:
        MalformedAgentFile: If the frontmatter cannot be parsed.
    """
    metadata, body = split_frontmatter(content)

    name = str(metadata["name"]).strip() if metadata.get("name") else file_path.stem
    description = extract_description(body, metadata)
    model = validate_model(metadata.get("model"))
    category = normalize_category(metadata.get("category")) or infer_category(name, description)

    disallowed = metadata.get("disallowedTools")
    if isinstance(disallowed, str):
        disallowed = [t.strip() for t in disallowed.split(",") if t.strip()]
    disallowed_tools = [str(t) for t in disallowed] if isinstance(disallowed, list) else None

    return AgentDescriptor(
        name=name,
        description=description,
        model=model,
        tier=derive_tier(model),
        category=category,
        scope=scope,
        file_path=file_path,
        disallowed_tools=disallowed_tools,
    )


def scan_directory(dir_path: Path, scope: str, skipped: Optional[list[Path]] = None) -> list[AgentDescriptor]:
    """Parse every ``*.md`` file in ``dir_path``.

    Unreadable or malformed files are left out; their paths are appended to
    ``skipped`` when a list is supplied.
    """
    if not dir_path.is_dir():
        return []

    agents = []
    for file_path in sorted(dir_path.glob("*.md")):
        if not file_path.is_file():
            continue
        try:
            content = file_path.read_text(encoding="utf-8")
            agents.append(parse_agent_file(content, file_path, scope))
        except (OSError, ValueError):
            if skipped is not None:
                skipped.append(file_path)
    return agents


def get_agent_dirs(project_root: Path, home: Optional[Path] = None) -> tuple[Path, Path]:
    """Return (global agents dir, project agents dir)."""
    home = home if home is not None else Path.home()
    return home / ".claude" / "agents", project_root / ".claude" / "agents"


def scan_agents(
    project_root: Path,
    home: Optional[Path] = None,
    skipped: Optional[list[Path]] = None,
) -> list[AgentDescriptor]:
    """Scan global and project agent directories.

    Project agents override global agents with the same name.
    """
    global_dir, project_dir = get_agent_dirs(project_root, home)

    merged: dict[str, AgentDescriptor] = {}
    for agent in scan_directory(global_dir, "global", skipped):
        merged[agent.name] = agent
    for agent in scan_directory(project_dir, "project", skipped):
        merged[agent.name] = agent

    return list(merged.values())
