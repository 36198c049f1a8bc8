"""Pytest fixtures for omcsa tests."""

import json
import logging as std_logging
from pathlib import Path

import pytest

from omcsa import logging
from omcsa.models import AgentDescriptor


@pytest.fixture(autouse=True)
def isolated_logger():
    """Give each test a fresh omcsa logger in the server role."""
    test_logger = std_logging.getLogger("omcsa")
    saved = (logging._logger, logging._role, list(test_logger.handlers))
    logging._logger = None
    logging._role = logging.SERVER_ROLE
    test_logger.handlers.clear()
    yield test_logger
    for handler in test_logger.handlers:
        handler.close()
    logging._logger, logging._role, test_logger.handlers[:] = saved


@pytest.fixture
def home(tmp_path, monkeypatch):
    """An empty home directory; ``Path.home()`` resolves to it."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def project(tmp_path, home):
    """An empty project directory with ``.claude/agents/``."""
    root = tmp_path / "project"
    (root / ".claude" / "agents").mkdir(parents=True)
    return root


def write_agent(agents_dir: Path, name: str, description: str = "", model: str = "", category: str = "",
                body: str = "Agent instructions.") -> Path:
    """Write an agent markdown file with a YAML frontmatter block."""
    lines = ["---"]
    if description:
        lines.append(f"description: {description}")
    if model:
        lines.append(f"model: {model}")
    if category:
        lines.append(f"category: {category}")
    lines.append("---")
    lines.append(body)

    agents_dir.mkdir(parents=True, exist_ok=True)
    path = agents_dir / f"{name}.md"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_global_settings(home: Path, settings: dict) -> Path:
    path = home / ".claude" / "settings.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings), encoding="utf-8")
    return path


def make_agent(name: str, category: str = "other", model=None, description: str = "") -> AgentDescriptor:
    tiers = {"haiku": "LOW", "sonnet": "MEDIUM", "opus": "HIGH"}
    return AgentDescriptor(
        name=name,
        description=description or f"{name} agent",
        model=model,
        tier=tiers.get(model, "DEFAULT"),
        category=category,
    )


@pytest.fixture
def two_agent_project(project):
    """A project with a backend implementation agent and a code reviewer."""
    agents_dir = project / ".claude" / "agents"
    write_agent(agents_dir, "backend-dev", "Builds backend APIs", "sonnet", "implementation")
    write_agent(agents_dir, "code-reviewer", "Reviews code changes", "opus", "review")
    return project
