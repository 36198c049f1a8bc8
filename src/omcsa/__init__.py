"""Agent orchestration configurator for Claude Code sub-agents."""

__version__ = "0.1.0"
