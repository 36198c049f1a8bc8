"""Tools package for omcsa."""

from .apply import apply_configuration, refresh_agents
from .doctor import diagnose
from .mode import cancel_modes, switch_mode
from .omc import disable_omc, enable_omc
from .setup import init_orchestration, uninstall
from .status import get_status
from .workflows import add_workflow, list_workflows, remove_workflow

__all__ = [
    "init_orchestration",
    "apply_configuration",
    "refresh_agents",
    "get_status",
    "diagnose",
    "switch_mode",
    "cancel_modes",
    "uninstall",
    "list_workflows",
    "add_workflow",
    "remove_workflow",
    "disable_omc",
    "enable_omc",
]
