"""Runtime hook handlers invoked by the host on session events."""

from .models import HookInput, HookOutput
from .runner import HOOK_EVENTS, run_hook

__all__ = ["HOOK_EVENTS", "HookInput", "HookOutput", "run_hook"]
