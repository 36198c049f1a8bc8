"""Hook entry point: ``omcsa-hook <hook-name>``.

Reads one JSON event from stdin and prints one JSON reply to stdout. A hook
must never break the host session, so any failure prints ``{"continue": true}``.
"""

import argparse
import json
import sys
from typing import Optional, Sequence

from ..logging import configure_logging, get_logger
from ..utils import parse_or_default
from .models import HookOutput
from .runner import HOOK_EVENTS, run_hook


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="omcsa-hook", description="Run an omcsa hook on a JSON event from stdin.")
    parser.add_argument("hook", choices=sorted(HOOK_EVENTS), help="Hook to run")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(f"hook:{args.hook}")

    payload = parse_or_default(sys.stdin.read(), None)
    output = HookOutput()
    if isinstance(payload, dict):
        try:
            output = run_hook(args.hook, payload)
        except Exception as e:
            get_logger().error(f"[{args.hook}] {type(e).__name__}: {e}")
            output = HookOutput()

    print(json.dumps(output.to_dict()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
