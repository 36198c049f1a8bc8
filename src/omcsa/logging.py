"""Logging utilities for omcsa.

The package runs in two kinds of process: the long-lived MCP server and
short-lived hook processes spawned by the host for every event. Both may
append to the same log file, so each record carries the process role and pid.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

SERVER_ROLE = "server"
LOG_FORMAT = "%(asctime)s | %(process)d | {role} | %(levelname)s | %(message)s"

# Global logger instance (singleton)
_logger: Optional[logging.Logger] = None
_role: str = SERVER_ROLE


def get_logger() -> logging.Logger:
    """Get or create the omcsa logger."""
    global _logger
    if _logger is None:
        _logger = _setup_logger()
    return _logger


def configure_logging(role: str) -> logging.Logger:
    """Set the process role and rebuild the logger's handlers for it.

    Args:
        role: ``server``, or ``hook:<name>`` inside a hook process.
    """
    global _logger, _role
    _role = role
    logger = logging.getLogger("omcsa")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    _logger = None
    return get_logger()


def _default_log_path() -> Path:
    logs_dir = Path.cwd() / "logs"
    logs_dir.mkdir(exist_ok=True)
    return logs_dir / f"omcsa_{datetime.now().strftime('%Y-%m-%d')}.log"


def _setup_logger() -> logging.Logger:
    """Setup logging.

    Set OMCSA_LOG_FILE environment variable to enable file logging.
    - Set to a file path to log to that specific file.
    - Set to "1", "true", "yes", or "on" to log to the default logs directory.

    Without it, the server reports warnings on stderr (stdout carries the MCP
    protocol) and hook processes stay silent, since the host surfaces hook
    stderr to the user.
    """
    logger = logging.getLogger("omcsa")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT.format(role=_role), datefmt="%Y-%m-%d %H:%M:%S")
    log_env = os.environ.get("OMCSA_LOG_FILE")

    if not log_env:
        if _role == SERVER_ROLE:
            stream_handler = logging.StreamHandler(sys.stderr)
            stream_handler.setLevel(logging.WARNING)
            stream_handler.setFormatter(formatter)
            logger.addHandler(stream_handler)
        else:
            logger.addHandler(logging.NullHandler())
        return logger

    try:
        if log_env.lower() in ("1", "true", "yes", "on"):
            log_path = _default_log_path()
        else:
            log_path = Path(log_env)
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        if _role == SERVER_ROLE:
            stream_handler = logging.StreamHandler(sys.stderr)
            stream_handler.setFormatter(logging.Formatter(f"Failed to setup log file: {e} | %(message)s"))
            logger.addHandler(stream_handler)
        else:
            logger.addHandler(logging.NullHandler())

    return logger
