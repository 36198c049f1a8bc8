"""Small I/O helpers shared across omcsa.

Every "load X or fall back to a default" read goes through
``parse_or_default`` so the fail-soft policy lives in one place.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


def parse_or_default(raw: Optional[str], default: T, parser: Callable[[str], Any] = json.loads) -> T:
    """Parse ``raw`` with ``parser``, returning ``default`` on any failure.

    Args:
        raw: Text to parse. ``None`` or blank text yields the default.
        default: Value returned when parsing fails.
        parser: Callable turning text into a value (JSON by default).

    Returns:
        The parsed value, or ``default``.
    """
    if raw is None or not raw.strip():
        return default
    try:
        return parser(raw)
    except Exception:
        return default


def read_text_or_default(path: Path, default: Optional[str] = None) -> Optional[str]:
    """Read a UTF-8 text file, or return ``default`` when it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return default


def read_json_or_default(path: Path, default: T) -> T:
    """Load a JSON file, falling back to ``default`` when missing or corrupt."""
    return parse_or_default(read_text_or_default(path), default)


def read_json_object(path: Path) -> Optional[dict]:
    """Load a JSON file that must contain an object; anything else is ``None``."""
    data = read_json_or_default(path, None)
    return data if isinstance(data, dict) else None


def dump_json(data: Any) -> str:
    """Serialize ``data`` the way every omcsa file is written (2-space indent, trailing newline)."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json(path: Path, data: Any) -> None:
    """Write ``data`` as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_json(data), encoding="utf-8")


def atomic_write_text(path: Path, content: str, mode: Optional[int] = None) -> None:
    """Write ``content`` via a temp file in the same directory and ``os.replace``.

    A reader never observes a half-written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if mode is not None:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
