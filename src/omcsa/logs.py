"""Delegation log: one JSON object per line in ``.omcsa/logs/YYYY-MM-DD.jsonl``."""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .utils import parse_or_default, read_text_or_default

LOG_SUFFIX = ".jsonl"


class DelegationLogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    agent: str = "unknown"
    model: str = "default"
    description: str = ""
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    session_id: str = Field(default="unknown", alias="sessionId")


class SessionSummary(BaseModel):
    session_id: str
    entries: list[DelegationLogEntry]
    first_timestamp: str
    last_timestamp: str
    agent_count: int


def get_log_dir(project_root: Path) -> Path:
    return project_root / ".omcsa" / "logs"


def _today() -> date:
    return datetime.now(timezone.utc).date()


def append_log_entry(project_root: Path, entry: DelegationLogEntry, day: Optional[date] = None) -> Path:
    """Append one entry to the log file for ``day`` (UTC today by default)."""
    log_dir = get_log_dir(project_root)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{(day or _today()).isoformat()}{LOG_SUFFIX}"
    with log_file.open("a", encoding="utf-8") as f:
        f.write(entry.model_dump_json(by_alias=True) + "\n")
    return log_file


def parse_log_file(path: Path) -> list[DelegationLogEntry]:
    """Entries of a JSONL file; malformed lines are skipped."""
    entries = []
    for line in (read_text_or_default(path) or "").splitlines():
        data = parse_or_default(line, None)
        if not isinstance(data, dict):
            continue
        try:
            entries.append(DelegationLogEntry.model_validate(data))
        except ValidationError:
            continue
    return entries


def list_log_files(project_root: Path) -> list[Path]:
    log_dir = get_log_dir(project_root)
    if not log_dir.is_dir():
        return []
    return sorted(log_dir.glob(f"*{LOG_SUFFIX}"))


def get_today_logs(project_root: Path, day: Optional[date] = None) -> list[DelegationLogEntry]:
    return parse_log_file(get_log_dir(project_root) / f"{(day or _today()).isoformat()}{LOG_SUFFIX}")


def get_last_session(project_root: Path) -> Optional[SessionSummary]:
    """Summarize the session of the newest entry in the newest log file."""
    files = list_log_files(project_root)
    if not files:
        return None

    entries = parse_log_file(files[-1])
    if not entries:
        return None

    session_id = entries[-1].session_id
    session_entries = [e for e in entries if e.session_id == session_id]
    return SessionSummary(
        session_id=session_id,
        entries=session_entries,
        first_timestamp=session_entries[0].timestamp,
        last_timestamp=session_entries[-1].timestamp,
        agent_count=len(session_entries),
    )


def clean_old_logs(project_root: Path, retention_days: int, today: Optional[date] = None) -> int:
    """Delete log files dated before ``today - retention_days``. Returns how many were removed."""
    cutoff = ((today or _today()) - timedelta(days=retention_days)).isoformat()
    removed = 0
    for path in list_log_files(project_root):
        if path.stem < cutoff:
            path.unlink()
            removed += 1
    return removed
