from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def _utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def day_marker(now: datetime) -> str:
    return _utc(now).strftime("%Y-%m-%d")


def week_marker(now: datetime) -> str:
    year, week, _ = _utc(now).isocalendar()
    return f"{year:04d}-W{week:02d}"


def should_prompt(
    frequency: str,
    last_pass_marker: Optional[str],
    now: datetime,
    session_passed: bool = False,
) -> bool:
    """
    Whether the gate must be shown again.
    Unknown frequencies prompt, same as "always".
    """
    freq = (frequency or "").strip().lower()
    if freq == "never":
        return False
    if freq == "session":
        return not session_passed
    if freq == "daily":
        return last_pass_marker != day_marker(now)
    if freq == "weekly":
        return last_pass_marker != week_marker(now)
    return True


def pass_marker(frequency: str, now: datetime) -> Optional[str]:
    """Marker to record on pass; only daily and weekly need one."""
    freq = (frequency or "").strip().lower()
    if freq == "daily":
        return day_marker(now)
    if freq == "weekly":
        return week_marker(now)
    return None
