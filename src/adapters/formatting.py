"""Console rendering helpers for the operator CLI."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from rich.table import Table

from core.expiration import UNLIMITED, is_expired
from core.models import LogPoint


def format_limit(value: Optional[int]) -> str:
    if value is None or value == UNLIMITED:
        return "-"
    return str(value)


def format_expire_timestamp(log_point: LogPoint, now_ms: int) -> str:
    """Return the expiry instant in UTC, flagged when already passed."""

    if log_point.expire_timestamp is None:
        return "-"
    when = datetime.fromtimestamp(log_point.expire_timestamp / 1000, tz=timezone.utc)
    label = when.strftime("%Y-%m-%d %H:%M:%S")
    if is_expired(log_point, now_ms):
        return f"{label} (expired)"
    return label


def build_log_point_table(log_points: Iterable[LogPoint], now_ms: int, title: str) -> Table:
    """Build a rich table with one row per log point."""

    table = Table(title=title)
    table.add_column("id")
    table.add_column("location")
    table.add_column("client")
    table.add_column("name")
    table.add_column("level")
    table.add_column("hits")
    table.add_column("expires")
    table.add_column("state")

    for log_point in log_points:
        table.add_row(
            log_point.id,
            f"{log_point.file_name}:{log_point.line_no}",
            log_point.client,
            log_point.probe_name or "",
            log_point.log_level,
            format_limit(log_point.expire_count),
            format_expire_timestamp(log_point, now_ms),
            "disabled" if log_point.disabled else "enabled",
        )
    return table
