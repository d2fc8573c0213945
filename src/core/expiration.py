"""Expiration policy for log points (core domain).

User-supplied limits are relative (seconds, hit count). They are normalized
before storage so that "no limit" has a single representation, and a
duration limit is turned into an absolute timestamp in epoch milliseconds.
"""

from __future__ import annotations

import time
from typing import Optional

from core.models import LogPoint

UNLIMITED = -1


def now_millis() -> int:
    """Return the current instant in epoch milliseconds."""

    return int(time.time() * 1000)


def normalize_expire_secs(raw: Optional[int]) -> int:
    """Return raw if positive, otherwise the unlimited marker."""

    if raw is None or raw <= 0:
        return UNLIMITED
    return raw


def normalize_expire_count(raw: Optional[int]) -> int:
    """Same policy as normalize_expire_secs, applied to hit counts."""

    if raw is None or raw <= 0:
        return UNLIMITED
    return raw


def compute_expire_timestamp(raw: Optional[int], now_ms: int) -> Optional[int]:
    """Return now_ms + raw seconds, or None when there is no time limit."""

    if raw is None or raw <= 0:
        return None
    return now_ms + raw * 1000


def is_expired(log_point: LogPoint, now_ms: int) -> bool:
    # Reporting only; targeting never excludes on this.
    if log_point.expire_timestamp is None:
        return False
    return log_point.expire_timestamp <= now_ms
