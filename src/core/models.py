"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage-specific row types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ApplicationFilter:
    """Identity attributes of a running application.

    Used both as a stored targeting predicate (None means wildcard) and as the
    requester identity sent by a live application instance.
    """

    name: Optional[str] = None
    version: Optional[str] = None
    stage: Optional[str] = None
    custom_tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LogPoint:
    """A stored probe bound to a source file and line."""

    id: str
    file_name: str
    line_no: int
    client: str
    workspace_id: Optional[str] = None
    user_id: Optional[str] = None
    condition_expression: Optional[str] = None
    expire_secs: Optional[int] = None
    expire_count: Optional[int] = None
    file_hash: Optional[str] = None
    disabled: bool = False
    expire_timestamp: Optional[int] = None
    log_expression: Optional[str] = None
    stdout_enabled: bool = False
    log_level: str = "INFO"
    webhook_ids: List[str] = field(default_factory=list)
    from_api: bool = False
    predefined: bool = False
    probe_name: Optional[str] = None


@dataclass(frozen=True)
class LogPointConfig(LogPoint):
    """A log point together with its application targeting filters."""

    application_filters: List[ApplicationFilter] = field(default_factory=list)


@dataclass(frozen=True)
class LogPointUpdate:
    """Mutable fields accepted when updating an existing log point."""

    condition_expression: Optional[str] = None
    expire_secs: Optional[int] = None
    expire_count: Optional[int] = None
    log_expression: Optional[str] = None
    stdout_enabled: bool = False
    log_level: str = "INFO"
    webhook_ids: List[str] = field(default_factory=list)
    predefined: bool = False
    probe_name: Optional[str] = None
    expire_timestamp: Optional[int] = None
