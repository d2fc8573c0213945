"""Ports (interfaces) used by the log point core.

The storage port defines the minimal contract the core needs from durable
storage so that the service can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from core.models import LogPoint, LogPointConfig, LogPointUpdate
from core.targeting import ProbeQueryFilter


class LogPointStoragePort(Protocol):
    """Storage operations required by LogPointService.

    insert must raise DuplicateLogPointError when the
    (workspace_id, file_name, line_no, client) tuple already exists. The
    check belongs to the store's own uniqueness constraint.
    """

    def get_by_workspace_and_id(self, workspace_id: str, log_point_id: str) -> Optional[LogPointConfig]:
        ...

    def get_by_id(self, log_point_id: str) -> Optional[LogPoint]:
        ...

    def insert(self, config: LogPointConfig) -> None:
        ...

    def update(self, workspace_id: str, user_id: str, log_point_id: str, fields: LogPointUpdate) -> None:
        ...

    def set_disabled(self, workspace_id: str, user_id: str, log_point_id: str, disabled: bool) -> None:
        ...

    def delete(self, workspace_id: str, user_id: str, log_point_id: str) -> None:
        ...

    def delete_many(self, workspace_id: str, user_id: str, log_point_ids: Sequence[str]) -> int:
        ...

    def list_by_workspace_and_user(
        self, workspace_id: str, user_id: str, predefined_only: bool
    ) -> List[LogPoint]:
        ...

    def scan_by_workspace(self, workspace_id: str, query_filter: ProbeQueryFilter) -> List[LogPointConfig]:
        ...
