"""Log point service (core).

This module is storage-agnostic. It normalizes expiration settings, stamps
ownership onto new log points, and runs the in-process targeting pass over
whatever the storage port returns.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, List, Optional, Sequence

from core.expiration import (
    compute_expire_timestamp,
    normalize_expire_count,
    normalize_expire_secs,
    now_millis,
)
from core.models import ApplicationFilter, LogPoint, LogPointConfig, LogPointUpdate
from core.ports import LogPointStoragePort
from core.targeting import build_query_filter, filter_probes

LOGGER = logging.getLogger(__name__)


class LogPointService:
    """Entry point used by callers to manage and dispatch log points."""

    def __init__(self, storage: LogPointStoragePort, clock: Callable[[], int] = now_millis) -> None:
        self._storage = storage
        self._clock = clock

    def put_log_point(
        self,
        workspace_id: str,
        user_id: str,
        config: LogPointConfig,
        from_api: bool,
    ) -> LogPointConfig:
        """Store a new log point and return the record as persisted.

        DuplicateLogPointError from the storage port is propagated unchanged.
        """

        stored = dataclasses.replace(
            config,
            workspace_id=workspace_id,
            user_id=user_id,
            from_api=from_api,
            expire_secs=normalize_expire_secs(config.expire_secs),
            expire_count=normalize_expire_count(config.expire_count),
            expire_timestamp=compute_expire_timestamp(config.expire_secs, self._clock()),
        )
        self._storage.insert(stored)
        LOGGER.info(
            "Log point %s stored for %s:%s (client %s)",
            stored.id,
            stored.file_name,
            stored.line_no,
            stored.client,
        )
        return stored

    def get_log_point(self, workspace_id: str, log_point_id: str) -> Optional[LogPointConfig]:
        return self._storage.get_by_workspace_and_id(workspace_id, log_point_id)

    def get_log_point_by_id(self, log_point_id: str) -> Optional[LogPoint]:
        return self._storage.get_by_id(log_point_id)

    def list_log_points(self, workspace_id: str, user_id: str) -> List[LogPoint]:
        return self._storage.list_by_workspace_and_user(workspace_id, user_id, predefined_only=False)

    def list_predefined_log_points(self, workspace_id: str, user_id: str) -> List[LogPoint]:
        return self._storage.list_by_workspace_and_user(workspace_id, user_id, predefined_only=True)

    def update_log_point(
        self,
        workspace_id: str,
        user_id: str,
        log_point_id: str,
        fields: LogPointUpdate,
    ) -> LogPointUpdate:
        """Update mutable fields, re-arming expiration from the current instant."""

        normalized = dataclasses.replace(
            fields,
            expire_secs=normalize_expire_secs(fields.expire_secs),
            expire_count=normalize_expire_count(fields.expire_count),
            expire_timestamp=compute_expire_timestamp(fields.expire_secs, self._clock()),
        )
        self._storage.update(workspace_id, user_id, log_point_id, normalized)
        LOGGER.info("Log point %s updated in workspace %s", log_point_id, workspace_id)
        return normalized

    def enable_disable_log_point(
        self, workspace_id: str, user_id: str, log_point_id: str, disabled: bool
    ) -> None:
        self._storage.set_disabled(workspace_id, user_id, log_point_id, disabled)
        LOGGER.info(
            "Log point %s %s in workspace %s",
            log_point_id,
            "disabled" if disabled else "enabled",
            workspace_id,
        )

    def remove_log_point(self, workspace_id: str, user_id: str, log_point_id: str) -> None:
        self._storage.delete(workspace_id, user_id, log_point_id)
        LOGGER.info("Log point %s removed from workspace %s", log_point_id, workspace_id)

    def remove_log_points(self, workspace_id: str, user_id: str, log_point_ids: Sequence[str]) -> int:
        removed = self._storage.delete_many(workspace_id, user_id, list(log_point_ids))
        LOGGER.info("Removed %s of %s log points from workspace %s", removed, len(log_point_ids), workspace_id)
        return removed

    def query_log_points(self, workspace_id: str, requester: ApplicationFilter) -> List[LogPoint]:
        """Return the enabled log points that target the requesting application.

        The storage scan is only a pre-filter; membership is decided by
        filter_probes on the decoded configs.

        The result is ordered by file, line and client. It is a list, not a
        set, because the records hold lists and dicts and are not hashable.
        """

        query_filter = build_query_filter(workspace_id, requester)
        candidates = self._storage.scan_by_workspace(workspace_id, query_filter)
        matched = filter_probes(candidates, requester)
        LOGGER.debug(
            "Targeting query for workspace %s: %s candidates, %s matched",
            workspace_id,
            len(candidates),
            len(matched),
        )
        return list(matched)
