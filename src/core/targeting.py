"""Application-aware targeting of log points (core domain).

Targeting runs in two passes. The storage adapter first applies a coarse
ProbeQueryFilter using its indexed columns, then filter_probes re-checks
every returned config against the decoded filter list. Filter lists live in
a single encoded column, so wildcard and OR semantics can only be evaluated
here; the in-process pass is authoritative and always runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from core.models import ApplicationFilter, LogPointConfig


@dataclass(frozen=True)
class ProbeQueryFilter:
    """Coarse predicate handed to the storage adapter."""

    workspace_id: str
    exclude_disabled: bool = True


def build_query_filter(workspace_id: str, requester: ApplicationFilter) -> ProbeQueryFilter:
    """Build the store-side predicate for a targeting query.

    Only the disabled flag is an indexable column. Requester attributes are
    not pushed down because a stored filter that leaves an attribute
    unspecified still matches every value of it.
    """

    return ProbeQueryFilter(workspace_id=workspace_id, exclude_disabled=True)


def filter_matches(stored: ApplicationFilter, requester: ApplicationFilter) -> bool:
    """Return True if every attribute the stored filter sets equals the requester's.

    Unset attributes are wildcards. Requester attributes the stored filter
    does not mention never cause a mismatch.
    """

    if stored.name is not None and stored.name != requester.name:
        return False
    if stored.version is not None and stored.version != requester.version:
        return False
    if stored.stage is not None and stored.stage != requester.stage:
        return False
    for key, value in stored.custom_tags.items():
        if requester.custom_tags.get(key) != value:
            return False
    return True


def targets(config: LogPointConfig, requester: ApplicationFilter) -> bool:
    """Return True if the log point applies to the requesting application."""

    # No filters means a global log point.
    if not config.application_filters:
        return True
    return any(filter_matches(stored, requester) for stored in config.application_filters)


def filter_probes(
    configs: Iterable[LogPointConfig], requester: ApplicationFilter
) -> List[LogPointConfig]:
    """Return enabled configs that target the requester, preserving order."""

    return [
        config
        for config in configs
        if not config.disabled and targets(config, requester)
    ]
