"""Text codec for list-valued log point columns.

Application filters and webhook ids are stored as JSON arrays in a single
text column. Blank text means an empty list. Anything else that fails to
decode is reported as CorruptFieldError rather than being read as empty.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Optional

from core.errors import CorruptFieldError
from core.models import ApplicationFilter

APPLICATION_FILTERS_COLUMN = "application_filters"
WEBHOOK_IDS_COLUMN = "webhook_ids"

_SCALAR_KEYS = ("name", "version", "stage")
_TAGS_KEY = "customTags"


def _load_list(column: str, text: Optional[str]) -> List[Any]:
    if text is None or not text.strip():
        return []
    try:
        value = json.loads(text)
    except ValueError as exc:
        raise CorruptFieldError(column, text, str(exc)) from exc
    # Older rows may hold a JSON null for a missing list.
    if value is None:
        return []
    if not isinstance(value, list):
        raise CorruptFieldError(column, text, f"expected a JSON array, got {type(value).__name__}")
    return value


def _filter_to_dict(app_filter: ApplicationFilter) -> dict:
    return {
        "name": app_filter.name,
        "version": app_filter.version,
        "stage": app_filter.stage,
        _TAGS_KEY: dict(app_filter.custom_tags),
    }


def _filter_from_dict(column: str, text: str, item: Any) -> ApplicationFilter:
    if not isinstance(item, dict):
        raise CorruptFieldError(column, text, "filter entry is not a JSON object")

    scalars = {}
    for key in _SCALAR_KEYS:
        value = item.get(key)
        if value is not None and not isinstance(value, str):
            raise CorruptFieldError(column, text, f"filter attribute {key} is not a string")
        scalars[key] = value

    tags = item.get(_TAGS_KEY)
    if tags is None:
        tags = {}
    if not isinstance(tags, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in tags.items()
    ):
        raise CorruptFieldError(column, text, f"{_TAGS_KEY} must map strings to strings")

    return ApplicationFilter(custom_tags=dict(tags), **scalars)


def encode_application_filters(filters: Iterable[ApplicationFilter]) -> str:
    """Serialize filters to a JSON array; an empty iterable gives '[]'."""

    return json.dumps([_filter_to_dict(f) for f in filters], sort_keys=True)


def decode_application_filters(text: Optional[str]) -> List[ApplicationFilter]:
    """Parse a stored filter column, raising CorruptFieldError on bad input."""

    items = _load_list(APPLICATION_FILTERS_COLUMN, text)
    return [_filter_from_dict(APPLICATION_FILTERS_COLUMN, text or "", item) for item in items]


def encode_webhook_ids(webhook_ids: Iterable[str]) -> str:
    return json.dumps(list(webhook_ids))


def decode_webhook_ids(text: Optional[str]) -> List[str]:
    items = _load_list(WEBHOOK_IDS_COLUMN, text)
    if not all(isinstance(item, str) for item in items):
        raise CorruptFieldError(WEBHOOK_IDS_COLUMN, text or "", "webhook ids must be strings")
    return items
