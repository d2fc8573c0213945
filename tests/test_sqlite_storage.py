from __future__ import annotations

import sqlite3

import pytest

from adapters.sqlite_storage import SQLiteLogPointStore
from core.errors import CorruptFieldError, DuplicateLogPointError
from core.models import ApplicationFilter, LogPointConfig, LogPointUpdate
from core.targeting import ProbeQueryFilter


@pytest.fixture
def store(tmp_path) -> SQLiteLogPointStore:
    storage = SQLiteLogPointStore(str(tmp_path / "logpoints.db"))
    storage.init_db()
    return storage


def _config(log_point_id: str, **overrides) -> LogPointConfig:
    values = dict(
        id=log_point_id,
        workspace_id="W1",
        user_id="u1",
        file_name="a.py",
        line_no=10,
        client="c1",
    )
    values.update(overrides)
    return LogPointConfig(**values)


def test_insert_and_get_roundtrip(store: SQLiteLogPointStore) -> None:
    config = _config(
        "lp1",
        condition_expression="x > 1",
        expire_secs=60,
        expire_count=5,
        expire_timestamp=1_000,
        log_expression="x={{x}}",
        stdout_enabled=True,
        log_level="DEBUG",
        webhook_ids=["wh-2", "wh-1"],
        from_api=True,
        predefined=True,
        probe_name="probe",
        application_filters=[ApplicationFilter(name="svc1", custom_tags={"region": "eu"})],
    )
    store.insert(config)

    assert store.get_by_workspace_and_id("W1", "lp1") == config
    by_id = store.get_by_id("lp1")
    assert by_id is not None
    assert by_id.webhook_ids == ["wh-2", "wh-1"]
    assert not hasattr(by_id, "application_filters")


def test_missing_log_point_is_none(store: SQLiteLogPointStore) -> None:
    assert store.get_by_workspace_and_id("W1", "nope") is None
    assert store.get_by_id("nope") is None


def test_get_is_scoped_to_workspace(store: SQLiteLogPointStore) -> None:
    store.insert(_config("lp1"))
    assert store.get_by_workspace_and_id("W2", "lp1") is None
    assert store.get_by_id("lp1") is not None


def test_duplicate_identity_is_rejected(store: SQLiteLogPointStore) -> None:
    store.insert(_config("lp1"))
    with pytest.raises(DuplicateLogPointError) as exc_info:
        store.insert(_config("lp2", log_expression="other"))

    assert (exc_info.value.file_name, exc_info.value.line_no, exc_info.value.client) == ("a.py", 10, "c1")
    # The first row is left untouched.
    assert store.get_by_workspace_and_id("W1", "lp1").log_expression is None
    assert store.get_by_id("lp2") is None

    store.insert(_config("lp3", client="c2"))
    store.insert(_config("lp4", workspace_id="W2"))


def test_update_only_touches_matching_owner(store: SQLiteLogPointStore) -> None:
    store.insert(_config("lp1"))
    fields = LogPointUpdate(log_expression="changed", webhook_ids=["wh-1"], probe_name="renamed")

    store.update("W1", "someone-else", "lp1", fields)
    assert store.get_by_id("lp1").log_expression is None

    store.update("W1", "u1", "lp1", fields)
    updated = store.get_by_id("lp1")
    assert updated.log_expression == "changed"
    assert updated.webhook_ids == ["wh-1"]
    assert updated.probe_name == "renamed"


def test_delete_many_returns_affected_count(store: SQLiteLogPointStore) -> None:
    for index in range(3):
        store.insert(_config(f"lp{index}", line_no=index))

    assert store.delete_many("W1", "u1", []) == 0
    assert store.delete_many("W1", "u1", ["lp0", "lp1", "missing"]) == 2
    assert store.get_by_id("lp2") is not None

    store.delete("W1", "u1", "lp2")
    assert store.get_by_id("lp2") is None


def test_list_is_ordered_and_filters_predefined(store: SQLiteLogPointStore) -> None:
    store.insert(_config("lp-b", file_name="b.py", line_no=1))
    store.insert(_config("lp-a2", file_name="a.py", line_no=20, predefined=True))
    store.insert(_config("lp-a1", file_name="a.py", line_no=3))
    store.insert(_config("lp-other", user_id="u2", line_no=4))

    listed = store.list_by_workspace_and_user("W1", "u1", predefined_only=False)
    assert [lp.id for lp in listed] == ["lp-a1", "lp-a2", "lp-b"]

    predefined = store.list_by_workspace_and_user("W1", "u1", predefined_only=True)
    assert [lp.id for lp in predefined] == ["lp-a2"]


def test_scan_applies_coarse_predicate(store: SQLiteLogPointStore) -> None:
    store.insert(_config("lp1", line_no=1))
    store.insert(_config("lp2", line_no=2))
    store.insert(_config("lp3", line_no=3, workspace_id="W2"))
    store.set_disabled("W1", "u1", "lp2", True)

    enabled = store.scan_by_workspace("W1", ProbeQueryFilter(workspace_id="W1"))
    assert [c.id for c in enabled] == ["lp1"]

    everything = store.scan_by_workspace("W1", ProbeQueryFilter(workspace_id="W1", exclude_disabled=False))
    assert [c.id for c in everything] == ["lp1", "lp2"]


def test_corrupt_filter_column_is_propagated(store: SQLiteLogPointStore, tmp_path) -> None:
    store.insert(_config("lp1"))
    with sqlite3.connect(str(tmp_path / "logpoints.db")) as conn:
        conn.execute("UPDATE log_points SET application_filters = ? WHERE id = ?", ("[{broken", "lp1"))

    with pytest.raises(CorruptFieldError):
        store.get_by_workspace_and_id("W1", "lp1")
    with pytest.raises(CorruptFieldError):
        store.scan_by_workspace("W1", ProbeQueryFilter(workspace_id="W1"))


def test_blank_list_columns_read_as_empty(store: SQLiteLogPointStore, tmp_path) -> None:
    store.insert(_config("lp1"))
    with sqlite3.connect(str(tmp_path / "logpoints.db")) as conn:
        conn.execute(
            "UPDATE log_points SET application_filters = NULL, webhook_ids = '' WHERE id = ?",
            ("lp1",),
        )

    config = store.get_by_workspace_and_id("W1", "lp1")
    assert config.application_filters == []
    assert config.webhook_ids == []


def test_not_null_violation_is_not_reported_as_duplicate(store: SQLiteLogPointStore) -> None:
    with pytest.raises(sqlite3.IntegrityError) as exc_info:
        store.insert(LogPointConfig(id="lp1", file_name="a.py", line_no=1, client="c1"))

    assert "NOT NULL" in str(exc_info.value)
    assert store.get_by_id("lp1") is None


def test_id_collision_is_reported_as_duplicate(store: SQLiteLogPointStore) -> None:
    store.insert(_config("lp1"))
    with pytest.raises(DuplicateLogPointError):
        store.insert(_config("lp1", line_no=99))
