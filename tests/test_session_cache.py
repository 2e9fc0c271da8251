"""Tests for the session cache store."""

import json
import time

from editor_session.adapters.local_storage import InMemoryLocalStorage
from editor_session.domain.subjects import NO_ACTIVE_SUBJECT
from editor_session.services.session_cache import SessionCacheStore
from tests.conftest import make_cached_edit


def test_save_then_load_round_trips_fields(cache_store: SessionCacheStore) -> None:
    edits = [make_cached_edit(2), make_cached_edit(1)]
    before = int(time.time() * 1000)

    assert cache_store.save(
        42,
        edits=edits,
        current_base_edit_id=1,
        draft_prompt="add a rainbow",
        overwrite_last_save=True,
    )
    snapshot = cache_store.load(42)

    assert snapshot is not None
    assert snapshot.subject_id == 42
    assert snapshot.edits == edits
    assert snapshot.current_base_edit_id == 1
    assert snapshot.draft_prompt == "add a rainbow"
    assert snapshot.overwrite_last_save is True
    assert snapshot.last_updated >= before


def test_save_fills_defaults(cache_store: SessionCacheStore) -> None:
    assert cache_store.save(7)

    snapshot = cache_store.load(7)

    assert snapshot is not None
    assert snapshot.edits == []
    assert snapshot.current_base_edit_id is None
    assert snapshot.draft_prompt == ""
    assert snapshot.overwrite_last_save is False


def test_saved_entry_uses_camel_case_layout(
    storage: InMemoryLocalStorage, cache_store: SessionCacheStore
) -> None:
    cache_store.save(42, edits=[make_cached_edit(3)], draft_prompt="sky")

    raw = json.loads(storage.get_item("photo_editor_state_42") or "{}")

    assert set(raw) == {
        "subjectId",
        "edits",
        "currentBaseEditId",
        "draftPrompt",
        "overwriteLastSave",
        "lastUpdated",
    }
    assert raw["edits"][0]["resultUrl"] == "/objects/edits/3.png"
    assert raw["edits"][0]["isSaved"] is False


def test_load_missing_entry_returns_none(cache_store: SessionCacheStore) -> None:
    assert cache_store.load(99) is None


def test_load_corrupt_entry_returns_none(
    storage: InMemoryLocalStorage, cache_store: SessionCacheStore
) -> None:
    storage.set_item("photo_editor_state_5", "{not json")
    storage.set_item("photo_editor_state_6", json.dumps({"edits": "nope"}))

    assert cache_store.load(5) is None
    assert cache_store.load(6) is None


def test_save_reports_quota_failure() -> None:
    store = SessionCacheStore(InMemoryLocalStorage(capacity_bytes=64))

    assert store.save(42, edits=[make_cached_edit(1)]) is False
    assert store.load(42) is None


def test_clear_is_idempotent(cache_store: SessionCacheStore) -> None:
    cache_store.save(42)

    assert cache_store.clear(42)
    assert cache_store.load(42) is None
    assert cache_store.clear(42)


def test_clear_all_keeps_pointer_and_unrelated_keys(
    storage: InMemoryLocalStorage, cache_store: SessionCacheStore
) -> None:
    cache_store.save(1)
    cache_store.save(2)
    cache_store.set_last_active_subject_id(2)
    storage.set_item("theme", "dark")

    assert cache_store.clear_all()

    assert cache_store.load(1) is None
    assert cache_store.load(2) is None
    assert cache_store.get_last_active_subject_id() == 2
    assert storage.get_item("theme") == "dark"


def test_last_active_pointer_states(
    storage: InMemoryLocalStorage, cache_store: SessionCacheStore
) -> None:
    assert cache_store.get_last_active_subject_id() is None

    cache_store.set_last_active_subject_id(5)
    assert cache_store.get_last_active_subject_id() == 5

    cache_store.clear_last_active_subject_id()
    assert cache_store.get_last_active_subject_id() == NO_ACTIVE_SUBJECT

    storage.set_item("photo_editor_last_active_image", "garbage")
    assert cache_store.get_last_active_subject_id() is None


def test_subject_ids_and_prune_stale(storage: InMemoryLocalStorage) -> None:
    now = {"value": 1_000_000}
    store = SessionCacheStore(storage, clock=lambda: now["value"])
    store.save(1)
    now["value"] += 60_000
    store.save(2)
    storage.set_item("photo_editor_state_3", "corrupt")

    assert store.subject_ids() == [1, 2, 3]

    removed = store.prune_stale(max_age_seconds=30)

    assert removed == 2
    assert store.subject_ids() == [2]
