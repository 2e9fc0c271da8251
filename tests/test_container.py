"""Tests for container wiring."""

import asyncio

from editor_session.adapters.editor_api_client import HttpxEditorApiClient
from editor_session.adapters.local_storage import (
    InMemoryLocalStorage,
    SqliteLocalStorage,
)
from editor_session.config import Settings
from editor_session.containers import build_container


def test_build_container_creates_controller(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.storage, InMemoryLocalStorage)
    assert isinstance(container.editor_api, HttpxEditorApiClient)
    assert container.session_controller.cache_store is container.cache_store
    asyncio.run(container.close_resources())


def test_build_container_uses_sqlite_when_path_set(tmp_path) -> None:
    settings = Settings(_env_file=None, cache_db_path=str(tmp_path / "editor.db"))
    container = build_container(settings)

    assert isinstance(container.storage, SqliteLocalStorage)
    container.cache_store.set_last_active_subject_id(3)
    asyncio.run(container.close_resources())

    reopened = build_container(settings)
    assert reopened.cache_store.get_last_active_subject_id() == 3
    asyncio.run(reopened.close_resources())
