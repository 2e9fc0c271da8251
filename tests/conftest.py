"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from editor_session.adapters.local_storage import InMemoryLocalStorage
from editor_session.config import Settings
from editor_session.domain.edits import CachedEditRecord, EditRecord
from editor_session.domain.subjects import Subject
from editor_session.services.session_cache import SessionCacheStore
from editor_session.services.sessions import EditorApi, Notifier, SessionController


def make_subject(subject_id: int) -> Subject:
    return Subject(
        id=subject_id,
        original_url=f"/objects/uploads/{subject_id}-original.png",
        current_url=f"/objects/uploads/{subject_id}-current.png",
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
        user_id="user-1",
        file_name=f"photo-{subject_id}.png",
    )


def make_edit(edit_id: int, subject_id: int = 42, **overrides: object) -> EditRecord:
    values: dict[str, object] = {
        "id": edit_id,
        "image_id": subject_id,
        "user_id": "user-1",
        "prompt": f"Edit number {edit_id}",
        "result_url": f"/objects/edits/{edit_id}.png",
        "saved_image_id": None,
        "created_at": datetime(2024, 5, 1, 12, edit_id % 60, tzinfo=UTC),
    }
    values.update(overrides)
    return EditRecord(**values)  # type: ignore[arg-type]


def make_cached_edit(edit_id: int, subject_id: int = 42) -> CachedEditRecord:
    return CachedEditRecord.from_edit(make_edit(edit_id, subject_id))


@dataclass
class FakeEditorApi(EditorApi):
    """Editor API fake whose fetches can be held open with a gate."""

    subjects: dict[int, Subject] = field(default_factory=dict)
    histories: dict[int, list[EditRecord]] = field(default_factory=dict)
    subject_calls: list[int] = field(default_factory=list)
    history_calls: list[int] = field(default_factory=list)
    gate: asyncio.Event | None = None
    fail_subject: bool = False
    fail_history: bool = False

    async def fetch_subject(self, subject_id: int) -> Subject | None:
        self.subject_calls.append(subject_id)
        await self._wait()
        if self.fail_subject:
            raise RuntimeError("subject fetch failed")
        return self.subjects.get(subject_id)

    async def fetch_edit_history(self, subject_id: int) -> list[EditRecord]:
        self.history_calls.append(subject_id)
        await self._wait()
        if self.fail_history:
            raise RuntimeError("history fetch failed")
        return list(self.histories.get(subject_id, []))

    async def _wait(self) -> None:
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()


@dataclass
class RecordingNotifier(Notifier):
    """Notifier that keeps every notification."""

    notifications: list[tuple[str, str, str]] = field(default_factory=list)

    def notify(self, title: str, description: str, *, variant: str = "default") -> None:
        self.notifications.append((title, description, variant))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        editor_api_base_url="https://editor.test",
        draft_debounce_seconds=0.01,
    )


@pytest.fixture
def storage() -> InMemoryLocalStorage:
    return InMemoryLocalStorage()


@pytest.fixture
def cache_store(storage: InMemoryLocalStorage) -> SessionCacheStore:
    return SessionCacheStore(storage)


@pytest.fixture
def editor_api() -> FakeEditorApi:
    return FakeEditorApi()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def controller(
    cache_store: SessionCacheStore,
    editor_api: FakeEditorApi,
    notifier: RecordingNotifier,
) -> SessionController:
    return SessionController(
        cache_store=cache_store,
        editor_api=editor_api,
        notifier=notifier,
        debounce_delay_seconds=0.01,
    )
