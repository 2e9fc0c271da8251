"""Dependency container wiring for the editor session."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from editor_session.adapters.editor_api_client import HttpxEditorApiClient
from editor_session.adapters.local_storage import (
    InMemoryLocalStorage,
    SqliteLocalStorage,
)
from editor_session.adapters.supabase_editor_repository import (
    SupabaseEditorRepository,
)
from editor_session.app_logging import configure_logging
from editor_session.config import Settings
from editor_session.services.notifications import LoggingNotifier
from editor_session.services.session_cache import LocalStorage, SessionCacheStore
from editor_session.services.sessions import EditorApi, Notifier, SessionController


@dataclass
class AppContainer:
    """Holds session-wide dependencies."""

    settings: Settings
    storage: LocalStorage
    cache_store: SessionCacheStore
    editor_api: EditorApi
    notifier: Notifier
    session_controller: SessionController
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, notifier: Notifier | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    resolved_notifier = notifier or LoggingNotifier()

    storage: LocalStorage
    if resolved_settings.cache_db_path:
        storage = SqliteLocalStorage(
            resolved_settings.cache_db_path,
            capacity_bytes=resolved_settings.cache_capacity_bytes,
        )
    else:
        storage = InMemoryLocalStorage(
            capacity_bytes=resolved_settings.cache_capacity_bytes
        )
    cache_store = SessionCacheStore(
        storage,
        key_prefix=resolved_settings.cache_key_prefix,
        last_active_key=resolved_settings.last_active_key,
    )

    http_client: HttpxEditorApiClient | None = None
    editor_api: EditorApi
    if resolved_settings.uses_supabase:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        editor_api = SupabaseEditorRepository(supabase_client)
    else:
        http_client = HttpxEditorApiClient.create(
            resolved_settings.editor_api_base_url,
            token=resolved_settings.editor_api_token,
            timeout_seconds=resolved_settings.editor_api_timeout_seconds,
        )
        editor_api = http_client

    session_controller = SessionController(
        cache_store=cache_store,
        editor_api=editor_api,
        notifier=resolved_notifier,
        debounce_delay_seconds=resolved_settings.draft_debounce_seconds,
    )

    async def close_resources() -> None:
        session_controller.flush_pending_writes()
        if http_client is not None:
            await http_client.close()
        if isinstance(storage, SqliteLocalStorage):
            storage.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        cache_store=cache_store,
        editor_api=editor_api,
        notifier=resolved_notifier,
        session_controller=session_controller,
        close_resources=close_resources,
    )
