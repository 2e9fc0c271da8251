"""Editing session controller: restore, mutate and persist session state."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from editor_session.domain.edits import CachedEditRecord, EditRecord
from editor_session.domain.sessions import (
    RestoreState,
    SessionSnapshot,
    SessionState,
)
from editor_session.domain.subjects import Subject
from editor_session.errors import NoActiveSubjectError, UnknownEditError
from editor_session.services.debounce import Debouncer
from editor_session.services.session_cache import SessionCacheStore

_logger = logging.getLogger(__name__)


class EditorApi(Protocol):
    """Remote source of truth for subjects and their edit history."""

    async def fetch_subject(self, subject_id: int) -> Subject | None:
        """Return the subject, or None if the server does not know it."""

    async def fetch_edit_history(self, subject_id: int) -> list[EditRecord]:
        """Return the subject's edits, newest first."""


class Notifier(Protocol):
    """Sink for user-visible notifications."""

    def notify(self, title: str, description: str, *, variant: str = "default") -> None:
        """Show a notification to the user."""


@dataclass
class SessionController:
    """Owns the active editing session and decides when to persist it.

    Structural changes (new edits, base selection, overwrite preference) are
    written immediately; draft prompt changes go through a debounced writer.
    Every immediate write cancels a pending debounced one and writes the full
    in-memory state, so a late debounced write never reverts newer data.

    Startup restoration runs as an async sequence guarded by a generation
    token. ``activate_new_subject`` and ``reset`` bump the token; a sequence
    that sees a different token after a fetch drops its results without
    touching shared state.
    """

    cache_store: SessionCacheStore
    editor_api: EditorApi
    notifier: Notifier
    debounce_delay_seconds: float = 0.5
    _state: SessionState = field(default_factory=SessionState, init=False)
    _restore_state: RestoreState = field(default=RestoreState.IDLE, init=False)
    _generation: int = field(default=0, init=False)
    _draft_writer: Debouncer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._draft_writer = Debouncer(
            self._persist_state, delay_seconds=self.debounce_delay_seconds
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def restore_state(self) -> RestoreState:
        return self._restore_state

    @property
    def active_subject_id(self) -> int | None:
        return self._state.subject.id if self._state.subject else None

    def activate_new_subject(self, subject: Subject) -> None:
        """Make a freshly uploaded subject the active session."""
        if self._state.subject is not None and self._draft_writer.pending:
            self.flush_pending_writes()
        self._invalidate_restore()
        if not self.cache_store.set_last_active_subject_id(subject.id):
            _logger.warning("Could not record last active subject %s", subject.id)

        state = SessionState(subject=subject)
        cached = self.cache_store.load(subject.id)
        if cached is not None:
            _logger.info(
                "Merging cached session into new upload: subject=%s edits=%s",
                subject.id,
                len(cached.edits),
            )
            state.edits = list(cached.edits)
            state.current_base_edit_id = _resolve_base(
                cached.current_base_edit_id, state.edits
            )
            state.draft_prompt = cached.draft_prompt
            state.overwrite_last_save = cached.overwrite_last_save
        self._state = state

    async def restore_last_session(self) -> bool:
        """Restore the last active session after a reload.

        Returns True when a session was restored. Calls made while a restore
        is running, after one succeeded, or while a subject is active do
        nothing.
        """
        if (
            self._restore_state.in_flight
            or self._restore_state is RestoreState.ACTIVE
            or self._state.subject is not None
        ):
            return False
        subject_id = self.cache_store.get_last_active_subject_id()
        if not subject_id:
            return False

        self._generation += 1
        token = self._generation
        self._restore_state = RestoreState.FETCHING_SUBJECT
        _logger.info("Restoring session: subject=%s token=%s", subject_id, token)

        try:
            subject = await self.editor_api.fetch_subject(subject_id)
        except Exception as exc:
            return self._fail_restore(token, subject_id, exc)
        if token != self._generation:
            return self._discard_restore(token, subject_id)
        if subject is None:
            _logger.warning("Last active subject %s no longer exists", subject_id)
            self.cache_store.clear(subject_id)
            self.cache_store.clear_last_active_subject_id()
            return self._fail_restore(token, subject_id)

        self._restore_state = RestoreState.FETCHING_HISTORY
        try:
            history = await self.editor_api.fetch_edit_history(subject_id)
        except Exception as exc:
            return self._fail_restore(token, subject_id, exc)
        if token != self._generation:
            return self._discard_restore(token, subject_id)

        self._restore_state = RestoreState.MERGED
        self._state = merge_restored_session(
            subject, history, self.cache_store.load(subject_id)
        )
        self._persist_state()
        self.cache_store.set_last_active_subject_id(subject.id)
        self._restore_state = RestoreState.ACTIVE
        _logger.info(
            "Session restored: subject=%s edits=%s", subject.id, len(self._state.edits)
        )
        return True

    def record_new_edit(self, record: CachedEditRecord) -> None:
        """Add a freshly generated edit as the newest entry."""
        self._require_subject()
        self._state.edits.insert(0, record)
        self._write_now()

    def set_base(self, edit_id: int | None) -> None:
        """Choose the edit the next generation builds on; None means original."""
        self._require_subject()
        if edit_id is not None and self._state.find_edit(edit_id) is None:
            raise UnknownEditError(f"Edit {edit_id} is not part of this session")
        self._state.current_base_edit_id = edit_id
        self._write_now()

    def set_overwrite_preference(self, overwrite: bool) -> None:
        self._require_subject()
        self._state.overwrite_last_save = overwrite
        self._write_now()

    def set_draft_prompt(self, text: str) -> None:
        """Update the draft prompt; persisted after typing pauses."""
        self._require_subject()
        self._state.draft_prompt = text
        self._draft_writer()

    def mark_edit_saved(self, edit_id: int, saved_image_id: int) -> None:
        """Flag an edit as saved to the gallery under ``saved_image_id``."""
        self._require_subject()
        for index, edit in enumerate(self._state.edits):
            if edit.id == edit_id:
                self._state.edits[index] = edit.mark_saved(saved_image_id)
                self._write_now()
                return
        raise UnknownEditError(f"Edit {edit_id} is not part of this session")

    def flush_pending_writes(self) -> bool:
        """Cancel a pending draft write and persist the current state now."""
        self._draft_writer.cancel()
        if self._state.subject is None:
            return False
        return self._persist_state()

    def reset(self) -> None:
        """Discard the active session and everything cached for it."""
        self._invalidate_restore()
        self._draft_writer.cancel()
        if self._state.subject is not None:
            self.cache_store.clear(self._state.subject.id)
        self.cache_store.clear_last_active_subject_id()
        self._state = SessionState()

    def effective_base_url(self) -> str | None:
        """Locator of the image the next edit is derived from."""
        subject = self._state.subject
        if subject is None:
            return None
        base_id = self._state.current_base_edit_id
        if base_id is not None:
            edit = self._state.find_edit(base_id)
            if edit is not None:
                return edit.result_url
        return subject.current_url

    def _invalidate_restore(self) -> None:
        self._generation += 1
        if self._restore_state.in_flight:
            self._restore_state = RestoreState.CANCELLED

    def _discard_restore(self, token: int, subject_id: int) -> bool:
        _logger.info(
            "Discarding superseded restore: subject=%s token=%s current=%s",
            subject_id,
            token,
            self._generation,
        )
        return False

    def _fail_restore(
        self, token: int, subject_id: int, error: Exception | None = None
    ) -> bool:
        if token != self._generation:
            return self._discard_restore(token, subject_id)
        _logger.error(
            "Session restore failed: subject=%s error=%s",
            subject_id,
            error or "subject not found",
            exc_info=error,
        )
        self._restore_state = RestoreState.FAILED
        self._state = SessionState()
        self.notifier.notify(
            "Could not restore your session",
            "Upload the image again to keep editing.",
            variant="destructive",
        )
        return False

    def _require_subject(self) -> None:
        if self._state.subject is None:
            raise NoActiveSubjectError("No active editing session")

    def _write_now(self) -> bool:
        self._draft_writer.cancel()
        return self._persist_state()

    def _persist_state(self) -> bool:
        state = self._state
        if state.subject is None:
            return False
        saved = self.cache_store.save(
            state.subject.id,
            edits=state.edits,
            current_base_edit_id=state.current_base_edit_id,
            draft_prompt=state.draft_prompt,
            overwrite_last_save=state.overwrite_last_save,
        )
        if not saved:
            _logger.warning(
                "Session for subject %s kept in memory only", state.subject.id
            )
        return saved


def merge_restored_session(
    subject: Subject, history: list[EditRecord], cached: SessionSnapshot | None
) -> SessionState:
    """Combine remote edit history with cached UI fields.

    The remote history always provides the edits. Only the draft prompt, base
    selection and overwrite preference come from the cache, and a base that
    is missing from the history falls back to the original subject.
    """
    edits = [CachedEditRecord.from_edit(edit) for edit in history]
    if cached is None:
        return SessionState(subject=subject, edits=edits)
    return SessionState(
        subject=subject,
        edits=edits,
        current_base_edit_id=_resolve_base(cached.current_base_edit_id, edits),
        draft_prompt=cached.draft_prompt,
        overwrite_last_save=cached.overwrite_last_save,
    )


def _resolve_base(base_id: int | None, edits: list[CachedEditRecord]) -> int | None:
    if base_id is None:
        return None
    if any(edit.id == base_id for edit in edits):
        return base_id
    _logger.info("Cached base edit %s not in history; using original", base_id)
    return None
