"""Per-subject session snapshots over local key-value storage."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from editor_session.domain.edits import CachedEditRecord
from editor_session.domain.sessions import SessionSnapshot
from editor_session.domain.subjects import NO_ACTIVE_SUBJECT
from editor_session.errors import StorageError
from editor_session.schemas import SessionSnapshotPayload

DEFAULT_KEY_PREFIX = "photo_editor_state_"
DEFAULT_LAST_ACTIVE_KEY = "photo_editor_last_active_image"

_logger = logging.getLogger(__name__)


class LocalStorage(Protocol):
    """Synchronous string key-value storage with a capacity limit."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value, raising StorageQuotaExceededError when full."""

    def remove_item(self, key: str) -> None:
        """Delete a value; no error if it is absent."""

    def keys(self) -> list[str]:
        """Return every stored key."""


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class SessionCacheStore:
    """Cache of in-progress editing sessions keyed by subject id.

    Failures never propagate: writes report ``False`` and reads of missing or
    corrupt entries return ``None``.
    """

    storage: LocalStorage
    key_prefix: str = DEFAULT_KEY_PREFIX
    last_active_key: str = DEFAULT_LAST_ACTIVE_KEY
    clock: Callable[[], int] = field(default=_now_ms, repr=False)

    def key_for(self, subject_id: int) -> str:
        return f"{self.key_prefix}{subject_id}"

    def save(  # noqa: PLR0913
        self,
        subject_id: int,
        *,
        edits: list[CachedEditRecord] | None = None,
        current_base_edit_id: int | None = None,
        draft_prompt: str | None = None,
        overwrite_last_save: bool | None = None,
    ) -> bool:
        """Write a snapshot, filling omitted fields with defaults."""
        key = self.key_for(subject_id)
        snapshot = SessionSnapshot(
            subject_id=subject_id,
            edits=list(edits or []),
            current_base_edit_id=current_base_edit_id,
            draft_prompt=draft_prompt or "",
            overwrite_last_save=bool(overwrite_last_save),
            last_updated=self.clock(),
        )
        try:
            raw = SessionSnapshotPayload.from_domain(snapshot).model_dump_json(
                by_alias=True
            )
            self.storage.set_item(key, raw)
        except (StorageError, ValueError, TypeError) as exc:
            _logger.warning("Session cache save failed: key=%s error=%s", key, exc)
            return False
        _logger.debug("Session cache saved: key=%s edits=%s", key, len(snapshot.edits))
        return True

    def load(self, subject_id: int) -> SessionSnapshot | None:
        """Return the cached snapshot for a subject, if present and readable."""
        key = self.key_for(subject_id)
        try:
            raw = self.storage.get_item(key)
        except StorageError as exc:
            _logger.warning("Session cache read failed: key=%s error=%s", key, exc)
            return None
        if raw is None:
            _logger.debug("Session cache miss: key=%s", key)
            return None
        try:
            payload = SessionSnapshotPayload.model_validate_json(raw)
        except ValidationError as exc:
            _logger.warning(
                "Ignoring corrupt session cache entry: key=%s errors=%s",
                key,
                exc.error_count(),
            )
            return None
        return payload.to_domain()

    def clear(self, subject_id: int) -> bool:
        """Delete the snapshot for a subject."""
        key = self.key_for(subject_id)
        try:
            self.storage.remove_item(key)
        except StorageError as exc:
            _logger.warning("Session cache clear failed: key=%s error=%s", key, exc)
            return False
        _logger.info("Session cache cleared: key=%s", key)
        return True

    def clear_all(self) -> bool:
        """Delete every snapshot owned by this cache."""
        try:
            keys = [key for key in self.storage.keys() if self._owns(key)]
            for key in keys:
                self.storage.remove_item(key)
        except StorageError as exc:
            _logger.warning("Session cache clear_all failed: %s", exc)
            return False
        _logger.info("Session cache cleared all entries: count=%s", len(keys))
        return True

    def subject_ids(self) -> list[int]:
        """Return ids of subjects that have a cached snapshot."""
        try:
            keys = self.storage.keys()
        except StorageError as exc:
            _logger.warning("Session cache key listing failed: %s", exc)
            return []
        ids: list[int] = []
        for key in keys:
            if not self._owns(key):
                continue
            suffix = key[len(self.key_prefix) :]
            if suffix.isdigit():
                ids.append(int(suffix))
        return sorted(ids)

    def prune_stale(self, max_age_seconds: float) -> int:
        """Delete snapshots older than ``max_age_seconds`` and corrupt entries."""
        cutoff = self.clock() - int(max_age_seconds * 1000)
        removed = 0
        for subject_id in self.subject_ids():
            snapshot = self.load(subject_id)
            if snapshot is not None and snapshot.last_updated >= cutoff:
                continue
            if self.clear(subject_id):
                removed += 1
        return removed

    def get_last_active_subject_id(self) -> int | None:
        """Return the last active subject id.

        ``None`` means the pointer was never set (or is unreadable);
        ``NO_ACTIVE_SUBJECT`` means it was cleared explicitly.
        """
        try:
            raw = self.storage.get_item(self.last_active_key)
        except StorageError as exc:
            _logger.warning("Last active pointer read failed: %s", exc)
            return None
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            _logger.warning("Ignoring unparsable last active pointer: %r", raw)
            return None

    def set_last_active_subject_id(self, subject_id: int) -> bool:
        """Record which subject should be restored on next startup."""
        try:
            self.storage.set_item(self.last_active_key, str(subject_id))
        except StorageError as exc:
            _logger.warning("Last active pointer write failed: %s", exc)
            return False
        return True

    def clear_last_active_subject_id(self) -> bool:
        """Mark that no session should be restored on next startup."""
        return self.set_last_active_subject_id(NO_ACTIVE_SUBJECT)

    def _owns(self, key: str) -> bool:
        return key.startswith(self.key_prefix) and key != self.last_active_key
