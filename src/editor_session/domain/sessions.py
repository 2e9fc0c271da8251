"""Domain models for editing sessions."""

from dataclasses import dataclass, field
from enum import Enum

from editor_session.domain.edits import CachedEditRecord
from editor_session.domain.subjects import Subject


@dataclass(frozen=True)
class SessionSnapshot:
    """Persisted state of one subject's in-progress session."""

    subject_id: int
    edits: list[CachedEditRecord] = field(default_factory=list)
    current_base_edit_id: int | None = None
    draft_prompt: str = ""
    overwrite_last_save: bool = False
    last_updated: int = 0


@dataclass
class SessionState:
    """In-memory state of the active editing session."""

    subject: Subject | None = None
    edits: list[CachedEditRecord] = field(default_factory=list)
    current_base_edit_id: int | None = None
    draft_prompt: str = ""
    overwrite_last_save: bool = False

    def find_edit(self, edit_id: int) -> CachedEditRecord | None:
        """Return the edit with the given id, if it is part of the session."""
        for edit in self.edits:
            if edit.id == edit_id:
                return edit
        return None


class RestoreState(str, Enum):
    """Stages of the startup restore sequence."""

    IDLE = "idle"
    FETCHING_SUBJECT = "fetching_subject"
    FETCHING_HISTORY = "fetching_history"
    MERGED = "merged"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        return self in {
            RestoreState.FETCHING_SUBJECT,
            RestoreState.FETCHING_HISTORY,
            RestoreState.MERGED,
        }
