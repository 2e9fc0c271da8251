"""Domain models for generated edits."""

from dataclasses import dataclass, replace
from datetime import datetime

from editor_session.errors import EditAlreadySavedError


@dataclass(frozen=True)
class EditRecord:
    """Edit as reported by the remote edit history."""

    id: int
    image_id: int
    user_id: str
    prompt: str
    result_url: str
    saved_image_id: int | None = None
    created_at: datetime | None = None

    @property
    def is_saved(self) -> bool:
        return self.saved_image_id is not None


@dataclass(frozen=True)
class CachedEditRecord:
    """Edit held in an editing session and persisted with its snapshot."""

    id: int
    result_url: str
    prompt: str
    created_at: datetime | None
    is_saved: bool
    user_id: str
    image_id: int
    saved_image_id: int | None = None

    @classmethod
    def from_edit(cls, edit: EditRecord) -> "CachedEditRecord":
        """Build a session edit from a remote history entry."""
        return cls(
            id=edit.id,
            result_url=edit.result_url,
            prompt=edit.prompt,
            created_at=edit.created_at,
            is_saved=edit.is_saved,
            user_id=edit.user_id,
            image_id=edit.image_id,
            saved_image_id=edit.saved_image_id,
        )

    def mark_saved(self, saved_image_id: int) -> "CachedEditRecord":
        """Return a copy flagged as saved to the gallery.

        The saved flag and link move from unset to set exactly once.
        """
        if self.is_saved:
            raise EditAlreadySavedError(f"Edit {self.id} is already saved")
        return replace(self, is_saved=True, saved_image_id=saved_image_id)
