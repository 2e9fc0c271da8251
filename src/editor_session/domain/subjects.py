"""Domain models for edit subjects (uploaded base images)."""

from dataclasses import dataclass
from datetime import datetime

NO_ACTIVE_SUBJECT = 0


@dataclass(frozen=True)
class Subject:
    """Represents an uploaded image that edits are built on."""

    id: int
    original_url: str
    current_url: str
    created_at: datetime | None = None
    user_id: str | None = None
    file_name: str | None = None
    parent_image_id: int | None = None
