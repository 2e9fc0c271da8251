"""Pydantic models for cached snapshots and editor API payloads."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from editor_session.domain.edits import CachedEditRecord, EditRecord
from editor_session.domain.sessions import SessionSnapshot
from editor_session.domain.subjects import Subject


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CachedEditPayload(_CamelModel):
    """Serialized form of a session edit."""

    id: int
    result_url: str
    prompt: str
    created_at: datetime | None = None
    is_saved: bool = False
    user_id: str
    image_id: int
    saved_image_id: int | None = None

    @classmethod
    def from_domain(cls, edit: CachedEditRecord) -> "CachedEditPayload":
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

    def to_domain(self) -> CachedEditRecord:
        return CachedEditRecord(
            id=self.id,
            result_url=self.result_url,
            prompt=self.prompt,
            created_at=self.created_at,
            is_saved=self.is_saved,
            user_id=self.user_id,
            image_id=self.image_id,
            saved_image_id=self.saved_image_id,
        )


class SessionSnapshotPayload(_CamelModel):
    """Serialized form of a session snapshot stored under one cache key."""

    subject_id: int
    edits: list[CachedEditPayload] = Field(default_factory=list)
    current_base_edit_id: int | None = None
    draft_prompt: str = ""
    overwrite_last_save: bool = False
    last_updated: int

    @classmethod
    def from_domain(cls, snapshot: SessionSnapshot) -> "SessionSnapshotPayload":
        return cls(
            subject_id=snapshot.subject_id,
            edits=[CachedEditPayload.from_domain(edit) for edit in snapshot.edits],
            current_base_edit_id=snapshot.current_base_edit_id,
            draft_prompt=snapshot.draft_prompt,
            overwrite_last_save=snapshot.overwrite_last_save,
            last_updated=snapshot.last_updated,
        )

    def to_domain(self) -> SessionSnapshot:
        return SessionSnapshot(
            subject_id=self.subject_id,
            edits=[edit.to_domain() for edit in self.edits],
            current_base_edit_id=self.current_base_edit_id,
            draft_prompt=self.draft_prompt,
            overwrite_last_save=self.overwrite_last_save,
            last_updated=self.last_updated,
        )


class SubjectPayload(_CamelModel):
    """Image payload returned by the editor API."""

    id: int
    user_id: str | None = None
    parent_image_id: int | None = None
    original_url: str
    current_url: str
    file_name: str | None = None
    created_at: datetime | None = None

    def to_domain(self) -> Subject:
        return Subject(
            id=self.id,
            original_url=self.original_url,
            current_url=self.current_url,
            created_at=self.created_at,
            user_id=self.user_id,
            file_name=self.file_name,
            parent_image_id=self.parent_image_id,
        )


class EditPayload(_CamelModel):
    """Edit payload returned by the editor API."""

    id: int
    image_id: int
    user_id: str
    prompt: str
    result_url: str
    saved_image_id: int | None = None
    created_at: datetime | None = None

    def to_domain(self) -> EditRecord:
        return EditRecord(
            id=self.id,
            image_id=self.image_id,
            user_id=self.user_id,
            prompt=self.prompt,
            result_url=self.result_url,
            saved_image_id=self.saved_image_id,
            created_at=self.created_at,
        )
