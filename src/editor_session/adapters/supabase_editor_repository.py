"""Supabase-backed reader for images and their edits."""

import asyncio
from dataclasses import dataclass

from supabase import Client

from editor_session.domain.edits import EditRecord
from editor_session.domain.subjects import Subject
from editor_session.schemas import EditPayload, SubjectPayload
from editor_session.services.sessions import EditorApi

_IMAGE_COLUMNS = (
    "id, user_id, parent_image_id, original_url, current_url, file_name, created_at"
)
_EDIT_COLUMNS = "id, image_id, user_id, prompt, result_url, saved_image_id, created_at"


@dataclass
class SupabaseEditorRepository(EditorApi):
    """Supabase implementation of the editor API.

    The client is synchronous, so each query runs in a worker thread and the
    event loop stays free while it waits on the network.
    """

    client: Client

    async def fetch_subject(self, subject_id: int) -> Subject | None:
        """Return an image row by id, if present."""
        rows = await asyncio.to_thread(self._select_image, subject_id)
        if not rows:
            return None
        return SubjectPayload.model_validate(rows[0]).to_domain()

    async def fetch_edit_history(self, subject_id: int) -> list[EditRecord]:
        """Return edits for an image, newest first."""
        rows = await asyncio.to_thread(self._select_edits, subject_id)
        return [EditPayload.model_validate(row).to_domain() for row in rows]

    def _select_image(self, subject_id: int) -> list[dict[str, object]]:
        response = (
            self.client.table("images")
            .select(_IMAGE_COLUMNS)
            .eq("id", subject_id)
            .limit(1)
            .execute()
        )
        return response.data or []

    def _select_edits(self, subject_id: int) -> list[dict[str, object]]:
        response = (
            self.client.table("edits")
            .select(_EDIT_COLUMNS)
            .eq("image_id", subject_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []
