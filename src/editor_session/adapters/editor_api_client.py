"""HTTP client for the photo editor REST API."""

from dataclasses import dataclass

import httpx

from editor_session.domain.edits import EditRecord
from editor_session.domain.subjects import Subject
from editor_session.schemas import EditPayload, SubjectPayload
from editor_session.services.sessions import EditorApi


@dataclass
class HttpxEditorApiClient(EditorApi):
    """HTTPX-backed editor API client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, base_url: str, token: str | None = None, timeout_seconds: float = 15
    ) -> "HttpxEditorApiClient":
        """Create a client with a managed httpx session."""
        headers = {"Authorization": f"Bearer {token}"} if token else None
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(headers=headers),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_subject(self, subject_id: int) -> Subject | None:
        """Fetch an uploaded image; None when the server returns 404."""
        response = await self.http_client.get(
            f"{self.base_url}/api/images/{subject_id}",
            timeout=self.timeout_seconds,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return SubjectPayload.model_validate(response.json()).to_domain()

    async def fetch_edit_history(self, subject_id: int) -> list[EditRecord]:
        """Fetch the edits made against an image, newest first."""
        response = await self.http_client.get(
            f"{self.base_url}/api/images/{subject_id}/edits",
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return [
            EditPayload.model_validate(item).to_domain() for item in response.json()
        ]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
