import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from ..config.config import settings
from ..api.schemas.user import UserResponse
from ..models.db_models import Role
from ..api.schemas.note import NoteResponse
from ..api.schemas.paper import PaperResponse
from ..api.schemas.attendance import SubjectResponse
from ..modules.paper_filter import filter_papers
from ..modules.attendance_stats import attendance_percentage, recent_history

logger = logging.getLogger(__name__)

__all__ = [
    "ApiError",
    "StudySyncClient",
    "filter_papers",
    "attendance_percentage",
    "recent_history",
]

# (filename, bytes, content type) as accepted by httpx multipart uploads
UploadTuple = Tuple[str, bytes, str]


class ApiError(Exception):
    """A failed API call; `message` is what the server said went wrong."""
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class StudySyncClient:
    """
    Async client for the StudySync REST API.

    Keeps the token and user returned by signup/login and sends the token in
    the custom `token` header on every call. Every mutation re-fetches and
    returns the full list, so callers always render fresh server state.
    """
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 http_client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self._http = http_client or httpx.AsyncClient(base_url=base_url or settings.BACKEND_URL, timeout=timeout)
        self.token: Optional[str] = token
        self.user: Optional[UserResponse] = None

    async def __aenter__(self) -> "StudySyncClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == Role.ADMIN

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["token"] = self.token
        response = await self._http.request(method, url, headers=headers, **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or body.get("success") is False:
            message = body.get("message") or response.reason_phrase or "Server error"
            logger.warning(f"{method} {url} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message)
        return body

    # ===== Auth =====

    def _store_session(self, body: Dict[str, Any]) -> UserResponse:
        self.token = body["token"]
        self.user = UserResponse.model_validate(body["user"])
        return self.user

    async def signup(self, full_name: str, email: str, password: str) -> UserResponse:
        body = await self._request("POST", "/api/auth/signup", json={"fullName": full_name, "email": email, "password": password})
        return self._store_session(body)

    async def login(self, email: str, password: str) -> UserResponse:
        body = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        return self._store_session(body)

    def logout(self):
        self.token = None
        self.user = None

    # ===== Notes =====

    async def list_notes(self) -> List[NoteResponse]:
        body = await self._request("GET", "/api/notes")
        return [NoteResponse.model_validate(n) for n in body.get("notes", [])]

    def _note_form(self, title: str, subject: str, content: str, status: str) -> Dict[str, str]:
        return {"title": title, "subject": subject, "content": content, "status": status}

    async def add_note(self, title: str, subject: str = "", content: str = "", status: str = "Pending",
                       attachments: Sequence[UploadTuple] = ()) -> List[NoteResponse]:
        files = [("attachments", f) for f in attachments]
        await self._request("POST", "/api/notes/add", data=self._note_form(title, subject, content, status), files=files or None)
        return await self.list_notes()

    async def update_note(self, note_id: str, title: str, subject: str = "", content: str = "", status: str = "Pending",
                          attachments: Sequence[UploadTuple] = ()) -> List[NoteResponse]:
        files = [("attachments", f) for f in attachments]
        await self._request("PUT", f"/api/notes/{note_id}", data=self._note_form(title, subject, content, status), files=files or None)
        return await self.list_notes()

    async def delete_note(self, note_id: str) -> List[NoteResponse]:
        await self._request("DELETE", f"/api/notes/{note_id}")
        return await self.list_notes()

    # ===== Papers =====

    async def list_papers(self) -> List[PaperResponse]:
        body = await self._request("GET", "/api/pypapers")
        return [PaperResponse.model_validate(p) for p in body.get("papers", [])]

    async def upload_paper(self, subject: str, year: int, semester: int, term: str, file_base64: str) -> List[PaperResponse]:
        payload = {"subject": subject, "year": year, "semester": semester, "term": term, "fileBase64": file_base64}
        await self._request("POST", "/api/pypapers/upload", json=payload)
        return await self.list_papers()

    async def delete_paper(self, paper_id: str) -> List[PaperResponse]:
        await self._request("DELETE", f"/api/pypapers/{paper_id}")
        return await self.list_papers()

    # ===== Attendance =====

    async def list_subjects(self) -> List[SubjectResponse]:
        body = await self._request("GET", "/api/attendance")
        return [SubjectResponse.model_validate(s) for s in body.get("data", [])]

    async def add_subject(self, name: str) -> List[SubjectResponse]:
        if not name.strip():
            raise ApiError(400, "Enter a subject")
        await self._request("POST", "/api/attendance/add-subject", json={"subject": name})
        return await self.list_subjects()

    async def mark_attendance(self, subject_id: str, status: str) -> List[SubjectResponse]:
        await self._request("PATCH", f"/api/attendance/mark/{subject_id}", json={"status": status})
        return await self.list_subjects()

    async def edit_subject(self, subject_id: str, name: str) -> List[SubjectResponse]:
        await self._request("PATCH", f"/api/attendance/edit/{subject_id}", json={"subject": name})
        return await self.list_subjects()

    async def delete_subject(self, subject_id: str) -> List[SubjectResponse]:
        await self._request("DELETE", f"/api/attendance/{subject_id}")
        return await self.list_subjects()
