from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import Field

from ...models.db_models import Note, NoteStatus
from .common import ApiModel


class AttachmentResponse(ApiModel):
    format: str
    url: str


class NoteResponse(ApiModel):
    id: UUID = Field(..., alias="_id")
    title: str
    content: str
    subject: str
    status: NoteStatus
    attachments: List[AttachmentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_note(cls, note: Note) -> "NoteResponse":
        return cls(**note.model_dump(exclude={"owner_id"}))


class NoteListResponse(ApiModel):
    success: bool = True
    notes: List[NoteResponse]


class NoteSavedResponse(ApiModel):
    success: bool = True
    note: NoteResponse
