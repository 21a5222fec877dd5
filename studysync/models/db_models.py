# studysync/models/db_models.py

from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class NoteStatus(str, Enum):
    PENDING = "Pending"
    UNDERSTOOD = "Understood"
    REVISIT = "Revisit"


class Term(str, Enum):
    MID_SEM = "MidSem"
    END_SEM = "EndSem"


class MarkStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    UNDO = "Undo"


class User(BaseModel):
    """
    Represents an account, mapping to the 'users' table.
    """
    id: UUID = Field(..., description="Primary key")
    full_name: str
    email: str = Field(..., description="Unique, stored lower-cased")
    password_hash: str
    role: Role = Role.USER


class Attachment(BaseModel):
    """A stored note attachment. `format` is inferred from the uploaded file."""
    format: str
    url: str


class Note(BaseModel):
    """
    Represents a study note, mapping to the 'notes' table.
    Attachments are kept as a JSONB list on the row.
    """
    id: UUID
    owner_id: UUID = Field(..., description="FK to the user who created the note")
    title: str
    content: str = ""
    subject: str = ""
    status: NoteStatus = NoteStatus.PENDING
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PaperFile(BaseModel):
    url: str


class Paper(BaseModel):
    """
    Represents a previous-year exam paper, mapping to the 'papers' table.
    """
    id: UUID
    subject: str
    year: int
    semester: int
    term: Term
    file: PaperFile
    uploaded_by: Optional[UUID] = None
    created_at: datetime


class HistoryEntry(BaseModel):
    status: MarkStatus
    timestamp: datetime


class Subject(BaseModel):
    """
    Represents an attendance counter for one subject, mapping to the 'subjects' table.
    The history is an ordered JSONB list, oldest entry first.
    """
    id: UUID
    owner_id: UUID
    subject: str
    attended_classes: int = 0
    total_classes: int = 0
    history: List[HistoryEntry] = Field(default_factory=list)
