from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import Field

from ...models.db_models import MarkStatus, Subject
from ...modules.attendance_stats import attendance_percentage, recent_history
from .common import ApiModel


class AddSubjectRequest(ApiModel):
    subject: str


class EditSubjectRequest(ApiModel):
    subject: str


class MarkAttendanceRequest(ApiModel):
    status: MarkStatus


class HistoryEntryResponse(ApiModel):
    status: MarkStatus
    timestamp: datetime


class SubjectResponse(ApiModel):
    """
    A subject with its counters and full history, plus the derived
    `percentage` and `recentHistory` fields, which are never stored.
    """
    id: UUID = Field(..., alias="_id")
    subject: str
    attended_classes: int
    total_classes: int
    history: List[HistoryEntryResponse] = Field(default_factory=list)
    percentage: int = 0
    recent_history: List[HistoryEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_subject(cls, subject: Subject) -> "SubjectResponse":
        history = [HistoryEntryResponse(**h.model_dump()) for h in subject.history]
        return cls(
            id=subject.id,
            subject=subject.subject,
            attended_classes=subject.attended_classes,
            total_classes=subject.total_classes,
            history=history,
            percentage=attendance_percentage(subject.attended_classes, subject.total_classes),
            recent_history=recent_history(history)
        )


class SubjectListResponse(ApiModel):
    success: bool = True
    data: List[SubjectResponse]


class SubjectSavedResponse(ApiModel):
    success: bool = True
    data: SubjectResponse
