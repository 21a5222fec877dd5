import logging
from typing import List
from uuid import UUID, uuid4

from ..db.db_client import AsyncPostgresClient, rows_affected, utc_now
from ..models.db_models import User, Subject, HistoryEntry, MarkStatus
from ..modules.attendance_stats import last_undoable_mark
from .exceptions import ServiceError, NotFoundError

logger = logging.getLogger(__name__)


class AttendanceService:
    """
    Per-subject attendance counters with a status history.

    Present increments both counters, Absent only the total. Undo reverts
    the latest mark that is still standing and is itself logged in the
    history.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def _get_owned_subject(self, subject_id: UUID, owner: User) -> Subject:
        subject = await self.db_client.get_subject(subject_id, owner.id)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    async def list_subjects(self, owner: User) -> List[Subject]:
        return await self.db_client.get_subjects(owner.id)

    async def add_subject(self, owner: User, name: str) -> Subject:
        if not name or not name.strip():
            raise ServiceError("Enter a subject")

        subject = Subject(id=uuid4(), owner_id=owner.id, subject=name.strip())
        await self.db_client.add_subject(subject)
        logger.info(f"Subject '{subject.subject}' ({subject.id}) added for user {owner.id}.")
        return subject

    async def mark_attendance(self, owner: User, subject_id: UUID, status: MarkStatus) -> Subject:
        subject = await self._get_owned_subject(subject_id, owner)

        if status == MarkStatus.PRESENT:
            subject.total_classes += 1
            subject.attended_classes += 1
        elif status == MarkStatus.ABSENT:
            subject.total_classes += 1
        else:
            reverted = last_undoable_mark(subject.history)
            if reverted is None:
                raise ServiceError("Nothing to undo")
            subject.total_classes = max(subject.total_classes - 1, 0)
            if reverted == MarkStatus.PRESENT:
                subject.attended_classes = max(subject.attended_classes - 1, 0)

        subject.history.append(HistoryEntry(status=status, timestamp=utc_now()))
        await self.db_client.update_subject(subject)
        logger.info(f"Subject {subject.id} marked {status.value}: {subject.attended_classes}/{subject.total_classes}.")
        return subject

    async def edit_subject(self, owner: User, subject_id: UUID, name: str) -> Subject:
        if not name or not name.strip():
            raise ServiceError("Enter a subject")

        subject = await self._get_owned_subject(subject_id, owner)
        subject.subject = name.strip()
        await self.db_client.update_subject(subject)
        logger.info(f"Subject {subject.id} renamed to '{subject.subject}'.")
        return subject

    async def delete_subject(self, owner: User, subject_id: UUID):
        status_msg = await self.db_client.delete_subject(subject_id, owner.id)
        if not rows_affected(status_msg):
            raise NotFoundError("Subject not found")
        logger.info(f"Subject {subject_id} deleted for user {owner.id}.")
