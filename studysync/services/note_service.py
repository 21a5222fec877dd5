import asyncio
import logging
from typing import List, Optional, Sequence
from uuid import UUID, uuid4

from ..db.db_client import AsyncPostgresClient, rows_affected, utc_now
from ..models.db_models import User, Note, NoteStatus, Attachment
from ..tools.file_storage import FileStorage, StorageError
from .exceptions import ServiceError, NotFoundError

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic for study notes and their attachments.

    Uploaded files are anything exposing `file`, `filename` and
    `content_type` (FastAPI's UploadFile does).
    """
    def __init__(self, db_client: AsyncPostgresClient, storage: FileStorage):
        self.db_client = db_client
        self.storage = storage

    async def _store_attachments(self, files: Optional[Sequence]) -> List[Attachment]:
        loop = asyncio.get_running_loop()
        attachments = []
        for upload in files or []:
            if not upload.filename:
                continue  # empty file inputs in a multipart form
            try:
                attachment = await loop.run_in_executor(
                    None, self.storage.save_attachment, upload.file, upload.filename, upload.content_type
                )
            except StorageError as e:
                self._discard(attachments)
                raise ServiceError(str(e)) from e
            attachments.append(attachment)
        return attachments

    def _discard(self, attachments: Sequence[Attachment]):
        for attachment in attachments:
            self.storage.delete(attachment.url)

    async def list_notes(self, owner: User) -> List[Note]:
        return await self.db_client.get_notes(owner.id)

    async def create_note(self, owner: User, title: str, subject: str = "", content: str = "",
                          status: NoteStatus = NoteStatus.PENDING, files: Optional[Sequence] = None) -> Note:
        if not title or not title.strip():
            raise ServiceError("Title is required")

        now = utc_now()
        note = Note(
            id=uuid4(),
            owner_id=owner.id,
            title=title.strip(),
            subject=subject.strip(),
            content=content,
            status=status,
            attachments=await self._store_attachments(files),
            created_at=now,
            updated_at=now
        )
        try:
            await self.db_client.add_note(note)
        except Exception:
            # keep disk and table in step
            self._discard(note.attachments)
            raise
        logger.info(f"Note {note.id} created by user {owner.id} with {len(note.attachments)} attachment(s).")
        return note

    async def update_note(self, owner: User, note_id: UUID, title: str, subject: str = "", content: str = "",
                          status: NoteStatus = NoteStatus.PENDING, files: Optional[Sequence] = None) -> Note:
        """Replaces the text fields; newly uploaded files are appended to the existing attachments."""
        if not title or not title.strip():
            raise ServiceError("Title is required")

        note = await self.db_client.get_note(note_id, owner.id)
        if not note:
            raise NotFoundError("Note not found")

        note.title = title.strip()
        note.subject = subject.strip()
        note.content = content
        note.status = status
        new_attachments = await self._store_attachments(files)
        note.attachments = note.attachments + new_attachments
        note.updated_at = utc_now()

        try:
            await self.db_client.update_note(note)
        except Exception:
            self._discard(new_attachments)
            raise
        logger.info(f"Note {note.id} updated by user {owner.id}.")
        return note

    async def delete_note(self, owner: User, note_id: UUID):
        note = await self.db_client.get_note(note_id, owner.id)
        if not note:
            raise NotFoundError("Note not found")

        status_msg = await self.db_client.delete_note(note_id, owner.id)
        if not rows_affected(status_msg):
            raise NotFoundError("Note not found")

        self._discard(note.attachments)
        logger.info(f"Note {note_id} deleted by user {owner.id}.")
