import asyncio
import logging
from typing import List, Optional
from uuid import UUID, uuid4

from ..db.db_client import AsyncPostgresClient, rows_affected, utc_now
from ..models.db_models import User, Role, Paper, PaperFile, Term
from ..modules.paper_filter import filter_papers
from ..tools.file_storage import FileStorage, StorageError
from .exceptions import ServiceError, NotFoundError, AuthorizationError

logger = logging.getLogger(__name__)


def _verify_admin(user: User):
    if user.role != Role.ADMIN:
        logger.warning(f"User {user.id} tried an admin-only paper operation.")
        raise AuthorizationError("Only admins can manage papers.")


class PaperService:
    """
    Previous-year papers: listing with filters, admin upload and delete.
    """
    def __init__(self, db_client: AsyncPostgresClient, storage: FileStorage):
        self.db_client = db_client
        self.storage = storage

    async def list_papers(self, year: Optional[str] = None, semester: Optional[str] = None,
                          term: Optional[str] = None, subject: Optional[str] = None) -> List[Paper]:
        papers = await self.db_client.get_papers()
        return filter_papers(papers, year=year, semester=semester, term=term, subject=subject)

    async def upload_paper(self, user: User, subject: str, year: int, semester: int, term: Term, file_base64: str) -> Paper:
        _verify_admin(user)
        if not subject or not subject.strip():
            raise ServiceError("Subject is required")

        try:
            url = await asyncio.get_running_loop().run_in_executor(None, self.storage.save_base64_pdf, file_base64)
        except StorageError as e:
            raise ServiceError(str(e)) from e

        paper = Paper(
            id=uuid4(),
            subject=subject.strip(),
            year=year,
            semester=semester,
            term=term,
            file=PaperFile(url=url),
            uploaded_by=user.id,
            created_at=utc_now()
        )
        try:
            await self.db_client.add_paper(paper)
        except Exception:
            # keep disk and table in step
            self.storage.delete(url)
            raise
        logger.info(f"Paper {paper.id} ({paper.subject} {paper.year} sem {paper.semester} {paper.term.value}) uploaded by {user.id}.")
        return paper

    async def delete_paper(self, user: User, paper_id: UUID):
        _verify_admin(user)
        paper = await self.db_client.get_paper(paper_id)
        if not paper:
            raise NotFoundError("Paper not found")

        status_msg = await self.db_client.delete_paper(paper_id)
        if not rows_affected(status_msg):
            raise NotFoundError("Paper not found")

        self.storage.delete(paper.file.url)
        logger.info(f"Paper {paper_id} deleted by {user.id}.")
