from fastapi import APIRouter, Depends, HTTPException, status, Request
from typing import Optional
from uuid import UUID

from ..services.paper_service import PaperService
from ..services.exceptions import ServiceError, NotFoundError, AuthorizationError
from ..models.db_models import User
from .schemas.paper import PaperUploadRequest, PaperResponse, PaperListResponse, PaperSavedResponse
from .schemas.common import MessageResponse
from .auth import get_current_user
from .dependencies import get_paper_service
from .utilities.limiter import limiter

router = APIRouter(prefix="/pypapers", tags=["Previous Year Papers"])


@router.get("", response_model=PaperListResponse, summary="List papers, optionally filtered")
@limiter.limit("120/minute")
async def list_papers(
    request: Request,
    year: Optional[str] = None,
    semester: Optional[str] = None,
    term: Optional[str] = None,
    subject: Optional[str] = None,
    user: User = Depends(get_current_user),
    service: PaperService = Depends(get_paper_service)
):
    papers = await service.list_papers(year=year, semester=semester, term=term, subject=subject)
    return PaperListResponse(papers=[PaperResponse.from_paper(p) for p in papers])


@router.post("/upload", response_model=PaperSavedResponse, status_code=status.HTTP_201_CREATED, summary="Upload a paper PDF (admin only)")
@limiter.limit("20/minute")
async def upload_paper(
    request: Request,
    upload_request: PaperUploadRequest,
    user: User = Depends(get_current_user),
    service: PaperService = Depends(get_paper_service)
):
    try:
        paper = await service.upload_paper(
            user,
            subject=upload_request.subject,
            year=upload_request.year,
            semester=upload_request.semester,
            term=upload_request.term,
            file_base64=upload_request.file_base64
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return PaperSavedResponse(paper=PaperResponse.from_paper(paper))


@router.delete("/{paper_id}", response_model=MessageResponse, summary="Delete a paper (admin only)")
@limiter.limit("20/minute")
async def delete_paper(request: Request, paper_id: UUID, user: User = Depends(get_current_user), service: PaperService = Depends(get_paper_service)):
    try:
        await service.delete_paper(user, paper_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return MessageResponse(message="Paper deleted")
