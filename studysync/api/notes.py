from fastapi import APIRouter, Depends, HTTPException, status, Request, Form, File, UploadFile
from typing import List, Optional
from uuid import UUID

from ..services.note_service import NoteService
from ..services.exceptions import ServiceError, NotFoundError
from ..models.db_models import User, NoteStatus
from .schemas.note import NoteResponse, NoteListResponse, NoteSavedResponse
from .schemas.common import MessageResponse
from .auth import get_current_user
from .dependencies import get_note_service
from .utilities.limiter import limiter

router = APIRouter(prefix="/notes", tags=["Notes"])


def _raise_for(e: ServiceError):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=NoteListResponse, summary="List the caller's notes")
@limiter.limit("120/minute")
async def list_notes(request: Request, user: User = Depends(get_current_user), service: NoteService = Depends(get_note_service)):
    notes = await service.list_notes(user)
    return NoteListResponse(notes=[NoteResponse.from_note(n) for n in notes])


@router.post("/add", response_model=NoteSavedResponse, status_code=status.HTTP_201_CREATED, summary="Create a note with optional attachments")
@limiter.limit("60/minute")
async def add_note(
    request: Request,
    title: str = Form(...),
    subject: str = Form(""),
    content: str = Form(""),
    status_: NoteStatus = Form(NoteStatus.PENDING, alias="status"),
    attachments: Optional[List[UploadFile]] = File(None),
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service)
):
    try:
        note = await service.create_note(user, title=title, subject=subject, content=content, status=status_, files=attachments)
    except ServiceError as e:
        _raise_for(e)
    return NoteSavedResponse(note=NoteResponse.from_note(note))


@router.put("/{note_id}", response_model=NoteSavedResponse, summary="Update a note; new attachments are appended")
@limiter.limit("60/minute")
async def update_note(
    request: Request,
    note_id: UUID,
    title: str = Form(...),
    subject: str = Form(""),
    content: str = Form(""),
    status_: NoteStatus = Form(NoteStatus.PENDING, alias="status"),
    attachments: Optional[List[UploadFile]] = File(None),
    user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service)
):
    try:
        note = await service.update_note(user, note_id, title=title, subject=subject, content=content, status=status_, files=attachments)
    except ServiceError as e:
        _raise_for(e)
    return NoteSavedResponse(note=NoteResponse.from_note(note))


@router.delete("/{note_id}", response_model=MessageResponse, summary="Delete a note")
@limiter.limit("60/minute")
async def delete_note(request: Request, note_id: UUID, user: User = Depends(get_current_user), service: NoteService = Depends(get_note_service)):
    try:
        await service.delete_note(user, note_id)
    except ServiceError as e:
        _raise_for(e)
    return MessageResponse(message="Note deleted")
