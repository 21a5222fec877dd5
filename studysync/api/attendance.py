from fastapi import APIRouter, Depends, HTTPException, status, Request
from uuid import UUID

from ..services.attendance_service import AttendanceService
from ..services.exceptions import ServiceError, NotFoundError
from ..models.db_models import User
from .schemas.attendance import (
    AddSubjectRequest,
    EditSubjectRequest,
    MarkAttendanceRequest,
    SubjectResponse,
    SubjectListResponse,
    SubjectSavedResponse
)
from .schemas.common import MessageResponse
from .auth import get_current_user
from .dependencies import get_attendance_service
from .utilities.limiter import limiter

router = APIRouter(prefix="/attendance", tags=["Attendance"])


def _raise_for(e: ServiceError):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=SubjectListResponse, summary="List subjects with counters and history")
@limiter.limit("120/minute")
async def list_subjects(request: Request, user: User = Depends(get_current_user), service: AttendanceService = Depends(get_attendance_service)):
    subjects = await service.list_subjects(user)
    return SubjectListResponse(data=[SubjectResponse.from_subject(s) for s in subjects])


@router.post("/add-subject", response_model=SubjectSavedResponse, status_code=status.HTTP_201_CREATED, summary="Start tracking a subject")
@limiter.limit("60/minute")
async def add_subject(request: Request, add_request: AddSubjectRequest, user: User = Depends(get_current_user), service: AttendanceService = Depends(get_attendance_service)):
    try:
        subject = await service.add_subject(user, add_request.subject)
    except ServiceError as e:
        _raise_for(e)
    return SubjectSavedResponse(data=SubjectResponse.from_subject(subject))


@router.patch("/mark/{subject_id}", response_model=SubjectSavedResponse, summary="Mark Present/Absent or undo the last mark")
@limiter.limit("200/minute")
async def mark_attendance(request: Request, subject_id: UUID, mark_request: MarkAttendanceRequest, user: User = Depends(get_current_user), service: AttendanceService = Depends(get_attendance_service)):
    try:
        subject = await service.mark_attendance(user, subject_id, mark_request.status)
    except ServiceError as e:
        _raise_for(e)
    return SubjectSavedResponse(data=SubjectResponse.from_subject(subject))


@router.patch("/edit/{subject_id}", response_model=SubjectSavedResponse, summary="Rename a subject")
@limiter.limit("60/minute")
async def edit_subject(request: Request, subject_id: UUID, edit_request: EditSubjectRequest, user: User = Depends(get_current_user), service: AttendanceService = Depends(get_attendance_service)):
    try:
        subject = await service.edit_subject(user, subject_id, edit_request.subject)
    except ServiceError as e:
        _raise_for(e)
    return SubjectSavedResponse(data=SubjectResponse.from_subject(subject))


@router.delete("/{subject_id}", response_model=MessageResponse, summary="Stop tracking a subject")
@limiter.limit("60/minute")
async def delete_subject(request: Request, subject_id: UUID, user: User = Depends(get_current_user), service: AttendanceService = Depends(get_attendance_service)):
    try:
        await service.delete_subject(user, subject_id)
    except ServiceError as e:
        _raise_for(e)
    return MessageResponse(message="Subject deleted")
