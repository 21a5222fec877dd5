from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from ...models.db_models import Paper, Term
from .common import ApiModel


class PaperUploadRequest(ApiModel):
    """Paper metadata plus the PDF as a data URL (or bare base64)."""
    subject: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    semester: int = Field(..., ge=1, le=12)
    term: Term = Term.MID_SEM
    file_base64: str = Field(..., description="data:application/pdf;base64,... as produced by FileReader.readAsDataURL")


class PaperFileResponse(ApiModel):
    url: str


class PaperResponse(ApiModel):
    id: UUID = Field(..., alias="_id")
    subject: str
    year: int
    semester: int
    term: Term
    file: PaperFileResponse
    uploaded_by: Optional[UUID] = None
    created_at: datetime

    @classmethod
    def from_paper(cls, paper: Paper) -> "PaperResponse":
        return cls(**paper.model_dump())


class PaperListResponse(ApiModel):
    success: bool = True
    papers: List[PaperResponse]


class PaperSavedResponse(ApiModel):
    success: bool = True
    paper: PaperResponse
