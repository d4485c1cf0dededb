"""
Resume Pydantic schemas
"""
from typing import Optional, List
from pydantic import BaseModel
from datetime import datetime

from jobboard.analysis.schemas import ResumeAnalysis
from jobboard.models.resume import ANALYSIS_COLUMNS, STATUS_COMPLETED, Resume


class PollingHints(BaseModel):
    """How a client should poll the status endpoint"""
    status_url: str
    interval_seconds: float
    max_attempts: int


class ResumeResponse(BaseModel):
    """Resume summary, no analysis payload"""
    id: int
    user_id: int
    file_name: str
    file_size: Optional[int] = None
    mime_type: str
    processing_status: str
    processing_error: Optional[str] = None
    is_active: bool
    analyzed_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResumeSubmitResponse(ResumeResponse):
    """Upload and reprocess acknowledgement"""
    polling: PollingHints


class ResumeStatusResponse(BaseModel):
    """Lightweight poll target"""
    id: int
    processing_status: str
    processing_error: Optional[str] = None
    analysis_notice: Optional[str] = None
    is_terminal: bool

    class Config:
        from_attributes = True


class ResumeDetailResponse(ResumeResponse):
    """Resume with its analysis; analysis is null unless completed"""
    analyzed_at: Optional[datetime] = None
    extracted_text: Optional[str] = None
    analysis: Optional[ResumeAnalysis] = None

    @classmethod
    def from_record(cls, resume: Resume) -> "ResumeDetailResponse":
        analysis = None
        if resume.processing_status == STATUS_COMPLETED:
            analysis = ResumeAnalysis.model_validate(
                {column: getattr(resume, column) for column in ANALYSIS_COLUMNS}
            )
        summary = ResumeResponse.model_validate(resume)
        return cls(
            **summary.model_dump(),
            analyzed_at=resume.analyzed_at,
            extracted_text=resume.extracted_text,
            analysis=analysis,
        )


class ResumeListResponse(BaseModel):
    items: List[ResumeResponse]
    total: int


class MessageResponse(BaseModel):
    message: str
