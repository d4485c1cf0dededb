"""
Resume upload, status and management routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session
import structlog

from jobboard.auth.dependencies import CurrentUser, get_current_user
from jobboard.core.config import settings
from jobboard.core.database import get_db
from jobboard.core.storage import LocalFileStorage, get_storage
from jobboard.models.resume import Resume
from jobboard.resumes.schemas import (
    MessageResponse,
    PollingHints,
    ResumeDetailResponse,
    ResumeListResponse,
    ResumeResponse,
    ResumeStatusResponse,
    ResumeSubmitResponse,
)
from jobboard.resumes.service import resume_service
from jobboard.tasks.resume_tasks import analyze_resume_task

router = APIRouter(prefix="/api/v1/resumes", tags=["Resumes"])
logger = structlog.get_logger()


def _submit_response(request: Request, resume: Resume) -> ResumeSubmitResponse:
    summary = ResumeResponse.model_validate(resume)
    return ResumeSubmitResponse(
        **summary.model_dump(),
        polling=PollingHints(
            status_url=str(request.url_for("get_resume_status", resume_id=resume.id)),
            interval_seconds=settings.POLL_INTERVAL_SECONDS,
            max_attempts=settings.POLL_MAX_ATTEMPTS,
        ),
    )


def _schedule_analysis(db: Session, resume: Resume):
    """Hand the record to a worker; the request does not wait for the result"""
    try:
        analyze_resume_task.delay(resume.id)
    except Exception as e:
        resume_service.mark_scheduling_failed(db, resume, e)


@router.post("/upload", response_model=ResumeSubmitResponse, status_code=status.HTTP_201_CREATED)
def upload_resume(
    request: Request,
    file: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    """Upload a resume; analysis continues in the background"""
    # One byte past the cap is enough to reject an oversized file
    content = file.file.read(settings.max_upload_size_bytes + 1) if file else b""
    file_name = file.filename if file else None
    mime_type = file.content_type if file else None
    resume_service.validate_upload(file_name, mime_type, content)

    file_path = storage.save(current_user.id, file_name, content)
    try:
        resume = resume_service.create_resume_record(
            db,
            user_id=current_user.id,
            file_name=file_name,
            file_path=file_path,
            file_size=len(content),
            mime_type=mime_type,
        )
    except Exception:
        storage.delete(file_path)
        raise

    # Built before scheduling so an inline worker cannot change what is returned
    response = _submit_response(request, resume)
    _schedule_analysis(db, resume)

    logger.info("resume_uploaded", resume_id=resume.id, user_id=current_user.id, file_name=file_name)
    return response


@router.get("/", response_model=ResumeListResponse)
def list_resumes(
    skip: int = 0,
    limit: int = 100,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's resumes, newest first"""
    resumes = resume_service.list_resumes(db, current_user.id, skip=skip, limit=limit)
    return ResumeListResponse(
        items=[ResumeResponse.model_validate(r) for r in resumes],
        total=resume_service.count_resumes(db, current_user.id),
    )


@router.get("/active", response_model=ResumeDetailResponse)
def get_active_resume(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get the caller's active resume with its analysis"""
    return ResumeDetailResponse.from_record(resume_service.get_active(db, current_user.id))


@router.get("/{resume_id}", response_model=ResumeDetailResponse)
def get_resume(
    resume_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get resume details"""
    return ResumeDetailResponse.from_record(resume_service.get_owned(db, resume_id, current_user.id))


@router.get("/{resume_id}/status", response_model=ResumeStatusResponse)
def get_resume_status(
    resume_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Processing status without the analysis payload"""
    return ResumeStatusResponse.model_validate(resume_service.get_owned(db, resume_id, current_user.id))


@router.post("/{resume_id}/reprocess", response_model=ResumeSubmitResponse, status_code=status.HTTP_202_ACCEPTED)
def reprocess_resume(
    resume_id: int,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Run analysis again on a completed or failed resume"""
    resume = resume_service.reset_for_reprocess(db, resume_id, current_user.id)
    response = _submit_response(request, resume)
    _schedule_analysis(db, resume)
    return response


@router.delete("/{resume_id}", response_model=MessageResponse)
def delete_resume(
    resume_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    """Delete a resume and its stored file"""
    resume_service.delete_resume(db, storage, resume_id, current_user.id)
    return MessageResponse(message="Resume deleted successfully")
