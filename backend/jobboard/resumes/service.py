"""
Resume record store

Persistence for resume records: the upload contract, ownership checks and
the one-active-resume-per-user rule. Status transitions after upload belong
to the analysis orchestrator.
"""
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

from jobboard.core.config import settings
from jobboard.core.exceptions import (
    ConflictError,
    FileTooLargeError,
    NoFileError,
    NotFoundError,
    UnsupportedFormatError,
)
from jobboard.core.storage import LocalFileStorage
from jobboard.models.resume import ANALYSIS_COLUMNS, Resume, STATUS_FAILED, STATUS_PROCESSING

logger = structlog.get_logger()

# Concurrent uploads by one user race on the active-resume index
MAX_ACTIVATION_ATTEMPTS = 3


class ResumeService:
    """Service for resume records owned by a user"""

    def validate_upload(self, file_name: Optional[str], mime_type: Optional[str], content: bytes):
        """
        Reject an upload before anything is stored

        Order: missing file, unsupported type, size cap.
        """
        if not file_name or not content:
            raise NoFileError()
        if (mime_type or "").lower() not in settings.ALLOWED_MIME_TYPES:
            raise UnsupportedFormatError(mime_type)
        if len(content) > settings.max_upload_size_bytes:
            raise FileTooLargeError(settings.MAX_UPLOAD_SIZE_MB)

    def create_resume_record(
        self,
        db: Session,
        user_id: int,
        file_name: str,
        file_path: str,
        file_size: int,
        mime_type: str,
    ) -> Resume:
        """
        Deactivate the user's resumes and insert the new active one

        Both statements share one transaction. A concurrent upload that wins
        the unique active index makes the commit fail; the whole unit is then
        retried against the new state.
        """
        for attempt in range(1, MAX_ACTIVATION_ATTEMPTS + 1):
            try:
                deactivated = (
                    db.query(Resume)
                    .filter(Resume.user_id == user_id, Resume.is_active == True)  # noqa: E712
                    .update({"is_active": False}, synchronize_session=False)
                )
                resume = Resume(
                    user_id=user_id,
                    file_name=file_name,
                    file_path=file_path,
                    file_size=file_size,
                    mime_type=mime_type.lower(),
                    processing_status=STATUS_PROCESSING,
                    is_active=True,
                )
                db.add(resume)
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.warning("resume_activation_conflict", user_id=user_id, attempt=attempt)
                continue

            db.refresh(resume)
            logger.info(
                "resume_record_created",
                resume_id=resume.id,
                user_id=user_id,
                deactivated=deactivated,
            )
            return resume

        raise ConflictError(
            "Another upload for this user is in progress, please retry",
            details={"user_id": user_id},
        )

    def list_resumes(self, db: Session, user_id: int, skip: int = 0, limit: int = 100) -> List[Resume]:
        return (
            db.query(Resume)
            .filter(Resume.user_id == user_id)
            .order_by(Resume.created_at.desc(), Resume.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_resumes(self, db: Session, user_id: int) -> int:
        return db.query(Resume).filter(Resume.user_id == user_id).count()

    def get_active(self, db: Session, user_id: int) -> Resume:
        resume = (
            db.query(Resume)
            .filter(Resume.user_id == user_id, Resume.is_active == True)  # noqa: E712
            .first()
        )
        if not resume:
            raise NotFoundError("Active resume")
        return resume

    def get_owned(self, db: Session, resume_id: int, user_id: int) -> Resume:
        """Records of other users are reported as missing"""
        resume = (
            db.query(Resume)
            .filter(Resume.id == resume_id, Resume.user_id == user_id)
            .first()
        )
        if not resume:
            raise NotFoundError("Resume", str(resume_id))
        return resume

    def reset_for_reprocess(self, db: Session, resume_id: int, user_id: int, force: bool = False) -> Resume:
        """
        Move a terminal record back to processing with no payload or error

        force also resets a record still in processing. Operators use it for
        records stranded by a lost worker; the API never passes it.
        """
        resume = self.get_owned(db, resume_id, user_id)
        if resume.processing_status == STATUS_PROCESSING and not force:
            raise ConflictError(
                "Resume is still being processed",
                details={"resume_id": resume_id, "processing_status": resume.processing_status},
            )

        previous_status = resume.processing_status
        for column in ANALYSIS_COLUMNS:
            setattr(resume, column, None)
        resume.extracted_text = None
        resume.analyzed_at = None
        resume.processing_error = None
        resume.processing_status = STATUS_PROCESSING
        db.commit()
        db.refresh(resume)

        logger.info(
            "resume_reprocess_requested",
            resume_id=resume_id,
            previous_status=previous_status,
            forced=force,
        )
        return resume

    def mark_scheduling_failed(self, db: Session, resume: Resume, error: Exception):
        """A record whose analysis could not be queued must not stay processing"""
        db.refresh(resume)
        if resume.processing_status != STATUS_PROCESSING:
            return
        resume.processing_status = STATUS_FAILED
        resume.processing_error = "Could not schedule resume analysis, please reprocess"
        db.commit()
        logger.error("resume_analysis_scheduling_failed", resume_id=resume.id, error=str(error))

    def delete_resume(self, db: Session, storage: LocalFileStorage, resume_id: int, user_id: int):
        """Delete the record, then release its stored file"""
        resume = self.get_owned(db, resume_id, user_id)
        file_path = resume.file_path
        db.delete(resume)
        db.commit()

        storage.delete(file_path)
        logger.info("resume_deleted", resume_id=resume_id, user_id=user_id)


resume_service = ResumeService()
