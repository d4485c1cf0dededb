"""
Analysis orchestration

Owns the resume processing state machine:

    processing -> completed | failed

Text extraction failures are terminal. AI failures degrade to the heuristic
analyzer and still complete, with an advisory notice on the record. Every
transition is committed before run() returns.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union
import structlog
from sqlalchemy.orm import Session

from jobboard.analysis.ai_analyzer import AIAnalyzer
from jobboard.analysis.extractor import TextExtractor
from jobboard.analysis.heuristic import HeuristicAnalyzer
from jobboard.analysis.schemas import ResumeAnalysis
from jobboard.core.exceptions import (
    AIEngineError,
    ExtractionFailedError,
    InsufficientContentError,
    ProcessingError,
)
from jobboard.core.storage import LocalFileStorage
from jobboard.models.resume import (
    ANALYSIS_COLUMNS,
    Resume,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROCESSING,
)

logger = structlog.get_logger()

FALLBACK_NOTICE = "AI analysis temporarily unavailable. Results were produced by text pattern analysis."


@dataclass
class AIResult:
    analysis: ResumeAnalysis


@dataclass
class HeuristicResult:
    analysis: ResumeAnalysis
    fallback_reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """True when the AI analyzer was configured but failed"""
        return self.fallback_reason is not None


AnalysisOutcome = Union[AIResult, HeuristicResult]


class AnalysisOrchestrator:
    """Runs extraction and analysis for one resume record at a time"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        storage: LocalFileStorage,
        extractor: TextExtractor,
        heuristic: HeuristicAnalyzer,
        ai_analyzer: Optional[AIAnalyzer] = None,
        min_text_length: int = 50,
    ):
        self.session_factory = session_factory
        self.storage = storage
        self.extractor = extractor
        self.heuristic = heuristic
        self.ai_analyzer = ai_analyzer
        self.min_text_length = min_text_length

    @property
    def ai_enabled(self) -> bool:
        return self.ai_analyzer is not None

    def extract_text(self, resume: Resume) -> str:
        """Read the stored document and return text long enough to analyze"""
        try:
            with self.storage.open(resume.file_path) as f:
                text = self.extractor.extract(f, resume.mime_type)
        except FileNotFoundError as e:
            raise ExtractionFailedError("Stored resume file not found") from e

        if len(text.strip()) < self.min_text_length:
            raise InsufficientContentError(len(text.strip()), self.min_text_length)
        return text

    def analyze_text(self, text: str) -> AnalysisOutcome:
        """AI analysis when configured, heuristic analysis otherwise or on AI failure"""
        if self.ai_analyzer is None:
            return HeuristicResult(self.heuristic.analyze(text))

        try:
            return AIResult(self.ai_analyzer.analyze(text))
        except AIEngineError as e:
            logger.warning(
                "ai_analysis_failed_using_heuristic",
                error_type=type(e).__name__,
                error=e.message,
            )
            analysis = self.heuristic.analyze(text)
            analysis = analysis.model_copy(update={"analysis_notice": FALLBACK_NOTICE})
            return HeuristicResult(analysis, fallback_reason=e.message)

    def run(self, resume_id: int) -> Optional[str]:
        """
        Process one record that is in the processing state

        Returns the terminal status written, the current status when the
        record was not processing, or None when the record no longer exists.
        """
        db = self.session_factory()
        try:
            resume = db.query(Resume).filter(Resume.id == resume_id).first()
            if not resume:
                logger.warning("resume_analysis_skipped_missing", resume_id=resume_id)
                return None
            if resume.processing_status != STATUS_PROCESSING:
                logger.info(
                    "resume_analysis_skipped_not_processing",
                    resume_id=resume_id,
                    status=resume.processing_status,
                )
                return resume.processing_status

            logger.info("resume_analysis_started", resume_id=resume_id, mime_type=resume.mime_type)
            try:
                text = self.extract_text(resume)
                outcome = self.analyze_text(text)
                self._mark_completed(db, resume, text, outcome)
                return STATUS_COMPLETED
            except ProcessingError as e:
                db.rollback()
                self._mark_failed(db, resume_id, e.message)
                return STATUS_FAILED
            except Exception as e:
                logger.error("resume_analysis_crashed", resume_id=resume_id, error=str(e), exc_info=True)
                db.rollback()
                self._mark_failed(db, resume_id, str(e) or type(e).__name__)
                return STATUS_FAILED
        finally:
            db.close()

    def _mark_completed(self, db: Session, resume: Resume, text: str, outcome: AnalysisOutcome):
        payload = outcome.analysis.model_dump(mode="json")
        for column in ANALYSIS_COLUMNS:
            setattr(resume, column, payload.get(column))
        resume.extracted_text = text
        resume.analyzed_at = datetime.now(timezone.utc)
        resume.processing_status = STATUS_COMPLETED
        resume.processing_error = None
        db.commit()

        logger.info(
            "resume_analysis_completed",
            resume_id=resume.id,
            analyzed_by=resume.analyzed_by,
            degraded=isinstance(outcome, HeuristicResult) and outcome.degraded,
            analysis_score=resume.analysis_score,
        )

    def _mark_failed(self, db: Session, resume_id: int, message: str):
        """Terminal failure; any partial payload is cleared"""
        resume = db.query(Resume).filter(Resume.id == resume_id).first()
        if not resume:
            logger.warning("resume_deleted_during_analysis", resume_id=resume_id)
            return
        for column in ANALYSIS_COLUMNS:
            setattr(resume, column, None)
        resume.extracted_text = None
        resume.analyzed_at = None
        resume.processing_status = STATUS_FAILED
        resume.processing_error = message
        db.commit()
        logger.warning("resume_analysis_failed", resume_id=resume_id, error=message)

    def close(self):
        """Release the AI client, if any"""
        client = getattr(self.ai_analyzer, "client", None)
        if client is not None and hasattr(client, "close"):
            client.close()
            logger.info("ai_client_closed")
