"""
Reprocess a single resume by ID

Also resets a record stranded in processing by a lost worker.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from jobboard.core.database import SessionLocal
from jobboard.core.exceptions import JobBoardException
from jobboard.models.resume import Resume
from jobboard.resumes.service import resume_service
from jobboard.tasks.resume_tasks import analyze_resume_task
import structlog

logger = structlog.get_logger()


def reprocess_resume(resume_id: int):
    """Reprocess a single resume"""
    db: Session = SessionLocal()
    try:
        resume = db.query(Resume).filter(Resume.id == resume_id).first()

        if not resume:
            print(f"❌ Resume ID {resume_id} not found.")
            return

        print(f"\n{'='*80}")
        print("REPROCESSING RESUME")
        print(f"{'='*80}\n")
        print(f"Resume ID: {resume.id}")
        print(f"User ID: {resume.user_id}")
        print(f"File: {resume.file_name}")
        print(f"Current Status: {resume.processing_status}")
        print(f"{'─'*80}\n")

        try:
            resume = resume_service.reset_for_reprocess(db, resume.id, resume.user_id, force=True)
        except JobBoardException as e:
            print(f"❌ {e.message}")
            return

        # Trigger async processing
        analyze_resume_task.delay(resume.id)

        print(f"✅ Resume ID {resume.id} queued for reprocessing")
        print("\nProcessing will happen asynchronously.")
        print(f"Check status using: python scripts/check_resume_data.py {resume.id}\n")

    except Exception as e:
        logger.error("reprocess_failed", resume_id=resume_id, error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/reprocess_single_resume.py <resume_id>")
        print("Example: python scripts/reprocess_single_resume.py 33")
        sys.exit(1)

    try:
        resume_id = int(sys.argv[1])
    except ValueError:
        print("❌ Invalid resume ID. Please provide a number.")
        sys.exit(1)
    reprocess_resume(resume_id)
