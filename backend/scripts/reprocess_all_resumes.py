"""
Reprocess every resume in one status (failed by default)

processing picks up records stranded by a lost worker; only run it when no
worker is still analyzing them.

Usage: python scripts/reprocess_all_resumes.py [failed|completed|processing] [--yes]
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from jobboard.core.database import SessionLocal
from jobboard.core.exceptions import JobBoardException
from jobboard.models.resume import Resume, STATUS_COMPLETED, STATUS_FAILED, STATUS_PROCESSING
from jobboard.resumes.service import resume_service
from jobboard.tasks.resume_tasks import analyze_resume_task
import structlog

logger = structlog.get_logger()


def reprocess_all_resumes(status: str = STATUS_FAILED, assume_yes: bool = False):
    """Reset matching resumes to processing and queue them again"""
    db: Session = SessionLocal()
    try:
        resumes = db.query(Resume).filter(Resume.processing_status == status).order_by(Resume.id).all()

        if not resumes:
            print(f"No {status} resumes found to reprocess.")
            return

        print(f"\n{'='*80}")
        print(f"REPROCESSING {status.upper()} RESUMES")
        print(f"{'='*80}\n")
        print(f"Found {len(resumes)} resume(s) to reprocess:\n")

        for resume in resumes:
            print(f"  - Resume ID: {resume.id} (user {resume.user_id})")
            print(f"    File: {resume.file_name}")
            if resume.processing_error:
                print(f"    Error: {resume.processing_error}")

        print(f"\n{'─'*80}")
        if not assume_yes:
            response = input(f"\nReprocess all {len(resumes)} resume(s)? (yes/no): ").strip().lower()
            if response not in ['yes', 'y']:
                print("Cancelled.")
                return

        print("\n🔄 Reprocessing resumes...\n")

        reprocessed = 0
        for resume in resumes:
            try:
                resume_service.reset_for_reprocess(db, resume.id, resume.user_id, force=True)
            except JobBoardException as e:
                print(f"⚠️  Skipped Resume ID {resume.id}: {e.message}")
                continue

            try:
                analyze_resume_task.delay(resume.id)
            except Exception as e:
                logger.error("reprocess_queue_failed", resume_id=resume.id, error=str(e))
                resume_service.mark_scheduling_failed(db, resume, e)
                print(f"❌ Failed to queue Resume ID {resume.id}: {e}")
                continue

            print(f"✅ Queued Resume ID {resume.id} ({resume.file_name}) for reprocessing")
            reprocessed += 1

        print(f"\n{'='*80}")
        print(f"✅ Successfully queued {reprocessed} resume(s) for reprocessing")
        print(f"{'='*80}\n")
        print("Processing will happen asynchronously.")
        print("Check results using: python scripts/check_resume_data.py\n")

    except Exception as e:
        logger.error("reprocess_all_failed", error=str(e))
        print(f"❌ Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    args = [arg for arg in sys.argv[1:] if arg != "--yes"]
    status = args[0] if args else STATUS_FAILED
    if status not in (STATUS_FAILED, STATUS_COMPLETED, STATUS_PROCESSING):
        print("Usage: python scripts/reprocess_all_resumes.py [failed|completed|processing] [--yes]")
        sys.exit(1)
    reprocess_all_resumes(status, assume_yes="--yes" in sys.argv[1:])
