"""
Check resume analysis state in database
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from jobboard.core.database import SessionLocal
from jobboard.models.resume import Resume, STATUS_COMPLETED, STATUS_FAILED


def check_resume_data(resume_id: int = None):
    """Print status and payload completeness for all resumes, or one"""
    db: Session = SessionLocal()
    try:
        query = db.query(Resume).order_by(Resume.user_id, Resume.id)
        if resume_id is not None:
            query = query.filter(Resume.id == resume_id)
        resumes = query.all()

        print(f"\n{'='*80}")
        print("RESUME ANALYSIS CHECK")
        print(f"{'='*80}\n")
        print(f"Total Resumes: {len(resumes)}\n")

        for resume in resumes:
            print(f"\n{'─'*80}")
            print(f"Resume ID: {resume.id} (user {resume.user_id}){' [active]' if resume.is_active else ''}")
            print(f"File: {resume.file_name} ({resume.mime_type})")
            print(f"Size: {resume.file_size} bytes" if resume.file_size else "Size: N/A")
            print(f"Status: {resume.processing_status}")

            if resume.processing_status == STATUS_FAILED:
                print(f"  ❌ Error: {resume.processing_error}")
                continue
            if resume.processing_status != STATUS_COMPLETED:
                print("  ⏳ Still processing")
                continue

            print(f"Analyzed by: {resume.analyzed_by} at {resume.analyzed_at}")
            if resume.analysis_notice:
                print(f"  ⚠️  {resume.analysis_notice}")

            skills = resume.skills or {}
            skill_count = sum(len(skills.get(category) or []) for category in ("technical", "tools", "soft"))
            print(f"  Skills: {skill_count} found")
            print(f"  Experience entries: {len(resume.experience or [])}")
            print(f"  Education entries: {len(resume.education or [])}")
            print(f"  Level: {resume.experience_level}")
            print(f"  Industries: {', '.join(resume.industry_tags or []) or 'N/A'}")
            print(f"  Confidence: {resume.analysis_score}")

            overall = (resume.overall_score or {}).get("score")
            ats = (resume.ats_optimization or {}).get("score")
            print(f"\n📊 Overall Score: {overall}  ATS Score: {ats}")

            contact = resume.contact_info or {}
            print(f"Contact: {contact.get('name') or 'N/A'} / {contact.get('email') or 'N/A'} / {contact.get('phone') or 'N/A'}")

        print(f"\n{'='*80}\n")

    finally:
        db.close()


if __name__ == "__main__":
    check_resume_data(int(sys.argv[1]) if len(sys.argv) > 1 else None)
