"""
Resume models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Boolean, Float, Index, text
from sqlalchemy.sql import func
from jobboard.core.database import Base


# Processing states
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_FAILED)

# Columns written from a ResumeAnalysis payload, cleared together on failure
ANALYSIS_COLUMNS = (
    "summary",
    "contact_info",
    "skills",
    "experience",
    "education",
    "keywords",
    "industry_tags",
    "experience_level",
    "analysis_score",
    "ats_optimization",
    "overall_score",
    "strengths",
    "improvements",
    "recommendations",
    "career_path",
    "analyzed_by",
    "analysis_notice",
)


class Resume(Base):
    """One uploaded resume document and its analysis"""
    
    __tablename__ = "resumes"
    __table_args__ = (
        # At most one active resume per user
        Index(
            "uq_resumes_active_user",
            "user_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)  # owned by the auth service
    
    # Source file
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer)  # in bytes
    mime_type = Column(String(100), nullable=False)
    
    # Lifecycle
    processing_status = Column(String(50), nullable=False, default=STATUS_PROCESSING)  # processing, completed, failed
    processing_error = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    
    # Analysis payload, null until completed
    extracted_text = Column(Text)
    summary = Column(Text)
    contact_info = Column(JSON)
    skills = Column(JSON)  # technical, tools, soft, languages, certifications
    experience = Column(JSON)
    education = Column(JSON)
    keywords = Column(JSON)
    industry_tags = Column(JSON)
    experience_level = Column(String(20))
    analysis_score = Column(Float)  # 0-1
    ats_optimization = Column(JSON)
    overall_score = Column(JSON)
    strengths = Column(JSON)
    improvements = Column(JSON)
    recommendations = Column(JSON)
    career_path = Column(JSON)
    analyzed_by = Column(String(20))  # ai or heuristic
    analysis_notice = Column(Text)  # advisory for degraded success
    analyzed_at = Column(DateTime(timezone=True))
    
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    @property
    def is_terminal(self) -> bool:
        return self.processing_status in TERMINAL_STATUSES
