"""
Application configuration using Pydantic Settings
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


# Values shipped in example .env files that must not enable the AI analyzer
PLACEHOLDER_API_KEYS = {"", "changeme", "your_openai_api_key_here", "your_groq_api_key_here"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Application
    APP_NAME: str = "JobBoard Resume Analysis"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = Field(default="change-this-in-production-min-32-characters-required", min_length=32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    
    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    
    # Async Tasks
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"
    CELERY_TASK_ALWAYS_EAGER: bool = False
    ANALYSIS_TASK_TIME_LIMIT: int = 300
    
    # AI analyzer (any OpenAI-compatible endpoint, e.g. Groq via OPENAI_BASE_URL)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    AI_TEMPERATURE: float = 0.1
    AI_MAX_TOKENS: int = 2000
    AI_REQUEST_TIMEOUT_SECONDS: float = 30.0
    AI_MAX_RETRIES: int = 1
    AI_MAX_INPUT_CHARS: int = 12000
    
    # Analysis pipeline
    MIN_EXTRACTED_TEXT_LENGTH: int = 50
    
    # File Upload
    MAX_UPLOAD_SIZE_MB: int = 5
    ALLOWED_MIME_TYPES: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ]
    UPLOAD_DIR: str = "./uploads/resumes"
    
    # Client polling hints returned with upload/reprocess responses
    POLL_INTERVAL_SECONDS: float = 2.0
    POLL_MAX_ATTEMPTS: int = 30
    
    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    CORS_ALLOW_CREDENTIALS: bool = True
    
    # Observability
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console or json
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
    
    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS if origin.strip()]
    
    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    
    @property
    def ai_enabled(self) -> bool:
        """AI analysis is enabled only by a real-looking credential"""
        key = (self.OPENAI_API_KEY or "").strip()
        return key.lower() not in PLACEHOLDER_API_KEYS


settings = Settings()
