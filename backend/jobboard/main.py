"""
JobBoard resume analysis - Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from jobboard.analysis.factory import build_orchestrator
from jobboard.core.config import settings
from jobboard.core.database import init_db
from jobboard.core.logging_config import configure_logging
from jobboard.core.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    ExceptionHandlerMiddleware,
    error_body,
)
from jobboard.core.exceptions import JobBoardException
from jobboard.resumes.router import router as resumes_router
from jobboard.tasks.resume_tasks import AnalysisTask

# Configure logging
configure_logging()
logger = structlog.get_logger()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Resume ingestion and analysis with AI and heuristic fallback",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Add middleware
app.add_middleware(CorrelationIDMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(ExceptionHandlerMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(JobBoardException)
async def jobboard_exception_handler(request: Request, exc: JobBoardException):
    """Handle JobBoard exceptions"""
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "ai_enabled": settings.ai_enabled,
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
    }


# Include routers
app.include_router(resumes_router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("application_starting", version=settings.APP_VERSION)

    # Initialize database
    try:
        init_db()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))

    # Tasks run inside this process when eager
    if settings.CELERY_TASK_ALWAYS_EAGER:
        AnalysisTask.use_orchestrator(build_orchestrator())


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("application_shutting_down")
    AnalysisTask.shutdown_orchestrator()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "jobboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
