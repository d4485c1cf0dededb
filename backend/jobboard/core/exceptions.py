"""
Custom exception classes for the application
"""
from typing import Optional, Dict, Any


class JobBoardException(Exception):
    """Base exception for the job board backend"""
    
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(JobBoardException):
    """Authentication related errors"""
    
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class NotFoundError(JobBoardException):
    """Resource not found errors"""
    
    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, status_code=404)


class ConflictError(JobBoardException):
    """Request conflicts with the current state of the resource"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class ValidationError(JobBoardException):
    """Validation errors"""
    
    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 422,
    ):
        super().__init__(message, status_code=status_code, details=details)


class NoFileError(ValidationError):
    """Upload carried no file content"""
    
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message, status_code=400)


class FileTooLargeError(ValidationError):
    """Upload exceeds the configured size cap"""
    
    def __init__(self, max_size_mb: int):
        super().__init__(
            f"File too large. Maximum size is {max_size_mb}MB.",
            details={"max_size_mb": max_size_mb},
            status_code=413,
        )


# Extraction stage: fatal to the pipeline, there is no text to fall back on


class ProcessingError(JobBoardException):
    """File/resume processing errors"""
    
    def __init__(
        self,
        message: str = "Processing failed",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 422,
    ):
        super().__init__(message, status_code=status_code, details=details)


class UnsupportedFormatError(ProcessingError):
    """Declared MIME type is outside the supported set"""
    
    def __init__(self, mime_type: Optional[str]):
        super().__init__(
            "Invalid file type. Only PDF and DOC/DOCX files are allowed.",
            details={"mime_type": mime_type},
            status_code=415,
        )


class ExtractionFailedError(ProcessingError):
    """Document could not be decoded"""
    
    def __init__(self, message: str = "Failed to extract text from file"):
        super().__init__(message)


class InsufficientContentError(ProcessingError):
    """Extracted text is too short to analyze"""
    
    def __init__(self, length: int, minimum: int):
        super().__init__(
            "Insufficient text content extracted from resume",
            details={"length": length, "minimum": minimum},
        )


# AI stage: always recoverable through heuristic analysis


class AIEngineError(JobBoardException):
    """AI engine related errors"""
    
    def __init__(self, message: str = "AI processing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=502, details=details)


class AIUnavailableError(AIEngineError):
    """AI analyzer has no credential configured"""
    
    def __init__(self, message: str = "AI analysis service not configured"):
        super().__init__(message)


class AIRequestFailedError(AIEngineError):
    """Transport failure, timeout or non-2xx answer from the completion endpoint"""


class AIResponseInvalidError(AIEngineError):
    """Completion body could not be parsed into an analysis"""
