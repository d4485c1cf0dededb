"""
Database models
"""
from jobboard.models.resume import Resume

__all__ = [
    "Resume",
]
