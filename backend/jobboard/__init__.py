"""
Job board backend: resume ingestion and analysis pipeline
"""
__version__ = "1.0.0"
