"""
Local file storage for uploaded resumes
"""
import os
import re
import uuid
from pathlib import Path
from typing import BinaryIO
import structlog

from jobboard.core.config import settings

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


class LocalFileStorage:
    """Stores uploads under a root directory and hands back the path as the storage key"""
    
    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir)
    
    def save(self, owner_id: int, original_name: str, content: bytes) -> str:
        """Persist bytes as <owner>_<uuid>_<sanitized name> and return the path"""
        self.root_dir.mkdir(parents=True, exist_ok=True)
        sanitized = _UNSAFE_CHARS.sub("_", original_name or "resume")
        file_path = self.root_dir / f"{owner_id}_{uuid.uuid4().hex}_{sanitized}"
        
        with open(file_path, "wb") as f:
            f.write(content)
        
        logger.info("file_stored", path=str(file_path), size=len(content))
        return str(file_path)
    
    def open(self, file_path: str) -> BinaryIO:
        return open(file_path, "rb")
    
    def delete(self, file_path: str) -> bool:
        """Remove a stored file; a file that is already gone is not an error"""
        try:
            os.remove(file_path)
        except FileNotFoundError:
            logger.warning("stored_file_missing", path=file_path)
            return False
        logger.info("file_deleted", path=file_path)
        return True


def get_storage() -> LocalFileStorage:
    """Dependency returning the configured storage backend"""
    return LocalFileStorage(settings.UPLOAD_DIR)
