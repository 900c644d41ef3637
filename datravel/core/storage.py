"""
Blob storage for attachments and director signatures.

The rest of the service only handles the opaque relative paths returned by
``store``; nothing outside this module touches the filesystem directly.
"""
import logging
import mimetypes
import os
import time
import uuid
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class LocalBlobStorage:
    """Stores files under a root directory on the local disk."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        if not resolved.is_relative_to(self.root.resolve()):
            raise ValueError(f"Path escapes storage root: {path}")
        return resolved

    def store(self, data: bytes, folder: str, prefix: str, original_name: Optional[str] = None) -> str:
        """Write ``data`` under ``folder`` with a unique name and return its relative path."""
        extension = ""
        if original_name:
            extension = os.path.splitext(original_name)[1].lower()
        filename = f"{prefix}_{int(time.time())}_{uuid.uuid4().hex[:13]}{extension}"
        relative = f"{folder}/{filename}"
        target = self._resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"📁 STORAGE: stored {len(data)} bytes at {relative}")
        return relative

    def exists(self, path: Optional[str]) -> bool:
        if not path:
            return False
        try:
            return self._resolve(path).is_file()
        except ValueError:
            return False

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def delete(self, path: Optional[str]) -> None:
        if not self.exists(path):
            return
        self._resolve(path).unlink()
        logger.info(f"🗑️ STORAGE: deleted {path}")

    @staticmethod
    def mime_type(path: str) -> str:
        mime, _ = mimetypes.guess_type(path)
        return mime or "application/octet-stream"
