"""Local filesystem storage for uploaded attachments"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import BinaryIO

from inkwell.config.settings import settings
from inkwell.errors import RecordInvalid

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_SUFFIXES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class MediaStorage:
    """Stores uploads under a root directory and hands back an identifier."""

    def __init__(self, root: str | Path | None = None, max_bytes: int | None = None):
        self.root = Path(root or settings.MEDIA_ROOT)
        self.max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES
        self.allowed_types = {t.strip() for t in settings.ALLOWED_IMAGE_TYPES.split(",") if t.strip()}

    def save(self, stream: BinaryIO, content_type: str | None, *, field: str) -> str:
        """
        Copy an upload into storage

        Raises:
            RecordInvalid: unsupported content type or file too large
        """
        if content_type not in self.allowed_types:
            raise RecordInvalid({field: [f"has unsupported content type {content_type!r}"]})

        self.root.mkdir(parents=True, exist_ok=True)
        identifier = f"{uuid.uuid4().hex}{_SUFFIXES.get(content_type, '')}"
        target = self.root / identifier

        written = 0
        with target.open("wb") as out:
            while chunk := stream.read(CHUNK_SIZE):
                written += len(chunk)
                if written > self.max_bytes:
                    break
                out.write(chunk)

        if written > self.max_bytes:
            target.unlink(missing_ok=True)
            raise RecordInvalid({field: [f"is too large (maximum is {self.max_bytes} bytes)"]})

        logger.info(f"Stored upload {identifier} ({written} bytes)")
        return identifier

    def delete(self, identifier: str | None) -> None:
        if not identifier:
            return
        (self.root / identifier).unlink(missing_ok=True)

    def path_for(self, identifier: str) -> Path:
        return self.root / identifier
