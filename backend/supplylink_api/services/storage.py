"""Image storage boundary used by material intake."""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Protocol

from fastapi import UploadFile

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}


class ImageStorage(Protocol):
    async def save(self, upload: UploadFile) -> str:
        """Persist an upload and return a reference clients can fetch."""
        ...

    async def discard(self, reference: str) -> None:
        """Remove a stored upload that ended up unused."""
        ...


class LocalImageStorage:
    """Writes uploads under ``root`` and returns ``<base_url>/<name>`` references."""

    def __init__(self, root: str | Path, base_url: str = "/media") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def save(self, upload: UploadFile) -> str:
        filename = upload.filename or ""
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                "Unsupported image format",
                details={"allowed_formats": sorted(ALLOWED_EXTENSIONS)},
            )

        data = await upload.read()
        if not data:
            raise ValidationError("Image is empty")

        self.root.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}.{extension}"
        (self.root / stored_name).write_bytes(data)
        logger.info("Stored image %s (%d bytes)", stored_name, len(data))
        return f"{self.base_url}/{stored_name}"

    async def discard(self, reference: str) -> None:
        prefix = f"{self.base_url}/"
        if not reference.startswith(prefix):
            return
        (self.root / reference[len(prefix):]).unlink(missing_ok=True)
        logger.info("Discarded image %s", reference)
