"""Upload limits for audio sent to transcription."""
from __future__ import annotations

import logging

from fastapi import HTTPException, UploadFile

from app.core.config import settings

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024

# Browsers disagree on audio MIME types; unknown types are logged, not rejected
ALLOWED_AUDIO_SUBTYPES = frozenset(
    {"webm", "wav", "mpeg", "mp3", "mp4", "ogg", "flac", "x-wav", "x-m4a"}
)


def is_allowed_audio_type(content_type: str | None) -> bool:
    """Return True when the MIME subtype is a known audio format."""
    if not content_type:
        return False
    subtype = content_type.split(";")[0].strip().lower().rpartition("/")[2]
    return subtype in ALLOWED_AUDIO_SUBTYPES


async def read_upload_file_limited(file: UploadFile) -> bytes:
    """Read an uploaded file in chunks enforcing the max size limit.

    Uses file.size when the multipart parser provides it, then enforces the
    limit again while reading.

    Args:
        file: FastAPI upload file instance.

    Returns:
        File content as bytes if within the allowed size limit.

    Raises:
        HTTPException: 413 if the file exceeds the configured size limit.
    """
    max_mb = settings.app.max_upload_size_mb
    max_bytes = max_mb * 1024 * 1024
    too_large = HTTPException(
        status_code=413,
        detail=f"Audio file exceeds maximum size of {max_mb}MB",
    )

    file_size = getattr(file, "size", None)
    if file_size is not None and file_size > max_bytes:
        logger.warning(
            "file_validation.rejected_by_header",
            extra={"file_size": file_size, "max_bytes": max_bytes},
        )
        raise too_large

    size = 0
    chunks: list[bytes] = []
    while chunk := await file.read(_CHUNK_SIZE):
        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "file_validation.rejected_by_chunked_read",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise too_large
        chunks.append(chunk)

    return b"".join(chunks)
