"""File storage for uploaded images and videos"""

import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile
import structlog

from app.config import settings

logger = structlog.get_logger()

PAYMENT_PROOFS = "payment-proofs"
CHAT_ATTACHMENTS = "chat-attachments"
CATALOG_IMAGES = "catalog-images"

BUCKETS = {PAYMENT_PROOFS, CHAT_ATTACHMENTS, CATALOG_IMAGES}

IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
VIDEO_TYPES = {
    "video/mp4": "mp4",
}


class StorageError(ValueError):
    """Upload rejected (type, size or bucket)"""


@dataclass
class StoredObject:
    path: str
    url: str
    media_type: str  # image, video
    size: int


def public_url(path: str) -> str:
    return f"{settings.storage_public_url.rstrip('/')}/{path}"


async def save_upload(
    bucket: str,
    owner: str,
    upload: UploadFile,
    allow_video: bool = True,
) -> StoredObject:
    """Validate and store an upload at ``<bucket>/<owner>/<uuid>.<ext>``"""
    if bucket not in BUCKETS:
        raise StorageError(f"Unknown bucket: {bucket}")

    content_type = upload.content_type or ""
    if content_type in IMAGE_TYPES:
        media_type = "image"
        extension = IMAGE_TYPES[content_type]
        max_bytes = settings.max_image_bytes
    elif allow_video and content_type in VIDEO_TYPES:
        media_type = "video"
        extension = VIDEO_TYPES[content_type]
        max_bytes = settings.max_video_bytes
    else:
        allowed = "a JPG, PNG or WEBP image" + (" or MP4 video" if allow_video else "")
        raise StorageError(f"Invalid file type, please upload {allowed}")

    data = await upload.read()
    if len(data) > max_bytes:
        raise StorageError(f"File too large, maximum size is {max_bytes // (1024 * 1024)}MB for {media_type}s")
    if not data:
        raise StorageError("Empty file")

    relative_path = f"{bucket}/{owner}/{uuid.uuid4().hex}.{extension}"
    destination = Path(settings.storage_path) / relative_path
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)

    logger.info("Stored upload", bucket=bucket, path=relative_path, size=len(data))

    return StoredObject(
        path=relative_path,
        url=public_url(relative_path),
        media_type=media_type,
        size=len(data),
    )
