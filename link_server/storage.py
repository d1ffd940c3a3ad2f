import logging
import uuid
from datetime import datetime
from pathlib import Path

from fastapi import UploadFile

from link_server.config import MEDIA_ROOT, MEDIA_URL
from link_server.errors import InvalidInput

logger = logging.getLogger("link")

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MB
ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def has_upload(file: UploadFile | None) -> bool:
    """Browsers send an empty, unnamed part for an untouched file input."""
    return file is not None and bool(file.filename)


def save_image(file: UploadFile) -> str:
    """Validate an uploaded image, store it under MEDIA_ROOT and return its public URL.

    Blocking; call from sync route handlers, which FastAPI runs in its threadpool.
    """
    ext = ALLOWED_CONTENT_TYPES.get(file.content_type or "")
    if ext is None:
        raise InvalidInput("Unsupported image format. Use JPEG, PNG, WebP, or GIF.")

    content = file.file.read()
    if len(content) == 0:
        raise InvalidInput("Empty file")
    if len(content) > MAX_FILE_SIZE:
        raise InvalidInput("Image too large. Maximum size is 5 MB.")

    now = datetime.utcnow()
    rel_path = f"{now:%Y}/{now:%m}/{uuid.uuid4().hex}{ext}"
    dest = Path(MEDIA_ROOT) / rel_path
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(content)

    logger.info("Image stored", extra={"extra_data": {"path": rel_path, "size": len(content)}})
    return f"{MEDIA_URL.rstrip('/')}/{rel_path}"
