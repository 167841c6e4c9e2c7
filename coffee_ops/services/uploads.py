from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional
from uuid import uuid4

from coffee_ops.core.errors import BadRequestError

logger = logging.getLogger(__name__)


def save_image(
    stream: BinaryIO,
    *,
    filename: Optional[str],
    content_type: Optional[str],
    uploads_dir: Path,
    max_bytes: int,
) -> str:
    """Validate and store an uploaded image; returns the stored file name."""
    if not (content_type or "").lower().startswith("image/"):
        raise BadRequestError("File must be an image")

    payload = stream.read(max_bytes + 1)
    if len(payload) > max_bytes:
        raise BadRequestError(f"File exceeds {max_bytes // (1024 * 1024)}MB")
    if not payload:
        raise BadRequestError("No image provided")

    suffix = Path(filename or "").suffix.lower()
    stored_name = f"{uuid4().hex}{suffix}"

    uploads_dir.mkdir(parents=True, exist_ok=True)
    path = uploads_dir / stored_name
    with path.open("wb") as buffer:
        buffer.write(payload)

    logger.info("image stored name=%s bytes=%s", stored_name, len(payload))
    return stored_name
