from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from coffee_ops.core import config
from coffee_ops.services.uploads import save_image

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("")
def upload_image(image: Optional[UploadFile] = File(None)):
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image provided")

    stored_name = save_image(
        image.file,
        filename=image.filename,
        content_type=image.content_type,
        uploads_dir=config.UPLOADS_DIR,
        max_bytes=config.MAX_UPLOAD_BYTES,
    )
    return {"success": True, "url": f"/uploads/{stored_name}", "fileName": stored_name}
