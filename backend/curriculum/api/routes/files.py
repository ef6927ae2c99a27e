import logging
import os
from fastapi import APIRouter, File, Request, UploadFile
from curriculum.core.config import settings
from curriculum.core.response import created
from curriculum.core.errors import AppError
from curriculum.core.storage import FileTooLarge, build_oss_url, is_oss_enabled, save_file_local, save_file_oss, timestamped_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])


def _allowed_exts() -> set[str]:
    return {x.strip().lower().lstrip(".") for x in settings.ALLOWED_IMAGE_EXT.split(",") if x.strip()}


@router.post("/upload")
def upload_image(request: Request, file: UploadFile = File(...)):
    storage_name = timestamped_name(file.filename or "image")
    ext = storage_name.rsplit(".", 1)[-1].lower() if "." in storage_name else ""
    if ext not in _allowed_exts():
        raise AppError(code="FILE_TYPE_NOT_ALLOWED", message="Only image files can be uploaded", status_code=415)

    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    try:
        if is_oss_enabled():
            size = save_file_oss(file.file, storage_name, max_bytes)
            url = build_oss_url(storage_name)
        else:
            size = save_file_local(file.file, os.path.join(settings.UPLOAD_DIR, storage_name), max_bytes)
            url = f"/uploads/{storage_name}"
    except FileTooLarge:
        raise AppError(
            code="FILE_TOO_LARGE",
            message=f"File exceeds {settings.MAX_UPLOAD_MB} MB",
            status_code=413,
        )
    logger.info("Stored upload %s (%d bytes)", storage_name, size)
    return created(request, {"url": url, "filename": storage_name, "size": size})
