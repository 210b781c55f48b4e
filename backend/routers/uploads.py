"""
Image upload endpoint.

POST /api/uploads — reference images for design requests, product photos,
inspiration gallery images. Stores to Cloudflare R2 if configured, otherwise
the local uploads/ directory (served at /uploads).
"""

import uuid
from io import BytesIO
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from .. import models
from ..auth import get_current_user
from ..config import settings

router = APIRouter(prefix="/uploads", tags=["uploads"])

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}
CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
FOLDERS = {"designs", "products", "inspiration", "comments"}


def _extension(filename: str) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def _r2_configured() -> bool:
    return bool(
        settings.CLOUDFLARE_R2_ACCOUNT_ID
        and settings.CLOUDFLARE_R2_ACCESS_KEY_ID
        and settings.CLOUDFLARE_R2_SECRET_ACCESS_KEY
    )


def _upload_to_r2(file_bytes: bytes, key: str, content_type: str) -> str:
    import boto3

    s3 = boto3.client(
        "s3",
        endpoint_url=f"https://{settings.CLOUDFLARE_R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.CLOUDFLARE_R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.CLOUDFLARE_R2_SECRET_ACCESS_KEY,
    )
    s3.upload_fileobj(
        BytesIO(file_bytes),
        settings.CLOUDFLARE_R2_BUCKET,
        key,
        ExtraArgs={"ContentType": content_type},
    )
    return f"https://{settings.CLOUDFLARE_R2_BUCKET}.{settings.CLOUDFLARE_R2_ACCOUNT_ID}.r2.dev/{key}"


def _save_locally(file_bytes: bytes, folder: str, filename: str) -> str:
    upload_dir = Path(settings.UPLOAD_DIR) / folder
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / filename).write_bytes(file_bytes)
    return f"/uploads/{folder}/{filename}"


@router.post("")
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Form("designs"),
    current_user: models.User = Depends(get_current_user),
):
    if folder not in FOLDERS:
        raise HTTPException(status_code=400, detail=f"folder must be one of {sorted(FOLDERS)}")

    ext = _extension(file.filename or "")
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"File type '{ext}' not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )

    file_bytes = await file.read()
    if len(file_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file.")
    if len(file_bytes) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large ({len(file_bytes) / 1024 / 1024:.1f}MB). Maximum is 10MB.",
        )

    filename = f"{current_user.id}_{uuid.uuid4().hex[:12]}.{ext}"
    if _r2_configured():
        url = _upload_to_r2(file_bytes, f"{folder}/{filename}", CONTENT_TYPES[ext])
    else:
        url = _save_locally(file_bytes, folder, filename)

    return {"url": url, "filename": filename}
