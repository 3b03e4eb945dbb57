"""
File Upload Utility - validate resume and image uploads.

Supported resume formats: PDF, DOC, DOCX, TXT
Supported image formats: JPG, JPEG, PNG, WEBP

Max file size comes from settings (max_upload_mb, default 5MB).
"""

from typing import Tuple
from fastapi import UploadFile, HTTPException

from jobboard.core.config import get_settings

RESUME_EXTENSIONS = {'.pdf': 'application/pdf',
                     '.doc': 'application/msword',
                     '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
                     '.txt': 'text/plain'}
IMAGE_EXTENSIONS = {'.jpg': 'image/jpeg', '.jpeg': 'image/jpeg',
                    '.png': 'image/png', '.webp': 'image/webp'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_upload(file: UploadFile, allowed: dict) -> Tuple[bytes, str, str]:
    """
    Read and validate an uploaded file.

    Args:
        file: FastAPI UploadFile
        allowed: extension -> default mime type

    Returns:
        Tuple of (content, filename, mime_type)

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in allowed:
        kinds = ", ".join(sorted(e.lstrip('.').upper() for e in allowed))
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: {kinds}"
        )

    content = await file.read()

    max_mb = get_settings().max_upload_mb
    if len(content) > max_mb * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {max_mb}MB"
        )

    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    mime_type = file.content_type
    if not mime_type or mime_type == "application/octet-stream":
        mime_type = allowed[ext]

    return content, file.filename, mime_type


async def read_resume(file: UploadFile) -> Tuple[bytes, str, str]:
    return await read_upload(file, RESUME_EXTENSIONS)


async def read_image(file: UploadFile) -> Tuple[bytes, str, str]:
    return await read_upload(file, IMAGE_EXTENSIONS)


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "resume_formats": sorted(RESUME_EXTENSIONS),
        "image_formats": sorted(IMAGE_EXTENSIONS),
        "max_size_mb": get_settings().max_upload_mb
    }
