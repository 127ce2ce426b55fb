import logging

from fastapi import APIRouter, HTTPException, status

from upload_api.config import (
    get_upload_allowed_content_types,
    get_upload_max_file_size,
    get_upload_url_expires_in,
)
from upload_api.schemas.uploads import UploadUrlRequest, UploadUrlResponse
from upload_api.services.s3_storage import (
    build_object_key,
    create_s3_client,
    ensure_s3_bucket,
    generate_presigned_put_url,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])


_BYTES_PER_MB = 1024 * 1024


def _format_size_limit(max_bytes: int) -> str:
    if max_bytes > 0 and max_bytes % _BYTES_PER_MB == 0:
        return f"{max_bytes // _BYTES_PER_MB}MB"
    return f"{max_bytes} bytes"


@router.post("/upload-url", response_model=UploadUrlResponse)
def create_upload_url(payload: UploadUrlRequest) -> UploadUrlResponse:
    max_file_size = get_upload_max_file_size()
    if payload.fileSize > max_file_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size exceeds {_format_size_limit(max_file_size)} limit",
        )

    allowed_types = get_upload_allowed_content_types()
    if allowed_types and payload.fileType.lower() not in allowed_types:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Content type {payload.fileType} is not allowed",
        )

    try:
        key = build_object_key(payload.folderName, payload.fileName)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    expires_in = get_upload_url_expires_in()
    try:
        bucket = ensure_s3_bucket()
        client = create_s3_client()
        upload_url = generate_presigned_put_url(
            client=client,
            bucket=bucket,
            key=key,
            content_type=payload.fileType,
            expires_in=expires_in,
        )
    except Exception as exc:
        logger.exception("Failed to generate presigned upload URL for key %s", key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate upload URL",
        ) from exc

    logger.info("Issued upload URL for %s (%d bytes, %s)", key, payload.fileSize, payload.fileType)
    return UploadUrlResponse(
        uploadUrl=upload_url,
        key=key,
        expiresIn=expires_in,
        uploadHeaders={"Content-Type": payload.fileType},
    )
