from upload_api.services.bucket_policy import (
    apply_bucket_configuration,
    build_bucket_policy,
    build_cors_configuration,
)
from upload_api.services.s3_storage import (
    build_object_key,
    create_s3_client,
    ensure_s3_bucket,
    generate_presigned_put_url,
    next_timestamp_ms,
    sanitize_filename,
    sanitize_folder_name,
)
from upload_api.services.upload_client import (
    DirectUploadClient,
    UploadGrant,
    UploadGrantError,
    UploadRejectedError,
)

__all__ = [
    "apply_bucket_configuration",
    "build_bucket_policy",
    "build_cors_configuration",
    "build_object_key",
    "create_s3_client",
    "ensure_s3_bucket",
    "generate_presigned_put_url",
    "next_timestamp_ms",
    "sanitize_filename",
    "sanitize_folder_name",
    "DirectUploadClient",
    "UploadGrant",
    "UploadGrantError",
    "UploadRejectedError",
]
