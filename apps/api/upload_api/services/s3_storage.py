from __future__ import annotations

import re
import threading
import time

import boto3
from botocore.client import BaseClient
from botocore.config import Config

from upload_api.config import (
    get_s3_access_key_id,
    get_s3_bucket,
    get_s3_endpoint_url,
    get_s3_region,
    get_s3_secret_access_key,
    get_s3_session_token,
)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")

_timestamp_lock = threading.Lock()
_last_timestamp_ms = 0


def create_s3_client() -> BaseClient:
    access_key = get_s3_access_key_id()
    secret_key = get_s3_secret_access_key()
    region = get_s3_region()
    endpoint_url = get_s3_endpoint_url() or f"https://s3.{region}.amazonaws.com"
    if not access_key or not secret_key:
        raise ValueError("S3 credentials missing: set S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY")

    return boto3.client(
        "s3",
        region_name=region,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        aws_session_token=get_s3_session_token(),
        endpoint_url=endpoint_url,
        config=Config(signature_version="s3v4"),
    )


def ensure_s3_bucket() -> str:
    bucket = get_s3_bucket()
    if not bucket:
        raise ValueError("S3_BUCKET is not set")
    return bucket


def sanitize_filename(filename: str) -> str:
    cleaned = _UNSAFE_KEY_CHARS.sub("-", filename).strip("-")
    if not cleaned.strip("."):
        return "file"
    return cleaned


def sanitize_folder_name(folder_name: str) -> str:
    """Normalize a client folder into a key prefix that cannot climb upward.

    Returns an empty string when nothing usable is left.
    """
    segments = []
    for raw_segment in folder_name.split("/"):
        segment = _UNSAFE_KEY_CHARS.sub("-", raw_segment).strip("-")
        if not segment.strip("."):
            continue
        segments.append(segment)
    return "/".join(segments)


def next_timestamp_ms() -> int:
    """Epoch milliseconds, strictly increasing within this process."""
    global _last_timestamp_ms
    with _timestamp_lock:
        now_ms = time.time_ns() // 1_000_000
        if now_ms <= _last_timestamp_ms:
            now_ms = _last_timestamp_ms + 1
        _last_timestamp_ms = now_ms
        return now_ms


def build_object_key(folder_name: str, file_name: str, timestamp_ms: int | None = None) -> str:
    prefix = sanitize_folder_name(folder_name)
    if not prefix:
        raise ValueError("folderName must contain at least one usable path segment")
    stamp = next_timestamp_ms() if timestamp_ms is None else timestamp_ms
    return f"{prefix}/{stamp}_{sanitize_filename(file_name)}"


def generate_presigned_put_url(
    *,
    client: BaseClient,
    bucket: str,
    key: str,
    content_type: str,
    expires_in: int = 300,
) -> str:
    return client.generate_presigned_url(
        "put_object",
        Params={
            "Bucket": bucket,
            "Key": key,
            "ContentType": content_type,
        },
        ExpiresIn=expires_in,
        HttpMethod="PUT",
    )
