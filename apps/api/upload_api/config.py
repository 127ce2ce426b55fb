import os
from pathlib import Path

from dotenv import load_dotenv


_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(_ENV_PATH, override=False)

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
DEFAULT_UPLOAD_URL_EXPIRES_IN = 300


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _get_int_env(name: str, default: int) -> int:
    value = _get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _get_list_env(name: str) -> list[str]:
    value = _get_env(name)
    if value is None:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def get_s3_bucket() -> str | None:
    return _get_env("S3_BUCKET")


def get_s3_region() -> str:
    return _get_env("S3_REGION") or "us-east-1"


def get_s3_access_key_id() -> str | None:
    return _get_env("S3_ACCESS_KEY_ID")


def get_s3_secret_access_key() -> str | None:
    return _get_env("S3_SECRET_ACCESS_KEY")


def get_s3_session_token() -> str | None:
    return _get_env("S3_SESSION_TOKEN")


def get_s3_endpoint_url() -> str | None:
    return _get_env("S3_ENDPOINT_URL")


def get_upload_max_file_size() -> int:
    """Largest accepted ``fileSize`` in bytes (5 MB unless overridden)."""
    return _get_int_env("UPLOAD_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE)


def get_upload_url_expires_in() -> int:
    """Lifetime of an issued upload URL in seconds."""
    return _get_int_env("UPLOAD_URL_EXPIRES_IN", DEFAULT_UPLOAD_URL_EXPIRES_IN)


def get_upload_allowed_content_types() -> list[str]:
    """Allowed MIME types, lowercased. Empty means any type is accepted."""
    return [item.lower() for item in _get_list_env("UPLOAD_ALLOWED_CONTENT_TYPES")]


def get_cors_allowed_origins() -> list[str]:
    return _get_list_env("CORS_ALLOWED_ORIGINS") or ["http://localhost:3000"]


def get_log_level() -> str:
    return (_get_env("LOG_LEVEL") or "INFO").upper()
