"""Client side of the direct-upload flow.

Asks the API for a presigned grant, then writes the bytes straight to object
storage. Both steps are single attempts; failures surface as exceptions.
"""
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

_UPLOAD_URL_PATH = "/api/upload-url"


@dataclass(frozen=True)
class UploadGrant:
    upload_url: str
    key: str
    expires_in: int | None = None
    upload_method: str = "PUT"
    upload_headers: dict[str, str] = field(default_factory=dict)


class UploadGrantError(RuntimeError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Upload URL request failed ({status_code}): {message}")
        self.status_code = status_code
        self.message = message


class UploadRejectedError(RuntimeError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Object storage rejected upload ({status_code})")
        self.status_code = status_code
        self.body = body


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return response.text


class DirectUploadClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def __enter__(self) -> DirectUploadClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def request_upload_grant(
        self,
        *,
        file_name: str,
        file_type: str,
        file_size: int,
        folder_name: str,
    ) -> UploadGrant:
        response = self._client.post(
            f"{self.base_url}{_UPLOAD_URL_PATH}",
            json={
                "fileName": file_name,
                "fileType": file_type,
                "fileSize": file_size,
                "folderName": folder_name,
            },
        )
        if response.is_error:
            raise UploadGrantError(response.status_code, _error_message(response))

        data = response.json()
        return UploadGrant(
            upload_url=data["uploadUrl"],
            key=data["key"],
            expires_in=data.get("expiresIn"),
            upload_method=data.get("uploadMethod") or "PUT",
            upload_headers=data.get("uploadHeaders") or {"Content-Type": file_type},
        )

    def put_bytes(self, grant: UploadGrant, data: bytes) -> None:
        response = self._client.request(
            grant.upload_method,
            grant.upload_url,
            content=data,
            headers=grant.upload_headers,
        )
        if response.is_error:
            raise UploadRejectedError(response.status_code, response.text)
        logger.debug("Uploaded %d bytes to %s", len(data), grant.key)

    def upload_file(
        self,
        path: str | Path,
        *,
        folder_name: str,
        content_type: str | None = None,
    ) -> UploadGrant:
        file_path = Path(path)
        file_type = content_type or mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        data = file_path.read_bytes()

        grant = self.request_upload_grant(
            file_name=file_path.name,
            file_type=file_type,
            file_size=len(data),
            folder_name=folder_name,
        )
        self.put_bytes(grant, data)
        return grant
