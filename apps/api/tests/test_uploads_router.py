import logging
import re

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from upload_api.main import app
from upload_api.routers import uploads as uploads_module

VALID_BODY = {
    "fileName": "a.png",
    "fileType": "image/png",
    "fileSize": 1000,
    "folderName": "services",
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("S3_BUCKET", "uploads-test-bucket")
    monkeypatch.setenv("S3_REGION", "us-east-1")
    monkeypatch.setenv("S3_ACCESS_KEY_ID", "AKIATESTKEY")
    monkeypatch.setenv("S3_SECRET_ACCESS_KEY", "test-secret")
    for name in (
        "S3_SESSION_TOKEN",
        "S3_ENDPOINT_URL",
        "UPLOAD_MAX_FILE_SIZE",
        "UPLOAD_URL_EXPIRES_IN",
        "UPLOAD_ALLOWED_CONTENT_TYPES",
    ):
        monkeypatch.delenv(name, raising=False)
    return TestClient(app)


@pytest.fixture
def forbid_signing(monkeypatch):
    def _fail(**kwargs):
        raise AssertionError("no upload URL should be signed")

    monkeypatch.setattr(uploads_module, "generate_presigned_put_url", _fail)


def test_valid_request_returns_grant(client):
    response = client.post("/api/upload-url", json=VALID_BODY)

    assert response.status_code == 200
    data = response.json()
    assert re.fullmatch(r"services/\d+_a\.png", data["key"])
    assert data["uploadUrl"]
    assert data["key"] in data["uploadUrl"]
    assert "X-Amz-Expires=300" in data["uploadUrl"]
    assert data["expiresIn"] == 300
    assert data["uploadMethod"] == "PUT"
    assert data["uploadHeaders"] == {"Content-Type": "image/png"}


def test_identical_requests_get_distinct_keys(client):
    first = client.post("/api/upload-url", json=VALID_BODY).json()
    second = client.post("/api/upload-url", json=VALID_BODY).json()

    assert first["key"] != second["key"]


@pytest.mark.parametrize("missing_field", ["fileName", "fileType", "fileSize", "folderName"])
def test_missing_field_is_rejected(client, forbid_signing, missing_field):
    body = {name: value for name, value in VALID_BODY.items() if name != missing_field}

    response = client.post("/api/upload-url", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"
    assert response.json()["details"][0]["field"] == missing_field


@pytest.mark.parametrize("blank_value", [None, "", "   "])
def test_null_or_blank_field_counts_as_missing(client, forbid_signing, blank_value):
    response = client.post("/api/upload-url", json={**VALID_BODY, "fileName": blank_value})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"
    assert response.json()["details"][0]["field"] == "fileName"


def test_null_file_size_counts_as_missing(client, forbid_signing):
    response = client.post("/api/upload-url", json={**VALID_BODY, "fileSize": None})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


@pytest.mark.parametrize("bad_size", [True, "1000", -1, 1000.5])
def test_non_integer_file_size_is_invalid(client, forbid_signing, bad_size):
    response = client.post("/api/upload-url", json={**VALID_BODY, "fileSize": bad_size})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"
    assert response.json()["details"][0]["field"] == "fileSize"


def test_empty_body_is_rejected(client, forbid_signing):
    response = client.post("/api/upload-url")

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_oversized_file_is_rejected(client, forbid_signing):
    response = client.post("/api/upload-url", json={**VALID_BODY, "fileSize": 5_242_881})

    assert response.status_code == 400
    assert response.json() == {"error": "File size exceeds 5MB limit"}


def test_file_at_size_limit_is_accepted(client):
    response = client.post("/api/upload-url", json={**VALID_BODY, "fileSize": 5_242_880})

    assert response.status_code == 200


def test_size_limit_follows_configuration(client, forbid_signing, monkeypatch):
    monkeypatch.setenv("UPLOAD_MAX_FILE_SIZE", "1048576")

    response = client.post("/api/upload-url", json={**VALID_BODY, "fileSize": 2_000_000})

    assert response.status_code == 400
    assert response.json() == {"error": "File size exceeds 1MB limit"}


def test_size_limit_that_is_not_whole_megabytes_is_reported_in_bytes(client, forbid_signing, monkeypatch):
    monkeypatch.setenv("UPLOAD_MAX_FILE_SIZE", "1000000")

    response = client.post("/api/upload-url", json={**VALID_BODY, "fileSize": 1_000_001})

    assert response.status_code == 400
    assert response.json() == {"error": "File size exceeds 1000000 bytes limit"}


def test_content_type_allowlist(client, monkeypatch):
    monkeypatch.setenv("UPLOAD_ALLOWED_CONTENT_TYPES", "image/jpeg")

    response = client.post("/api/upload-url", json=VALID_BODY)

    assert response.status_code == 400
    assert response.json() == {"error": "Content type image/png is not allowed"}


def test_folder_traversal_is_flattened(client):
    response = client.post("/api/upload-url", json={**VALID_BODY, "folderName": "../../services"})

    assert response.status_code == 200
    assert re.fullmatch(r"services/\d+_a\.png", response.json()["key"])


def test_folder_without_usable_segments_is_rejected(client, forbid_signing):
    response = client.post("/api/upload-url", json={**VALID_BODY, "folderName": "../.."})

    assert response.status_code == 400
    assert "folderName" in response.json()["error"]


def test_signing_failure_is_logged_and_opaque(client, monkeypatch, caplog):
    def _raise(**kwargs):
        raise ClientError(
            {"Error": {"Code": "InvalidAccessKeyId", "Message": "secret detail"}},
            "PutObject",
        )

    monkeypatch.setattr(uploads_module, "generate_presigned_put_url", _raise)

    with caplog.at_level(logging.ERROR, logger="upload_api.routers.uploads"):
        response = client.post("/api/upload-url", json=VALID_BODY)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate upload URL"}
    assert "secret detail" not in response.text
    assert any("Failed to generate presigned upload URL" in record.message for record in caplog.records)
    assert any(record.exc_info for record in caplog.records)


def test_missing_storage_configuration_is_a_server_error(client, monkeypatch):
    monkeypatch.delenv("S3_BUCKET")

    response = client.post("/api/upload-url", json=VALID_BODY)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate upload URL"}


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "direct-upload-api"}
