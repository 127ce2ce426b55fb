"""Declarative bucket-side rules for direct browser uploads.

Storage enforces these, not the API: a resource policy that refuses plaintext
transport and limits writes/reads to known key prefixes, and a CORS rule set
that lets permitted origins PUT straight to the bucket.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence

from botocore.client import BaseClient

logger = logging.getLogger(__name__)

DEFAULT_CORS_METHODS = ("PUT", "GET")


def _normalize_prefix(prefix: str) -> str:
    return prefix.strip().strip("/").strip()


def _object_arn(bucket: str, prefix: str) -> str:
    return f"arn:aws:s3:::{bucket}/{_normalize_prefix(prefix)}/*"


def build_bucket_policy(
    bucket: str,
    prefixes: Iterable[str],
    principal_arn: str | None = None,
) -> dict:
    cleaned_prefixes = [_normalize_prefix(prefix) for prefix in prefixes if _normalize_prefix(prefix)]
    if not cleaned_prefixes:
        raise ValueError("At least one key prefix is required")

    principal: dict | str = {"AWS": principal_arn} if principal_arn else "*"
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "DenyInsecureTransport",
                "Effect": "Deny",
                "Principal": "*",
                "Action": "s3:*",
                "Resource": [
                    f"arn:aws:s3:::{bucket}",
                    f"arn:aws:s3:::{bucket}/*",
                ],
                "Condition": {"Bool": {"aws:SecureTransport": "false"}},
            },
            {
                "Sid": "AllowUploadPrefixes",
                "Effect": "Allow",
                "Principal": principal,
                "Action": ["s3:PutObject", "s3:GetObject"],
                "Resource": [_object_arn(bucket, prefix) for prefix in cleaned_prefixes],
            },
        ],
    }


def build_cors_configuration(
    origins: Iterable[str],
    methods: Sequence[str] = DEFAULT_CORS_METHODS,
    max_age_seconds: int = 3000,
) -> dict:
    allowed_origins = [origin.strip() for origin in origins if origin.strip()]
    if not allowed_origins:
        raise ValueError("At least one allowed origin is required")

    return {
        "CORSRules": [
            {
                "AllowedHeaders": ["*"],
                "AllowedMethods": [method.upper() for method in methods],
                "AllowedOrigins": allowed_origins,
                "ExposeHeaders": ["ETag"],
                "MaxAgeSeconds": max_age_seconds,
            }
        ]
    }


def apply_bucket_configuration(
    *,
    client: BaseClient,
    bucket: str,
    policy: dict,
    cors: dict,
) -> None:
    client.put_bucket_policy(Bucket=bucket, Policy=json.dumps(policy))
    client.put_bucket_cors(Bucket=bucket, CORSConfiguration=cors)
    logger.info(
        "Applied bucket policy (%d statements) and CORS (%d rules) to %s",
        len(policy.get("Statement", [])),
        len(cors.get("CORSRules", [])),
        bucket,
    )
