"""Direct Upload API command line tool."""

import json
import logging

import click
from botocore.exceptions import BotoCoreError, ClientError

from upload_api.config import get_cors_allowed_origins, get_log_level
from upload_api.logging_config import configure_logging
from upload_api.services.bucket_policy import (
    apply_bucket_configuration,
    build_bucket_policy,
    build_cors_configuration,
)
from upload_api.services.s3_storage import create_s3_client, ensure_s3_bucket
from upload_api.services.upload_client import (
    DirectUploadClient,
    UploadGrantError,
    UploadRejectedError,
)

logger = logging.getLogger(__name__)


def _resolve_bucket(bucket: str | None) -> str:
    if bucket:
        return bucket
    try:
        return ensure_s3_bucket()
    except ValueError as exc:
        raise click.UsageError(f"{exc}; pass --bucket explicitly") from exc


def _build_policy(bucket: str, prefixes, principal_arn: str | None) -> dict:
    try:
        return build_bucket_policy(bucket, prefixes, principal_arn)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--prefix") from exc


def _build_cors(origins) -> dict:
    try:
        return build_cors_configuration(origins or get_cors_allowed_origins())
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--origin") from exc


@click.group()
def cli():
    """Direct Upload API - presigned uploads to object storage."""
    configure_logging(get_log_level())


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("upload_api.main:app", host=host, port=port, reload=reload)


@cli.command("bucket-policy")
@click.option("--bucket", help="Bucket name (defaults to S3_BUCKET)")
@click.option("--prefix", "prefixes", multiple=True, required=True, help="Key prefix to allow")
@click.option("--principal-arn", help="Restrict the allow statement to this principal")
def bucket_policy(bucket, prefixes, principal_arn):
    """Print the bucket policy document."""
    policy = _build_policy(_resolve_bucket(bucket), prefixes, principal_arn)
    click.echo(json.dumps(policy, indent=2))


@cli.command()
@click.option("--origin", "origins", multiple=True, help="Allowed origin (defaults to CORS_ALLOWED_ORIGINS)")
def cors(origins):
    """Print the bucket CORS configuration."""
    click.echo(json.dumps(_build_cors(origins), indent=2))


@cli.command()
@click.option("--bucket", help="Bucket name (defaults to S3_BUCKET)")
@click.option("--prefix", "prefixes", multiple=True, required=True, help="Key prefix to allow")
@click.option("--origin", "origins", multiple=True, help="Allowed origin (defaults to CORS_ALLOWED_ORIGINS)")
@click.option("--principal-arn", help="Restrict the allow statement to this principal")
@click.confirmation_option(prompt="Replace the bucket policy and CORS configuration?")
def apply(bucket, prefixes, origins, principal_arn):
    """Push the bucket policy and CORS configuration to the bucket."""
    bucket_name = _resolve_bucket(bucket)
    policy = _build_policy(bucket_name, prefixes, principal_arn)
    cors_config = _build_cors(origins)
    try:
        client = create_s3_client()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        apply_bucket_configuration(client=client, bucket=bucket_name, policy=policy, cors=cors_config)
    except (BotoCoreError, ClientError) as exc:
        logger.exception("Failed to apply bucket configuration to %s", bucket_name)
        raise click.ClickException(f"Failed to apply bucket configuration: {exc}") from exc
    click.echo(f"Applied policy and CORS rules to {bucket_name}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--folder", required=True, help="Folder name to upload under")
@click.option("--api-url", default="http://127.0.0.1:8000", show_default=True)
@click.option("--content-type", help="MIME type (guessed from the file name if omitted)")
def upload(path, folder, api_url, content_type):
    """Upload a file through a presigned URL."""
    with DirectUploadClient(api_url) as client:
        try:
            grant = client.upload_file(path, folder_name=folder, content_type=content_type)
        except (UploadGrantError, UploadRejectedError) as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(grant.key)


if __name__ == "__main__":
    cli()
