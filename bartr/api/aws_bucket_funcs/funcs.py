"""
S3 Utilities — Client Init • Attachment Upload • Presigned Download
===================================================================

Purpose
-------
Small helper module for chat attachments stored in Amazon S3:
- Initialize an S3 client with Signature V4
- Build the object key of an attachment
- Upload a file object (sets ContentType + ContentDisposition)
- Generate a presigned URL for downloads

Configuration (from `bartr.database.config.config.settings`)
------------------------------------------------------------
- AWS_ACCESS_KEY : Access key ID
- AWS_SECRET_KEY : Secret access key
- REGION         : AWS region (e.g., "eu-central-1")
- BUCKET_NAME    : Target S3 bucket

Security Notes
--------------
- Presigned URLs grant temporary access; choose sensible expirations and never
  expose bucket names/keys unnecessarily.
"""

import logging
from datetime import datetime, timezone
from typing import BinaryIO, Optional
from uuid import UUID

import boto3
import botocore

from bartr.database.config.config import settings

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"
DOWNLOAD_EXPIRY_SECONDS = 7 * 24 * 3600


def get_client():
    """
    Initialize and return a low-level S3 client configured for Signature V4.

    Returns:
        botocore.client.S3: An S3 client ready for object operations.

    Raises:
        botocore.exceptions.NoCredentialsError
        botocore.exceptions.PartialCredentialsError
    """
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY or None,
        aws_secret_access_key=settings.AWS_SECRET_KEY or None,
        region_name=settings.REGION or None,
        config=botocore.config.Config(signature_version="s3v4"),
    )


def attachment_key(match_id: UUID, file_name: str, now: Optional[datetime] = None) -> str:
    """
    Object key of a chat attachment: ``files/<match_id>/<timestamp>_<name>``.

    The timestamp is in milliseconds so two uploads of the same name do not
    overwrite each other.
    """
    now = now or datetime.now(timezone.utc)
    safe_name = file_name.replace("/", "_").strip() or "file"
    return f"files/{match_id}/{int(now.timestamp() * 1000)}_{safe_name}"


def upload(fileobj: BinaryIO, key: str, file_name: str, s3_client, content_type: Optional[str] = None) -> None:
    """
    Upload a file object to S3 with explicit headers.

    Args:
        fileobj (BinaryIO): Readable binary stream.
        key (str): Object key (destination path/name in the bucket).
        file_name (str): Name shown when the file is downloaded.
        s3_client (botocore.client.S3): Client returned by `get_client()`.
        content_type (str, optional): MIME type; defaults to octet-stream.

    Raises:
        botocore.exceptions.ClientError, boto3.exceptions.S3UploadFailedError
    """
    fileobj.seek(0)
    s3_client.upload_fileobj(
        fileobj,
        settings.BUCKET_NAME,
        key,
        ExtraArgs={
            "ContentType": content_type or DEFAULT_MIME,
            "ContentDisposition": f'attachment; filename="{file_name}"',
        },
    )
    logger.info("Uploaded %s to bucket %s", key, settings.BUCKET_NAME)


def download(key: str, s3_client, expires: int = DOWNLOAD_EXPIRY_SECONDS) -> str:
    """
    Generate a presigned URL for downloading an object.

    Args:
        key (str): Object key in the bucket.
        s3_client (botocore.client.S3): Client returned by `get_client()`.
        expires (int, optional): URL expiration in seconds.

    Returns:
        str: A presigned URL that allows temporary GET access.
    """
    return s3_client.generate_presigned_url(
        "get_object",
        Params={"Bucket": settings.BUCKET_NAME, "Key": key},
        ExpiresIn=expires,
    )
