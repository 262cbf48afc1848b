import boto3
import time
from botocore.exceptions import BotoCoreError, ClientError
from typing import Optional, BinaryIO, Dict, Any, List
from ..config.settings import (
    AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
    AWS_REGION, S3_BUCKET_NAME, S3_BASE_URL
)
from .file_utils import sanitize_filename, sanitize_folder_name
import logging

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the object storage provider rejects or fails a call."""


def missing_storage_vars() -> List[str]:
    required = {
        "AWS_ACCESS_KEY_ID": AWS_ACCESS_KEY_ID,
        "AWS_SECRET_ACCESS_KEY": AWS_SECRET_ACCESS_KEY,
        "AWS_REGION": AWS_REGION,
        "S3_BUCKET_NAME": S3_BUCKET_NAME,
    }
    return [name for name, value in required.items() if not value]


def _build_client():
    missing = missing_storage_vars()
    if missing:
        logger.warning(f"Object storage disabled, missing: {', '.join(missing)}")
        return None
    try:
        client = boto3.client(
            's3',
            aws_access_key_id=AWS_ACCESS_KEY_ID,
            aws_secret_access_key=AWS_SECRET_ACCESS_KEY,
            region_name=AWS_REGION
        )
    except (BotoCoreError, ValueError) as e:
        logger.error(f"Could not build S3 client: {str(e)}")
        return None
    logger.info(f"S3 client ready for bucket {S3_BUCKET_NAME} ({AWS_REGION})")
    return client


s3_client = _build_client()


def _require_client():
    if s3_client is None:
        raise StorageError(
            f"Object storage is not configured. Missing environment variables: {', '.join(missing_storage_vars())}"
        )
    return s3_client


def build_storage_key(college_name: str, course_name: str, file_type: str, filename: str) -> str:
    """Build the object key for an upload.

    Structure: {college}/{course}/{fileType}/{epoch_ms}-{filename}
    The millisecond prefix keeps re-uploads of the same name from overwriting each other.
    """
    folder = "/".join(
        sanitize_folder_name(part) for part in (college_name, course_name, file_type)
    )
    return f"{folder}/{int(time.time() * 1000)}-{sanitize_filename(filename)}"


def public_url(key: str) -> str:
    return f"{S3_BASE_URL}/{key}"


def upload_file_to_s3(file_content: BinaryIO, s3_key: str, content_type: Optional[str] = None) -> str:
    """Store the stream under s3_key and return its public URL"""
    client = _require_client()
    extra_args = {'ContentType': content_type} if content_type else {}
    try:
        client.upload_fileobj(file_content, S3_BUCKET_NAME, s3_key, ExtraArgs=extra_args)
    except (ClientError, BotoCoreError) as e:
        raise StorageError(f"Upload of {s3_key} failed: {str(e)}") from e
    logger.info(f"Stored object {s3_key}")
    return public_url(s3_key)


def delete_file_from_s3(s3_key: str) -> bool:
    client = _require_client()
    try:
        client.delete_object(Bucket=S3_BUCKET_NAME, Key=s3_key)
    except (ClientError, BotoCoreError) as e:
        raise StorageError(f"Delete of {s3_key} failed: {str(e)}") from e
    logger.info(f"Removed object {s3_key}")
    return True


def ping_storage() -> Dict[str, Any]:
    """Verify credentials and bucket access with a HEAD on the bucket."""
    client = _require_client()
    try:
        response = client.head_bucket(Bucket=S3_BUCKET_NAME)
    except ClientError as e:
        code = e.response.get('Error', {}).get('Code')
        if code in ('403', 'AccessDenied'):
            raise StorageError("Invalid AWS credentials or no access to the bucket") from e
        if code in ('404', 'NoSuchBucket'):
            raise StorageError(f"Bucket '{S3_BUCKET_NAME}' does not exist in {AWS_REGION}") from e
        raise StorageError(f"S3 health check failed: {str(e)}") from e
    except BotoCoreError as e:
        raise StorageError(f"S3 health check failed: {str(e)}") from e
    return {
        "bucket": S3_BUCKET_NAME,
        "region": AWS_REGION,
        "status": response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
    }
