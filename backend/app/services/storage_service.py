"""
Storage Service - Handles file storage in S3/MinIO
Course forms, face captures and candidate photos
With retry logic for resilient operations
"""

import asyncio
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import UpstreamError
from app.core.logging_config import logger

# Errors worth retrying: service-side failures, dropped connections, timeouts
RETRYABLE_ERRORS = (ClientError, BotoCoreError, ConnectionError, TimeoutError)

CONTENT_TYPE_EXTENSIONS = {
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/png": "png",
}


class StorageService:
    """
    Unified storage service supporting S3 and MinIO.

    Objects are written under a folder prefix (course-forms/, faces/,
    candidates/) and addressed by their public URL.
    """

    def __init__(self, max_retries: Optional[int] = None, retry_base_delay: float = 1.0):
        self._client = None
        self._bucket_name = settings.S3_BUCKET_NAME
        self._initialized = False
        self.max_retries = max_retries or settings.STORAGE_MAX_RETRIES
        self.retry_base_delay = retry_base_delay

    def _get_client(self):
        """Lazy initialization of S3/MinIO client"""
        if self._client is None:
            if settings.USE_MINIO:
                self._client = boto3.client(
                    's3',
                    endpoint_url=f"http://{settings.MINIO_ENDPOINT}",
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    config=Config(
                        signature_version='s3v4',
                        s3={'addressing_style': 'path'},
                        connect_timeout=10,
                        read_timeout=30,
                    ),
                    region_name=settings.AWS_REGION
                )
            elif settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                self._client = boto3.client(
                    's3',
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    region_name=settings.AWS_REGION
                )
            else:
                # IAM role credentials (ECS/EC2)
                self._client = boto3.client('s3', region_name=settings.AWS_REGION)
                logger.info("S3 client using IAM role credentials")

            self._ensure_bucket()

        return self._client

    def _ensure_bucket(self):
        """Create bucket if it doesn't exist"""
        if self._initialized:
            return

        try:
            self._client.head_bucket(Bucket=self._bucket_name)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', '')
            if error_code in ['404', 'NoSuchBucket']:
                try:
                    if settings.USE_MINIO or settings.AWS_REGION == 'us-east-1':
                        self._client.create_bucket(Bucket=self._bucket_name)
                    else:
                        self._client.create_bucket(
                            Bucket=self._bucket_name,
                            CreateBucketConfiguration={'LocationConstraint': settings.AWS_REGION}
                        )
                    logger.info(f"Created bucket '{self._bucket_name}'")
                except ClientError as create_error:
                    logger.error(f"Failed to create bucket: {create_error}")
            else:
                logger.error(f"Error checking bucket: {e}")
        except BotoCoreError as e:
            logger.error(f"Error checking bucket: {e}")

        self._initialized = True

    @staticmethod
    def build_key(folder: str, content_type: str, owner: Optional[str] = None) -> str:
        """
        Generate an object key.
        Format: {folder}/{owner}_{random}.{ext}
        """
        extension = CONTENT_TYPE_EXTENSIONS.get(content_type, "bin")
        name = uuid.uuid4().hex
        if owner:
            name = f"{owner}_{name}"
        return f"{folder.strip('/')}/{name}.{extension}"

    def public_url(self, key: str) -> str:
        return f"{settings.storage_base_url}/{key}"

    async def upload_bytes(self, data: bytes, key: str, content_type: str) -> str:
        """
        Upload bytes with retry logic and return the object's URL.

        Retry behavior:
            - Retries on ClientError, BotoCoreError, ConnectionError, TimeoutError
            - Exponential backoff: 1s, 2s, 4s...
            - Raises UpstreamError once every attempt has failed
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                client = self._get_client()
                await asyncio.to_thread(
                    client.put_object,
                    Bucket=self._bucket_name,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
                logger.info(f"[S3-Upload] ✓ Uploaded: {key} ({len(data)} bytes)")
                return self.public_url(key)

            except RETRYABLE_ERRORS as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    delay = self.retry_base_delay * (2 ** attempt)
                    logger.warning(
                        f"[S3-Upload] Attempt {attempt + 1}/{self.max_retries} failed for {key}: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"[S3-Upload] ✗ All {self.max_retries} attempts failed for {key}: {e}")

        raise UpstreamError("storage", f"Upload failed: {last_exception}")


storage_service = StorageService()
