from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from backend.config import get_settings
from backend.utils.auth_aws import s3_client
from backend.utils.time_utils import now_epoch_ms

logger = logging.getLogger(__name__)


class AttachmentStorage:
    """Meeting attachments in S3 (or any S3-compatible store), keyed per user."""

    def __init__(self, bucket: str | None = None, client: Any | None = None):
        self.settings = get_settings()
        self.bucket = bucket or self.settings.s3_bucket_name
        self.client = client or s3_client()

    @staticmethod
    def key_for(user_id: int, filename: str) -> str:
        safe_name = filename.replace("/", "_").strip() or "file"
        return f"{user_id}/{now_epoch_ms()}-{safe_name}"

    @staticmethod
    def owns(user_id: int, key: str) -> bool:
        return key.startswith(f"{user_id}/")

    def upload_file(self, user_id: int, filename: str, body: bytes, content_type: str | None = None) -> str:
        key = self.key_for(user_id, filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError):
            logger.exception("Upload failed for %s", key)
            raise
        return key

    def get_file_url(self, key: str, expires_in: int | None = None) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in or self.settings.presigned_url_ttl,
            )
        except (BotoCoreError, ClientError):
            logger.exception("Presigning failed for %s", key)
            raise

    def delete_file(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError):
            logger.exception("Delete failed for %s", key)
            raise
