"""
Object storage gateway for job photos.

Uploads are two-phase: the API hands out a presigned PUT URL, the browser
uploads directly to the bucket, then the client records the photo. The API
never proxies image bytes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from flockfur.core import exceptions


logger = logging.getLogger(__name__)


class StorageGateway(ABC):
    @abstractmethod
    def get_upload_url(self, key: str, content_type: str) -> str:
        """Return a presigned URL accepting a single PUT of ``key``."""

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """Return the URL the stored object is served from."""


class S3StorageGateway(StorageGateway):
    """
    S3 implementation.

    Credentials fall back to the standard AWS provider chain when not set
    explicitly.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        expires_in: int = 3600,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ) -> None:
        self._bucket = bucket
        self._region = region
        self._expires_in = expires_in
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            # newer buckets accept SigV4 presigned URLs only
            config=Config(signature_version="s3v4"),
        )

    def get_upload_url(self, key: str, content_type: str) -> str:
        try:
            return self._client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=self._expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Presigned URL generation failed for {key}: {e}")
            raise exceptions.external_service_error("storage", str(e))

    def get_public_url(self, key: str) -> str:
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"
