"""Object storage for generated bundles."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from exposure_export.core.settings import Settings
from exposure_export.services.errors import ConfigurationError, StorageError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class ObjectStore(Protocol):
    """Minimal object store contract used by the exporter and sweeper."""

    def put(self, key: str, body: bytes, content_type: str, acl: str = "private") -> None: ...

    def delete(self, key: str) -> None: ...


class S3ObjectStore:
    """Bundle storage backed by an S3-compatible bucket."""

    def __init__(self, bucket: str, client: Any | None = None) -> None:
        """Bind the store to ``bucket``.

        Args:
            bucket: Target bucket name.
            client: Optional preconfigured boto3 S3 client.
        """
        self.bucket = bucket
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> S3ObjectStore:
        if not settings.exports_bucket:
            raise ConfigurationError("EXPORTS_BUCKET is not configured")

        client_kwargs: dict[str, Any] = {
            "service_name": "s3",
            "config": BotoConfig(retries={"max_attempts": 3, "mode": "standard"}),
        }
        if settings.aws_region:
            client_kwargs["region_name"] = settings.aws_region
        if settings.s3_endpoint_url:
            client_kwargs["endpoint_url"] = settings.s3_endpoint_url

        return cls(settings.exports_bucket, client=boto3.client(**client_kwargs))

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("s3")
        return self._client

    def put(self, key: str, body: bytes, content_type: str, acl: str = "private") -> None:
        """Upload ``body`` to ``key``, overwriting any existing object."""
        try:
            self.client.put_object(
                ACL=acl,
                Body=body,
                Bucket=self.bucket,
                ContentType=content_type,
                Key=key,
            )
        except (BotoCoreError, ClientError) as err:
            raise StorageError(f"Upload of {key} failed: {err}", key=key) from err

    def delete(self, key: str) -> None:
        """Delete ``key``; a missing object counts as deleted."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as err:
            code = str(err.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_KEY_CODES:
                logger.debug("object %s already absent from %s", key, self.bucket)
                return
            raise StorageError(f"Delete of {key} failed: {err}", key=key) from err
        except BotoCoreError as err:
            raise StorageError(f"Delete of {key} failed: {err}", key=key) from err
