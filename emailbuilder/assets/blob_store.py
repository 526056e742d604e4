"""Binary object storage backends for uploaded images.

``LocalBlobStore`` keeps files on disk (development and tests);
``S3BlobStore`` talks to any S3-compatible service through boto3.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from emailbuilder.errors import InvalidInput, Unavailable

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful put."""

    key: str
    url: str
    size: int
    content_type: str


def check_key(key: str) -> str:
    """Reject keys that could escape their namespace."""
    if not key or key.startswith("/") or ".." in key.split("/") or "\\" in key:
        raise InvalidInput("Invalid asset key")
    return key


class BlobStore(ABC):
    """Minimal object store interface: put and delete by key."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """Store ``data`` under ``key``, overwriting any previous object."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete ``key``. Returns False if it did not exist."""

    @abstractmethod
    def url_for(self, key: str) -> str:
        """Public URL of ``key``."""


class LocalBlobStore(BlobStore):
    """Filesystem-backed store rooted at a directory."""

    def __init__(self, root: Path | str, base_url: str = "/uploads") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        return self.root / check_key(key)

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write blob {key}: {e}")
            raise Unavailable("Storage unavailable") from e
        return StoredObject(key=key, url=self.url_for(key), size=len(data), content_type=content_type)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete blob {key}: {e}")
            raise Unavailable("Storage unavailable") from e
        return True

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"


class S3BlobStore(BlobStore):
    """S3-compatible object storage (AWS S3, Cloudflare R2, MinIO)."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        public_base_url: str | None = None,
        timeout_seconds: float = 10,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.public_base_url = (public_base_url or "").rstrip("/")
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(
                signature_version="s3v4",
                connect_timeout=timeout_seconds,
                read_timeout=timeout_seconds,
                retries={"max_attempts": 1},
            ),
        )

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        check_key(key)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise Unavailable("Storage unavailable") from e
        logger.info(f"Uploaded {key} ({len(data)} bytes)")
        return StoredObject(key=key, url=self.url_for(key), size=len(data), content_type=content_type)

    def delete(self, key: str) -> bool:
        check_key(key)
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if str(e.response.get("Error", {}).get("Code")) in _MISSING_CODES:
                return False
            logger.error(f"S3 lookup failed for {key}: {e}")
            raise Unavailable("Storage unavailable") from e
        except BotoCoreError as e:
            logger.error(f"S3 lookup failed for {key}: {e}")
            raise Unavailable("Storage unavailable") from e

        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 delete failed for {key}: {e}")
            raise Unavailable("Storage unavailable") from e
        return True

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"
