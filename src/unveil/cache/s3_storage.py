"""Object-storage cache backend on S3-compatible services."""

import gzip
import zlib
from typing import Any

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from unveil.cache.disk import ENTRY_SUFFIX, GZIP_LEVEL


logger = structlog.get_logger()

CACHE_CONTROL = "max-age=31536000"
_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3Storage:
    """Gzip objects stored as ``<prefix><cache_id>.gz`` in a bucket.

    Backend errors are logged and reported as absence or a failed write.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "cache/",
        acl: str = "private",
        region: str = "us-east-1",
        access_key: str | None = None,
        secret_key: str | None = None,
        endpoint: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the storage.

        Args:
            bucket: Bucket name.
            prefix: Key prefix for entries.
            acl: Canned ACL applied to new objects.
            region: Bucket region.
            access_key: Access key id; default credential chain when None.
            secret_key: Secret access key.
            endpoint: Custom endpoint for S3-compatible services; enables
                path-style addressing.
            client: Pre-built boto3 client (for testing).
        """
        self._bucket = bucket
        self._prefix = prefix
        self._acl = acl
        self._log = logger.bind(component="cache", backend="s3", bucket=bucket)
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            endpoint_url=endpoint or None,
            config=Config(s3={"addressing_style": "path"}) if endpoint else None,
        )

    def key_for(self, cache_id: str) -> str:
        """Get the object key of an entry."""
        return f"{self._prefix}{cache_id}{ENTRY_SUFFIX}"

    def exists(self, cache_id: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=self.key_for(cache_id))
        except ClientError as e:
            if _error_code(e) not in _MISSING_CODES:
                self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return False
        except BotoCoreError as e:
            self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return False
        return True

    def get(self, cache_id: str) -> bytes | None:
        try:
            response = self._client.get_object(
                Bucket=self._bucket, Key=self.key_for(cache_id)
            )
            payload = response["Body"].read()
        except ClientError as e:
            if _error_code(e) not in _MISSING_CODES:
                self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return None
        except BotoCoreError as e:
            self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return None

        try:
            return gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as e:
            self._log.warning("cache_decode_failed", cache_id=cache_id, error=str(e))
            return None

    def set(self, cache_id: str, content: bytes) -> bool:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=self.key_for(cache_id),
                Body=gzip.compress(content, compresslevel=GZIP_LEVEL),
                ACL=self._acl,
                ContentType="text/html; charset=UTF-8",
                ContentEncoding="gzip",
                CacheControl=CACHE_CONTROL,
            )
        except (ClientError, BotoCoreError) as e:
            self._log.warning("cache_write_failed", cache_id=cache_id, error=str(e))
            return False
        return True


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))
