from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from gkv.exceptions import ObjectNotFoundError, StorageError

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


class S3Storage:
    def __init__(
        self,
        client: Any = None,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.prefix = prefix.strip("/")
        if client is None:
            session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
            client = session.client("s3", endpoint_url=endpoint_url)
        self.client = client

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def get_bytes(self, bucket: str, key: str) -> bytes:
        s3_key = self._key(key)
        try:
            response = self.client.get_object(Bucket=bucket, Key=s3_key)
            return response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(
                    f"No such object: s3://{bucket}/{s3_key}", {"bucket": bucket, "key": s3_key}
                ) from exc
            raise self._error("read", bucket, s3_key, exc) from exc
        except BotoCoreError as exc:
            raise self._error("read", bucket, s3_key, exc) from exc

    def put_bytes(self, bucket: str, key: str, data: bytes) -> str:
        s3_key = self._key(key)
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=s3_key,
                Body=data,
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as exc:
            raise self._error("write", bucket, s3_key, exc) from exc
        return f"s3://{bucket}/{s3_key}"

    def delete(self, bucket: str, key: str) -> None:
        # S3 reports success for keys that do not exist
        s3_key = self._key(key)
        try:
            self.client.delete_object(Bucket=bucket, Key=s3_key)
        except (ClientError, BotoCoreError) as exc:
            raise self._error("delete", bucket, s3_key, exc) from exc

    @staticmethod
    def _error(action: str, bucket: str, s3_key: str, exc: Exception) -> StorageError:
        return StorageError(
            f"Failed to {action} s3://{bucket}/{s3_key}: {exc}",
            {"bucket": bucket, "key": s3_key},
        )


__all__ = ["S3Storage"]
