"""S3 document fetcher implementing IObjectFetcher."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from citeflow.core.exceptions import ObjectNotFoundError, ObjectReadError, ObjectTransferError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "404", "NotFound"})


class S3ObjectFetcher:
    """Production IObjectFetcher backed by S3.

    No retries happen here; a failed fetch aborts the message and the queue's
    visibility timeout takes care of redelivery.
    """

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None,
                 client: Any = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        if client is None:
            kwargs: dict = {"region_name": region}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)
        self._client = client

    def fetch(self, bucket: str, key: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(bucket, key, f"object not found ({code})") from exc
            raise ObjectTransferError(bucket, key, f"get_object failed: {exc}") from exc
        except BotoCoreError as exc:
            raise ObjectTransferError(bucket, key, f"get_object failed: {exc}") from exc

        body = resp["Body"]
        try:
            return body.read()
        except (BotoCoreError, OSError) as exc:
            raise ObjectReadError(bucket, key, f"could not read response body: {exc}") from exc
        finally:
            try:
                body.close()
            except (BotoCoreError, OSError) as exc:
                logger.warning("Error closing S3 response body for s3://%s/%s: %s", bucket, key, exc)
