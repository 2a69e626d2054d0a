"""SQS work queue implementing IMessageQueue."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from citeflow.core.exceptions import CiteflowError, ExtensionError
from citeflow.models.messages import QueueMessage


class SQSMessageQueue:
    """Production IMessageQueue backed by an SQS queue URL.

    Messages are never deleted here; only their visibility is extended.
    """

    def __init__(self, queue_url: str, region: str = "us-east-1",
                 endpoint_url: str | None = None, client: Any = None) -> None:
        self._queue_url = queue_url
        self._region = region
        self._endpoint_url = endpoint_url
        if client is None:
            kwargs: dict = {"region_name": region}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("sqs", **kwargs)
        self._client = client

    @property
    def queue_url(self) -> str:
        return self._queue_url

    def receive(self, max_messages: int = 10, wait_time_seconds: int = 20) -> list[QueueMessage]:
        try:
            resp = self._client.receive_message(
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=wait_time_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            raise CiteflowError(f"SQS receive failed for {self._queue_url!r}: {exc}") from exc
        return [
            QueueMessage(
                message_id=msg.get("MessageId", ""),
                body=msg.get("Body", ""),
                receipt_handle=msg["ReceiptHandle"],
            )
            for msg in resp.get("Messages", [])
        ]

    def extend_visibility(self, receipt_handle: str, seconds: int) -> None:
        try:
            self._client.change_message_visibility(
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
                VisibilityTimeout=seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            raise ExtensionError(f"SQS visibility extension failed: {exc}") from exc
