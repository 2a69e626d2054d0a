"""Upload a local PDF to S3 and enqueue it for the citeflow workers.

Usage:
    python scripts/enqueue_document.py paper.pdf --bucket citeflow-documents \
        --queue-url http://localhost:4566/000000000000/citeflow --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import boto3


def build_message_body(key: str, user_id: str, screen_id: str) -> str:
    """Serialize the work payload the workers expect."""
    return json.dumps({"s3Location": key, "user_id": user_id, "screen_id": screen_id})


def ensure_bucket(s3: Any, bucket: str) -> None:
    """Create the bucket if it does not exist yet."""
    existing = {b["Name"] for b in s3.list_buckets().get("Buckets", [])}
    if bucket in existing:
        print(f"  Bucket {bucket} already exists, skipping")
        return
    s3.create_bucket(Bucket=bucket)
    print(f"  Created bucket {bucket}")


def enqueue_document(
    s3: Any, sqs: Any, *, path: Path, bucket: str, queue_url: str,
    user_id: str, screen_id: str, prefix: str = "docs/",
) -> str:
    """Upload ``path`` under ``prefix`` and send its message. Returns the SQS MessageId."""
    key = f"{prefix}{path.name}"
    s3.put_object(Bucket=bucket, Key=key, Body=path.read_bytes(), ContentType="application/pdf")
    print(f"  Uploaded s3://{bucket}/{key}")
    resp = sqs.send_message(QueueUrl=queue_url, MessageBody=build_message_body(key, user_id, screen_id))
    print(f"  Sent message {resp['MessageId']}")
    return resp["MessageId"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Enqueue a PDF for citeflow")
    parser.add_argument("pdf", type=Path, help="Local PDF file to upload")
    parser.add_argument("--bucket", required=True, help="Destination S3 bucket")
    parser.add_argument("--queue-url", required=True, help="SQS queue URL the workers consume")
    parser.add_argument("--user-id", default="local-user", help="user_id field of the message")
    parser.add_argument("--screen-id", default="local-screen", help="screen_id field of the message")
    parser.add_argument("--prefix", default="docs/", help="Key prefix for the uploaded object")
    parser.add_argument("--endpoint-url", default=None, help="AWS endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    s3 = boto3.client("s3", **kwargs)
    sqs = boto3.client("sqs", **kwargs)

    print("Preparing bucket...")
    ensure_bucket(s3, args.bucket)

    print("Enqueueing document...")
    enqueue_document(
        s3, sqs, path=args.pdf, bucket=args.bucket, queue_url=args.queue_url,
        user_id=args.user_id, screen_id=args.screen_id, prefix=args.prefix,
    )

    print("Done!")


if __name__ == "__main__":
    main()
