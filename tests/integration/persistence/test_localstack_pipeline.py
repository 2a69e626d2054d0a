"""Integration: S3 fetch and SQS receive/extend against LocalStack, mock services."""

from __future__ import annotations

import json
import time

from citeflow.persistence.s3_backend import S3ObjectFetcher
from citeflow.persistence.sqs_backend import SQSMessageQueue
from citeflow.services.mock_services import MockEnrichmentClient, MockExtractionClient
from citeflow.services.tei_normalizer import TeiNormalizer
from citeflow.worker.pool import WorkerPool
from citeflow.worker.processor import MessageProcessor
from citeflow.worker.rate_gate import RateGate
from tests.integration.conftest import LOCALSTACK_URL, REGION, skip_no_localstack


@skip_no_localstack
def test_pool_processes_localstack_message(localstack_s3, localstack_sqs, bucket, queue_url):
    localstack_s3.put_object(Bucket=bucket, Key="docs/1.pdf", Body=b"%PDF-1.7")
    localstack_sqs.send_message(
        QueueUrl=queue_url,
        MessageBody=json.dumps({"s3Location": "docs/1.pdf", "user_id": "u1", "screen_id": "s1"}),
    )

    queue = SQSMessageQueue(queue_url=queue_url, region=REGION, endpoint_url=LOCALSTACK_URL)
    extractor = MockExtractionClient(doi="10.1/x")
    processor = MessageProcessor(
        bucket=bucket,
        fetcher=S3ObjectFetcher(region=REGION, endpoint_url=LOCALSTACK_URL),
        extractor=extractor,
        normalizer=TeiNormalizer(),
        enricher=MockEnrichmentClient(),
        queue=queue,
        gate=RateGate(0.0),
    )
    pool = WorkerPool(processor, queue, worker_count=2, wait_time_seconds=1)
    pool.start()
    try:
        deadline = time.monotonic() + 15
        while pool.stats().received < 1 and time.monotonic() < deadline:
            time.sleep(0.1)
    finally:
        pool.stop()

    stats = pool.stats()
    assert stats.completed == 1
    assert stats.extension_failures == 0
    assert extractor.calls == [b"%PDF-1.7"]
