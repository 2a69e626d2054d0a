"""Pluggable storage, queue and cache backends behind Protocol interfaces."""

from __future__ import annotations

from citeflow.core.config import AppSettings
from citeflow.persistence.redis_backend import RedisCacheBackend
from citeflow.persistence.s3_backend import S3ObjectFetcher
from citeflow.persistence.sqs_backend import SQSMessageQueue


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up backends from application settings.

    Returns:
        Tuple of (object_fetcher, message_queue, cache). ``cache`` is None
        unless Redis is enabled.
    """
    if settings is None:
        settings = AppSettings()

    fetcher = S3ObjectFetcher(
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    message_queue = SQSMessageQueue(
        queue_url=settings.sqs.queue_url,
        region=settings.sqs.region,
        endpoint_url=settings.sqs.endpoint_url,
    )

    cache = None
    if settings.redis.enabled:
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )

    return fetcher, message_queue, cache
