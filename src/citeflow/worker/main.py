"""CLI entrypoint for the citeflow document worker."""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from citeflow.core.config import AppSettings, load_settings
from citeflow.core.exceptions import CacheError, ConfigurationError
from citeflow.core.logging_config import configure_logging
from citeflow.core.protocols import IEnrichmentClient, IExtractionClient
from citeflow.persistence import create_persistence
from citeflow.services.crossref_client import CrossRefClient
from citeflow.services.grobid_client import GrobidClient
from citeflow.services.mock_services import MockEnrichmentClient, MockExtractionClient
from citeflow.services.tei_normalizer import TeiNormalizer
from citeflow.worker.pool import WorkerPool
from citeflow.worker.processor import MessageProcessor
from citeflow.worker.rate_gate import RateGate

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags. Flags override the environment."""
    parser = argparse.ArgumentParser(description="Drain the document queue through GROBID and CrossRef")
    parser.add_argument("--workers", type=int, default=None, help="Number of concurrent workers")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument(
        "--mock-services",
        action="store_true",
        help="Use canned extraction/enrichment responses instead of GROBID and CrossRef",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> AppSettings:
    """Load settings and apply CLI overrides, validating everything up front."""
    settings = load_settings()
    if args.workers is not None:
        if args.workers < 1:
            raise ConfigurationError(f"--workers must be at least 1, got {args.workers}")
        settings.worker.count = args.workers
    if args.log_level is not None:
        settings.log_level = args.log_level
    if args.mock_services:
        settings.worker.services = "mock"
    if not settings.sqs.queue_url:
        raise ConfigurationError("CITEFLOW_SQS_QUEUE_URL is required")
    if not settings.s3.bucket:
        raise ConfigurationError("CITEFLOW_S3_BUCKET is required")
    return settings


def build_pool(settings: AppSettings) -> WorkerPool:
    """Wire backends, service clients, the shared gate and the processor into a pool."""
    fetcher, message_queue, cache = create_persistence(settings)
    if cache is not None:
        try:
            cache.ping()
        except CacheError as exc:
            logger.warning("Redis unavailable, CrossRef lookups will not be cached: %s", exc)
            cache = None

    extractor: IExtractionClient
    enricher: IEnrichmentClient
    if settings.worker.services == "mock":
        extractor = MockExtractionClient()
        enricher = MockEnrichmentClient()
    else:
        extractor = GrobidClient(
            base_url=settings.grobid.base_url,
            timeout=settings.grobid.timeout,
            consolidate_header=settings.grobid.consolidate_header,
        )
        enricher = CrossRefClient(
            base_url=settings.crossref.base_url,
            mailto=settings.crossref.mailto,
            timeout=settings.crossref.timeout,
            cache=cache,
            cache_ttl=settings.crossref.cache_ttl,
        )

    gate = RateGate(settings.worker.min_gap_seconds, strict=settings.worker.strict_rate_limit)
    processor = MessageProcessor(
        bucket=settings.s3.bucket,
        fetcher=fetcher,
        extractor=extractor,
        normalizer=TeiNormalizer(),
        enricher=enricher,
        queue=message_queue,
        gate=gate,
        visibility_extension_seconds=settings.worker.visibility_extension_seconds,
    )
    return WorkerPool(
        processor,
        message_queue,
        worker_count=settings.worker.count,
        channel_size=settings.worker.channel_size,
        max_messages=settings.sqs.max_messages,
        wait_time_seconds=settings.sqs.wait_time_seconds,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = build_settings(args)
        configure_logging(settings.log_level)
    except (ConfigurationError, ValueError) as exc:
        configure_logging("INFO")
        logger.critical("Startup aborted: %s", exc)
        return EXIT_CONFIG_ERROR

    pool = build_pool(settings)
    signal.signal(signal.SIGTERM, lambda signum, frame: pool.stop())
    logger.info(
        "Starting %d workers (min gap %.3fs, %s rate limit) on %s",
        settings.worker.count,
        settings.worker.min_gap_seconds,
        "strict" if settings.worker.strict_rate_limit else "best-effort",
        settings.sqs.queue_url,
    )
    pool.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
