"""MessageProcessor: runs one queue message through fetch, extract, normalize, enrich."""

from __future__ import annotations

import logging
import time

from citeflow.core.exceptions import ExtensionError, StageError
from citeflow.core.protocols import (
    IEnrichmentClient,
    IExtractionClient,
    IMessageQueue,
    INormalizer,
    IObjectFetcher,
)
from citeflow.models.messages import QueueMessage, decode_payload
from citeflow.models.pipeline import ProcessingOutcome, ProcessingStage
from citeflow.worker.rate_gate import RateGate

DEFAULT_VISIBILITY_EXTENSION_SECONDS = 30

logger = logging.getLogger(__name__)


class MessageProcessor:
    """Orchestrates a single delivery through the pipeline stages.

    Stage failures abort only the current message: they are logged and
    reported in the returned outcome, never raised. The message is not
    deleted from the queue; on success its visibility is extended, on
    failure it reappears once its current visibility timeout runs out.
    """

    def __init__(
        self,
        *,
        bucket: str,
        fetcher: IObjectFetcher,
        extractor: IExtractionClient,
        normalizer: INormalizer,
        enricher: IEnrichmentClient,
        queue: IMessageQueue,
        gate: RateGate,
        visibility_extension_seconds: int = DEFAULT_VISIBILITY_EXTENSION_SECONDS,
    ) -> None:
        self._bucket = bucket
        self._fetcher = fetcher
        self._extractor = extractor
        self._normalizer = normalizer
        self._enricher = enricher
        self._queue = queue
        self._gate = gate
        self._visibility_extension_seconds = visibility_extension_seconds

    def process(self, message: QueueMessage, worker_id: int = 0) -> ProcessingOutcome:
        started = time.monotonic()
        outcome = ProcessingOutcome(message_id=message.message_id, worker_id=worker_id)
        try:
            self._run(message, outcome)
        except StageError as exc:
            outcome.failed_stage = outcome.stage
            outcome.stage = ProcessingStage.ABORTED
            outcome.error_type = type(exc).__name__
            outcome.error_details = str(exc)
            logger.error(
                "Worker %d aborted message %s after %s: %s: %s",
                worker_id, message.message_id, outcome.failed_stage, outcome.error_type, exc,
            )
        outcome.duration_ms = int((time.monotonic() - started) * 1000)
        return outcome

    def _run(self, message: QueueMessage, outcome: ProcessingOutcome) -> None:
        payload = decode_payload(message.body)
        outcome.stage = ProcessingStage.DECODED
        logger.info(
            "Worker %d received message %s. Path: %s. User ID: %s. Screen ID: %s",
            outcome.worker_id, message.message_id, payload.storage_location,
            payload.user_id, payload.screen_id,
        )

        document = self._fetcher.fetch(self._bucket, payload.storage_location)
        outcome.stage = ProcessingStage.FETCHED

        # Only the extraction call is rate limited; the gate is stamped
        # right after it whatever the result.
        with self._gate.throttled() as waited:
            outcome.throttle_wait_seconds = waited
            outcome.stage = ProcessingStage.THROTTLED
            crude_extraction = self._extractor.extract(document)
        outcome.stage = ProcessingStage.EXTRACTED

        record = self._normalizer.tidy(crude_extraction)
        outcome.document_identifier = record.document_identifier
        outcome.stage = ProcessingStage.NORMALIZED

        crude_enrichment = self._enricher.enrich(record.document_identifier)
        enrichment = self._enricher.tidy(crude_enrichment)
        outcome.stage = ProcessingStage.CROSS_REFERENCED
        # TODO: merge enrichment into the extraction record once a results sink exists.
        logger.info(
            "Worker %d cross-referenced doi=%s (%s, %s)",
            outcome.worker_id, enrichment.doi, enrichment.type or "unknown type",
            enrichment.container_title or "no container",
        )

        try:
            self._queue.extend_visibility(message.receipt_handle, self._visibility_extension_seconds)
            outcome.extended = True
            outcome.stage = ProcessingStage.EXTENDED
        except ExtensionError as exc:
            logger.warning(
                "Worker %d could not extend visibility of message %s: %s",
                outcome.worker_id, message.message_id, exc,
            )

        outcome.stage = ProcessingStage.DONE
