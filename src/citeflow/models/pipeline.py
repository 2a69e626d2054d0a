"""Message processing stages, per-message outcomes, and pool counters."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ProcessingStage(StrEnum):
    RECEIVED = "RECEIVED"
    DECODED = "DECODED"
    FETCHED = "FETCHED"
    THROTTLED = "THROTTLED"
    EXTRACTED = "EXTRACTED"
    NORMALIZED = "NORMALIZED"
    CROSS_REFERENCED = "CROSS_REFERENCED"
    EXTENDED = "EXTENDED"
    DONE = "DONE"
    ABORTED = "ABORTED"


class ProcessingOutcome(BaseModel):
    """Result of running one queue message through the pipeline."""

    message_id: str = ""
    worker_id: int = 0
    stage: ProcessingStage = ProcessingStage.RECEIVED
    failed_stage: ProcessingStage | None = None  # last stage reached before the abort
    error_type: str = ""
    error_details: str = ""
    document_identifier: str = ""
    extended: bool = False
    throttle_wait_seconds: float = 0.0
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.stage == ProcessingStage.DONE


class PoolStats(BaseModel):
    """Aggregate counters across all workers of a pool."""

    received: int = 0
    completed: int = 0
    aborted: int = 0
    extension_failures: int = 0
    crashed: int = 0  # unexpected exceptions escaping the processor
    aborted_by_stage: dict[str, int] = Field(default_factory=dict)
