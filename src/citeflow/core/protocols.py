"""Protocol interfaces for all citeflow collaborators.

The worker core only talks to these Protocols: structural typing,
no inheritance required, easy to swap for in-memory doubles in tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from citeflow.models.documents import (
    CrudeEnrichmentResult,
    CrudeExtractionResult,
    TidyEnrichmentRecord,
    TidyExtractionRecord,
)
from citeflow.models.messages import QueueMessage


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@runtime_checkable
class IObjectFetcher(Protocol):
    """Reads a whole object from bucket-addressed storage."""

    def fetch(self, bucket: str, key: str) -> bytes: ...


# ---------------------------------------------------------------------------
# Work queue
# ---------------------------------------------------------------------------

@runtime_checkable
class IMessageQueue(Protocol):
    """The subset of queue operations the workers invoke."""

    def receive(self, max_messages: int = 10, wait_time_seconds: int = 20) -> list[QueueMessage]: ...

    def extend_visibility(self, receipt_handle: str, seconds: int) -> None: ...


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# External services
# ---------------------------------------------------------------------------

@runtime_checkable
class IExtractionClient(Protocol):
    """Submits a binary document to the extraction service. Rate limited."""

    def extract(self, data: bytes) -> CrudeExtractionResult: ...


@runtime_checkable
class INormalizer(Protocol):
    """Turns crude extraction output into a canonical record."""

    def tidy(self, crude: CrudeExtractionResult) -> TidyExtractionRecord: ...


@runtime_checkable
class IEnrichmentClient(Protocol):
    """Looks up supplementary metadata for a document identifier."""

    def enrich(self, document_identifier: str) -> CrudeEnrichmentResult: ...

    def tidy(self, crude: CrudeEnrichmentResult) -> TidyEnrichmentRecord: ...
