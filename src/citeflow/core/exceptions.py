"""citeflow exception hierarchy."""

from __future__ import annotations


class CiteflowError(Exception):
    """Base exception for all citeflow errors."""


class ConfigurationError(CiteflowError):
    """Startup configuration is missing or malformed."""


class StageError(CiteflowError):
    """A pipeline stage failed; aborts processing of the current message only."""


class DecodeError(StageError):
    """Queue message body is not a valid work payload."""


class FetchError(StageError):
    """Document could not be retrieved from object storage."""

    def __init__(self, bucket: str, key: str, message: str) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(f"s3://{bucket}/{key}: {message}")


class ObjectNotFoundError(FetchError):
    """Bucket or key does not exist."""


class ObjectTransferError(FetchError):
    """Storage backend rejected or failed the request."""


class ObjectReadError(FetchError):
    """Response stream could not be fully drained."""


class ExtractionServiceError(StageError):
    """Extraction service (GROBID) call failed."""


class MalformedResponseError(StageError):
    """External service returned a payload that could not be tidied."""


class EnrichmentServiceError(StageError):
    """Enrichment service (CrossRef) lookup failed."""


class ExtensionError(CiteflowError):
    """Visibility extension request failed. Non-fatal."""


class CacheError(CiteflowError):
    """Redis cache operation failed."""
