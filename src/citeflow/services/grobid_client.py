"""GROBID client: submits PDF bytes and returns the crude TEI header."""

from __future__ import annotations

import logging

import requests

from citeflow.core.exceptions import ExtractionServiceError
from citeflow.models.documents import CrudeExtractionResult

HEADER_ENDPOINT = "/api/processHeaderDocument"
REQUEST_TIMEOUT_SECONDS = 60

logger = logging.getLogger(__name__)


class GrobidClient:
    """IExtractionClient backed by a GROBID server.

    This is the rate-limited dependency: callers are expected to go through
    the shared RateGate before calling ``extract``.
    """

    def __init__(self, base_url: str = "http://localhost:8070",
                 timeout: int = REQUEST_TIMEOUT_SECONDS, consolidate_header: bool = False) -> None:
        self._url = base_url.rstrip("/") + HEADER_ENDPOINT
        self._timeout = timeout
        self._consolidate_header = consolidate_header

    def extract(self, data: bytes) -> CrudeExtractionResult:
        if not data:
            raise ExtractionServiceError("Refusing to submit an empty document to GROBID")

        logger.debug("Submitting %d bytes to GROBID at %s", len(data), self._url)
        try:
            response = requests.post(
                self._url,
                files={"input": ("document.pdf", data, "application/pdf")},
                data={"consolidateHeader": "1" if self._consolidate_header else "0"},
                headers={"Accept": "application/xml"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ExtractionServiceError(f"GROBID request failed: {exc}") from exc

        # 204 means GROBID could not extract anything from the document.
        if response.status_code != 200:
            raise ExtractionServiceError(
                f"GROBID returned HTTP {response.status_code}: {response.text[:200]}"
            )

        return CrudeExtractionResult(
            content=response.text,
            content_type=response.headers.get("Content-Type", "application/xml"),
            status_code=response.status_code,
        )
