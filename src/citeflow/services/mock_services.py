"""Mock extraction and enrichment services for local development and testing.

Returns canned responses. No network calls.
"""

from __future__ import annotations

import threading
from typing import Any

from citeflow.core.exceptions import EnrichmentServiceError, ExtractionServiceError
from citeflow.models.documents import CrudeEnrichmentResult, CrudeExtractionResult, TidyEnrichmentRecord
from citeflow.services.crossref_client import CrossRefClient

TEI_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<TEI xmlns="http://www.tei-c.org/ns/1.0">
  <teiHeader>
    <fileDesc>
      <titleStmt><title level="a" type="main">{title}</title></titleStmt>
      <sourceDesc>
        <biblStruct>
          <analytic>
            <author><persName><forename type="first">Ada</forename><surname>Lovelace</surname></persName></author>
          </analytic>
          <idno type="DOI">{doi}</idno>
        </biblStruct>
      </sourceDesc>
    </fileDesc>
  </teiHeader>
</TEI>
"""


class MockExtractionClient:
    """IExtractionClient returning a fixed TEI document and recording call times."""

    def __init__(self, doi: str = "10.1000/mock", title: str = "Mock Document",
                 error: Exception | None = None, clock: Any = None) -> None:
        self._content = TEI_TEMPLATE.format(doi=doi, title=title)
        self._error = error
        self._clock = clock
        self._lock = threading.Lock()
        self.calls: list[bytes] = []
        self.call_times: list[float] = []

    def extract(self, data: bytes) -> CrudeExtractionResult:
        with self._lock:
            self.calls.append(data)
            if self._clock is not None:
                self.call_times.append(self._clock())
        if self._error is not None:
            raise self._error
        return CrudeExtractionResult(content=self._content)


class MockEnrichmentClient:
    """IEnrichmentClient returning a canned CrossRef work."""

    def __init__(self, message: dict[str, Any] | None = None, fail: bool = False) -> None:
        self._message = message
        self._fail = fail
        self._tidier = CrossRefClient()
        self.calls: list[str] = []

    def enrich(self, document_identifier: str) -> CrudeEnrichmentResult:
        self.calls.append(document_identifier)
        if self._fail:
            raise EnrichmentServiceError(f"Mock enrichment failure for doi={document_identifier}")
        if self._message is not None:
            return dict(self._message)
        return {
            "DOI": document_identifier,
            "title": ["Mock Document"],
            "publisher": "Mock Press",
            "type": "journal-article",
            "issued": {"date-parts": [[2024, 1, 1]]},
        }

    def tidy(self, crude: CrudeEnrichmentResult) -> TidyEnrichmentRecord:
        return self._tidier.tidy(crude)


def failing_extraction_client(message: str = "GROBID unavailable") -> MockExtractionClient:
    """Convenience factory for a mock whose every call raises ExtractionServiceError."""
    return MockExtractionClient(error=ExtractionServiceError(message))
