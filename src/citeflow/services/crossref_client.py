"""CrossRef client: looks up work metadata by DOI, with optional caching."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import requests

from citeflow.core.exceptions import CacheError, EnrichmentServiceError, MalformedResponseError
from citeflow.core.protocols import ICacheBackend
from citeflow.core.types import JsonDict
from citeflow.models.documents import Author, CrudeEnrichmentResult, TidyEnrichmentRecord

REQUEST_TIMEOUT_SECONDS = 20
USER_AGENT = "citeflow/0.1.0"

logger = logging.getLogger(__name__)


def _first(values: Any) -> str:
    """CrossRef wraps most scalar fields in single-element lists."""
    if isinstance(values, list):
        return str(values[0]) if values else ""
    return "" if values is None else str(values)


def _issued(message: JsonDict) -> str:
    for field in ("issued", "published-print", "published-online"):
        parts = (message.get(field) or {}).get("date-parts") or []
        if parts and parts[0] and parts[0][0] is not None:
            return "-".join(f"{int(p):02d}" if i else str(int(p)) for i, p in enumerate(parts[0]))
    return ""


class CrossRefClient:
    """IEnrichmentClient backed by the CrossRef REST API."""

    def __init__(self, base_url: str = "https://api.crossref.org", mailto: str = "",
                 timeout: int = REQUEST_TIMEOUT_SECONDS, cache: ICacheBackend | None = None,
                 cache_ttl: int = 86400) -> None:
        self._base_url = base_url.rstrip("/")
        self._mailto = mailto
        self._timeout = timeout
        self._cache = cache
        self._cache_ttl = cache_ttl

    def _headers(self) -> dict[str, str]:
        agent = f"{USER_AGENT} (mailto:{self._mailto})" if self._mailto else USER_AGENT
        return {"User-Agent": agent, "Accept": "application/json"}

    def enrich(self, document_identifier: str) -> CrudeEnrichmentResult:
        cache_key = f"crossref:{document_identifier}"

        # Check cache first
        if self._cache is not None:
            try:
                cached = self._cache.get(cache_key)
            except CacheError as exc:
                logger.warning("Enrichment cache read failed, bypassing: %s", exc)
                cached = None
            if cached is not None:
                try:
                    work = json.loads(cached)
                except ValueError:
                    work = None
                if isinstance(work, dict):
                    logger.debug("CrossRef cache hit for doi=%s", document_identifier)
                    return work
                logger.warning("Ignoring unreadable cache entry for doi=%s", document_identifier)

        url = f"{self._base_url}/works/{quote(document_identifier, safe='/')}"
        params = {"mailto": self._mailto} if self._mailto else None
        try:
            response = requests.get(url, params=params, headers=self._headers(), timeout=self._timeout)
        except requests.RequestException as exc:
            raise EnrichmentServiceError(f"CrossRef request failed for doi={document_identifier}: {exc}") from exc

        if response.status_code == 404:
            raise EnrichmentServiceError(f"CrossRef has no record for doi={document_identifier}")
        if response.status_code != 200:
            raise EnrichmentServiceError(
                f"CrossRef returned HTTP {response.status_code} for doi={document_identifier}"
            )

        try:
            message = response.json()["message"]
        except (ValueError, KeyError, TypeError) as exc:
            raise EnrichmentServiceError(
                f"Unexpected CrossRef response shape for doi={document_identifier}"
            ) from exc
        if not isinstance(message, dict):
            raise EnrichmentServiceError(f"CrossRef message for doi={document_identifier} is not an object")

        # Write to cache
        if self._cache is not None:
            try:
                self._cache.setex(cache_key, self._cache_ttl, json.dumps(message))
            except CacheError as exc:
                logger.warning("Enrichment cache write failed: %s", exc)

        return message

    def tidy(self, crude: CrudeEnrichmentResult) -> TidyEnrichmentRecord:
        doi = crude.get("DOI")
        if not isinstance(doi, str) or not doi:
            raise MalformedResponseError("CrossRef work has no DOI")

        try:
            authors = [
                Author(
                    given=a.get("given", ""),
                    family=a.get("family") or a.get("name", ""),
                    orcid=(a.get("ORCID") or "").rsplit("/", 1)[-1],
                )
                for a in crude.get("author") or []
            ]
            return TidyEnrichmentRecord(
                doi=doi.lower(),
                title=_first(crude.get("title")),
                container_title=_first(crude.get("container-title")),
                publisher=crude.get("publisher") or "",
                type=crude.get("type") or "",
                issued=_issued(crude),
                volume=crude.get("volume") or "",
                issue=crude.get("issue") or "",
                page=crude.get("page") or "",
                url=crude.get("URL") or "",
                authors=authors,
                reference_count=int(crude.get("reference-count") or 0),
                is_referenced_by_count=int(crude.get("is-referenced-by-count") or 0),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"CrossRef work for doi={doi} could not be tidied: {exc}") from exc
