"""Tests for the CrossRef enrichment client."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from citeflow.core.exceptions import CacheError, EnrichmentServiceError, MalformedResponseError
from citeflow.services.crossref_client import CrossRefClient
from tests.fakes import MemoryCacheBackend

WORK = {
    "DOI": "10.1000/XYZ123",
    "title": ["A Study of Things"],
    "container-title": ["Journal of Things"],
    "publisher": "Things Press",
    "type": "journal-article",
    "issued": {"date-parts": [[2021, 3, 7]]},
    "volume": "12",
    "issue": "4",
    "page": "100-110",
    "URL": "https://doi.org/10.1000/xyz123",
    "author": [
        {"given": "Grace", "family": "Hopper", "ORCID": "https://orcid.org/0000-0002-1825-0097"},
        {"name": "The Things Consortium"},
    ],
    "reference-count": 42,
    "is-referenced-by-count": 7,
}


def _mock_resp(status_code: int = 200, payload: object = None) -> MagicMock:
    """Return a mock requests.Response for the given payload."""
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = {"status": "ok", "message": WORK} if payload is None else payload
    return mock


class FailingCache(MemoryCacheBackend):
    def get(self, key):
        raise CacheError("down")

    def setex(self, key, ttl, value):
        raise CacheError("down")


class TestEnrich:
    def test_returns_crossref_message(self) -> None:
        client = CrossRefClient(base_url="https://api.example.org/", mailto="ops@example.org")
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp()) as mock_get:
            message = client.enrich("10.1000/xyz123")

        assert message == WORK
        args, kwargs = mock_get.call_args
        assert args[0] == "https://api.example.org/works/10.1000/xyz123"
        assert kwargs["params"] == {"mailto": "ops@example.org"}
        assert "mailto:ops@example.org" in kwargs["headers"]["User-Agent"]

    def test_not_found_raises_service_error(self) -> None:
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp(404)):
            with pytest.raises(EnrichmentServiceError, match="no record"):
                CrossRefClient().enrich("10.1000/missing")

    def test_server_error_raises_service_error(self) -> None:
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp(503)):
            with pytest.raises(EnrichmentServiceError):
                CrossRefClient().enrich("10.1000/xyz123")

    def test_network_error_raises_service_error(self) -> None:
        with patch("citeflow.services.crossref_client.requests.get",
                   side_effect=requests.Timeout("slow")):
            with pytest.raises(EnrichmentServiceError):
                CrossRefClient().enrich("10.1000/xyz123")

    def test_body_without_message_raises_service_error(self) -> None:
        with patch("citeflow.services.crossref_client.requests.get",
                   return_value=_mock_resp(payload={"status": "ok"})):
            with pytest.raises(EnrichmentServiceError):
                CrossRefClient().enrich("10.1000/xyz123")


class TestCaching:
    def test_second_lookup_served_from_cache(self) -> None:
        cache = MemoryCacheBackend()
        client = CrossRefClient(cache=cache, cache_ttl=120)
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp()) as mock_get:
            first = client.enrich("10.1000/xyz123")
            second = client.enrich("10.1000/xyz123")

        assert first == second == WORK
        assert mock_get.call_count == 1
        assert json.loads(cache.get("crossref:10.1000/xyz123")) == WORK
        assert cache.ttls["crossref:10.1000/xyz123"] == 120

    def test_failures_are_not_cached(self) -> None:
        cache = MemoryCacheBackend()
        client = CrossRefClient(cache=cache)
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp(404)):
            with pytest.raises(EnrichmentServiceError):
                client.enrich("10.1000/missing")
        assert cache.get("crossref:10.1000/missing") is None

    @pytest.mark.parametrize("entry", ["{not json", "[1, 2]", "null"])
    def test_unreadable_cache_entry_falls_back_to_lookup(self, entry) -> None:
        cache = MemoryCacheBackend()
        cache.setex("crossref:10.1/x", 60, entry)
        client = CrossRefClient(cache=cache)
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp()) as mock_get:
            assert client.enrich("10.1/x") == WORK
        assert mock_get.call_count == 1
        assert json.loads(cache.get("crossref:10.1/x")) == WORK

    def test_cache_errors_are_bypassed(self) -> None:
        client = CrossRefClient(cache=FailingCache())
        with patch("citeflow.services.crossref_client.requests.get", return_value=_mock_resp()) as mock_get:
            assert client.enrich("10.1000/xyz123") == WORK
        assert mock_get.call_count == 1


class TestTidy:
    def test_maps_crossref_fields(self) -> None:
        record = CrossRefClient().tidy(WORK)
        assert record.doi == "10.1000/xyz123"
        assert record.title == "A Study of Things"
        assert record.container_title == "Journal of Things"
        assert record.issued == "2021-03-07"
        assert record.reference_count == 42
        assert record.authors[0].orcid == "0000-0002-1825-0097"
        assert record.authors[1].family == "The Things Consortium"

    def test_partial_date(self) -> None:
        record = CrossRefClient().tidy({"DOI": "10.1/x", "issued": {"date-parts": [[2019]]}})
        assert record.issued == "2019"

    def test_missing_date_parts(self) -> None:
        record = CrossRefClient().tidy({"DOI": "10.1/x", "issued": {"date-parts": [[None]]}})
        assert record.issued == ""

    def test_missing_doi_is_malformed(self) -> None:
        with pytest.raises(MalformedResponseError):
            CrossRefClient().tidy({"title": ["No DOI"]})

    def test_wrong_shapes_are_malformed(self) -> None:
        with pytest.raises(MalformedResponseError):
            CrossRefClient().tidy({"DOI": "10.1/x", "author": ["not-an-object"]})
