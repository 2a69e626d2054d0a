"""Tests for the GROBID extraction client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from citeflow.core.exceptions import ExtractionServiceError
from citeflow.services.grobid_client import GrobidClient


def _mock_resp(status_code: int = 200, text: str = "<TEI/>") -> MagicMock:
    """Return a mock requests.Response."""
    mock = MagicMock()
    mock.status_code = status_code
    mock.text = text
    mock.headers = {"Content-Type": "application/xml;charset=UTF-8"}
    return mock


def test_extract_posts_document_to_header_endpoint() -> None:
    client = GrobidClient(base_url="http://grobid:8070/", timeout=5)
    with patch("citeflow.services.grobid_client.requests.post", return_value=_mock_resp()) as mock_post:
        result = client.extract(b"%PDF")

    assert result.content == "<TEI/>"
    assert result.status_code == 200
    args, kwargs = mock_post.call_args
    assert args[0] == "http://grobid:8070/api/processHeaderDocument"
    assert kwargs["files"]["input"][1] == b"%PDF"
    assert kwargs["timeout"] == 5
    assert kwargs["data"]["consolidateHeader"] == "0"


def test_consolidate_header_flag_is_sent() -> None:
    client = GrobidClient(consolidate_header=True)
    with patch("citeflow.services.grobid_client.requests.post", return_value=_mock_resp()) as mock_post:
        client.extract(b"%PDF")
    assert mock_post.call_args.kwargs["data"]["consolidateHeader"] == "1"


def test_network_failure_raises_service_error() -> None:
    client = GrobidClient()
    with patch("citeflow.services.grobid_client.requests.post",
               side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ExtractionServiceError):
            client.extract(b"%PDF")


@pytest.mark.parametrize("status", [204, 500, 503])
def test_non_200_raises_service_error(status: int) -> None:
    client = GrobidClient()
    with patch("citeflow.services.grobid_client.requests.post", return_value=_mock_resp(status, "busy")):
        with pytest.raises(ExtractionServiceError, match=str(status)):
            client.extract(b"%PDF")


def test_empty_document_is_not_submitted() -> None:
    client = GrobidClient()
    with patch("citeflow.services.grobid_client.requests.post") as mock_post:
        with pytest.raises(ExtractionServiceError):
            client.extract(b"")
    mock_post.assert_not_called()
