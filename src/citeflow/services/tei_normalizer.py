"""Normalize GROBID TEI XML into a TidyExtractionRecord."""

from __future__ import annotations

import re
from xml.etree import ElementTree as ET

from citeflow.core.exceptions import MalformedResponseError
from citeflow.models.documents import Author, CrudeExtractionResult, TidyExtractionRecord

TEI_NS = {"tei": "http://www.tei-c.org/ns/1.0"}

_DOI_PREFIX = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)
_DOI_SHAPE = re.compile(r"^10\.\d+(?:\.\d+)*/\S+$")
_WHITESPACE = re.compile(r"\s+")


def normalize_doi(raw: str) -> str:
    """Strip resolver prefixes and lower-case a DOI. Returns "" if it is not DOI-shaped."""
    doi = _DOI_PREFIX.sub("", raw.strip()).strip().lower()
    return doi if _DOI_SHAPE.match(doi) else ""


def _text(element: ET.Element | None) -> str:
    if element is None:
        return ""
    return _WHITESPACE.sub(" ", "".join(element.itertext())).strip()


class TeiNormalizer:
    """INormalizer for GROBID ``processHeaderDocument`` output."""

    def tidy(self, crude: CrudeExtractionResult) -> TidyExtractionRecord:
        try:
            root = ET.fromstring(crude.content)
        except ET.ParseError as exc:
            raise MalformedResponseError(f"Extraction result is not valid XML: {exc}") from exc

        header = root.find("tei:teiHeader", TEI_NS)
        if header is None:
            raise MalformedResponseError("Extraction result has no teiHeader")

        doi = self._doi(header)
        if not doi:
            raise MalformedResponseError("Extraction result carries no DOI")

        return TidyExtractionRecord(
            document_identifier=doi,
            title=_text(header.find("tei:fileDesc/tei:titleStmt/tei:title", TEI_NS)),
            authors=self._authors(header),
            abstract=_text(header.find("tei:profileDesc/tei:abstract", TEI_NS)),
            published=self._published(header),
            keywords=[
                _text(term)
                for term in header.iterfind("tei:profileDesc/tei:textClass/tei:keywords/tei:term", TEI_NS)
                if _text(term)
            ],
        )

    @staticmethod
    def _doi(header: ET.Element) -> str:
        for idno in header.iterfind(".//tei:idno", TEI_NS):
            if idno.get("type", "").upper() == "DOI":
                doi = normalize_doi(_text(idno))
                if doi:
                    return doi
        return ""

    @staticmethod
    def _authors(header: ET.Element) -> list[Author]:
        authors = []
        for author in header.iterfind(
            "tei:fileDesc/tei:sourceDesc/tei:biblStruct/tei:analytic/tei:author", TEI_NS
        ):
            pers = author.find("tei:persName", TEI_NS)
            if pers is None:
                continue
            given = " ".join(_text(f) for f in pers.iterfind("tei:forename", TEI_NS) if _text(f))
            orcid = next(
                (_text(i) for i in author.iterfind("tei:idno", TEI_NS) if i.get("type", "").upper() == "ORCID"),
                "",
            )
            authors.append(Author(given=given, family=_text(pers.find("tei:surname", TEI_NS)), orcid=orcid))
        return authors

    @staticmethod
    def _published(header: ET.Element) -> str:
        for date in header.iterfind(".//tei:date", TEI_NS):
            if date.get("type") == "published":
                return date.get("when") or _text(date)
        return ""
