"""Extraction and enrichment records: crude service output and tidy canonical forms."""

from __future__ import annotations

from pydantic import BaseModel, Field

from citeflow.core.types import JsonDict

# CrossRef returns the work metadata as a loosely-typed JSON object.
CrudeEnrichmentResult = JsonDict


class Author(BaseModel):
    """A single contributor as reported by either service."""

    given: str = ""
    family: str = ""
    orcid: str = ""

    model_config = {"str_strip_whitespace": True}

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.given, self.family) if part)


class CrudeExtractionResult(BaseModel):
    """Raw extraction service response (GROBID TEI XML)."""

    content: str
    content_type: str = "application/xml"
    status_code: int = 200


class TidyExtractionRecord(BaseModel):
    """Canonical header metadata extracted from a document."""

    document_identifier: str  # normalized DOI
    title: str = ""
    authors: list[Author] = Field(default_factory=list)
    abstract: str = ""
    published: str = ""  # ISO date as reported, possibly partial (YYYY or YYYY-MM)
    keywords: list[str] = Field(default_factory=list)

    model_config = {"str_strip_whitespace": True}


class TidyEnrichmentRecord(BaseModel):
    """Canonical bibliographic metadata from the reference service."""

    doi: str
    title: str = ""
    container_title: str = ""
    publisher: str = ""
    type: str = ""
    issued: str = ""
    volume: str = ""
    issue: str = ""
    page: str = ""
    url: str = ""
    authors: list[Author] = Field(default_factory=list)
    reference_count: int = 0
    is_referenced_by_count: int = 0

    model_config = {"str_strip_whitespace": True}
