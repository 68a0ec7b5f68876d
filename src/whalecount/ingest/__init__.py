"""Ingestion pipeline for the Newport whale count page.

Fetcher -> parser (alias index) -> canonical form and checksum -> snapshot store.
"""

from whalecount.ingest.canonical import (
    ParsedObservation,
    ParsedReport,
    build_canonical,
    checksum_from_canonical,
)
from whalecount.ingest.fetcher import FetchError, HtmlFetcher
from whalecount.ingest.parser import ParseResult, ParseStats, WhaleCountParser
from whalecount.ingest.service import IngestError, IngestService, IngestSummary

__all__ = [
    "FetchError",
    "HtmlFetcher",
    "IngestError",
    "IngestService",
    "IngestSummary",
    "ParseResult",
    "ParseStats",
    "ParsedObservation",
    "ParsedReport",
    "WhaleCountParser",
    "build_canonical",
    "checksum_from_canonical",
]
