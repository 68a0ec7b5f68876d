"""Extracts daily reports from the Newport whale count page.

The page publishes a "Recent Counts" table with one row per day::

    DATE       | TOURS | MAMMALS VIEWED
    8/12/2025  | 14    | 4 Fin Whales, 1 Mola Mola, 2855 Common Dolphin, 195 Bottlenose
    4/26/2025  | 0     | Bad Weather

Malformed rows and observation segments are dropped and counted in
``ParseStats``; they never abort the page.
"""

import re
import string
from dataclasses import dataclass, field
from datetime import date

import structlog
from bs4 import BeautifulSoup, Tag

from whalecount.ingest.canonical import ParsedObservation, ParsedReport
from whalecount.reports.models import ReportStatus
from whalecount.species.normalizer import normalize
from whalecount.species.resolver import SpeciesResolver

logger = structlog.get_logger(__name__)

RECENT_COUNTS_TITLE = "recent counts"
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
SIGHTINGS_HEADERS = ("mammals viewed", "sightings")
BAD_WEATHER = "bad weather"

DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
TOURS_PATTERN = re.compile(r"^\d+$")
# A comma separates items only when it is not inside a number ("5,130") and
# the next item starts with a count.
ITEM_SPLIT = re.compile(r"(?<!\d)\s*,\s*(?=\d)")
OBSERVATION_PATTERN = re.compile(r"^([\d,]+)\s+(.+)$")
# Counts are stored in 32-bit INTEGER columns.
MAX_COUNT = 2**31 - 1


@dataclass
class ParseStats:
    """Counters for rows and segments dropped while parsing a page."""

    rows_seen: int = 0
    rows_skipped: int = 0
    segments_malformed: int = 0
    segments_bad_count: int = 0
    segments_unresolved: int = 0
    unresolved_labels: list[str] = field(default_factory=list)

    @property
    def segments_dropped(self) -> int:
        return self.segments_malformed + self.segments_bad_count + self.segments_unresolved


@dataclass
class ParseResult:
    reports: list[ParsedReport]
    stats: ParseStats


class WhaleCountParser:
    """Turns the whale count page into ``ParsedReport`` values."""

    def __init__(self, resolver: SpeciesResolver):
        self.resolver = resolver

    def select_counts_table(self, document: BeautifulSoup) -> Tag | None:
        """Find the counts table.

        First looks for a table immediately following a heading that mentions
        "Recent Counts", then for any table whose header cells include date,
        tours and sightings columns.
        """
        for heading in document.find_all(HEADING_TAGS):
            if RECENT_COUNTS_TITLE not in normalize(heading.get_text(" ", strip=True)):
                continue
            sibling = heading.find_next_sibling()
            if isinstance(sibling, Tag) and sibling.name == "table":
                return sibling

        for table in document.find_all("table"):
            headers = {normalize(th.get_text(" ", strip=True)) for th in table.find_all("th")}
            if "date" not in headers or "tours" not in headers:
                continue
            if any(name in header for header in headers for name in SIGHTINGS_HEADERS):
                return table

        return None

    def parse_date(self, text: str | None) -> date:
        """Parse a strict M/D/YYYY date.

        Raises:
            ValueError: If the text is blank or not a valid calendar date
        """
        if text is None or not text.strip():
            raise ValueError("Date string is null or blank")
        match = DATE_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Unable to parse date: {text!r}")
        month, day, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError as e:
            raise ValueError(f"Unable to parse date: {text!r}") from e

    def parse_tours(self, text: str | None) -> int:
        """Parse the non-negative tour count.

        Raises:
            ValueError: If the text is blank or not a whole number
        """
        if text is None or not text.strip():
            raise ValueError("Tours string is null or blank")
        if TOURS_PATTERN.match(text.strip()) is None:
            raise ValueError(f"Unable to parse tours count: {text!r}")
        tours = int(text.strip())
        if tours > MAX_COUNT:
            raise ValueError(f"Unable to parse tours count: {text!r}")
        return tours

    def parse_status(self, description: str | None) -> ReportStatus:
        if description is not None and description.strip().lower() == BAD_WEATHER:
            return ReportStatus.BAD_WEATHER
        return ReportStatus.OK

    def parse_observations(
        self, description: str | None, stats: ParseStats | None = None
    ) -> list[ParsedObservation]:
        """Tokenize a sightings cell into resolved observations.

        Counts for a species named twice in one cell are added together.
        """
        stats = stats if stats is not None else ParseStats()
        text = normalize(description)
        if not text:
            return []

        counts: dict[str, int] = {}
        for segment in ITEM_SPLIT.split(text):
            segment = segment.strip()
            if not segment:
                continue

            match = OBSERVATION_PATTERN.match(segment)
            if match is None:
                stats.segments_malformed += 1
                continue

            try:
                individuals = int(match.group(1).replace(",", ""))
            except ValueError:
                stats.segments_bad_count += 1
                continue
            if individuals > MAX_COUNT:
                stats.segments_bad_count += 1
                continue

            label = match.group(2).strip().rstrip(string.punctuation).strip()
            species_id = self.resolver.resolve(label)
            if species_id is None:
                stats.segments_unresolved += 1
                stats.unresolved_labels.append(label)
                continue

            counts[species_id] = counts.get(species_id, 0) + individuals

        return [ParsedObservation(species_id, n) for species_id, n in counts.items()]

    def parse_page(self, document: BeautifulSoup, source_url: str) -> ParseResult:
        """Parse every data row of the counts table.

        A missing table yields an empty result rather than an error.
        """
        stats = ParseStats()
        table = self.select_counts_table(document)
        if table is None:
            logger.warning("Counts table not found", source_url=source_url)
            return ParseResult([], stats)

        reports: list[ParsedReport] = []
        for row in table.find_all("tr"):
            cells = row.find_all("td")
            if not cells:
                continue  # header row
            stats.rows_seen += 1
            if len(cells) < 3:
                stats.rows_skipped += 1
                continue

            date_text, tours_text, details = (
                cell.get_text(" ", strip=True) for cell in cells[:3]
            )
            try:
                report_date = self.parse_date(date_text)
                tours = self.parse_tours(tours_text)
            except ValueError as e:
                stats.rows_skipped += 1
                logger.debug("Skipping malformed row", reason=str(e))
                continue

            status = self.parse_status(details)
            if status == ReportStatus.BAD_WEATHER:
                observations: list[ParsedObservation] = []
            else:
                observations = self.parse_observations(details, stats)

            reports.append(
                ParsedReport(
                    date=report_date,
                    tours=tours,
                    status=status,
                    observations=tuple(observations),
                    source_url=source_url,
                )
            )

        logger.info(
            "Parsed counts table",
            source_url=source_url,
            reports=len(reports),
            rows_seen=stats.rows_seen,
            rows_skipped=stats.rows_skipped,
            segments_dropped=stats.segments_dropped,
            unresolved_labels=sorted(set(stats.unresolved_labels)),
        )
        return ParseResult(reports, stats)

    def parse(self, document: BeautifulSoup, source_url: str) -> list[ParsedReport]:
        """Parse the page into one report per well-formed row."""
        return self.parse_page(document, source_url).reports
