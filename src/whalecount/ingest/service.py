"""Ingest orchestration: fetch, parse, and persist changed days.

Each date is checked and written in its own transaction. A day whose stored
checksum equals the freshly computed one is left untouched, so re-ingesting
an unchanged page performs no writes at all.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from whalecount.config.models import DEFAULT_SOURCE_URL
from whalecount.database.model_utils import utc_now
from whalecount.ingest.canonical import ParsedReport
from whalecount.ingest.fetcher import HtmlFetcher
from whalecount.ingest.parser import ParseStats, WhaleCountParser
from whalecount.reports.models import DailyReport
from whalecount.reports.store import ReportSnapshotStore

logger = structlog.get_logger(__name__)


@dataclass
class IngestSummary:
    """Outcome of one ingest run."""

    source_url: str
    parsed: int = 0
    written: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    stats: ParseStats = field(default_factory=ParseStats)

    @property
    def ok(self) -> bool:
        return not self.failed


class IngestError(Exception):
    """One or more dates could not be persisted during an ingest run."""

    def __init__(self, summary: IngestSummary):
        self.summary = summary
        dates = ", ".join(sorted(summary.failed))
        super().__init__(f"Failed to persist {len(summary.failed)} date(s): {dates}")


class IngestService:
    """Runs the fetch, parse and conditional persist pipeline."""

    def __init__(
        self,
        fetcher: HtmlFetcher,
        parser: WhaleCountParser,
        store: ReportSnapshotStore,
        default_url: str = DEFAULT_SOURCE_URL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.fetcher = fetcher
        self.parser = parser
        self.store = store
        self.default_url = default_url
        self.clock = clock

    async def ingest(self, url: str | None = None) -> IngestSummary:
        """Ingest the page at ``url`` (or the configured source).

        Returns:
            Summary of written, unchanged and failed dates

        Raises:
            FetchError: If the page could not be retrieved; nothing is written
            IngestError: After all dates were attempted, if any failed to persist
        """
        source_url = url or self.default_url
        log = logger.bind(source_url=source_url)

        document = await self.fetcher.fetch(source_url)
        result = self.parser.parse_page(document, source_url)
        summary = IngestSummary(source_url=source_url, parsed=len(result.reports), stats=result.stats)

        if not result.reports:
            log.info("No reports parsed; nothing to ingest")
            return summary

        for report in result.reports:
            day = report.date.isoformat()
            try:
                changed = await self.ingest_report(report)
            except Exception as e:
                summary.failed[day] = str(e)
                log.exception("Failed to persist report", date=day)
                continue

            if changed:
                summary.written.append(day)
            else:
                summary.unchanged.append(day)

        log.info(
            "Ingest finished",
            parsed=summary.parsed,
            written=len(summary.written),
            unchanged=len(summary.unchanged),
            failed=len(summary.failed),
        )

        if summary.failed:
            raise IngestError(summary)
        return summary

    async def ingest_report(self, report: ParsedReport) -> bool:
        """Persist one day if its content changed.

        Returns:
            True if the day was written, False if the stored checksum matched
        """
        checksum = report.checksum
        async with self.store.transaction() as session:
            stored = await self.store.get_checksum(session, report.date)
            if stored == checksum:
                logger.debug("Report unchanged", date=report.date.isoformat())
                return False

            record = DailyReport(
                report_date=report.date,
                tours=report.tours,
                status=report.status,
                fetched_at=self.clock(),
                source_url=report.source_url,
                checksum=checksum,
            )
            rows = await self.store.write_snapshot(session, record, report.observations)

        logger.info(
            "Report written",
            date=report.date.isoformat(),
            status=report.status.value,
            tours=report.tours,
            observations=rows,
            created=stored is None,
        )
        return True
