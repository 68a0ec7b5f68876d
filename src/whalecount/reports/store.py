"""Write side of the daily report snapshot.

A day's parent row is upserted and its observation rows are replaced in the
same transaction, parent first, so readers never see a half-written snapshot.
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from collections.abc import AsyncGenerator, Iterable
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from whalecount.database.model_utils import utc_now
from whalecount.reports.models import DailyReport, Observation

if TYPE_CHECKING:
    from whalecount.database.core import CoreDatabaseService
    from whalecount.ingest.canonical import ParsedObservation

logger = logging.getLogger(__name__)


class ReportSnapshotStore:
    """Persists per-date report snapshots."""

    def __init__(self, database_service: CoreDatabaseService):
        self.database_service = database_service

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session whose work commits on exit and rolls back on error."""
        async with self.database_service.get_async_db() as session:
            async with session.begin():
                yield session

    async def get_checksum(self, session: AsyncSession, report_date: date) -> uuid.UUID | None:
        """Return the stored checksum for a date, or None if the date is new."""
        result = await session.execute(
            select(DailyReport.checksum).where(DailyReport.report_date == report_date)  # type: ignore[arg-type]
        )
        return result.scalar_one_or_none()

    async def upsert_day(self, session: AsyncSession, record: DailyReport) -> None:
        """Insert the day row, or overwrite its content and bump ``version``."""
        now = utc_now()
        stmt = sqlite_insert(DailyReport).values(
            report_date=record.report_date,
            tours=record.tours,
            status=record.status,
            fetched_at=record.fetched_at,
            source_url=record.source_url,
            checksum=record.checksum,
            version=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["report_date"],
            set_={
                "tours": stmt.excluded.tours,
                "status": stmt.excluded.status,
                "fetched_at": stmt.excluded.fetched_at,
                "source_url": stmt.excluded.source_url,
                "checksum": stmt.excluded.checksum,
                "version": DailyReport.version + 1,  # type: ignore[operator]
                "updated_at": now,
            },
        )
        await session.execute(stmt)

    async def replace_observations(
        self,
        session: AsyncSession,
        report_date: date,
        observations: Iterable[ParsedObservation],
    ) -> int:
        """Delete every observation for the date, then insert the new set.

        Returns:
            Number of observation rows inserted
        """
        await session.execute(
            delete(Observation).where(Observation.report_date == report_date)  # type: ignore[arg-type]
        )
        rows = [
            {
                "report_date": report_date,
                "species_id": observation.species_id,
                "individuals": observation.individuals,
            }
            for observation in observations
        ]
        if rows:
            await session.execute(insert(Observation), rows)
        return len(rows)

    async def write_snapshot(
        self,
        session: AsyncSession,
        record: DailyReport,
        observations: Iterable[ParsedObservation],
    ) -> int:
        """Upsert the parent row, then replace its observations."""
        await self.upsert_day(session, record)
        return await self.replace_observations(session, record.report_date, observations)

    async def save_snapshot(
        self, record: DailyReport, observations: Iterable[ParsedObservation]
    ) -> int:
        """Write one day's snapshot in its own transaction."""
        async with self.transaction() as session:
            return await self.write_snapshot(session, record, observations)

    async def get_day(self, report_date: date) -> DailyReport | None:
        """Return the stored day row, if any."""
        async with self.database_service.get_async_db() as session:
            try:
                return await session.get(DailyReport, report_date)
            except SQLAlchemyError:
                logger.exception("Error reading daily report for %s", report_date)
                raise

    async def get_observations(self, report_date: date) -> dict[str, int]:
        """Return the stored snapshot for a date as ``{species_id: individuals}``."""
        async with self.database_service.get_async_db() as session:
            try:
                result = await session.execute(
                    select(Observation.species_id, Observation.individuals)  # type: ignore[call-overload]
                    .where(Observation.report_date == report_date)
                    .order_by(Observation.species_id)
                )
                return {species_id: individuals for species_id, individuals in result.all()}
            except SQLAlchemyError:
                logger.exception("Error reading observations for %s", report_date)
                raise
