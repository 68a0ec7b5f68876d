"""Database models for the reports domain."""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from whalecount.database.model_utils import GUID, enum_values, utc_now


class ReportStatus(str, Enum):
    """Outcome of a day on the water."""

    OK = "ok"
    BAD_WEATHER = "bad_weather"


class DailyReport(SQLModel, table=True):
    """One row per calendar date published on the source page.

    Only rewritten when the checksum of the day's canonical form changes;
    ``version`` counts those rewrites.
    """

    __tablename__: str = "daily_report"  # type: ignore[assignment]

    report_date: date = Field(sa_column=Column(Date, primary_key=True))
    tours: int = Field(sa_column=Column(Integer, nullable=False))
    status: ReportStatus = Field(
        sa_column=Column(
            SAEnum(ReportStatus, name="report_status", values_callable=enum_values),
            nullable=False,
        )
    )
    fetched_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    source_url: str = Field(sa_column=Column(String(500), nullable=False))
    checksum: uuid.UUID = Field(sa_column=Column(GUID, nullable=False))
    version: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    __table_args__ = (CheckConstraint("tours >= 0", name="ck_daily_report_tours"),)


class Observation(SQLModel, table=True):
    """Individuals of one species counted on one date.

    The rows for a date form a snapshot that is always replaced as a whole.
    """

    __tablename__: str = "observation"  # type: ignore[assignment]

    report_date: date = Field(
        sa_column=Column(
            Date,
            ForeignKey("daily_report.report_date", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    species_id: str = Field(
        sa_column=Column(
            String(64),
            ForeignKey("species.id", ondelete="RESTRICT"),
            primary_key=True,
        )
    )
    individuals: int = Field(sa_column=Column(Integer, nullable=False))

    __table_args__ = (
        CheckConstraint("individuals >= 0", name="ck_observation_individuals"),
        Index("ix_observation_species", "species_id"),
        Index("ix_observation_species_date", "species_id", "report_date"),
    )
