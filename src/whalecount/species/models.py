"""Species catalog table model."""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from whalecount.database.model_utils import enum_values, utc_now


class SightingGroup(str, Enum):
    """Broad animal group a species is reported under."""

    WHALE = "whale"
    DOLPHIN = "dolphin"
    SHARK = "shark"
    FISH = "fish"
    OTHER = "other"


class Species(SQLModel, table=True):
    """A species that can appear in a daily count.

    ``id`` is the stable slug observations reference (e.g. ``"humpback-whale"``);
    ``aliases`` holds every free-text spelling the source page uses for it.
    """

    __tablename__: str = "species"  # type: ignore[assignment]

    id: str = Field(sa_column=Column(String(64), primary_key=True))
    group: SightingGroup = Field(
        sa_column=Column(
            "group",
            SAEnum(SightingGroup, name="sighting_group", values_callable=enum_values),
            nullable=False,
            index=True,
        )
    )
    common_name: str = Field(sa_column=Column(String(100), nullable=False))
    binomial_name: str | None = Field(default=None, sa_column=Column(String(100)))
    aliases: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    first_seen: date | None = None
    last_seen: date | None = None
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    def __str__(self) -> str:
        """Return string representation for debugging."""
        return f"{self.common_name} ({self.id})"
