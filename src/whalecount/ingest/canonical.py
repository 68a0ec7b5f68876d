"""Parsed report values and their canonical, fingerprintable form.

Observations are sorted by species id before serialization so the canonical
string (and therefore the checksum) does not depend on the order species
appear in the source row.
"""

import hashlib
import json
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from whalecount.reports.models import ReportStatus


@dataclass(frozen=True)
class ParsedObservation:
    """Count of individuals for one resolved species."""

    species_id: str
    individuals: int


def sort_observations(observations: Iterable[ParsedObservation]) -> tuple[ParsedObservation, ...]:
    """Return observations in ascending species id order."""
    return tuple(sorted(observations, key=lambda o: o.species_id))


def build_canonical(
    report_date: date,
    tours: int,
    status: ReportStatus,
    observations: Iterable[ParsedObservation],
) -> str:
    """Serialize a day's content with stable key order and no whitespace.

    Produces e.g.
    ``{"date":"2025-08-12","tours":14,"status":"ok","observations":[{"speciesId":"fin-whale","count":4}]}``
    """
    payload = {
        "date": report_date.isoformat(),
        "tours": tours,
        "status": status.value,
        "observations": [
            {"speciesId": o.species_id, "count": o.individuals}
            for o in sort_observations(observations)
        ],
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def checksum_from_canonical(canonical: str) -> uuid.UUID:
    """Derive a deterministic name-based UUID (version 3) from a canonical string.

    Raises:
        ValueError: If ``canonical`` is None or blank
    """
    if canonical is None or not canonical.strip():
        raise ValueError("Canonical string cannot be null or blank")
    digest = hashlib.md5(canonical.encode("utf-8"), usedforsecurity=False).digest()
    return uuid.UUID(bytes=digest, version=3)


@dataclass(frozen=True)
class ParsedReport:
    """One day's row from the source page, ready for change detection.

    ``observations`` is stored sorted by species id and ``canonical`` is
    computed on construction.
    """

    date: date
    tours: int
    status: ReportStatus
    observations: tuple[ParsedObservation, ...]
    source_url: str
    canonical: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.tours < 0:
            raise ValueError(f"Tours cannot be negative: {self.tours}")
        if self.status == ReportStatus.BAD_WEATHER and self.observations:
            raise ValueError("Bad weather reports cannot carry observations")

        observations = sort_observations(self.observations)
        object.__setattr__(self, "observations", observations)
        object.__setattr__(
            self,
            "canonical",
            build_canonical(self.date, self.tours, self.status, observations),
        )

    @property
    def checksum(self) -> uuid.UUID:
        """Fingerprint of the canonical form."""
        return checksum_from_canonical(self.canonical)
