"""Species catalog access.

The catalog is read in full by the alias index on every reload, and seeded
from the bundled YAML file the first time the service starts on an empty
database.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from whalecount.database.model_utils import utc_now
from whalecount.species.models import SightingGroup, Species

if TYPE_CHECKING:
    from whalecount.database.core import CoreDatabaseService

logger = logging.getLogger(__name__)


def load_catalog_entries(catalog_path: Path) -> list[dict[str, Any]]:
    """Read species entries from a catalog YAML file.

    Raises:
        ValueError: If the file has no ``species`` list
    """
    document = yaml.safe_load(catalog_path.read_text()) or {}
    entries = document.get("species")
    if not isinstance(entries, list):
        raise ValueError(f"Species catalog {catalog_path} must contain a 'species' list")
    return entries


class SpeciesCatalogService:
    """Reads and seeds the species catalog."""

    def __init__(self, database_service: CoreDatabaseService):
        self.database_service = database_service

    async def list_species(self) -> list[Species]:
        """Return every species with its aliases."""
        async with self.database_service.get_async_db() as session:
            try:
                result = await session.execute(select(Species).order_by(Species.id))
                return list(result.scalars().all())
            except SQLAlchemyError:
                logger.exception("Error reading species catalog")
                raise

    async def count_species(self) -> int:
        """Return the number of species in the catalog."""
        async with self.database_service.get_async_db() as session:
            result = await session.execute(select(func.count()).select_from(Species))
            return int(result.scalar_one())

    async def seed(self, entries: Iterable[Mapping[str, Any]]) -> int:
        """Insert or update catalog entries keyed by species id.

        Args:
            entries: Mappings with ``id``, ``group``, ``common_name`` and optional
                ``binomial_name`` / ``aliases``

        Returns:
            Number of entries written
        """
        written = 0
        async with self.database_service.get_async_db() as session:
            try:
                async with session.begin():
                    for entry in entries:
                        values = {
                            "group": SightingGroup(entry["group"]),
                            "common_name": entry["common_name"],
                            "binomial_name": entry.get("binomial_name"),
                            "aliases": [str(alias) for alias in entry.get("aliases") or []],
                        }
                        species = await session.get(Species, entry["id"])
                        if species is None:
                            session.add(Species(id=entry["id"], **values))
                        else:
                            for field, value in values.items():
                                setattr(species, field, value)
                            species.updated_at = utc_now()
                        written += 1
            except SQLAlchemyError:
                logger.exception("Error seeding species catalog")
                raise

        logger.info("Seeded %d species into the catalog", written)
        return written

    async def seed_from_yaml(self, catalog_path: Path) -> int:
        """Seed the catalog from a YAML file."""
        return await self.seed(load_catalog_entries(catalog_path))

    async def seed_if_empty(self, catalog_path: Path) -> int:
        """Seed the bundled catalog only when no species exist yet."""
        if await self.count_species() > 0:
            return 0
        return await self.seed_from_yaml(catalog_path)
