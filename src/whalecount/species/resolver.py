"""In-memory alias index resolving free-text labels to species ids.

The index is rebuilt off to the side on every reload and then published with
a single reference assignment, so concurrent ``resolve`` calls always see
either the complete old map or the complete new one.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from whalecount.species.normalizer import normalize

if TYPE_CHECKING:
    from whalecount.species.catalog import SpeciesCatalogService
    from whalecount.species.models import Species

logger = logging.getLogger(__name__)


def build_alias_index(species: Iterable["Species"]) -> dict[str, str]:
    """Map every normalized, non-blank alias to its species id.

    An alias shared by two species resolves to whichever comes last.
    """
    index: dict[str, str] = {}
    for entry in species:
        for alias in entry.aliases or []:
            if not alias or not alias.strip():
                continue
            key = normalize(alias)
            previous = index.get(key)
            if previous is not None and previous != entry.id:
                logger.warning(
                    "Alias %r claimed by both %s and %s; using %s", key, previous, entry.id, entry.id
                )
            index[key] = entry.id
    return index


class SpeciesResolver:
    """Resolves observation labels through the published alias index."""

    def __init__(self, catalog: "SpeciesCatalogService"):
        self.catalog = catalog
        self._alias_to_id: Mapping[str, str] = MappingProxyType({})

    @property
    def alias_count(self) -> int:
        """Number of aliases in the currently published index."""
        return len(self._alias_to_id)

    async def reload(self) -> int:
        """Rebuild the index from the full species catalog and publish it.

        Returns:
            Number of aliases in the new index
        """
        species = await self.catalog.list_species()
        index = build_alias_index(species)
        self.publish(index)
        logger.info("Species alias index loaded: %d aliases for %d species", len(index), len(species))
        return len(index)

    def publish(self, index: Mapping[str, str]) -> None:
        """Atomically replace the published index with a frozen copy of ``index``."""
        self._alias_to_id = MappingProxyType(dict(index))

    def resolve(self, raw_label: str | None) -> str | None:
        """Return the species id for a raw label, or None if it is not a known alias.

        A plural label falls back to its singular form ("fin whales" -> "fin whale").
        """
        key = normalize(raw_label)
        if not key:
            return None

        index = self._alias_to_id
        species_id = index.get(key)
        if species_id is None and key.endswith("s"):
            species_id = index.get(key[:-1])
        return species_id
