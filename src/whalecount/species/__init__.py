"""Species domain package.

This package contains all species-related functionality:
- Species / SightingGroup: Catalog table model
- SpeciesCatalogService: Catalog reads and seeding
- SpeciesResolver: Alias index mapping free-text labels to species ids
- normalize: Text normalization shared by alias indexing and label lookup
"""

from whalecount.species.catalog import SpeciesCatalogService
from whalecount.species.models import SightingGroup, Species
from whalecount.species.normalizer import normalize
from whalecount.species.resolver import SpeciesResolver

__all__ = [
    "SightingGroup",
    "Species",
    "SpeciesCatalogService",
    "SpeciesResolver",
    "normalize",
]
