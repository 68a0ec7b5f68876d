from pathlib import Path

import pytest

from whalecount.config import ConfigManager
from whalecount.database.core import CoreDatabaseService
from whalecount.reports.store import ReportSnapshotStore
from whalecount.species.catalog import SpeciesCatalogService
from whalecount.species.resolver import SpeciesResolver
from whalecount.system.path_resolver import PathResolver

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Get the absolute path to the repository root."""
    return Path(__file__).parent.parent.resolve()


@pytest.fixture
def path_resolver(tmp_path: Path) -> PathResolver:
    """Provide a PathResolver whose writable paths live under tmp_path.

    The bundled species catalog is still read from the package.
    """
    resolver = PathResolver()

    temp_data_dir = tmp_path / "data"
    temp_data_dir.mkdir(parents=True)
    temp_database_dir = temp_data_dir / "database"
    temp_config_dir = temp_data_dir / "config"

    resolver.data_dir = temp_data_dir
    resolver.get_data_dir = lambda: temp_data_dir
    resolver.get_database_dir = lambda: temp_database_dir
    resolver.get_database_path = lambda: temp_database_dir / "whalecount.db"
    resolver.get_whalecount_config_path = lambda: temp_config_dir / "whalecount.yaml"
    return resolver


@pytest.fixture
def test_config(path_resolver: PathResolver):
    """Should load the default configuration into the temp config location."""
    return ConfigManager(path_resolver).load()


@pytest.fixture
def catalog_path(path_resolver: PathResolver) -> Path:
    return path_resolver.get_species_catalog_path()


@pytest.fixture
async def database_service(path_resolver: PathResolver):
    """Provide an initialized database in the temp data directory."""
    service = CoreDatabaseService(path_resolver.get_database_path())
    await service.initialize()
    try:
        yield service
    finally:
        await service.dispose()


@pytest.fixture
async def species_catalog(database_service, catalog_path: Path) -> SpeciesCatalogService:
    """Provide a catalog service seeded with the bundled species."""
    catalog = SpeciesCatalogService(database_service)
    await catalog.seed_from_yaml(catalog_path)
    return catalog


@pytest.fixture
async def species_resolver(species_catalog: SpeciesCatalogService) -> SpeciesResolver:
    """Provide an alias index loaded from the seeded catalog."""
    resolver = SpeciesResolver(species_catalog)
    await resolver.reload()
    return resolver


@pytest.fixture
def snapshot_store(database_service) -> ReportSnapshotStore:
    return ReportSnapshotStore(database_service)


@pytest.fixture
def whalecount_html() -> str:
    """Saved copy of the whale count page."""
    return (FIXTURES_DIR / "whalecount.html").read_text(encoding="utf-8")
