"""Dependency injection container for the whale count service."""

from dependency_injector import containers, providers

from whalecount.config.manager import get_config
from whalecount.database.core import CoreDatabaseService
from whalecount.ingest.fetcher import HtmlFetcher
from whalecount.ingest.parser import WhaleCountParser
from whalecount.ingest.service import IngestService
from whalecount.reports.store import ReportSnapshotStore
from whalecount.species.catalog import SpeciesCatalogService
from whalecount.species.resolver import SpeciesResolver
from whalecount.system.path_resolver import PathResolver


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Every service is a singleton; the alias index in particular must be shared
    so that a reload is visible to the parser.
    """

    path_resolver = providers.Singleton(PathResolver)

    config = providers.Singleton(
        get_config,
        path_resolver=path_resolver,
    )

    database_path = providers.Factory(
        lambda resolver: resolver.get_database_path(),
        resolver=path_resolver,
    )

    core_database = providers.Singleton(
        CoreDatabaseService,
        db_path=database_path,
    )

    species_catalog = providers.Singleton(
        SpeciesCatalogService,
        database_service=core_database,
    )

    species_resolver = providers.Singleton(
        SpeciesResolver,
        catalog=species_catalog,
    )

    html_fetcher = providers.Singleton(
        HtmlFetcher,
        timeout=config.provided.ingest.timeout_seconds,
    )

    parser = providers.Singleton(
        WhaleCountParser,
        resolver=species_resolver,
    )

    snapshot_store = providers.Singleton(
        ReportSnapshotStore,
        database_service=core_database,
    )

    ingest_service = providers.Singleton(
        IngestService,
        fetcher=html_fetcher,
        parser=parser,
        store=snapshot_store,
        default_url=config.provided.ingest.source_url,
    )


async def initialize_services(container: Container) -> None:
    """Create tables, seed the species catalog if needed and load the alias index."""
    path_resolver = container.path_resolver()
    await container.core_database().initialize()
    await container.species_catalog().seed_if_empty(path_resolver.get_species_catalog_path())
    await container.species_resolver().reload()
