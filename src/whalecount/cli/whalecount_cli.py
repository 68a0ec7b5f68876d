"""Command line tools for the whale count service."""

import asyncio
import sys
from datetime import date, datetime
from pathlib import Path

import click

from whalecount.container import Container, initialize_services
from whalecount.ingest.fetcher import FetchError
from whalecount.ingest.service import IngestError, IngestSummary


def _print_summary(summary: IngestSummary) -> None:
    click.echo(f"Source: {summary.source_url}")
    click.echo(f"  Parsed:    {summary.parsed}")
    click.echo(f"  Written:   {len(summary.written)}")
    click.echo(f"  Unchanged: {len(summary.unchanged)}")
    if summary.stats.rows_skipped or summary.stats.segments_dropped:
        click.echo(
            f"  Dropped:   {summary.stats.rows_skipped} rows, "
            f"{summary.stats.segments_dropped} segments"
        )
    for label in sorted(set(summary.stats.unresolved_labels)):
        click.echo(f"  Unresolved label: {label}")
    for day, error in sorted(summary.failed.items()):
        click.echo(click.style(f"  Failed {day}: {error}", fg="red"))


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Newport whale count ingestion tools."""
    ctx.ensure_object(dict)
    if "container" not in ctx.obj:
        ctx.obj["container"] = Container()


@cli.command()
@click.option("--url", default=None, help="Page to ingest instead of the configured source.")
@click.pass_context
def ingest(ctx: click.Context, url: str | None) -> None:
    """Fetch the whale count page and store changed days."""
    container: Container = ctx.obj["container"]
    try:
        summary = asyncio.run(_ingest_async(container, url))
    except FetchError as e:
        click.echo(click.style(f"✗ {e}", fg="red", bold=True), err=True)
        sys.exit(1)
    except IngestError as e:
        _print_summary(e.summary)
        click.echo(click.style(f"✗ {e}", fg="red", bold=True), err=True)
        sys.exit(1)

    _print_summary(summary)


async def _ingest_async(container: Container, url: str | None) -> IngestSummary:
    try:
        await initialize_services(container)
        return await container.ingest_service().ingest(url)
    finally:
        await container.core_database().dispose()


@cli.command("seed-species")
@click.option(
    "--catalog",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Species catalog YAML (defaults to the bundled catalog).",
)
@click.pass_context
def seed_species(ctx: click.Context, catalog: Path | None) -> None:
    """Insert or update species from a catalog file."""
    container: Container = ctx.obj["container"]
    catalog_path = catalog or container.path_resolver().get_species_catalog_path()
    try:
        written = asyncio.run(_seed_species_async(container, catalog_path))
    except ValueError as e:
        click.echo(click.style(f"✗ {e}", fg="red", bold=True), err=True)
        sys.exit(1)

    click.echo(f"Seeded {written} species from {catalog_path}")


async def _seed_species_async(container: Container, catalog_path: Path) -> int:
    try:
        await container.core_database().initialize()
        return await container.species_catalog().seed_from_yaml(catalog_path)
    finally:
        await container.core_database().dispose()


@cli.command()
@click.argument("label")
@click.pass_context
def resolve(ctx: click.Context, label: str) -> None:
    """Show which species a sightings label resolves to."""
    container: Container = ctx.obj["container"]
    species_id = asyncio.run(_resolve_async(container, label))
    if species_id is None:
        click.echo(f"{label!r} does not match any species alias")
        sys.exit(1)
    click.echo(species_id)


async def _resolve_async(container: Container, label: str) -> str | None:
    try:
        await initialize_services(container)
        return container.species_resolver().resolve(label)
    finally:
        await container.core_database().dispose()


@cli.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.pass_context
def show(ctx: click.Context, day: datetime) -> None:
    """Print the stored report for DAY (YYYY-MM-DD)."""
    container: Container = ctx.obj["container"]
    report, observations = asyncio.run(_show_async(container, day.date()))
    if report is None:
        click.echo(f"No report stored for {day.date().isoformat()}")
        sys.exit(1)

    click.echo(f"{report.report_date.isoformat()}  tours={report.tours}  status={report.status.value}")
    click.echo(f"  checksum={report.checksum}  version={report.version}")
    for species_id, individuals in observations.items():
        click.echo(f"  {individuals:>6}  {species_id}")


async def _show_async(container: Container, day: date) -> tuple:
    store = container.snapshot_store()
    try:
        await container.core_database().initialize()
        return await store.get_day(day), await store.get_observations(day)
    finally:
        await container.core_database().dispose()


def main() -> None:
    """Entry point for the whalecount CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
