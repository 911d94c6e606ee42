from datetime import date
from pathlib import Path
from typing import List, Optional

import typer

from cardshows.domain.errors import ShowQueryError
from cardshows.infra.database import engine_from_url
from cardshows.jobs.import_csv import import_shows_from_csv
from cardshows.migrations.runner import MigrationError, apply_pending
from cardshows.services.coordinate_report import CoordinateReport
from cardshows.services.show_query import ShowQuery, ShowQueryService, parse_features

app = typer.Typer(help="Card Show Finder diagnostics and maintenance")


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


@app.command("shows")
def cli_shows(
    lat: Optional[float] = typer.Option(None, help="Latitude of the search center"),
    lon: Optional[float] = typer.Option(None, help="Longitude of the search center"),
    radius: Optional[float] = typer.Option(None, help="Radius in miles"),
    start_date: Optional[str] = typer.Option(None, help="YYYY-MM-DD"),
    end_date: Optional[str] = typer.Option(None, help="YYYY-MM-DD"),
    keyword: Optional[str] = typer.Option(None, help="Text to look for in title, description, location or address"),
    category: Optional[List[str]] = typer.Option(None, help="Category, repeatable"),
    features: Optional[str] = typer.Option(None, help='JSON object of flags, e.g. {"freeParking": true}'),
    max_fee: Optional[float] = typer.Option(None, help="Maximum entry fee"),
    status: str = typer.Option("active", help="Show status"),
    page: int = typer.Option(1, help="Page number"),
    page_size: int = typer.Option(20, help="Shows per page"),
    strict: bool = typer.Option(False, help="Never fall back to the relaxed query"),
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
):
    """Run the paginated show query and print a readable report."""
    try:
        feature_flags = parse_features(features)
    except ShowQueryError as exc:
        typer.echo(f"{exc.code}: {exc.message}", err=True)
        raise typer.Exit(code=1)
    service = ShowQueryService(engine_from_url(database_url))
    query = ShowQuery(
        lat=lat,
        lon=lon,
        radius_miles=radius,
        start_date=_parse_date(start_date),
        end_date=_parse_date(end_date),
        max_entry_fee=max_fee,
        categories=category or None,
        features=feature_flags,
        keyword=keyword,
        status=status,
        page=page,
        page_size=page_size,
        strict=strict,
    )
    try:
        result = service.get_paginated_shows(query)
    except ShowQueryError as exc:
        typer.echo(f"{exc.code}: {exc.message}", err=True)
        raise typer.Exit(code=1)

    meta = result["pagination"]
    typer.echo(
        f"page {meta['current_page']} of {meta['total_pages']} "
        f"({meta['total_count']} shows, has_more={meta['has_more']})"
    )
    if result.get("relaxed"):
        typer.echo("relaxed: no exact matches, showing status/date matches only")
    if not result["data"]:
        typer.echo("No shows found")
    for show in result["data"]:
        distance = show.get("distance_miles")
        where = f"{distance:.1f} mi" if distance is not None else "-"
        typer.echo(f"{show['start_date'][:10]}\t{where}\t{show['title']}\t{show['id']}")
    for err in result.get("errors", []):
        typer.echo(f"skipped {err['id']}: {err['error']}", err=True)


@app.command("coordinates")
def cli_coordinates(
    page: int = typer.Option(1, help="Page number"),
    page_size: int = typer.Option(50, help="Issues per page"),
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
):
    """List shows whose coordinates keep them out of radius searches."""
    report = CoordinateReport(engine_from_url(database_url))
    result = report.issues(page, page_size)
    if not result["data"]:
        typer.echo("All shows have valid coordinates")
        raise typer.Exit(code=0)
    typer.echo("issue\tshow_id\tlatitude\tlongitude\ttitle")
    for issue in result["data"]:
        typer.echo(
            f"{issue['issue_type']}\t{issue['show_id']}\t{issue['latitude']}\t"
            f"{issue['longitude']}\t{issue['show_title']}"
        )
    meta = result["pagination"]
    typer.echo(f"page {meta['current_page']} of {meta['total_pages']} ({meta['total_count']} issues)")


@app.command("migrate")
def cli_migrate(database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override")):
    try:
        ran = apply_pending(engine_from_url(database_url))
    except MigrationError as exc:
        typer.echo(f"Migration history mismatch: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Applied {len(ran)} migration(s)" if ran else "Schema is up to date")


@app.command("import")
def cli_import(
    data_dir: Path = typer.Option(..., exists=True, file_okay=False, help="Directory holding shows_seed.csv"),
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
):
    count = import_shows_from_csv(data_dir, engine=engine_from_url(database_url))
    typer.echo(f"Imported {count} show(s)")


if __name__ == "__main__":
    app()
