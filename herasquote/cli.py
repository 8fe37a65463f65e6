"""CLI interface for herasquote."""

import asyncio
import json

import click

from herasquote.catalog import FENCE_OPTIONS, HEIGHT_CHOICES
from herasquote.eligibility import option_views
from herasquote.errors import LookupEmpty, TransportFailure
from herasquote.geocoding import NominatimGeocoder
from herasquote.schemas import parse_height_m
from herasquote.settings import get_settings
from herasquote.tables import create_options_dataframe, create_summary_table, export_to_csv
from herasquote.wind import estimate_wind, normalise_postcode, wind_for_postcode


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Heras quote - site-specific temporary fencing quick setup."""
    pass


@main.command()
@click.argument("postcode")
def wind(postcode: str):
    """Estimate site wind for POSTCODE."""
    if not postcode.strip():
        raise click.BadParameter("postcode must not be blank", param_hint="POSTCODE")
    click.echo(json.dumps(estimate_wind(postcode).model_dump(), indent=2))


@main.command()
@click.option("--postcode", type=str, required=True, help="Site postcode")
@click.option(
    "--height",
    type=click.Choice(HEIGHT_CHOICES),
    default=HEIGHT_CHOICES[0],
    show_default=True,
    help="Required fence height",
)
@click.option("--csv", "csv_path", type=click.Path(), help="Also write the table to CSV")
def options(postcode: str, height: str, csv_path: str | None):
    """List catalog options and whether they apply to the site."""
    estimate = wind_for_postcode(postcode)
    views = option_views(FENCE_OPTIONS, estimate, parse_height_m(height))
    df = create_options_dataframe(views)

    click.echo(df.to_string(index=False))
    click.echo()
    click.echo(create_summary_table(df, estimate).to_string(index=False))

    if csv_path:
        export_to_csv(df, csv_path)
        click.echo(f"Options saved to {csv_path}")


@main.command()
@click.argument("postcode")
def locate(postcode: str):
    """Forward-geocode POSTCODE with the configured geocoder."""

    async def _lookup():
        async with NominatimGeocoder.from_settings() as geocoder:
            return await geocoder.forward(normalise_postcode(postcode))

    try:
        candidates = asyncio.run(_lookup())
    except LookupEmpty as exc:
        raise click.ClickException(exc.message)
    except TransportFailure as exc:
        raise click.ClickException(f"{exc.message} ({exc})")

    click.echo(json.dumps(candidates[0].model_dump(), indent=2))


@main.command()
def serve():
    """Start the FastAPI server (quote UI + JSON API)."""
    import uvicorn

    settings = get_settings()
    click.echo(f"Starting Heras quote server on http://localhost:{settings.port}")
    click.echo(f"  Quote UI:  http://localhost:{settings.port}/")
    click.echo(f"  JSON API:  http://localhost:{settings.port}/api/")
    uvicorn.run("app.application:app", host=settings.host, port=settings.port, reload=True)


if __name__ == "__main__":
    main()
