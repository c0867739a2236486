"""Command-line interface for oaiharvest."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TextIO

import click

from oaiharvest import __version__
from oaiharvest.client import OAIClient
from oaiharvest.config import AppConfig, load_config, write_default_config
from oaiharvest.envelope import OAIPMHResponse, Record, load_response
from oaiharvest.errors import CallbackError, HarvestError, HarvestStopped
from oaiharvest.formats import FORMATS, ExtractedMetadata
from oaiharvest.formats.marcxml import BookMetadata
from oaiharvest.formats.oai_dc import DCMetadata

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------

@click.group()
@click.option(
    "-c", "--config",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file (default: ~/.oaiharvest/config.toml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="oaiharvest")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool):
    """OAI-PMH harvester for MARCXML and Dublin Core repositories."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


def _load(ctx: click.Context) -> AppConfig:
    cfg = load_config(ctx.obj.get("config_path"))
    if not ctx.obj.get("verbose"):
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _display_title(metadata: ExtractedMetadata) -> str:
    if isinstance(metadata, BookMetadata):
        return " : ".join(part for part in (metadata.title, metadata.subtitle) if part)
    if isinstance(metadata, DCMetadata):
        return metadata.title[0] if metadata.title else ""
    raise TypeError(f"unknown metadata type: {type(metadata).__name__}")


def _record_json(record: Record) -> dict[str, Any]:
    metadata = record.metadata.extract_metadata()
    return {
        "identifier": record.header.identifier,
        "datestamp": record.header.datestamp,
        "set_specs": list(record.header.set_specs),
        "format": record.metadata.get_format().value,
        "title": _display_title(metadata),
        "metadata": metadata.to_dict(),
    }


def _write_records(response: OAIPMHResponse, out: TextIO) -> int:
    written = 0
    for record in response.records:
        if record.metadata is None:
            continue
        out.write(json.dumps(_record_json(record), ensure_ascii=False) + "\n")
        written += 1
    return written


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@main.command()
@click.argument("base_url", required=False)
@click.option("-f", "--format", "metadata_prefix", default=None, help="metadataPrefix (default from config)")
@click.option("--from", "from_date", default=None, help="Harvest records changed on or after this date")
@click.option("--until", "until_date", default=None, help="Harvest records changed on or before this date")
@click.option("--max-pages", type=int, default=None, help="Stop after N pages (0 = no limit)")
@click.option(
    "-o", "--output",
    type=click.File("w", encoding="utf-8"),
    default="-",
    help="Write JSON Lines here (default: stdout)",
)
@click.pass_context
def harvest(
    ctx: click.Context,
    base_url: str | None,
    metadata_prefix: str | None,
    from_date: str | None,
    until_date: str | None,
    max_pages: int | None,
    output: TextIO,
):
    """Harvest every record from BASE_URL as JSON Lines."""
    cfg = _load(ctx)
    base_url = base_url or cfg.client.base_url
    if not base_url:
        raise click.UsageError("No BASE_URL given and [client] base_url is not configured")

    prefix = metadata_prefix or cfg.harvest.metadata_prefix
    if from_date:
        cfg.harvest.from_date = from_date
    if until_date:
        cfg.harvest.until_date = until_date
    limit = cfg.harvest.max_pages if max_pages is None else max_pages

    pages = 0
    written = 0

    def on_page(response: OAIPMHResponse) -> None:
        nonlocal pages, written
        pages += 1
        written += _write_records(response, output)
        if limit and pages >= limit and response.get_resumption_token():
            raise HarvestStopped(f"page limit {limit} reached")

    client_kwargs: dict[str, Any] = {"timeout": cfg.client.timeout}
    if cfg.client.user_agent:
        client_kwargs["user_agent"] = cfg.client.user_agent

    try:
        with OAIClient(base_url, **client_kwargs) as client:
            client.harvest(prefix, cfg.date_range(), on_page)
    except CallbackError as exc:
        if not isinstance(exc.__cause__, HarvestStopped):
            raise click.ClickException(str(exc)) from exc
        logger.info("Stopped early: %s", exc.__cause__)
    except HarvestError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Harvested {written} records in {pages} pages", err=True)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-f", "--format", "metadata_prefix", default=None, help="metadataPrefix (default from config)")
@click.pass_context
def parse(ctx: click.Context, path: Path, metadata_prefix: str | None):
    """Print the records of a saved OAI-PMH response."""
    cfg = _load(ctx)
    prefix = metadata_prefix or cfg.harvest.metadata_prefix

    try:
        response = load_response(path, prefix)
        response.raise_for_error()
    except HarvestError as exc:
        raise click.ClickException(str(exc)) from exc

    for record in response.records:
        if record.metadata is None:
            continue
        click.echo(json.dumps(_record_json(record), ensure_ascii=False, indent=2))

    token = response.get_resumption_token()
    if token:
        click.echo(f"resumptionToken: {token}")


@main.command()
def formats():
    """List the supported metadata formats."""
    for prefix, handler in FORMATS.items():
        click.echo(f"{prefix:10s} {handler.description}")


@main.command()
@click.pass_context
def init(ctx: click.Context):
    """Create a default config file."""
    path = write_default_config(ctx.obj.get("config_path"))
    click.echo(f"Config file: {path}")


if __name__ == "__main__":
    main()
