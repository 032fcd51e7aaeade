"""
Broker Matcher — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (catalog file, preference options).
  4. Execute action (validate, rank, recommend).
  5. Report result to stdout.

Install and run::

    pip install -e .
    broker-matcher --help
    broker-matcher validate-config
    broker-matcher validate-catalog --catalog data/brokers.csv
    broker-matcher rank --country GB --asset forex --asset cryptos
    broker-matcher recommend --fee zero-commission --deposit "<50" --write
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="broker-matcher",
    help="Broker Matcher — rank brokers against your trading preferences.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from broker_matcher.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from broker_matcher.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _load_catalog_or_exit(config, catalog_path: Optional[str]):
    from broker_matcher.errors import CatalogError
    from broker_matcher.ingestion.catalog import load_catalog

    path = Path(catalog_path) if catalog_path else Path(config.catalog.path)
    try:
        return load_catalog(path)
    except CatalogError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _build_preferences_or_exit(
    country: Optional[str],
    assets: Optional[list[str]],
    experience: Optional[str],
    fee: Optional[str],
    frequency: Optional[str],
    deposit: Optional[str],
):
    from pydantic import ValidationError

    from broker_matcher.models.preferences import UserPreferences

    try:
        return UserPreferences(
            country=country,
            assets=tuple(assets or ()),
            experience=experience,
            fee_preference=fee,
            frequency=frequency,
            deposit_amount=deposit,
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid preferences:\n{exc}", err=True)
        raise typer.Exit(code=1)


_CATALOG_OPT = typer.Option(None, "--catalog", help="Catalog file (.json or .csv). Defaults to config.catalog.path.")
_CONFIG_OPT = typer.Option(None, "--config", help="Path to TOML config file.")
_COUNTRY_OPT = typer.Option(None, "--country", help="Residence region code, e.g. GB.")
_ASSET_OPT = typer.Option(None, "--asset", "-a", help="Asset class; repeat for several (forex, stocks-etfs, cfds, cryptos, ...).")
_EXPERIENCE_OPT = typer.Option(None, "--experience", help="first-timer | beginner | intermediate | advanced | professional")
_FEE_OPT = typer.Option(None, "--fee", help="zero-commission | low-cost | reasonable-fees | not-sure")
_FREQUENCY_OPT = typer.Option(None, "--frequency", help="daily | weekly | monthly | yearly")
_DEPOSIT_OPT = typer.Option(None, "--deposit", help="<50 | 51-200 | 201-500 | 501-1000 | >1000")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPT,
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Catalog path:     {config.catalog.path}")
    typer.echo(f"  Debounce:         {config.filter.debounce_ms} ms")
    typer.echo(f"  Shortlist size:   {config.filter.recommendation_limit}")
    typer.echo(f"  Output dir:       {config.output.dir}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("validate-catalog")
def validate_catalog(
    catalog_path: Optional[str] = _CATALOG_OPT,
    config_path: Optional[str] = _CONFIG_OPT,
) -> None:
    """Check every catalog record and print a graded integrity report.

    Exits with code 1 if any record is invalid or an id is duplicated.
    """
    from broker_matcher.errors import CatalogError
    from broker_matcher.ingestion.catalog import read_records
    from broker_matcher.reporting.formatters import format_integrity_report
    from broker_matcher.validation.integrity import build_integrity_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(catalog_path) if catalog_path else Path(config.catalog.path)
    try:
        records = read_records(path)
    except CatalogError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    report = build_integrity_report(records)
    typer.echo(f"Catalog: {path}")
    typer.echo(format_integrity_report(report))

    if not report.is_clean:
        raise typer.Exit(code=1)
    typer.echo("[OK] Catalog valid.")


@app.command("rank")
def rank(
    country: Optional[str] = _COUNTRY_OPT,
    assets: Optional[list[str]] = _ASSET_OPT,
    experience: Optional[str] = _EXPERIENCE_OPT,
    fee: Optional[str] = _FEE_OPT,
    frequency: Optional[str] = _FREQUENCY_OPT,
    deposit: Optional[str] = _DEPOSIT_OPT,
    catalog_path: Optional[str] = _CATALOG_OPT,
    config_path: Optional[str] = _CONFIG_OPT,
) -> None:
    """Print the top 20 brokers for the given preferences (final-submit path)."""
    from broker_matcher.reporting.formatters import format_broker_list
    from broker_matcher.service import BrokerFilterService

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    prefs = _build_preferences_or_exit(country, assets, experience, fee, frequency, deposit)
    service = BrokerFilterService.from_config(config, _load_catalog_or_exit(config, catalog_path))

    results = service.filter_brokers_immediate(prefs)
    typer.echo(f"{len(results)} matching broker(s):")
    typer.echo(format_broker_list(results))


@app.command("recommend")
def recommend(
    country: Optional[str] = _COUNTRY_OPT,
    assets: Optional[list[str]] = _ASSET_OPT,
    experience: Optional[str] = _EXPERIENCE_OPT,
    fee: Optional[str] = _FEE_OPT,
    frequency: Optional[str] = _FREQUENCY_OPT,
    deposit: Optional[str] = _DEPOSIT_OPT,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Shortlist size. Defaults to config.filter.recommendation_limit.",
    ),
    write: bool = typer.Option(
        False,
        "--write",
        help="Also write CSV + JSON reports to config.output.dir.",
    ),
    label: str = typer.Option(
        "shortlist",
        "--label",
        help="Label used in report file names.",
    ),
    catalog_path: Optional[str] = _CATALOG_OPT,
    config_path: Optional[str] = _CONFIG_OPT,
) -> None:
    """Print an explained shortlist: each broker with the reasons it matched."""
    from broker_matcher.reporting.formatters import format_recommendation_table
    from broker_matcher.reporting.reporter import (
        write_recommendation_csv,
        write_recommendation_json,
    )
    from broker_matcher.service import BrokerFilterService

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    prefs = _build_preferences_or_exit(country, assets, experience, fee, frequency, deposit)
    service = BrokerFilterService.from_config(config, _load_catalog_or_exit(config, catalog_path))

    recs = service.get_broker_recommendations(prefs, limit=limit)
    typer.echo(format_recommendation_table(recs))

    if write:
        output_dir = Path(config.output.dir)
        csv_path = write_recommendation_csv(recs, output_dir, label)
        json_path = write_recommendation_json(recs, output_dir, label, preferences=prefs)
        typer.echo("")
        typer.echo(f"  CSV:  {csv_path}")
        typer.echo(f"  JSON: {json_path}")


if __name__ == "__main__":
    app()
