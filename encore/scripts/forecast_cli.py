"""CLI command for generating the financial forecast.

Usage:
    flask generate-forecast                    # 12 months from today
    flask generate-forecast --months 6
    flask generate-forecast --as-of 2025-03-15 # Reproduce a past run
"""

from __future__ import annotations

import json
from datetime import date, datetime

import click
from flask import current_app
from flask.cli import with_appcontext


@click.command("generate-forecast")
@click.option("--months", "-m", type=click.IntRange(min=1), default=None, help="Forecast horizon in months")
@click.option("--as-of", "as_of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Reference date")
@with_appcontext
def generate_forecast_command(months: int | None, as_of: datetime | None):
    """Print the forecast as JSON."""
    from encore.domains.finance.services import (
        DataAccessError,
        SqlAlchemyForecastRepository,
        generate_forecast,
    )
    from encore.extensions import db

    config = current_app.config
    horizon = months or config["FORECAST_DEFAULT_MONTHS"]
    if horizon > config["FORECAST_MAX_MONTHS"]:
        raise click.BadParameter(
            f"must be at most {config['FORECAST_MAX_MONTHS']}", param_hint="--months"
        )

    try:
        result = generate_forecast(
            SqlAlchemyForecastRepository(db.session),
            as_of=as_of.date() if as_of else date.today(),
            months=horizon,
            lookback_months=config["FORECAST_LOOKBACK_MONTHS"],
            baseline_months=config["FORECAST_BASELINE_MONTHS"],
        )
    except DataAccessError as e:
        click.echo(f"Forecast failed reading {e.source}: {e}", err=True)
        raise SystemExit(1)

    click.echo(json.dumps(result.to_dict(), indent=2))


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(generate_forecast_command)
