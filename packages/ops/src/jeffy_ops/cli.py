"""
cli.py — Click CLI entrypoint for the back-office jobs.

Usage:
    jeffy reorders scan [--enqueue]
    jeffy financials calculate --range month [--location ID]
    jeffy promos expire
    jeffy export orders --range month --out orders.csv
    jeffy status
"""

from __future__ import annotations

from pathlib import Path

import click
import structlog
from postgrest.exceptions import APIError

from jeffy_shared.config import settings
from jeffy_shared.logging import configure_logging

log = structlog.get_logger(__name__)

RANGES = ["today", "week", "month", "year", "all"]


def _fail(exc: Exception) -> click.ClickException:
    message = exc.message if isinstance(exc, APIError) else str(exc)
    log.error("job_failed", error=message)
    return click.ClickException(message)


@click.group()
@click.option(
    "--log-level",
    default=settings.log_level,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Log level",
)
@click.option(
    "--log-format",
    default=settings.log_format,
    type=click.Choice(["json", "console"]),
    help="Log output format",
)
def cli(log_level: str, log_format: str) -> None:
    """Jeffy back-office jobs."""
    configure_logging(log_level=log_level, log_format=log_format)


# ---------------------------------------------------------------------------
# reorders
# ---------------------------------------------------------------------------


@cli.group()
def reorders() -> None:
    """Stock level checks."""


@reorders.command("scan")
@click.option("--enqueue", is_flag=True, help="Add pending procurement queue rows for low items")
def reorders_scan(enqueue: bool) -> None:
    """List products and variants at or below their reorder point."""
    from jeffy_ops.jobs.reorders import scan_low_stock

    try:
        items, result = scan_low_stock(enqueue=enqueue)
    except (APIError, RuntimeError) as exc:
        raise _fail(exc) from exc

    if not items:
        click.echo("No low-stock items.")
        return
    click.echo(f"{len(items)} low-stock item(s):")
    for item in items:
        click.echo(
            f"  {item.get('name', '')[:40]:40s} "
            f"stock {item.get('current_stock', 0):>4} / reorder at {item.get('reorder_point', 0):>4}  "
            f"suggest {item.get('suggested_quantity', 0)}"
        )
    if result is not None:
        click.echo(f"Queued {result.records_written} item(s) for procurement ({result.status}).")


# ---------------------------------------------------------------------------
# financials
# ---------------------------------------------------------------------------


@cli.group()
def financials() -> None:
    """Franchise financial summaries."""


@financials.command("calculate")
@click.option(
    "--range",
    "range_name",
    default="month",
    type=click.Choice(["today", "week", "month", "year"]),
    help="Reporting period",
)
@click.option("--location", "location_id", default=None, help="Only this franchise location")
def financials_calculate(range_name: str, location_id: str | None) -> None:
    """Compute and store franchise financials for the period."""
    from jeffy_ops.jobs.financials import calculate_all

    try:
        rows, result = calculate_all(range_name, location_id=location_id)
    except (APIError, RuntimeError) as exc:
        raise _fail(exc) from exc

    for row in rows:
        click.echo(
            f"  {row['franchise_location_id']}  revenue {row['total_revenue']:>12,.2f}  "
            f"net {row['net_profit']:>12,.2f}  orders {row['total_orders']}"
        )
    click.echo(f"Stored {result.records_written} of {len(rows)} franchise summaries ({result.status}).")
    if not result.success:
        raise click.ClickException("; ".join(result.errors))


# ---------------------------------------------------------------------------
# promos
# ---------------------------------------------------------------------------


@cli.group()
def promos() -> None:
    """Promo code housekeeping."""


@promos.command("expire")
def promos_expire() -> None:
    """Deactivate promo codes past their expiry date."""
    from jeffy_ops.jobs.promos import expire_promos

    try:
        codes = expire_promos()
    except (APIError, RuntimeError) as exc:
        raise _fail(exc) from exc
    click.echo(f"Deactivated {len(codes)} expired promo code(s).")
    for code in codes:
        click.echo(f"  {code}")


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("kind", type=click.Choice(["orders", "transactions"]))
@click.option("--range", "range_name", default="month", type=click.Choice(RANGES), help="Reporting period")
@click.option(
    "--out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output CSV file (default: <kind>-<range>.csv)",
)
def export(kind: str, range_name: str, out: Path | None) -> None:
    """Export orders or financial transactions to CSV."""
    from jeffy_ops.jobs.exports import export_csv

    out = out or Path(f"{kind}-{range_name}.csv")
    try:
        count = export_csv(kind, out, range_name=range_name)  # type: ignore[arg-type]
    except (APIError, RuntimeError) as exc:
        raise _fail(exc) from exc
    click.echo(f"Wrote {count} {kind} to {out}")


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@cli.command()
def status() -> None:
    """Show row counts for key tables and pending work."""
    from jeffy_ops.jobs.status import collect_counts

    click.echo("Jeffy status:")
    try:
        counts = collect_counts()
    except (APIError, RuntimeError) as exc:
        click.echo(f"  Error fetching status: {exc}", err=True)
        return
    for label, count in counts:
        click.echo(f"  {label:24s} {count:>6}")


if __name__ == "__main__":
    cli()
