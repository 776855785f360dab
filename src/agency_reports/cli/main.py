"""Main CLI entry point for the agency-reports command."""

import functools
import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config import settings
from ..core.filters import DateRange, FilterState, StatusFilter
from ..reporting import Dimension, InvalidPageError, Paginator, ReportResult, accumulate, rank, top_n
from ..reports.exporter import ExportFormat, ReportExporter, format_currency
from ..storage.loader import load_report_input

console = Console()
logger = logging.getLogger(__name__)


def filter_options(func):
    """Attach the shared report filter options to a command."""
    options = [
        click.option("--search", default="", help="Match agency, agent, suburb or street"),
        click.option("--agent", default="", help="Filter by agent name"),
        click.option("--agency", default="", help="Filter by agency name"),
        click.option("--suburb", default="", help="Filter by suburb"),
        click.option("--status", type=click.Choice([s.value for s in StatusFilter]), default="all",
                     help="Listed or sold properties"),
        click.option("--date-range", type=click.Choice([d.value for d in DateRange]), default="all",
                     help="Listed within the last 30 or 90 days"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _money(value: float) -> str:
    return format_currency(value, settings.currency_symbol)


def compute(data: str, search: str, agent: str, agency: str, suburb: str,
            status: str, date_range: str) -> ReportResult:
    """Load a bundle and run one report computation, exiting on bad input."""
    try:
        report_input = load_report_input(data)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    except (json.JSONDecodeError, ValueError) as e:
        console.print(f"[red]Error:[/red] Could not read {data}: {e}")
        raise SystemExit(1)

    filters = FilterState(
        search=search,
        agent=agent,
        agency=agency,
        suburb=suburb,
        status=StatusFilter(status),
        date_range=DateRange(date_range),
    )
    return accumulate(report_input, filters)


def with_report(func):
    """Replace the DATA argument and filter options with a computed report."""
    @functools.wraps(func)
    def wrapper(data, search, agent, agency, suburb, status, date_range, **kwargs):
        result = compute(data, search, agent, agency, suburb, status, date_range)
        return func(result, **kwargs)
    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="agency-reports")
def cli():
    """Agency Reports - commission and prospecting performance for real estate teams.

    \b
    Quick Start:
      agency-reports summary bundle.json                      # Headline numbers
      agency-reports table bundle.json -d agent --page 2      # Ranked agent table
      agency-reports top bundle.json -d suburb -n 5           # Chart feed
      agency-reports export bundle.json --format pdf          # PDF report
    """
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("data", type=click.Path())
@filter_options
@with_report
def summary(result: ReportResult):
    """Show the report summary."""
    s = result.summary

    if s.top_agency:
        top_agency = (f"[cyan]{s.top_agency}[/cyan] ({_money(s.top_agency_commission)}, "
                      f"{s.top_agency_commission_rate:.2f}%, {s.top_agency_property_count} properties)")
    else:
        top_agency = "[dim]None[/dim]"
    top_agent = f"[cyan]{s.top_agent}[/cyan] ({_money(s.top_agent_commission)})" if s.top_agent else "[dim]None[/dim]"
    top_street = (f"[cyan]{s.top_street}[/cyan] ({s.top_street_listed_count} listed)"
                  if s.top_street else "[dim]None[/dim]")

    console.print(Panel.fit(
        f"[bold]Commission[/bold]\n"
        f"  Total:  [green]{_money(s.total_commission)}[/green]\n"
        f"  Listed: {_money(s.listed_commission)} ({s.total_listed} properties)\n"
        f"  Sold:   {_money(s.sold_commission)} ({s.total_sold} properties)\n"
        f"  Sale rate: {s.sale_rate:.1f}%\n\n"
        f"[bold]Prospecting[/bold]\n"
        f"  Door knocks: {s.total_knocks} / {s.target_knocks} ({s.knock_progress:.1f}%)\n"
        f"  Phone calls: {s.total_calls} / {s.target_calls} ({s.call_progress:.1f}%)\n"
        f"  Connects:    {s.total_connects} / {s.target_connects} ({s.connect_progress:.1f}%)\n"
        f"  Appraisals:  {s.total_appraisals} / {s.target_appraisals} ({s.appraisal_progress:.1f}%)\n"
        f"  Conversion rate: {s.conversion_rate:.1f}%\n\n"
        f"[bold]Leaders[/bold]\n"
        f"  Top agency: {top_agency}\n"
        f"  Top agent:  {top_agent}\n"
        f"  Most active street: {top_street}",
        title=f"{settings.report_title} ({s.total_properties} properties)"
    ))


def _bucket_table(title: str, dimension: Dimension, buckets: list, start: int = 0) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column(dimension.value.title(), style="cyan", max_width=30)

    if dimension == Dimension.STREET:
        table.add_column("Suburb")
        table.add_column("Knocks", justify="right")
        table.add_column("Calls", justify="right")
        table.add_column("Appraisals", justify="right")
        table.add_column("Progress", justify="right", style="bold")
        for i, b in enumerate(buckets, start + 1):
            table.add_row(
                str(i), b.street, b.suburb,
                f"{b.knocks_made}/{b.target_knocks}",
                f"{b.calls_made}/{b.target_calls}",
                f"{b.appraisals}/{b.target_appraisals}",
                f"{b.overall_progress:.1f}%"
            )
        return table

    table.add_column("Commission", justify="right", style="bold green")
    table.add_column("Listed", justify="right")
    table.add_column("Sold", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Properties", justify="right")
    for i, b in enumerate(buckets, start + 1):
        table.add_row(
            str(i), b.key,
            _money(b.total_commission),
            _money(b.listed_commission),
            _money(b.sold_commission),
            f"{b.avg_commission_rate:.2f}%",
            str(b.property_count)
        )
    return table


@cli.command("table")
@click.argument("data", type=click.Path())
@click.option("--dimension", "-d", type=click.Choice([d.value for d in Dimension]), default="agency",
              help="Grouping to show")
@click.option("--page", "-p", default="1", help="Page number")
@click.option("--page-size", "-s", type=click.Choice(["5", "10", "20"]), default=None,
              help="Rows per page")
@filter_options
@with_report
def show_table(result: ReportResult, dimension: str, page: str, page_size: Optional[str]):
    """Show one page of a ranked totals table."""
    dim = Dimension(dimension)
    paginator = Paginator(rank(result.totals(dim)), page_size=int(page_size) if page_size else settings.page_size)

    try:
        window = paginator.jump(page)
    except InvalidPageError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    if not window.items:
        console.print("[yellow]No records match the current filters.[/yellow]")
        return

    console.print(_bucket_table(
        f"{dim.value.title()} totals - page {window.page} of {window.total_pages} ({window.total_items} rows)",
        dim, window.items, window.start_index
    ))


@cli.command()
@click.argument("data", type=click.Path())
@click.option("--dimension", "-d", type=click.Choice([d.value for d in Dimension]), default="agency",
              help="Grouping to chart")
@click.option("--limit", "-n", type=int, default=None, help="Number of entries")
@filter_options
@with_report
def top(result: ReportResult, dimension: str, limit: Optional[int]):
    """Show the top entries for a dimension by total commission."""
    dim = Dimension(dimension)
    n = limit if limit is not None else settings.top_n
    leaders = top_n(result.totals(dim), n)

    if not leaders:
        console.print("[yellow]No records match the current filters.[/yellow]")
        return

    console.print(_bucket_table(f"Top {len(leaders)} by commission", dim, leaders))


@cli.command()
@click.argument("data", type=click.Path())
@click.option("--format", "export_format", type=click.Choice([f.value for f in ExportFormat]), default="csv",
              help="Export format")
@click.option("--output", "-o", type=click.Path(), default=None, help="Output file path")
@filter_options
@with_report
def export(result: ReportResult, export_format: str, output: Optional[str]):
    """Export the full filtered report to CSV or PDF."""
    if output:
        output_path = Path(output)
        output_dir, filename = str(output_path.parent), output_path.name
    else:
        output_dir, filename = str(settings.output_dir), None

    exporter = ReportExporter(output_dir, format_currency=_money, title=settings.report_title)
    report = exporter.export(result, ExportFormat(export_format), filename=filename)

    console.print(f"[green]✓ Exported {report.export_format.value.upper()} report[/green]")
    console.print(f"  File: [cyan]{report.file_path}[/cyan] ({report.file_size:,} bytes)")


def main():
    cli()


if __name__ == "__main__":
    main()
