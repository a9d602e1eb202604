"""status command: summarize every review in the workdir."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()

_status_style = {
    "NEW": "cyan",
    "REVIEWED": "yellow",
    "SUBMITTED": "green",
}


@click.command("status")
@click.option("--no-titles", "-n", is_flag=True, help="Hide column titles from output.")
@click.pass_context
def status_cmd(ctx, no_titles: bool):
    """Print a status summary of all known reviews."""
    prr = ctx.obj["prr"]
    reviews = prr.reviews()
    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return

    table = Table(show_header=not no_titles, header_style="bold cyan", box=None)
    table.add_column("Handle", style="bold")
    table.add_column("Status")
    table.add_column("Review file")

    for review in reviews:
        status = str(review.status())
        style = _status_style.get(status, "white")
        table.add_row(review.handle(), f"[{style}]{status}[/{style}]", str(review.path()))

    console.print(table)
