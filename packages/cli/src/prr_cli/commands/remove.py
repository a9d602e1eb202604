"""remove command: delete review files."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.command("remove")
@click.argument("prs", nargs=-1)
@click.option("--force", "-f", is_flag=True, help="Ignore unsubmitted review checks.")
@click.option("--submitted", "-s", is_flag=True, help="Also remove every submitted review.")
@click.pass_context
def remove_cmd(ctx, prs: tuple[str, ...], force: bool, submitted: bool):
    """Remove reviews (eg. `owner/repo/24`)."""
    if not prs and not submitted:
        raise click.UsageError("Name at least one review to remove, or pass --submitted.")

    prr = ctx.obj["prr"]
    removed = prr.remove_reviews(list(prs), force=force, submitted=submitted)
    for review in removed:
        console.print(f"Removed {review.handle()}")
