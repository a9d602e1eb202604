"""submit command: post a review to GitHub."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.command("submit")
@click.option("--debug", "-d", is_flag=True, help="Print the request body instead of submitting.")
@click.argument("pr")
@click.pass_context
def submit_cmd(ctx, debug: bool, pr: str):
    """Submit a review."""
    prr = ctx.obj["prr"]
    owner, repo, pr_num = prr.parse_pr_str(pr)
    body = prr.submit_pr(owner, repo, pr_num, debug=debug)

    if debug:
        console.print_json(data=body)
        return

    console.print(
        f"[green]Review submitted: {body['event']}. "
        f"{len(body['comments'])} inline comment(s) on {owner}/{repo}#{pr_num}.[/green]"
    )
