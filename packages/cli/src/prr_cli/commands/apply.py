"""apply command: apply a pull request to the working directory."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.command("apply")
@click.argument("pr")
@click.pass_context
def apply_cmd(ctx, pr: str):
    """Apply a pull request to the working directory.

    Uses the diff stored with the review, so `prr get` must have run first.
    Useful for building and testing PRs locally.
    """
    prr = ctx.obj["prr"]
    owner, repo, pr_num = prr.parse_pr_str(pr)
    prr.apply_pr(owner, repo, pr_num)
    console.print(f"[green]Applied {owner}/{repo}/{pr_num}[/green]")
