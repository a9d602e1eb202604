"""get and edit commands: download a pull request and open it for review."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


def _open_in_editor(path, editor: str | None) -> None:
    # click.edit falls back to $VISUAL / $EDITOR when editor is None
    click.edit(filename=str(path), editor=editor)


@click.command("get")
@click.option("--force", "-f", is_flag=True, help="Ignore unsubmitted review checks.")
@click.option("--open", "open_", is_flag=True, help="Open the review file in $EDITOR after download.")
@click.argument("pr")
@click.pass_context
def get_cmd(ctx, force: bool, open_: bool, pr: str):
    """Get a pull request and begin a review.

    PR is `owner/repo/number`, a pull request URL, or a bare number when
    .prr.yml names the repository.
    """
    prr = ctx.obj["prr"]
    owner, repo, pr_num = prr.parse_pr_str(pr)
    review = prr.get_pr(owner, repo, pr_num, force=force)
    console.print(str(review.path()), soft_wrap=True, highlight=False)

    if open_:
        _open_in_editor(review.path(), ctx.obj["config"].get("editor"))


@click.command("edit")
@click.argument("pr")
@click.pass_context
def edit_cmd(ctx, pr: str):
    """Open an existing review in $EDITOR."""
    prr = ctx.obj["prr"]
    review = prr.review(*prr.parse_pr_str(pr))
    if not review.exists():
        raise click.UsageError(f"No review for {review.handle()}. Run `prr get {pr}` first.")
    _open_in_editor(review.path(), ctx.obj["config"].get("editor"))
