"""CLI entry point for prr.

Commands:
  get      download a pull request and start a review
  edit     open an existing review in $EDITOR
  submit   submit a review to GitHub
  apply    apply a pull request's diff to the working tree
  status   list known reviews and their status
  remove   delete reviews
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from prr_cli.commands.apply import apply_cmd
from prr_cli.commands.get import edit_cmd, get_cmd
from prr_cli.commands.remove import remove_cmd
from prr_cli.commands.status import status_cmd
from prr_cli.commands.submit import submit_cmd
from prr_core.errors import PrrError


class PrrGroup(click.Group):
    """Command group that reports prr failures as clean CLI errors."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except PrrError as e:
            raise click.ClickException(str(e)) from e


@click.group(cls=PrrGroup)
@click.version_option(package_name="prr", prog_name="prr")
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Path to the config file. Defaults to $XDG_CONFIG_HOME/prr/config.yml.",
    envvar="PRR_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool):
    """Mailing list style code reviews for GitHub."""
    from prr_core.config import find_project_config_file, load_config
    from prr_core.prr import Prr

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler()])

    ctx.ensure_object(dict)

    config = load_config(config_path, find_project_config_file())

    ctx.obj["config"] = config
    ctx.obj["prr"] = Prr(config)


main.add_command(get_cmd)
main.add_command(edit_cmd)
main.add_command(submit_cmd)
main.add_command(apply_cmd)
main.add_command(status_cmd)
main.add_command(remove_cmd)
