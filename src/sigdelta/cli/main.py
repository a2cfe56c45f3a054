"""sigdelta CLI - sigdelta command."""

import click

from sigdelta import __version__
from sigdelta.cli.subtract import subtract_command
from sigdelta.config.loader import load_config
from sigdelta.core.errors import ConfigError
from sigdelta.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="sigdelta")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """sigdelta - keep only the signatures that are new."""
    ctx.ensure_object(dict)
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(subtract_command, name="subtract")


if __name__ == "__main__":
    cli()
