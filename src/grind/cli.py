"""Command-line interface: global diagnostic flags and the grind commands."""

import sys
from typing import Annotated

import typer
from dotenv import load_dotenv
from loguru import logger

from grind import __version__, app
from grind.bootstrap import init_session, read_cookie
from grind.client import GrindClient
from grind.config import DEFAULT_HOST, Config, config_path, load_config, read_config
from grind.errors import ConfigError, GrindError
from grind.models import User

LOG_FORMAT = "{time:HH:mm:ss} {message}"


def configure_logging(verbose: bool = False) -> None:
    """Send log output to stderr with a time-only prefix."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else "INFO")


@app.callback()
def main_callback(
    ctx: typer.Context,
    api: Annotated[bool, typer.Option("--api", help="report all API requests")] = False,
    api_dump: Annotated[
        bool, typer.Option("--api-dump", help="dump API request and response data")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="show debug output")] = False,
):
    """A command-line tool to access CodeGrinder."""
    load_dotenv()
    configure_logging(verbose)
    ctx.obj = {"api_report": api, "api_dump": api_dump}


def _flags(ctx: typer.Context) -> dict:
    return ctx.obj or {"api_report": False, "api_dump": False}


@app.command()
def version():
    """Print the version number of grind."""
    typer.echo(f"grind {__version__}")


@app.command()
def init(
    ctx: typer.Context,
    host: Annotated[
        str | None,
        typer.Option(envvar="GRIND_HOST", help="CodeGrinder server to connect to"),
    ] = None,
):
    """Connect to the CodeGrinder server and save your session cookie."""
    try:
        path = config_path()
        if host is None:
            try:
                host = read_config(path).host
            except ConfigError as e:
                logger.debug(f"No usable existing config ({e}); using {DEFAULT_HOST}")
                host = DEFAULT_HOST

        config = Config(host=host)
        config.set_flags(**_flags(ctx))
        cookie = read_cookie(config.host)
        init_session(config, cookie, __version__, path)
    except GrindError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def whoami(ctx: typer.Context):
    """Show the user your saved session belongs to."""
    try:
        config = load_config(**_flags(ctx))
        user = GrindClient(config).must_get_object("/users/me", download=User.from_dict)
    except GrindError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    typer.echo(str(user))


def main() -> None:
    """Run the CLI."""
    app()
