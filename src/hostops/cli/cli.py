"""CLI application for hosting backend tooling."""

import typer

from hostops.cli.commands import discover
from hostops.cli.commands.backends import app as backends_app
from hostops.cli.common.options import VerboseOpt
from hostops.cli.common.output import setup_logging

app = typer.Typer(
    help="hostops - hosting backend provisioning tooling",
    no_args_is_help=True,
)


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging for all commands."""
    setup_logging(verbose)


app.add_typer(backends_app, name="backends", help="Create / inspect hosting backends.")
discover.register(app)


if __name__ == "__main__":
    app()
