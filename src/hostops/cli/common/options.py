"""Common CLI options for the CLI."""

from pathlib import Path

import typer

from hostops.core.backends import DEFAULT_REGION

ProjectOpt = typer.Option(
    None,
    "--project",
    "-P",
    envvar="HOSTOPS_PROJECT",
    help="Project id that owns the backend",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Show debug logging",
)

ServiceNameOpt = typer.Option(
    None,
    "--service-name",
    "-s",
    help="Backend service name [1-30 characters]. Prompted when omitted.",
)

RegionOpt = typer.Option(
    None,
    "--region",
    "-r",
    help="Backend region. Prompted when omitted.",
)

DeployMethodOpt = typer.Option(
    None,
    "--deploy-method",
    help="How the backend is deployed (github). Prompted when omitted.",
)

LocationOpt = typer.Option(
    DEFAULT_REGION,
    "--location",
    "-l",
    help="Backend location",
)

BackendIdOpt = typer.Option(
    "",
    "--backend-id",
    "-b",
    help="Id of the backend",
)

SourcePathArg = typer.Argument(
    Path("."),
    help="Source tree to inspect",
    exists=True,
    file_okay=False,
    dir_okay=True,
)
