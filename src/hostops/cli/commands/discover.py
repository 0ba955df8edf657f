"""Command for detecting frameworks in a source tree."""

from pathlib import Path

import typer

from hostops.cli.common.exits import exit_from_exc, warn_exit
from hostops.cli.common.options import SourcePathArg
from hostops.cli.common.output import out
from hostops.core.discovery import RepositoryFileSystem
from hostops.core.frameworks import detect_runtime, discover


def discover_cmd(path: Path = SourcePathArg):
    """
    Detect the runtime and frameworks used in a source tree.
    """
    fs = RepositoryFileSystem(path.resolve())

    try:
        runtime = detect_runtime(fs)
        frameworks = discover(fs)
    except (OSError, ValueError) as e:
        exit_from_exc(e, message=f"Could not inspect {path}: {e}")

    if runtime is None:
        warn_exit("No supported runtime detected", code=0)

    out.kv({"Path": str(path.resolve()), "Runtime": runtime})
    if not frameworks:
        warn_exit("No frameworks detected", code=0)
    out.frameworks_table(frameworks)


def register(app: typer.Typer) -> None:
    app.command(name="discover")(discover_cmd)
