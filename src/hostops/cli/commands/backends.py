"""Commands for managing hosting backends."""

import asyncio

import typer

from hostops.cli.common.context import BackendsAppContext, build_backends_context
from hostops.cli.common.exits import die, exit_from_exc, handle_errors
from hostops.cli.common.options import (
    BackendIdOpt,
    DeployMethodOpt,
    LocationOpt,
    ProjectOpt,
    RegionOpt,
    ServiceNameOpt,
)
from hostops.cli.common.output import out
from hostops.cli.common.progress import operation_progress
from hostops.cli.tui import PromptRepositoryLinker, QuestionaryPrompter
from hostops.core.backends import (
    Backend,
    LookupFailure,
    NotFound,
    is_valid_service_name,
)
from hostops.core.provisioning import ProvisioningCoordinator, setup_backend

app = typer.Typer(
    help="Create and inspect hosting backends",
    no_args_is_help=True,
)


@app.callback()
def _init(ctx: typer.Context, project: str | None = ProjectOpt):
    """Initialize backends context."""
    # Resolve project + poller settings once per invocation
    ctx.obj = build_backends_context(project)


async def _create(
    appctx: BackendsAppContext,
    service_name: str | None,
    region: str | None,
    deploy_method: str | None,
) -> Backend | None:
    prompter = QuestionaryPrompter()
    async with appctx.adapter() as adapter:
        with operation_progress(f"Creating backend in {appctx.project_id}") as on_poll:
            coordinator = ProvisioningCoordinator(
                adapter,
                prompter,
                PromptRepositoryLinker(prompter),
                poller_config=appctx.poller_config,
                on_poll=on_poll,
            )
            return await setup_backend(
                coordinator,
                appctx.project_id,
                service_name=service_name,
                region=region,
                deploy_method=deploy_method,
            )


@app.command()
def create(
    ctx: typer.Context,
    service_name: str | None = ServiceNameOpt,
    region: str | None = RegionOpt,
    deploy_method: str | None = DeployMethodOpt,
):
    """
    Create a backend, or reuse an existing one with the same name.
    """
    appctx: BackendsAppContext = ctx.obj
    if service_name is not None and not is_valid_service_name(service_name):
        die(
            f"Invalid service name {service_name!r}: use 1-30 lowercase letters, "
            "digits or hyphens, starting with a letter.",
            code=1,
        )

    out.info("First we need a few details to create your service.")
    with handle_errors():
        backend = asyncio.run(_create(appctx, service_name, region, deploy_method))

    if backend is None:
        out.warn("No backend was created.")
        raise typer.Exit(0)
    out.success(f"Successfully created a backend: {backend.name}")
    out.backend_table(backend)


async def _get(appctx: BackendsAppContext, location: str, backend_id: str):
    async with appctx.adapter() as adapter:
        return await adapter.get_backend(appctx.project_id, location, backend_id)


@app.command()
def get(
    ctx: typer.Context,
    backend_id: str = BackendIdOpt,
    location: str = LocationOpt,
):
    """
    Show the details of a backend.
    """
    appctx: BackendsAppContext = ctx.obj
    if not backend_id:
        die("Backend id can't be empty.", code=1)

    with handle_errors():
        with out.status("Loading backend..."):
            result = asyncio.run(_get(appctx, location, backend_id))

    message = (
        f"Failed to get backend: {backend_id}. "
        "Please check the parameters you have provided."
    )
    if isinstance(result, LookupFailure):
        exit_from_exc(result.cause, message=message)
    if isinstance(result, NotFound):
        die(message, code=1)

    out.backend_table(result, title=f"Backend {backend_id}")
