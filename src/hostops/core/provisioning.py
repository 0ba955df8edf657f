"""Get-or-create provisioning of hosting backends.

This module holds the orchestration logic that makes backend setup
idempotent from the caller's point of view:

- An existing backend is found and optionally reused.
- The user can pick another name instead, and that name is looked up in turn.
- A missing backend is created through a long-running operation.

All I/O goes through the collaborator protocols in `hostops.core.backends`.
"""

from __future__ import annotations

import logging
from typing import Callable

from hostops.core.backends import (
    ALLOWED_DEPLOY_METHODS,
    ALLOWED_REGIONS,
    DEFAULT_DEPLOY_METHOD,
    DEFAULT_REGION,
    DEFAULT_SERVICE_NAME,
    GITHUB_DEPLOY_METHOD,
    Backend,
    ControlPlaneClient,
    LookupFailure,
    NotFound,
    OperationStatus,
    Prompter,
    ProvisioningRequest,
    RepositoryLinker,
    is_valid_service_name,
    to_backend,
)
from hostops.core.errors import ProvisioningFailed
from hostops.core.poller import APPHOSTING_POLLER_CONFIG, PollerConfig, poll_operation

logger = logging.getLogger(__name__)

DEFAULT_MAX_RENAME_ATTEMPTS = 10

_EXISTING_BACKEND_PROMPT = (
    "A backend already exists for the given serviceName, "
    "do you want to use existing backend? (yes/no)"
)
_NEW_NAME_PROMPT = "Please enter a new service name [1-30 characters]"
_CREATE_NAME_PROMPT = "Create a name for your service [1-30 characters]"


class ProvisioningCoordinator:
    """Drives the get-or-create-or-reuse decision for a named backend."""

    def __init__(
        self,
        client: ControlPlaneClient,
        prompter: Prompter,
        linker: RepositoryLinker,
        *,
        poller_config: PollerConfig = APPHOSTING_POLLER_CONFIG,
        max_rename_attempts: int = DEFAULT_MAX_RENAME_ATTEMPTS,
        on_poll: Callable[[int, OperationStatus], None] | None = None,
    ) -> None:
        if max_rename_attempts < 1:
            raise ValueError("max_rename_attempts must be >= 1")
        self.client = client
        self.prompter = prompter
        self.linker = linker
        self.poller_config = poller_config
        self.max_rename_attempts = max_rename_attempts
        self.on_poll = on_poll

    async def ensure(
        self,
        project_id: str,
        region: str,
        deploy_method: str,
        service_name: str,
    ) -> Backend | None:
        """
        Return an existing or newly created backend for the given name.

        Returns None when the backend does not exist and the deploy method
        has no create path.
        """
        request = ProvisioningRequest(
            service_name=service_name,
            region=region,
            deploy_method=deploy_method,
        )
        return await self.get_or_create_backend(project_id, request)

    async def get_or_create_backend(
        self, project_id: str, request: ProvisioningRequest
    ) -> Backend | None:
        """
        Reuse, rename or create a backend according to the request.

        Raises:
            ProvisioningFailed: The lookup failed for a reason other than
                not-found, or the rename loop hit its attempt limit.
        """
        lookup = await self._resolve_existing(project_id, request)

        if isinstance(lookup, Backend):
            return lookup

        if isinstance(lookup, LookupFailure):
            raise ProvisioningFailed(lookup.key, lookup.cause) from lookup.cause

        logger.info("Creating new backend.")
        if request.deploy_method != GITHUB_DEPLOY_METHOD:
            logger.warning(
                "Deploy method %r cannot create backends yet; nothing was created.",
                request.deploy_method,
            )
            return None

        repository = await self.linker.link_repository(project_id, request.region)
        return await self.create_backend(
            project_id,
            request.region,
            to_backend(repository),
            request.service_name,
        )

    async def _resolve_existing(
        self, project_id: str, request: ProvisioningRequest
    ) -> Backend | NotFound | LookupFailure:
        """Run the reuse-or-rename loop until a reuse, a not-found or a failure."""
        lookup = await self.client.get_backend(
            project_id, request.region, request.service_name
        )
        attempts = 0

        while isinstance(lookup, Backend):
            attempts += 1
            if attempts > self.max_rename_attempts:
                raise ProvisioningFailed(
                    request.key(project_id),
                    f"no usable service name after {self.max_rename_attempts} attempts",
                )

            request.existing_backend_choice = await self.prompter.confirm(
                _EXISTING_BACKEND_PROMPT, default=True
            )
            if request.existing_backend_choice:
                logger.info("Using the existing backend.")
                return lookup

            request.service_name = await prompt_service_name(
                self.prompter, _NEW_NAME_PROMPT
            )
            request.existing_backend_choice = None
            lookup = await self.client.get_backend(
                project_id, request.region, request.service_name
            )

        return lookup

    async def create_backend(
        self,
        project_id: str,
        location: str,
        body: Backend,
        backend_id: str,
    ) -> Backend:
        """Create a backend and wait for the operation to produce it."""
        handle = await self.client.create_backend(project_id, location, body, backend_id)
        logger.info("Waiting for %s (%s)", handle.poller_name, handle.name)
        response = await poll_operation(
            self.client,
            self.poller_config,
            handle,
            on_poll=self.on_poll,
        )
        return Backend.from_api(response)


async def prompt_service_name(prompter: Prompter, message: str) -> str:
    """Ask for a service name until the answer is valid."""
    while True:
        name = (await prompter.text(message, default=DEFAULT_SERVICE_NAME)).strip()
        if is_valid_service_name(name):
            return name
        logger.warning(
            "Invalid service name %r: use 1-30 lowercase letters, digits or "
            "hyphens, starting with a letter.",
            name,
        )


async def collect_request(
    prompter: Prompter,
    *,
    service_name: str | None = None,
    region: str | None = None,
    deploy_method: str | None = None,
) -> ProvisioningRequest:
    """
    Gather the backend setup answers, prompting only for missing values.

    Raises:
        ValueError: A supplied service name is not valid.
    """
    if service_name is None:
        service_name = await prompt_service_name(prompter, _CREATE_NAME_PROMPT)
    elif not is_valid_service_name(service_name):
        raise ValueError(
            f"Invalid service name {service_name!r}: use 1-30 lowercase letters, "
            "digits or hyphens, starting with a letter."
        )

    if region is None:
        region = await prompter.select(
            "Please select a region "
            "(info: Your region determines where your backend is located)",
            ALLOWED_REGIONS,
            default=DEFAULT_REGION,
        )
    logger.info("Region set to %s.", region)

    if deploy_method is None:
        deploy_method = await prompter.select(
            "How do you want to deploy",
            ALLOWED_DEPLOY_METHODS,
            default=DEFAULT_DEPLOY_METHOD,
        )

    return ProvisioningRequest(
        service_name=service_name,
        region=region,
        deploy_method=deploy_method,
    )


async def setup_backend(
    coordinator: ProvisioningCoordinator,
    project_id: str,
    *,
    service_name: str | None = None,
    region: str | None = None,
    deploy_method: str | None = None,
) -> Backend | None:
    """Collect the setup answers, then get or create the backend."""
    request = await collect_request(
        coordinator.prompter,
        service_name=service_name,
        region=region,
        deploy_method=deploy_method,
    )
    return await coordinator.get_or_create_backend(project_id, request)
