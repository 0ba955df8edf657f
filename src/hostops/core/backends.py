"""Core backend domain models and collaborator interfaces.

This module defines the backend data structures (ResourceKey, Backend,
OperationHandle) along with the narrow contracts the provisioning flow uses to
talk to the control plane, the user and the repository-linking step. It is
intentionally free of HTTP and CLI concerns so the same flow can be driven by
the CLI, automation or tests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence

DEFAULT_REGION = "us-central1"
ALLOWED_REGIONS = ("us-central1", "us-east1", "europe-west4")
GITHUB_DEPLOY_METHOD = "github"
DEFAULT_DEPLOY_METHOD = GITHUB_DEPLOY_METHOD
ALLOWED_DEPLOY_METHODS = (GITHUB_DEPLOY_METHOD,)
DEFAULT_SERVICE_NAME = "acme-inc-web"

_SERVICE_NAME_RE = re.compile(r"^[a-z](?:[a-z0-9-]{0,28}[a-z0-9])?$")


def is_valid_service_name(name: str) -> bool:
    """Return True if name is 1-30 lowercase letters, digits or hyphens."""
    return bool(_SERVICE_NAME_RE.match(name or ""))


@dataclass(frozen=True)
class ResourceKey:
    """
    Composite identity of a backend.

    Attributes:
        project_id: Project that owns the backend.
        location: Region the backend lives in.
        service_name: Backend id within the project and location.
    """

    project_id: str
    location: str
    service_name: str

    @property
    def parent(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}"

    def __str__(self) -> str:
        return f"{self.parent}/backends/{self.service_name}"


@dataclass(frozen=True)
class Codebase:
    """Source location a backend builds from."""

    repository: str
    root_directory: str = "/"


@dataclass(frozen=True)
class Backend:
    """
    Represents a hosting backend.

    The user-supplied fields (codebase, labels, service_account, display_name)
    are sent on create. The remaining fields are output-only: they are filled
    in by the control plane and never sent by the client.
    """

    codebase: Codebase | None = None
    labels: Mapping[str, str] = field(default_factory=dict)
    service_account: str | None = None
    display_name: str | None = None
    # Output-only
    name: str | None = None
    uri: str | None = None
    state: str | None = None
    create_time: str | None = None
    update_time: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Backend:
        """Build a Backend from a camelCase API payload."""
        codebase = payload.get("codebase")
        if not isinstance(codebase, Mapping):
            codebase = None
        labels = payload.get("labels")
        if not isinstance(labels, Mapping):
            labels = {}
        return cls(
            codebase=(
                Codebase(
                    repository=str(codebase.get("repository", "")),
                    root_directory=str(codebase.get("rootDirectory") or "/"),
                )
                if codebase
                else None
            ),
            labels=dict(labels),
            service_account=payload.get("serviceAccount"),
            display_name=payload.get("displayName"),
            name=payload.get("name"),
            uri=payload.get("uri"),
            state=payload.get("state"),
            create_time=payload.get("createTime"),
            update_time=payload.get("updateTime"),
        )

    def to_request_body(self) -> dict[str, Any]:
        """Return the create-request body, leaving out output-only fields."""
        body: dict[str, Any] = {"labels": dict(self.labels)}
        if self.codebase is not None:
            body["codebase"] = {
                "repository": self.codebase.repository,
                "rootDirectory": self.codebase.root_directory,
            }
        if self.service_account:
            body["serviceAccount"] = self.service_account
        if self.display_name:
            body["displayName"] = self.display_name
        return body


@dataclass(frozen=True)
class Repository:
    """Source repository reference produced by the linking step."""

    name: str
    remote_uri: str | None = None


def to_backend(repository: Repository) -> Backend:
    """Build the create-request descriptor for a linked repository."""
    return Backend(
        codebase=Codebase(repository=repository.name, root_directory="/"),
        labels={},
    )


@dataclass(frozen=True)
class OperationHandle:
    """
    Reference to in-flight server work returned by an asynchronous create.

    Attributes:
        name: Full resource name of the long-running operation.
        poller_name: Human-readable label used in logs and progress output.
    """

    name: str
    poller_name: str


@dataclass(frozen=True)
class OperationStatus:
    """Snapshot of a long-running operation."""

    name: str
    done: bool = False
    response: Mapping[str, Any] | None = None
    error: Mapping[str, Any] | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> OperationStatus:
        return cls(
            name=str(payload.get("name", "")),
            done=bool(payload.get("done", False)),
            response=payload.get("response"),
            error=payload.get("error"),
        )


@dataclass(frozen=True)
class NotFound:
    """Lookup result: the backend does not exist."""

    key: ResourceKey


@dataclass(frozen=True)
class LookupFailure:
    """Lookup result: the lookup itself failed for a reason other than not-found."""

    key: ResourceKey
    cause: Exception


BackendLookup = Backend | NotFound | LookupFailure


@dataclass
class ProvisioningRequest:
    """
    Answers gathered while setting up a backend.

    Owned by one provisioning run; service_name and existing_backend_choice
    change as the user works through the reuse-or-rename loop.
    """

    service_name: str
    region: str = DEFAULT_REGION
    deploy_method: str = DEFAULT_DEPLOY_METHOD
    existing_backend_choice: bool | None = None

    def key(self, project_id: str) -> ResourceKey:
        return ResourceKey(project_id, self.region, self.service_name)


class ControlPlaneClient(Protocol):
    """Interface for the backend control-plane API."""

    async def get_backend(
        self, project_id: str, location: str, backend_id: str
    ) -> BackendLookup:
        """Return the backend, NotFound, or a LookupFailure."""
        ...

    async def create_backend(
        self, project_id: str, location: str, body: Backend, backend_id: str
    ) -> OperationHandle:
        """Start creating a backend and return the operation handle."""
        ...

    async def get_operation(self, name: str) -> OperationStatus:
        """Return the current status of a long-running operation."""
        ...


class Prompter(Protocol):
    """Interface for asking the user typed questions."""

    async def text(self, message: str, *, default: str = "") -> str:
        """Ask for free text."""
        ...

    async def select(
        self, message: str, choices: Sequence[str], *, default: str | None = None
    ) -> str:
        """Ask the user to pick one of the choices."""
        ...

    async def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...


class RepositoryLinker(Protocol):
    """Interface for the step that connects a source repository."""

    async def link_repository(self, project_id: str, location: str) -> Repository:
        """Return a repository usable as a backend codebase."""
        ...
