"""Exceptions raised by the hostops core.

Every error surfaced by the core derives from HostopsError so the CLI can
turn any of them into a single error line and exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from hostops.core.backends import ResourceKey


class HostopsError(Exception):
    """Base exception for all hostops errors."""


class ControlPlaneError(HostopsError):
    """Raised when the control-plane API is unreachable or answers with an error."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Control plane error {status_code}: {message}")


class ProvisioningFailed(HostopsError):
    """Raised when a backend cannot be looked up or created."""

    def __init__(self, key: ResourceKey, cause: BaseException | str) -> None:
        self.key = key
        self.cause = cause
        super().__init__(
            "Failed to get or create a backend using the given initialization "
            f"details (project={key.project_id}, location={key.location}, "
            f"service={key.service_name}): {cause}"
        )


class OperationFailed(HostopsError):
    """Raised when a long-running operation finished with a server error."""

    def __init__(
        self, operation: str, error: Mapping[str, Any], label: str | None = None
    ) -> None:
        self.operation = operation
        self.error = dict(error)
        self.label = label
        message = self.error.get("message") or "unknown error"
        prefix = f"{label}: " if label else ""
        super().__init__(f"{prefix}Operation {operation} failed: {message}")


class OperationTimeout(HostopsError):
    """
    Raised when an operation did not finish within the wall-clock budget.

    The remote operation is not cancelled. Its outcome is unknown, so callers
    should re-query the resource before trying to create it again.
    """

    def __init__(
        self, operation: str, timeout: float, label: str | None = None
    ) -> None:
        self.operation = operation
        self.timeout = timeout
        self.label = label
        prefix = f"{label}: " if label else ""
        super().__init__(
            f"{prefix}Operation {operation} did not complete within {timeout:g}s; "
            "it may still be running on the server."
        )
