"""Application context management for the CLI."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from hostops.cli.common.exits import die
from hostops.core.adapters.apphosting import AppHostingAdapter
from hostops.core.poller import APPHOSTING_POLLER_CONFIG, PollerConfig


@dataclass
class BackendsAppContext:
    """Application context holding the project and polling configuration."""

    project_id: str
    poller_config: PollerConfig

    @asynccontextmanager
    async def adapter(self) -> AsyncIterator[AppHostingAdapter]:
        """Open an HTTP client for one command run and yield the adapter."""
        async with httpx.AsyncClient() as http_client:
            yield AppHostingAdapter(http_client)


def build_backends_context(project: str | None) -> BackendsAppContext:
    """Build and return the application context for backend commands.

    Args:
        project: Project id from --project or HOSTOPS_PROJECT.

    Returns:
        BackendsAppContext: Context with the project and poller settings.
    """
    if not project:
        die("No project specified. Use --project or set HOSTOPS_PROJECT.", code=1)
    return BackendsAppContext(
        project_id=project,
        poller_config=APPHOSTING_POLLER_CONFIG.with_overrides(),
    )
