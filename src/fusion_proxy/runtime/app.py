from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from ..api import create_api_app
from ..core.registry import SecretRegistry
from ..settings import Settings
from ..upstream import UpstreamClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    registry: SecretRegistry | None = None,
    upstream: UpstreamClient | None = None,
) -> FastAPI:
    """Create the proxy app with its own registry and upstream client.

    Collaborators that are not passed in are built from `settings` (or the
    environment) and owned by the app: the registry sweeper runs for the app's
    lifespan and the upstream client is closed on shutdown.
    """

    settings = settings or Settings.from_env()
    if registry is None:
        registry = SecretRegistry(ttl_s=settings.secret_ttl_s, sweep_interval_s=settings.sweep_interval_s)
    owns_upstream = upstream is None
    if upstream is None:
        upstream = UpstreamClient(
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout_s=settings.upstream_timeout_s,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
        registry.start_sweeper()
        logger.info(
            "fusion-proxy up: upstream=%s api_key=%s secret_ttl=%.0fs",
            settings.base_url,
            "SET" if settings.api_key else "NOT SET",
            registry.ttl_s,
        )
        try:
            yield
        finally:
            registry.stop_sweeper()
            if owns_upstream:
                upstream.close()

    app = create_api_app(settings, registry, upstream, lifespan=lifespan)
    app.state.settings = settings
    app.state.registry = registry
    app.state.upstream = upstream
    return app
