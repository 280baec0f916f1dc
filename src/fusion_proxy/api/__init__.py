from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.registry import SecretRegistry
from ..core.secrets import RandomSourceFailure
from ..settings import Settings
from ..upstream import UpstreamClient, UpstreamUnavailable
from .responses import clean_error
from .routes import mount_fusion_api, mount_swap_api
from .routes.swap import SUPPORTED_CHAINS_PATH
from .serializers import utc_now_iso

logger = logging.getLogger(__name__)


def create_api_app(
    settings: Settings,
    registry: SecretRegistry,
    upstream: UpstreamClient,
    **fastapi_kwargs: Any,
) -> FastAPI:
    app = FastAPI(title="fusion-proxy", version="0.1.0", **fastapi_kwargs)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RandomSourceFailure)
    def _random_source_failed(request: Request, exc: RandomSourceFailure) -> JSONResponse:  # noqa: ARG001
        logger.error("secret generation failed: %s", exc)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

    mount_swap_api(app, upstream)
    mount_fusion_api(app, registry, upstream)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/health", response_model=None)
    def health() -> dict[str, Any] | JSONResponse:
        # Probe the upstream with a cheap authenticated call.
        common = {"proxy": "working", "secretsStored": len(registry), "timestamp": utc_now_iso()}
        try:
            res = upstream.get(SUPPORTED_CHAINS_PATH)
        except UpstreamUnavailable as e:
            return JSONResponse(
                status_code=502,
                content={"success": False, "data": {"status": "unreachable"}, "apiError": e.reason, **common},
            )
        if not res.ok:
            return JSONResponse(
                status_code=res.status_code,
                content={
                    "success": False,
                    "data": {"status": "api-error"},
                    "apiError": clean_error(res.data),
                    "apiStatus": res.status_code,
                    **common,
                },
            )
        chains = len(res.data) if isinstance(res.data, (list, dict)) else 0
        return {
            "success": True,
            "data": {"status": "healthy", "chains": chains, "fusionSupported": True},
            "apiStatus": res.status_code,
            **common,
        }

    @app.get("/api/debug")
    def debug() -> dict[str, Any]:
        key = settings.api_key
        return {
            "success": True,
            "debug": {
                "hasApiKey": bool(key),
                "apiKeyLength": len(key) if key else 0,
                "apiKeyPrefix": key[:8] + "..." if key else "not set",
                "baseUrl": settings.base_url,
                "headerFormat": "Authorization: Bearer",
                "secretTtlSeconds": registry.ttl_s,
                "timestamp": utc_now_iso(),
            },
        }

    return app


__all__ = ["create_api_app"]
