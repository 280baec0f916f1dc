from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from ..upstream import UpstreamResponse, UpstreamUnavailable


HTML_ERROR_MESSAGE = "HTML error response from upstream API - check endpoint URL"


def clean_error(data: Any) -> Any:
    # Upstream gateways answer some errors with an HTML page; don't relay markup.
    if isinstance(data, str) and "<" in data:
        return HTML_ERROR_MESSAGE
    return data


def ok(data: Any, **extra: Any) -> dict[str, Any]:
    return {"success": True, "data": data, **extra}


def fail(status_code: int, error: Any, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def upstream_failure(res: UpstreamResponse, **extra: Any) -> JSONResponse:
    """Relay a non-2xx upstream response with its original status."""
    return fail(
        res.status_code,
        clean_error(res.data) or f"Upstream returned {res.status_code}",
        apiStatus=res.status_code,
        endpoint=res.endpoint,
        **extra,
    )


def upstream_unreachable(e: UpstreamUnavailable, **extra: Any) -> JSONResponse:
    return fail(502, f"Upstream API unreachable: {e.reason}", endpoint=e.endpoint, **extra)


def relay(res: UpstreamResponse, **extra: Any) -> dict[str, Any] | JSONResponse:
    if not res.ok:
        return upstream_failure(res)
    return ok(res.data, **extra)
