from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...upstream import UpstreamClient, UpstreamUnavailable
from ..responses import fail, relay, upstream_unreachable


TOKEN_ADDRESSES: dict[str, dict[str, str]] = {
    "ethereum": {
        "ETH": "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE",
        "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
        "USDC": "0xA0b86a33E6441c8B4d36dC4C88ef0c9e31cE4eE8",
    },
    "tron": {
        "TRX": "T9yD14Nj9j7xAB4dbGeiX9h8unkKHxuWwb",
        "USDT": "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t",
        "USDC": "TEkxiTehnzSmSe2XqrBj4w32RUN966rdz8",
    },
}

SUPPORTED_CHAINS_PATH = "/fusion/quoter/v1.0/supported-chains"


def _swap_params(request: Request, required: tuple[str, ...]) -> dict[str, str | None] | JSONResponse:
    q = request.query_params
    params: dict[str, str | None] = {
        "src": q.get("src") or None,
        "dst": q.get("dst") or None,
        "amount": q.get("amount") or None,
        "from": q.get("from") or None,
        "slippage": q.get("slippage") or "1",
    }
    missing = [k for k in required if not params.get(k)]
    if missing:
        return fail(400, f"Missing required parameters: {', '.join(required)}")
    return params


def mount_swap_api(app: FastAPI, upstream: UpstreamClient) -> None:
    """Mount same-chain swap forwarding endpoints.

    Each route validates a few fields, forwards to the aggregation API and
    relays the upstream body (or error and status) back.
    """

    @app.get("/api/chains", response_model=None)
    def chains() -> dict[str, Any] | JSONResponse:
        try:
            return relay(upstream.get(SUPPORTED_CHAINS_PATH))
        except UpstreamUnavailable as e:
            return upstream_unreachable(e)

    @app.get("/api/tokens/{chain_id}", response_model=None)
    def tokens(chain_id: int) -> dict[str, Any] | JSONResponse:
        try:
            return relay(upstream.get(f"/swap/v6.0/{chain_id}/tokens"))
        except UpstreamUnavailable as e:
            return upstream_unreachable(e)

    @app.get("/api/quote/{chain_id}", response_model=None)
    def quote(chain_id: int, request: Request) -> dict[str, Any] | JSONResponse:
        params = _swap_params(request, ("src", "dst", "amount"))
        if isinstance(params, JSONResponse):
            return params
        try:
            return relay(upstream.get(f"/swap/v6.0/{chain_id}/quote", params=params))
        except UpstreamUnavailable as e:
            return upstream_unreachable(e)

    @app.get("/api/swap/{chain_id}", response_model=None)
    def swap(chain_id: int, request: Request) -> dict[str, Any] | JSONResponse:
        params = _swap_params(request, ("src", "dst", "amount", "from"))
        if isinstance(params, JSONResponse):
            return params
        try:
            return relay(upstream.get(f"/swap/v6.0/{chain_id}/swap", params=params))
        except UpstreamUnavailable as e:
            return upstream_unreachable(e)

    @app.get("/api/token-addresses")
    def token_addresses() -> dict[str, Any]:
        return {"success": True, "data": TOKEN_ADDRESSES}
