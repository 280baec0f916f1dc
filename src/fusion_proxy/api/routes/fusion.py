from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ...core.registry import SecretRegistry
from ...core.secrets import SecretNotFound
from ...upstream import CandidateRequest, UpstreamClient, UpstreamUnavailable
from ..responses import fail, relay, upstream_failure, upstream_unreachable
from ..serializers import iso_timestamp, secret_to_public_dict, utc_now_iso
from .swap import SUPPORTED_CHAINS_PATH

logger = logging.getLogger(__name__)

PROVIDER = "1inch-fusion+"
QUOTE_REQUIRED = ("fromTokenAddress", "toTokenAddress", "amount", "walletAddress")
DEFAULT_FROM_CHAIN = 1
DEFAULT_TO_CHAIN = 56
QUOTE_TIMEOUT_S = 15.0
EXECUTE_TIMEOUT_S = 20.0


def quote_candidates(order: dict[str, Any]) -> list[CandidateRequest]:
    """Endpoint variants for a cross-chain quote, most specific first.

    The last one degrades to a same-chain quote on the source chain.
    """

    from_chain = order["fromChainId"]
    return [
        CandidateRequest("POST", "/fusion/orders", json=order),
        CandidateRequest("POST", "/fusion/quoter/v1.0/quote", json=order),
        CandidateRequest(
            "GET",
            f"/swap/v6.0/{from_chain}/quote",
            params={
                "src": order["fromTokenAddress"],
                "dst": order["toTokenAddress"],
                "amount": order["amount"],
                "from": order["walletAddress"],
            },
            label=f"/swap/v6.0/{from_chain}/quote (same-chain fallback)",
        ),
    ]


def mount_fusion_api(app: FastAPI, registry: SecretRegistry, upstream: UpstreamClient) -> None:
    """Mount the Fusion+ cross-chain endpoints.

    - POST /api/fusion/quote   creates a secret and requests a quote/order with it
    - POST /api/fusion/swap    redeems a secret (raw or by hash) and submits the order
    - GET  /api/fusion/secrets/{hash}  metadata of a live secret (no raw value)
    - GET  /api/fusion/chains
    """

    @app.get("/api/fusion/chains", response_model=None)
    def fusion_chains() -> dict[str, Any] | JSONResponse:
        try:
            return relay(upstream.get(SUPPORTED_CHAINS_PATH))
        except UpstreamUnavailable as e:
            return upstream_unreachable(e, provider=PROVIDER)

    @app.post("/api/fusion/quote", response_model=None)
    def fusion_quote(body: dict) -> dict[str, Any] | JSONResponse:
        if any(not body.get(k) for k in QUOTE_REQUIRED):
            return fail(400, f"Missing required fields: {', '.join(QUOTE_REQUIRED)}")

        order: dict[str, Any] = {k: body[k] for k in QUOTE_REQUIRED}
        order["fromChainId"] = body.get("fromChainId") or DEFAULT_FROM_CHAIN
        order["toChainId"] = body.get("toChainId") or DEFAULT_TO_CHAIN

        secret = registry.generate(metadata=order)
        request_meta = {
            "fromChainId": order["fromChainId"],
            "toChainId": order["toChainId"],
            "amount": order["amount"],
        }

        try:
            res = upstream.first_available(
                quote_candidates({**order, "secret": secret.value}),
                timeout_s=QUOTE_TIMEOUT_S,
            )
        except UpstreamUnavailable as e:
            return upstream_unreachable(e, provider=PROVIDER, requestMetadata=request_meta)
        if not res.ok:
            return upstream_failure(res, provider=PROVIDER, requestMetadata=request_meta)
        logger.info("fusion quote served by %s (secret %s)", res.endpoint, secret.hash)

        return {
            "success": True,
            "data": res.data,
            "crossChain": "fusion" in res.endpoint,
            "provider": PROVIDER,
            "apiStatus": res.status_code,
            "endpointUsed": res.endpoint,
            "metadata": {
                **request_meta,
                "secretStored": True,
                "timestamp": utc_now_iso(),
                "expiresAt": iso_timestamp(registry.expires_at(secret)),
            },
            "fusionSecret": secret.value,
            "secretHash": secret.hash,
        }

    @app.post("/api/fusion/swap", response_model=None)
    def fusion_swap(body: dict) -> dict[str, Any] | JSONResponse:
        order = dict(body)
        raw = order.pop("secret", None) or None
        secret_hash = order.pop("secretHash", None) or None
        if raw is None and secret_hash is None:
            return fail(400, "Missing secret for Fusion+ order execution. Provide secret or valid secretHash.")

        try:
            secret = registry.redeem(secret=raw, secret_hash=secret_hash)
        except (SecretNotFound, ValueError) as e:
            return fail(400, str(e), provider=PROVIDER)

        try:
            res = upstream.post(
                "/fusion/orders",
                json={**order, "secret": secret.value},
                timeout_s=EXECUTE_TIMEOUT_S,
            )
        except UpstreamUnavailable as e:
            return upstream_unreachable(e, provider=PROVIDER)
        if not res.ok:
            return upstream_failure(res, provider=PROVIDER)

        return {
            "success": True,
            "data": res.data,
            "crossChain": True,
            "provider": PROVIDER,
            "message": "Fusion+ order executed with trustless protocol",
            "metadata": dict(secret.metadata),
        }

    @app.get("/api/fusion/secrets/{secret_hash}", response_model=None)
    def fusion_secret(secret_hash: str) -> dict[str, Any] | JSONResponse:
        try:
            secret = registry.get(secret_hash)
        except SecretNotFound:
            return fail(404, "Unknown or expired secret")
        except ValueError as e:
            return fail(400, str(e))
        return {"success": True, "data": secret_to_public_dict(secret, registry)}
