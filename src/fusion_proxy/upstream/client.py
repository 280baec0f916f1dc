from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

import httpx

logger = logging.getLogger(__name__)


class UpstreamUnavailable(RuntimeError):
    """The aggregation API could not be reached (DNS, connect, timeout, ...)."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    data: Any
    endpoint: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class CandidateRequest:
    """One endpoint variant to try in `UpstreamClient.first_available()`."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    label: str = ""

    @property
    def endpoint(self) -> str:
        return self.label or self.path


@dataclass
class UpstreamClient:
    """HTTP client for the DEX aggregation API.

    Every request carries `Content-Type: application/json` and, when an API key
    is configured, `Authorization: Bearer <key>`.

    Non-2xx responses are returned as-is so callers can relay the status.
    Transport errors raise `UpstreamUnavailable`.
    """

    base_url: str
    api_key: str | None = None
    timeout_s: float = 15.0
    transport: httpx.BaseTransport | None = None
    _client: httpx.Client | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = self._new_http()

    def headers(self) -> dict[str, str]:
        h = {"Content-Type": "application/json"}
        if self.api_key:
            h["Authorization"] = f"Bearer {self.api_key}"
        return h

    def _new_http(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url.rstrip("/"),
            headers=self.headers(),
            timeout=self.timeout_s,
            transport=self.transport,
        )

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = self._new_http()
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        timeout_s: float | None = None,
        endpoint: str | None = None,
    ) -> UpstreamResponse:
        endpoint = endpoint or path
        # Drop unset query params rather than sending "None".
        if params is not None:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            res = self._http().request(
                method.upper(),
                path,
                params=params,
                json=json,
                timeout=timeout_s if timeout_s is not None else self.timeout_s,
            )
        except httpx.TransportError as e:
            logger.warning("upstream %s %s unreachable: %s", method.upper(), path, e)
            raise UpstreamUnavailable(endpoint, str(e) or type(e).__name__) from e

        try:
            data: Any = res.json()
        except ValueError:
            data = res.text
        if res.status_code >= 400:
            logger.warning("upstream %s %s -> %d", method.upper(), path, res.status_code)
        return UpstreamResponse(status_code=res.status_code, data=data, endpoint=endpoint)

    def get(self, path: str, *, params: dict[str, Any] | None = None, **kw: Any) -> UpstreamResponse:
        return self.request("GET", path, params=params, **kw)

    def post(self, path: str, *, json: Any = None, **kw: Any) -> UpstreamResponse:
        return self.request("POST", path, json=json, **kw)

    def first_available(
        self,
        candidates: Iterable[CandidateRequest],
        *,
        timeout_s: float | None = None,
    ) -> UpstreamResponse:
        """Try candidate endpoints in order until one does not answer 404.

        Returns the first non-404 response, or the last 404 if every candidate
        is missing. A transport failure stops the walk and propagates.
        """

        last: UpstreamResponse | None = None
        for c in candidates:
            logger.info("trying upstream endpoint %s", c.endpoint)
            last = self.request(
                c.method,
                c.path,
                params=c.params,
                json=c.json,
                timeout_s=timeout_s,
                endpoint=c.endpoint,
            )
            if last.status_code != 404:
                return last
        if last is None:
            raise ValueError("candidates must not be empty")
        return last
