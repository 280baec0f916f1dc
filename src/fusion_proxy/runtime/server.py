from __future__ import annotations

import contextlib
import socket
import threading
import time
from dataclasses import dataclass, field

import httpx
import uvicorn

from ..settings import Settings
from .app import create_app


@dataclass
class ProxyServer:
    host: str
    port: int
    url: str
    _server: uvicorn.Server = field(repr=False)
    _thread: threading.Thread = field(repr=False)

    def is_alive(self, *, timeout_s: float = 0.2) -> bool:
        return _is_server_alive(self.url.rstrip("/"), timeout_s=timeout_s)

    def stop(self, *, timeout_s: float = 5.0) -> None:
        """Ask uvicorn to exit; the app lifespan stops the secret sweeper."""
        self._server.should_exit = True
        self._thread.join(timeout=timeout_s)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe of the local liveness endpoint."""

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            return bool(r.json().get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    settings: Settings | None = None,
    log_level: str = "info",
    access_log: bool = False,
    startup_timeout_s: float = 5.0,
) -> ProxyServer:
    """Start the proxy in a background thread and return once it answers.

    `port=0` picks a free port.
    """

    if port == 0:
        port = _find_free_port(host)

    app = create_app(settings)
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, name="fusion-proxy", daemon=True)
    thread.start()

    url = f"http://{host}:{port}/"
    srv = ProxyServer(host=host, port=port, url=url, _server=server, _thread=thread)

    deadline = time.monotonic() + startup_timeout_s
    while not server.started and thread.is_alive() and time.monotonic() < deadline:
        time.sleep(0.02)
    if not server.started:
        raise RuntimeError(f"fusion-proxy failed to start on {host}:{port}")
    return srv


def serve(
    *,
    host: str = "127.0.0.1",
    port: int = 5000,
    settings: Settings | None = None,
    log_level: str = "info",
    access_log: bool = True,
) -> None:
    """Run the proxy in the foreground until interrupted."""

    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=log_level, access_log=access_log)
