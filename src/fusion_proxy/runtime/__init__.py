from __future__ import annotations

from .app import create_app
from .server import ProxyServer, run, serve

__all__ = ["create_app", "ProxyServer", "run", "serve"]
