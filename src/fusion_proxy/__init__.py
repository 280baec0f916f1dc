from __future__ import annotations

from .core import RandomSourceFailure, Secret, SecretNotFound, SecretRegistry
from .runtime import ProxyServer, create_app, run
from .settings import Settings
from .upstream import CandidateRequest, UpstreamClient, UpstreamResponse, UpstreamUnavailable

__all__ = [
    "run",
    "create_app",
    "ProxyServer",
    "Settings",
    "SecretRegistry",
    "Secret",
    "SecretNotFound",
    "RandomSourceFailure",
    "UpstreamClient",
    "UpstreamResponse",
    "UpstreamUnavailable",
    "CandidateRequest",
]
