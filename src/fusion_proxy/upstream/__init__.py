from __future__ import annotations

from .client import CandidateRequest, UpstreamClient, UpstreamResponse, UpstreamUnavailable

__all__ = ["CandidateRequest", "UpstreamClient", "UpstreamResponse", "UpstreamUnavailable"]
