from __future__ import annotations

from .fusion import mount_fusion_api
from .swap import mount_swap_api

__all__ = ["mount_fusion_api", "mount_swap_api"]
