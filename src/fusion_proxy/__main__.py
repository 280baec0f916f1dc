from __future__ import annotations

import argparse
import logging
import os

from .runtime.server import serve
from .settings import Settings


def main() -> None:
    p = argparse.ArgumentParser(prog="fusion-proxy", description="fusion-proxy: DEX aggregation API proxy")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "5000")))
    p.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug"])
    args = p.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Fail fast on bad env before uvicorn starts.
    settings = Settings.from_env()
    serve(host=args.host, port=args.port, settings=settings, log_level=args.log_level)


if __name__ == "__main__":
    main()
