"""Run the Right Guard API with uvicorn.

Usage:
    rightguard-api [--host HOST] [--port PORT] [--reload] [--skip-schema]

The relational schema is created on start (missing tables only) unless
``--skip-schema`` is passed.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from rightguard.observability import configure_logging
from rightguard.settings import get_settings
from rightguard.store.sql import build_engine, create_schema

LOGGER = logging.getLogger("rightguard.cli.serve")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the Right Guard API")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    parser.add_argument("--skip-schema", action="store_true", help="Do not create missing tables before serving")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    if not args.skip_schema:
        engine = build_engine(settings=settings)
        create_schema(engine)
        LOGGER.info("Schema ready at %s", engine.url.render_as_string(hide_password=True))

    LOGGER.info("Starting Right Guard API (env=%s) on %s:%s", settings.env, args.host, args.port)
    uvicorn.run(
        "rightguard.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
