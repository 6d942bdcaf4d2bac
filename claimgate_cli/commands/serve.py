"""
CLI Serve Command

Run the HTTP API with uvicorn.

Usage:
    claimgate serve [--host 127.0.0.1] [--port 8000] [--state s.json]
"""

from __future__ import annotations

import logging
from argparse import Namespace

from claimgate_cli.common import EXIT_SUCCESS, open_engine


logger = logging.getLogger(__name__)


def serve_cmd(args: Namespace) -> int:
    import uvicorn

    from api.app import create_app

    engine = open_engine(args, require_state=False)
    logger.info(f"Serving on {args.host}:{args.port}")
    uvicorn.run(create_app(engine), host=args.host, port=args.port)
    return EXIT_SUCCESS
