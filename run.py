#!/usr/bin/env python3
"""
DeepUno - Server Startup Script

Usage:
    python run.py [--host HOST] [--port PORT] [--reload]

Defaults come from the DEEPUNO_* environment variables.
"""

import argparse
import uvicorn

from deepuno.config import Settings


def main():
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="DeepUno Server")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    args = parser.parse_args()

    uvicorn.run(
        "deepuno.server.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
