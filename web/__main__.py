"""
Entry point for running the workshop API as a module.

Usage:
    python -m web [--port 8000] [--host 127.0.0.1] [--reload]
"""

import argparse
import logging

import uvicorn

from workshop_platform.config import log_level


def main():
    parser = argparse.ArgumentParser(
        description="decision-workshop: HTTP API"
    )
    parser.add_argument(
        "--port", type=int, default=8000,
        help="Port to serve on (default: 8000)"
    )
    parser.add_argument(
        "--host", type=str, default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Enable auto-reload for development"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("\n  decision-workshop: HTTP API")
    print(f"  Serving on http://{args.host}:{args.port}/api\n")

    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level().lower(),
    )


if __name__ == "__main__":
    main()
